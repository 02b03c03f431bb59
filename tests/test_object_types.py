"""Tests for the object type resolution table."""
import pytest

from core import (
    BASKET,
    DATAFIELD,
    DEFAULT_BASKET_COVERAGE,
    OBJECT_TYPES,
    PURGE_ELIGIBLE_TYPES,
    IneligibleTypeError,
    ObjectClass,
    ValidationError,
    assert_types_eligible_for_purge,
    assert_valid_coverage_type,
    is_known_type,
    resolve_type,
    restore_order,
)


class TestResolveType:
    def test_variants_share_a_class(self):
        assert resolve_type("Command") == ObjectClass("command", "object")
        assert resolve_type("CommandTemplate") == ObjectClass("command", "template")
        assert resolve_type("ExternalCommand") == ObjectClass("command", "external_object")

    def test_type_without_filter(self):
        assert resolve_type("HostGroup").type_filter is None

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            resolve_type("Host")
        assert not is_known_type("Host")

    def test_default_coverage_only_uses_known_types(self):
        for type_name in DEFAULT_BASKET_COVERAGE:
            assert is_known_type(type_name)
        assert DATAFIELD not in DEFAULT_BASKET_COVERAGE


class TestCoverageTypes:
    def test_datafield_is_not_a_coverage_type(self):
        with pytest.raises(ValidationError):
            assert_valid_coverage_type(DATAFIELD)

    def test_known_type_is_accepted(self):
        assert_valid_coverage_type("ServiceSet")


class TestRestoreOrder:
    def test_datafields_come_first(self):
        assert restore_order(["Basket", "Command", "Datafield"]) == ["Datafield", "Command", "Basket"]

    def test_templates_before_objects(self):
        assert restore_order(["User", "UserTemplate"]) == ["UserTemplate", "User"]

    def test_full_table_order(self):
        assert restore_order(reversed(list(OBJECT_TYPES))) == list(OBJECT_TYPES)

    def test_unknown_type_fails(self):
        with pytest.raises(ValidationError):
            restore_order(["Command", "Nope"])


class TestPurgeEligibility:
    def test_every_type_but_datafield_and_basket(self):
        assert set(PURGE_ELIGIBLE_TYPES) == set(OBJECT_TYPES) - {DATAFIELD, BASKET}

    def test_valid_types_pass(self):
        assert_types_eligible_for_purge(["Command", "HostTemplate"])

    def test_reports_all_invalid_types(self):
        with pytest.raises(IneligibleTypeError) as exc_info:
            assert_types_eligible_for_purge(["Command", "Bogus", "Basket"])
        assert exc_info.value.types == ["Bogus", "Basket"]
