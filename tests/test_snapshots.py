"""Tests for the snapshot engine."""
import json

import pytest

from core import MalformedDocumentError, NotFoundError, ValidationError, compute_checksum
from database import BasketContent, BasketSnapshot
from services.baskets import create_basket
from services.snapshots import (
    create_for_basket,
    for_basket_from_json,
    get_json_dump,
    get_snapshot,
    list_snapshots,
    snapshot_content,
    store_snapshot,
)


class TestCreateForBasket:
    def test_empty_type_yields_empty_mapping(self, db, repository):
        basket = create_basket(db, "ops", "user", "basket", {"HostTemplate": True})

        draft = create_for_basket(db, basket, repository)

        assert json.loads(get_json_dump(draft)) == {"HostTemplate": {}}

    def test_all_objects_of_a_type(self, db, seeded_repository):
        basket = create_basket(db, "ops", "user", "alice", {"Command": True})

        content = create_for_basket(db, basket, seeded_repository).content

        assert list(content["Command"]) == ["check_http", "check_ping"]
        assert content["Command"]["check_ping"]["object_type"] == "object"
        # Templates share the class but are a different type
        assert "plugin-check" not in content["Command"]

    def test_explicit_names_skip_missing(self, db, seeded_repository):
        basket = create_basket(db, "ops", "user", "alice", {"Command": ["check_ping", "gone"]})

        content = create_for_basket(db, basket, seeded_repository).content

        assert list(content["Command"]) == ["check_ping"]

    def test_linked_datafields_are_exported(self, db, seeded_repository):
        basket = create_basket(db, "ops", "user", "alice", {"HostTemplate": True})

        content = create_for_basket(db, basket, seeded_repository).content

        assert content["Datafield"]["port"]["varname"] == "port"
        assert "generic-host" in content["HostTemplate"]

    def test_no_datafield_section_without_references(self, db, seeded_repository):
        basket = create_basket(db, "ops", "user", "alice", {"HostGroup": True})

        content = create_for_basket(db, basket, seeded_repository).content

        assert content == {"HostGroup": {"linux": {"display_name": "Linux Hosts", "object_name": "linux"}}}

    def test_non_list_fields_are_ignored(self, db, memory_repository):
        memory_repository.upsert("host", "odd-host", {"fields": 5}, "template")
        memory_repository.upsert("host", "other-host", {"fields": {"datafield_id": "port"}}, "template")
        basket = create_basket(db, "ops", "user", "alice", {"HostTemplate": True})

        content = create_for_basket(db, basket, memory_repository).content

        assert list(content) == ["HostTemplate"]
        assert content["HostTemplate"]["odd-host"]["fields"] == 5

    def test_basket_type_exports_definitions(self, db, repository):
        basket = create_basket(db, "meta", "user", "alice", {"Basket": ["meta"]})

        content = create_for_basket(db, basket, repository).content

        assert content["Basket"]["meta"] == {
            "basket_name": "meta",
            "owner_type": "user",
            "owner_value": "alice",
            "objects": {"Basket": ["meta"]},
        }

    def test_export_is_read_only(self, db, seeded_repository):
        basket = create_basket(db, "ops", "user", "alice", {"Command": True})
        before = seeded_repository.list_names("command")

        create_for_basket(db, basket, seeded_repository)

        assert seeded_repository.list_names("command") == before


class TestStoreSnapshot:
    def test_store_computes_checksum(self, db, seeded_repository):
        basket = create_basket(db, "ops", "user", "alice", {"Command": True})
        draft = create_for_basket(db, basket, seeded_repository)

        snapshot = store_snapshot(db, draft)

        assert snapshot.content_checksum == compute_checksum(draft.content)
        assert snapshot.basket_id == basket.id
        assert snapshot.ts_create > 0
        assert snapshot_content(snapshot) == draft.json_dump
        assert snapshot.content.summary == {"Command": 2}

    def test_every_store_appends(self, db, seeded_repository):
        basket = create_basket(db, "ops", "user", "alice", {"Command": True})
        draft = create_for_basket(db, basket, seeded_repository)

        first = store_snapshot(db, draft)
        second = store_snapshot(db, draft)

        assert first.id != second.id
        assert first.content_checksum == second.content_checksum
        assert db.query(BasketSnapshot).count() == 2
        # Identical content is kept once
        assert db.query(BasketContent).count() == 1

    def test_list_and_get(self, db, seeded_repository):
        basket = create_basket(db, "ops", "user", "alice", {"Command": True})
        old = store_snapshot(db, create_for_basket(db, basket, seeded_repository))
        seeded_repository.upsert("command", "check_dns", {"command": "check_dns"}, "object")
        new = store_snapshot(db, create_for_basket(db, basket, seeded_repository))

        listed = list_snapshots(db, basket)
        assert [s.id for s in listed] == [new.id, old.id]

        assert get_snapshot(db, basket, old.checksum_hex).id == old.id
        assert get_snapshot(db, basket, new.checksum_hex[:7]).id == new.id

    def test_get_missing(self, db):
        basket = create_basket(db, "ops", "user", "alice", {})
        with pytest.raises(NotFoundError):
            get_snapshot(db, basket, "abcdef0")


class TestForBasketFromJson:
    def test_registers_object_names(self, db):
        basket = create_basket(db, "ops", "user", "alice", {"Command": ["check_ping"]})
        raw = json.dumps({
            "Command": {"check_http": {"command": "check_http"}},
            "HostGroup": {"linux": {}},
            "Datafield": {"port": {"varname": "port"}},
        })

        draft = for_basket_from_json(basket, raw)

        assert basket.coverage == {"Command": ["check_http", "check_ping"], "HostGroup": ["linux"]}
        assert draft.content["Datafield"] == {"port": {"varname": "port"}}

    def test_malformed(self, db):
        basket = create_basket(db, "ops", "user", "alice", {})
        with pytest.raises(MalformedDocumentError):
            for_basket_from_json(basket, "not-json")
        assert basket.coverage == {}

    def test_unknown_type(self, db):
        basket = create_basket(db, "ops", "user", "alice", {})
        with pytest.raises(ValidationError):
            for_basket_from_json(basket, '{"Host": {"web1": {}}}')
