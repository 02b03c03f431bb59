"""Tests for the restore engine."""
import json

import pytest

from core import MalformedDocumentError, ValidationError
from services import InMemoryObjectRepository
from services.baskets import create_basket, load_basket
from services.restore import restore_json
from services.snapshots import create_for_basket


class TestRestoreJson:
    def test_applies_objects(self, db, memory_repository):
        raw = json.dumps({
            "CommandTemplate": {"plugin-check": {"command": "/usr/lib/nagios/plugins"}},
            "Command": {"check_ping": {"command": "check_ping", "imports": ["plugin-check"]}},
        })

        result = restore_json(db, raw, memory_repository)

        assert result.applied == {"CommandTemplate": 1, "Command": 1}
        assert result.object_count == 2
        assert memory_repository.list_names("command", "template") == ["plugin-check"]
        assert memory_repository.get("command", "check_ping", "object")["imports"] == ["plugin-check"]

    def test_updates_existing_objects(self, db, seeded_memory_repository):
        raw = json.dumps({"HostGroup": {"linux": {"display_name": "Penguins"}}})

        restore_json(db, raw, seeded_memory_repository)

        assert seeded_memory_repository.get("hostgroup", "linux")["display_name"] == "Penguins"

    def test_datafields_are_restored(self, db, memory_repository):
        raw = json.dumps({
            "HostTemplate": {"generic-host": {"fields": [{"datafield_id": "port"}]}},
            "Datafield": {"port": {"varname": "port"}},
        })

        result = restore_json(db, raw, memory_repository)

        assert list(result.applied) == ["Datafield", "HostTemplate"]
        assert memory_repository.list_names("datafield") == ["port"]

    def test_restores_basket_definitions(self, db, memory_repository):
        raw = json.dumps({"Basket": {"ops": {
            "basket_name": "ops",
            "owner_type": "user",
            "owner_value": "basket",
            "objects": {"HostTemplate": True},
        }}})

        restore_json(db, raw, memory_repository)

        assert load_basket(db, "ops").coverage == {"HostTemplate": True}

    def test_malformed_document(self, db, memory_repository):
        with pytest.raises(MalformedDocumentError):
            restore_json(db, '{"Command": ["check_ping"]}', memory_repository)

    def test_unknown_type_writes_nothing(self, db, memory_repository):
        raw = json.dumps({"HostGroup": {"linux": {}}, "Host": {"web1": {}}})

        with pytest.raises(ValidationError):
            restore_json(db, raw, memory_repository)

        assert memory_repository.list_names("hostgroup") == []

    def test_rejected_payload_aborts(self, db, memory_repository):
        raw = json.dumps({"Command": {
            "check_ping": {"command": "check_ping"},
            "check_http": {"object_name": "something_else"},
        }})

        with pytest.raises(ValidationError):
            restore_json(db, raw, memory_repository)


class TestRoundTrip:
    @pytest.mark.parametrize("use_sql", [True, False])
    def test_export_restore_export_is_stable(self, db, repository, use_sql):
        live = repository if use_sql else InMemoryObjectRepository()
        live.upsert("datafield", "port", {"varname": "port", "caption": "Port"})
        live.upsert("command", "plugin-check", {"command": "/usr/lib/nagios/plugins"}, "template")
        live.upsert("command", "check_ping", {"command": "check_ping", "vars": {"b": 2, "a": 1}}, "object")
        live.upsert("host", "generic-host", {"fields": [{"datafield_id": "port"}]}, "template")
        basket = create_basket(db, "ops", "user", "alice", {
            "Command": True,
            "CommandTemplate": True,
            "HostTemplate": ["generic-host"],
            "Basket": ["ops"],
        })

        first = create_for_basket(db, basket, live).json_dump
        restore_json(db, first, live)
        second = create_for_basket(db, load_basket(db, "ops"), live).json_dump

        assert second == first
