"""Tests for the activation list and enablement resolution."""

import json

import pytest

from common.errors import InvalidModList
from resolution.enablement import load_mod_list, resolve_enablement
from versioning.models import EnabledState
from mod_fixtures import write_mod_list


class TestLoadModList:
    """mod-list.json decoding."""

    def test_missing_file_is_empty_record(self, mods_dir):
        assert load_mod_list(str(mods_dir / "mod-list.json")) == {}

    def test_valid(self, mods_dir):
        path = write_mod_list(mods_dir, {"base": True, "alpha": False, "beta": True})
        assert load_mod_list(path) == {"base": True, "alpha": False, "beta": True}

    def test_last_duplicate_wins(self, mods_dir):
        path = mods_dir / "mod-list.json"
        doc = {"mods": [{"name": "alpha", "enabled": True}, {"name": "alpha", "enabled": False}]}
        path.write_text(json.dumps(doc), encoding="utf-8")
        assert load_mod_list(str(path)) == {"alpha": False}

    def test_invalid_json(self, mods_dir):
        path = mods_dir / "mod-list.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(InvalidModList):
            load_mod_list(str(path))

    def test_schema_violation(self, mods_dir):
        path = mods_dir / "mod-list.json"
        path.write_text(json.dumps({"mods": [{"name": "alpha"}]}), encoding="utf-8")
        with pytest.raises(InvalidModList):
            load_mod_list(str(path))


class TestResolveEnablement:
    """Merge of discovered names with the activation record."""

    def test_default_enabled(self):
        states = resolve_enablement(["alpha", "beta"], {})
        assert states == {
            "base": EnabledState.ENABLED,
            "alpha": EnabledState.ENABLED,
            "beta": EnabledState.ENABLED,
        }

    def test_record_disables(self):
        states = resolve_enablement(["alpha", "beta"], {"alpha": False, "beta": True})
        assert states["alpha"] is EnabledState.DISABLED
        assert states["beta"] is EnabledState.ENABLED

    def test_base_always_enabled_and_first(self):
        states = resolve_enablement(["zeta"], {"base": False})
        assert list(states)[0] == "base"
        assert states["base"] is EnabledState.ENABLED

    def test_undiscovered_record_entries_dropped(self):
        states = resolve_enablement(["alpha"], {"ghost": True, "alpha": True})
        assert "ghost" not in states

    def test_empty_discovery(self):
        assert resolve_enablement([], {}) == {"base": EnabledState.ENABLED}
