"""Tests for the arm_config module."""

import json

import pytest

from armkin.config.arm_config import (
    CONFIG_ENV_VAR,
    DEFAULTS,
    ArmConfig,
    changed_values,
    config_file_path,
    deep_merge,
    get_arm_config,
    reset_arm_config_singleton,
    validate_config,
)
from armkin.kinematics.errors import InvalidConfiguration


def test_path_from_environment(isolated_config):
    assert config_file_path() == isolated_config
    assert get_arm_config().path == isolated_config


def test_default_path_without_override(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    assert config_file_path().name == "arm_config.json"
    assert config_file_path().parent.name == "data"


def test_defaults_loaded():
    cfg = get_arm_config()
    assert cfg.get("arm", "variant") == "6dof"
    assert cfg.get("arm", "link_lengths") == [5.0, 30.0, 20.0, 7.0, 5.0]
    assert cfg.get("solver", "reach_tolerance") == 1e-9
    assert cfg.get("coverage", "piece_heights") == [2.0, 5.0, 15.0]


def test_singleton():
    assert get_arm_config() is get_arm_config()
    assert ArmConfig() is get_arm_config()


def test_set_and_get(isolated_config):
    cfg = get_arm_config()
    cfg.set("arm", "variant", "5dof")
    assert cfg.get("arm", "variant") == "5dof"
    saved = json.loads(isolated_config.read_text())
    assert saved["arm"]["variant"] == "5dof"


def test_set_new_section():
    cfg = get_arm_config()
    cfg.set("notes", "owner", "lab")
    assert cfg.get("notes") == {"owner": "lab"}


def test_get_returns_copies():
    cfg = get_arm_config()
    links = cfg.get("arm", "link_lengths")
    links.append(99.0)
    assert len(cfg.get("arm", "link_lengths")) == 5
    everything = cfg.get_all()
    everything["arm"]["variant"] = "changed"
    assert cfg.get("arm", "variant") == "6dof"


def test_missing_section_or_key():
    cfg = get_arm_config()
    assert cfg.get("nope") == {}
    assert cfg.get("arm", "nope") is None


def test_update_deep_merge():
    cfg = get_arm_config()
    cfg.update({"solver": {"damping": 0.01}})
    assert cfg.get("solver", "damping") == 0.01
    # Other solver values preserved
    assert cfg.get("solver", "plane_tolerance") == 1e-6


def test_reset():
    cfg = get_arm_config()
    cfg.set("arm", "variant", "5dof")
    cfg.reset()
    assert cfg.get("arm", "variant") == "6dof"


def test_diff():
    cfg = get_arm_config()
    assert cfg.diff() == {}
    cfg.set("workspace", "coarse_resolution_deg", 30.0)
    assert cfg.diff() == {"workspace": {"coarse_resolution_deg": 30.0}}


def test_get_defaults_is_a_copy():
    cfg = get_arm_config()
    defaults = cfg.get_defaults()
    defaults["arm"]["variant"] = "mutated"
    assert DEFAULTS["arm"]["variant"] == "6dof"


def test_loads_saved_file(isolated_config):
    isolated_config.write_text(json.dumps({"arm": {"link_lengths": [4, 25, 18, 6, 4]}}))
    reset_arm_config_singleton()
    cfg = get_arm_config()
    assert cfg.get("arm", "link_lengths") == [4, 25, 18, 6, 4]
    # Unset keys still come from defaults
    assert cfg.get("arm", "variant") == "6dof"


def test_corrupt_file_falls_back_to_defaults(isolated_config, caplog):
    isolated_config.write_text("{not json")
    reset_arm_config_singleton()
    cfg = get_arm_config()
    assert cfg.get("arm", "variant") == "6dof"
    assert any("Failed to load arm config" in r.getMessage() for r in caplog.records)


def test_length_scale():
    cfg = get_arm_config()
    assert cfg.length_scale() == 0.01
    cfg.set("arm", "length_unit", "mm")
    assert cfg.length_scale() == 0.001


class TestValidation:
    def test_unknown_length_unit_rejected(self):
        cfg = get_arm_config()
        with pytest.raises(InvalidConfiguration, match="Unknown length unit"):
            cfg.set("arm", "length_unit", "furlong")
        assert cfg.get("arm", "length_unit") == "cm"

    def test_bad_variant_rejected(self):
        with pytest.raises(InvalidConfiguration):
            get_arm_config().set("arm", "variant", "7dof")

    @pytest.mark.parametrize("links", [[5, 30, 20, 7], [5, 30, -20, 7, 5], "5,30,20,7,5"])
    def test_bad_link_lengths_rejected(self, links):
        with pytest.raises(InvalidConfiguration):
            get_arm_config().set("arm", "link_lengths", links)

    def test_inverted_joint_limit_rejected(self):
        with pytest.raises(InvalidConfiguration, match="joint_limits_deg"):
            validate_config({"workspace": {"joint_limits_deg": [[-90, 90], [10, -10]]}})

    def test_failed_update_leaves_file_untouched(self, isolated_config):
        cfg = get_arm_config()
        cfg.set("arm", "variant", "5dof")
        with pytest.raises(InvalidConfiguration):
            cfg.update({"arm": {"variant": "6dof", "length_unit": "yard"}})
        assert cfg.get("arm", "variant") == "5dof"
        assert json.loads(isolated_config.read_text())["arm"]["variant"] == "5dof"

    def test_invalid_saved_file_ignored(self, isolated_config, caplog):
        isolated_config.write_text(json.dumps({"arm": {"link_lengths": [1, 2]}}))
        reset_arm_config_singleton()
        cfg = get_arm_config()
        assert cfg.get("arm", "link_lengths") == [5.0, 30.0, 20.0, 7.0, 5.0]
        assert any("Failed to load arm config" in r.getMessage() for r in caplog.records)


def test_deep_merge_and_changed_values():
    base = {"a": {"x": 1, "y": 2}, "b": 3}
    deep_merge(base, {"a": {"y": 5}, "c": 4})
    assert base == {"a": {"x": 1, "y": 5}, "b": 3, "c": 4}
    assert changed_values({"a": {"x": 1, "y": 2}, "b": 3}, base) == {"a": {"y": 5}, "c": 4}
