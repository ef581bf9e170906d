"""
Arm, solver and workspace-analysis settings.

Values live in a JSON file (data/arm_config.json next to the package, or
the path in $ARMKIN_CONFIG) layered over DEFAULTS.  One process-wide
instance is shared through `get_arm_config()`; writes go straight back to
the file.

Sections:
    arm        variant, five link lengths, length unit
    solver     IK reach/plane tolerances, joint-angle slack, pinv damping
    workspace  joint limits and sweep resolutions (degrees)
    coverage   chessboard geometry, tool orientation, worker count
"""

from __future__ import annotations

import copy
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Mapping, Optional

from armkin.kinematics.dh_params import resolve_variant
from armkin.kinematics.errors import InvalidConfiguration

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ARMKIN_CONFIG"
DEFAULT_CONFIG_FILE = Path(__file__).resolve().parent.parent.parent / "data" / "arm_config.json"

DEFAULTS: dict[str, Any] = {
    "arm": {
        "variant": "6dof",
        "link_lengths": [5.0, 30.0, 20.0, 7.0, 5.0],
        "length_unit": "cm",
    },
    "solver": {
        "reach_tolerance": 1e-9,
        "plane_tolerance": 1e-6,
        "angle_tolerance": 1e-3,
        "damping": 1e-4,
    },
    "workspace": {
        "joint_limits_deg": [
            [-180.0, 180.0],
            [-165.0, 165.0],
            [-165.0, 165.0],
            [-180.0, 180.0],
            [-90.0, 90.0],
            [-180.0, 180.0],
        ],
        "coarse_resolution_deg": 45.0,
        "fine_resolution_deg": 20.0,
    },
    "coverage": {
        "board_side_length": 40.0,
        "start_point": [-20.0, 10.0, 0.0],
        "piece_heights": [2.0, 5.0, 15.0],
        # Tool pointing straight down at the board
        "orientation_ypr_deg": [0.0, 180.0, 0.0],
        "max_workers": 4,
    },
}

# Metres per configured length unit
LENGTH_UNITS: dict[str, float] = {"m": 1.0, "cm": 0.01, "mm": 0.001}


def config_file_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    return Path(override).expanduser() if override else DEFAULT_CONFIG_FILE


def deep_merge(base: dict, overlay: Mapping) -> dict:
    """Merge overlay into base in place (nested dicts merged, rest replaced)."""
    for key, value in overlay.items():
        if isinstance(base.get(key), dict) and isinstance(value, Mapping):
            deep_merge(base[key], value)
        else:
            base[key] = copy.deepcopy(value)
    return base


def changed_values(defaults: Mapping, current: Mapping) -> dict:
    """Subset of `current` that differs from `defaults`, keeping nesting."""
    out = {}
    for key, value in current.items():
        default = defaults.get(key)
        if isinstance(value, dict) and isinstance(default, dict):
            nested = changed_values(default, value)
            if nested:
                out[key] = nested
        elif key not in defaults or value != default:
            out[key] = value
    return out


def validate_config(data: Mapping[str, Any]) -> None:
    """Reject settings the arm model or analysis tools cannot use.

    Unknown sections and keys are allowed; only the known ones are checked.
    """
    arm = data.get("arm", {})
    if "variant" in arm:
        resolve_variant(arm["variant"])
    if "link_lengths" in arm:
        links = arm["link_lengths"]
        if not isinstance(links, (list, tuple)) or len(links) != 5:
            raise InvalidConfiguration(f"arm.link_lengths needs 5 values, got {links!r}")
        if any(not isinstance(v, (int, float)) or v < 0 for v in links):
            raise InvalidConfiguration(f"arm.link_lengths must be non-negative numbers: {links!r}")
    if "length_unit" in arm and arm["length_unit"] not in LENGTH_UNITS:
        raise InvalidConfiguration(
            f"Unknown length unit {arm['length_unit']!r}, expected one of {sorted(LENGTH_UNITS)}"
        )

    for i, pair in enumerate(data.get("workspace", {}).get("joint_limits_deg", [])):
        if len(pair) != 2 or pair[0] > pair[1]:
            raise InvalidConfiguration(f"workspace.joint_limits_deg[{i}] is not [min, max]: {pair!r}")


class ArmConfig:
    """Process-wide settings object backed by a JSON file.  Thread-safe."""

    _instance: Optional[ArmConfig] = None
    _lock = threading.RLock()

    def __new__(cls) -> ArmConfig:
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._path = config_file_path()
                instance._data = instance._read_file()
                cls._instance = instance
            return cls._instance

    @property
    def path(self) -> Path:
        return self._path

    def _read_file(self) -> dict[str, Any]:
        data = copy.deepcopy(DEFAULTS)
        if not self._path.exists():
            return data
        try:
            saved = json.loads(self._path.read_text())
            if not isinstance(saved, dict):
                raise InvalidConfiguration("top level must be an object")
            validate_config(saved)
        except (OSError, json.JSONDecodeError, InvalidConfiguration) as e:
            logger.warning("Failed to load arm config from %s: %s", self._path, e)
            return data
        logger.info("Loaded arm config from %s", self._path)
        return deep_merge(data, saved)

    def _write_file(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(self._data, indent=2))
        except OSError as e:
            logger.warning("Failed to save arm config to %s: %s", self._path, e)

    def get(self, section: str, key: Optional[str] = None) -> Any:
        """Copy of one value, or of a whole section when key is None."""
        with self._lock:
            values = self._data.get(section, {})
            return copy.deepcopy(values if key is None else values.get(key))

    def get_all(self) -> dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._data)

    def set(self, section: str, key: str, value: Any) -> None:
        self.update({section: {key: value}})

    def update(self, data: Mapping[str, Any]) -> None:
        """Validate, deep-merge and save.  Nothing changes if validation fails."""
        with self._lock:
            candidate = deep_merge(copy.deepcopy(self._data), data)
            validate_config(candidate)
            self._data = candidate
            self._write_file()

    def reset(self) -> None:
        with self._lock:
            self._data = copy.deepcopy(DEFAULTS)
            self._write_file()

    def get_defaults(self) -> dict[str, Any]:
        return copy.deepcopy(DEFAULTS)

    def diff(self) -> dict[str, Any]:
        """Settings that differ from DEFAULTS."""
        with self._lock:
            return changed_values(DEFAULTS, self._data)

    def length_scale(self) -> float:
        """Metres per configured length unit."""
        return LENGTH_UNITS[self.get("arm", "length_unit")]


def get_arm_config() -> ArmConfig:
    return ArmConfig()


def reset_arm_config_singleton() -> None:
    """Forget the shared instance; the next get_arm_config() rereads the file."""
    with ArmConfig._lock:
        ArmConfig._instance = None
