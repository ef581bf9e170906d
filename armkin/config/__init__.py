"""Configuration for the arm model and analysis tools."""

from armkin.config.arm_config import (
    ArmConfig,
    DEFAULTS,
    get_arm_config,
    reset_arm_config_singleton,
    validate_config,
)

__all__ = [
    "ArmConfig",
    "DEFAULTS",
    "get_arm_config",
    "reset_arm_config_singleton",
    "validate_config",
]
