"""
Shared test fixtures for the armkin test suite.

Every test gets its own config file under tmp_path (via $ARMKIN_CONFIG) and
a fresh config singleton, so nothing reads or writes data/arm_config.json.
"""

import numpy as np
import pytest

from armkin.config.arm_config import CONFIG_ENV_VAR, reset_arm_config_singleton
from armkin.kinematics.arm import ArmModel
from armkin.kinematics.dh_params import ArmVariant

DEFAULT_LINKS = (5.0, 30.0, 20.0, 7.0, 5.0)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config singleton at a throwaway file."""
    path = tmp_path / "arm_config.json"
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    reset_arm_config_singleton()
    yield path
    reset_arm_config_singleton()


@pytest.fixture
def link_lengths():
    return DEFAULT_LINKS


@pytest.fixture
def arm6():
    return ArmModel(link_lengths=DEFAULT_LINKS, variant=ArmVariant.SIX_DOF)


@pytest.fixture
def arm5():
    return ArmModel(link_lengths=DEFAULT_LINKS, variant=ArmVariant.FIVE_DOF)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
