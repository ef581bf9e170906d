"""Tests for DH table construction."""

import dataclasses
import math

import numpy as np
import pytest

from armkin.kinematics.dh_params import (
    FIVE_DOF_TOPOLOGY,
    HALF_PI,
    SIX_DOF_TOPOLOGY,
    ArmVariant,
    DHRow,
    DHTable,
    build_dh_table,
    get_topology,
    resolve_variant,
)
from armkin.kinematics.errors import InvalidConfiguration, KinematicsError

LINKS = (5.0, 30.0, 20.0, 7.0, 5.0)


class TestTopologies:
    def test_six_dof_shape(self):
        assert SIX_DOF_TOPOLOGY.joint_count == 6
        assert SIX_DOF_TOPOLOGY.link_count == 5
        assert len(SIX_DOF_TOPOLOGY.rows) == 7

    def test_five_dof_shape(self):
        assert FIVE_DOF_TOPOLOGY.joint_count == 5
        assert FIVE_DOF_TOPOLOGY.link_count == 5
        assert len(FIVE_DOF_TOPOLOGY.rows) == 6

    @pytest.mark.parametrize("topology", [SIX_DOF_TOPOLOGY, FIVE_DOF_TOPOLOGY])
    def test_rows_map_to_joints_in_order(self, topology):
        joints = [row.joint for row in topology.rows]
        assert joints[:-1] == list(range(topology.joint_count))
        assert joints[-1] is None  # tool row

    def test_wrist_offset(self):
        assert SIX_DOF_TOPOLOGY.wrist_offset(LINKS) == 12.0
        assert FIVE_DOF_TOPOLOGY.wrist_offset(LINKS) == 12.0

    def test_get_topology_accepts_strings(self):
        assert get_topology("5dof") is FIVE_DOF_TOPOLOGY
        assert get_topology("6DOF") is SIX_DOF_TOPOLOGY
        assert get_topology(ArmVariant.SIX_DOF) is SIX_DOF_TOPOLOGY

    def test_unknown_variant(self):
        with pytest.raises(InvalidConfiguration, match="Unknown arm variant"):
            resolve_variant("7dof")


class TestBuildDHTable:
    def test_six_dof_rows(self):
        q = [0.1, 0.2, 0.3, 0.4, 0.5, 0.6]
        table = build_dh_table(LINKS, q, ArmVariant.SIX_DOF)
        expected = np.array([
            [0.0, 0.0, 5.0, 0.1],
            [0.0, -HALF_PI, 0.0, 0.2 - HALF_PI],
            [30.0, 0.0, 0.0, 0.3 + HALF_PI],
            [0.0, HALF_PI, 20.0, 0.4],
            [0.0, -HALF_PI, 0.0, 0.5],
            [0.0, HALF_PI, 7.0, 0.6],
            [0.0, 0.0, 5.0, 0.0],
        ])
        np.testing.assert_allclose(table.as_array(), expected)
        assert table.variant is ArmVariant.SIX_DOF

    def test_five_dof_rows(self):
        q = [0.1, 0.2, 0.3, 0.4, 0.5]
        table = build_dh_table(LINKS, q, "5dof")
        expected = np.array([
            [0.0, 0.0, 5.0, 0.1],
            [0.0, -HALF_PI, 0.0, 0.2 - HALF_PI],
            [30.0, 0.0, 0.0, 0.3],
            [20.0, 0.0, 0.0, 0.4 + HALF_PI],
            [0.0, HALF_PI, 7.0, 0.5],
            [0.0, 0.0, 5.0, 0.0],
        ])
        np.testing.assert_allclose(table.as_array(), expected)

    def test_counts(self):
        table = build_dh_table(LINKS, np.zeros(6))
        assert table.row_count == 7
        assert table.joint_count == 6
        assert len(table) == 7
        assert isinstance(table[0], DHRow)

    def test_last_row_has_no_joint_angle(self):
        q = np.full(6, 1.0)
        table = build_dh_table(LINKS, q)
        assert table[-1].theta == 0.0

    def test_wrong_link_count(self):
        with pytest.raises(InvalidConfiguration, match="5 link lengths"):
            build_dh_table(LINKS[:4], np.zeros(6))

    def test_wrong_joint_count(self):
        with pytest.raises(InvalidConfiguration, match="6 joint angles"):
            build_dh_table(LINKS, np.zeros(5), ArmVariant.SIX_DOF)
        with pytest.raises(InvalidConfiguration, match="5 joint angles"):
            build_dh_table(LINKS, np.zeros(6), ArmVariant.FIVE_DOF)

    def test_non_finite_values(self):
        with pytest.raises(InvalidConfiguration):
            build_dh_table((5.0, math.nan, 20.0, 7.0, 5.0), np.zeros(6))
        with pytest.raises(InvalidConfiguration):
            build_dh_table(LINKS, [0, 0, math.inf, 0, 0, 0])

    def test_negative_link(self):
        with pytest.raises(InvalidConfiguration, match="non-negative"):
            build_dh_table((5.0, -30.0, 20.0, 7.0, 5.0), np.zeros(6))

    def test_invalid_configuration_is_value_error(self):
        with pytest.raises(ValueError):
            build_dh_table(LINKS, np.zeros(3))
        assert issubclass(InvalidConfiguration, KinematicsError)


class TestDHTable:
    def test_rows_are_frozen(self):
        table = build_dh_table(LINKS, np.zeros(6))
        with pytest.raises(dataclasses.FrozenInstanceError):
            table[0].a = 99.0
        with pytest.raises(dataclasses.FrozenInstanceError):
            table.rows = ()

    def test_array_round_trip(self):
        table = build_dh_table(LINKS, [0.3, -0.2, 0.1, 0.0, 0.5, -0.4])
        rebuilt = DHTable.from_array(table.as_array(), table.variant)
        assert rebuilt == table

    def test_from_array_rejects_bad_shape(self):
        with pytest.raises(InvalidConfiguration):
            DHTable.from_array(np.zeros((3, 3)))
        with pytest.raises(InvalidConfiguration):
            DHTable.from_array(np.zeros((1, 4)))
