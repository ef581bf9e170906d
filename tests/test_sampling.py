"""Tests for joint limits and workspace sweeps."""

import math

import numpy as np
import pytest

from armkin.kinematics.errors import InvalidConfiguration
from armkin.workspace.sampling import (
    DEFAULT_JOINT_LIMITS_DEG,
    JointLimits,
    joint_grid,
    sweep_positions,
    workspace_layers,
)


class TestJointLimits:
    def test_default(self):
        limits = JointLimits.default()
        assert len(limits) == 6
        assert limits.upper[1] == pytest.approx(math.radians(165))
        assert limits.lower[4] == pytest.approx(math.radians(-90))
        assert len(JointLimits.default(5)) == 5

    def test_from_degrees(self):
        limits = JointLimits.from_degrees([(-90, 90), (0, 45)])
        assert limits.lower == pytest.approx((-math.pi / 2, 0.0))
        assert limits.upper == pytest.approx((math.pi / 2, math.pi / 4))

    def test_contains(self):
        limits = JointLimits.from_degrees(DEFAULT_JOINT_LIMITS_DEG)
        assert limits.contains(np.zeros(6))
        assert not limits.contains([0, 0, 0, 0, math.radians(100), 0])
        assert limits.contains([0, 0, 0, 0, math.pi / 2 + 1e-4, 0], tol=1e-3)

    def test_violations(self):
        limits = JointLimits.from_degrees([(-10, 10), (-10, 10)])
        out = limits.violations([math.radians(20), math.radians(-20)])
        assert len(out) == 2
        assert out[0].startswith("joint 0")
        assert "< min" in out[1]

    def test_violations_wrong_size(self):
        limits = JointLimits.default()
        assert limits.violations(np.zeros(5))

    def test_non_finite_angle(self):
        assert not JointLimits.default().contains([0, math.nan, 0, 0, 0, 0])

    def test_inverted_range(self):
        with pytest.raises(InvalidConfiguration):
            JointLimits(lower=(1.0,), upper=(0.0,))

    def test_mismatched_lengths(self):
        with pytest.raises(InvalidConfiguration):
            JointLimits(lower=(0.0, 0.0), upper=(1.0,))

    def test_for_joints_too_many(self):
        with pytest.raises(InvalidConfiguration):
            JointLimits.default().for_joints(7)


class TestJointGrid:
    def test_includes_endpoint(self):
        grid = joint_grid(-math.pi, math.pi, math.pi / 2)
        assert len(grid) == 5
        assert grid[-1] == pytest.approx(math.pi)

    def test_partial_last_step(self):
        np.testing.assert_allclose(joint_grid(0.0, 1.0, 0.3), [0.0, 0.3, 0.6, 0.9])

    def test_bad_step(self):
        with pytest.raises(ValueError):
            joint_grid(0.0, 1.0, 0.0)


class TestSweepPositions:
    def test_base_only_sweep_stays_on_axis(self, arm6):
        pts = sweep_positions(arm6, {0: math.pi / 2})
        assert pts.shape == (5, 3)
        np.testing.assert_allclose(pts, np.tile([0, 0, 67], (5, 1)), atol=1e-9)

    def test_shoulder_sweep_stays_on_sphere(self, arm6):
        pts = sweep_positions(arm6, {1: math.radians(30)})
        assert len(pts) == 12  # -165..165 in 30 degree steps
        distances = np.linalg.norm(pts - [0, 0, 5], axis=1)
        np.testing.assert_allclose(distances, 62.0, atol=1e-9)

    def test_base_angles(self, arm6):
        base = [0, math.pi / 2, 0, 0, 0, 0]
        pts = sweep_positions(arm6, {0: math.pi / 2}, base_angles=base)
        np.testing.assert_allclose(pts[2], [62, 0, 5], atol=1e-9)  # base yaw 0

    def test_custom_limits(self, arm5):
        limits = JointLimits.from_degrees([(0, 90)] * 5)
        pts = sweep_positions(arm5, {1: math.pi / 4, 2: math.pi / 4}, limits)
        assert pts.shape == (9, 3)

    def test_invalid_joint(self, arm5):
        with pytest.raises(InvalidConfiguration):
            sweep_positions(arm5, {5: 0.1})


class TestWorkspaceLayers:
    def test_layer_sizes(self, arm6):
        step = math.pi / 2
        layers = workspace_layers(arm6, step, step)
        assert set(layers) == {"shoulder", "arm", "wrist"}
        assert len(layers["shoulder"]) == 5 * 4
        assert len(layers["arm"]) == 5 * 4 * 4
        assert len(layers["wrist"]) == 5 * 4 * 4 * 5 * 3

    def test_points_within_reach(self, arm6):
        layers = workspace_layers(arm6, math.pi / 2, math.pi / 2)
        for pts in layers.values():
            distances = np.linalg.norm(pts - [0, 0, 5], axis=1)
            assert np.all(distances <= arm6.max_reach + 1e-9)
