"""Tests for static gravity torques."""

import math

import numpy as np
import pytest

from armkin.dynamics.gravity import (
    GRAVITY,
    ORIGIN,
    GravityModel,
    PointMass,
    default_point_masses,
    gravitational_torque,
    mass_jacobian,
    mass_position,
)
from armkin.kinematics.dh_params import build_dh_table
from armkin.kinematics.errors import InvalidConfiguration
from armkin.kinematics.forward import frame_transforms

LINKS = (5.0, 30.0, 20.0, 7.0, 5.0)
SHOULDER_FORWARD = np.array([0.0, math.pi / 2, 0.0, 0.0, 0.0, 0.0])
TIP_MASS = PointMass("tip", 1.0, frame=7, driven_by=6, location=ORIGIN)


class TestMassGeometry:
    def test_midpoint_position(self):
        transforms = frame_transforms(build_dh_table(LINKS, np.zeros(6)))
        link2 = PointMass("link2", 0.1, frame=3, driven_by=2)
        np.testing.assert_allclose(mass_position(transforms, link2), [0, 0, 20], atol=1e-12)

    def test_origin_position(self):
        transforms = frame_transforms(build_dh_table(LINKS, np.zeros(6)))
        np.testing.assert_allclose(mass_position(transforms, TIP_MASS), [0, 0, 67], atol=1e-12)

    def test_columns_after_driving_joint_are_zero(self):
        transforms = frame_transforms(build_dh_table(LINKS, [0.3, 0.5, 0.4, 0.2, 0.7, 0.1]))
        p = transforms[4][:3, 3]
        Jv = mass_jacobian(transforms, p, driven_by=2, n_joints=6)
        assert Jv.shape == (3, 6)
        np.testing.assert_array_equal(Jv[:, 2:], 0.0)
        assert np.linalg.norm(Jv[:, 1]) > 0


class TestGravitationalTorque:
    def test_vertical_arm_has_no_torque(self):
        table = build_dh_table(LINKS, np.zeros(6))
        tau = gravitational_torque(table, default_point_masses(), length_scale=0.01)
        np.testing.assert_allclose(tau, np.zeros(6), atol=1e-12)

    def test_single_tip_mass(self):
        """1 kg at the tip of the horizontal arm: torque = m * g * lever arm."""
        table = build_dh_table(LINKS, SHOULDER_FORWARD)
        tau = gravitational_torque(table, [TIP_MASS], length_scale=0.01)
        expected = 9.81 * np.array([0.0, 0.62, 0.32, 0.0, 0.12, 0.0])
        np.testing.assert_allclose(tau, expected, atol=1e-9)

    def test_base_yaw_never_loaded(self, rng):
        for _ in range(10):
            table = build_dh_table(LINKS, rng.uniform(-math.pi, math.pi, 6))
            tau = gravitational_torque(table, default_point_masses())
            assert abs(tau[0]) < 1e-9

    def test_length_scale_is_linear(self):
        table = build_dh_table(LINKS, SHOULDER_FORWARD)
        masses = default_point_masses()
        tau_cm = gravitational_torque(table, masses, length_scale=0.01)
        tau_raw = gravitational_torque(table, masses)
        np.testing.assert_allclose(tau_raw, 100 * tau_cm)

    def test_gravity_direction(self):
        table = build_dh_table(LINKS, SHOULDER_FORWARD)
        down = gravitational_torque(table, [TIP_MASS])
        up = gravitational_torque(table, [TIP_MASS], gravity=-GRAVITY)
        np.testing.assert_allclose(up, -down)

    def test_shoulder_carries_most_load(self):
        table = build_dh_table(LINKS, SHOULDER_FORWARD)
        tau = gravitational_torque(table, default_point_masses(), length_scale=0.01)
        assert tau[1] > 0
        assert abs(tau[1]) == np.max(np.abs(tau))

    @pytest.mark.parametrize("bad", [
        PointMass("far", 1.0, frame=8, driven_by=1),
        PointMass("zero", 1.0, frame=0, driven_by=1),
        PointMass("extra", 1.0, frame=3, driven_by=7),
        PointMass("negative", -1.0, frame=3, driven_by=2),
        PointMass("where", 1.0, frame=3, driven_by=2, location="top"),
    ])
    def test_invalid_masses(self, bad):
        table = build_dh_table(LINKS, np.zeros(6))
        with pytest.raises(InvalidConfiguration):
            gravitational_torque(table, [bad])


class TestGravityModel:
    def test_default_layout(self, arm6):
        model = GravityModel(arm6)
        assert len(model.masses) == 9
        assert model.total_mass == pytest.approx(0.317344)

    def test_five_dof_layout_fits(self, arm5):
        model = GravityModel(arm5)
        tau = model.compute_gravity_torques([0.0, math.pi / 2, 0.0, 0.0, 0.0])
        assert tau.shape == (5,)
        assert tau[1] > 0

    def test_layout_must_fit_arm(self, arm5):
        with pytest.raises(InvalidConfiguration):
            GravityModel(arm5, masses=[TIP_MASS])

    def test_compute_matches_function(self, arm6):
        model = GravityModel(arm6, masses=[TIP_MASS])
        np.testing.assert_allclose(
            model.compute_gravity_torques(SHOULDER_FORWARD),
            9.81 * np.array([0.0, 0.62, 0.32, 0.0, 0.12, 0.0]),
            atol=1e-9,
        )

    def test_peak_torques(self, arm6):
        model = GravityModel(arm6, masses=[TIP_MASS])
        peak = model.peak_torques([np.zeros(6), SHOULDER_FORWARD, -SHOULDER_FORWARD])
        np.testing.assert_allclose(peak[1], 9.81 * 0.62, atol=1e-9)

    def test_peak_torques_empty(self, arm6):
        np.testing.assert_array_equal(GravityModel(arm6).peak_torques([]), np.zeros(6))

    def test_default_masses_are_copies(self):
        masses = default_point_masses("6dof")
        masses.clear()
        assert len(default_point_masses("6dof")) == 9
