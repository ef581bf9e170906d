"""Static dynamics: gravity holding torques."""

from armkin.dynamics.gravity import (
    GRAVITY,
    GravityModel,
    PointMass,
    default_point_masses,
    gravitational_torque,
)

__all__ = [
    "GRAVITY",
    "GravityModel",
    "PointMass",
    "default_point_masses",
    "gravitational_torque",
]
