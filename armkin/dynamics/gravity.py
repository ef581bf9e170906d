"""
Static gravity torques for DH arms.

Each lumped mass contributes J_m^T · m · g to the joint torques, where J_m
is the linear-velocity Jacobian of the mass position.  Only the joints that
actually move a mass get a non-zero column: a mass attached to the forearm
is not affected by the wrist joints that come after it.

No inertial or Coriolis terms are modelled, so the result only describes
a stationary arm.  The motors must supply the negative of it to hold pose.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from armkin.kinematics.arm import ArmModel
from armkin.kinematics.dh_params import ArmVariant, DHTable, resolve_variant
from armkin.kinematics.errors import InvalidConfiguration
from armkin.kinematics.forward import frame_transforms

logger = logging.getLogger(__name__)

# Gravity vector (pointing down in base frame)
GRAVITY = np.array([0.0, 0.0, -9.81])

MIDPOINT = "midpoint"
ORIGIN = "origin"


@dataclass(frozen=True)
class PointMass:
    """A lumped mass riding on the arm."""

    name: str
    mass: float  # kg
    frame: int  # DH frame the mass belongs to (1-based, last = end effector)
    driven_by: int  # last joint (1-based) whose motion moves the mass
    location: str = MIDPOINT  # midway between frames frame-1 and frame, or at frame's origin


# Masses of the printed 6-DOF arm (kg): links, wrist motors and a chess piece.
# Shoulder and elbow motors sit in the base behind a parallel linkage and do
# not load the joints.
_SIX_DOF_MASSES: list[PointMass] = [
    PointMass("link1", 0.01416, frame=1, driven_by=1),
    PointMass("link2", 0.08496, frame=3, driven_by=2),
    PointMass("link3", 0.05664, frame=4, driven_by=3),
    PointMass("link4", 0.019824, frame=5, driven_by=4),
    PointMass("link5", 0.01416, frame=6, driven_by=5),
    PointMass("motor4", 0.055, frame=4, driven_by=4, location=ORIGIN),
    PointMass("motor5", 0.0348, frame=5, driven_by=5, location=ORIGIN),
    PointMass("motor6", 0.0348, frame=6, driven_by=5),
    PointMass("payload", 0.003, frame=7, driven_by=5, location=ORIGIN),
]

_FIVE_DOF_MASSES: list[PointMass] = [
    PointMass("link1", 0.01416, frame=1, driven_by=1),
    PointMass("link2", 0.08496, frame=3, driven_by=2),
    PointMass("link3", 0.05664, frame=4, driven_by=3),
    PointMass("link4", 0.019824, frame=5, driven_by=4),
    PointMass("tool", 0.01416, frame=6, driven_by=5),
    PointMass("payload", 0.003, frame=6, driven_by=5, location=ORIGIN),
]


def default_point_masses(variant: ArmVariant | str = ArmVariant.SIX_DOF) -> list[PointMass]:
    """Mass layout of the reference arm for a variant."""
    if resolve_variant(variant) is ArmVariant.SIX_DOF:
        return list(_SIX_DOF_MASSES)
    return list(_FIVE_DOF_MASSES)


def _validate_mass(pm: PointMass, table: DHTable) -> None:
    if not 1 <= pm.frame <= table.row_count:
        raise InvalidConfiguration(
            f"Mass {pm.name!r} references frame {pm.frame}, table has frames 1..{table.row_count}"
        )
    if not 1 <= pm.driven_by <= table.joint_count:
        raise InvalidConfiguration(
            f"Mass {pm.name!r} driven_by={pm.driven_by} outside joints 1..{table.joint_count}"
        )
    if pm.location not in (MIDPOINT, ORIGIN):
        raise InvalidConfiguration(f"Mass {pm.name!r} has unknown location {pm.location!r}")
    if pm.mass < 0.0:
        raise InvalidConfiguration(f"Mass {pm.name!r} is negative ({pm.mass})")


def mass_position(transforms: Sequence[np.ndarray], pm: PointMass) -> np.ndarray:
    """Position of a point mass given the cumulative frame transforms."""
    p = transforms[pm.frame][:3, 3]
    if pm.location == ORIGIN:
        return p.copy()
    return (transforms[pm.frame - 1][:3, 3] + p) / 2.0


def mass_jacobian(
    transforms: Sequence[np.ndarray], position: np.ndarray, driven_by: int, n_joints: int
) -> np.ndarray:
    """3xN linear-velocity Jacobian of a point at `position`.

    Columns for joints after `driven_by` are zero.
    """
    Jv = np.zeros((3, n_joints))
    for i in range(min(driven_by, n_joints)):
        T_i = transforms[i + 1]
        Jv[:, i] = np.cross(T_i[:3, 2], position - T_i[:3, 3])
    return Jv


def gravitational_torque(
    table: DHTable,
    masses: Sequence[PointMass],
    gravity: Optional[np.ndarray] = None,
    length_scale: float = 1.0,
) -> np.ndarray:
    """Torque gravity exerts on each joint (the motors must supply the negative).

    Args:
        table: DH table at the configuration of interest.
        masses: Lumped masses on the arm.
        gravity: Gravity vector in the base frame (m/s^2).
        length_scale: Metres per DH length unit (0.01 for centimetres).

    Returns:
        (N,) torques in N·m when lengths are scaled to metres.  Positive
        values mean gravity pushes the joint in its positive direction.
    """
    g = GRAVITY if gravity is None else np.asarray(gravity, dtype=float)
    transforms = frame_transforms(table)
    n_joints = table.joint_count

    tau = np.zeros(n_joints)
    for pm in masses:
        _validate_mass(pm, table)
        p = mass_position(transforms, pm)
        Jv = mass_jacobian(transforms, p, pm.driven_by, n_joints)
        tau += Jv.T @ (pm.mass * g)
    return tau * length_scale


class GravityModel:
    """Gravity torques for one arm.

    Holds the arm, its mass layout and the unit conversion so callers only
    pass joint angles.
    """

    def __init__(
        self,
        arm: ArmModel,
        masses: Optional[Sequence[PointMass]] = None,
        gravity: Optional[np.ndarray] = None,
        length_scale: float = 0.01,
    ):
        self.arm = arm
        self.masses = list(masses) if masses is not None else default_point_masses(arm.variant)
        self.gravity = np.asarray(gravity, dtype=float) if gravity is not None else GRAVITY.copy()
        self.length_scale = length_scale

        # Fail early on a layout that does not fit the arm
        zero_table = arm.dh_table(np.zeros(arm.n_joints))
        for pm in self.masses:
            _validate_mass(pm, zero_table)

    @property
    def total_mass(self) -> float:
        return float(sum(pm.mass for pm in self.masses))

    def compute_gravity_torques(self, joint_angles: Sequence[float]) -> np.ndarray:
        """Gravity torque on each joint (N·m)."""
        table = self.arm.dh_table(joint_angles)
        return gravitational_torque(table, self.masses, self.gravity, self.length_scale)

    def peak_torques(self, configurations: Sequence[Sequence[float]]) -> np.ndarray:
        """Largest absolute torque per joint over a set of configurations."""
        if len(configurations) == 0:
            return np.zeros(self.arm.n_joints)
        torques = np.array([self.compute_gravity_torques(q) for q in configurations])
        peak = np.max(np.abs(torques), axis=0)
        logger.debug("Peak gravity torques over %d configs: %s", len(configurations), peak)
        return peak
