"""
Closed-form inverse kinematics for the 5-DOF and 6-DOF arms.

The solver decouples position from orientation at the wrist centre:

  1. Offset the target backwards along the tool z axis by the wrist-to-tool
     distance to get the wrist centre w.
  2. theta1 points the arm plane at w.
  3. theta2 / theta3 solve the planar shoulder-elbow pair (law of cosines).
  4. The wrist joints absorb the rotation left over after joints 1-3.

Only one elbow branch is returned by default: theta3 = +acos(...).  The
mirrored branch is available through ElbowBranch.UP or solve_all_branches().
"""

from __future__ import annotations

import enum
import logging
import math
from typing import List, Sequence, Union

import numpy as np

from armkin.kinematics.dh_params import (
    ArmTopology,
    ArmVariant,
    get_topology,
    validate_link_lengths,
)
from armkin.kinematics.errors import InvalidConfiguration, Unreachable
from armkin.kinematics.orientation import SNAP_TOLERANCE, ypr_to_matrix

logger = logging.getLogger(__name__)

# Rounding slack allowed on acos/asin arguments before a target is declared
# outside the workspace.  Arguments inside the slack are clipped to ±1.
REACH_TOLERANCE = 1e-9
# Largest out-of-plane component of the tool axis a 5-DOF wrist accepts.
PLANE_TOLERANCE = 1e-6
# Below this sin(theta5) the 6-DOF wrist axes 4 and 6 are treated as aligned.
WRIST_SINGULAR_TOLERANCE = 1e-9

_UP = np.array([0.0, 0.0, 1.0])


class ElbowBranch(enum.Enum):
    DOWN = "down"  # theta3 = +acos(...), the default
    UP = "up"      # theta3 = -acos(...)


def _unit_interval(value: float, tol: float, reason: str, target: np.ndarray) -> float:
    """Clip an acos/asin argument to [-1, 1], or fail if it is truly outside."""
    if not math.isfinite(value) or value > 1.0 + tol or value < -1.0 - tol:
        raise Unreachable(f"{reason} (argument {value:.6g})", target)
    return min(1.0, max(-1.0, value))


def _wrap(angle: float) -> float:
    """Wrap an angle to (-pi, pi]."""
    wrapped = math.atan2(math.sin(angle), math.cos(angle))
    if wrapped == -math.pi:
        return math.pi
    return wrapped


def _solve_six_dof_wrist(
    R: np.ndarray, theta1: float, theta2: float, theta3: float
) -> tuple[float, float, float]:
    """Wrist angles for the roll-pitch-roll wrist.

    The residual M = R03^T R equals Rz(theta4) Ry(theta5) Rz(theta6).  With
    c1 = cos(theta1), s23 = sin(theta2 + theta3) etc. its entries are

        M[2,2] = R22*c23 + R02*s23*c1 + R12*s23*s1
        M[1,2] = R12*c1 - R02*s1
        M[0,2] = R02*c23*c1 - R22*s23 + R12*c23*s1

    so theta4 = atan2(M12, M02), theta5 = atan2(sin5, M22) and
    theta6 = atan2(M21, -M20).
    """
    c1, s1 = math.cos(theta1), math.sin(theta1)
    c23, s23 = math.cos(theta2 + theta3), math.sin(theta2 + theta3)
    u = np.array([c1, s1, 0.0])
    v = np.array([-s1, c1, 0.0])
    R03 = np.column_stack([c23 * u - s23 * _UP, v, s23 * u + c23 * _UP])
    M = R03.T @ R

    sin5 = math.hypot(M[0, 2], M[1, 2])
    theta5 = math.atan2(sin5, M[2, 2])
    if sin5 < WRIST_SINGULAR_TOLERANCE:
        # Axes 4 and 6 coincide; only theta4 + theta6 (or theta6 - theta4
        # when flipped) is observable.  Park theta4 at zero.
        return 0.0, theta5, math.atan2(M[1, 0], M[1, 1])

    theta4 = math.atan2(M[1, 2], M[0, 2])
    theta6 = math.atan2(M[2, 1], -M[2, 0])
    return theta4, theta5, theta6


def _solve_five_dof_wrist(
    R: np.ndarray,
    theta1: float,
    theta2: float,
    theta3: float,
    target: np.ndarray,
    plane_tolerance: float,
) -> tuple[float, float]:
    """Wrist pitch and tool roll for the 5-DOF arm.

    The tool axis always lies in the vertical plane of theta1, tilted from
    vertical by theta2 + theta3 + theta4.  Orientations whose tool axis
    leaves that plane cannot be realised.
    """
    c1, s1 = math.cos(theta1), math.sin(theta1)
    u = np.array([c1, s1, 0.0])
    v = np.array([-s1, c1, 0.0])
    approach = R[:, 2]

    out_of_plane = float(approach @ v)
    if abs(out_of_plane) > plane_tolerance:
        raise Unreachable(
            f"tool axis leaves the arm plane by {out_of_plane:.3g}; "
            "a 5-DOF wrist cannot realise this orientation",
            target,
        )

    theta234 = math.atan2(float(approach @ u), float(approach @ _UP))
    theta4 = _wrap(theta234 - theta2 - theta3)

    c234, s234 = math.cos(theta234), math.sin(theta234)
    x4 = np.array([c234 * c1, c234 * s1, -s234])
    theta5 = math.atan2(float(R[:, 0] @ v), float(R[:, 0] @ x4))
    return theta4, theta5


def _solve(
    position: np.ndarray,
    R: np.ndarray,
    link_lengths: Sequence[float],
    topology: ArmTopology,
    elbow: ElbowBranch,
    reach_tolerance: float,
    plane_tolerance: float,
) -> np.ndarray:
    lengths = validate_link_lengths(link_lengths, topology)
    L1, L2, L3 = lengths[0], lengths[1], lengths[2]
    if L2 <= 0.0 or L3 <= 0.0:
        raise InvalidConfiguration(
            f"Shoulder and elbow links must be positive for IK, got L2={L2}, L3={L3}"
        )

    # Wrist centre
    wrist = position - topology.wrist_offset(lengths) * R[:, 2]
    wx, wy, wz = (float(c) for c in wrist)
    # FK rounding leaves ~1e-15 off-axis on a vertical arm; theta1 = 0 there
    if abs(wx) < SNAP_TOLERANCE:
        wx = 0.0
    if abs(wy) < SNAP_TOLERANCE:
        wy = 0.0

    theta1 = math.atan2(wy, wx)

    r = math.hypot(wx, wy)
    s = wz - L1
    dist2 = r * r + s * s
    if dist2 == 0.0:
        raise Unreachable("wrist centre lies on the shoulder joint", position)

    cos3 = _unit_interval(
        (dist2 - L2 * L2 - L3 * L3) / (2.0 * L2 * L3),
        reach_tolerance,
        "wrist centre is outside the shoulder-elbow reach",
        position,
    )
    theta3 = math.acos(cos3)
    if elbow is ElbowBranch.UP:
        theta3 = -theta3

    sin_beta = _unit_interval(
        L3 * math.sin(theta3) / math.sqrt(dist2),
        reach_tolerance,
        "elbow angle has no real solution",
        position,
    )
    theta2 = math.atan2(r, s) - math.asin(sin_beta)

    if topology.variant is ArmVariant.SIX_DOF:
        wrist_angles = _solve_six_dof_wrist(R, theta1, theta2, theta3)
    else:
        wrist_angles = _solve_five_dof_wrist(
            R, theta1, theta2, theta3, position, plane_tolerance
        )

    thetas = np.array([theta1, theta2, theta3, *wrist_angles], dtype=np.float64)
    if not np.all(np.isfinite(thetas)):
        raise Unreachable("one or more joint angles are not real", position)
    return thetas


def solve_pose(
    pose: np.ndarray,
    link_lengths: Sequence[float],
    variant: Union[ArmVariant, str] = ArmVariant.SIX_DOF,
    elbow: ElbowBranch = ElbowBranch.DOWN,
    reach_tolerance: float = REACH_TOLERANCE,
    plane_tolerance: float = PLANE_TOLERANCE,
) -> np.ndarray:
    """Joint angles that place the end effector at a 4x4 target pose.

    Raises:
        Unreachable: if the pose has no real solution.
        InvalidConfiguration: if the link lengths do not fit the variant.
    """
    pose = np.asarray(pose, dtype=float)
    if pose.shape != (4, 4):
        raise ValueError(f"pose must have shape (4, 4), got {pose.shape}")
    return _solve(
        pose[:3, 3].copy(),
        pose[:3, :3],
        link_lengths,
        get_topology(variant),
        elbow,
        reach_tolerance,
        plane_tolerance,
    )


def solve_inverse_kinematics(
    x: float,
    y: float,
    z: float,
    yaw: float,
    pitch: float,
    roll: float,
    link_lengths: Sequence[float],
    variant: Union[ArmVariant, str] = ArmVariant.SIX_DOF,
    elbow: ElbowBranch = ElbowBranch.DOWN,
    reach_tolerance: float = REACH_TOLERANCE,
    plane_tolerance: float = PLANE_TOLERANCE,
) -> np.ndarray:
    """Closed-form IK from a target position and yaw/pitch/roll (radians).

    Parameters
    ----------
    x, y, z            : target tool position, in the link-length unit.
    yaw, pitch, roll   : target tool orientation, R = Rz(yaw) Ry(pitch) Rx(roll).
    link_lengths       : link lengths of the arm.
    variant            : 5-DOF or 6-DOF template.
    elbow              : which elbow branch to return.

    Returns
    -------
    joint_angles : (N,) array of joint angles in radians.

    Raises
    ------
    Unreachable : the target is outside the workspace or needs an
        orientation the wrist cannot produce.
    """
    R = ypr_to_matrix(yaw, pitch, roll)
    return _solve(
        np.array([x, y, z], dtype=np.float64),
        R,
        link_lengths,
        get_topology(variant),
        elbow,
        reach_tolerance,
        plane_tolerance,
    )


def solve_all_branches(
    x: float,
    y: float,
    z: float,
    yaw: float,
    pitch: float,
    roll: float,
    link_lengths: Sequence[float],
    variant: Union[ArmVariant, str] = ArmVariant.SIX_DOF,
    reach_tolerance: float = REACH_TOLERANCE,
    plane_tolerance: float = PLANE_TOLERANCE,
) -> List[np.ndarray]:
    """Every real elbow branch, the default (elbow-down) branch first.

    At the workspace boundary both branches coincide and only one solution
    is returned.

    Raises:
        Unreachable: if no branch has a real solution.
    """
    solutions: List[np.ndarray] = []
    last_error: Unreachable | None = None
    for branch in (ElbowBranch.DOWN, ElbowBranch.UP):
        try:
            q = solve_inverse_kinematics(
                x, y, z, yaw, pitch, roll, link_lengths,
                variant=variant,
                elbow=branch,
                reach_tolerance=reach_tolerance,
                plane_tolerance=plane_tolerance,
            )
        except Unreachable as e:
            logger.debug("Elbow branch %s has no solution: %s", branch.value, e)
            last_error = e
            continue
        if not any(np.allclose(q, other) for other in solutions):
            solutions.append(q)

    if last_error is not None and not solutions:
        raise last_error
    return solutions
