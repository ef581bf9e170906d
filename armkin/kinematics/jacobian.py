"""
Geometric Jacobian for arms made entirely of revolute joints.

The Jacobian is evaluated numerically at the configuration baked into a DH
table.  It is recomputed for every table and never updated in place.
"""

from __future__ import annotations

import logging

import numpy as np

from armkin.kinematics.dh_params import DHTable
from armkin.kinematics.forward import chain_transform

logger = logging.getLogger(__name__)

DEFAULT_DAMPING = 1e-4


def compute_jacobian(table: DHTable) -> np.ndarray:
    """Compute the 6xN geometric Jacobian in the base frame.

    Column i maps the velocity of joint i+1 to the end-effector twist:
    rows 0-2 are Z_i x (P_end - P_i) (linear), rows 3-5 are Z_i (angular),
    where Z_i and P_i are the z axis and origin of frame i+1.

    Args:
        table: DH table at the configuration of interest.

    Returns:
        (6, N) array, N = table.joint_count.
    """
    n_joints = table.joint_count
    p_end = chain_transform(table, 0, n_joints + 1)[:3, 3]

    J = np.zeros((6, n_joints))
    for i in range(n_joints):
        T_i = chain_transform(table, 0, i + 1)
        z_i = T_i[:3, 2]  # joint axis
        p_i = T_i[:3, 3]  # joint origin
        J[:3, i] = np.cross(z_i, p_end - p_i)  # linear velocity
        J[3:, i] = z_i  # angular velocity
    return J


def end_effector_twist(table: DHTable, joint_velocities: np.ndarray) -> np.ndarray:
    """Return [v; w] of the end effector for the given joint velocities."""
    qdot = np.asarray(joint_velocities, dtype=float)
    if qdot.shape != (table.joint_count,):
        raise ValueError(
            f"Expected {table.joint_count} joint velocities, got shape {qdot.shape}"
        )
    return compute_jacobian(table) @ qdot


def damped_pseudo_inverse(jacobian: np.ndarray, damping: float = DEFAULT_DAMPING) -> np.ndarray:
    """Damped Moore-Penrose pseudo-inverse of a 6xN Jacobian.

    Uses the right inverse J^T (J J^T + λ²I)^-1 when the arm has 6 or more
    joints and the left inverse (J^T J + λ²I)^-1 J^T for fewer joints.  The
    damping keeps the result bounded near singular configurations.

    Returns:
        (N, 6) array.
    """
    J = np.asarray(jacobian, dtype=float)
    n_joints = J.shape[1]
    lam2 = damping**2
    if n_joints >= 6:
        inner = J @ J.T + lam2 * np.eye(J.shape[0])
        return J.T @ np.linalg.inv(inner)
    inner = J.T @ J + lam2 * np.eye(n_joints)
    return np.linalg.inv(inner) @ J.T


def joint_velocities_for_twist(
    table: DHTable,
    twist: np.ndarray,
    damping: float = DEFAULT_DAMPING,
) -> np.ndarray:
    """Joint velocities that best produce an end-effector twist [v; w].

    For a 5-joint arm the twist generally cannot be met exactly; the result
    is the damped least-squares fit.
    """
    twist = np.asarray(twist, dtype=float)
    if twist.shape != (6,):
        raise ValueError(f"twist must have shape (6,), got {twist.shape}")
    J = compute_jacobian(table)
    qdot = damped_pseudo_inverse(J, damping) @ twist
    residual = np.linalg.norm(J @ qdot - twist)
    if residual > 1e-6 * max(1.0, np.linalg.norm(twist)):
        logger.debug("Twist not exactly achievable (residual=%.3e)", residual)
    return qdot


def predict_displacement(table: DHTable, delta_thetas: np.ndarray) -> np.ndarray:
    """First-order end-effector position change for a small joint step.

    Compare against the forward-kinematics difference to validate the
    Jacobian: the error shrinks quadratically with the step size.
    """
    delta = np.asarray(delta_thetas, dtype=float)
    if delta.shape != (table.joint_count,):
        raise ValueError(
            f"Expected {table.joint_count} joint deltas, got shape {delta.shape}"
        )
    return compute_jacobian(table)[:3] @ delta
