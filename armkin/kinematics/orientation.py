"""
Yaw/pitch/roll <-> rotation matrix conversions.

yaw is a rotation about z, pitch about y, roll about x, all
counter-clockwise, composed as R = Rz(yaw) @ Ry(pitch) @ Rx(roll).
"""

from __future__ import annotations

import math

import numpy as np
from scipy.spatial.transform import Rotation

# Entries smaller than this are treated as exactly zero before the
# trigonometric calls so that configurations next to gimbal lock do not
# flip sign on rounding noise.
SNAP_TOLERANCE = 1e-9


def _snap(value: float, tol: float = SNAP_TOLERANCE) -> float:
    return 0.0 if abs(value) < tol else float(value)


def ypr_to_matrix(yaw: float, pitch: float, roll: float) -> np.ndarray:
    """Return the 3x3 rotation Rz(yaw) @ Ry(pitch) @ Rx(roll)."""
    return Rotation.from_euler("ZYX", [yaw, pitch, roll]).as_matrix()


def matrix_to_ypr(R: np.ndarray, tol: float = SNAP_TOLERANCE) -> tuple[float, float, float]:
    """Recover (yaw, pitch, roll) from a rotation matrix.

    At pitch = ±pi/2 yaw and roll are coupled; the result is still a valid
    triple but only one of the equivalent ones.
    """
    R = np.asarray(R, dtype=float)
    r20 = _snap(R[2, 0], tol)
    r21 = _snap(R[2, 1], tol)
    r22 = _snap(R[2, 2], tol)
    r10 = _snap(R[1, 0], tol)
    r00 = _snap(R[0, 0], tol)

    pitch = math.asin(min(1.0, max(-1.0, -r20)))
    roll = math.atan2(r21, r22)
    yaw = math.atan2(r10, r00)
    return yaw, pitch, roll


def pose_from_components(
    x: float, y: float, z: float, yaw: float, pitch: float, roll: float
) -> np.ndarray:
    """Build a 4x4 pose from a position and yaw/pitch/roll."""
    T = np.eye(4)
    T[:3, :3] = ypr_to_matrix(yaw, pitch, roll)
    T[:3, 3] = (x, y, z)
    return T


def pose_to_components(pose: np.ndarray) -> tuple[float, float, float, float, float, float]:
    """Split a 4x4 pose into (x, y, z, yaw, pitch, roll)."""
    pose = np.asarray(pose, dtype=float)
    yaw, pitch, roll = matrix_to_ypr(pose[:3, :3])
    x, y, z = (float(v) for v in pose[:3, 3])
    return x, y, z, yaw, pitch, roll


def is_rotation_matrix(R: np.ndarray, tol: float = 1e-9) -> bool:
    """True if R is orthonormal with determinant +1."""
    R = np.asarray(R, dtype=float)
    if R.shape != (3, 3):
        return False
    return bool(
        np.allclose(R.T @ R, np.eye(3), atol=tol) and abs(np.linalg.det(R) - 1.0) < tol
    )
