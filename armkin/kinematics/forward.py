"""
Forward kinematics over a DH table.

Frame 0 is the base; frame i is the output of row i; the last frame is the
end effector after the fixed tool row.
"""

import math
from typing import List

import numpy as np

from armkin.kinematics.dh_params import DHRow, DHTable
from armkin.kinematics.errors import IndexOutOfRange


def single_transform(row: DHRow) -> np.ndarray:
    """Compute the 4x4 homogeneous transform for one DH row (modified DH).

    Equivalent to Tx(a) @ Rx(alpha) @ Tz(d) @ Rz(theta).  The order matters:
    reversing it describes a different robot.

    Args:
        row: DH parameters for this link.

    Returns:
        4x4 homogeneous transformation matrix.
    """
    ct, st = math.cos(row.theta), math.sin(row.theta)
    ca, sa = math.cos(row.alpha), math.sin(row.alpha)
    a, d = row.a, row.d

    return np.array([
        [ct,     -st,     0.0,   a],
        [st*ca,  ct*ca,  -sa,   -sa*d],
        [st*sa,  ct*sa,   ca,    ca*d],
        [0.0,    0.0,     0.0,   1.0],
    ], dtype=np.float64)


def chain_transform(table: DHTable, from_frame: int, to_frame: int) -> np.ndarray:
    """Compose the transform from frame `from_frame` to frame `to_frame`.

    Args:
        table: DH table of the arm.
        from_frame: Starting frame index (0 is the base).
        to_frame: Final frame index (table.row_count is the end effector).

    Returns:
        4x4 transform; identity when the two frames are the same.

    Raises:
        IndexOutOfRange: if either index is outside [0, row_count] or
            to_frame < from_frame.
    """
    rows = table.row_count
    if to_frame > rows or from_frame > rows or from_frame < 0 or to_frame < from_frame:
        raise IndexOutOfRange(
            f"Invalid frame range {from_frame} -> {to_frame} for a table with {rows} rows"
        )

    T = np.eye(4, dtype=np.float64)
    for k in range(from_frame, to_frame):
        T = T @ single_transform(table.rows[k])
    return T


def frame_transforms(table: DHTable) -> List[np.ndarray]:
    """Cumulative transform of every frame relative to the base.

    Returns:
        List of row_count + 1 transforms.  transforms[i] is T_0_i, so
        transforms[0] is the identity and transforms[-1] is the end effector.
    """
    transforms: List[np.ndarray] = [np.eye(4, dtype=np.float64)]
    T = transforms[0]
    for row in table.rows:
        T = T @ single_transform(row)
        transforms.append(T)
    return transforms


def joint_coordinates(table: DHTable) -> np.ndarray:
    """Frame origins for drawing the arm as a stick figure.

    Returns:
        (3, row_count + 1) array; column i is the origin of frame i.
    """
    return np.stack([T[:3, 3] for T in frame_transforms(table)], axis=1)


def forward_kinematics(table: DHTable) -> np.ndarray:
    """End-effector pose in the base frame."""
    return chain_transform(table, 0, table.row_count)


def end_effector_position(table: DHTable) -> np.ndarray:
    """Convenience: return the 3D position (x, y, z) of the end-effector."""
    T = forward_kinematics(table)
    return T[:3, 3].copy()
