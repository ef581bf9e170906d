"""Workspace sweeps, target coverage and link-length search."""

from armkin.workspace.coverage import (
    CoverageReport,
    candidate_link_lengths,
    check_link_lengths,
    chessboard_targets,
    link_length_range,
    search_link_lengths,
)
from armkin.workspace.sampling import (
    DEFAULT_JOINT_LIMITS_DEG,
    JointLimits,
    joint_grid,
    sweep_positions,
    workspace_layers,
)

__all__ = [
    "CoverageReport",
    "DEFAULT_JOINT_LIMITS_DEG",
    "JointLimits",
    "candidate_link_lengths",
    "check_link_lengths",
    "chessboard_targets",
    "joint_grid",
    "link_length_range",
    "search_link_lengths",
    "sweep_positions",
    "workspace_layers",
]
