"""
Arm model: a kinematic template bound to a fixed set of link lengths.

ArmModel is an immutable value object.  Every query takes the joint angles
explicitly and returns freshly computed arrays; nothing is cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Sequence, Union

import numpy as np

from armkin.kinematics.dh_params import (
    ArmTopology,
    ArmVariant,
    DHTable,
    build_dh_table,
    get_topology,
    resolve_variant,
    validate_link_lengths,
)
from armkin.kinematics.forward import forward_kinematics, frame_transforms, joint_coordinates
from armkin.kinematics.inverse import (
    PLANE_TOLERANCE,
    REACH_TOLERANCE,
    ElbowBranch,
    solve_all_branches,
    solve_inverse_kinematics,
    solve_pose,
)
from armkin.kinematics.jacobian import DEFAULT_DAMPING, compute_jacobian, joint_velocities_for_twist
from armkin.kinematics.orientation import pose_to_components

if TYPE_CHECKING:
    from armkin.config.arm_config import ArmConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArmModel:
    """Kinematics of one arm instance."""

    link_lengths: tuple[float, ...]
    variant: ArmVariant = ArmVariant.SIX_DOF
    reach_tolerance: float = REACH_TOLERANCE
    plane_tolerance: float = PLANE_TOLERANCE
    damping: float = DEFAULT_DAMPING  # pseudo-inverse damping for twist -> joint rates
    topology: ArmTopology = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        variant = resolve_variant(self.variant)
        topology = get_topology(variant)
        object.__setattr__(self, "variant", variant)
        object.__setattr__(self, "topology", topology)
        object.__setattr__(
            self, "link_lengths", validate_link_lengths(self.link_lengths, topology)
        )

    @classmethod
    def from_config(cls, config: ArmConfig | None = None) -> ArmModel:
        """Build the arm described by the `arm` and `solver` config sections."""
        if config is None:
            from armkin.config.arm_config import get_arm_config

            config = get_arm_config()
        arm = config.get("arm")
        solver = config.get("solver")
        return cls(
            link_lengths=tuple(arm["link_lengths"]),
            variant=arm["variant"],
            reach_tolerance=solver["reach_tolerance"],
            plane_tolerance=solver["plane_tolerance"],
            damping=solver["damping"],
        )

    # ----- geometry -----

    @property
    def n_joints(self) -> int:
        return self.topology.joint_count

    @property
    def max_reach(self) -> float:
        """Distance from the shoulder to the tool tip, fully stretched."""
        return float(sum(self.link_lengths[1:]))

    def dh_table(self, joint_angles: Sequence[float]) -> DHTable:
        return build_dh_table(self.link_lengths, joint_angles, self.variant)

    # ----- forward kinematics -----

    def forward_kinematics(self, joint_angles: Sequence[float]) -> np.ndarray:
        """Compute the 4×4 end-effector pose from joint angles."""
        return forward_kinematics(self.dh_table(joint_angles))

    def frame_poses(self, joint_angles: Sequence[float]) -> List[np.ndarray]:
        """Pose of every frame, base (identity) first, end effector last."""
        return frame_transforms(self.dh_table(joint_angles))

    def joint_coordinates(self, joint_angles: Sequence[float]) -> np.ndarray:
        """(3, frames) origins for a stick-figure rendering."""
        return joint_coordinates(self.dh_table(joint_angles))

    def end_effector_components(
        self, joint_angles: Sequence[float]
    ) -> tuple[float, float, float, float, float, float]:
        """(x, y, z, yaw, pitch, roll) of the end effector."""
        return pose_to_components(self.forward_kinematics(joint_angles))

    # ----- geometric Jacobian -----

    def jacobian(self, joint_angles: Sequence[float]) -> np.ndarray:
        """Compute the 6×N geometric Jacobian (base frame)."""
        return compute_jacobian(self.dh_table(joint_angles))

    def joint_velocities(self, joint_angles: Sequence[float], twist: np.ndarray) -> np.ndarray:
        """Damped least-squares joint rates for an end-effector twist [v; w]."""
        return joint_velocities_for_twist(self.dh_table(joint_angles), twist, self.damping)

    # ----- inverse kinematics -----

    def solve_ik(
        self,
        x: float,
        y: float,
        z: float,
        yaw: float,
        pitch: float,
        roll: float,
        elbow: ElbowBranch = ElbowBranch.DOWN,
    ) -> np.ndarray:
        """Closed-form IK; raises Unreachable outside the workspace."""
        return solve_inverse_kinematics(
            x, y, z, yaw, pitch, roll, self.link_lengths,
            variant=self.variant,
            elbow=elbow,
            reach_tolerance=self.reach_tolerance,
            plane_tolerance=self.plane_tolerance,
        )

    def solve_ik_pose(
        self, pose: np.ndarray, elbow: ElbowBranch = ElbowBranch.DOWN
    ) -> np.ndarray:
        return solve_pose(
            pose, self.link_lengths,
            variant=self.variant,
            elbow=elbow,
            reach_tolerance=self.reach_tolerance,
            plane_tolerance=self.plane_tolerance,
        )

    def solve_ik_branches(
        self, x: float, y: float, z: float, yaw: float, pitch: float, roll: float
    ) -> List[np.ndarray]:
        return solve_all_branches(
            x, y, z, yaw, pitch, roll, self.link_lengths,
            variant=self.variant,
            reach_tolerance=self.reach_tolerance,
            plane_tolerance=self.plane_tolerance,
        )

    def with_link_lengths(self, link_lengths: Sequence[float]) -> ArmModel:
        """Same arm template and tolerances, different link lengths."""
        return ArmModel(
            link_lengths=tuple(link_lengths),
            variant=self.variant,
            reach_tolerance=self.reach_tolerance,
            plane_tolerance=self.plane_tolerance,
            damping=self.damping,
        )


def make_arm(
    link_lengths: Sequence[float],
    variant: Union[ArmVariant, str] = ArmVariant.SIX_DOF,
) -> ArmModel:
    return ArmModel(link_lengths=tuple(link_lengths), variant=resolve_variant(variant))
