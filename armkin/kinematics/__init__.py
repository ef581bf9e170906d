"""
Kinematics core for 5-DOF and 6-DOF DH arms.

Provides DH tables, forward kinematics, geometric Jacobians, yaw/pitch/roll
conversions and the closed-form inverse kinematics solver.
"""

from armkin.kinematics.arm import ArmModel, make_arm
from armkin.kinematics.dh_params import (
    ArmTopology,
    ArmVariant,
    DHRow,
    DHTable,
    build_dh_table,
    get_topology,
)
from armkin.kinematics.errors import (
    IndexOutOfRange,
    InvalidConfiguration,
    KinematicsError,
    Unreachable,
)
from armkin.kinematics.forward import (
    chain_transform,
    end_effector_position,
    forward_kinematics,
    frame_transforms,
    joint_coordinates,
    single_transform,
)
from armkin.kinematics.inverse import (
    ElbowBranch,
    solve_all_branches,
    solve_inverse_kinematics,
    solve_pose,
)
from armkin.kinematics.jacobian import (
    compute_jacobian,
    damped_pseudo_inverse,
    end_effector_twist,
    joint_velocities_for_twist,
    predict_displacement,
)
from armkin.kinematics.orientation import (
    matrix_to_ypr,
    pose_from_components,
    pose_to_components,
    ypr_to_matrix,
)

__all__ = [
    "ArmModel",
    "ArmTopology",
    "ArmVariant",
    "DHRow",
    "DHTable",
    "ElbowBranch",
    "IndexOutOfRange",
    "InvalidConfiguration",
    "KinematicsError",
    "Unreachable",
    "build_dh_table",
    "chain_transform",
    "compute_jacobian",
    "damped_pseudo_inverse",
    "end_effector_position",
    "end_effector_twist",
    "forward_kinematics",
    "frame_transforms",
    "get_topology",
    "joint_coordinates",
    "joint_velocities_for_twist",
    "make_arm",
    "matrix_to_ypr",
    "pose_from_components",
    "pose_to_components",
    "predict_displacement",
    "single_transform",
    "solve_all_branches",
    "solve_inverse_kinematics",
    "solve_pose",
    "ypr_to_matrix",
]
