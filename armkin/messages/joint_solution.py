"""Pydantic model for inverse kinematics results."""

from typing import Optional

import numpy as np
from pydantic import BaseModel, Field


class JointSolutionMessage(BaseModel):
    """Outcome of one IK query."""

    target: list[float] = Field(description="Target x, y, z, yaw_deg, pitch_deg, roll_deg")
    variant: str = Field(description="Arm variant: 5dof or 6dof")
    reachable: bool = Field(description="Whether a real solution exists")
    joint_angles_deg: list[list[float]] = Field(
        default_factory=list,
        description="One list of joint angles per elbow branch, degrees",
    )
    reason: Optional[str] = Field(default=None, description="Why the target is unreachable")

    @classmethod
    def from_solutions(
        cls, target: list[float], variant: str, solutions: list[np.ndarray]
    ) -> "JointSolutionMessage":
        return cls(
            target=[float(v) for v in target],
            variant=variant,
            reachable=True,
            joint_angles_deg=[np.degrees(q).tolist() for q in solutions],
        )

    @classmethod
    def from_unreachable(cls, target: list[float], variant: str, reason: str) -> "JointSolutionMessage":
        return cls(
            target=[float(v) for v in target],
            variant=variant,
            reachable=False,
            reason=reason,
        )
