"""Pydantic model for Jacobian messages."""

import numpy as np
from pydantic import BaseModel, Field


class JacobianMessage(BaseModel):
    """Geometric Jacobian at one configuration."""

    joint_angles_deg: list[float] = Field(description="Configuration, degrees")
    matrix: list[list[float]] = Field(description="6xN Jacobian; rows 0-2 linear, 3-5 angular")
    rank: int = Field(description="Numerical rank of the Jacobian")

    @classmethod
    def from_jacobian(cls, joint_angles: np.ndarray, jacobian: np.ndarray) -> "JacobianMessage":
        J = np.asarray(jacobian, dtype=float)
        return cls(
            joint_angles_deg=np.degrees(np.asarray(joint_angles, dtype=float)).tolist(),
            matrix=J.tolist(),
            rank=int(np.linalg.matrix_rank(J)),
        )
