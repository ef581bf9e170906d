"""Pydantic model for end-effector pose messages."""

import math

import numpy as np
from pydantic import BaseModel, Field

from armkin.kinematics.orientation import pose_to_components


class PoseMessage(BaseModel):
    """End-effector pose, position in link-length units and angles in degrees."""

    x: float = Field(description="Tool position x")
    y: float = Field(description="Tool position y")
    z: float = Field(description="Tool position z")
    yaw_deg: float = Field(description="Rotation about base z, degrees")
    pitch_deg: float = Field(description="Rotation about y, degrees")
    roll_deg: float = Field(description="Rotation about x, degrees")
    matrix: list[list[float]] = Field(description="4x4 homogeneous transform, row-major")
    frame_origins: list[list[float]] = Field(
        default_factory=list,
        description="Origin of every DH frame, base first (optional)",
    )

    class Config:
        json_schema_extra = {
            "example": {
                "x": 0.0,
                "y": 0.0,
                "z": 67.0,
                "yaw_deg": 0.0,
                "pitch_deg": 0.0,
                "roll_deg": 0.0,
                "matrix": [
                    [1.0, 0.0, 0.0, 0.0],
                    [0.0, 1.0, 0.0, 0.0],
                    [0.0, 0.0, 1.0, 67.0],
                    [0.0, 0.0, 0.0, 1.0],
                ],
                "frame_origins": [],
            }
        }

    @classmethod
    def from_matrix(cls, pose: np.ndarray, frame_origins: np.ndarray | None = None) -> "PoseMessage":
        """Build from a 4x4 pose and optional (3, frames) origins."""
        x, y, z, yaw, pitch, roll = pose_to_components(pose)
        origins = [] if frame_origins is None else np.asarray(frame_origins).T.tolist()
        return cls(
            x=x,
            y=y,
            z=z,
            yaw_deg=math.degrees(yaw),
            pitch_deg=math.degrees(pitch),
            roll_deg=math.degrees(roll),
            matrix=np.asarray(pose, dtype=float).tolist(),
            frame_origins=origins,
        )
