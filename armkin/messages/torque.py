"""Pydantic model for static gravity torque messages."""

import numpy as np
from pydantic import BaseModel, Field


class GravityTorqueMessage(BaseModel):
    """Gravity torques at one configuration."""

    joint_angles_deg: list[float] = Field(description="Configuration, degrees")
    torques_nm: list[float] = Field(description="Torque gravity exerts on each joint, N·m")
    total_mass_kg: float = Field(description="Sum of the modelled point masses")

    @classmethod
    def from_torques(
        cls, joint_angles: np.ndarray, torques: np.ndarray, total_mass: float
    ) -> "GravityTorqueMessage":
        return cls(
            joint_angles_deg=np.degrees(np.asarray(joint_angles, dtype=float)).tolist(),
            torques_nm=np.asarray(torques, dtype=float).tolist(),
            total_mass_kg=float(total_mass),
        )
