"""Joint-limit sweeps of the reachable workspace."""

from __future__ import annotations

import itertools
import logging
import math
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

import numpy as np

from armkin.kinematics.arm import ArmModel
from armkin.kinematics.errors import InvalidConfiguration

logger = logging.getLogger(__name__)

# Mechanical joint limits of the reference arm (degrees), base to tip
DEFAULT_JOINT_LIMITS_DEG: tuple[tuple[float, float], ...] = (
    (-180.0, 180.0),
    (-165.0, 165.0),
    (-165.0, 165.0),
    (-180.0, 180.0),
    (-90.0, 90.0),
    (-180.0, 180.0),
)


@dataclass(frozen=True)
class JointLimits:
    """Per-joint [min, max] limits in radians."""

    lower: tuple[float, ...]
    upper: tuple[float, ...]

    def __post_init__(self):
        if len(self.lower) != len(self.upper):
            raise InvalidConfiguration(
                f"lower has {len(self.lower)} entries, upper has {len(self.upper)}"
            )
        for i, (lo, hi) in enumerate(zip(self.lower, self.upper)):
            if lo > hi:
                raise InvalidConfiguration(f"joint {i}: min {lo} > max {hi}")

    @classmethod
    def from_degrees(cls, pairs: Sequence[Sequence[float]]) -> JointLimits:
        return cls(
            lower=tuple(math.radians(lo) for lo, _ in pairs),
            upper=tuple(math.radians(hi) for _, hi in pairs),
        )

    @classmethod
    def default(cls, n_joints: int = 6) -> JointLimits:
        return cls.from_degrees(DEFAULT_JOINT_LIMITS_DEG).for_joints(n_joints)

    def __len__(self) -> int:
        return len(self.lower)

    def for_joints(self, n_joints: int) -> JointLimits:
        """Limits of the first n_joints joints."""
        if n_joints > len(self):
            raise InvalidConfiguration(
                f"Limits cover {len(self)} joints, {n_joints} requested"
            )
        return JointLimits(self.lower[:n_joints], self.upper[:n_joints])

    def violations(self, thetas: Sequence[float], tol: float = 0.0) -> list[str]:
        """Human-readable list of joints outside their limits."""
        angles = np.asarray(thetas, dtype=float)
        if angles.shape != (len(self),):
            return [f"Expected {len(self)} joint angles, got shape {angles.shape}"]
        out = []
        for i, q in enumerate(angles):
            if not math.isfinite(q):
                out.append(f"joint {i}: not finite")
            elif q < self.lower[i] - tol:
                out.append(f"joint {i}: {q:.4f} < min {self.lower[i]:.4f}")
            elif q > self.upper[i] + tol:
                out.append(f"joint {i}: {q:.4f} > max {self.upper[i]:.4f}")
        return out

    def contains(self, thetas: Sequence[float], tol: float = 0.0) -> bool:
        return not self.violations(thetas, tol)


def joint_grid(lower: float, upper: float, step: float) -> np.ndarray:
    """Values from lower to upper (inclusive when it lands on a step)."""
    if step <= 0.0:
        raise ValueError(f"step must be positive, got {step}")
    count = int(math.floor((upper - lower) / step + 1e-9)) + 1
    return lower + step * np.arange(count)


def sweep_positions(
    arm: ArmModel,
    resolutions: Mapping[int, float],
    limits: Optional[JointLimits] = None,
    base_angles: Optional[Sequence[float]] = None,
) -> np.ndarray:
    """End-effector positions over a grid of the free joints.

    Args:
        arm: Arm to sweep.
        resolutions: {joint index (0-based): step in radians} for each free
            joint.  Joints not listed stay at base_angles.
        limits: Range swept for each free joint.  Defaults to the reference
            arm's mechanical limits.
        base_angles: Angles of the fixed joints (zeros by default).

    Returns:
        (M, 3) array of positions, one per grid combination.
    """
    limits = limits if limits is not None else JointLimits.default(arm.n_joints)
    base = (
        np.zeros(arm.n_joints)
        if base_angles is None
        else np.asarray(base_angles, dtype=float).copy()
    )

    free = sorted(resolutions)
    for j in free:
        if not 0 <= j < arm.n_joints:
            raise InvalidConfiguration(f"joint {j} is outside 0..{arm.n_joints - 1}")
    grids = [joint_grid(limits.lower[j], limits.upper[j], resolutions[j]) for j in free]

    positions = []
    thetas = base.copy()
    for combo in itertools.product(*grids):
        thetas[free] = combo
        positions.append(arm.forward_kinematics(thetas)[:3, 3])

    logger.debug("Swept %d configurations over joints %s", len(positions), free)
    if not positions:
        return np.zeros((0, 3))
    return np.array(positions)


def workspace_layers(
    arm: ArmModel,
    coarse: float,
    fine: float,
    limits: Optional[JointLimits] = None,
) -> dict[str, np.ndarray]:
    """Point clouds of the three standard workspace views.

    "shoulder": base (coarse) and shoulder (fine) free.
    "arm":      base, shoulder and elbow free (coarse).
    "wrist":    base/shoulder/elbow on the coarse grid, wrist joints 4 and 5
                on the fine grid; the final roll is left at zero because it
                does not move the tool point.
    """
    layers = {
        "shoulder": sweep_positions(arm, {0: coarse, 1: fine}, limits),
        "arm": sweep_positions(arm, {0: coarse, 1: coarse, 2: coarse}, limits),
        "wrist": sweep_positions(
            arm, {0: coarse, 1: coarse, 2: coarse, 3: fine, 4: fine}, limits
        ),
    }
    for name, pts in layers.items():
        logger.info("Workspace layer %s: %d points", name, len(pts))
    return layers
