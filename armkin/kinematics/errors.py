"""Exceptions raised by the kinematics core."""

from __future__ import annotations

from typing import Optional, Sequence


class KinematicsError(Exception):
    """Base class for all kinematics failures."""
    pass


class InvalidConfiguration(KinematicsError, ValueError):
    """Link lengths or joint angles do not fit the arm template."""
    pass


class IndexOutOfRange(KinematicsError, IndexError):
    """Frame indices passed to a transform chain are invalid."""
    pass


class Unreachable(KinematicsError):
    """The target pose has no real joint-angle solution.

    This is an expected outcome for targets outside the workspace.  Callers
    doing interactive control or batch searches should catch it and treat
    the target as not reachable rather than as a crash.
    """

    def __init__(self, reason: str, target: Optional[Sequence[float]] = None):
        self.reason = reason
        self.target = tuple(float(v) for v in target) if target is not None else None
        if self.target is not None:
            coords = ", ".join(f"{v:.3f}" for v in self.target)
            super().__init__(f"Target ({coords}) is unreachable: {reason}")
        else:
            super().__init__(f"Target is unreachable: {reason}")
