"""
Workspace coverage tests and brute-force link-length search.

A set of link lengths "covers" a target cloud when the closed-form IK finds
a real, in-range solution for every target at the requested tool
orientation.  The default target cloud is a chessboard: every square centre
at each piece height.

Candidates are independent of each other, so the search fans them out over
a thread pool.  Results keep the candidate order.
"""

from __future__ import annotations

import itertools
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Union

import numpy as np

from armkin.kinematics.arm import ArmModel
from armkin.kinematics.dh_params import ArmVariant
from armkin.kinematics.errors import InvalidConfiguration, Unreachable
from armkin.workspace.sampling import JointLimits

logger = logging.getLogger(__name__)

DEFAULT_PIECE_HEIGHTS = (2.0, 5.0, 15.0)
BOARD_SQUARES = 8


def chessboard_targets(
    side_length: float,
    start_point: Sequence[float],
    piece_heights: Sequence[float] = DEFAULT_PIECE_HEIGHTS,
    squares: int = BOARD_SQUARES,
) -> np.ndarray:
    """Centres of every board square at every piece height.

    Args:
        side_length: Length of one side of the (square) board.
        start_point: (x, y, z) of the board corner with the smallest x and y.
        piece_heights: Heights above the board to test.
        squares: Squares per side.

    Returns:
        (squares * squares * len(piece_heights), 3) array, x-major order.
    """
    if side_length <= 0.0 or squares <= 0:
        raise ValueError("side_length and squares must be positive")
    x0, y0, z0 = (float(v) for v in start_point)
    size = side_length / squares

    targets = []
    for i in range(squares):
        x = x0 + i * size + size / 2
        for j in range(squares):
            y = y0 + j * size + size / 2
            for h in piece_heights:
                targets.append((x, y, z0 + h))
    return np.array(targets, dtype=np.float64)


@dataclass
class CoverageReport:
    """Outcome of checking one set of link lengths against a target cloud."""

    link_lengths: tuple[float, ...]
    targets: np.ndarray
    reachable: np.ndarray  # bool per target
    solutions: List[Optional[np.ndarray]] = field(default_factory=list)
    failures: dict[int, str] = field(default_factory=dict)  # target index -> reason
    complete: bool = True  # False when checking stopped at the first failure

    @property
    def covers_all(self) -> bool:
        return self.complete and bool(np.all(self.reachable))

    @property
    def reachable_count(self) -> int:
        return int(np.count_nonzero(self.reachable))

    @property
    def coverage(self) -> float:
        """Fraction of targets reached (over the targets actually checked)."""
        checked = len(self.solutions)
        if checked == 0:
            return 0.0
        return self.reachable_count / checked

    @property
    def unreachable_targets(self) -> np.ndarray:
        idx = sorted(self.failures)
        return self.targets[idx] if idx else np.zeros((0, 3))


def _rejection_reason(
    q: np.ndarray, limits: Optional[JointLimits], angle_tolerance: float
) -> Optional[str]:
    if np.any(np.isnan(q)):
        return "solution contains NaN"
    if np.any(np.abs(q) > math.pi + angle_tolerance):
        return "joint angle beyond ±pi"
    if limits is not None:
        violations = limits.violations(q, angle_tolerance)
        if violations:
            return "; ".join(violations)
    return None


def check_link_lengths(
    link_lengths: Sequence[float],
    targets: np.ndarray,
    orientation: Sequence[float],
    variant: Union[ArmVariant, str] = ArmVariant.SIX_DOF,
    limits: Optional[JointLimits] = None,
    angle_tolerance: float = 1e-3,
    stop_on_failure: bool = False,
) -> CoverageReport:
    """Check whether an arm reaches every target at a fixed orientation.

    Args:
        link_lengths: Link lengths of the candidate arm.
        targets: (M, 3) target positions.
        orientation: (yaw, pitch, roll) in radians for every target.
        variant: Arm template.
        limits: Optional joint limits; solutions outside them count as misses.
        angle_tolerance: Slack on the ±pi and joint-limit checks (radians).
        stop_on_failure: Stop at the first unreachable target.

    Returns:
        CoverageReport for the candidate.
    """
    arm = ArmModel(link_lengths=tuple(link_lengths), variant=variant)
    targets = np.asarray(targets, dtype=np.float64).reshape(-1, 3)
    yaw, pitch, roll = (float(v) for v in orientation)
    if limits is not None:
        limits = limits.for_joints(arm.n_joints)

    reachable = np.zeros(len(targets), dtype=bool)
    solutions: List[Optional[np.ndarray]] = []
    failures: dict[int, str] = {}
    complete = True

    for i, (x, y, z) in enumerate(targets):
        try:
            q = arm.solve_ik(x, y, z, yaw, pitch, roll)
            reason = _rejection_reason(q, limits, angle_tolerance)
        except Unreachable as e:
            q, reason = None, e.reason
        except InvalidConfiguration as e:
            # e.g. a zero-length shoulder or elbow link
            q, reason = None, str(e)

        if reason is None:
            reachable[i] = True
            solutions.append(q)
            continue

        solutions.append(None)
        failures[i] = reason
        logger.debug("Links %s miss target %d (%.2f, %.2f, %.2f): %s",
                     arm.link_lengths, i, x, y, z, reason)
        if stop_on_failure:
            complete = i == len(targets) - 1
            break

    return CoverageReport(
        link_lengths=arm.link_lengths,
        targets=targets,
        reachable=reachable,
        solutions=solutions,
        failures=failures,
        complete=complete,
    )


def candidate_link_lengths(ranges: Sequence[Union[float, Iterable[float]]]) -> List[tuple[float, ...]]:
    """Cartesian product of per-link candidate values.

    Each entry is either a fixed length or an iterable of lengths to try.
    """
    axes = []
    for r in ranges:
        if isinstance(r, (int, float)):
            axes.append((float(r),))
        else:
            values = tuple(float(v) for v in r)
            if not values:
                raise InvalidConfiguration("empty link-length range")
            axes.append(values)
    return list(itertools.product(*axes))


def link_length_range(start: float, stop: float, step: float) -> np.ndarray:
    """Inclusive range of link lengths."""
    if step <= 0.0:
        raise ValueError(f"step must be positive, got {step}")
    count = int(math.floor((stop - start) / step + 1e-9)) + 1
    return start + step * np.arange(max(count, 0))


def search_link_lengths(
    candidates: Sequence[Sequence[float]],
    targets: np.ndarray,
    orientation: Sequence[float],
    variant: Union[ArmVariant, str] = ArmVariant.SIX_DOF,
    limits: Optional[JointLimits] = None,
    angle_tolerance: float = 1e-3,
    max_workers: Optional[int] = None,
) -> List[CoverageReport]:
    """Return the candidates that reach every target, in candidate order.

    Every candidate is checked; the pool is not cancelled early.
    """
    targets = np.asarray(targets, dtype=np.float64).reshape(-1, 3)
    total = len(candidates)
    logger.info("Searching %d link-length candidates against %d targets", total, len(targets))

    def _check(links: Sequence[float]) -> CoverageReport:
        try:
            return check_link_lengths(
                links, targets, orientation,
                variant=variant,
                limits=limits,
                angle_tolerance=angle_tolerance,
                stop_on_failure=True,
            )
        except InvalidConfiguration as e:
            logger.warning("Skipping link lengths %s: %s", tuple(links), e)
            return CoverageReport(
                link_lengths=tuple(float(v) for v in links),
                targets=targets,
                reachable=np.zeros(len(targets), dtype=bool),
                failures={0: str(e)} if len(targets) else {},
                complete=False,
            )

    passing: List[CoverageReport] = []
    progress_every = max(1, total // 10)
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        for n, report in enumerate(pool.map(_check, candidates), start=1):
            if report.covers_all:
                passing.append(report)
            if n % progress_every == 0 or n == total:
                logger.info("Checked %d/%d candidates, %d pass", n, total, len(passing))
    return passing
