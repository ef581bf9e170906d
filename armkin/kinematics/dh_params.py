"""
Denavit-Hartenberg tables for the 5-DOF and 6-DOF arm variants.

Both variants share the same base: a yaw joint on top of a vertical base
link, followed by a shoulder/elbow pair that moves in the vertical plane.
They differ in the wrist.  The 6-DOF arm has a spherical wrist (roll,
pitch, roll); the 5-DOF arm has a third planar pitch joint followed by a
tool roll.

Each variant is described by an ArmTopology: a fixed template that maps
link lengths and joint angles to DH rows.  The templates are design
constants of the robot and must not be edited casually.  Flipping a sign
or a bias silently produces a different robot.

Convention: Modified DH, T = Tx(a) * Rx(alpha) * Tz(d) * Rz(theta)
  - a      : link length (along the previous x axis)
  - alpha  : link twist (rad, about the previous x axis)
  - d      : link offset (along the new z axis)
  - theta  : joint angle (rad, about the new z axis)
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from armkin.kinematics.errors import InvalidConfiguration

HALF_PI = math.pi / 2


class ArmVariant(enum.Enum):
    FIVE_DOF = "5dof"
    SIX_DOF = "6dof"


@dataclass(frozen=True)
class DHRow:
    """A single row of the DH parameter table."""
    a: float      # link length
    alpha: float  # link twist (rad)
    d: float      # link offset
    theta: float  # joint angle including any fixed bias (rad)


@dataclass(frozen=True)
class DHTable:
    """Ordered DH rows for an N-joint arm plus the fixed tool row.

    rows[0..N-1] are the revolute joints from base to tip; rows[N] is the
    fixed offset to the end effector and never carries a joint angle.
    """
    rows: tuple[DHRow, ...]
    variant: Optional[ArmVariant] = None

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def joint_count(self) -> int:
        return len(self.rows) - 1

    def __len__(self) -> int:
        return len(self.rows)

    def __getitem__(self, index: int) -> DHRow:
        return self.rows[index]

    def as_array(self) -> np.ndarray:
        """Return the table as an (rows, 4) array of [a, alpha, d, theta]."""
        return np.array(
            [[r.a, r.alpha, r.d, r.theta] for r in self.rows], dtype=np.float64
        )

    @classmethod
    def from_array(cls, table: np.ndarray, variant: Optional[ArmVariant] = None) -> DHTable:
        table = np.asarray(table, dtype=np.float64)
        if table.ndim != 2 or table.shape[1] != 4 or table.shape[0] < 2:
            raise InvalidConfiguration(
                f"DH table must have shape (rows >= 2, 4), got {table.shape}"
            )
        rows = tuple(DHRow(*(float(v) for v in row)) for row in table)
        return cls(rows=rows, variant=variant)


@dataclass(frozen=True)
class RowTemplate:
    """How one DH row is filled in from link lengths and joint angles.

    a_link / d_link index into the link lengths (None means 0).  joint
    indexes the joint angle added to theta_bias (None for the tool row).
    """
    a_link: Optional[int]
    alpha: float
    d_link: Optional[int]
    theta_bias: float
    joint: Optional[int]


@dataclass(frozen=True)
class ArmTopology:
    """Fixed kinematic template for one arm variant."""
    variant: ArmVariant
    link_count: int
    joint_count: int
    rows: tuple[RowTemplate, ...]
    # Links between the wrist centre and the tool point, all along tool z
    wrist_offset_links: tuple[int, ...]
    link_names: tuple[str, ...]

    def wrist_offset(self, link_lengths: Sequence[float]) -> float:
        return float(sum(link_lengths[i] for i in self.wrist_offset_links))


SIX_DOF_TOPOLOGY = ArmTopology(
    variant=ArmVariant.SIX_DOF,
    link_count=5,
    joint_count=6,
    rows=(
        # Base yaw
        RowTemplate(a_link=None, alpha=0.0,       d_link=0,    theta_bias=0.0,      joint=0),
        # Shoulder pitch, zero angle points the upper arm straight up
        RowTemplate(a_link=None, alpha=-HALF_PI,  d_link=None, theta_bias=-HALF_PI, joint=1),
        # Elbow pitch
        RowTemplate(a_link=1,    alpha=0.0,       d_link=None, theta_bias=HALF_PI,  joint=2),
        # Forearm roll
        RowTemplate(a_link=None, alpha=HALF_PI,   d_link=2,    theta_bias=0.0,      joint=3),
        # Wrist pitch
        RowTemplate(a_link=None, alpha=-HALF_PI,  d_link=None, theta_bias=0.0,      joint=4),
        # Wrist roll
        RowTemplate(a_link=None, alpha=HALF_PI,   d_link=3,    theta_bias=0.0,      joint=5),
        # Tool
        RowTemplate(a_link=None, alpha=0.0,       d_link=4,    theta_bias=0.0,      joint=None),
    ),
    wrist_offset_links=(3, 4),
    link_names=("L1", "L2", "L3", "L4", "L5"),
)

FIVE_DOF_TOPOLOGY = ArmTopology(
    variant=ArmVariant.FIVE_DOF,
    link_count=5,
    joint_count=5,
    rows=(
        # Base yaw
        RowTemplate(a_link=None, alpha=0.0,       d_link=0,    theta_bias=0.0,      joint=0),
        # Shoulder pitch
        RowTemplate(a_link=None, alpha=-HALF_PI,  d_link=None, theta_bias=-HALF_PI, joint=1),
        # Elbow pitch
        RowTemplate(a_link=1,    alpha=0.0,       d_link=None, theta_bias=0.0,      joint=2),
        # Wrist pitch
        RowTemplate(a_link=2,    alpha=0.0,       d_link=None, theta_bias=HALF_PI,  joint=3),
        # Tool roll
        RowTemplate(a_link=None, alpha=HALF_PI,   d_link=3,    theta_bias=0.0,      joint=4),
        # Tool
        RowTemplate(a_link=None, alpha=0.0,       d_link=4,    theta_bias=0.0,      joint=None),
    ),
    wrist_offset_links=(3, 4),
    link_names=("L1", "L2", "L3", "L4", "E"),
)

_TOPOLOGIES: dict[ArmVariant, ArmTopology] = {
    ArmVariant.SIX_DOF: SIX_DOF_TOPOLOGY,
    ArmVariant.FIVE_DOF: FIVE_DOF_TOPOLOGY,
}


def resolve_variant(variant: Union[ArmVariant, str]) -> ArmVariant:
    """Accept an ArmVariant or its string value ("5dof" / "6dof")."""
    if isinstance(variant, ArmVariant):
        return variant
    try:
        return ArmVariant(str(variant).lower())
    except ValueError:
        valid = ", ".join(v.value for v in ArmVariant)
        raise InvalidConfiguration(
            f"Unknown arm variant {variant!r}, expected one of: {valid}"
        ) from None


def get_topology(variant: Union[ArmVariant, str] = ArmVariant.SIX_DOF) -> ArmTopology:
    return _TOPOLOGIES[resolve_variant(variant)]


def validate_link_lengths(link_lengths: Sequence[float], topology: ArmTopology) -> tuple[float, ...]:
    """Check link lengths against a topology and return them as a float tuple."""
    lengths = np.asarray(link_lengths, dtype=np.float64).ravel()
    if lengths.shape[0] != topology.link_count:
        raise InvalidConfiguration(
            f"{topology.variant.value} arm needs {topology.link_count} link lengths, "
            f"got {lengths.shape[0]}"
        )
    if not np.all(np.isfinite(lengths)):
        raise InvalidConfiguration(f"Link lengths must be finite, got {lengths.tolist()}")
    if np.any(lengths < 0.0):
        raise InvalidConfiguration(f"Link lengths must be non-negative, got {lengths.tolist()}")
    return tuple(float(v) for v in lengths)


def validate_joint_angles(thetas: Sequence[float], topology: ArmTopology) -> np.ndarray:
    """Check joint angles against a topology and return them as an array."""
    angles = np.asarray(thetas, dtype=np.float64).ravel()
    if angles.shape[0] != topology.joint_count:
        raise InvalidConfiguration(
            f"{topology.variant.value} arm needs {topology.joint_count} joint angles, "
            f"got {angles.shape[0]}"
        )
    if not np.all(np.isfinite(angles)):
        raise InvalidConfiguration(f"Joint angles must be finite, got {angles.tolist()}")
    return angles


def build_dh_table(
    link_lengths: Sequence[float],
    thetas: Sequence[float],
    variant: Union[ArmVariant, str] = ArmVariant.SIX_DOF,
) -> DHTable:
    """Assemble the DH table for an arm variant.

    Args:
        link_lengths: Fixed link lengths, in the arm's length unit.
        thetas: Joint angles (radians), one per revolute joint.
        variant: Which arm template to use.

    Returns:
        DHTable with joint_count + 1 rows (the last one is the tool row).

    Raises:
        InvalidConfiguration: if the array sizes or values do not fit the
            template.
    """
    topology = get_topology(variant)
    lengths = validate_link_lengths(link_lengths, topology)
    angles = validate_joint_angles(thetas, topology)

    rows = []
    for tpl in topology.rows:
        a = lengths[tpl.a_link] if tpl.a_link is not None else 0.0
        d = lengths[tpl.d_link] if tpl.d_link is not None else 0.0
        theta = tpl.theta_bias
        if tpl.joint is not None:
            theta += float(angles[tpl.joint])
        rows.append(DHRow(a=a, alpha=tpl.alpha, d=d, theta=theta))
    return DHTable(rows=tuple(rows), variant=topology.variant)
