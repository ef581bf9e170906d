#!/usr/bin/env python3
"""Command-line entry point for armkin.

All angles on the command line are in degrees; lengths use the arm's
configured unit (centimetres for the default arm).

Usage examples
--------------

    # End-effector pose of the default 6-DOF arm at the zero configuration
    armkin fk 0 0 0 0 0 0

    # Closed-form IK, both elbow branches, as JSON
    armkin --json ik 20 10 15 0 180 0 --all-branches

    # 5-DOF arm with custom link lengths
    armkin --variant 5dof --links 5 30 20 7 5 jacobian 0 30 -45 10 0

    # Chessboard coverage of the configured arm
    armkin coverage --limits

    # Brute-force link-length search (one --range per link)
    armkin search --range 5 5 1 --range 20 40 5 --range 15 30 5 \\
                  --range 7 7 1 --range 5 5 1
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import textwrap

import numpy as np
from dotenv import load_dotenv

from armkin.config.arm_config import get_arm_config
from armkin.dynamics.gravity import GravityModel
from armkin.kinematics.arm import ArmModel
from armkin.kinematics.errors import KinematicsError, Unreachable
from armkin.kinematics.inverse import ElbowBranch
from armkin.messages import (
    CoverageReportMessage,
    GravityTorqueMessage,
    JacobianMessage,
    JointSolutionMessage,
    LinkSearchResultMessage,
    PoseMessage,
)
from armkin.utils.logging_config import setup_logging
from armkin.workspace.coverage import (
    candidate_link_lengths,
    check_link_lengths,
    chessboard_targets,
    link_length_range,
    search_link_lengths,
)
from armkin.workspace.sampling import JointLimits, workspace_layers

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_UNREACHABLE = 2


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="armkin",
        description="Kinematics and workspace analysis for 5/6-DOF DH arms.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            The arm defaults to the configured one (data/arm_config.json, or
            the file named by $ARMKIN_CONFIG).  --variant and --links
            override it for a single run.

            ik exits with status 2 when the target is outside the
            workspace.
        """),
    )

    arm_grp = p.add_argument_group("arm")
    arm_grp.add_argument(
        "--variant",
        choices=["5dof", "6dof"],
        help="Arm template (default: from config).",
    )
    arm_grp.add_argument(
        "--links",
        type=float,
        nargs=5,
        metavar="L",
        help="The five link lengths, base to tip (default: from config).",
    )

    out_grp = p.add_argument_group("output")
    out_grp.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON.",
    )
    out_grp.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    out_grp.add_argument(
        "--log-file",
        dest="log_file",
        help="Also write logs to this file (rotated).",
    )

    sub = p.add_subparsers(dest="command", required=True)

    fk = sub.add_parser("fk", help="Forward kinematics.")
    fk.add_argument("thetas", type=float, nargs="+", metavar="THETA",
                    help="Joint angles in degrees.")

    ik = sub.add_parser("ik", help="Closed-form inverse kinematics.")
    for name in ("x", "y", "z"):
        ik.add_argument(name, type=float, help=f"Target {name}.")
    for name in ("yaw", "pitch", "roll"):
        ik.add_argument(name, type=float, help=f"Target {name} in degrees.")
    ik.add_argument(
        "--elbow",
        choices=[b.value for b in ElbowBranch],
        default=ElbowBranch.DOWN.value,
        help="Elbow branch to return (default: down).",
    )
    ik.add_argument(
        "--all-branches",
        dest="all_branches",
        action="store_true",
        help="Return every real elbow branch.",
    )

    jac = sub.add_parser("jacobian", help="Geometric Jacobian.")
    jac.add_argument("thetas", type=float, nargs="+", metavar="THETA",
                     help="Joint angles in degrees.")

    grav = sub.add_parser("gravity", help="Static gravity torques.")
    grav.add_argument("thetas", type=float, nargs="+", metavar="THETA",
                      help="Joint angles in degrees.")

    ws = sub.add_parser("workspace", help="Sample the reachable workspace.")
    ws.add_argument("--coarse", type=float, help="Coarse grid step in degrees.")
    ws.add_argument("--fine", type=float, help="Fine grid step in degrees.")

    cov = sub.add_parser("coverage", help="Chessboard coverage of the arm.")
    _add_target_args(cov)

    search = sub.add_parser("search", help="Brute-force link-length search.")
    search.add_argument(
        "--range",
        dest="ranges",
        type=float,
        nargs=3,
        action="append",
        required=True,
        metavar=("START", "STOP", "STEP"),
        help="Inclusive range for one link; give one per link, base first.",
    )
    search.add_argument("--workers", type=int, help="Thread pool size.")
    _add_target_args(search)

    return p


def _add_target_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--side-length", dest="side_length", type=float,
                   help="Board side length.")
    p.add_argument("--start", type=float, nargs=3, metavar=("X", "Y", "Z"),
                   help="Board corner with the smallest x and y.")
    p.add_argument("--heights", type=float, nargs="+",
                   help="Piece heights above the board.")
    p.add_argument("--orientation", type=float, nargs=3,
                   metavar=("YAW", "PITCH", "ROLL"),
                   help="Tool orientation at every target, degrees.")
    p.add_argument("--limits", action="store_true",
                   help="Reject solutions outside the configured joint limits.")


# ── helpers ─────────────────────────────────────────────────────────────


def _resolve_arm(args: argparse.Namespace) -> ArmModel:
    arm = ArmModel.from_config(get_arm_config())
    if args.variant is None and args.links is None:
        return arm
    return ArmModel(
        link_lengths=tuple(args.links) if args.links is not None else arm.link_lengths,
        variant=args.variant or arm.variant,
        reach_tolerance=arm.reach_tolerance,
        plane_tolerance=arm.plane_tolerance,
    )


def _joint_limits(arm: ArmModel) -> JointLimits:
    pairs = get_arm_config().get("workspace", "joint_limits_deg")
    return JointLimits.from_degrees(pairs).for_joints(arm.n_joints)


def _targets(args: argparse.Namespace) -> tuple[np.ndarray, tuple[float, float, float]]:
    """Target cloud and orientation (radians) from options or config."""
    cov = get_arm_config().get("coverage")
    side = args.side_length if args.side_length is not None else cov["board_side_length"]
    start = args.start if args.start is not None else cov["start_point"]
    heights = args.heights if args.heights is not None else cov["piece_heights"]
    ypr_deg = args.orientation if args.orientation is not None else cov["orientation_ypr_deg"]
    targets = chessboard_targets(side, start, heights)
    yaw, pitch, roll = (float(v) for v in np.radians(ypr_deg))
    return targets, (yaw, pitch, roll)


def _fmt(values) -> str:
    return np.array2string(np.asarray(values, dtype=float), precision=4, suppress_small=True)


# ── subcommands ─────────────────────────────────────────────────────────


def _cmd_fk(arm: ArmModel, args: argparse.Namespace) -> int:
    q = np.radians(args.thetas)
    pose = arm.forward_kinematics(q)
    msg = PoseMessage.from_matrix(pose, arm.joint_coordinates(q))
    if args.json:
        print(msg.model_dump_json(indent=2))
        return EXIT_OK
    print(f"Position: ({msg.x:.4f}, {msg.y:.4f}, {msg.z:.4f})")
    print(f"Yaw/pitch/roll (deg): ({msg.yaw_deg:.4f}, {msg.pitch_deg:.4f}, {msg.roll_deg:.4f})")
    print("Pose:")
    print(_fmt(pose))
    return EXIT_OK


def _cmd_ik(arm: ArmModel, args: argparse.Namespace) -> int:
    target = [args.x, args.y, args.z, args.yaw, args.pitch, args.roll]
    yaw, pitch, roll = (float(v) for v in np.radians([args.yaw, args.pitch, args.roll]))
    try:
        if args.all_branches:
            solutions = arm.solve_ik_branches(args.x, args.y, args.z, yaw, pitch, roll)
        else:
            solutions = [
                arm.solve_ik(args.x, args.y, args.z, yaw, pitch, roll,
                             elbow=ElbowBranch(args.elbow))
            ]
    except Unreachable as e:
        logger.warning("Target not reachable: %s", e.reason)
        msg = JointSolutionMessage.from_unreachable(target, arm.variant.value, e.reason)
        if args.json:
            print(msg.model_dump_json(indent=2))
        else:
            print(f"Unreachable: {e.reason}")
        return EXIT_UNREACHABLE

    msg = JointSolutionMessage.from_solutions(target, arm.variant.value, solutions)
    if args.json:
        print(msg.model_dump_json(indent=2))
        return EXIT_OK
    for i, q_deg in enumerate(msg.joint_angles_deg):
        print(f"Solution {i + 1} (deg): {_fmt(q_deg)}")
    return EXIT_OK


def _cmd_jacobian(arm: ArmModel, args: argparse.Namespace) -> int:
    q = np.radians(args.thetas)
    J = arm.jacobian(q)
    msg = JacobianMessage.from_jacobian(q, J)
    if args.json:
        print(msg.model_dump_json(indent=2))
        return EXIT_OK
    print(f"Jacobian (rank {msg.rank}):")
    print(_fmt(J))
    return EXIT_OK


def _cmd_gravity(arm: ArmModel, args: argparse.Namespace) -> int:
    q = np.radians(args.thetas)
    model = GravityModel(arm, length_scale=get_arm_config().length_scale())
    tau = model.compute_gravity_torques(q)
    msg = GravityTorqueMessage.from_torques(q, tau, model.total_mass)
    if args.json:
        print(msg.model_dump_json(indent=2))
        return EXIT_OK
    print(f"Total mass: {msg.total_mass_kg:.4f} kg")
    print(f"Gravity torques (N·m): {_fmt(tau)}")
    return EXIT_OK


def _cmd_workspace(arm: ArmModel, args: argparse.Namespace) -> int:
    ws = get_arm_config().get("workspace")
    coarse = args.coarse if args.coarse is not None else ws["coarse_resolution_deg"]
    fine = args.fine if args.fine is not None else ws["fine_resolution_deg"]
    layers = workspace_layers(
        arm, np.radians(coarse), np.radians(fine),
        JointLimits.from_degrees(ws["joint_limits_deg"]).for_joints(arm.n_joints),
    )

    summary = {}
    for name, pts in layers.items():
        summary[name] = {
            "points": len(pts),
            "min": pts.min(axis=0).tolist() if len(pts) else [],
            "max": pts.max(axis=0).tolist() if len(pts) else [],
        }
    if args.json:
        print(json.dumps(summary, indent=2))
        return EXIT_OK
    for name, info in summary.items():
        print(f"{name:>8}: {info['points']} points, "
              f"min {_fmt(info['min'])}, max {_fmt(info['max'])}")
    return EXIT_OK


def _cmd_coverage(arm: ArmModel, args: argparse.Namespace) -> int:
    targets, orientation = _targets(args)
    report = check_link_lengths(
        arm.link_lengths, targets, orientation,
        variant=arm.variant,
        limits=_joint_limits(arm) if args.limits else None,
        angle_tolerance=get_arm_config().get("solver", "angle_tolerance"),
    )
    msg = CoverageReportMessage.from_report(report)
    if args.json:
        print(msg.model_dump_json(indent=2))
        return EXIT_OK
    print(f"Links {list(report.link_lengths)}: {msg.reachable_count}/{msg.target_count} "
          f"targets reachable ({report.coverage:.1%})")
    for point, reason in zip(msg.unreachable, msg.reasons):
        print(f"  miss {_fmt(point)}: {reason}")
    return EXIT_OK


def _cmd_search(arm: ArmModel, args: argparse.Namespace) -> int:
    if len(args.ranges) != arm.topology.link_count:
        logger.error("Expected %d --range options (one per link), got %d",
                     arm.topology.link_count, len(args.ranges))
        return EXIT_ERROR

    candidates = candidate_link_lengths(
        [link_length_range(start, stop, step) for start, stop, step in args.ranges]
    )
    targets, orientation = _targets(args)
    workers = args.workers if args.workers is not None else get_arm_config().get(
        "coverage", "max_workers")
    passing = search_link_lengths(
        candidates, targets, orientation,
        variant=arm.variant,
        limits=_joint_limits(arm) if args.limits else None,
        angle_tolerance=get_arm_config().get("solver", "angle_tolerance"),
        max_workers=workers,
    )
    msg = LinkSearchResultMessage.from_reports(len(candidates), len(targets), passing)
    if args.json:
        print(msg.model_dump_json(indent=2))
        return EXIT_OK
    print(f"{len(passing)} of {len(candidates)} candidates reach all {len(targets)} targets")
    for links in msg.passing:
        print(f"  {links}")
    return EXIT_OK


_COMMANDS = {
    "fk": _cmd_fk,
    "ik": _cmd_ik,
    "jacobian": _cmd_jacobian,
    "gravity": _cmd_gravity,
    "workspace": _cmd_workspace,
    "coverage": _cmd_coverage,
    "search": _cmd_search,
}


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args(argv)

    setup_logging(debug=args.debug, log_file=args.log_file)

    try:
        arm = _resolve_arm(args)
        return _COMMANDS[args.command](arm, args)
    except KinematicsError as e:
        logger.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
