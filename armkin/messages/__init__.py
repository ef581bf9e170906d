"""Pydantic schemas for kinematics results exchanged as JSON."""

from armkin.messages.pose import PoseMessage
from armkin.messages.joint_solution import JointSolutionMessage
from armkin.messages.jacobian import JacobianMessage
from armkin.messages.torque import GravityTorqueMessage
from armkin.messages.coverage import CoverageReportMessage, LinkSearchResultMessage
