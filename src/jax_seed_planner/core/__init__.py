"""Core data structures: waypoints, instructions, manipulator info, status codes
and the robot model used by the chain kinematics.
"""

from .instructions import (
    CompositeInstruction,
    CompositeInstructionOrder,
    Instruction,
    MoveInstruction,
    MoveInstructionType,
    PlanInstruction,
    PlanInstructionType,
)
from .manipulator_info import ManipulatorInfo
from .robot_model import RobotModel
from .status import PlannerStatus, StatusCode
from .waypoints import (
    CartesianWaypoint,
    JointWaypoint,
    StateWaypoint,
    Waypoint,
    WaypointKind,
    as_joint_waypoint,
    check_joint_position_format,
    waypoint_kind,
)

__all__ = [
    "CartesianWaypoint",
    "CompositeInstruction",
    "CompositeInstructionOrder",
    "Instruction",
    "JointWaypoint",
    "ManipulatorInfo",
    "MoveInstruction",
    "MoveInstructionType",
    "PlanInstruction",
    "PlanInstructionType",
    "PlannerStatus",
    "RobotModel",
    "StateWaypoint",
    "StatusCode",
    "Waypoint",
    "WaypointKind",
    "as_joint_waypoint",
    "check_joint_position_format",
    "waypoint_kind",
]
