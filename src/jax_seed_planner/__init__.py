"""
JAX Seed Planner: dense joint-space seed trajectories from sparse motion requests.

This library walks a tree of plan instructions and interpolates every motion
segment into a sequence of robot states, sizing each segment by translation,
rotation and joint-space distance. Kinematics, poses and trajectories are
JAX arrays throughout.
"""

import jax
jax.config.update("jax_enable_x64", True)

# Import core modules
from . import transforms
from . import core
from . import io
from . import kinematics
from . import planning

from .core import (
    CartesianWaypoint,
    CompositeInstruction,
    JointWaypoint,
    ManipulatorInfo,
    MoveInstruction,
    PlanInstruction,
    PlanInstructionType,
    StateWaypoint,
    StatusCode,
)
from .planning import PlannerRequest, PlannerResponse, SimpleMotionPlanner

__version__ = "0.1.0"
__all__ = [
    "transforms",
    "core",
    "io",
    "kinematics",
    "planning",
    "CartesianWaypoint",
    "CompositeInstruction",
    "JointWaypoint",
    "ManipulatorInfo",
    "MoveInstruction",
    "PlanInstruction",
    "PlanInstructionType",
    "StateWaypoint",
    "StatusCode",
    "PlannerRequest",
    "PlannerResponse",
    "SimpleMotionPlanner",
]
