"""Seed planning: the simple planner, its profiles and step generators."""

from .profiles import FixedSizePlanProfile, LVSPlanProfile, PlanProfile, PlanProfileMap
from .simple_planner import SimpleMotionPlanner
from .step_generators import (
    fixed_size_interpolate_cart_state_waypoint,
    fixed_size_interpolate_state_waypoint,
    lvs_interpolate_cart_state_waypoint,
    lvs_interpolate_state_waypoint,
)
from .types import PlannerRequest, PlannerResponse, ProfileRemapping
from .utils import (
    SegmentKinematics,
    closest_solution,
    closest_solution_pair,
    get_profile,
    get_profile_string,
    interpolate,
)

__all__ = [
    "FixedSizePlanProfile",
    "LVSPlanProfile",
    "PlanProfile",
    "PlanProfileMap",
    "PlannerRequest",
    "PlannerResponse",
    "ProfileRemapping",
    "SegmentKinematics",
    "SimpleMotionPlanner",
    "closest_solution",
    "closest_solution_pair",
    "fixed_size_interpolate_cart_state_waypoint",
    "fixed_size_interpolate_state_waypoint",
    "get_profile",
    "get_profile_string",
    "interpolate",
    "lvs_interpolate_cart_state_waypoint",
    "lvs_interpolate_state_waypoint",
]
