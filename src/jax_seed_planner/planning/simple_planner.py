"""The simple planner: assigns an initial trajectory to every plan instruction.

It walks the instruction tree depth first, keeps track of the waypoint the
robot will be at, and asks the instruction's profile to interpolate from there
to each plan instruction's target. The result mirrors the input tree with
every plan instruction replaced by a composite of resolved states. It never
looks at an existing seed, so it is suited to initializing one.
"""

import logging
from types import MappingProxyType
from typing import Callable, Dict, Mapping, Optional, Tuple

from .profiles import LVSPlanProfile, PlanProfile
from .types import PlannerRequest, PlannerResponse
from .utils import get_profile, get_profile_string
from .. import config
from ..core.instructions import (
    CompositeInstruction,
    MoveInstruction,
    MoveInstructionType,
    PlanInstruction,
)
from ..core.status import PlannerStatus, StatusCode
from ..core.waypoints import (
    StateWaypoint,
    Waypoint,
    WaypointKind,
    as_joint_waypoint,
    check_joint_position_format,
    waypoint_kind,
)
from ..errors import InvalidInputError, PlanningError
from ..kinematics.interfaces import ForwardKinematics

logger = logging.getLogger(__name__)

_J, _C = WaypointKind.JOINT, WaypointKind.CARTESIAN


class SimpleMotionPlanner:
    """Seed generator over an instruction tree.

    Args:
        name: Planner name, the key of this planner's profile remapping.
        plan_profiles: Profile name to profile. The default profile key maps to
                       an ``LVSPlanProfile`` unless provided.
    """

    def __init__(self, name: str = config.PLANNER_NAME,
                 plan_profiles: Optional[Mapping[str, Optional[PlanProfile]]] = None):
        self._name = name
        self._plan_profiles: Dict[str, Optional[PlanProfile]] = dict(plan_profiles or {})
        self._plan_profiles.setdefault(config.DEFAULT_PROFILE_KEY, LVSPlanProfile())

    @property
    def name(self) -> str:
        return self._name

    @property
    def plan_profiles(self) -> Mapping[str, Optional[PlanProfile]]:
        return MappingProxyType(self._plan_profiles)

    def register_profile(self, name: str, profile: Optional[PlanProfile]) -> None:
        """Add or replace a profile. Not safe while ``solve`` runs on another thread."""
        self._plan_profiles[name] = profile

    def terminate(self) -> bool:
        logger.warning("Termination of ongoing planning is not implemented yet")
        return False

    def clear(self) -> None:
        pass

    def clone(self) -> "SimpleMotionPlanner":
        return SimpleMotionPlanner(self._name, self._plan_profiles)

    def _status(self, code: StatusCode, detail: str = "") -> PlannerStatus:
        return PlannerStatus(code, planner=self._name, detail=detail)

    def solve(self, request: PlannerRequest) -> PlannerResponse:
        """Generate the seed for ``request``.

        Returns:
            A response whose results hold the seed and whose status is
            ``SOLUTION_FOUND``, or a response without results and status
            ``ERROR_INVALID_INPUT``. Errors never propagate out of this call.
        """
        problem = self._check_user_input(request)
        if problem:
            logger.error("%s: %s", self._name, problem)
            return PlannerResponse(self._status(StatusCode.ERROR_INVALID_INPUT, problem))

        try:
            manipulator = request.instructions.manipulator_info.manipulator
            fwd_kin = request.env.get_fwd_kinematics(manipulator)
            start_instruction = self.get_start_instruction(request, fwd_kin)
            seed, _ = self.process_composite_instruction(
                request.instructions, start_instruction.waypoint, request
            )
        except PlanningError as e:
            logger.error("%s failed to generate problem: %s", self._name, e)
            return PlannerResponse(self._status(StatusCode.ERROR_INVALID_INPUT, str(e)))
        except Exception as e:
            logger.exception("%s failed to generate problem", self._name)
            return PlannerResponse(self._status(StatusCode.ERROR_INVALID_INPUT, f"{type(e).__name__}: {e}"))

        return PlannerResponse(self._status(StatusCode.SOLUTION_FOUND), seed.with_start_instruction(start_instruction))

    def get_start_instruction(self, request: PlannerRequest, fwd_kin: ForwardKinematics) -> MoveInstruction:
        """Resolve the state planning starts from.

        A joint start is used as is, a state start passes through, and a
        Cartesian start is replaced by the current robot state: the trajectory
        has to begin where the robot actually is. Without a start instruction
        the current robot state is used.
        """
        instructions = request.instructions
        if not instructions.has_start_instruction:
            current = request.env_state.get_joint_values(fwd_kin.joint_names)
            return MoveInstruction(StateWaypoint(fwd_kin.joint_names, current), MoveInstructionType.START)

        start = instructions.start_instruction
        if not isinstance(start, PlanInstruction) or not start.is_start:
            raise InvalidInputError("Start instruction must be a plan instruction of type START")

        kind = waypoint_kind(start.waypoint)
        if kind is WaypointKind.JOINT:
            check_joint_position_format(fwd_kin.joint_names, start.waypoint)
            waypoint = StateWaypoint(start.waypoint.joint_names, start.waypoint.position)
        elif kind is WaypointKind.CARTESIAN:
            waypoint = StateWaypoint(fwd_kin.joint_names, request.env_state.get_joint_values(fwd_kin.joint_names))
        elif kind is WaypointKind.STATE:
            check_joint_position_format(fwd_kin.joint_names, start.waypoint)
            waypoint = start.waypoint
        else:
            raise InvalidInputError(f"Unsupported start waypoint kind: {kind}")

        return MoveInstruction(
            waypoint,
            MoveInstructionType.START,
            profile=start.profile,
            manipulator_info=start.manipulator_info,
            description=start.description,
        )

    def process_composite_instruction(
        self, instructions: CompositeInstruction, start_waypoint: Waypoint, request: PlannerRequest
    ) -> Tuple[CompositeInstruction, Waypoint]:
        """Seed one composite.

        Args:
            instructions: Composite to seed.
            start_waypoint: Waypoint the robot is at before the first child.
            request: The planner request.

        Returns:
            The seeded composite and the waypoint the robot is at after it.
        """
        children = []
        for instruction in instructions:
            if isinstance(instruction, CompositeInstruction):
                child, start_waypoint = self.process_composite_instruction(instruction, start_waypoint, request)
                children.append(child)
            elif isinstance(instruction, PlanInstruction):
                children.append(self._process_plan_instruction(instruction, start_waypoint, request))
                # Continue from the nominal target, not the last interpolated state
                start_waypoint = instruction.waypoint
            elif isinstance(instruction, MoveInstruction):
                children.append(instruction)
                start_waypoint = instruction.waypoint
            else:
                raise InvalidInputError(f"Unsupported instruction type: {type(instruction).__name__}")

        seed = CompositeInstruction(
            children,
            profile=instructions.profile,
            order=instructions.order,
            manipulator_info=instructions.manipulator_info,
        )
        return seed, start_waypoint

    def _process_plan_instruction(
        self, plan_instruction: PlanInstruction, start_waypoint: Waypoint, request: PlannerRequest
    ) -> CompositeInstruction:
        profile_name = get_profile_string(plan_instruction.profile, self._name, request.plan_profile_remapping)
        profile = get_profile(profile_name, self._plan_profiles, LVSPlanProfile())
        if profile is None:
            raise InvalidInputError(f"Invalid start profile '{profile_name}'")

        prev = as_joint_waypoint(start_waypoint)
        base = as_joint_waypoint(plan_instruction.waypoint)
        step = self._select_step(profile, plan_instruction, waypoint_kind(prev), waypoint_kind(base))
        return step(prev, base, plan_instruction, request, request.instructions.manipulator_info)

    @staticmethod
    def _select_step(profile: PlanProfile, plan_instruction: PlanInstruction,
                     prev_kind: WaypointKind, base_kind: WaypointKind) -> Callable[..., CompositeInstruction]:
        if plan_instruction.is_linear:
            steps = {
                (_C, _C): profile.cart_cart_linear,
                (_C, _J): profile.cart_joint_linear,
                (_J, _C): profile.joint_cart_linear,
                (_J, _J): profile.joint_joint_linear,
            }
        elif plan_instruction.is_freespace:
            steps = {
                (_C, _C): profile.cart_cart_freespace,
                (_C, _J): profile.cart_joint_freespace,
                (_J, _C): profile.joint_cart_freespace,
                (_J, _J): profile.joint_joint_freespace,
            }
        else:
            raise InvalidInputError(f"Unsupported plan instruction type: {plan_instruction.plan_type}")

        try:
            return steps[(prev_kind, base_kind)]
        except KeyError:
            raise InvalidInputError(f"Unsupported waypoints provided: {prev_kind} -> {base_kind}")

    def _check_user_input(self, request: PlannerRequest) -> str:
        if request.env is None:
            return "env is a required parameter and has not been set"
        if request.instructions is None or request.instructions.empty:
            return "at least one instruction is required"
        return ""
