"""Interpolation with a caller-chosen number of samples.

Same joint-space interpolation and IK disambiguation as the LVS generator,
without distance bounds: a segment of ``steps`` samples always contributes
``steps - 1`` MoveInstructions.
"""

import logging

from ..utils import (
    SegmentKinematics,
    closest_solution,
    closest_solution_pair,
    interpolate,
    repeat_state,
    states_to_composite,
)
from ...core.instructions import CompositeInstruction, PlanInstruction
from ...core.manipulator_info import ManipulatorInfo
from ...core.waypoints import WaypointKind, as_joint_waypoint, waypoint_kind
from ...errors import InvalidInputError, SeedNotImplementedError

logger = logging.getLogger(__name__)


def fixed_size_interpolate_state_waypoint(
    start,
    end,
    base_instruction: PlanInstruction,
    request,
    manip_info: ManipulatorInfo,
    steps: int,
) -> CompositeInstruction:
    """Interpolate a segment into ``steps`` joint-space samples.

    Args:
        start: Waypoint the segment starts from.
        end: Target waypoint of ``base_instruction``.
        base_instruction: The plan instruction being seeded.
        request: The planner request.
        manip_info: Manipulator info of the enclosing composite.
        steps: Number of samples including the start, floored at 1.

    Returns:
        CompositeInstruction of ``steps - 1`` MoveInstructions.
    """
    steps = max(int(steps), 1)
    start, end = as_joint_waypoint(start), as_joint_waypoint(end)
    start_kind, end_kind = waypoint_kind(start), waypoint_kind(end)

    if start_kind is WaypointKind.JOINT and end_kind is WaypointKind.JOINT:
        kin = SegmentKinematics.resolve(request, manip_info, base_instruction, inverse=False)
        states = interpolate(kin.joint_position(start), kin.joint_position(end), steps)

    elif start_kind is WaypointKind.JOINT and end_kind is WaypointKind.CARTESIAN:
        kin = SegmentKinematics.resolve(request, manip_info, base_instruction)
        j1 = kin.joint_position(start)
        candidates = kin.inv_kin.calc_inv_kin(kin.to_base_frame(end.transform), j1)
        if len(candidates) > 0:
            states = interpolate(j1, closest_solution(candidates, j1)[1], steps)
        else:
            logger.warning("No IK solution for joint->cartesian segment, repeating start state")
            states = repeat_state(j1, steps)

    elif start_kind is WaypointKind.CARTESIAN and end_kind is WaypointKind.JOINT:
        kin = SegmentKinematics.resolve(request, manip_info, base_instruction)
        j2 = kin.joint_position(end)
        candidates = kin.inv_kin.calc_inv_kin(kin.to_base_frame(start.transform), j2)
        if len(candidates) > 0:
            states = interpolate(closest_solution(candidates, j2)[1], j2, steps)
        else:
            logger.warning("No IK solution for cartesian->joint segment, repeating end state")
            states = repeat_state(j2, steps)

    elif start_kind is WaypointKind.CARTESIAN and end_kind is WaypointKind.CARTESIAN:
        kin = SegmentKinematics.resolve(request, manip_info, base_instruction)
        seed = request.env_state.get_joint_values(kin.inv_kin.joint_names)
        candidates_1 = kin.inv_kin.calc_inv_kin(kin.to_base_frame(start.transform), seed)
        candidates_2 = kin.inv_kin.calc_inv_kin(kin.to_base_frame(end.transform), seed)
        if len(candidates_1) > 0 and len(candidates_2) > 0:
            states = interpolate(*closest_solution_pair(candidates_1, candidates_2), steps)
        elif len(candidates_1) > 0:
            logger.warning("No IK solution for segment end, repeating start solution")
            states = repeat_state(closest_solution(candidates_1, seed)[1], steps)
        elif len(candidates_2) > 0:
            logger.warning("No IK solution for segment start, repeating end solution")
            states = repeat_state(closest_solution(candidates_2, seed)[1], steps)
        else:
            logger.warning("No IK solution for either segment end, repeating IK seed")
            states = repeat_state(seed, steps)

    else:
        raise InvalidInputError(f"Unsupported waypoint combination: {start_kind.value} -> {end_kind.value}")

    return states_to_composite(states[1:], kin.joint_names, base_instruction)


def fixed_size_interpolate_cart_state_waypoint(
    start,
    end,
    base_instruction: PlanInstruction,
    request,
    manip_info: ManipulatorInfo,
    steps: int,
) -> CompositeInstruction:
    """Interpolate a segment into ``steps`` Cartesian-space samples.

    Raises:
        SeedNotImplementedError: for every joint/cartesian combination.
    """
    start_kind = waypoint_kind(as_joint_waypoint(start))
    end_kind = waypoint_kind(as_joint_waypoint(end))
    raise SeedNotImplementedError(
        f"Cartesian-space fixed-size seed for {start_kind.value} -> {end_kind.value} is not implemented"
    )
