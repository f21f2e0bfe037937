"""Longest valid segment (LVS) interpolation.

The number of samples for a segment is the largest of

* ``ceil(translation_distance / translation_lvs) + 1``
* ``ceil(rotation_distance / rotation_lvs) + 1``
* ``ceil(joint_distance / state_lvs) + 1`` (only when both ends are known in joint space)
* ``min_steps``

and the samples are spread linearly in joint space. The first sample is the
segment start, which the previous segment already emitted, so a segment of
``steps`` samples contributes ``steps - 1`` MoveInstructions.

Cartesian ends are resolved with inverse kinematics. When several solutions
exist the one closest in joint space to the known end wins. When inverse
kinematics finds nothing the segment degrades to a repeated known state so the
trajectory keeps its length.
"""

import logging

from ..utils import (
    SegmentKinematics,
    closest_solution,
    closest_solution_pair,
    interpolate,
    joint_distance,
    repeat_state,
    segment_steps,
    states_to_composite,
)
from ...core.instructions import CompositeInstruction, PlanInstruction
from ...core.manipulator_info import ManipulatorInfo
from ...core.waypoints import CartesianWaypoint, JointWaypoint, WaypointKind, as_joint_waypoint, waypoint_kind
from ...errors import InvalidInputError, SeedNotImplementedError
from ...transforms import se3

logger = logging.getLogger(__name__)


def lvs_interpolate_state_waypoint(
    start,
    end,
    base_instruction: PlanInstruction,
    request,
    manip_info: ManipulatorInfo,
    state_longest_valid_segment_length: float,
    translation_longest_valid_segment_length: float,
    rotation_longest_valid_segment_length: float,
    min_steps: int,
) -> CompositeInstruction:
    """Interpolate a segment into joint-space states with LVS step sizing.

    Args:
        start: Waypoint the segment starts from. State waypoints are treated as joint waypoints.
        end: Target waypoint of ``base_instruction``.
        base_instruction: The plan instruction being seeded; its motion type,
                          profile, description and manipulator info are copied
                          onto every emitted state.
        request: The planner request (environment, state snapshot).
        manip_info: Manipulator info of the enclosing composite.
        state_longest_valid_segment_length: Max joint-space distance per step.
        translation_longest_valid_segment_length: Max TCP translation per step.
        rotation_longest_valid_segment_length: Max TCP rotation per step.
        min_steps: Lower bound on the number of samples.

    Returns:
        CompositeInstruction of ``steps - 1`` MoveInstructions.
    """
    bounds = (
        state_longest_valid_segment_length,
        translation_longest_valid_segment_length,
        rotation_longest_valid_segment_length,
        min_steps,
    )
    start, end = as_joint_waypoint(start), as_joint_waypoint(end)
    start_kind, end_kind = waypoint_kind(start), waypoint_kind(end)

    if start_kind is WaypointKind.JOINT and end_kind is WaypointKind.JOINT:
        return _joint_to_joint(start, end, base_instruction, request, manip_info, *bounds)
    if start_kind is WaypointKind.JOINT and end_kind is WaypointKind.CARTESIAN:
        return _joint_to_cart(start, end, base_instruction, request, manip_info, *bounds)
    if start_kind is WaypointKind.CARTESIAN and end_kind is WaypointKind.JOINT:
        return _cart_to_joint(start, end, base_instruction, request, manip_info, *bounds)
    if start_kind is WaypointKind.CARTESIAN and end_kind is WaypointKind.CARTESIAN:
        return _cart_to_cart(start, end, base_instruction, request, manip_info, *bounds)
    raise InvalidInputError(f"Unsupported waypoint combination: {start_kind.value} -> {end_kind.value}")


def _cartesian_steps(p1, p2, translation_lvs: float, rotation_lvs: float) -> int:
    trans_steps = segment_steps(float(se3.translation_distance(p1, p2)), translation_lvs)
    rot_steps = segment_steps(float(se3.rotation_distance(p1, p2)), rotation_lvs)
    return max(trans_steps, rot_steps)


def _joint_to_joint(start: JointWaypoint, end: JointWaypoint, base_instruction, request, manip_info,
                    state_lvs, translation_lvs, rotation_lvs, min_steps) -> CompositeInstruction:
    kin = SegmentKinematics.resolve(request, manip_info, base_instruction, inverse=False)
    j1, j2 = kin.joint_position(start), kin.joint_position(end)

    p1 = kin.world_tool_pose(j1)
    p2 = kin.world_tool_pose(j2)

    steps = max(
        _cartesian_steps(p1, p2, translation_lvs, rotation_lvs),
        segment_steps(joint_distance(j1, j2), state_lvs),
        min_steps,
    )
    logger.debug("joint->joint segment: %d steps", steps)

    return states_to_composite(interpolate(j1, j2, steps)[1:], kin.joint_names, base_instruction)


def _joint_to_cart(start: JointWaypoint, end: CartesianWaypoint, base_instruction, request, manip_info,
                   state_lvs, translation_lvs, rotation_lvs, min_steps) -> CompositeInstruction:
    kin = SegmentKinematics.resolve(request, manip_info, base_instruction)
    j1 = kin.joint_position(start)

    # Compare tip poses in the kinematic base frame, without the TCP
    p1 = kin.base_pose(j1)
    p2 = kin.to_base_frame(end.transform)
    steps = _cartesian_steps(p1, p2, translation_lvs, rotation_lvs)

    candidates = kin.inv_kin.calc_inv_kin(p2, j1)
    j2 = None
    if len(candidates) > 0:
        _, j2 = closest_solution(candidates, j1)
        steps = max(steps, segment_steps(joint_distance(j1, j2), state_lvs))

    steps = max(steps, min_steps)

    if j2 is None:
        logger.warning("No IK solution for joint->cartesian segment, repeating start state %d times", steps - 1)
        states = repeat_state(j1, steps)
    else:
        logger.debug("joint->cartesian segment: %d steps", steps)
        states = interpolate(j1, j2, steps)
    return states_to_composite(states[1:], kin.joint_names, base_instruction)


def _cart_to_joint(start: CartesianWaypoint, end: JointWaypoint, base_instruction, request, manip_info,
                   state_lvs, translation_lvs, rotation_lvs, min_steps) -> CompositeInstruction:
    kin = SegmentKinematics.resolve(request, manip_info, base_instruction)
    j2 = kin.joint_position(end)

    p1 = kin.to_base_frame(start.transform)
    p2 = kin.base_pose(j2)
    steps = _cartesian_steps(p1, p2, translation_lvs, rotation_lvs)

    candidates = kin.inv_kin.calc_inv_kin(p1, j2)
    j1 = None
    if len(candidates) > 0:
        _, j1 = closest_solution(candidates, j2)
        steps = max(steps, segment_steps(joint_distance(j1, j2), state_lvs))

    steps = max(steps, min_steps)

    if j1 is None:
        logger.warning("No IK solution for cartesian->joint segment, repeating end state %d times", steps - 1)
        states = repeat_state(j2, steps)
    else:
        logger.debug("cartesian->joint segment: %d steps", steps)
        states = interpolate(j1, j2, steps)
    return states_to_composite(states[1:], kin.joint_names, base_instruction)


def _cart_to_cart(start: CartesianWaypoint, end: CartesianWaypoint, base_instruction, request, manip_info,
                  state_lvs, translation_lvs, rotation_lvs, min_steps) -> CompositeInstruction:
    kin = SegmentKinematics.resolve(request, manip_info, base_instruction)
    seed = request.env_state.get_joint_values(kin.inv_kin.joint_names)

    p1 = kin.to_base_frame(start.transform)
    p2 = kin.to_base_frame(end.transform)
    candidates_1 = kin.inv_kin.calc_inv_kin(p1, seed)
    candidates_2 = kin.inv_kin.calc_inv_kin(p2, seed)

    steps = _cartesian_steps(p1, p2, translation_lvs, rotation_lvs)

    j1 = j2 = None
    found_1, found_2 = len(candidates_1) > 0, len(candidates_2) > 0
    if found_1 and found_2:
        j1, j2 = closest_solution_pair(candidates_1, candidates_2)
        steps = max(steps, segment_steps(joint_distance(j1, j2), state_lvs))
    elif found_1:
        _, j1 = closest_solution(candidates_1, seed)
    elif found_2:
        _, j2 = closest_solution(candidates_2, seed)

    steps = max(steps, min_steps)

    if found_1 and found_2:
        logger.debug("cartesian->cartesian segment: %d steps", steps)
        states = interpolate(j1, j2, steps)
    elif found_1:
        logger.warning("No IK solution for segment end, repeating start solution %d times", steps - 1)
        states = repeat_state(j1, steps)
    elif found_2:
        logger.warning("No IK solution for segment start, repeating end solution %d times", steps - 1)
        states = repeat_state(j2, steps)
    else:
        logger.warning("No IK solution for either segment end, repeating IK seed %d times", steps - 1)
        states = repeat_state(seed, steps)
    return states_to_composite(states[1:], kin.inv_kin.joint_names, base_instruction)


def lvs_interpolate_cart_state_waypoint(
    start,
    end,
    base_instruction: PlanInstruction,
    request,
    manip_info: ManipulatorInfo,
    state_longest_valid_segment_length: float,
    translation_longest_valid_segment_length: float,
    rotation_longest_valid_segment_length: float,
    min_steps: int,
) -> CompositeInstruction:
    """Interpolate a segment into Cartesian-space states with LVS step sizing.

    No waypoint combination has a Cartesian-space seed yet. The waypoint kinds
    are still validated so unsupported input is reported as such.

    Raises:
        SeedNotImplementedError: for every joint/cartesian combination.
    """
    start_kind = waypoint_kind(as_joint_waypoint(start))
    end_kind = waypoint_kind(as_joint_waypoint(end))
    raise SeedNotImplementedError(
        f"Cartesian-space LVS seed for {start_kind.value} -> {end_kind.value} is not implemented"
    )
