"""Helpers shared by the step generators and the planner.

Covers joint-space interpolation, IK candidate disambiguation, step counting,
frame bookkeeping between world, kinematic base and TCP, and profile lookup.
"""

import logging
import math
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Tuple, TypeVar

import jax.numpy as jnp
from jax import Array

from ..config import DEFAULT_PROFILE_KEY
from ..core.instructions import (
    CompositeInstruction,
    MoveInstruction,
    MoveInstructionType,
    PlanInstruction,
)
from ..core.manipulator_info import ManipulatorInfo
from ..core.waypoints import JointWaypoint, StateWaypoint, check_joint_position_format
from ..errors import InvalidInputError, KinematicsError
from ..kinematics.interfaces import ForwardKinematics, InverseKinematics
from ..transforms import se3

logger = logging.getLogger(__name__)

P = TypeVar("P")


def interpolate(start: Array, end: Array, steps: int) -> Array:
    """
    Linearly interpolate between two joint configurations.

    Args:
        start: (dof,) first configuration
        end: (dof,) last configuration
        steps: number of samples, at least 1. A single sample is ``start``.

    Returns:
        (steps, dof) array whose first row is ``start`` and, for steps > 1,
        whose last row is ``end``.
    """
    if steps < 1:
        raise InvalidInputError(f"Interpolation needs at least one step, got {steps}")
    start = jnp.asarray(start, dtype=jnp.float64)
    end = jnp.asarray(end, dtype=jnp.float64)
    if steps == 1:
        return start[None]
    t = jnp.linspace(0.0, 1.0, steps)[:, None]
    return (1.0 - t) * start + t * end


def repeat_state(state: Array, steps: int) -> Array:
    """(steps, dof) array holding ``state`` in every row."""
    state = jnp.asarray(state, dtype=jnp.float64)
    return jnp.broadcast_to(state, (max(steps, 1),) + state.shape)


def closest_solution(candidates: Sequence[Array], reference: Array) -> Tuple[int, Array]:
    """Pick the candidate nearest to ``reference`` in joint space.

    Ties resolve to the lowest index.

    Returns:
        (index, solution)
    """
    if len(candidates) == 0:
        raise InvalidInputError("No candidate solutions to choose from")
    stacked = jnp.stack([jnp.asarray(c, dtype=jnp.float64) for c in candidates])
    distances = jnp.linalg.norm(stacked - jnp.asarray(reference, dtype=jnp.float64), axis=-1)
    index = int(jnp.argmin(distances))
    return index, stacked[index]


def closest_solution_pair(
    candidates_a: Sequence[Array], candidates_b: Sequence[Array]
) -> Tuple[Array, Array]:
    """Pick the pair (one from each set) with the smallest mutual joint distance.

    All pairs are searched; ties resolve to the first pair in (a, b) order.
    """
    if len(candidates_a) == 0 or len(candidates_b) == 0:
        raise InvalidInputError("No candidate solutions to choose from")
    A = jnp.stack([jnp.asarray(c, dtype=jnp.float64) for c in candidates_a])
    B = jnp.stack([jnp.asarray(c, dtype=jnp.float64) for c in candidates_b])
    distances = jnp.linalg.norm(A[:, None, :] - B[None, :, :], axis=-1)
    i, j = divmod(int(jnp.argmin(distances)), B.shape[0])
    return A[i], B[j]


def joint_distance(a: Array, b: Array) -> float:
    return float(jnp.linalg.norm(jnp.asarray(b) - jnp.asarray(a)))


def segment_steps(distance: float, longest_valid_segment_length: float) -> int:
    """Samples needed so no segment exceeds ``longest_valid_segment_length``."""
    if longest_valid_segment_length <= 0:
        raise InvalidInputError(
            f"Longest valid segment length must be positive, got {longest_valid_segment_length}"
        )
    return int(math.ceil(float(distance) / longest_valid_segment_length)) + 1


def resolve_move_type(base_instruction: PlanInstruction) -> MoveInstructionType:
    if base_instruction.is_linear:
        return MoveInstructionType.LINEAR
    if base_instruction.is_freespace:
        return MoveInstructionType.FREESPACE
    raise InvalidInputError(f"Unsupported move instruction type: {base_instruction.plan_type}")


def states_to_composite(
    states: Array,
    joint_names: Sequence[str],
    base_instruction: PlanInstruction,
) -> CompositeInstruction:
    """Wrap every row of ``states`` in a MoveInstruction tagged like ``base_instruction``."""
    move_type = resolve_move_type(base_instruction)
    moves = [
        MoveInstruction(
            StateWaypoint(joint_names, state),
            move_type,
            profile=base_instruction.profile,
            manipulator_info=base_instruction.manipulator_info,
            description=base_instruction.description,
        )
        for state in states
    ]
    return CompositeInstruction(
        moves,
        profile=base_instruction.profile,
        manipulator_info=base_instruction.manipulator_info,
    )


@dataclass(frozen=True, eq=False)
class SegmentKinematics:
    """Kinematics and frames resolved for one segment.

    Attributes:
        manipulator_info: Composite info combined with the instruction's.
        fwd_kin: Forward kinematics of the manipulator.
        inv_kin: Inverse kinematics, None when the segment does not need it.
        world_to_base: World pose of the kinematic base link.
        tcp: Tool center point offset from the chain tip.
    """
    manipulator_info: ManipulatorInfo
    fwd_kin: ForwardKinematics
    inv_kin: Optional[InverseKinematics]
    world_to_base: Array
    tcp: Array

    @classmethod
    def resolve(cls, request, manip_info: ManipulatorInfo, base_instruction: PlanInstruction,
                inverse: bool = True) -> "SegmentKinematics":
        if request.env is None:
            raise InvalidInputError("Planner request has no environment")
        if manip_info.empty and base_instruction.manipulator_info.empty:
            raise InvalidInputError("No manipulator specified by the composite or the instruction")
        mi = manip_info.combine(base_instruction.manipulator_info)

        fwd_kin = request.env.get_fwd_kinematics(mi.manipulator)
        inv_kin = None
        if inverse:
            inv_kin = request.env.get_inv_kinematics(mi.manipulator, mi.manipulator_ik_solver)
            if tuple(inv_kin.joint_names) != tuple(fwd_kin.joint_names):
                raise InvalidInputError("Forward and inverse kinematics joints are not ordered the same")

        base_link = inv_kin.base_link_name if inv_kin is not None else fwd_kin.base_link_name
        world_to_base = request.env_state.get_link_transform(base_link)
        return cls(mi, fwd_kin, inv_kin, world_to_base, request.env.find_tcp(mi))

    @property
    def joint_names(self) -> Tuple[str, ...]:
        return tuple(self.fwd_kin.joint_names)

    def joint_position(self, waypoint: JointWaypoint) -> Array:
        check_joint_position_format(self.joint_names, waypoint)
        return waypoint.position

    def base_pose(self, joint_values: Array) -> Array:
        """Chain tip pose in the kinematic base frame."""
        pose = self.fwd_kin.calc_fwd_kin(joint_values)
        if pose is None:
            raise KinematicsError("Failed to find forward kinematics solution")
        return pose

    def world_tool_pose(self, joint_values: Array) -> Array:
        """TCP pose in the world frame."""
        return se3.multiply(se3.multiply(self.world_to_base, self.base_pose(joint_values)), self.tcp)

    def to_base_frame(self, world_tool_pose: Array) -> Array:
        """Chain tip pose in the base frame for a TCP target given in the world frame."""
        tip_in_world = se3.multiply(world_tool_pose, se3.inverse(self.tcp))
        return se3.multiply(se3.inverse(self.world_to_base), tip_in_world)


def get_profile_string(profile: str, planner_name: str, profile_remapping: Mapping[str, Mapping[str, str]]) -> str:
    """Resolve the profile name an instruction should use with a given planner.

    An empty name means the default profile. A remapping entry for
    ``planner_name`` overrides the requested name.
    """
    result = profile or DEFAULT_PROFILE_KEY
    remap = profile_remapping.get(planner_name) if profile_remapping else None
    if remap and profile in remap:
        result = remap[profile]
    return result


def get_profile(name: str, profiles: Mapping[str, Optional[P]], default: P) -> Optional[P]:
    """Look up a profile by name, falling back to ``default`` when absent.

    A name explicitly mapped to None returns None.
    """
    if name in profiles:
        return profiles[name]
    logger.debug("Profile '%s' not found, using default", name)
    return default
