"""Plan profiles: per waypoint-pair interpolation policies.

The planner hands every plan instruction to one of eight methods, chosen by
the kinds of the previous and target waypoints and by the motion type. State
waypoints are passed in as joint waypoints, so only joint and Cartesian
combinations exist here.
"""

import abc
from dataclasses import dataclass
from typing import Dict, Optional

from .step_generators import fixed_size_interpolate_state_waypoint, lvs_interpolate_state_waypoint
from .. import config
from ..core.instructions import CompositeInstruction, PlanInstruction
from ..core.manipulator_info import ManipulatorInfo
from ..core.waypoints import CartesianWaypoint, JointWaypoint


class PlanProfile(abc.ABC):
    """Interpolation policy for every (previous, target) waypoint pair."""

    @abc.abstractmethod
    def cart_cart_linear(self, prev: CartesianWaypoint, base: CartesianWaypoint,
                         base_instruction: PlanInstruction, request,
                         manip_info: ManipulatorInfo) -> CompositeInstruction: ...

    @abc.abstractmethod
    def cart_joint_linear(self, prev: CartesianWaypoint, base: JointWaypoint,
                          base_instruction: PlanInstruction, request,
                          manip_info: ManipulatorInfo) -> CompositeInstruction: ...

    @abc.abstractmethod
    def joint_cart_linear(self, prev: JointWaypoint, base: CartesianWaypoint,
                          base_instruction: PlanInstruction, request,
                          manip_info: ManipulatorInfo) -> CompositeInstruction: ...

    @abc.abstractmethod
    def joint_joint_linear(self, prev: JointWaypoint, base: JointWaypoint,
                           base_instruction: PlanInstruction, request,
                           manip_info: ManipulatorInfo) -> CompositeInstruction: ...

    @abc.abstractmethod
    def cart_cart_freespace(self, prev: CartesianWaypoint, base: CartesianWaypoint,
                            base_instruction: PlanInstruction, request,
                            manip_info: ManipulatorInfo) -> CompositeInstruction: ...

    @abc.abstractmethod
    def cart_joint_freespace(self, prev: CartesianWaypoint, base: JointWaypoint,
                             base_instruction: PlanInstruction, request,
                             manip_info: ManipulatorInfo) -> CompositeInstruction: ...

    @abc.abstractmethod
    def joint_cart_freespace(self, prev: JointWaypoint, base: CartesianWaypoint,
                             base_instruction: PlanInstruction, request,
                             manip_info: ManipulatorInfo) -> CompositeInstruction: ...

    @abc.abstractmethod
    def joint_joint_freespace(self, prev: JointWaypoint, base: JointWaypoint,
                              base_instruction: PlanInstruction, request,
                              manip_info: ManipulatorInfo) -> CompositeInstruction: ...


PlanProfileMap = Dict[str, Optional[PlanProfile]]


class _UniformPlanProfile(PlanProfile):
    """Routes all eight pairs to ``_interpolate(prev, base, ...)``."""

    @abc.abstractmethod
    def _interpolate(self, prev, base, base_instruction, request, manip_info) -> CompositeInstruction: ...

    def cart_cart_linear(self, prev, base, base_instruction, request, manip_info):
        return self._interpolate(prev, base, base_instruction, request, manip_info)

    def cart_joint_linear(self, prev, base, base_instruction, request, manip_info):
        return self._interpolate(prev, base, base_instruction, request, manip_info)

    def joint_cart_linear(self, prev, base, base_instruction, request, manip_info):
        return self._interpolate(prev, base, base_instruction, request, manip_info)

    def joint_joint_linear(self, prev, base, base_instruction, request, manip_info):
        return self._interpolate(prev, base, base_instruction, request, manip_info)

    def cart_cart_freespace(self, prev, base, base_instruction, request, manip_info):
        return self._interpolate(prev, base, base_instruction, request, manip_info)

    def cart_joint_freespace(self, prev, base, base_instruction, request, manip_info):
        return self._interpolate(prev, base, base_instruction, request, manip_info)

    def joint_cart_freespace(self, prev, base, base_instruction, request, manip_info):
        return self._interpolate(prev, base, base_instruction, request, manip_info)

    def joint_joint_freespace(self, prev, base, base_instruction, request, manip_info):
        return self._interpolate(prev, base, base_instruction, request, manip_info)


@dataclass
class LVSPlanProfile(_UniformPlanProfile):
    """Joint-space seed sized by longest valid segment bounds.

    Attributes:
        state_longest_valid_segment_length: Max joint-space distance per step (rad).
        translation_longest_valid_segment_length: Max TCP translation per step (m).
        rotation_longest_valid_segment_length: Max TCP rotation per step (rad).
        min_steps: Lower bound on samples per segment, start included.
    """
    state_longest_valid_segment_length: float = config.STATE_LONGEST_VALID_SEGMENT_LENGTH
    translation_longest_valid_segment_length: float = config.TRANSLATION_LONGEST_VALID_SEGMENT_LENGTH
    rotation_longest_valid_segment_length: float = config.ROTATION_LONGEST_VALID_SEGMENT_LENGTH
    min_steps: int = config.MIN_STEPS

    def _interpolate(self, prev, base, base_instruction, request, manip_info):
        return lvs_interpolate_state_waypoint(
            prev,
            base,
            base_instruction,
            request,
            manip_info,
            self.state_longest_valid_segment_length,
            self.translation_longest_valid_segment_length,
            self.rotation_longest_valid_segment_length,
            self.min_steps,
        )


@dataclass
class FixedSizePlanProfile(_UniformPlanProfile):
    """Joint-space seed with a fixed number of samples per motion type."""
    freespace_steps: int = config.FIXED_FREESPACE_STEPS
    linear_steps: int = config.FIXED_LINEAR_STEPS

    def _interpolate(self, prev, base, base_instruction, request, manip_info):
        steps = self.linear_steps if base_instruction.is_linear else self.freespace_steps
        return fixed_size_interpolate_state_waypoint(prev, base, base_instruction, request, manip_info, steps)
