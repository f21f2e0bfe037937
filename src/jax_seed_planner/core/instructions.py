"""Instruction tree value types.

A motion request is a ``CompositeInstruction``: an ordered, nestable sequence
of ``PlanInstruction`` (requested motion), ``MoveInstruction`` (resolved state)
and further composites. Sequence order is temporal order. All types here are
immutable; "mutating" helpers return new values.
"""

import enum
from dataclasses import dataclass, field, replace
from typing import Iterator, List, Optional, Tuple, Union

from .manipulator_info import ManipulatorInfo
from .waypoints import CartesianWaypoint, StateWaypoint, Waypoint, waypoint_kind
from ..config import DEFAULT_PROFILE_KEY
from ..errors import InvalidInputError


class PlanInstructionType(enum.Enum):
    START = "start"
    LINEAR = "linear"
    FREESPACE = "freespace"


class MoveInstructionType(enum.Enum):
    START = "start"
    LINEAR = "linear"
    FREESPACE = "freespace"


class CompositeInstructionOrder(enum.Enum):
    ORDERED = "ordered"
    UNORDERED = "unordered"
    ORDERED_AND_REVERABLE = "ordered_and_reverable"


@dataclass(frozen=True, eq=False)
class PlanInstruction:
    """A requested motion to a target waypoint."""
    waypoint: Waypoint
    plan_type: PlanInstructionType
    profile: str = DEFAULT_PROFILE_KEY
    manipulator_info: ManipulatorInfo = field(default_factory=ManipulatorInfo)
    description: str = ""

    def __post_init__(self):
        waypoint_kind(self.waypoint)
        if not isinstance(self.plan_type, PlanInstructionType):
            raise InvalidInputError(f"Unsupported plan instruction type: {self.plan_type!r}")

    @property
    def is_start(self) -> bool:
        return self.plan_type is PlanInstructionType.START

    @property
    def is_linear(self) -> bool:
        return self.plan_type is PlanInstructionType.LINEAR

    @property
    def is_freespace(self) -> bool:
        return self.plan_type is PlanInstructionType.FREESPACE


@dataclass(frozen=True, eq=False)
class MoveInstruction:
    """A single resolved trajectory state.

    The waypoint is a StateWaypoint; Cartesian waypoints are reserved for
    Cartesian-space seeds.
    """
    waypoint: Union[StateWaypoint, CartesianWaypoint]
    move_type: MoveInstructionType
    profile: str = DEFAULT_PROFILE_KEY
    manipulator_info: ManipulatorInfo = field(default_factory=ManipulatorInfo)
    description: str = ""

    def __post_init__(self):
        if not isinstance(self.waypoint, (StateWaypoint, CartesianWaypoint)):
            raise InvalidInputError(
                f"MoveInstruction requires a state or cartesian waypoint, got {type(self.waypoint).__name__}"
            )


@dataclass(frozen=True, eq=False)
class CompositeInstruction:
    """Ordered, nestable sequence of instructions.

    Attributes:
        instructions: Child instructions in temporal order.
        profile: Profile name of the composite.
        order: Ordering mode of the children.
        manipulator_info: Manipulator shared by the children unless they override it.
        start_instruction: Optional instruction supplying the initial waypoint.
    """
    instructions: Tuple["Instruction", ...] = ()
    profile: str = DEFAULT_PROFILE_KEY
    order: CompositeInstructionOrder = CompositeInstructionOrder.ORDERED
    manipulator_info: ManipulatorInfo = field(default_factory=ManipulatorInfo)
    start_instruction: Optional[Union[PlanInstruction, MoveInstruction]] = None

    def __post_init__(self):
        object.__setattr__(self, "instructions", tuple(self.instructions))
        for instruction in self.instructions:
            if not isinstance(instruction, (PlanInstruction, MoveInstruction, CompositeInstruction)):
                raise InvalidInputError(f"Unsupported instruction type: {type(instruction).__name__}")

    def __len__(self) -> int:
        return len(self.instructions)

    def __iter__(self) -> Iterator["Instruction"]:
        return iter(self.instructions)

    def __getitem__(self, index):
        return self.instructions[index]

    @property
    def empty(self) -> bool:
        return len(self.instructions) == 0

    @property
    def has_start_instruction(self) -> bool:
        return self.start_instruction is not None

    def with_start_instruction(self, instruction) -> "CompositeInstruction":
        return replace(self, start_instruction=instruction)

    def with_instructions(self, instructions) -> "CompositeInstruction":
        return replace(self, instructions=tuple(instructions))

    def append(self, instruction) -> "CompositeInstruction":
        return replace(self, instructions=self.instructions + (instruction,))

    def flatten(self) -> List[Union[PlanInstruction, MoveInstruction]]:
        """Depth-first list of leaf instructions, start instruction first."""
        leaves = [self.start_instruction] if self.start_instruction is not None else []
        for instruction in self.instructions:
            if isinstance(instruction, CompositeInstruction):
                leaves.extend(instruction.flatten())
            else:
                leaves.append(instruction)
        return leaves


Instruction = Union[PlanInstruction, MoveInstruction, CompositeInstruction]
