"""Manipulator selection metadata attached to instructions."""

from dataclasses import dataclass, fields
from typing import Optional, Union

import jax.numpy as jnp
from jax import Array

from ..errors import InvalidInputError

TcpSpec = Union[str, Array, None]


def _is_empty(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    return False


def _same(a, b) -> bool:
    if isinstance(a, str) or isinstance(b, str):
        return a == b
    a, b = jnp.asarray(a), jnp.asarray(b)
    return a.shape == b.shape and bool(jnp.allclose(a, b))


@dataclass(frozen=True, eq=False)
class ManipulatorInfo:
    """Which kinematic chain, IK solver and tool center point to plan with.

    Attributes:
        manipulator: Name of the kinematic chain registered in the environment.
        manipulator_ik_solver: Name of the IK solver variant, empty for the default.
        tcp: Tool center point, either a name known to the environment or a
             (4, 4) offset from the chain tip. Empty means no offset.
        working_frame: Reference frame of Cartesian targets, empty for world.
    """
    manipulator: str = ""
    manipulator_ik_solver: str = ""
    tcp: TcpSpec = None
    working_frame: str = ""

    def __eq__(self, other):
        if not isinstance(other, ManipulatorInfo):
            return NotImplemented
        for f in fields(self):
            mine, theirs = getattr(self, f.name), getattr(other, f.name)
            if _is_empty(mine) != _is_empty(theirs):
                return False
            if not _is_empty(mine) and not _same(mine, theirs):
                return False
        return True

    __hash__ = None

    @property
    def empty(self) -> bool:
        return self.manipulator == ""

    def combine(self, other: Optional["ManipulatorInfo"]) -> "ManipulatorInfo":
        """Merge with a more specific info.

        Empty fields of ``self`` are filled from ``other``. A field set to two
        different non-empty values is a conflict.

        Args:
            other: The more specific info, usually an instruction's.

        Returns:
            The combined ManipulatorInfo.

        Raises:
            InvalidInputError: if a field is set differently on both sides.
        """
        if other is None:
            return self

        merged = {}
        for f in fields(self):
            mine, theirs = getattr(self, f.name), getattr(other, f.name)
            if _is_empty(mine):
                merged[f.name] = theirs
            elif _is_empty(theirs) or _same(mine, theirs):
                merged[f.name] = mine
            else:
                raise InvalidInputError(
                    f"ManipulatorInfo conflict on '{f.name}': {mine!r} vs {theirs!r}"
                )
        return ManipulatorInfo(**merged)
