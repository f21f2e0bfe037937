"""Waypoint value types.

A waypoint is one of exactly three kinds:

* ``JointWaypoint``: a target configuration in joint space.
* ``CartesianWaypoint``: a target pose of the tool center point in the world frame.
* ``StateWaypoint``: an already-resolved robot state. This is also the
  representation every seed trajectory is emitted in.

Every place that dispatches on waypoint kind goes through ``waypoint_kind``,
which rejects anything outside this closed set.
"""

import enum
from typing import Tuple, Union

import jax.numpy as jnp
import numpy as np
from jax import Array
from flax import struct

from ..errors import InvalidInputError
from ..transforms import se3


class WaypointKind(enum.Enum):
    JOINT = "joint"
    CARTESIAN = "cartesian"
    STATE = "state"


def _as_float_array(value):
    # Tracers and other pytree leaves pass through untouched
    if isinstance(value, (list, tuple, np.ndarray, float, int)):
        return jnp.asarray(value, dtype=jnp.float64)
    return value


def _check_joint_format(kind: str, joint_names: Tuple[str, ...], position) -> None:
    if len(set(joint_names)) != len(joint_names):
        raise InvalidInputError(f"{kind}: joint names must be unique, got {joint_names}")
    shape = getattr(position, "shape", None)
    if shape is None:
        return
    if len(shape) != 1:
        raise InvalidInputError(f"{kind}: position must be a vector, got shape {shape}")
    if shape[0] != len(joint_names):
        raise InvalidInputError(
            f"{kind}: {len(joint_names)} joint names but {shape[0]} positions"
        )


@struct.dataclass
class JointWaypoint:
    """Target joint configuration.

    Attributes:
        joint_names: Ordered joint names, parallel to ``position``.
        position: (num_joints,) joint values.
    """
    joint_names: Tuple[str, ...] = struct.field(pytree_node=False)
    position: Array

    def __post_init__(self):
        object.__setattr__(self, "joint_names", tuple(self.joint_names))
        object.__setattr__(self, "position", _as_float_array(self.position))
        _check_joint_format("JointWaypoint", self.joint_names, self.position)

    def __len__(self) -> int:
        return len(self.joint_names)


@struct.dataclass
class StateWaypoint:
    """Resolved robot state.

    Attributes:
        joint_names: Ordered joint names, parallel to ``position``.
        position: (num_joints,) joint values.
    """
    joint_names: Tuple[str, ...] = struct.field(pytree_node=False)
    position: Array

    def __post_init__(self):
        object.__setattr__(self, "joint_names", tuple(self.joint_names))
        object.__setattr__(self, "position", _as_float_array(self.position))
        _check_joint_format("StateWaypoint", self.joint_names, self.position)

    def __len__(self) -> int:
        return len(self.joint_names)


@struct.dataclass
class CartesianWaypoint:
    """Target tool pose expressed in the world frame.

    Attributes:
        transform: (4, 4) homogeneous transform.
    """
    transform: Array

    def __post_init__(self):
        object.__setattr__(self, "transform", _as_float_array(self.transform))
        shape = getattr(self.transform, "shape", None)
        if shape is not None and tuple(shape) != (4, 4):
            raise InvalidInputError(f"CartesianWaypoint: transform must have shape (4, 4), got {shape}")

    @classmethod
    def from_position_and_quaternion(cls, position, quaternion=(1.0, 0.0, 0.0, 0.0)) -> "CartesianWaypoint":
        """Build from a position and a (w, x, y, z) quaternion."""
        p = jnp.asarray(position, dtype=jnp.float64)
        q = jnp.asarray(quaternion, dtype=jnp.float64)
        return cls(se3.from_position_and_quaternion(p, q))

    @property
    def position(self) -> Array:
        return se3.get_position(self.transform)

    @property
    def rotation(self) -> Array:
        return se3.get_rotation(self.transform)


Waypoint = Union[JointWaypoint, CartesianWaypoint, StateWaypoint]


def waypoint_kind(waypoint) -> WaypointKind:
    """Classify a waypoint, rejecting anything that is not one of the three kinds."""
    if isinstance(waypoint, JointWaypoint):
        return WaypointKind.JOINT
    if isinstance(waypoint, CartesianWaypoint):
        return WaypointKind.CARTESIAN
    if isinstance(waypoint, StateWaypoint):
        return WaypointKind.STATE
    raise InvalidInputError(f"Unsupported waypoint type: {type(waypoint).__name__}")


def as_joint_waypoint(waypoint: Waypoint) -> Union[JointWaypoint, CartesianWaypoint]:
    """Downcast a state waypoint to the equivalent joint waypoint.

    Joint and Cartesian waypoints are returned unchanged.
    """
    kind = waypoint_kind(waypoint)
    if kind is WaypointKind.STATE:
        return JointWaypoint(waypoint.joint_names, waypoint.position)
    return waypoint


def check_joint_position_format(joint_names, waypoint: Union[JointWaypoint, StateWaypoint]) -> None:
    """Raise if a joint-space waypoint is not ordered like the kinematic chain."""
    if tuple(joint_names) != tuple(waypoint.joint_names):
        raise InvalidInputError(
            f"Waypoint joints {waypoint.joint_names} do not match kinematic joints {tuple(joint_names)}"
        )
