"""Interfaces the planner consumes from kinematics and environment providers.

Any object with the right shape satisfies these protocols; the chain
kinematics in this package is one implementation.
"""

from typing import Optional, Protocol, Sequence, Tuple, runtime_checkable

from jax import Array

from ..core.manipulator_info import ManipulatorInfo


@runtime_checkable
class ForwardKinematics(Protocol):
    """Joint configuration to tip pose, in the kinematic base frame."""

    @property
    def joint_names(self) -> Tuple[str, ...]: ...

    @property
    def num_joints(self) -> int: ...

    @property
    def base_link_name(self) -> str: ...

    def calc_fwd_kin(self, joint_values: Array) -> Optional[Array]:
        """Return the (4, 4) tip pose, or None if it cannot be computed."""
        ...


@runtime_checkable
class InverseKinematics(Protocol):
    """Tip pose in the kinematic base frame to candidate joint configurations."""

    @property
    def joint_names(self) -> Tuple[str, ...]: ...

    @property
    def num_joints(self) -> int: ...

    @property
    def base_link_name(self) -> str: ...

    def calc_inv_kin(self, pose: Array, seed: Array) -> Sequence[Array]:
        """Return every candidate solution found; empty when there is none."""
        ...


@runtime_checkable
class Environment(Protocol):
    """Provides kinematics per manipulator and tool center point offsets."""

    def get_fwd_kinematics(self, manipulator: str) -> ForwardKinematics: ...

    def get_inv_kinematics(self, manipulator: str, ik_solver: str = "") -> InverseKinematics: ...

    def find_tcp(self, manipulator_info: ManipulatorInfo) -> Array:
        """Return the (4, 4) TCP offset from the chain tip."""
        ...
