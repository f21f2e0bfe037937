"""Environment state snapshot and a registry-backed environment."""

import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Sequence

import jax.numpy as jnp
from jax import Array

from .interfaces import ForwardKinematics, InverseKinematics
from ..core.manipulator_info import ManipulatorInfo
from ..errors import InvalidInputError
from ..transforms import se3

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class EnvState:
    """Snapshot of the robot at planning time.

    Attributes:
        joint_values: Joint name to current position.
        link_transforms: Link name to (4, 4) world pose.
    """
    joint_values: Mapping[str, float] = field(default_factory=dict)
    link_transforms: Mapping[str, Array] = field(default_factory=dict)

    def get_joint_values(self, joint_names: Sequence[str]) -> Array:
        """Current positions of ``joint_names``, in that order."""
        missing = [name for name in joint_names if name not in self.joint_values]
        if missing:
            raise InvalidInputError(f"Environment state has no value for joints {missing}")
        return jnp.asarray([self.joint_values[name] for name in joint_names], dtype=jnp.float64)

    def get_link_transform(self, link_name: str) -> Array:
        try:
            return jnp.asarray(self.link_transforms[link_name], dtype=jnp.float64)
        except KeyError:
            raise InvalidInputError(f"Environment state has no transform for link '{link_name}'")


@dataclass
class _Manipulator:
    fwd_kin: ForwardKinematics
    inv_kin: Dict[str, InverseKinematics]
    base_transform: Array


class KinematicsEnvironment:
    """Environment that serves kinematics registered by manipulator name.

    Example:
        >>> env = KinematicsEnvironment()
        >>> env.add_manipulator("arm", chain)            # chain does both FK and IK
        >>> env.add_tcp("gripper", se3.from_position_and_rotation(p, R))
        >>> state = env.current_state({"joint1": 0.0, "joint2": 0.5})
    """

    def __init__(self):
        self._manipulators: Dict[str, _Manipulator] = {}
        self._tcps: Dict[str, Array] = {}

    def add_manipulator(
        self,
        name: str,
        fwd_kin: ForwardKinematics,
        inv_kin: Optional[InverseKinematics] = None,
        base_transform: Optional[Array] = None,
        ik_solvers: Optional[Mapping[str, InverseKinematics]] = None,
    ) -> None:
        """Register a kinematic chain.

        Args:
            name: Manipulator name used in ManipulatorInfo.
            fwd_kin: Forward kinematics of the chain.
            inv_kin: Default inverse kinematics. Defaults to ``fwd_kin`` when it
                     also implements InverseKinematics.
            base_transform: World pose of the chain's base link, identity if omitted.
            ik_solvers: Additional named IK solver variants.
        """
        if inv_kin is None:
            if not isinstance(fwd_kin, InverseKinematics):
                raise InvalidInputError(f"Manipulator '{name}' needs an inverse kinematics solver")
            inv_kin = fwd_kin

        solvers = {"": inv_kin}
        solvers.update(ik_solvers or {})
        base = se3.identity() if base_transform is None else jnp.asarray(base_transform, dtype=jnp.float64)
        self._manipulators[name] = _Manipulator(fwd_kin, solvers, base)
        logger.debug("Registered manipulator '%s' with joints %s", name, fwd_kin.joint_names)

    def add_tcp(self, name: str, transform: Array) -> None:
        self._tcps[name] = jnp.asarray(transform, dtype=jnp.float64)

    def _manipulator(self, name: str) -> _Manipulator:
        try:
            return self._manipulators[name]
        except KeyError:
            raise InvalidInputError(f"Unknown manipulator '{name}'")

    def get_fwd_kinematics(self, manipulator: str) -> ForwardKinematics:
        return self._manipulator(manipulator).fwd_kin

    def get_inv_kinematics(self, manipulator: str, ik_solver: str = "") -> InverseKinematics:
        solvers = self._manipulator(manipulator).inv_kin
        try:
            return solvers[ik_solver]
        except KeyError:
            raise InvalidInputError(f"Manipulator '{manipulator}' has no IK solver '{ik_solver}'")

    def find_tcp(self, manipulator_info: ManipulatorInfo) -> Array:
        tcp = manipulator_info.tcp
        if tcp is None or (isinstance(tcp, str) and tcp == ""):
            return se3.identity()
        if isinstance(tcp, str):
            try:
                return self._tcps[tcp]
            except KeyError:
                raise InvalidInputError(f"Unknown TCP '{tcp}'")
        tcp = jnp.asarray(tcp, dtype=jnp.float64)
        if tcp.shape != (4, 4):
            raise InvalidInputError(f"TCP transform must have shape (4, 4), got {tcp.shape}")
        return tcp

    def current_state(self, joint_values: Mapping[str, float]) -> EnvState:
        """Build a state snapshot holding the base link pose of every manipulator."""
        link_transforms = {}
        for manipulator in self._manipulators.values():
            link_transforms[manipulator.fwd_kin.base_link_name] = manipulator.base_transform
        return EnvState(dict(joint_values), link_transforms)
