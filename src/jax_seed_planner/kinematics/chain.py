"""Forward kinematics, Jacobian and damped least squares IK for a RobotModel.

``ChainKinematics`` wraps these functions into the forward/inverse
kinematics interfaces consumed by the planner.
"""

import logging
from functools import partial
from typing import Dict, List, Optional, Tuple

import jax
import jax.numpy as jnp
from jax import Array

from .. import config
from ..core.robot_model import RobotModel
from ..transforms import se3, so3

logger = logging.getLogger(__name__)


def forward_kinematics(robot: RobotModel, q: Array) -> Dict[str, Array]:
    """Compute forward kinematics for all links in the robot.

    Args:
        robot: RobotModel containing the robot's kinematic structure
        q: Joint angles array of shape (num_dof,) for actuated joints only

    Returns:
        Dictionary mapping link names to their 4x4 SE(3) world poses
    """
    world_transforms = forward_kinematics_world(robot, q)
    return {name: world_transforms[i] for i, name in enumerate(robot.link_names)}


@jax.jit
def forward_kinematics_world(robot: RobotModel, q: Array) -> Array:
    """World transforms of every link, shape (num_links, 4, 4)."""
    num_links = len(robot.link_names)

    # Scatter actuated joint values onto the links they drive; fixed links stay at zero
    q_full = jnp.zeros(num_links, dtype=q.dtype).at[robot.actuated_joint_to_link_idx].set(q)
    world_transforms = jnp.broadcast_to(jnp.eye(4, dtype=q.dtype), (num_links, 4, 4))

    def scan_body(carry, i):
        T_world_to_parent = carry[robot.parent_indices[i]]
        T_parent_to_child = robot.joint_transforms[i] @ se3.exp(robot.joint_axes[i] * q_full[i])
        return carry.at[i].set(T_world_to_parent @ T_parent_to_child), None

    # Breadth-first link order guarantees parents are resolved before children
    final_transforms, _ = jax.lax.scan(scan_body, world_transforms, jnp.arange(1, num_links))
    return final_transforms


@partial(jax.jit, static_argnums=(2, 3))
def link_pose(robot: RobotModel, q: Array, link_idx: int, base_idx: int = 0) -> Array:
    """Pose of link ``link_idx`` expressed in the frame of link ``base_idx``."""
    world_transforms = forward_kinematics_world(robot, q)
    return se3.inverse(world_transforms[base_idx]) @ world_transforms[link_idx]


@partial(jax.jit, static_argnums=(2, 3))
def _jacobian(robot: RobotModel, q: Array, link_idx: int, base_idx: int) -> Array:
    R0 = se3.get_rotation(link_pose(robot, q, link_idx, base_idx))

    def perturbed(dq: Array) -> Array:
        T = link_pose(robot, q + dq, link_idx, base_idx)
        # Angular part is the rotation vector of R(q + dq) R(q)^T, linear part the origin
        return jnp.concatenate([se3.get_position(T), so3.log(se3.get_rotation(T) @ R0.T)])

    return jax.jacfwd(perturbed)(jnp.zeros_like(q))


def jacobian(robot: RobotModel, q: Array, link_name: str, base_link: Optional[str] = None) -> Array:
    """Geometric Jacobian of a link with respect to the actuated joints.

    Args:
        robot: RobotModel containing the robot's kinematic structure
        q: Joint angles array of shape (num_dof,)
        link_name: Name of the target link
        base_link: Frame the Jacobian is expressed in, the root link by default

    Returns:
        (6, num_dof) matrix mapping joint velocities to [linear, angular] velocity
    """
    base_idx = robot.link_index(base_link) if base_link else 0
    return _jacobian(robot, jnp.asarray(q, dtype=jnp.float64), robot.link_index(link_name), base_idx)


class ChainKinematics:
    """Forward and inverse kinematics of a serial chain in a RobotModel.

    Poses are expressed in the frame of ``base_link`` (the model root by
    default). Inverse kinematics is damped least squares started from the
    seed, so it returns at most one solution: the one the seed converges to.
    """

    def __init__(
        self,
        robot: RobotModel,
        tip_link: str,
        base_link: Optional[str] = None,
        max_iterations: int = config.IK_MAX_ITERATIONS,
        tolerance: float = config.IK_TOLERANCE,
        damping: float = config.IK_DAMPING,
    ):
        self.robot = robot
        self.tip_link = tip_link
        self._base_link = base_link or robot.root_link
        self._tip_idx = robot.link_index(tip_link)
        self._base_idx = robot.link_index(self._base_link)
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.damping = damping

    @property
    def joint_names(self) -> Tuple[str, ...]:
        return self.robot.joint_names

    @property
    def num_joints(self) -> int:
        return self.robot.num_dof

    @property
    def base_link_name(self) -> str:
        return self._base_link

    def _pose(self, q: Array) -> Array:
        return link_pose(self.robot, q, self._tip_idx, self._base_idx)

    def calc_fwd_kin(self, joint_values: Array) -> Optional[Array]:
        q = jnp.asarray(joint_values, dtype=jnp.float64)
        if q.shape != (self.num_joints,):
            logger.error("Expected %d joint values, got shape %s", self.num_joints, q.shape)
            return None
        pose = self._pose(q)
        if not bool(jnp.all(jnp.isfinite(pose))):
            return None
        return pose

    def calc_inv_kin(self, pose: Array, seed: Array) -> List[Array]:
        target = jnp.asarray(pose, dtype=jnp.float64)
        q = jnp.asarray(seed, dtype=jnp.float64)
        if q.shape != (self.num_joints,):
            logger.error("Expected IK seed of %d joints, got shape %s", self.num_joints, q.shape)
            return []

        eye = jnp.eye(6, dtype=q.dtype)
        for _ in range(self.max_iterations):
            error = se3.pose_error(self._pose(q), target)
            if float(jnp.linalg.norm(error)) < self.tolerance:
                return [q]
            J = _jacobian(self.robot, q, self._tip_idx, self._base_idx)
            dq = J.T @ jnp.linalg.solve(J @ J.T + self.damping * eye, error)
            q = q + dq

        error = se3.pose_error(self._pose(q), target)
        if float(jnp.linalg.norm(error)) < self.tolerance:
            return [q]
        logger.debug("IK did not converge, residual %.3g", float(jnp.linalg.norm(error)))
        return []
