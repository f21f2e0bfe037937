"""RobotModel PyTree describing a kinematic tree.

The model backs the chain kinematics gateway. It is stateless and immutable so
it can be closed over by jitted forward kinematics.
"""

from typing import Tuple

from jax import Array
from flax import struct


@struct.dataclass
class RobotModel:
    """Immutable PyTree representation of a robot's kinematic structure.

    Links are stored in breadth-first order from the root, so a parent index
    is always smaller than the index of its child.

    Attributes:
        link_names: Tuple of all link names. Index corresponds to link ID.
        joint_names: Tuple of actuated (non-fixed) joint names, in URDF order.
        parent_indices: Array of shape (num_links,) where parent_indices[i]
                       is the parent link index of link i. Root link parents itself.
        joint_transforms: Array of shape (num_links, 4, 4) with the fixed origin
                         transform from each link's parent to the link.
        joint_axes: Array of shape (num_links, 6) containing twist vectors
                   [vx,vy,vz,wx,wy,wz] of the joint driving each link.
        actuated_joint_to_link_idx: Array of shape (num_dof,) mapping the
                   i-th actuated joint to the index of the link it drives.
    """
    link_names: Tuple[str, ...] = struct.field(pytree_node=False)
    joint_names: Tuple[str, ...] = struct.field(pytree_node=False)
    parent_indices: Array
    joint_transforms: Array
    joint_axes: Array
    actuated_joint_to_link_idx: Array

    @property
    def num_dof(self) -> int:
        return len(self.joint_names)

    @property
    def root_link(self) -> str:
        return self.link_names[0]

    def link_index(self, link_name: str) -> int:
        try:
            return self.link_names.index(link_name)
        except ValueError:
            raise ValueError(f"Link '{link_name}' not found in robot model")
