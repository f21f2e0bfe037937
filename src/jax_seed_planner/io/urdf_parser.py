"""URDF parser producing the RobotModel used by the chain kinematics."""

from collections import deque
from typing import Dict, List

import jax.numpy as jnp
import numpy as np
from lxml import etree

from jax_seed_planner.core.robot_model import RobotModel
from jax_seed_planner.transforms import se3

_ACTUATED_TYPES = ("revolute", "continuous", "prismatic")


def load_urdf(urdf_path: str) -> RobotModel:
    """Load a URDF file and convert it to a RobotModel PyTree.

    Args:
        urdf_path: Path to the URDF file to load.

    Returns:
        RobotModel: A JAX-native robot representation.
    """
    return _build_model(etree.parse(urdf_path).getroot())


def parse_urdf(urdf_string: str) -> RobotModel:
    """Parse URDF XML text into a RobotModel."""
    return _build_model(etree.fromstring(urdf_string.encode("utf-8")))


def _floats(text: str) -> np.ndarray:
    return np.array([float(x) for x in text.split()])


def _build_model(root) -> RobotModel:
    all_links = [link.get("name") for link in root.findall("link")]

    joints: List[Dict] = []
    for joint in root.findall("joint"):
        parent_elem, child_elem = joint.find("parent"), joint.find("child")
        if parent_elem is None or child_elem is None:
            continue
        joints.append({
            "name": joint.get("name"),
            "type": joint.get("type"),
            "parent": parent_elem.get("link"),
            "child": child_elem.get("link"),
            "elem": joint,
        })

    joint_by_child = {j["child"]: j for j in joints}
    root_links = [link for link in all_links if link not in joint_by_child]
    if len(root_links) != 1:
        raise ValueError(f"Expected exactly one root link, found: {root_links}")

    # Breadth-first order so every parent precedes its children
    children: Dict[str, List[str]] = {}
    for j in joints:
        children.setdefault(j["parent"], []).append(j["child"])
    ordered_links = []
    queue = deque(root_links)
    while queue:
        link = queue.popleft()
        if link in ordered_links:
            continue
        ordered_links.append(link)
        queue.extend(children.get(link, []))
    link_index = {name: i for i, name in enumerate(ordered_links)}

    parent_indices, joint_transforms, joint_axes = [], [], []
    for i, link in enumerate(ordered_links):
        joint = joint_by_child.get(link)
        if joint is None:
            # Root link parents itself and never moves
            parent_indices.append(i)
            joint_transforms.append(jnp.eye(4))
            joint_axes.append(jnp.zeros(6))
            continue

        parent_indices.append(link_index[joint["parent"]])
        joint_transforms.append(_origin_transform(joint["elem"]))
        joint_axes.append(_joint_axis(joint["elem"], joint["type"]))

    actuated = [j for j in joints if j["type"] in _ACTUATED_TYPES]

    return RobotModel(
        link_names=tuple(ordered_links),
        joint_names=tuple(j["name"] for j in actuated),
        parent_indices=jnp.array(parent_indices, dtype=jnp.int32),
        joint_transforms=jnp.stack(joint_transforms),
        joint_axes=jnp.stack(joint_axes),
        actuated_joint_to_link_idx=jnp.array([link_index[j["child"]] for j in actuated], dtype=jnp.int32),
    )


def _origin_transform(joint_elem):
    origin = joint_elem.find("origin")
    if origin is None:
        return jnp.eye(4)
    xyz = _floats(origin.get("xyz", "0 0 0"))
    rpy = _floats(origin.get("rpy", "0 0 0"))
    return se3.from_position_and_rotation(jnp.array(xyz), jnp.array(_rpy_to_rotation_matrix(rpy)))


def _joint_axis(joint_elem, joint_type: str):
    if joint_type not in _ACTUATED_TYPES:
        return jnp.zeros(6)
    axis_elem = joint_elem.find("axis")
    axis = _floats(axis_elem.get("xyz", "1 0 0")) if axis_elem is not None else np.array([1.0, 0.0, 0.0])
    axis = jnp.array(axis / np.linalg.norm(axis))
    if joint_type == "prismatic":
        return jnp.concatenate([axis, jnp.zeros(3)])
    return jnp.concatenate([jnp.zeros(3), axis])


def _rpy_to_rotation_matrix(rpy: np.ndarray) -> np.ndarray:
    """Fixed-axis roll-pitch-yaw to rotation matrix, R = Rz(yaw) Ry(pitch) Rx(roll)."""
    roll, pitch, yaw = rpy
    cr, sr = np.cos(roll), np.sin(roll)
    cp, sp = np.cos(pitch), np.sin(pitch)
    cy, sy = np.cos(yaw), np.sin(yaw)

    R_x = np.array([[1, 0, 0], [0, cr, -sr], [0, sr, cr]])
    R_y = np.array([[cp, 0, sp], [0, 1, 0], [-sp, 0, cp]])
    R_z = np.array([[cy, -sy, 0], [sy, cy, 0], [0, 0, 1]])

    return R_z @ R_y @ R_x
