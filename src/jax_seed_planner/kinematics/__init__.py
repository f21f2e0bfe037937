"""Kinematics and environment interfaces, plus a chain-based implementation."""

from .chain import ChainKinematics, forward_kinematics, jacobian
from .environment import EnvState, KinematicsEnvironment
from .interfaces import Environment, ForwardKinematics, InverseKinematics

__all__ = [
    "ChainKinematics",
    "EnvState",
    "Environment",
    "ForwardKinematics",
    "InverseKinematics",
    "KinematicsEnvironment",
    "forward_kinematics",
    "jacobian",
]
