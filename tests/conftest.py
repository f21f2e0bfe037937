"""Shared fixtures: a translation-only manipulator and request builders."""

from pathlib import Path

import jax.numpy as jnp
import pytest

from jax_seed_planner.core import ManipulatorInfo
from jax_seed_planner.kinematics import KinematicsEnvironment
from jax_seed_planner.planning import PlannerRequest
from jax_seed_planner.transforms import se3

JOINTS = ("j1", "j2", "j3")
MANIPULATOR = "manipulator"
FIXTURES = Path(__file__).parent / "fixtures"


class TranslationKinematics:
    """Three prismatic joints along x, y and z: the tip position equals q.

    IK is exact unless ``ik_candidates(pose, seed)`` is given, in which case
    its result is returned as the candidate list.
    """

    def __init__(self, ik_candidates=None):
        self.ik_candidates = ik_candidates
        self.ik_calls = []

    @property
    def joint_names(self):
        return JOINTS

    @property
    def num_joints(self):
        return len(JOINTS)

    @property
    def base_link_name(self):
        return "base_link"

    def calc_fwd_kin(self, joint_values):
        return se3.from_position_and_rotation(jnp.asarray(joint_values, dtype=jnp.float64), jnp.eye(3))

    def calc_inv_kin(self, pose, seed):
        self.ik_calls.append((pose, seed))
        if self.ik_candidates is not None:
            return [jnp.asarray(c, dtype=jnp.float64) for c in self.ik_candidates(pose, seed)]
        return [se3.get_position(pose)]


def translation(x, y=0.0, z=0.0):
    return se3.from_position_and_rotation(jnp.array([x, y, z]), jnp.eye(3))


@pytest.fixture
def kinematics():
    return TranslationKinematics()


@pytest.fixture
def manip_info():
    return ManipulatorInfo(MANIPULATOR)


@pytest.fixture
def make_request():
    """Build a PlannerRequest around a single translation manipulator."""

    def _make(instructions, kin=None, joint_values=(0.0, 0.0, 0.0), base_transform=None, remapping=None):
        env = KinematicsEnvironment()
        env.add_manipulator(MANIPULATOR, kin or TranslationKinematics(), base_transform=base_transform)
        state = env.current_state(dict(zip(JOINTS, joint_values)))
        return PlannerRequest(instructions, env_state=state, env=env, plan_profile_remapping=remapping or {})

    return _make
