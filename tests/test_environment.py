"""Tests for the kinematics environment, state snapshots and configuration."""

import importlib

import jax.numpy as jnp
import numpy as np
import pytest

from conftest import JOINTS, TranslationKinematics, translation
from jax_seed_planner import config
from jax_seed_planner.core import ManipulatorInfo
from jax_seed_planner.errors import InvalidInputError
from jax_seed_planner.kinematics import EnvState, Environment, KinematicsEnvironment


class ForwardOnly:
    joint_names = JOINTS
    num_joints = 3
    base_link_name = "base_link"

    def calc_fwd_kin(self, joint_values):
        return translation(*joint_values)


@pytest.fixture
def env():
    env = KinematicsEnvironment()
    env.add_manipulator("arm", TranslationKinematics(), base_transform=translation(0.0, 0.0, 1.0))
    env.add_tcp("gripper", translation(0.0, 0.0, 0.2))
    return env


def test_environment_protocol(env):
    assert isinstance(env, Environment)


def test_kinematics_lookup(env):
    fwd = env.get_fwd_kinematics("arm")
    assert env.get_inv_kinematics("arm") is fwd
    with pytest.raises(InvalidInputError):
        env.get_fwd_kinematics("missing")
    with pytest.raises(InvalidInputError):
        env.get_inv_kinematics("arm", "analytic")


def test_named_ik_solvers():
    env = KinematicsEnvironment()
    analytic = TranslationKinematics()
    env.add_manipulator("arm", ForwardOnly(), inv_kin=TranslationKinematics(), ik_solvers={"analytic": analytic})
    assert env.get_inv_kinematics("arm", "analytic") is analytic


def test_forward_only_manipulator_needs_ik():
    with pytest.raises(InvalidInputError):
        KinematicsEnvironment().add_manipulator("arm", ForwardOnly())


def test_find_tcp(env):
    np.testing.assert_allclose(env.find_tcp(ManipulatorInfo("arm")), jnp.eye(4))
    np.testing.assert_allclose(env.find_tcp(ManipulatorInfo("arm", tcp="gripper"))[:3, 3], [0.0, 0.0, 0.2])

    offset = translation(0.1)
    np.testing.assert_allclose(env.find_tcp(ManipulatorInfo("arm", tcp=offset)), offset)

    with pytest.raises(InvalidInputError):
        env.find_tcp(ManipulatorInfo("arm", tcp="unknown"))
    with pytest.raises(InvalidInputError):
        env.find_tcp(ManipulatorInfo("arm", tcp=jnp.eye(3)))


def test_current_state(env):
    state = env.current_state({"j1": 0.1, "j2": 0.2, "j3": 0.3})

    np.testing.assert_allclose(state.get_joint_values(("j3", "j1")), [0.3, 0.1])
    np.testing.assert_allclose(state.get_link_transform("base_link")[:3, 3], [0.0, 0.0, 1.0])


def test_env_state_missing_entries():
    state = EnvState({"j1": 0.0})
    with pytest.raises(InvalidInputError, match="j2"):
        state.get_joint_values(("j1", "j2"))
    with pytest.raises(InvalidInputError):
        state.get_link_transform("base_link")


def test_config_environment_override(monkeypatch):
    monkeypatch.setenv("JSP_FIXED_LINEAR_STEPS", "25")
    monkeypatch.setenv("JSP_MIN_STEPS", "0")
    try:
        reloaded = importlib.reload(config)
        assert reloaded.FIXED_LINEAR_STEPS == 25
        assert reloaded.MIN_STEPS == 1
    finally:
        monkeypatch.undo()
        importlib.reload(config)
