"""Tests for forward kinematics, Jacobian and the chain kinematics gateway."""

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from conftest import FIXTURES
from jax_seed_planner.io import load_urdf
from jax_seed_planner.kinematics import (
    ChainKinematics,
    ForwardKinematics,
    InverseKinematics,
    forward_kinematics,
    jacobian,
)
from jax_seed_planner.kinematics.chain import forward_kinematics_world
from jax_seed_planner.transforms import se3


@pytest.fixture(scope="module")
def robot():
    return load_urdf(str(FIXTURES / "planar_arm.urdf"))


def test_fk_planar_arm(robot):
    """Link poses at zero and at a 90° base rotation."""
    poses = forward_kinematics(robot, jnp.zeros(3))

    assert set(poses) == set(robot.link_names)
    np.testing.assert_allclose(se3.get_position(poses["tool0"]), [1.0, 0.0, 0.1], atol=1e-9)
    np.testing.assert_allclose(se3.get_position(poses["link2"]), [0.5, 0.0, 0.1], atol=1e-9)

    poses = forward_kinematics(robot, jnp.array([jnp.pi / 2, 0.0, 0.0]))
    np.testing.assert_allclose(se3.get_position(poses["tool0"]), [0.0, 1.0, 0.1], atol=1e-9)


def test_fk_jit_compatibility(robot):
    @jax.jit
    def jit_fk(q):
        return forward_kinematics_world(robot, q)

    world_transforms = jit_fk(jnp.array([0.1, -0.2, 0.3]))
    assert world_transforms.shape == (len(robot.link_names), 4, 4)


def test_jacobian_matches_finite_differences(robot):
    q = jnp.array([0.3, -0.5, 0.7])
    J = jacobian(robot, q, "tool0")
    assert J.shape == (6, 3)

    eps = 1e-6
    for i in range(3):
        dq = jnp.zeros(3).at[i].set(eps)
        p_plus = se3.get_position(forward_kinematics(robot, q + dq)["tool0"])
        p_minus = se3.get_position(forward_kinematics(robot, q - dq)["tool0"])
        np.testing.assert_allclose(J[:3, i], (p_plus - p_minus) / (2 * eps), atol=1e-5)

    # All joints rotate about z
    np.testing.assert_allclose(J[3:, :], jnp.array([[0, 0, 0], [0, 0, 0], [1, 1, 1]]), atol=1e-9)


def test_chain_satisfies_kinematics_interfaces(robot):
    chain = ChainKinematics(robot, "tool0")
    assert isinstance(chain, ForwardKinematics)
    assert isinstance(chain, InverseKinematics)
    assert chain.joint_names == ("joint1", "joint2", "joint3")
    assert chain.num_joints == 3
    assert chain.base_link_name == "base_link"


def test_calc_fwd_kin_relative_to_base_link(robot):
    chain = ChainKinematics(robot, "tool0", base_link="link1")
    pose = chain.calc_fwd_kin(jnp.zeros(3))
    np.testing.assert_allclose(se3.get_position(pose), [1.0, 0.0, 0.0], atol=1e-9)


def test_calc_fwd_kin_rejects_wrong_size(robot):
    chain = ChainKinematics(robot, "tool0")
    assert chain.calc_fwd_kin(jnp.zeros(2)) is None


def test_calc_inv_kin_converges(robot):
    chain = ChainKinematics(robot, "tool0")
    q_true = jnp.array([0.3, -0.4, 0.2])
    target = chain.calc_fwd_kin(q_true)

    solutions = chain.calc_inv_kin(target, jnp.array([0.25, -0.3, 0.25]))

    assert len(solutions) == 1
    np.testing.assert_allclose(chain.calc_fwd_kin(solutions[0]), target, atol=1e-5)


def test_calc_inv_kin_unreachable(robot):
    chain = ChainKinematics(robot, "tool0", max_iterations=20)
    target = se3.from_position_and_rotation(jnp.array([5.0, 0.0, 0.1]), jnp.eye(3))
    assert chain.calc_inv_kin(target, jnp.zeros(3)) == []


def test_jacobian_through_fixed_joint(robot):
    """tool0 sits behind a fixed joint and still gets the full geometric Jacobian."""
    J_tool = jacobian(robot, jnp.zeros(3), "tool0")
    J_link3 = jacobian(robot, jnp.zeros(3), "link3")

    assert jnp.all(jnp.isfinite(J_tool))
    # Joint axes at x = 0, 0.5 and 0.9, tool at x = 1.0
    np.testing.assert_allclose(J_tool[:3, :], jnp.array([[0, 0, 0], [1.0, 0.5, 0.1], [0, 0, 0]]), atol=1e-9)
    np.testing.assert_allclose(J_tool[3:, :], J_link3[3:, :], atol=1e-9)
    np.testing.assert_allclose(J_link3[1, :], [0.9, 0.4, 0.0], atol=1e-9)
