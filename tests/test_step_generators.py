"""Tests for the LVS and fixed-size step generators.

The translation manipulator makes joint and Cartesian distances coincide, so
expected step counts follow directly from the segment bounds.
"""

import logging

import jax.numpy as jnp
import numpy as np
import pytest

from conftest import JOINTS, MANIPULATOR, TranslationKinematics, translation
from jax_seed_planner.core import (
    CartesianWaypoint,
    CompositeInstruction,
    JointWaypoint,
    ManipulatorInfo,
    MoveInstructionType,
    PlanInstruction,
    PlanInstructionType,
    StateWaypoint,
)
from jax_seed_planner.errors import InvalidInputError, SeedNotImplementedError
from jax_seed_planner.planning import (
    FixedSizePlanProfile,
    LVSPlanProfile,
    fixed_size_interpolate_cart_state_waypoint,
    fixed_size_interpolate_state_waypoint,
    lvs_interpolate_cart_state_waypoint,
    lvs_interpolate_state_waypoint,
)
from jax_seed_planner.transforms import se3, so3

# state, translation, rotation, min_steps
COARSE_CARTESIAN = (0.5, 10.0, 10.0, 1)
COARSE_JOINT = (10.0, 0.1, 10.0, 1)


class YawKinematics(TranslationKinematics):
    """The tool only rotates about z by the first joint value."""

    def calc_fwd_kin(self, joint_values):
        yaw = jnp.asarray(joint_values, dtype=jnp.float64)[0]
        return se3.from_position_and_rotation(jnp.zeros(3), so3.exp(jnp.array([0.0, 0.0, 1.0]) * yaw))


def joint(*values):
    return JointWaypoint(JOINTS, list(values))


def cart(x, y=0.0, z=0.0):
    return CartesianWaypoint(translation(x, y, z))


def plan(waypoint, plan_type=PlanInstructionType.FREESPACE, **kwargs):
    return PlanInstruction(waypoint, plan_type, **kwargs)


def positions(seed):
    return jnp.stack([move.waypoint.position for move in seed]) if len(seed) else jnp.zeros((0, 3))


def lvs(start, end, request, manip_info, bounds, base=None):
    return lvs_interpolate_state_waypoint(start, end, base or plan(end), request, manip_info, *bounds)


def test_joint_to_joint_state_bound(make_request, manip_info):
    """1 rad with a 0.5 rad bound: samples at 0, 0.5, 1 and the start is dropped."""
    end = joint(1.0, 0.0, 0.0)
    seed = lvs(joint(0.0, 0.0, 0.0), end, make_request(CompositeInstruction()), manip_info, COARSE_CARTESIAN)

    np.testing.assert_allclose(positions(seed), [[0.5, 0.0, 0.0], [1.0, 0.0, 0.0]], atol=1e-12)
    for move in seed:
        assert isinstance(move.waypoint, StateWaypoint)
        assert move.waypoint.joint_names == JOINTS
        assert move.move_type is MoveInstructionType.FREESPACE


def test_joint_to_joint_identical_endpoints_is_empty(make_request, manip_info):
    wp = joint(0.2, 0.3, 0.4)
    seed = lvs(wp, wp, make_request(CompositeInstruction()), manip_info, COARSE_CARTESIAN)
    assert len(seed) == 0


def test_min_steps_lower_bound(make_request, manip_info):
    wp = joint(0.2, 0.3, 0.4)
    seed = lvs(wp, wp, make_request(CompositeInstruction()), manip_info, (10.0, 10.0, 10.0, 5))

    assert len(seed) == 4
    np.testing.assert_allclose(positions(seed), jnp.tile(wp.position, (4, 1)))


def test_state_waypoint_start_is_treated_as_joint(make_request, manip_info):
    start = StateWaypoint(JOINTS, [0.0, 0.0, 0.0])
    seed = lvs(start, joint(1.0, 0.0, 0.0), make_request(CompositeInstruction()), manip_info, COARSE_CARTESIAN)
    assert len(seed) == 2


def test_linear_instruction_tags_moves_linear(make_request, manip_info):
    end = joint(1.0, 0.0, 0.0)
    base = plan(end, PlanInstructionType.LINEAR, profile="SLOW", description="weld")
    seed = lvs(joint(0.0, 0.0, 0.0), end, make_request(CompositeInstruction()), manip_info, COARSE_CARTESIAN, base)

    assert [move.move_type for move in seed] == [MoveInstructionType.LINEAR] * 2
    assert all(move.description == "weld" and move.profile == "SLOW" for move in seed)


def test_joint_to_cart_translation_bound(make_request, manip_info):
    """0.25 m with a 0.1 m bound needs 4 samples."""
    seed = lvs(joint(0.0, 0.0, 0.0), cart(0.25), make_request(CompositeInstruction()), manip_info, COARSE_JOINT)

    assert len(seed) == 3
    np.testing.assert_allclose(positions(seed)[-1], [0.25, 0.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(jnp.diff(positions(seed)[:, 0]), [0.25 / 3] * 2, atol=1e-12)


def test_joint_to_cart_picks_closest_ik_solution(make_request, manip_info):
    kin = TranslationKinematics(lambda pose, seed: [[0.9, 0.0, 0.0], [0.3, 0.0, 0.0], [-0.3, 0.0, 0.0]])
    request = make_request(CompositeInstruction(), kin=kin)

    seed = lvs(joint(0.2, 0.0, 0.0), cart(0.3), request, manip_info, COARSE_JOINT)

    np.testing.assert_allclose(positions(seed)[-1], [0.3, 0.0, 0.0], atol=1e-12)
    # The known joint end seeds IK
    np.testing.assert_allclose(kin.ik_calls[0][1], [0.2, 0.0, 0.0])


def test_joint_to_cart_ik_failure_repeats_start(make_request, manip_info):
    request = make_request(CompositeInstruction(), kin=TranslationKinematics(lambda pose, seed: []))

    seed = lvs(joint(0.0, 0.0, 0.0), cart(0.25), request, manip_info, COARSE_JOINT)

    assert len(seed) == 3
    np.testing.assert_allclose(positions(seed), jnp.zeros((3, 3)))


def test_joint_to_cart_respects_base_and_tcp(make_request):
    """Targets are TCP poses in the world; IK sees tip poses in the base frame."""
    tcp = translation(0.0, 0.0, 0.1)
    request = make_request(CompositeInstruction(), base_transform=translation(1.0))

    seed = lvs(joint(0.0, 0.0, 0.0), cart(1.25, 0.0, 0.1), request, ManipulatorInfo(MANIPULATOR, tcp=tcp),
               COARSE_JOINT)

    assert len(seed) == 3
    np.testing.assert_allclose(positions(seed)[-1], [0.25, 0.0, 0.0], atol=1e-12)


def test_cart_to_joint_ends_at_joint_target(make_request, manip_info):
    seed = lvs(cart(0.25), joint(0.0, 0.0, 0.0), make_request(CompositeInstruction()), manip_info, COARSE_JOINT)

    assert len(seed) == 3
    np.testing.assert_allclose(positions(seed)[0], [0.25 * 2 / 3, 0.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(positions(seed)[-1], [0.0, 0.0, 0.0], atol=1e-12)


def test_cart_to_joint_ik_failure_repeats_end(make_request, manip_info):
    request = make_request(CompositeInstruction(), kin=TranslationKinematics(lambda pose, seed: []))

    seed = lvs(cart(0.25), joint(0.0, 0.1, 0.0), request, manip_info, COARSE_JOINT)

    np.testing.assert_allclose(positions(seed), jnp.tile(jnp.array([0.0, 0.1, 0.0]), (3, 1)))


def test_cart_to_cart_interpolates_ik_solutions(make_request, manip_info):
    seed = lvs(cart(0.0), cart(0.25), make_request(CompositeInstruction()), manip_info, COARSE_JOINT)

    assert len(seed) == 3
    np.testing.assert_allclose(positions(seed)[-1], [0.25, 0.0, 0.0], atol=1e-12)


def test_cart_to_cart_ik_failure_repeats_current_state(make_request, manip_info):
    request = make_request(CompositeInstruction(), kin=TranslationKinematics(lambda pose, seed: []),
                           joint_values=(0.1, 0.2, 0.3))

    seed = lvs(cart(0.0), cart(0.25), request, manip_info, COARSE_JOINT)

    assert len(seed) == 3
    np.testing.assert_allclose(positions(seed), jnp.tile(jnp.array([0.1, 0.2, 0.3]), (3, 1)))


def test_cart_to_cart_one_side_solved(make_request, manip_info):
    def only_start(pose, seed):
        return [pose[:3, 3]] if float(pose[0, 3]) == 0.0 else []

    request = make_request(CompositeInstruction(), kin=TranslationKinematics(only_start))

    seed = lvs(cart(0.0, 0.5), cart(0.25, 0.5), request, manip_info, COARSE_JOINT)

    np.testing.assert_allclose(positions(seed), jnp.tile(jnp.array([0.0, 0.5, 0.0]), (3, 1)))


def test_missing_manipulator_is_invalid_input(make_request):
    with pytest.raises(InvalidInputError):
        lvs(joint(0.0, 0.0, 0.0), joint(1.0, 0.0, 0.0), make_request(CompositeInstruction()), ManipulatorInfo(),
            COARSE_CARTESIAN)


def test_joint_order_mismatch_is_invalid_input(make_request, manip_info):
    reordered = JointWaypoint(("j2", "j1", "j3"), [1.0, 0.0, 0.0])
    with pytest.raises(InvalidInputError):
        lvs(joint(0.0, 0.0, 0.0), reordered, make_request(CompositeInstruction()), manip_info, COARSE_CARTESIAN)


@pytest.mark.parametrize("start, end", [
    (joint(0.0, 0.0, 0.0), joint(1.0, 0.0, 0.0)),
    (joint(0.0, 0.0, 0.0), cart(1.0)),
    (cart(0.0), joint(1.0, 0.0, 0.0)),
    (cart(0.0), cart(1.0)),
])
def test_cartesian_space_seeds_not_implemented(make_request, manip_info, start, end):
    request = make_request(CompositeInstruction())
    with pytest.raises(SeedNotImplementedError):
        lvs_interpolate_cart_state_waypoint(start, end, plan(end), request, manip_info, *COARSE_CARTESIAN)
    with pytest.raises(SeedNotImplementedError):
        fixed_size_interpolate_cart_state_waypoint(start, end, plan(end), request, manip_info, 5)


def test_fixed_size_counts(make_request, manip_info):
    request = make_request(CompositeInstruction())
    start, end = joint(0.0, 0.0, 0.0), joint(1.0, 0.0, 0.0)

    seed = fixed_size_interpolate_state_waypoint(start, end, plan(end), request, manip_info, 5)

    np.testing.assert_allclose(positions(seed)[:, 0], [0.25, 0.5, 0.75, 1.0], atol=1e-12)
    assert len(fixed_size_interpolate_state_waypoint(start, end, plan(end), request, manip_info, 1)) == 0
    assert len(fixed_size_interpolate_state_waypoint(start, end, plan(end), request, manip_info, 0)) == 0


def test_fixed_size_is_deterministic(make_request, manip_info):
    request = make_request(CompositeInstruction())
    start, end = joint(0.0, 0.0, 0.0), cart(0.4, 0.2)

    first = fixed_size_interpolate_state_waypoint(start, end, plan(end), request, manip_info, 4)
    second = fixed_size_interpolate_state_waypoint(start, end, plan(end), request, manip_info, 4)

    np.testing.assert_array_equal(positions(first), positions(second))
    np.testing.assert_allclose(positions(first)[-1], [0.4, 0.2, 0.0], atol=1e-12)


def test_fixed_size_profile_uses_motion_type(make_request, manip_info):
    profile = FixedSizePlanProfile(freespace_steps=3, linear_steps=6)
    request = make_request(CompositeInstruction())
    start, end = joint(0.0, 0.0, 0.0), joint(1.0, 0.0, 0.0)

    freespace = profile.joint_joint_freespace(start, end, plan(end), request, manip_info)
    linear = profile.joint_joint_linear(start, end, plan(end, PlanInstructionType.LINEAR), request, manip_info)

    assert len(freespace) == 2
    assert len(linear) == 5


def test_lvs_profile_routes_every_pair(make_request, manip_info):
    profile = LVSPlanProfile(*COARSE_CARTESIAN)
    request = make_request(CompositeInstruction())
    start, end = joint(0.0, 0.0, 0.0), joint(1.0, 0.0, 0.0)

    assert len(profile.joint_joint_linear(start, end, plan(end, PlanInstructionType.LINEAR), request, manip_info)) == 2
    assert len(profile.joint_joint_freespace(start, end, plan(end), request, manip_info)) == 2


def test_joint_to_joint_rotation_bound(make_request, manip_info):
    """1 rad of tool yaw with a 0.3 rad bound needs 5 samples, the state bound only 2."""
    request = make_request(CompositeInstruction(), kin=YawKinematics())

    seed = lvs(joint(0.0, 0.0, 0.0), joint(1.0, 0.0, 0.0), request, manip_info, (10.0, 10.0, 0.3, 1))

    np.testing.assert_allclose(positions(seed)[:, 0], [0.25, 0.5, 0.75, 1.0], atol=1e-12)


def nearby_pair_candidates(pose, seed):
    """Per-side nearest to the seed would pick 0.1 and -2, the closest pair is (3, 3.1)."""
    if float(pose[0, 3]) == 0.0:
        return [[0.1, 0.0, 0.0], [3.0, 0.0, 0.0]]
    return [[-2.0, 0.0, 0.0], [3.1, 0.0, 0.0]]


def test_cart_to_cart_picks_closest_solution_pair(make_request, manip_info):
    request = make_request(CompositeInstruction(), kin=TranslationKinematics(nearby_pair_candidates))

    seed = lvs(cart(0.0), cart(0.25), request, manip_info, COARSE_JOINT)

    assert len(seed) == 3
    np.testing.assert_allclose(positions(seed)[:, 0], [3.0 + 0.1 / 3, 3.0 + 0.2 / 3, 3.1], atol=1e-12)


def test_fixed_size_cart_to_cart_picks_closest_solution_pair(make_request, manip_info):
    request = make_request(CompositeInstruction(), kin=TranslationKinematics(nearby_pair_candidates))

    seed = fixed_size_interpolate_state_waypoint(cart(0.0), cart(0.25), plan(cart(0.25)), request, manip_info, 5)

    np.testing.assert_allclose(positions(seed)[:, 0], [3.025, 3.05, 3.075, 3.1], atol=1e-12)


@pytest.mark.parametrize("solvable_x, message", [
    (0.0, "No IK solution for segment end"),
    (0.25, "No IK solution for segment start"),
])
def test_fixed_size_cart_to_cart_one_side_solved_warns(make_request, manip_info, caplog, solvable_x, message):
    def one_side(pose, seed):
        return [pose[:3, 3]] if float(pose[0, 3]) == solvable_x else []

    request = make_request(CompositeInstruction(), kin=TranslationKinematics(one_side))

    with caplog.at_level(logging.WARNING, logger="jax_seed_planner.planning.step_generators.fixed_size"):
        seed = fixed_size_interpolate_state_waypoint(cart(0.0, 0.5), cart(0.25, 0.5), plan(cart(0.25, 0.5)),
                                                     request, manip_info, 4)

    np.testing.assert_allclose(positions(seed), jnp.tile(jnp.array([solvable_x, 0.5, 0.0]), (3, 1)))
    assert message in caplog.text
