from datetime import timedelta

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from control_primitives.core.exceptions import EmptyStateError, IncompatibleStatesError
from control_primitives.core.state_representation import (
    CartesianAcceleration,
    CartesianPose,
    CartesianState,
    CartesianStateVariable,
    CartesianTwist,
    CartesianWrench,
    dist,
)


def test_default_pose_is_empty_identity_in_world():
    pose = CartesianPose("ee")
    assert pose.is_empty()
    assert pose.get_reference_frame() == "world"
    np.testing.assert_array_equal(pose.get_orientation(), [0.0, 0.0, 0.0, 1.0])
    assert "(empty)" in repr(pose)


def test_orientation_is_normalized():
    pose = CartesianPose("ee", [0.0, 0.0, 0.0], [0.0, 0.0, 0.0, 2.0])
    np.testing.assert_allclose(pose.get_orientation(), [0.0, 0.0, 0.0, 1.0])


def test_twist_accessors():
    twist = CartesianTwist("ee", [1.0, 2.0, 3.0], [4.0, 5.0, 6.0])
    np.testing.assert_array_equal(twist.get_twist(), [1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    np.testing.assert_array_equal(twist.get_angular_velocity(), [4.0, 5.0, 6.0])
    assert not hasattr(twist, "get_position")
    assert not hasattr(CartesianWrench("ee"), "get_twist")


def test_state_data_round_trip():
    state = CartesianState.Random("ee", "base")
    other = CartesianState("ee", "base")
    other.from_list(state.to_list())
    np.testing.assert_allclose(other.data(), state.data())
    assert state.data().size == 25


def test_restricted_variants_from_full_state():
    state = CartesianState.Random("ee")
    np.testing.assert_allclose(CartesianTwist.from_cartesian_state(state).get_twist(), state.get_twist())
    np.testing.assert_allclose(CartesianWrench.from_cartesian_state(state).get_wrench(), state.get_wrench())
    full = CartesianPose.from_cartesian_state(state).to_cartesian_state()
    np.testing.assert_allclose(full.get_pose(), state.get_pose())
    np.testing.assert_array_equal(full.get_twist(), np.zeros(6))


def test_pose_composition():
    world_base = CartesianPose("base", [1.0, 0.0, 0.0], Rotation.from_euler("z", 90, degrees=True), "world")
    base_ee = CartesianPose("ee", [1.0, 0.0, 0.0], reference_frame="base")
    world_ee = world_base * base_ee
    assert world_ee.name == "ee"
    assert world_ee.reference_frame == "world"
    np.testing.assert_allclose(world_ee.get_position(), [1.0, 1.0, 0.0], atol=1e-12)

    with pytest.raises(IncompatibleStatesError):
        base_ee * world_base


def test_pose_times_inverse_is_identity():
    pose = CartesianPose.Random("ee", "world")
    identity = pose * pose.inverse()
    np.testing.assert_allclose(identity.get_transformation_matrix(), np.eye(4), atol=1e-12)


def test_transformation_matrix():
    rotation = Rotation.from_euler("xyz", [0.1, 0.2, 0.3])
    pose = CartesianPose("ee", [1.0, 2.0, 3.0], rotation)
    matrix = pose.get_transformation_matrix()
    np.testing.assert_allclose(matrix[:3, :3], rotation.as_matrix())
    np.testing.assert_allclose(matrix[:3, 3], [1.0, 2.0, 3.0])


def test_twist_is_rotated_into_the_pose_reference_frame():
    world_base = CartesianPose("base", [1.0, 0.0, 0.0], Rotation.from_euler("z", 90, degrees=True), "world")
    twist = CartesianTwist("ee", [1.0, 0.0, 0.0], [0.0, 0.0, 1.0], reference_frame="base")
    world_twist = world_base * twist
    assert isinstance(world_twist, CartesianTwist)
    assert world_twist.reference_frame == "world"
    np.testing.assert_allclose(world_twist.get_linear_velocity(), [0.0, 1.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(world_twist.get_angular_velocity(), [0.0, 0.0, 1.0], atol=1e-12)


def test_pose_difference_is_a_twist():
    target = CartesianPose("target", [1.0, 2.0, 3.0], Rotation.from_rotvec([0.0, 0.0, 0.5]))
    current = CartesianPose("ee", [0.0, 0.0, 1.0])
    twist = target.difference(current)
    assert isinstance(twist, CartesianTwist)
    assert twist.name == "ee"
    np.testing.assert_allclose(twist.get_linear_velocity(), [1.0, 2.0, 2.0])
    np.testing.assert_allclose(twist.get_angular_velocity(), [0.0, 0.0, 0.5])


def test_operands_in_different_reference_frames_are_incompatible():
    a = CartesianPose("ee", [0.0, 0.0, 0.0], reference_frame="a")
    b = CartesianPose("ee", [0.0, 0.0, 0.0], reference_frame="b")
    with pytest.raises(IncompatibleStatesError):
        a - b


def test_empty_operand_raises():
    with pytest.raises(EmptyStateError):
        CartesianTwist.Random("ee") + CartesianTwist("ee")


def test_twist_integration_and_pose_differentiation():
    twist = CartesianTwist("ee", [1.0, 0.0, 0.0], [0.0, 0.0, np.pi])
    displacement = twist * timedelta(seconds=0.5)
    assert isinstance(displacement, CartesianPose)
    np.testing.assert_allclose(displacement.get_position(), [0.5, 0.0, 0.0])
    np.testing.assert_allclose(displacement.get_rotation().as_rotvec(), [0.0, 0.0, np.pi / 2])

    recovered = displacement / timedelta(seconds=0.5)
    assert isinstance(recovered, CartesianTwist)
    np.testing.assert_allclose(recovered.get_twist(), twist.get_twist())

    acceleration = twist / timedelta(seconds=2)
    assert isinstance(acceleration, CartesianAcceleration)
    np.testing.assert_allclose(acceleration.get_linear_acceleration(), [0.5, 0.0, 0.0])


def test_gain_products_on_twist():
    twist = CartesianTwist.Random("ee")
    np.testing.assert_allclose((2.0 * twist).get_twist(), 2.0 * twist.get_twist())
    matrix = np.diag(np.arange(1.0, 7.0))
    np.testing.assert_allclose((matrix * twist).get_twist(), matrix @ twist.get_twist())


def test_twist_clamp():
    twist = CartesianTwist("ee", [3.0, 0.0, 0.0], [0.0, 0.01, 0.0])
    clamped = twist.clamped(1.0, 0.5, angular_noise_ratio=0.1)
    np.testing.assert_allclose(clamped.get_linear_velocity(), [1.0, 0.0, 0.0])
    np.testing.assert_allclose(clamped.get_angular_velocity(), [0.0, 0.0, 0.0])


def test_wrench_clamp_in_place():
    wrench = CartesianWrench("ee", [10.0, -10.0, 0.5], [0.0, 0.0, 2.0])
    wrench.clamp(5.0, 1.0)
    np.testing.assert_allclose(wrench.get_force(), [5.0, -5.0, 0.5])
    np.testing.assert_allclose(wrench.get_torque(), [0.0, 0.0, 1.0])


def test_orientation_cannot_be_clamped():
    state = CartesianState.Random("ee")
    with pytest.raises(ValueError):
        state.clamp_state_variable(1.0, CartesianStateVariable.ORIENTATION)


def test_distance():
    a = CartesianPose("ee", [0.0, 0.0, 0.0])
    b = CartesianPose("ee", [3.0, 4.0, 0.0], Rotation.from_rotvec([0.0, 0.0, 0.5]))
    assert dist(a, b, CartesianStateVariable.POSITION) == pytest.approx(5.0)
    assert dist(a, b, CartesianStateVariable.ORIENTATION) == pytest.approx(0.5)
    assert dist(a, b) == pytest.approx(5.5)


def test_equality_compares_frames_and_values():
    state = CartesianState.Random("ee")
    assert state == state.copy()
    moved = state.copy()
    moved.set_position([9.0, 9.0, 9.0])
    assert state != moved

    pose = CartesianPose("ee", [1.0, 0.0, 0.0])
    assert pose == CartesianPose("ee", [1.0, 0.0, 0.0])
    assert pose != CartesianPose("ee", [1.0, 0.0, 0.0], reference_frame="base")
    assert pose != CartesianPose("tool", [1.0, 0.0, 0.0])
    assert CartesianTwist("ee", [1.0, 0.0, 0.0]) != CartesianWrench("ee", [1.0, 0.0, 0.0])
