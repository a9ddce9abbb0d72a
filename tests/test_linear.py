import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from control_primitives.core.dynamical_systems import Linear
from control_primitives.core.exceptions import (
    EmptyAttractorError,
    EmptyStateError,
    IncompatibleSizeError,
    IncompatibleStatesError,
)
from control_primitives.core.state_representation import (
    CartesianPose,
    CartesianState,
    CartesianTwist,
    JointPositions,
    JointState,
    JointVelocities,
)


@pytest.fixture
def attractor():
    return JointPositions("robot", 3, [1.0, 2.0, 3.0])


def test_joint_dynamics(attractor):
    ds = Linear(attractor, 2.0)
    velocities = ds.compute_dynamics(JointPositions("robot", 3, [0.0, 0.0, 0.0]))
    assert isinstance(velocities, JointVelocities)
    np.testing.assert_allclose(velocities.data(), [2.0, 4.0, 6.0])
    np.testing.assert_allclose(ds.evaluate(JointState.Zero("robot", 3)).data(), [2.0, 4.0, 6.0])


def test_gain_forms(attractor):
    np.testing.assert_allclose(Linear(attractor, 2.0).get_gain(), 2.0 * np.eye(3))
    np.testing.assert_allclose(Linear(attractor, [1.0, 2.0, 3.0]).get_gain(), np.diag([1.0, 2.0, 3.0]))

    matrix = np.random.uniform(-1.0, 1.0, (3, 3))
    ds = Linear(attractor, matrix)
    velocities = ds.compute_dynamics(JointPositions("robot", 3, [0.0, 0.0, 0.0]))
    np.testing.assert_allclose(velocities.data(), matrix @ attractor.data())


def test_gain_size_is_checked(attractor):
    with pytest.raises(IncompatibleSizeError):
        Linear(attractor, [1.0, 2.0])
    with pytest.raises(IncompatibleSizeError):
        Linear(attractor, np.eye(4))
    ds = Linear(attractor)
    with pytest.raises(IncompatibleSizeError):
        ds.set_gain(np.ones((3, 4)))


def test_empty_attractor_raises():
    ds = Linear(JointPositions("robot", 3))
    with pytest.raises(EmptyAttractorError):
        ds.compute_dynamics(JointPositions("robot", 3, [0.0, 0.0, 0.0]))


def test_empty_state_raises(attractor):
    with pytest.raises(EmptyStateError):
        Linear(attractor).compute_dynamics(JointPositions("robot", 3))


def test_incompatible_state_raises(attractor):
    ds = Linear(attractor)
    with pytest.raises(IncompatibleStatesError):
        ds.compute_dynamics(JointPositions("robot", ["a", "b", "c"], [0.0, 0.0, 0.0]))
    with pytest.raises(IncompatibleStatesError):
        ds.compute_dynamics(CartesianPose("ee", [0.0, 0.0, 0.0]))


def test_set_attractor(attractor):
    ds = Linear(JointPositions("robot", 3))
    ds.set_attractor(attractor)
    np.testing.assert_allclose(ds.get_attractor().data(), attractor.data())

    with pytest.raises(EmptyStateError):
        ds.set_attractor(JointPositions("robot", 3))
    with pytest.raises(IncompatibleSizeError):
        ds.set_attractor(JointPositions("robot", 4, [0.0, 0.0, 0.0, 0.0]))
    with pytest.raises(IncompatibleStatesError):
        ds.set_attractor(CartesianPose("ee", [0.0, 0.0, 0.0]))


def test_full_joint_state_attractor_is_reduced_to_positions():
    ds = Linear(JointState("robot", 3, positions=[1.0, 2.0, 3.0], velocities=[5.0, 5.0, 5.0]))
    assert isinstance(ds.get_attractor(), JointPositions)
    np.testing.assert_allclose(ds.get_attractor().data(), [1.0, 2.0, 3.0])


def test_cartesian_dynamics():
    attractor = CartesianPose("target", [1.0, 0.0, 0.0], Rotation.from_rotvec([0.0, 0.0, 0.2]))
    ds = Linear(attractor, 3.0)
    twist = ds.compute_dynamics(CartesianState.Zero("ee"))
    assert isinstance(twist, CartesianTwist)
    assert twist.name == "ee"
    np.testing.assert_allclose(twist.get_linear_velocity(), [3.0, 0.0, 0.0])
    np.testing.assert_allclose(twist.get_angular_velocity(), [0.0, 0.0, 0.6])
    np.testing.assert_allclose(ds.get_gain(), 3.0 * np.eye(6))

    with pytest.raises(IncompatibleStatesError):
        ds.compute_dynamics(CartesianPose("ee", [0.0, 0.0, 0.0], reference_frame="base"))


def test_cartesian_diagonal_gain():
    attractor = CartesianPose("target", [1.0, 1.0, 1.0])
    ds = Linear(attractor, [1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    twist = ds.compute_dynamics(CartesianPose("ee", [0.0, 0.0, 0.0]))
    np.testing.assert_allclose(twist.get_linear_velocity(), [1.0, 2.0, 3.0])
    with pytest.raises(IncompatibleSizeError):
        ds.set_gain([1.0, 2.0, 3.0])


def test_parameters_are_copies(attractor):
    ds = Linear(attractor, 2.0)
    parameters = ds.get_parameters()
    assert set(parameters) == {"attractor", "gain"}
    parameters["gain"].value[0, 0] = 100.0
    np.testing.assert_allclose(ds.get_gain(), 2.0 * np.eye(3))

    ds.set_parameter_value("gain", 5.0)
    np.testing.assert_allclose(ds.get_parameter_value("gain"), 5.0 * np.eye(3))
    with pytest.raises(KeyError):
        ds.get_parameter_value("stiffness")
    with pytest.raises(KeyError):
        ds.set_parameter_value("stiffness", 1.0)


def test_copy_is_independent(attractor):
    ds = Linear(attractor, 2.0)
    copy = ds.copy()
    copy.set_gain(7.0)
    np.testing.assert_allclose(ds.get_gain(), 2.0 * np.eye(3))
