import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from control_primitives.core.exceptions import (
    EmptyStateError,
    IncompatibleSizeError,
    IncompatibleStatesError,
)
from control_primitives.core.state_representation import (
    CartesianPose,
    CartesianTwist,
    CartesianWrench,
    Jacobian,
    JointTorques,
    JointVelocities,
)


def test_default_construction():
    jacobian = Jacobian("robot", 7)
    assert jacobian.rows == 6
    assert jacobian.cols == 7
    assert jacobian.get_joint_names() == [f"joint{i}" for i in range(7)]
    assert jacobian.get_reference_frame() == "world"
    assert jacobian.is_empty()


def test_set_data_checks_shape():
    jacobian = Jacobian("robot", 7)
    with pytest.raises(IncompatibleSizeError):
        jacobian.set_data(np.random.rand(7, 6))
    jacobian.set_data(np.random.rand(6, 7))
    assert not jacobian.is_empty()


def test_transpose():
    jacobian = Jacobian.Random("robot", 7, "ee")
    transposed = jacobian.transpose()
    assert transposed.rows == 7
    assert transposed.cols == 6
    np.testing.assert_allclose(transposed.data(), jacobian.data().T)
    with pytest.raises(IncompatibleSizeError):
        transposed.set_data(np.random.rand(6, 7))


def test_matrix_products_check_shape():
    jacobian = Jacobian.Random("robot", 7, "ee")
    assert (jacobian * np.random.rand(7, 3)).shape == (6, 3)
    assert (np.random.rand(2, 6) * jacobian).shape == (2, 7)
    with pytest.raises(IncompatibleSizeError):
        jacobian * np.random.rand(6, 7)


def test_forward_product_gives_frame_twist():
    jacobian = Jacobian.Random("robot", 7, "ee", "base")
    velocities = JointVelocities.Random("robot", 7)
    twist = jacobian * velocities
    assert isinstance(twist, CartesianTwist)
    assert twist.name == "ee"
    assert twist.reference_frame == "base"
    np.testing.assert_allclose(twist.data(), jacobian.data() @ velocities.data())


def test_solve_round_trip_for_square_jacobian():
    jacobian = Jacobian.Random("robot", 6, "ee")
    velocities = JointVelocities.Random("robot", 6)
    solved = jacobian.solve(jacobian * velocities)
    assert isinstance(solved, JointVelocities)
    np.testing.assert_allclose(solved.data(), velocities.data(), atol=1e-8)


def test_solve_redundant_jacobian_reproduces_twist():
    jacobian = Jacobian.Random("robot", 7, "ee")
    twist = CartesianTwist.Random("ee")
    np.testing.assert_allclose((jacobian * jacobian.solve(twist)).data(), twist.data(), atol=1e-8)


def test_solve_checks_shape_and_reference_frame():
    jacobian = Jacobian.Random("robot", 7, "ee")
    with pytest.raises(IncompatibleSizeError):
        jacobian.solve(np.random.rand(5))
    with pytest.raises(IncompatibleStatesError):
        jacobian.solve(CartesianTwist("ee", [1.0, 0.0, 0.0], [0.0, 0.0, 0.0], reference_frame="base"))


def test_pseudoinverse_times_twist():
    jacobian = Jacobian.Random("robot", 7, "ee")
    twist = CartesianTwist.Random("ee")
    velocities = jacobian.pseudoinverse() * twist
    assert isinstance(velocities, JointVelocities)
    assert velocities.get_size() == 7
    np.testing.assert_allclose((jacobian * velocities).data(), twist.data(), atol=1e-8)


def test_transpose_times_wrench_gives_torques():
    jacobian = Jacobian.Random("robot", 7, "ee")
    wrench = CartesianWrench.Random("ee")
    torques = jacobian.transpose() * wrench
    assert isinstance(torques, JointTorques)
    np.testing.assert_allclose(torques.data(), jacobian.data().T @ wrench.data())
    with pytest.raises(IncompatibleSizeError):
        jacobian * wrench


def test_inverse_requires_square_matrix():
    with pytest.raises(IncompatibleSizeError):
        Jacobian.Random("robot", 7, "ee").inverse()
    jacobian = Jacobian.Random("robot", 6, "ee")
    np.testing.assert_allclose(jacobian.inverse().data() @ jacobian.data(), np.eye(6), atol=1e-8)


def test_empty_jacobian_cannot_be_used():
    with pytest.raises(EmptyStateError):
        Jacobian("robot", 3, "ee") * JointVelocities.Random("robot", 3)


def test_change_reference_frame():
    jacobian = Jacobian.Random("robot", 7, "ee", "base")
    pose = CartesianPose("base", [1.0, 0.0, 0.0], Rotation.from_euler("z", 30, degrees=True), "world")
    world_jacobian = pose * jacobian
    assert world_jacobian.get_reference_frame() == "world"

    velocities = JointVelocities.Random("robot", 7)
    world_twist = pose * (jacobian * velocities)
    np.testing.assert_allclose((world_jacobian * velocities).data(), world_twist.data(), atol=1e-12)
    np.testing.assert_allclose(
        world_jacobian.solve(world_twist).data(),
        jacobian.solve(jacobian * velocities).data(),
        atol=1e-8,
    )

    with pytest.raises(IncompatibleStatesError):
        CartesianPose("other", [0.0, 0.0, 0.0]) * jacobian


def test_solve_accepts_twist_of_another_frame():
    jacobian = Jacobian.Random("robot", 7, "ee", "world")
    twist = CartesianTwist("other", [1.0, 0.0, 0.0], [0.0, 0.0, 0.0], reference_frame="world")
    velocities = jacobian.solve(twist)
    assert isinstance(velocities, JointVelocities)
    np.testing.assert_allclose((jacobian * velocities).data(), twist.data(), atol=1e-8)


def test_default_frame_jacobian_projects_any_wrench():
    jacobian = Jacobian.Random("robot", 3)
    assert jacobian.get_frame() == ""
    wrench = CartesianWrench.Random("test")
    torques = jacobian.transpose() * wrench
    np.testing.assert_allclose(torques.data(), jacobian.data().T @ wrench.data())
    with pytest.raises(IncompatibleStatesError):
        jacobian.transpose() * CartesianWrench.Random("test", "base")


def test_equality():
    jacobian = Jacobian.Random("robot", 3, "ee")
    assert jacobian == jacobian.copy()
    assert jacobian != jacobian.transpose()
    other = jacobian.copy()
    other.set_frame("tool")
    assert jacobian != other
