import pytest

from control_primitives.core.contracts import ComputationalSpace, Parameter
from control_primitives.core.exceptions import (
    FrameNotFoundError,
    IncompatibleSizeError,
    InverseGeometryNotConvergingError,
    StateRepresentationError,
)
from control_primitives.core.state_representation import JointPositions


def test_computational_space_from_string():
    assert ComputationalSpace.from_string("Decoupled_Twist") == ComputationalSpace.DECOUPLED_TWIST
    with pytest.raises(ValueError):
        ComputationalSpace.from_string("diagonal")


def test_parameter_emptiness_and_copy():
    assert Parameter("gain").is_empty()
    assert Parameter("attractor", JointPositions("robot", 2)).is_empty()

    parameter = Parameter("attractor", JointPositions("robot", 2, [1.0, 2.0]))
    assert not parameter.is_empty()
    copy = parameter.copy()
    copy.value.set_positions([0.0, 0.0])
    assert parameter.value.get_positions().tolist() == [1.0, 2.0]


def test_error_messages():
    error = FrameNotFoundError("tool0")
    assert str(error) == "Frame with name or ID tool0 is not in the robot model"
    assert isinstance(error, StateRepresentationError)
    assert isinstance(error, ValueError)

    error = InverseGeometryNotConvergingError(100, 0.25)
    assert "100 iterations" in str(error)
    assert error.error == 0.25
    assert issubclass(IncompatibleSizeError, ValueError)
