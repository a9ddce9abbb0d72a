"""
Joint space states.

``JointState`` holds the four aligned vectors of a robot's joints (positions,
velocities, accelerations, torques). ``JointPositions``, ``JointVelocities``,
``JointAccelerations`` and ``JointTorques`` each hold exactly one of them and only
expose the accessors of that vector. Converting between them is explicit:
``from_joint_state``/``to_joint_state`` and the unit-time reinterpretations
``JointVelocities.from_positions`` and friends. Products with a
``datetime.timedelta`` integrate or differentiate over that period.
"""

from __future__ import annotations

from datetime import timedelta
from enum import Enum, auto
from typing import Dict, List, Optional, Sequence, Type, TypeVar, Union

import numpy as np

from ..exceptions import IncompatibleSizeError, IncompatibleStatesError
from .state import SCALAR_TYPES, State, apply_gain, as_vector, clamp_vector, is_gain

JointNames = Union[int, Sequence[str]]
V = TypeVar("V", bound="_JointVariable")


class JointStateVariable(Enum):
    POSITIONS = auto()
    VELOCITIES = auto()
    ACCELERATIONS = auto()
    TORQUES = auto()
    ALL = auto()


_VARIABLES = (
    JointStateVariable.POSITIONS,
    JointStateVariable.VELOCITIES,
    JointStateVariable.ACCELERATIONS,
    JointStateVariable.TORQUES,
)


def make_joint_names(joint_names: JointNames) -> List[str]:
    if isinstance(joint_names, (int, np.integer)):
        if joint_names < 0:
            raise IncompatibleSizeError(f"Number of joints must be positive, got {joint_names}")
        return [f"joint{i}" for i in range(int(joint_names))]
    names = list(joint_names)
    if not all(isinstance(name, str) for name in names):
        raise TypeError(f"Joint names must be strings, got {names}")
    names = [str(name) for name in names]
    if len(set(names)) != len(names):
        raise ValueError(f"Joint names must be unique, got {names}")
    return names


def is_joint_data(values) -> bool:
    """True for a numeric vector, as opposed to a number of joints or joint names."""
    if isinstance(values, np.ndarray):
        return values.ndim == 1 and np.issubdtype(values.dtype, np.number)
    if isinstance(values, (list, tuple)):
        return len(values) > 0 and all(
            isinstance(value, SCALAR_TYPES) and not isinstance(value, bool) for value in values
        )
    return False


class _JointSpace(State):
    """Robot name and ordered joint names shared by all joint space states."""

    def __init__(self, robot_name: str = "", joint_names: JointNames = 0):
        super().__init__(robot_name)
        self._names = make_joint_names(joint_names)

    def get_size(self) -> int:
        return len(self._names)

    def get_names(self) -> List[str]:
        return list(self._names)

    def set_names(self, joint_names: JointNames) -> None:
        names = make_joint_names(joint_names)
        if len(names) != self.get_size():
            raise IncompatibleSizeError(
                f"Got {len(names)} joint names for a state of {self.get_size()} joints"
            )
        self._names = names

    def get_joint_index(self, joint_name: str) -> int:
        try:
            return self._names.index(joint_name)
        except ValueError:
            raise IncompatibleStatesError(
                f"Joint {joint_name} is not part of the state {self.name}"
            ) from None

    def dimension(self) -> int:
        return self.get_size()

    def _identity(self) -> tuple:
        return (self.name, tuple(self._names))

    def is_compatible(self, other: State) -> bool:
        return isinstance(other, _JointSpace) and self._names == other._names

    def _check_operand(self, other: "_JointSpace") -> None:
        self._assert_not_empty()
        other._assert_not_empty()
        if not self.is_compatible(other):
            raise IncompatibleStatesError(
                f"{self.name} is incompatible with {other.name}: "
                f"joint names {self._names} and {other.get_names()} differ"
            )


class JointState(_JointSpace):
    """
    Positions, velocities, accelerations and torques of a set of named joints.

    Example:
        state = JointState.Random('franka', 7)
        state.clamp_state_variable(2.0, JointStateVariable.VELOCITIES, noise_ratio=0.05)
        print(dist(state, JointState.Zero('franka', 7), JointStateVariable.POSITIONS))
    """

    def __init__(
        self,
        robot_name: str = "",
        joint_names: JointNames = 0,
        positions=None,
        velocities=None,
        accelerations=None,
        torques=None,
    ):
        super().__init__(robot_name, joint_names)
        size = self.get_size()
        self._values: Dict[JointStateVariable, np.ndarray] = {
            variable: np.zeros(size) for variable in _VARIABLES
        }
        for variable, values in zip(_VARIABLES, (positions, velocities, accelerations, torques)):
            if values is not None:
                self.set_state_variable(values, variable)

    @classmethod
    def Zero(cls, robot_name: str, joint_names: JointNames) -> "JointState":
        state = cls(robot_name, joint_names)
        state.set_zero()
        return state

    @classmethod
    def Random(cls, robot_name: str, joint_names: JointNames) -> "JointState":
        state = cls(robot_name, joint_names)
        state.set_data(np.random.uniform(-1.0, 1.0, 4 * state.get_size()))
        return state

    def get_state_variable(self, state_variable_type: JointStateVariable) -> np.ndarray:
        if state_variable_type == JointStateVariable.ALL:
            return self.data()
        return self._values[state_variable_type].copy()

    def set_state_variable(self, values, state_variable_type: JointStateVariable) -> None:
        if state_variable_type == JointStateVariable.ALL:
            self.set_data(values)
            return
        label = state_variable_type.name.lower()
        self._values[state_variable_type] = as_vector(values, self.get_size(), label)
        self.set_filled()

    def get_positions(self) -> np.ndarray:
        return self.get_state_variable(JointStateVariable.POSITIONS)

    def set_positions(self, positions) -> None:
        self.set_state_variable(positions, JointStateVariable.POSITIONS)

    def get_velocities(self) -> np.ndarray:
        return self.get_state_variable(JointStateVariable.VELOCITIES)

    def set_velocities(self, velocities) -> None:
        self.set_state_variable(velocities, JointStateVariable.VELOCITIES)

    def get_accelerations(self) -> np.ndarray:
        return self.get_state_variable(JointStateVariable.ACCELERATIONS)

    def set_accelerations(self, accelerations) -> None:
        self.set_state_variable(accelerations, JointStateVariable.ACCELERATIONS)

    def get_torques(self) -> np.ndarray:
        return self.get_state_variable(JointStateVariable.TORQUES)

    def set_torques(self, torques) -> None:
        self.set_state_variable(torques, JointStateVariable.TORQUES)

    def set_zero(self) -> None:
        for variable in _VARIABLES:
            self._values[variable] = np.zeros(self.get_size())
        self.set_filled()

    def data(self) -> np.ndarray:
        """Concatenation of positions, velocities, accelerations and torques."""
        return np.concatenate([self._values[variable] for variable in _VARIABLES])

    def array(self) -> np.ndarray:
        return self.data()

    def set_data(self, data) -> None:
        size = self.get_size()
        vector = as_vector(data, 4 * size, "joint state data")
        for i, variable in enumerate(_VARIABLES):
            self._values[variable] = vector[i * size:(i + 1) * size].copy()
        self.set_filled()

    def to_list(self) -> List[float]:
        return self.data().tolist()

    def from_list(self, values: Sequence[float]) -> None:
        self.set_data(values)

    def clamp_state_variable(
        self,
        max_absolute_value,
        state_variable_type: JointStateVariable,
        noise_ratio=0.0,
    ) -> None:
        """
        Clamp in place the magnitude of one state variable.

        Args:
            max_absolute_value: Bound on the magnitude, scalar or one per entry
            state_variable_type: The variable to clamp
            noise_ratio: Dead-zone ratio, scalar or one per entry. Entries below
                ``noise_ratio * max_absolute_value`` are set to zero.
        """
        self._assert_not_empty()
        values = self.get_state_variable(state_variable_type)
        self.set_state_variable(
            clamp_vector(values, max_absolute_value, noise_ratio), state_variable_type
        )

    def dist(
        self, state: "JointState", state_variable_type: JointStateVariable = JointStateVariable.ALL
    ) -> float:
        """Distance to another state, summed over the variables when ALL is requested."""
        self._check_operand(state)
        variables = _VARIABLES if state_variable_type == JointStateVariable.ALL else (state_variable_type,)
        return float(sum(
            np.linalg.norm(self._values[variable] - state._values[variable]) for variable in variables
        ))

    def __iadd__(self, other):
        if not isinstance(other, JointState):
            return NotImplemented
        self._check_operand(other)
        for variable in _VARIABLES:
            self._values[variable] = self._values[variable] + other._values[variable]
        return self

    def __add__(self, other):
        if not isinstance(other, JointState):
            return NotImplemented
        result = self.copy()
        result += other
        return result

    def __isub__(self, other):
        if not isinstance(other, JointState):
            return NotImplemented
        self._check_operand(other)
        for variable in _VARIABLES:
            self._values[variable] = self._values[variable] - other._values[variable]
        return self

    def __sub__(self, other):
        if not isinstance(other, JointState):
            return NotImplemented
        result = self.copy()
        result -= other
        return result

    def __imul__(self, gain):
        if not is_gain(gain):
            return NotImplemented
        self._assert_not_empty()
        for variable in _VARIABLES:
            self._values[variable] = apply_gain(gain, self._values[variable])
        return self

    def __mul__(self, gain):
        if not is_gain(gain):
            return NotImplemented
        result = self.copy()
        result *= gain
        return result

    __rmul__ = __mul__

    def __itruediv__(self, scalar):
        if not isinstance(scalar, SCALAR_TYPES):
            return NotImplemented
        self *= 1.0 / scalar
        return self

    def __truediv__(self, scalar):
        if not isinstance(scalar, SCALAR_TYPES):
            return NotImplemented
        return self * (1.0 / scalar)

    def __neg__(self):
        return self * -1.0

    def __repr__(self) -> str:
        header = f"{type(self).__name__} {self.name}"
        if self.is_empty():
            return f"{header} (empty)"
        lines = [header, f"names: {self._names}"]
        for variable in _VARIABLES:
            lines.append(f"{variable.name.lower()}: {np.array2string(self._values[variable], precision=4)}")
        return "\n".join(lines)


class _JointVariable(_JointSpace):
    """A joint space state holding a single variable of ``JointState``."""

    variable: JointStateVariable
    # Types obtained by multiplying or dividing this variable by a time period.
    _time_integral: Optional[Type["_JointVariable"]] = None
    _time_derivative: Optional[Type["_JointVariable"]] = None

    def __init__(self, robot_name: str = "", joint_names: Optional[JointNames] = None, values=None):
        # named+data form, e.g. JointPositions("robot", [0.1, 0.2])
        if values is None and is_joint_data(joint_names):
            joint_names, values = None, joint_names
        if joint_names is None:
            joint_names = 0 if values is None else len(values)
        super().__init__(robot_name, joint_names)
        self._data = np.zeros(self.get_size())
        if values is not None:
            self.set_data(values)

    @classmethod
    def Zero(cls: Type[V], robot_name: str, joint_names: JointNames) -> V:
        state = cls(robot_name, joint_names)
        state.set_zero()
        return state

    @classmethod
    def Random(cls: Type[V], robot_name: str, joint_names: JointNames) -> V:
        state = cls(robot_name, joint_names)
        state.set_data(np.random.uniform(-1.0, 1.0, state.get_size()))
        return state

    @classmethod
    def from_joint_state(cls: Type[V], state: JointState) -> V:
        """Extract the variable of this type from a full joint state."""
        result = cls(state.name, state.get_names())
        result._data = state.get_state_variable(cls.variable)
        result._empty = state.is_empty()
        return result

    def to_joint_state(self) -> JointState:
        """Full joint state with this variable set and the others at zero."""
        state = JointState(self.name, self._names)
        state.set_state_variable(self._data, self.variable)
        state._empty = self._empty
        return state

    @classmethod
    def _reinterpret(cls: Type[V], other: "_JointVariable") -> V:
        result = cls(other.name, other.get_names())
        result._data = other._data.copy()
        result._empty = other._empty
        return result

    def data(self) -> np.ndarray:
        return self._data.copy()

    def array(self) -> np.ndarray:
        return self.data()

    def set_data(self, data) -> None:
        self._data = as_vector(data, self.get_size(), self.variable.name.lower())
        self.set_filled()

    def set_zero(self) -> None:
        self._data = np.zeros(self.get_size())
        self.set_filled()

    def to_list(self) -> List[float]:
        return self._data.tolist()

    def from_list(self, values: Sequence[float]) -> None:
        self.set_data(values)

    def clamp(self, max_absolute_value, noise_ratio=0.0) -> None:
        """Clamp in place, see ``JointState.clamp_state_variable``."""
        self._assert_not_empty()
        self._data = clamp_vector(self._data, max_absolute_value, noise_ratio)

    def clamped(self: V, max_absolute_value, noise_ratio=0.0) -> V:
        result = self.copy()
        result.clamp(max_absolute_value, noise_ratio)
        return result

    def dist(self, state: "_JointVariable") -> float:
        if not isinstance(state, type(self)):
            raise IncompatibleStatesError(
                f"Cannot compute a distance between {type(self).__name__} and {type(state).__name__}"
            )
        self._check_operand(state)
        return float(np.linalg.norm(self._data - state._data))

    def __iadd__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        self._check_operand(other)
        self._data = self._data + other._data
        return self

    def __add__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        result = self.copy()
        result += other
        return result

    def __isub__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        self._check_operand(other)
        self._data = self._data - other._data
        return self

    def __sub__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        result = self.copy()
        result -= other
        return result

    def __imul__(self, gain):
        if not is_gain(gain):
            return NotImplemented
        self._assert_not_empty()
        self._data = apply_gain(gain, self._data)
        return self

    def __mul__(self, other):
        if isinstance(other, timedelta):
            return self._integrate(other)
        if not is_gain(other):
            return NotImplemented
        result = self.copy()
        result *= other
        return result

    __rmul__ = __mul__

    def __itruediv__(self, scalar):
        if not isinstance(scalar, SCALAR_TYPES):
            return NotImplemented
        self *= 1.0 / scalar
        return self

    def __truediv__(self, other):
        if isinstance(other, timedelta):
            return self._differentiate(other)
        if not isinstance(other, SCALAR_TYPES):
            return NotImplemented
        return self * (1.0 / other)

    def __neg__(self):
        return self * -1.0

    def _integrate(self, dt: timedelta):
        if self._time_integral is None:
            return NotImplemented
        self._assert_not_empty()
        result = self._time_integral._reinterpret(self)
        result._data = self._data * dt.total_seconds()
        return result

    def _differentiate(self, dt: timedelta):
        if self._time_derivative is None:
            return NotImplemented
        self._assert_not_empty()
        seconds = dt.total_seconds()
        if seconds == 0.0:
            raise ZeroDivisionError("Cannot differentiate over a zero time period")
        result = self._time_derivative._reinterpret(self)
        result._data = self._data / seconds
        return result

    def __repr__(self) -> str:
        header = f"{type(self).__name__} {self.name}"
        if self.is_empty():
            return f"{header} (empty)"
        return (
            f"{header}\nnames: {self._names}\n"
            f"{self.variable.name.lower()}: {np.array2string(self._data, precision=4)}"
        )


class JointPositions(_JointVariable):
    """Positions of a set of named joints."""

    variable = JointStateVariable.POSITIONS

    def __init__(self, robot_name: str = "", joint_names: Optional[JointNames] = None, positions=None):
        super().__init__(robot_name, joint_names, positions)

    @classmethod
    def from_velocities(cls, velocities: "JointVelocities") -> "JointPositions":
        """Velocities reinterpreted as positions, i.e. multiplied by one second."""
        return cls._reinterpret(velocities)

    def get_positions(self) -> np.ndarray:
        return self.data()

    def set_positions(self, positions) -> None:
        self.set_data(positions)

    def difference(self, state: Union["JointPositions", JointState]) -> "JointVelocities":
        """Velocities driving ``state`` to these positions in one second."""
        if isinstance(state, JointState):
            state = JointPositions.from_joint_state(state)
        return JointVelocities.from_positions(self - state)


class JointVelocities(_JointVariable):
    """Velocities of a set of named joints."""

    variable = JointStateVariable.VELOCITIES

    def __init__(self, robot_name: str = "", joint_names: Optional[JointNames] = None, velocities=None):
        super().__init__(robot_name, joint_names, velocities)

    @classmethod
    def from_positions(cls, positions: JointPositions) -> "JointVelocities":
        """Positions reinterpreted as velocities, i.e. divided by one second."""
        return cls._reinterpret(positions)

    @classmethod
    def from_accelerations(cls, accelerations: "JointAccelerations") -> "JointVelocities":
        """Accelerations reinterpreted as velocities, i.e. multiplied by one second."""
        return cls._reinterpret(accelerations)

    def get_velocities(self) -> np.ndarray:
        return self.data()

    def set_velocities(self, velocities) -> None:
        self.set_data(velocities)


class JointAccelerations(_JointVariable):
    """Accelerations of a set of named joints."""

    variable = JointStateVariable.ACCELERATIONS

    def __init__(self, robot_name: str = "", joint_names: Optional[JointNames] = None, accelerations=None):
        super().__init__(robot_name, joint_names, accelerations)

    @classmethod
    def from_velocities(cls, velocities: JointVelocities) -> "JointAccelerations":
        """Velocities reinterpreted as accelerations, i.e. divided by one second."""
        return cls._reinterpret(velocities)

    def get_accelerations(self) -> np.ndarray:
        return self.data()

    def set_accelerations(self, accelerations) -> None:
        self.set_data(accelerations)


class JointTorques(_JointVariable):
    """Torques of a set of named joints."""

    variable = JointStateVariable.TORQUES

    def __init__(self, robot_name: str = "", joint_names: Optional[JointNames] = None, torques=None):
        super().__init__(robot_name, joint_names, torques)

    def get_torques(self) -> np.ndarray:
        return self.data()

    def set_torques(self, torques) -> None:
        self.set_data(torques)


JointPositions._time_derivative = JointVelocities
JointVelocities._time_integral = JointPositions
JointVelocities._time_derivative = JointAccelerations
JointAccelerations._time_integral = JointVelocities


def dist(
    s1: Union[JointState, _JointVariable],
    s2: Union[JointState, _JointVariable],
    state_variable_type: JointStateVariable = JointStateVariable.ALL,
) -> float:
    """Distance between two joint states, see ``JointState.dist``."""
    if isinstance(s1, JointState):
        if not isinstance(s2, JointState):
            raise IncompatibleStatesError("Both states must be JointState instances")
        return s1.dist(s2, state_variable_type)
    return s1.dist(s2)
