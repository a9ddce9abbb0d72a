"""
Cartesian space states.

A Cartesian state describes a frame ``name`` expressed in ``reference_frame``.
``CartesianState`` holds the pose, twist, acceleration and wrench of the frame;
``CartesianPose``, ``CartesianTwist``, ``CartesianAcceleration`` and
``CartesianWrench`` hold one of those groups and only expose its accessors.

Orientations are unit quaternions stored as (x, y, z, w) and handled through
``scipy.spatial.transform.Rotation``. Where a pose has to behave like a 6-vector
(gains, time derivatives) it is represented as ``[position, rotation vector]``.
"""

from __future__ import annotations

from datetime import timedelta
from enum import Enum, auto
from typing import Dict, List, Optional, Sequence, Tuple, Type, TypeVar, Union

import numpy as np
from scipy.spatial.transform import Rotation

from ..exceptions import IncompatibleStatesError
from .state import SCALAR_TYPES, State, apply_gain, as_vector, clamp_vector, is_gain

C = TypeVar("C", bound="_CartesianSpace")


class CartesianStateVariable(Enum):
    POSITION = auto()
    ORIENTATION = auto()
    POSE = auto()
    LINEAR_VELOCITY = auto()
    ANGULAR_VELOCITY = auto()
    TWIST = auto()
    LINEAR_ACCELERATION = auto()
    ANGULAR_ACCELERATION = auto()
    ACCELERATION = auto()
    FORCE = auto()
    TORQUE = auto()
    WRENCH = auto()
    ALL = auto()


_Var = CartesianStateVariable
_IDENTITY_QUATERNION = np.array([0.0, 0.0, 0.0, 1.0])
_SIZES = {
    _Var.POSITION: 3,
    _Var.ORIENTATION: 4,
    _Var.LINEAR_VELOCITY: 3,
    _Var.ANGULAR_VELOCITY: 3,
    _Var.LINEAR_ACCELERATION: 3,
    _Var.ANGULAR_ACCELERATION: 3,
    _Var.FORCE: 3,
    _Var.TORQUE: 3,
}
_GROUPS = {
    _Var.POSE: (_Var.POSITION, _Var.ORIENTATION),
    _Var.TWIST: (_Var.LINEAR_VELOCITY, _Var.ANGULAR_VELOCITY),
    _Var.ACCELERATION: (_Var.LINEAR_ACCELERATION, _Var.ANGULAR_ACCELERATION),
    _Var.WRENCH: (_Var.FORCE, _Var.TORQUE),
}


def _default_value(variable: CartesianStateVariable) -> np.ndarray:
    if variable == _Var.ORIENTATION:
        return _IDENTITY_QUATERNION.copy()
    return np.zeros(_SIZES[variable])


class _CartesianSpace(State):
    """Frame, reference frame and the groups of Cartesian variables of a state."""

    _groups: Tuple[CartesianStateVariable, ...] = ()
    # Types obtained by multiplying or dividing by a time period.
    _time_integral: Optional[Type["_CartesianSpace"]] = None
    _time_derivative: Optional[Type["_CartesianSpace"]] = None

    def __init__(self, name: str = "", reference_frame: str = "world"):
        super().__init__(name)
        self._reference_frame = reference_frame
        self._values: Dict[CartesianStateVariable, np.ndarray] = {
            variable: _default_value(variable) for variable in self._fields()
        }

    @classmethod
    def _fields(cls) -> Tuple[CartesianStateVariable, ...]:
        return tuple(variable for group in cls._groups for variable in _GROUPS[group])

    @classmethod
    def Zero(cls: Type[C], name: str, reference_frame: str = "world") -> C:
        state = cls(name, reference_frame=reference_frame)
        state.set_zero()
        return state

    @classmethod
    def Random(cls: Type[C], name: str, reference_frame: str = "world") -> C:
        state = cls(name, reference_frame=reference_frame)
        for variable in cls._fields():
            if variable == _Var.ORIENTATION:
                state._values[variable] = Rotation.random().as_quat()
            else:
                state._values[variable] = np.random.uniform(-1.0, 1.0, _SIZES[variable])
        state.set_filled()
        return state

    def get_reference_frame(self) -> str:
        return self._reference_frame

    def set_reference_frame(self, reference_frame: str) -> None:
        self._reference_frame = reference_frame

    @property
    def reference_frame(self) -> str:
        return self._reference_frame

    def dimension(self) -> int:
        return 6

    def _identity(self) -> tuple:
        return (self.name, self._reference_frame)

    def is_compatible(self, other: State) -> bool:
        return isinstance(other, _CartesianSpace) and self._reference_frame == other._reference_frame

    def set_zero(self) -> None:
        for variable in self._fields():
            self._values[variable] = _default_value(variable)
        self.set_filled()

    def data(self) -> np.ndarray:
        """All the variables of the state concatenated in declaration order."""
        return self._get(_Var.ALL)

    def array(self) -> np.ndarray:
        return self.data()

    def set_data(self, data) -> None:
        self._set(data, _Var.ALL)

    def to_list(self) -> List[float]:
        return self.data().tolist()

    def from_list(self, values: Sequence[float]) -> None:
        self.set_data(values)

    def _expand(self, variable: CartesianStateVariable) -> Tuple[CartesianStateVariable, ...]:
        if variable == _Var.ALL:
            return self._fields()
        variables = _GROUPS.get(variable, (variable,))
        for item in variables:
            if item not in self._values:
                raise IncompatibleStatesError(
                    f"{type(self).__name__} has no {item.name.lower()} variable"
                )
        return variables

    def _get(self, variable: CartesianStateVariable) -> np.ndarray:
        return np.concatenate([self._values[item] for item in self._expand(variable)])

    def _set(self, values, variable: CartesianStateVariable) -> None:
        variables = self._expand(variable)
        vector = as_vector(values, sum(_SIZES[item] for item in variables), variable.name.lower())
        start = 0
        for item in variables:
            chunk = vector[start:start + _SIZES[item]]
            if item == _Var.ORIENTATION:
                chunk = Rotation.from_quat(chunk).as_quat()
            self._values[item] = chunk.copy()
            start += _SIZES[item]
        self.set_filled()

    def _group_vector(self, group: CartesianStateVariable) -> np.ndarray:
        first, second = _GROUPS[group]
        if group == _Var.POSE:
            rotation_vector = Rotation.from_quat(self._values[second]).as_rotvec()
            return np.concatenate([self._values[first], rotation_vector])
        return np.concatenate([self._values[first], self._values[second]])

    def _set_group_vector(self, group: CartesianStateVariable, vector: np.ndarray) -> None:
        first, second = _GROUPS[group]
        self._values[first] = np.array(vector[:3], dtype=float)
        if group == _Var.POSE:
            self._values[second] = Rotation.from_rotvec(vector[3:]).as_quat()
        else:
            self._values[second] = np.array(vector[3:], dtype=float)

    def _check_operand(self, other: "_CartesianSpace") -> None:
        self._assert_not_empty()
        other._assert_not_empty()
        if not self.is_compatible(other):
            raise IncompatibleStatesError(
                f"{self.name} is expressed in {self._reference_frame} and "
                f"{other.name} in {other.reference_frame}"
            )

    def _clamp(self, variable: CartesianStateVariable, max_absolute_value, noise_ratio) -> None:
        if variable in (_Var.ORIENTATION, _Var.POSE, _Var.ALL):
            raise ValueError(f"Cannot clamp the {variable.name.lower()} of a Cartesian state")
        self._assert_not_empty()
        values = self._get(variable)
        self._set(clamp_vector(values, max_absolute_value, noise_ratio), variable)

    def dist(
        self, state: "_CartesianSpace", state_variable_type: CartesianStateVariable = _Var.ALL
    ) -> float:
        """
        Distance to another state of the same type.

        Orientations contribute their geodesic angle, every other variable the
        Euclidean norm of the difference. Composite variables sum their parts.
        """
        if not isinstance(state, type(self)):
            raise IncompatibleStatesError(
                f"Cannot compute a distance between {type(self).__name__} and {type(state).__name__}"
            )
        self._check_operand(state)
        total = 0.0
        for variable in self._expand(state_variable_type):
            if variable == _Var.ORIENTATION:
                relative = Rotation.from_quat(self._values[variable]).inv() * Rotation.from_quat(
                    state._values[variable]
                )
                total += relative.magnitude()
            else:
                total += np.linalg.norm(self._values[variable] - state._values[variable])
        return float(total)

    def __iadd__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        self._check_operand(other)
        for variable in self._fields():
            if variable == _Var.ORIENTATION:
                rotation = Rotation.from_quat(self._values[variable]) * Rotation.from_quat(other._values[variable])
                self._values[variable] = rotation.as_quat()
            else:
                self._values[variable] = self._values[variable] + other._values[variable]
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
        for variable in self._fields():
            if variable == _Var.ORIENTATION:
                rotation = Rotation.from_quat(self._values[variable]) * Rotation.from_quat(
                    other._values[variable]
                ).inv()
                self._values[variable] = rotation.as_quat()
            else:
                self._values[variable] = self._values[variable] - other._values[variable]
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
        for group in self._groups:
            self._set_group_vector(group, apply_gain(gain, self._group_vector(group)))
        return self

    def __mul__(self, other):
        if isinstance(other, _CartesianSpace):
            if _Var.POSE not in self._groups:
                return NotImplemented
            return self._transform(other)
        if isinstance(other, timedelta):
            return self._integrate(other)
        if not is_gain(other):
            return NotImplemented
        result = self.copy()
        result *= other
        return result

    def __rmul__(self, other):
        if isinstance(other, timedelta):
            return self._integrate(other)
        if not is_gain(other):
            return NotImplemented
        result = self.copy()
        result *= other
        return result

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

    def _transform(self, other: "_CartesianSpace"):
        """Express ``other``, given in the frame of this state, in this state's reference frame."""
        self._assert_not_empty()
        other._assert_not_empty()
        if other.reference_frame != self.name:
            raise IncompatibleStatesError(
                f"Expected {other.name} to be expressed in {self.name}, got {other.reference_frame}"
            )
        rotation = Rotation.from_quat(self._values[_Var.ORIENTATION])
        result = other.copy()
        result._reference_frame = self._reference_frame
        for variable in other._fields():
            value = other._values[variable]
            if variable == _Var.POSITION:
                result._values[variable] = rotation.apply(value) + self._values[_Var.POSITION]
            elif variable == _Var.ORIENTATION:
                result._values[variable] = (rotation * Rotation.from_quat(value)).as_quat()
            else:
                result._values[variable] = rotation.apply(value)
        return result

    def _time_product(self, target: Optional[Type["_CartesianSpace"]], factor: float):
        if target is None:
            return NotImplemented
        self._assert_not_empty()
        result = target(self.name, reference_frame=self._reference_frame)
        result._set_group_vector(target._groups[0], self._group_vector(self._groups[0]) * factor)
        result.set_filled()
        return result

    def _integrate(self, dt: timedelta):
        return self._time_product(self._time_integral, dt.total_seconds())

    def _differentiate(self, dt: timedelta):
        if self._time_derivative is None:
            return NotImplemented
        seconds = dt.total_seconds()
        if seconds == 0.0:
            raise ZeroDivisionError("Cannot differentiate over a zero time period")
        return self._time_product(self._time_derivative, 1.0 / seconds)

    def __repr__(self) -> str:
        header = f"{type(self).__name__} {self.name} expressed in {self._reference_frame}"
        if self.is_empty():
            return f"{header} (empty)"
        lines = [header]
        for variable in self._fields():
            lines.append(f"{variable.name.lower()}: {np.array2string(self._values[variable], precision=4)}")
        return "\n".join(lines)


class _PoseAccessors:
    def get_position(self) -> np.ndarray:
        return self._get(_Var.POSITION)

    def set_position(self, position) -> None:
        self._set(position, _Var.POSITION)

    def get_orientation(self) -> np.ndarray:
        """Unit quaternion (x, y, z, w)."""
        return self._get(_Var.ORIENTATION)

    def set_orientation(self, orientation: Union[Rotation, Sequence[float]]) -> None:
        if isinstance(orientation, Rotation):
            orientation = orientation.as_quat()
        self._set(orientation, _Var.ORIENTATION)

    def get_rotation(self) -> Rotation:
        return Rotation.from_quat(self._values[_Var.ORIENTATION])

    def get_pose(self) -> np.ndarray:
        """Position followed by the (x, y, z, w) quaternion."""
        return self._get(_Var.POSE)

    def set_pose(self, pose) -> None:
        self._set(pose, _Var.POSE)

    def get_transformation_matrix(self) -> np.ndarray:
        transform = np.eye(4)
        transform[:3, :3] = self.get_rotation().as_matrix()
        transform[:3, 3] = self._values[_Var.POSITION]
        return transform


class _TwistAccessors:
    def get_linear_velocity(self) -> np.ndarray:
        return self._get(_Var.LINEAR_VELOCITY)

    def set_linear_velocity(self, linear_velocity) -> None:
        self._set(linear_velocity, _Var.LINEAR_VELOCITY)

    def get_angular_velocity(self) -> np.ndarray:
        return self._get(_Var.ANGULAR_VELOCITY)

    def set_angular_velocity(self, angular_velocity) -> None:
        self._set(angular_velocity, _Var.ANGULAR_VELOCITY)

    def get_twist(self) -> np.ndarray:
        return self._get(_Var.TWIST)

    def set_twist(self, twist) -> None:
        self._set(twist, _Var.TWIST)


class _AccelerationAccessors:
    def get_linear_acceleration(self) -> np.ndarray:
        return self._get(_Var.LINEAR_ACCELERATION)

    def set_linear_acceleration(self, linear_acceleration) -> None:
        self._set(linear_acceleration, _Var.LINEAR_ACCELERATION)

    def get_angular_acceleration(self) -> np.ndarray:
        return self._get(_Var.ANGULAR_ACCELERATION)

    def set_angular_acceleration(self, angular_acceleration) -> None:
        self._set(angular_acceleration, _Var.ANGULAR_ACCELERATION)

    def get_acceleration(self) -> np.ndarray:
        return self._get(_Var.ACCELERATION)

    def set_acceleration(self, acceleration) -> None:
        self._set(acceleration, _Var.ACCELERATION)


class _WrenchAccessors:
    def get_force(self) -> np.ndarray:
        return self._get(_Var.FORCE)

    def set_force(self, force) -> None:
        self._set(force, _Var.FORCE)

    def get_torque(self) -> np.ndarray:
        return self._get(_Var.TORQUE)

    def set_torque(self, torque) -> None:
        self._set(torque, _Var.TORQUE)

    def get_wrench(self) -> np.ndarray:
        return self._get(_Var.WRENCH)

    def set_wrench(self, wrench) -> None:
        self._set(wrench, _Var.WRENCH)


class CartesianState(
    _PoseAccessors, _TwistAccessors, _AccelerationAccessors, _WrenchAccessors, _CartesianSpace
):
    """
    Pose, twist, acceleration and wrench of a frame expressed in a reference frame.

    Example:
        state = CartesianState.Random('ee', 'world')
        state.clamp_state_variable(0.5, CartesianStateVariable.LINEAR_VELOCITY)
    """

    _groups = (_Var.POSE, _Var.TWIST, _Var.ACCELERATION, _Var.WRENCH)

    def get_state_variable(self, state_variable_type: CartesianStateVariable) -> np.ndarray:
        return self._get(state_variable_type)

    def set_state_variable(self, values, state_variable_type: CartesianStateVariable) -> None:
        self._set(values, state_variable_type)

    def clamp_state_variable(
        self,
        max_absolute_value,
        state_variable_type: CartesianStateVariable,
        noise_ratio=0.0,
    ) -> None:
        """Clamp in place the magnitude of a vector variable, with an optional dead zone."""
        self._clamp(state_variable_type, max_absolute_value, noise_ratio)


class _CartesianVariable(_CartesianSpace):
    """A Cartesian state holding a single group of ``CartesianState``."""

    @classmethod
    def from_cartesian_state(cls: Type[C], state: CartesianState) -> C:
        result = cls(state.name, reference_frame=state.reference_frame)
        for variable in cls._fields():
            result._values[variable] = state._values[variable].copy()
        result._empty = state.is_empty()
        return result

    def to_cartesian_state(self) -> CartesianState:
        state = CartesianState(self.name, reference_frame=self._reference_frame)
        for variable in self._fields():
            state._values[variable] = self._values[variable].copy()
        state._empty = self._empty
        return state

    def _set_components(self, first, second) -> None:
        group = self._groups[0]
        if first is not None:
            self._set(first, _GROUPS[group][0])
        if second is not None:
            self._set(second, _GROUPS[group][1])

    def _clamp_components(self, max_first, max_second, noise_first, noise_second) -> None:
        first, second = _GROUPS[self._groups[0]]
        self._clamp(first, max_first, noise_first)
        self._clamp(second, max_second, noise_second)


class CartesianPose(_PoseAccessors, _CartesianVariable):
    """Position and orientation of a frame."""

    _groups = (_Var.POSE,)

    def __init__(self, name: str = "", position=None, orientation=None, reference_frame: str = "world"):
        super().__init__(name, reference_frame)
        if isinstance(orientation, Rotation):
            orientation = orientation.as_quat()
        self._set_components(position, orientation)

    def inverse(self) -> "CartesianPose":
        """Pose of the reference frame expressed in this frame."""
        self._assert_not_empty()
        rotation = self.get_rotation().inv()
        return CartesianPose(
            self._reference_frame,
            position=-rotation.apply(self._values[_Var.POSITION]),
            orientation=rotation.as_quat(),
            reference_frame=self.name,
        )

    def difference(self, state: Union["CartesianPose", CartesianState]) -> "CartesianTwist":
        """Twist driving ``state`` to this pose in one second."""
        if isinstance(state, CartesianState):
            state = CartesianPose.from_cartesian_state(state)
        twist = (self - state) / timedelta(seconds=1)
        twist.set_name(state.name)
        return twist


class CartesianTwist(_TwistAccessors, _CartesianVariable):
    """Linear and angular velocity of a frame."""

    _groups = (_Var.TWIST,)

    def __init__(
        self, name: str = "", linear_velocity=None, angular_velocity=None, reference_frame: str = "world"
    ):
        super().__init__(name, reference_frame)
        self._set_components(linear_velocity, angular_velocity)

    def clamp(self, max_linear, max_angular, linear_noise_ratio=0.0, angular_noise_ratio=0.0) -> None:
        self._clamp_components(max_linear, max_angular, linear_noise_ratio, angular_noise_ratio)

    def clamped(self, max_linear, max_angular, linear_noise_ratio=0.0, angular_noise_ratio=0.0):
        result = self.copy()
        result.clamp(max_linear, max_angular, linear_noise_ratio, angular_noise_ratio)
        return result


class CartesianAcceleration(_AccelerationAccessors, _CartesianVariable):
    """Linear and angular acceleration of a frame."""

    _groups = (_Var.ACCELERATION,)

    def __init__(
        self,
        name: str = "",
        linear_acceleration=None,
        angular_acceleration=None,
        reference_frame: str = "world",
    ):
        super().__init__(name, reference_frame)
        self._set_components(linear_acceleration, angular_acceleration)

    def clamp(self, max_linear, max_angular, linear_noise_ratio=0.0, angular_noise_ratio=0.0) -> None:
        self._clamp_components(max_linear, max_angular, linear_noise_ratio, angular_noise_ratio)

    def clamped(self, max_linear, max_angular, linear_noise_ratio=0.0, angular_noise_ratio=0.0):
        result = self.copy()
        result.clamp(max_linear, max_angular, linear_noise_ratio, angular_noise_ratio)
        return result


class CartesianWrench(_WrenchAccessors, _CartesianVariable):
    """Force and torque applied at a frame."""

    _groups = (_Var.WRENCH,)

    def __init__(self, name: str = "", force=None, torque=None, reference_frame: str = "world"):
        super().__init__(name, reference_frame)
        self._set_components(force, torque)

    def clamp(self, max_force, max_torque, force_noise_ratio=0.0, torque_noise_ratio=0.0) -> None:
        self._clamp_components(max_force, max_torque, force_noise_ratio, torque_noise_ratio)

    def clamped(self, max_force, max_torque, force_noise_ratio=0.0, torque_noise_ratio=0.0):
        result = self.copy()
        result.clamp(max_force, max_torque, force_noise_ratio, torque_noise_ratio)
        return result


CartesianPose._time_derivative = CartesianTwist
CartesianTwist._time_integral = CartesianPose
CartesianTwist._time_derivative = CartesianAcceleration
CartesianAcceleration._time_integral = CartesianTwist


def dist(
    s1: _CartesianSpace,
    s2: _CartesianSpace,
    state_variable_type: CartesianStateVariable = CartesianStateVariable.ALL,
) -> float:
    """Distance between two Cartesian states, see ``CartesianState.dist``."""
    return s1.dist(s2, state_variable_type)
