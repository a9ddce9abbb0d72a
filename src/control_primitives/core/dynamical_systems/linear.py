"""
Linear dynamical system converging to an attractor.
"""

from typing import Union

import numpy as np

from .base import BaseDynamicalSystem
from ..contracts import Parameter
from ..exceptions import (
    EmptyAttractorError,
    EmptyStateError,
    IncompatibleSizeError,
    IncompatibleStatesError,
)
from ..state_representation import (
    CartesianPose,
    CartesianState,
    CartesianTwist,
    JointPositions,
    JointState,
    JointVelocities,
)
from ..state_representation.state import SCALAR_TYPES

PositionState = Union[JointPositions, JointState, CartesianPose, CartesianState]


class Linear(BaseDynamicalSystem):
    """
    Proportional vector field ``gain * (attractor - state)``.

    Works in joint space (positions in, JointVelocities out) and in Cartesian space
    (poses in, CartesianTwist out); the difference is taken by the attractor's
    ``difference``. The gain is stored as a full matrix whatever form it was
    given in.

    Example:
        ds = Linear(JointPositions('franka', joint_names, target), gain=[1, 1, 1, 2, 2, 2, 2])
        desired = ds.compute_dynamics(JointPositions('franka', joint_names, measured))
    """

    def __init__(self, attractor: PositionState, gain=1.0):
        """
        Initialize linear dynamical system.

        Args:
            attractor: Target state. An empty state leaves the attractor unset but
                still fixes the space and the dimension of the system.
            gain: Scalar (isotropic), vector (diagonal) or square matrix
        """
        super().__init__()
        self._attractor = self._declare_parameter(Parameter("attractor", self._as_position(attractor)))
        self._gain = self._declare_parameter(Parameter("gain", np.eye(self._attractor.value.dimension())))
        self.set_gain(gain)

    @staticmethod
    def _as_position(state: PositionState) -> Union[JointPositions, CartesianPose]:
        if isinstance(state, JointState):
            return JointPositions.from_joint_state(state)
        if isinstance(state, CartesianState):
            return CartesianPose.from_cartesian_state(state)
        if isinstance(state, (JointPositions, CartesianPose)):
            return state.copy()
        raise TypeError(
            f"Expected joint positions or a Cartesian pose, got {type(state).__name__}"
        )

    def get_attractor(self) -> Union[JointPositions, CartesianPose]:
        return self._attractor.value.copy()

    def set_attractor(self, attractor: PositionState) -> None:
        """
        Set the attractor.

        Raises:
            EmptyStateError: if the attractor is empty
            IncompatibleStatesError: if it belongs to another space than the current one
            IncompatibleSizeError: if its dimension differs from the gain's
        """
        attractor = self._as_position(attractor)
        if attractor.is_empty():
            raise EmptyStateError(f"{attractor.name} state is empty")
        if type(attractor) is not type(self._attractor.value):
            raise IncompatibleStatesError(
                f"Cannot replace a {type(self._attractor.value).__name__} attractor "
                f"with a {type(attractor).__name__}"
            )
        if attractor.dimension() != self._gain.value.shape[0]:
            raise IncompatibleSizeError(
                f"Attractor of dimension {attractor.dimension()} is incompatible with a gain "
                f"of shape {self._gain.value.shape}"
            )
        self._attractor.value = attractor

    def get_gain(self) -> np.ndarray:
        return self._gain.value.copy()

    def set_gain(self, gain) -> None:
        """
        Set the gain.

        Args:
            gain: Scalar gives ``gain * I``, a vector of the state dimension gives a
                diagonal matrix, a matrix must be square of the state dimension

        Raises:
            IncompatibleSizeError: if the gain does not match the state dimension
        """
        size = self._attractor.value.dimension()
        if isinstance(gain, SCALAR_TYPES):
            self._gain.value = float(gain) * np.eye(size)
            return
        gain = np.array(gain, dtype=float)
        if gain.ndim == 1:
            if gain.size != size:
                raise IncompatibleSizeError(
                    f"The provided diagonal coefficients do not correspond to the expected size of {size} elements"
                )
            self._gain.value = np.diag(gain)
        elif gain.ndim == 2:
            if gain.shape != (size, size):
                raise IncompatibleSizeError(
                    f"The provided gain matrix does not have the expected size of {size}x{size} elements"
                )
            self._gain.value = gain
        else:
            raise IncompatibleSizeError(f"A gain with {gain.ndim} dimensions is not supported")

    def compute_dynamics(self, state: PositionState) -> Union[JointVelocities, CartesianTwist]:
        """
        Compute the velocity driving ``state`` to the attractor.

        Args:
            state: Current positions or pose (full states are reduced to them)

        Returns:
            JointVelocities in joint space, CartesianTwist in Cartesian space

        Raises:
            EmptyAttractorError: if the attractor is not set
            EmptyStateError: if the state is empty
            IncompatibleStatesError: if the state is not compatible with the attractor
        """
        attractor = self._attractor.value
        if attractor.is_empty():
            raise EmptyAttractorError("The attractor of the dynamical system is empty.")
        position = self._as_position(state)
        if position.is_empty():
            raise EmptyStateError(f"{position.name} state is empty")
        if type(position) is not type(attractor) or not attractor.is_compatible(position):
            raise IncompatibleStatesError(
                f"The state {position.name} is incompatible with the attractor {attractor.name}"
            )
        return self._gain.value * attractor.difference(position)
