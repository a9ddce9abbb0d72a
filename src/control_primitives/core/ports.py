from __future__ import annotations
from typing import Optional, Protocol, TypeVar
import numpy as np
from .state_representation import Jacobian

VelocityT = TypeVar("VelocityT", bound="VelocityLike", covariant=True)


class VelocityLike(Protocol):
    """
    Protocol for the states a dissipative controller consumes.

    Implemented by JointVelocities and CartesianTwist.
    """
    name: str

    def is_empty(self) -> bool: ...
    def dimension(self) -> int: ...
    def data(self) -> np.ndarray: ...


class PositionLike(Protocol[VelocityT]):
    """
    Protocol for the states a dynamical system converges to.

    Implemented by JointPositions (difference -> JointVelocities) and
    CartesianPose (difference -> CartesianTwist).
    """
    name: str

    def is_empty(self) -> bool: ...
    def dimension(self) -> int: ...

    def difference(self, state) -> VelocityT:
        """
        Velocity that brings ``state`` onto this one in one second.

        Args:
            state: Current state, of the same space

        Returns:
            Velocity-like state of the same space
        """
        ...


class DynamicalSystem(Protocol):
    """Protocol for dynamical systems mapping a state to a desired velocity."""
    def compute_dynamics(self, state): ...


class ImpedanceController(Protocol):
    """Protocol for controllers mapping desired and feedback states to a command."""
    def compute_command(self, desired_state, feedback_state, jacobian: Optional[Jacobian] = None): ...
