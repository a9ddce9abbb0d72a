"""
Abstract base class for impedance controllers.

This module defines the interface that all impedance controllers must implement,
ensuring consistency across the different control laws (impedance, dissipative, ...).
"""

import copy
from abc import ABC, abstractmethod
from typing import Dict, Optional, Union

import numpy as np

from ..contracts import Parameter
from ..exceptions import IncompatibleSizeError, IncompatibleStatesError
from ..state_representation import (
    CartesianState,
    CartesianTwist,
    CartesianWrench,
    Jacobian,
    JointState,
    JointTorques,
    JointVelocities,
)
from ..state_representation.state import SCALAR_TYPES

Command = Union[CartesianWrench, JointTorques]


def gain_matrix(value, size: int, label: str) -> np.ndarray:
    """
    Build a square gain matrix.

    Args:
        value: Scalar (isotropic), vector (diagonal) or square matrix
        size: Expected dimension
        label: Name used in error messages

    Raises:
        IncompatibleSizeError: if a vector or matrix does not match ``size``
    """
    if isinstance(value, SCALAR_TYPES):
        return float(value) * np.eye(size)
    matrix = np.array(value, dtype=float)
    if matrix.ndim == 1:
        if matrix.size != size:
            raise IncompatibleSizeError(
                f"The provided {label} coefficients do not correspond to the expected size of {size} elements"
            )
        return np.diag(matrix)
    if matrix.shape != (size, size):
        raise IncompatibleSizeError(
            f"The provided {label} matrix of shape {matrix.shape} does not have the expected size of "
            f"{size}x{size} elements"
        )
    return matrix


class BaseImpedanceController(ABC):
    """
    Abstract base class for impedance controllers.

    Impedance controllers receive a desired and a measured state and compute the
    force (Cartesian space) or torque (joint space) command realizing a virtual
    mass-spring-damper between them. When a Jacobian is given, a Cartesian
    command is projected to joint torques with ``J^T * wrench``.

    The stiffness, damping and inertia matrices are owned by the controller.
    Getters return copies.

    This class implements the ImpedanceController Protocol defined in ports.py.

    Example usage:
        controller = Dissipative(ComputationalSpace.LINEAR)
        controller.set_damping_eigenvalue(10.0, 0)

        # In control loop:
        wrench = controller.compute_command(desired_twist, measured_twist)
        torques = controller.compute_command(desired_twist, measured_twist, jacobian)
    """

    def __init__(self, nb_dimensions: int, stiffness=0.0, damping=0.0, inertia=0.0):
        """
        Initialize base impedance controller.

        Args:
            nb_dimensions: Dimension of the controlled space (6 in Cartesian space,
                the number of joints in joint space)
            stiffness: Stiffness gain, scalar, diagonal or full matrix
            damping: Damping gain, scalar, diagonal or full matrix
            inertia: Inertia gain, scalar, diagonal or full matrix
        """
        if nb_dimensions <= 0:
            raise IncompatibleSizeError(f"A controller needs a positive dimension, got {nb_dimensions}")
        self._nb_dimensions = int(nb_dimensions)
        self._stiffness = Parameter("stiffness", gain_matrix(stiffness, self._nb_dimensions, "stiffness"))
        self._damping = Parameter("damping", gain_matrix(damping, self._nb_dimensions, "damping"))
        self._inertia = Parameter("inertia", gain_matrix(inertia, self._nb_dimensions, "inertia"))

    @property
    def nb_dimensions(self) -> int:
        return self._nb_dimensions

    def get_parameters(self) -> Dict[str, Parameter]:
        """Copies of the gain matrices, keyed by name."""
        return {
            parameter.name: parameter.copy()
            for parameter in (self._stiffness, self._damping, self._inertia)
        }

    def get_stiffness(self) -> np.ndarray:
        return self._stiffness.value.copy()

    def set_stiffness(self, stiffness) -> None:
        self._stiffness.value = gain_matrix(stiffness, self._nb_dimensions, "stiffness")

    def get_damping(self) -> np.ndarray:
        return self._damping.value.copy()

    def set_damping(self, damping) -> None:
        self._damping.value = gain_matrix(damping, self._nb_dimensions, "damping")

    def get_inertia(self) -> np.ndarray:
        return self._inertia.value.copy()

    def set_inertia(self, inertia) -> None:
        self._inertia.value = gain_matrix(inertia, self._nb_dimensions, "inertia")

    @abstractmethod
    def compute_command(self, desired_state, feedback_state, jacobian: Optional[Jacobian] = None):
        """
        Compute the command driving the feedback state to the desired state.

        Args:
            desired_state: Desired state
            feedback_state: Measured state, of the same space
            jacobian: If given, the Cartesian command is projected to joint torques

        Returns:
            CartesianWrench in Cartesian space, JointTorques in joint space or
            when a Jacobian is given
        """
        pass

    def copy(self) -> "BaseImpedanceController":
        """Return an independent deep copy of the controller."""
        return copy.deepcopy(self)

    def _check_dimension(self, size: int) -> None:
        if size != self._nb_dimensions:
            raise IncompatibleSizeError(
                f"A state of dimension {size} is incompatible with a controller of dimension "
                f"{self._nb_dimensions}"
            )

    @staticmethod
    def _make_command(reference, values: np.ndarray) -> Command:
        """Wrap a command vector in the command type of the space of ``reference``."""
        if isinstance(reference, (CartesianState, CartesianTwist)):
            return CartesianWrench(
                reference.name, values[:3], values[3:], reference_frame=reference.reference_frame
            )
        if isinstance(reference, (JointState, JointVelocities)):
            return JointTorques(reference.name, reference.get_names(), values)
        raise TypeError(f"Cannot build a command for a {type(reference).__name__}")

    @staticmethod
    def _project(command: Command, jacobian: Jacobian) -> JointTorques:
        """
        Project a Cartesian command to joint torques with ``J^T * wrench``.

        Raises:
            IncompatibleStatesError: if the command is already in joint space or its
                reference frame differs from the Jacobian's
        """
        if not isinstance(command, CartesianWrench):
            raise IncompatibleStatesError("Only a Cartesian command can be projected through a Jacobian")
        if jacobian.get_reference_frame() != command.reference_frame:
            raise IncompatibleStatesError(
                f"The Jacobian is expressed in {jacobian.get_reference_frame()}, "
                f"the command of {command.name} in {command.reference_frame}"
            )
        return jacobian.transpose() * command
