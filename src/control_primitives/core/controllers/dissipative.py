"""
Dissipative impedance controller.

The damping matrix is rebuilt at each command so that its first eigenvector is
aligned with the desired velocity:

    D = Q · diag(λ) · Qᵗ,    command = D (v_desired - v_feedback)

where Q is an orthonormal basis whose first column is the normalized desired
velocity and λ are the damping eigenvalues. With λ_0 large and the remaining
eigenvalues small, motion along the desired direction is tracked while motion
orthogonal to it is only lightly damped.

The computational space selects over which part of the twist Q is built:

- LINEAR: linear velocity only, 3x3 linear block, everything else zero
- ANGULAR: angular velocity only, 3x3 angular block, everything else zero
- DECOUPLED_TWIST: one basis per half, no coupling between them
- FULL: a single basis over the whole vector (also used in joint space)

A block is only rebuilt when its velocity is above ``zero_velocity_threshold``,
otherwise the previous damping is kept.
"""

import logging
from typing import Optional, Union

import numpy as np

from .base import BaseImpedanceController, Command
from ..contracts import ComputationalSpace, Parameter
from ..exceptions import IncompatibleSizeError, IncompatibleStatesError
from ..state_representation import (
    CartesianState,
    CartesianTwist,
    Jacobian,
    JointState,
    JointVelocities,
)
from ..state_representation.state import as_vector

logger = logging.getLogger(__name__)

VelocityState = Union[CartesianTwist, CartesianState, JointVelocities, JointState]

_BASIS_EPSILON = 1e-10


class Dissipative(BaseImpedanceController):
    """
    Impedance controller whose damping is aligned with the desired velocity.

    Stiffness and inertia are zero: the command only depends on the velocity error.

    Example:
        controller = Dissipative(ComputationalSpace.LINEAR)
        controller.set_damping_eigenvalues([100.0, 10.0, 10.0, 1.0, 1.0, 1.0])
        wrench = controller.compute_command(desired_twist, measured_twist)

        joint_controller = Dissipative.for_joints(7)
        torques = joint_controller.compute_command(desired_velocities, measured_velocities)
    """

    def __init__(
        self,
        computational_space: ComputationalSpace = ComputationalSpace.FULL,
        nb_dimensions: int = 6,
        zero_velocity_threshold: float = 1e-4,
    ):
        """
        Initialize dissipative controller.

        Args:
            computational_space: Part of the velocity the damping is aligned with
            nb_dimensions: 6 in Cartesian space, the number of joints in joint space
                (only with the FULL computational space)
            zero_velocity_threshold: Velocity norm below which the damping is not rebuilt

        Raises:
            IncompatibleSizeError: if a non FULL space is used with another dimension than 6
        """
        if isinstance(computational_space, str):
            computational_space = ComputationalSpace.from_string(computational_space)
        if computational_space != ComputationalSpace.FULL and nb_dimensions != 6:
            raise IncompatibleSizeError(
                f"The {computational_space.name.lower()} computational space requires 6 dimensions, "
                f"got {nb_dimensions}"
            )
        if zero_velocity_threshold < 0.0:
            raise ValueError(f"The zero velocity threshold must be positive, got {zero_velocity_threshold}")
        super().__init__(nb_dimensions, stiffness=0.0, damping=0.0, inertia=0.0)
        self._computational_space = computational_space
        self._zero_velocity_threshold = float(zero_velocity_threshold)
        self._damping_eigenvalues = Parameter("damping_eigenvalues", np.ones(self._nb_dimensions))

    @classmethod
    def for_joints(cls, nb_joints: int, zero_velocity_threshold: float = 1e-4) -> "Dissipative":
        """Joint space controller, damping over the full joint velocity vector."""
        return cls(ComputationalSpace.FULL, nb_joints, zero_velocity_threshold)

    @property
    def computational_space(self) -> ComputationalSpace:
        return self._computational_space

    @property
    def zero_velocity_threshold(self) -> float:
        return self._zero_velocity_threshold

    def get_parameters(self):
        parameters = super().get_parameters()
        parameters[self._damping_eigenvalues.name] = self._damping_eigenvalues.copy()
        return parameters

    def get_damping_eigenvalues(self) -> np.ndarray:
        return self._damping_eigenvalues.value.copy()

    def set_damping_eigenvalue(self, damping_eigenvalue: float, index: int) -> None:
        """
        Set one damping eigenvalue.

        Index 0 is the eigenvalue along the desired velocity. In the LINEAR and
        DECOUPLED_TWIST spaces indices 0 to 2 act on the linear block, in the
        ANGULAR and DECOUPLED_TWIST spaces indices 3 to 5 act on the angular block.
        """
        if not 0 <= index < self._nb_dimensions:
            raise IndexError(
                f"Index {index} is out of range for {self._nb_dimensions} damping eigenvalues"
            )
        self._damping_eigenvalues.value[index] = float(damping_eigenvalue)

    def set_damping_eigenvalues(self, damping_eigenvalues) -> None:
        self._damping_eigenvalues.value = as_vector(
            damping_eigenvalues, self._nb_dimensions, "damping eigenvalues"
        )

    @staticmethod
    def compute_orthonormal_basis(basis, eigenvector) -> np.ndarray:
        """
        Orthonormal basis whose first column is the normalized eigenvector.

        The other columns are obtained by Gram-Schmidt orthogonalization of the
        columns of the seed basis (its first column last) against the columns
        already built. Seed columns that are linearly dependent on them are
        skipped and the canonical axes complete the basis.

        Args:
            basis: Square seed basis
            eigenvector: Direction of the first column, must not be zero

        Returns:
            Square matrix with orthonormal columns

        Raises:
            IncompatibleSizeError: if basis and eigenvector sizes differ
            ValueError: if the eigenvector has a zero norm
        """
        seed = np.asarray(basis, dtype=float)
        direction = np.asarray(eigenvector, dtype=float)
        size = direction.size
        if direction.ndim != 1 or seed.shape != (size, size):
            raise IncompatibleSizeError(
                f"A seed basis of shape {seed.shape} is incompatible with an eigenvector of shape {direction.shape}"
            )
        norm = np.linalg.norm(direction)
        if norm < _BASIS_EPSILON:
            raise ValueError("Cannot build an orthonormal basis from a zero eigenvector")

        columns = [direction / norm]
        candidates = [seed[:, i] for i in range(1, size)] + [seed[:, 0]] + list(np.eye(size))
        for candidate in candidates:
            if len(columns) == size:
                break
            residual = candidate.copy()
            for column in columns:
                residual -= np.dot(residual, column) * column
            residual_norm = np.linalg.norm(residual)
            if residual_norm > _BASIS_EPSILON:
                columns.append(residual / residual_norm)
        return np.column_stack(columns)

    def _aligned_block(self, velocity: np.ndarray, eigenvalues: np.ndarray) -> Optional[np.ndarray]:
        if np.linalg.norm(velocity) <= self._zero_velocity_threshold:
            return None
        basis = self.compute_orthonormal_basis(np.eye(velocity.size), velocity)
        return basis @ np.diag(eigenvalues) @ basis.T

    def compute_damping(self, velocity) -> None:
        """
        Rebuild the damping matrix aligned with a velocity.

        Args:
            velocity: Velocity vector of the controller dimension, or a velocity state
                (a full state contributes its twist or joint velocities)

        Raises:
            TypeError: if velocity is neither a vector nor a velocity carrying state
        """
        if not isinstance(velocity, (np.ndarray, list, tuple)):
            velocity = self._as_velocity(velocity).data()
        velocity = as_vector(velocity, self._nb_dimensions, "velocity")
        eigenvalues = self._damping_eigenvalues.value

        if self._computational_space == ComputationalSpace.FULL:
            block = self._aligned_block(velocity, eigenvalues)
            if block is None:
                logger.debug("Velocity below %g, damping kept", self._zero_velocity_threshold)
                return
            self._damping.value = block
            return

        linear = angular = None
        if self._computational_space in (ComputationalSpace.LINEAR, ComputationalSpace.DECOUPLED_TWIST):
            linear = self._aligned_block(velocity[:3], eigenvalues[:3])
        if self._computational_space in (ComputationalSpace.ANGULAR, ComputationalSpace.DECOUPLED_TWIST):
            angular = self._aligned_block(velocity[3:], eigenvalues[3:])
        if linear is None and angular is None:
            logger.debug(
                "Velocity below %g in the %s space, damping kept",
                self._zero_velocity_threshold,
                self._computational_space.name.lower(),
            )
            return

        if self._computational_space == ComputationalSpace.DECOUPLED_TWIST:
            damping = self._damping.value.copy()
            damping[:3, 3:] = 0.0
            damping[3:, :3] = 0.0
        else:
            damping = np.zeros((6, 6))
        if linear is not None:
            damping[:3, :3] = linear
        if angular is not None:
            damping[3:, 3:] = angular
        self._damping.value = damping

    @staticmethod
    def _as_velocity(state: VelocityState) -> Union[CartesianTwist, JointVelocities]:
        if isinstance(state, CartesianState):
            return CartesianTwist.from_cartesian_state(state)
        if isinstance(state, JointState):
            return JointVelocities.from_joint_state(state)
        if isinstance(state, (CartesianTwist, JointVelocities)):
            return state
        raise TypeError(f"Expected a twist or joint velocities, got {type(state).__name__}")

    def compute_command(
        self,
        desired_state: VelocityState,
        feedback_state: VelocityState,
        jacobian: Optional[Jacobian] = None,
    ) -> Command:
        """
        Compute ``D (desired - feedback)`` after aligning D with the desired velocity.

        Args:
            desired_state: Desired twist or joint velocities (full states are reduced to them)
            feedback_state: Measured twist or joint velocities
            jacobian: If given, the wrench is projected to joint torques. Its frame
                and reference frame must be those of the states.

        Returns:
            CartesianWrench, or JointTorques in joint space or when a Jacobian is given

        Raises:
            EmptyStateError: if a state is empty
            IncompatibleStatesError: if the states are not of the same space, names or frames
            IncompatibleSizeError: if the states do not have the controller dimension
        """
        desired = self._as_velocity(desired_state)
        feedback = self._as_velocity(feedback_state)
        if type(desired) is not type(feedback):
            raise IncompatibleStatesError(
                f"Cannot compare a {type(desired).__name__} with a {type(feedback).__name__}"
            )
        error = desired - feedback
        self._check_dimension(desired.data().size)
        self.compute_damping(desired.data())
        command = self._make_command(desired, self._damping.value @ error.data())
        if jacobian is not None:
            return self._project(command, jacobian)
        return command
