"""
Impedance controller.

Control Law:
    command = K (x_desired - x) + D (ẋ_desired - ẋ) + M (ẍ_desired - ẍ)

Where:
    - K: Stiffness matrix - resistance to pose (or joint position) error
    - D: Damping matrix - resistance to velocity error
    - M: Inertia matrix - resistance to acceleration error

In Cartesian space the orientation error is the rotation vector of
q_desired · q⁻¹, so the pose error is a 6-vector like the twist.
"""

from typing import Optional, Union

import numpy as np

from .base import BaseImpedanceController, Command
from ..exceptions import IncompatibleStatesError
from ..state_representation import CartesianState, Jacobian, JointState


class Impedance(BaseImpedanceController):
    """
    Mass-spring-damper between a desired and a measured full state.

    Example:
        controller = Impedance(7, stiffness=100.0, damping=10.0)
        torques = controller.compute_command(desired_joint_state, measured_joint_state)
    """

    def __init__(self, nb_dimensions: int = 6, stiffness=0.0, damping=0.0, inertia=0.0):
        super().__init__(nb_dimensions, stiffness=stiffness, damping=damping, inertia=inertia)

    def compute_command(
        self,
        desired_state: Union[CartesianState, JointState],
        feedback_state: Union[CartesianState, JointState],
        jacobian: Optional[Jacobian] = None,
    ) -> Command:
        """
        Compute the impedance command.

        Args:
            desired_state: Desired CartesianState or JointState
            feedback_state: Measured state of the same type
            jacobian: If given, the wrench is projected to joint torques

        Returns:
            CartesianWrench, or JointTorques in joint space or when a Jacobian is given
        """
        if isinstance(desired_state, CartesianState) and isinstance(feedback_state, CartesianState):
            error = desired_state - feedback_state
            pose_error = np.concatenate([error.get_position(), error.get_rotation().as_rotvec()])
            twist_error = error.get_twist()
            acceleration_error = error.get_acceleration()
        elif isinstance(desired_state, JointState) and isinstance(feedback_state, JointState):
            error = desired_state - feedback_state
            pose_error = error.get_positions()
            twist_error = error.get_velocities()
            acceleration_error = error.get_accelerations()
        else:
            raise IncompatibleStatesError(
                f"Expected two CartesianState or two JointState, got {type(desired_state).__name__} "
                f"and {type(feedback_state).__name__}"
            )
        self._check_dimension(pose_error.size)

        values = (
            self._stiffness.value @ pose_error
            + self._damping.value @ twist_error
            + self._inertia.value @ acceleration_error
        )
        command = self._make_command(desired_state, values)
        if jacobian is not None:
            return self._project(command, jacobian)
        return command
