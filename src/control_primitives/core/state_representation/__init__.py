"""
State representation package.

Typed joint space and Cartesian space states with unit- and frame-checked
arithmetic, and the Jacobian linking the two spaces.
"""

from .state import State
from .joint_space import (
    JointAccelerations,
    JointPositions,
    JointState,
    JointStateVariable,
    JointTorques,
    JointVelocities,
)
from .joint_space import dist as joint_dist
from .cartesian_space import (
    CartesianAcceleration,
    CartesianPose,
    CartesianState,
    CartesianStateVariable,
    CartesianTwist,
    CartesianWrench,
)
from .cartesian_space import dist as cartesian_dist
from .jacobian import Jacobian


def dist(s1, s2, state_variable_type=None) -> float:
    """Distance between two joint space or two Cartesian space states."""
    cartesian_types = (CartesianState, CartesianPose, CartesianTwist, CartesianAcceleration, CartesianWrench)
    if isinstance(s1, cartesian_types):
        if state_variable_type is None:
            state_variable_type = CartesianStateVariable.ALL
        return cartesian_dist(s1, s2, state_variable_type)
    if state_variable_type is None:
        state_variable_type = JointStateVariable.ALL
    return joint_dist(s1, s2, state_variable_type)


__all__ = [
    'State',
    'JointState',
    'JointPositions',
    'JointVelocities',
    'JointAccelerations',
    'JointTorques',
    'JointStateVariable',
    'CartesianState',
    'CartesianPose',
    'CartesianTwist',
    'CartesianAcceleration',
    'CartesianWrench',
    'CartesianStateVariable',
    'Jacobian',
    'dist',
    'joint_dist',
    'cartesian_dist',
]
