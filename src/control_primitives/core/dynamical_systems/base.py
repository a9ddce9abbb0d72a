"""
Abstract base class for dynamical systems.

This module defines the interface that all dynamical systems must implement,
ensuring consistency across different vector fields (linear, circular, ...).
"""

import copy
from abc import ABC, abstractmethod
from typing import Any, Dict

from ..contracts import Parameter
from ..ports import PositionLike, VelocityLike


class BaseDynamicalSystem(ABC):
    """
    Abstract base class for dynamical systems.

    A dynamical system maps the current state of a robot to the velocity that
    drives it along its vector field. It implements the DynamicalSystem Protocol
    defined in ports.py.

    Each dynamical system owns its parameters (gains, attractors). Accessors hand
    out copies, so callers never share a parameter with the system.

    Example usage:
        ds = Linear(CartesianPose('target', position, orientation), gain=5.0)

        # In control loop:
        desired_twist = ds.compute_dynamics(current_pose)
    """

    def __init__(self):
        """Initialize the parameter table."""
        self._parameters: Dict[str, Parameter] = {}

    def _declare_parameter(self, parameter: Parameter) -> Parameter:
        self._parameters[parameter.name] = parameter
        return parameter

    def get_parameters(self) -> Dict[str, Parameter]:
        """
        Get a copy of all the parameters of the dynamical system.

        Returns:
            Mapping from parameter name to parameter
        """
        return {name: parameter.copy() for name, parameter in self._parameters.items()}

    def get_parameter_value(self, name: str) -> Any:
        """
        Get a copy of the value of a parameter.

        Args:
            name: Parameter name

        Raises:
            KeyError: if the dynamical system has no such parameter
        """
        return copy.deepcopy(self._parameters[name].value)

    def set_parameter_value(self, name: str, value: Any) -> None:
        """
        Set the value of a parameter through its dedicated setter.

        Args:
            name: Parameter name
            value: New value, validated by ``set_<name>``

        Raises:
            KeyError: if the dynamical system has no such parameter
        """
        if name not in self._parameters:
            raise KeyError(f"{type(self).__name__} has no parameter '{name}'")
        getattr(self, f"set_{name}")(value)

    @abstractmethod
    def compute_dynamics(self, state: PositionLike) -> VelocityLike:
        """
        Compute the desired velocity at a state.

        Args:
            state: Current state of the robot

        Returns:
            Velocity-like state in the same space
        """
        pass

    def evaluate(self, state):
        """Alias of compute_dynamics."""
        return self.compute_dynamics(state)

    def copy(self) -> "BaseDynamicalSystem":
        """Return an independent deep copy of the dynamical system."""
        return copy.deepcopy(self)
