from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional
from .ports import DynamicalSystem, ImpedanceController
from .state_representation import Jacobian

logger = logging.getLogger(__name__)


@dataclass
class ControlPipeline:
    """
    Attractor -> dynamical system -> impedance controller [-> Jacobian].

    Each control tick evaluates the dynamical system at the measured position to
    get the desired velocity, then asks the controller for the command that
    brings the measured velocity to it. With a Jacobian, a Cartesian command is
    returned as joint torques. The Jacobian is usually refreshed every cycle
    with ``set_jacobian``.
    """
    dynamical_system: DynamicalSystem
    controller: ImpedanceController
    jacobian: Optional[Jacobian] = None

    _desired: Optional[object] = None

    def set_jacobian(self, jacobian: Optional[Jacobian]) -> None:
        self.jacobian = jacobian

    def get_desired_velocity(self):
        """Desired velocity of the last tick, None before the first one."""
        return None if self._desired is None else self._desired.copy()

    def control_tick(self, position_state, velocity_state=None):
        # full states carry both the position and the velocity
        if velocity_state is None:
            velocity_state = position_state
        self._desired = self.dynamical_system.compute_dynamics(position_state)
        command = self.controller.compute_command(self._desired, velocity_state, self.jacobian)
        logger.debug("Control tick for %s: desired %s", position_state.name, self._desired.data())
        return command
