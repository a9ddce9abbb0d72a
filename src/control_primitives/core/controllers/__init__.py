"""
Controllers package for impedance control.

This package provides the abstract base class and implementations of the
impedance controllers turning desired and measured states into force or
torque commands.
"""

from .base import BaseImpedanceController
from .dissipative import Dissipative
from .impedance import Impedance

__all__ = [
    'BaseImpedanceController',
    'Dissipative',
    'Impedance',
]
