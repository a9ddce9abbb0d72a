"""
Dynamical systems package.

This package provides the abstract base class and implementations of the
vector fields that generate desired velocities from the current state.
"""

from .base import BaseDynamicalSystem
from .linear import Linear

__all__ = [
    'BaseDynamicalSystem',
    'Linear',
]
