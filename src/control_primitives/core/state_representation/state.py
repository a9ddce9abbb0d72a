"""
Base class for every named state carried through the control primitives, plus the
vector helpers shared by the joint and Cartesian state families.
"""

import copy
from typing import TypeVar, Union

import numpy as np

from ..exceptions import EmptyStateError, IncompatibleSizeError

S = TypeVar("S", bound="State")

SCALAR_TYPES = (int, float, np.integer, np.floating)
Gain = Union[float, np.ndarray]


class State:
    """
    A named quantity that may be empty.

    An empty state carries no valid numeric payload. Any operation that needs the
    payload (arithmetic, distances, clamping, controller inputs) raises
    EmptyStateError when it receives an empty state.
    """

    # Make numpy defer to the reflected operators of states, e.g. ``gain * state``.
    __array_ufunc__ = None

    def __init__(self, name: str = "", empty: bool = True):
        self._name = name
        self._empty = empty

    def get_name(self) -> str:
        return self._name

    def set_name(self, name: str) -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def is_empty(self) -> bool:
        return self._empty

    def set_empty(self) -> None:
        self._empty = True

    def set_filled(self) -> None:
        self._empty = False

    def copy(self: S) -> S:
        """Return an independent deep copy of the state."""
        return copy.deepcopy(self)

    def _identity(self) -> tuple:
        """Everything but the payload that two equal states must share."""
        return (self._name,)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        if self._identity() != other._identity() or self._empty != other._empty:
            return False
        # empty states carry no valid payload
        return self._empty or bool(np.array_equal(self.data(), other.data()))

    __hash__ = None

    def _assert_not_empty(self) -> None:
        if self._empty:
            raise EmptyStateError(f"{self._name} state is empty")


def is_gain(value) -> bool:
    """True for the operands states accept in products: scalars, arrays and matrices."""
    if isinstance(value, bool):
        return False
    return isinstance(value, SCALAR_TYPES + (np.ndarray, list, tuple))


def as_vector(values, expected_size: int, label: str = "vector") -> np.ndarray:
    """
    Convert values to a float vector of the expected size.

    Raises:
        IncompatibleSizeError: if values is not one-dimensional or has the wrong length
    """
    vector = np.array(values, dtype=float)
    if vector.ndim != 1 or vector.size != expected_size:
        raise IncompatibleSizeError(
            f"The provided {label} has shape {vector.shape}, expected ({expected_size},)"
        )
    return vector


def apply_gain(gain: Gain, vector: np.ndarray) -> np.ndarray:
    """
    Multiply a vector by a scalar, an elementwise array or a square matrix.

    Raises:
        IncompatibleSizeError: if an array or matrix gain does not match the vector
    """
    if isinstance(gain, SCALAR_TYPES):
        return float(gain) * vector
    gain = np.asarray(gain, dtype=float)
    size = vector.size
    if gain.ndim == 0:
        return float(gain) * vector
    if gain.ndim == 1:
        if gain.size != size:
            raise IncompatibleSizeError(
                f"Gain array of size {gain.size} is incompatible with a state of size {size}"
            )
        return gain * vector
    if gain.ndim == 2:
        if gain.shape != (size, size):
            raise IncompatibleSizeError(
                f"Gain matrix of shape {gain.shape} is incompatible with a state of size {size}"
            )
        return gain @ vector
    raise IncompatibleSizeError(f"Gain with {gain.ndim} dimensions cannot multiply a state")


def clamp_vector(vector: np.ndarray, max_absolute_value, noise_ratio=0.0) -> np.ndarray:
    """
    Clamp the magnitude of each entry of a vector and apply a dead zone.

    Entries whose magnitude is above the bound are rescaled to the bound. Where the
    noise ratio is non-zero, entries whose magnitude is below
    ``noise_ratio * max_absolute_value`` are set to zero.

    Args:
        vector: Values to clamp
        max_absolute_value: Scalar bound, or one bound per entry
        noise_ratio: Scalar dead-zone ratio, or one ratio per entry

    Returns:
        Clamped copy of the vector
    """
    size = vector.size
    bounds = np.asarray(max_absolute_value, dtype=float)
    ratios = np.asarray(noise_ratio, dtype=float)
    for label, array in (("max absolute value", bounds), ("noise ratio", ratios)):
        if array.ndim > 1 or (array.ndim == 1 and array.size != size):
            raise IncompatibleSizeError(
                f"The provided {label} array has shape {array.shape}, expected ({size},)"
            )
    bounds = np.broadcast_to(bounds, (size,))
    ratios = np.broadcast_to(ratios, (size,))

    result = np.array(vector, dtype=float)
    magnitude = np.abs(result)
    dead_zone = (ratios != 0.0) & (magnitude < ratios * bounds)
    saturated = ~dead_zone & (magnitude > bounds)
    result[dead_zone] = 0.0
    result[saturated] *= bounds[saturated] / magnitude[saturated]
    return result
