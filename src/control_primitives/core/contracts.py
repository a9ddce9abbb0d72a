from __future__ import annotations
import copy
from dataclasses import dataclass
from enum import Enum, auto
from typing import Generic, Optional, TypeVar

'''
Separation of Concerns

- `ComputationalSpace` = which subspace of a twist a dissipative controller damps
- `Parameter` = a named value (gain, damping eigenvalues, attractor) owned by one
  dynamical system or controller. Owners hand out copies, never the holder itself.
'''

T = TypeVar("T")


class ComputationalSpace(Enum):
    LINEAR = auto()
    ANGULAR = auto()
    DECOUPLED_TWIST = auto()
    FULL = auto()

    @classmethod
    def from_string(cls, value: str) -> "ComputationalSpace":
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(
                f"Unknown computational space '{value}', expected one of "
                f"{[member.name.lower() for member in cls]}"
            ) from None


@dataclass
class Parameter(Generic[T]):
    name: str
    value: Optional[T] = None

    def is_empty(self) -> bool:
        if self.value is None:
            return True
        is_empty = getattr(self.value, "is_empty", None)
        return bool(is_empty()) if callable(is_empty) else False

    def copy(self) -> "Parameter[T]":
        return Parameter(self.name, copy.deepcopy(self.value))
