"""
Error types raised by the state representation, dynamical systems and controllers.

All errors are raised at the point of violation and propagate unchanged to the
caller. Nothing in this package retries or recovers from them.
"""


class StateRepresentationError(Exception):
    """Base class for all errors raised by control_primitives."""


class EmptyStateError(StateRepresentationError):
    """An operation needs numeric data but the state is empty."""


class IncompatibleSizeError(StateRepresentationError, ValueError):
    """Vector or matrix dimensions do not match."""


class IncompatibleStatesError(StateRepresentationError):
    """Operands differ in joint names, frame or reference frame."""


class EmptyAttractorError(StateRepresentationError):
    """A dynamical system was evaluated before its attractor was set."""


class FrameNotFoundError(StateRepresentationError, ValueError):
    """Raised by robot-model collaborators for an unknown frame."""

    def __init__(self, frame_name: str):
        super().__init__(f"Frame with name or ID {frame_name} is not in the robot model")
        self.frame_name = frame_name


class InverseGeometryNotConvergingError(StateRepresentationError):
    """Raised by robot-model collaborators when inverse geometry does not converge."""

    def __init__(self, iterations: int, error: float):
        super().__init__(
            "The inverse geometry algorithm did not converge.\n"
            f"The residual error after {iterations} iterations is {error:f}."
        )
        self.iterations = iterations
        self.error = error
