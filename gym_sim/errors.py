"""
Exception types raised by gym_sim.

Every failure in the package is a caller precondition violation, so each
category gets its own type.  They also derive from the matching builtin so
that callers catching ``ValueError``/``RuntimeError`` keep working.

Classes:
    SimError: Root of the hierarchy.
    InvalidActionError: Action outside the environment's action space.
    ShapeMismatchError: Frame or parameter vector of unexpected size.
    InvalidStateError: Operation not valid in the current lifecycle state.
    MissingConfigurationError: A required collaborator was never configured.
"""

from __future__ import annotations

from typing import Any, Tuple


class SimError(Exception):
    """Base class for all gym_sim errors."""


class InvalidActionError(SimError, ValueError):
    """Raised when ``step`` receives an action outside the action space.

    Attributes:
        action: The offending action value.
        n: Size of the discrete action space.
    """

    def __init__(self, action: Any, n: int, env_name: str = "") -> None:
        self.action = action
        self.n = n
        where = f" for {env_name}" if env_name else ""
        super().__init__(
            f"Invalid action {action!r} ({type(action).__name__}){where}; "
            f"must be an integer in [0, {n - 1}]"
        )


class ShapeMismatchError(SimError, ValueError):
    """Raised when a frame or parameter vector has the wrong shape.

    Attributes:
        expected: Shape the receiver was configured with.
        actual: Shape actually received.
    """

    def __init__(self, expected: Tuple[int, ...], actual: Tuple[int, ...], what: str = "Frame") -> None:
        self.expected = tuple(expected)
        self.actual = tuple(actual)
        super().__init__(
            f"{what} size {self.actual} differs from expected size {self.expected}"
        )


class InvalidStateError(SimError, RuntimeError):
    """Raised when an operation is not valid in the current state."""


class MissingConfigurationError(SimError, RuntimeError):
    """Raised when a collaborator (e.g. a viewer factory) was never set."""
