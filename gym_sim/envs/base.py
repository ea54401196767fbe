"""
The environment contract shared by every simulator.

Simulators do not inherit from a common base class.  Each one implements
the ``SimEnv`` protocol on its own and uses the free helpers below for
the checks every ``step`` must perform.

Classes:
    StepResult: Immutable result of one ``step`` call.
    SimEnv: Structural type of a steppable simulation.

Functions:
    check_action: Fail fast on actions outside a discrete action space.
    check_running: Fail fast on ``step`` outside the running state.
    check_mode: Validate a render mode.
"""

from __future__ import annotations

from typing import Any, Dict, List, NamedTuple, Optional, Protocol, runtime_checkable

import numpy as np
from gymnasium import spaces

from gym_sim.errors import InvalidActionError, InvalidStateError
from gym_sim.utils.constants import RENDER_MODES


class StepResult(NamedTuple):
    """Outcome of advancing an environment by one tick.

    Unpacks as ``observation, reward, done, info``.
    """

    observation: np.ndarray
    reward: float
    done: bool
    info: Optional[Dict[str, Any]] = None


@runtime_checkable
class SimEnv(Protocol):
    """A discrete-time simulation with a seed/reset/step/render/close contract."""

    action_space: spaces.Discrete
    observation_space: spaces.Box
    metadata: Dict[str, Any]

    def seed(self, seed: int) -> List[int]:
        ...

    def reset(self) -> np.ndarray:
        ...

    def step(self, action: int) -> StepResult:
        ...

    def render(self, mode: str = "human") -> np.ndarray:
        ...

    def close(self) -> None:
        ...


def check_action(action_space: spaces.Discrete, action: Any, env_name: str) -> int:
    """Return *action* as an ``int`` or raise if it is not in *action_space*.

    Raises:
        InvalidActionError: When ``action_space.contains(action)`` is false.
    """
    if isinstance(action, bool) or not action_space.contains(action):
        raise InvalidActionError(action, int(action_space.n), env_name)
    return int(action)


def check_running(needs_reset: bool, env_name: str) -> None:
    """Raise if ``step`` is called before ``reset`` or after a terminal step."""
    if needs_reset:
        raise InvalidStateError(
            f"{env_name}: call reset() before step() and after every terminal step"
        )


def check_mode(mode: str) -> None:
    """Raise ``ValueError`` for unsupported render modes."""
    if mode not in RENDER_MODES:
        raise ValueError(f"Unsupported render mode '{mode}'. Choose from {list(RENDER_MODES)}")
