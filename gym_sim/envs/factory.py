"""
Environment construction by name or config.

Every simulator is registered once, under a short name, together with its
config class.  The helpers here build a bare simulator, a simulator behind
the ``gymnasium.Env`` API, or a Gymnasium vector of adapted copies.

Functions:
    available_envs: Registered short names.
    make_sim_env: Build one simulator.
    make_gym_env: Build one simulator behind the ``gymnasium.Env`` API.
    make_vector_env: Build a ``VectorEnv`` of adapted simulators.
"""

from __future__ import annotations

from typing import Dict, NamedTuple, Optional

import gymnasium as gym

from gym_sim.envs.base import SimEnv
from gym_sim.envs.breakout import BreakoutSimEnv
from gym_sim.envs.cartpole import CartPoleSimEnv
from gym_sim.envs.configs import (
    BreakoutSimConfig,
    CartPoleSimConfig,
    PendulumSimConfig,
    SimEnvConfig,
)
from gym_sim.envs.pendulum import PendulumSimEnv
from gym_sim.visualization.viewer import ViewerFactory


class _Registration(NamedTuple):
    config_cls: type
    env_cls: type


# ---------------------------------------------------------------------------
# Short name -> (config, simulator)
# ---------------------------------------------------------------------------
_ENV_REGISTRY: Dict[str, _Registration] = {
    "pendulum": _Registration(PendulumSimConfig, PendulumSimEnv),
    "cartpole": _Registration(CartPoleSimConfig, CartPoleSimEnv),
    "breakout": _Registration(BreakoutSimConfig, BreakoutSimEnv),
}


def available_envs() -> list:
    """Return the registered environment names."""
    return list(_ENV_REGISTRY)


def _resolve_config(cfg: SimEnvConfig | str) -> SimEnvConfig:
    """Return *cfg* itself, or the default config registered under that name.

    Raises:
        ValueError: For a name nobody registered.
    """
    if isinstance(cfg, SimEnvConfig):
        return cfg
    registration = _ENV_REGISTRY.get(cfg)
    if registration is None:
        raise ValueError(f"Unknown env '{cfg}'. Choose from {available_envs()}")
    return registration.config_cls()


def _simulator_for(cfg: SimEnvConfig) -> type:
    for registration in _ENV_REGISTRY.values():
        if type(cfg) is registration.config_cls:
            return registration.env_cls
    raise ValueError(f"No simulator is registered for {type(cfg).__name__}")


def make_sim_env(
    cfg: SimEnvConfig | str,
    viewer_factory: Optional[ViewerFactory] = None,
) -> SimEnv:
    """Create one simulator.

    Args:
        cfg: A config instance or a registered name.
        viewer_factory: Builds the viewer used by ``render("human")``.

    Returns:
        A simulator implementing the ``SimEnv`` contract.
    """
    resolved = _resolve_config(cfg)
    return _simulator_for(resolved)(resolved, viewer_factory=viewer_factory)


def make_gym_env(cfg: SimEnvConfig | str) -> gym.Env:
    """Create a simulator wrapped in ``GymEnvAdapter`` (``rgb_array`` rendering)."""
    from gym_sim.envs.gym_adapter import GymEnvAdapter

    return GymEnvAdapter(make_sim_env(cfg))


def make_vector_env(
    cfg: SimEnvConfig | str,
    n_envs: int = 1,
    use_async_envs: bool = False,
) -> Dict[str, Dict[int, gym.vector.VectorEnv]]:
    """Create *n_envs* adapted copies of one simulator as a Gymnasium vector.

    Args:
        cfg: A config instance or a registered name.
        n_envs: Number of copies, at least 1.
        use_async_envs: Run the copies in subprocesses via ``AsyncVectorEnv``
            instead of in-process via ``SyncVectorEnv``.

    Returns:
        ``{task: {0: VectorEnv}}``, keyed by the config's ``env_type``.

    Raises:
        ValueError: On an unknown name or ``n_envs < 1``.
    """
    resolved = _resolve_config(cfg)
    if n_envs < 1:
        raise ValueError("`n_envs` must be at least 1")
    vector_cls = gym.vector.AsyncVectorEnv if use_async_envs else gym.vector.SyncVectorEnv
    vec = vector_cls([lambda c=resolved: make_gym_env(c) for _ in range(n_envs)])
    return {resolved.env_type: {0: vec}}
