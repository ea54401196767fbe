"""
Gymnasium-API adapter for gym_sim environments.

gym_sim simulators follow the classic four-tuple ``step`` contract.  This
adapter exposes any of them through the current ``gymnasium.Env`` API
(``reset`` returning ``(obs, info)``, ``step`` returning a five-tuple) so
they can be wrapped, vectorised and checked with Gymnasium tooling.

Classes:
    GymEnvAdapter: ``gymnasium.Env`` wrapping a ``SimEnv``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import gymnasium as gym
import numpy as np

from gym_sim.envs.base import SimEnv
from gym_sim.utils.constants import RENDER_RGB_ARRAY


class GymEnvAdapter(gym.Env):
    """Present a ``SimEnv`` as a ``gymnasium.Env``.

    A terminal step whose info carries ``truncated=True`` (the step budget
    ran out) is reported as truncated rather than terminated.

    Attributes:
        sim: The wrapped simulator.
        render_mode: Mode passed to the simulator's ``render``.
    """

    def __init__(self, sim: SimEnv, render_mode: Optional[str] = RENDER_RGB_ARRAY) -> None:
        super().__init__()
        self.sim = sim
        self.render_mode = render_mode
        self.metadata = dict(sim.metadata)
        self.action_space = sim.action_space
        self.observation_space = sim.observation_space

    def reset(
        self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        """Reset the simulator, reseeding it first when *seed* is given.

        Args:
            seed: Optional seed forwarded to ``sim.seed``.
            options: Unused; reserved for Gymnasium compatibility.

        Returns:
            Tuple of (observation, info dict).
        """
        super().reset(seed=seed)
        if seed is not None:
            self.sim.seed(seed)
            self.action_space.seed(seed)
        return self.sim.reset(), {}

    def step(self, action: Any) -> Tuple[np.ndarray, float, bool, bool, Dict[str, Any]]:
        """Advance the simulator by one step.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        observation, reward, done, info = self.sim.step(int(action))
        info = dict(info or {})
        truncated = bool(done and info.pop("truncated", False))
        terminated = bool(done and not truncated)
        return observation, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode is None:
            return None
        return self.sim.render(self.render_mode)

    def close(self) -> None:
        self.sim.close()
