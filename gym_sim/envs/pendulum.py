"""
Inverted-pendulum swing-up environment.

The agent applies a fixed-magnitude torque clockwise or anticlockwise to a
rigid rod hinged at one end.  The reward is a dense penalty on angle,
angular velocity and control effort, so the best achievable return comes
from swinging the rod up and holding it upright.

Classes:
    PendulumSimEnv: The pendulum simulator.

Functions:
    pendulum_reward: Reward for a given state and torque.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional

import numpy as np
from gymnasium import spaces

from gym_sim.envs.base import StepResult, check_action, check_mode, check_running
from gym_sim.envs.configs import PendulumSimConfig
from gym_sim.utils.constants import (
    COLOR_BLACK,
    COLOR_BLUE,
    COLOR_ROD,
    COLOR_WHITE,
    RENDER_HUMAN,
    RENDER_MODES,
)
from gym_sim.utils.helpers import (
    angle_normalize,
    blank_canvas,
    fill_circle,
    fill_segment,
    seed_rng,
)
from gym_sim.visualization.viewer import LazyViewer, Viewer, ViewerFactory

logger = logging.getLogger(__name__)


def pendulum_reward(theta: float, theta_dot: float, torque: float) -> float:
    """Return the (non-positive) reward for a state and applied torque.

    Args:
        theta: Rod angle in radians, 0 being upright.  Any number of
            accumulated turns is allowed.
        theta_dot: Angular velocity.
        torque: Applied torque.

    Returns:
        ``-(angle_normalize(theta)**2 + 0.1 * theta_dot**2 + 0.001 * torque**2)``.
    """
    return -(angle_normalize(theta) ** 2 + 0.1 * theta_dot ** 2 + 0.001 * torque ** 2)


class PendulumSimEnv:
    """Pendulum swing-up with a two-action discrete torque control.

    Actions: ``0`` applies ``-max_torque``, ``1`` applies ``+max_torque``.
    Observations: ``(cos(theta), sin(theta), theta_dot)`` as float32.

    Attributes:
        metadata: Supported render modes and frame rate.
        cfg: ``PendulumSimConfig`` holding every physical constant.
        action_space: ``Discrete(2)``.
        observation_space: ``Box`` bounding the observation vector.
    """

    def __init__(
        self,
        cfg: PendulumSimConfig | None = None,
        viewer_factory: Optional[ViewerFactory] = None,
        viewer: Optional[Viewer] = None,
    ) -> None:
        """Initialise the pendulum.

        Args:
            cfg: Optional configuration; a default ``PendulumSimConfig`` is
                used when *None*.
            viewer_factory: Builds the viewer on the first human render.
            viewer: Pre-built viewer to use instead of the factory.
        """
        self.cfg = cfg or PendulumSimConfig()
        self.metadata: Dict[str, Any] = {
            "render_modes": list(RENDER_MODES),
            "render_fps": self.cfg.render_fps,
        }
        high = np.array([1.0, 1.0, self.cfg.max_speed], dtype=np.float32)
        self.action_space = spaces.Discrete(2)
        self.observation_space = spaces.Box(low=-high, high=high, dtype=np.float32)
        size = self.cfg.screen_size
        self._viewer = LazyViewer(size, size, self.cfg.task, viewer_factory, viewer)
        self.seed(self.cfg.seed)

    # ------------------------------------------------------------------
    # Environment contract
    # ------------------------------------------------------------------

    def seed(self, seed: int) -> List[int]:
        """Re-create the RNG and clear all simulation state.

        Args:
            seed: Non-negative integer seed.

        Returns:
            ``[seed]``.
        """
        self._rng, used = seed_rng(seed)
        self.theta = 0.0
        self.theta_dot = 0.0
        self.last_action: Optional[int] = None
        self._step_count = 0
        self._needs_reset = True
        logger.debug("%s seeded with %d", self.cfg.task, used)
        return [used]

    def reset(self) -> np.ndarray:
        """Draw a random initial state and return its observation."""
        self.theta = float(self._rng.uniform(-self.cfg.theta_high, self.cfg.theta_high))
        self.theta_dot = float(self._rng.uniform(-self.cfg.theta_dot_high, self.cfg.theta_dot_high))
        self.last_action = None
        self._step_count = 0
        self._needs_reset = False
        return self._get_obs()

    def _torque(self, action: int) -> float:
        """Map a discrete action to a signed torque."""
        return self.cfg.max_torque if action == 1 else -self.cfg.max_torque

    def _integrate(self, torque: float) -> None:
        """Advance (theta, theta_dot) by one explicit Euler step."""
        g, m, l, dt = self.cfg.gravity, self.cfg.mass, self.cfg.length, self.cfg.dt
        accel = -3 * g / (2 * l) * math.sin(self.theta + math.pi) + 3.0 / (m * l ** 2) * torque
        theta_dot = self.theta_dot + accel * dt
        self.theta_dot = max(-self.cfg.max_speed, min(self.cfg.max_speed, theta_dot))
        self.theta = self.theta + self.theta_dot * dt

    def step(self, action: int) -> StepResult:
        """Apply one torque impulse and advance by ``dt``.

        Args:
            action: ``0`` or ``1``.

        Returns:
            ``StepResult``; ``done`` once the step budget is exceeded.

        Raises:
            InvalidActionError: If *action* is not 0 or 1.
            InvalidStateError: If the env has not been reset.
        """
        action = check_action(self.action_space, action, self.cfg.task)
        check_running(self._needs_reset, self.cfg.task)
        self._step_count += 1
        torque = self._torque(action)
        self.last_action = action
        reward = pendulum_reward(self.theta, self.theta_dot, torque)
        self._integrate(torque)
        done = self._step_count > self.cfg.episode_steps
        self._needs_reset = done
        info = {"truncated": True} if done else None
        return StepResult(self._get_obs(), float(reward), done, info)

    def _get_obs(self) -> np.ndarray:
        return np.array(
            [math.cos(self.theta), math.sin(self.theta), self.theta_dot], dtype=np.float32
        )

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _draw_rod(self, canvas: np.ndarray) -> None:
        """Draw the rod from the pivot, upright when theta is 0."""
        size = self.cfg.screen_size
        center = size / 2.0
        rod_px = size / 5.0
        tip = (center + rod_px * math.sin(self.theta), center - rod_px * math.cos(self.theta))
        fill_segment(canvas, (center, center), tip, 20.0, COLOR_ROD)

    def _draw_torque_marker(self, canvas: np.ndarray) -> None:
        """Mark the side the last torque pushed towards."""
        if self.last_action is None:
            return
        size = self.cfg.screen_size
        side = 1.0 if self.last_action == 1 else -1.0
        fill_circle(canvas, size / 2.0 + side * 40.0, size / 2.0 + 40.0, 6.0, COLOR_BLUE)

    def render(self, mode: str = RENDER_HUMAN) -> np.ndarray:
        """Render the pendulum as an RGB image.

        Args:
            mode: ``'human'`` also forwards the frame to the viewer;
                ``'rgb_array'`` only returns it.

        Returns:
            (H, W, 3) uint8 NumPy array.
        """
        check_mode(mode)
        size = self.cfg.screen_size
        canvas = blank_canvas(size, size, COLOR_WHITE)
        self._draw_rod(canvas)
        fill_circle(canvas, size / 2.0, size / 2.0, 5.0, COLOR_BLACK)
        self._draw_torque_marker(canvas)
        if mode == RENDER_HUMAN:
            self._viewer.show(canvas)
        return canvas

    def close(self) -> None:
        """Release the viewer if one was created."""
        self._viewer.close()
