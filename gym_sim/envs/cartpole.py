"""
Cart-pole balancing environment.

A pole is hinged to a cart moving along a frictionless track.  Pushing the
cart left or right keeps the pole upright; the episode fails when the pole
tilts past the angle threshold or the cart leaves the track.

Classes:
    CartPoleSimEnv: The cart-pole simulator.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional

import numpy as np
from gymnasium import spaces

from gym_sim.envs.base import StepResult, check_action, check_mode, check_running
from gym_sim.envs.configs import CartPoleSimConfig
from gym_sim.utils.constants import (
    COLOR_AXLE,
    COLOR_BLACK,
    COLOR_CART,
    COLOR_POLE,
    COLOR_WHITE,
    RENDER_HUMAN,
    RENDER_MODES,
)
from gym_sim.utils.helpers import blank_canvas, fill_circle, fill_rect, fill_segment, seed_rng
from gym_sim.visualization.viewer import LazyViewer, Viewer, ViewerFactory

logger = logging.getLogger(__name__)


class CartPoleSimEnv:
    """Cart-pole with a two-action discrete push.

    Actions: ``0`` pushes the cart left, ``1`` pushes it right.
    Observations: ``(x, x_dot, theta, theta_dot)`` as float32.
    Every step, the terminal one included, is rewarded with ``1.0``.

    Attributes:
        metadata: Supported render modes and frame rate.
        cfg: ``CartPoleSimConfig`` holding every physical constant.
        action_space: ``Discrete(2)``.
        observation_space: ``Box`` bounding the observation vector.
    """

    def __init__(
        self,
        cfg: CartPoleSimConfig | None = None,
        viewer_factory: Optional[ViewerFactory] = None,
        viewer: Optional[Viewer] = None,
    ) -> None:
        self.cfg = cfg or CartPoleSimConfig()
        self.metadata: Dict[str, Any] = {
            "render_modes": list(RENDER_MODES),
            "render_fps": self.cfg.render_fps,
        }
        high = np.array(
            [
                self.cfg.x_threshold * 2,
                np.finfo(np.float32).max,
                self.cfg.theta_threshold_radians * 2,
                np.finfo(np.float32).max,
            ],
            dtype=np.float32,
        )
        self.action_space = spaces.Discrete(2)
        self.observation_space = spaces.Box(low=-high, high=high, dtype=np.float32)
        self._viewer = LazyViewer(
            self.cfg.screen_width, self.cfg.screen_height, self.cfg.task, viewer_factory, viewer
        )
        self.seed(self.cfg.seed)

    def seed(self, seed: int) -> List[int]:
        """Re-create the RNG and clear all simulation state."""
        self._rng, used = seed_rng(seed)
        self.state = np.zeros(4, dtype=np.float64)
        self._step_count = 0
        self._needs_reset = True
        logger.debug("%s seeded with %d", self.cfg.task, used)
        return [used]

    def reset(self) -> np.ndarray:
        """Draw every state component from ``U[-reset_high, reset_high]``."""
        high = self.cfg.reset_high
        self.state = self._rng.uniform(low=-high, high=high, size=(4,))
        self._step_count = 0
        self._needs_reset = False
        return self.state.astype(np.float32)

    def _integrate(self, force: float) -> None:
        """Advance the state by one explicit Euler step of length ``tau``."""
        c = self.cfg
        x, x_dot, theta, theta_dot = (float(v) for v in self.state)
        cos_t, sin_t = math.cos(theta), math.sin(theta)
        temp = (force + c.pole_mass_length * theta_dot ** 2 * sin_t) / c.total_mass
        theta_acc = (c.gravity * sin_t - cos_t * temp) / (
            c.half_length * (4.0 / 3.0 - c.mass_pole * cos_t ** 2 / c.total_mass)
        )
        x_acc = temp - c.pole_mass_length * theta_acc * cos_t / c.total_mass
        x = x + c.tau * x_dot
        x_dot = x_dot + c.tau * x_acc
        theta = theta + c.tau * theta_dot
        theta_dot = theta_dot + c.tau * theta_acc
        self.state = np.array([x, x_dot, theta, theta_dot], dtype=np.float64)

    def _failed(self) -> bool:
        x, _, theta, _ = self.state
        return bool(
            x < -self.cfg.x_threshold
            or x > self.cfg.x_threshold
            or theta < -self.cfg.theta_threshold_radians
            or theta > self.cfg.theta_threshold_radians
        )

    def step(self, action: int) -> StepResult:
        """Push the cart and advance by ``tau``.

        Raises:
            InvalidActionError: If *action* is not 0 or 1.
            InvalidStateError: If the env has not been reset.
        """
        action = check_action(self.action_space, action, self.cfg.task)
        check_running(self._needs_reset, self.cfg.task)
        self._step_count += 1
        force = self.cfg.force_mag if action == 1 else -self.cfg.force_mag
        self._integrate(force)
        failed = self._failed()
        truncated = not failed and self._step_count >= self.cfg.max_episode_steps
        done = failed or truncated
        self._needs_reset = done
        info = {"truncated": True} if truncated else None
        return StepResult(self.state.astype(np.float32), 1.0, done, info)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, mode: str = RENDER_HUMAN) -> np.ndarray:
        """Render the cart and pole as an RGB image.

        Args:
            mode: ``'human'`` also forwards the frame to the viewer;
                ``'rgb_array'`` only returns it.

        Returns:
            (H, W, 3) uint8 NumPy array.
        """
        check_mode(mode)
        w, h = self.cfg.screen_width, self.cfg.screen_height
        scale = w / (self.cfg.x_threshold * 2)
        track_y = h * 0.75
        canvas = blank_canvas(h, w, COLOR_WHITE)
        fill_rect(canvas, 0, track_y, w, 1, COLOR_BLACK)
        cart_x = self.state[0] * scale + w / 2.0
        fill_rect(canvas, cart_x - 25, track_y - 15, 50, 30, COLOR_CART)
        pole_px = scale * 2 * self.cfg.half_length
        theta = self.state[2]
        tip = (cart_x + pole_px * math.sin(theta), track_y - 15 - pole_px * math.cos(theta))
        fill_segment(canvas, (cart_x, track_y - 15), tip, 10.0, COLOR_POLE)
        fill_circle(canvas, cart_x, track_y - 15, 5.0, COLOR_AXLE)
        if mode == RENDER_HUMAN:
            self._viewer.show(canvas)
        return canvas

    def close(self) -> None:
        """Release the viewer if one was created."""
        self._viewer.close()
