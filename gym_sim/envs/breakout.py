"""
Ball-and-paddle breakout environment.

A paddle at the bottom of the screen returns a ball towards a grid of
coloured blocks.  Each block hit is destroyed and rewarded with ``1``.
The episode ends when the ball falls past the bottom edge or when the
last block is destroyed.

Classes:
    Rect: Axis-aligned rectangle with an overlap test.
    Block: One destructible block.
    Ball: The ball and its wall handling.
    Paddle: The player-controlled paddle.
    BreakoutSimEnv: The breakout simulator.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, NamedTuple, Optional

import numpy as np
from gymnasium import spaces

from gym_sim.envs.base import StepResult, check_action, check_mode, check_running
from gym_sim.envs.configs import BreakoutSimConfig
from gym_sim.utils.constants import COLOR_BLACK, RENDER_HUMAN, RENDER_MODES, Color
from gym_sim.utils.helpers import blank_canvas, clamp, fill_rect, seed_rng
from gym_sim.visualization.viewer import LazyViewer, Viewer, ViewerFactory

logger = logging.getLogger(__name__)

ACTION_HOLD = 0
ACTION_LEFT = 1
ACTION_RIGHT = 2


class Rect(NamedTuple):
    x: float
    y: float
    width: float
    height: float

    def overlaps(self, other: "Rect") -> bool:
        """Strict AABB overlap; touching edges do not count."""
        return (
            self.x < other.x + other.width
            and self.x + self.width > other.x
            and self.y < other.y + other.height
            and self.y + self.height > other.y
        )


@dataclass
class Block:
    color: Color
    x: int
    y: int
    width: int
    height: int
    destroyed: bool = False

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)


def guard_direction(direction: float, margin: float) -> float:
    """Wrap *direction* into [0, 360) and keep it *margin* degrees off horizontal.

    Headings within *margin* of 90 or 270 degrees are pushed to the nearest
    edge of that band, so the ball never settles into a shallow path that
    misses both the blocks and the paddle.
    """
    d = direction % 360.0
    for horizontal in (90.0, 270.0):
        if abs(d - horizontal) < margin:
            d = horizontal - margin if d < horizontal else horizontal + margin
    return d % 360.0


class Ball:
    """The ball: position in pixels, heading in degrees (0 points up).

    Attributes:
        x: Left edge.
        y: Top edge.
        direction: Heading in degrees.
    """

    def __init__(self, cfg: BreakoutSimConfig) -> None:
        self.cfg = cfg
        self.x, self.y = (float(v) for v in cfg.ball_start)
        self.direction = float(cfg.ball_direction)

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.cfg.ball_width, self.cfg.ball_height)

    def bounce(self, diff: float) -> None:
        """Reflect vertically, then skew by *diff* degrees (0 for walls and blocks)."""
        self.direction = guard_direction((180.0 - self.direction) % 360.0 - diff, self.cfg.min_bounce_angle)

    def _reflect_horizontally(self) -> None:
        self.direction = guard_direction((360.0 - self.direction) % 360.0, self.cfg.min_bounce_angle)

    def update(self) -> bool:
        """Move one tick and handle the walls.

        Returns:
            *True* when the ball is below the bottom edge.
        """
        if self.y > self.cfg.screen_height:
            return True
        radians = math.radians(self.direction)
        self.x += self.cfg.ball_speed * math.sin(radians)
        self.y -= self.cfg.ball_speed * math.cos(radians)

        if self.y <= 0:
            self.bounce(0)
            self.y = 1.0

        if self.x <= 0:
            self._reflect_horizontally()
            self.x = 1.0

        right = self.cfg.screen_width - self.cfg.ball_width
        if self.x > right:
            self._reflect_horizontally()
            self.x = float(right - 1)

        return self.y > self.cfg.screen_height


class Paddle:
    """The paddle: fixed height along the bottom edge, moves horizontally."""

    def __init__(self, cfg: BreakoutSimConfig) -> None:
        self.cfg = cfg
        self.x = (cfg.screen_width - cfg.paddle_width) / 2.0
        self.y = float(cfg.screen_height - cfg.paddle_height)

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.cfg.paddle_width, self.cfg.paddle_height)

    def update(self, action: int) -> None:
        """Move by ``paddle_speed`` for left/right, clamped to the screen."""
        if action == ACTION_LEFT:
            self.x -= self.cfg.paddle_speed
        elif action == ACTION_RIGHT:
            self.x += self.cfg.paddle_speed
        self.x = clamp(self.x, 0.0, float(self.cfg.screen_width - self.cfg.paddle_width))


class BreakoutSimEnv:
    """Breakout with a three-action paddle.

    Actions: ``0`` hold, ``1`` move left, ``2`` move right.
    Observations: paddle x, ball x, ball y and ball heading, each divided by
    its range (screen width, screen width, screen height, 360).

    At most one block is destroyed per tick: blocks are scanned in grid
    order (row by row, left to right) and the scan stops at the first hit.

    Attributes:
        metadata: Supported render modes and frame rate.
        cfg: ``BreakoutSimConfig`` holding the whole game geometry.
        action_space: ``Discrete(3)``.
        observation_space: ``Box`` bounding the observation vector.
        blocks: Block grid in scan order.
        ball: The ball.
        paddle: The paddle.
    """

    def __init__(
        self,
        cfg: BreakoutSimConfig | None = None,
        viewer_factory: Optional[ViewerFactory] = None,
        viewer: Optional[Viewer] = None,
    ) -> None:
        self.cfg = cfg or BreakoutSimConfig()
        self.metadata: Dict[str, Any] = {
            "render_modes": list(RENDER_MODES),
            "render_fps": self.cfg.render_fps,
        }
        self.action_space = spaces.Discrete(3)
        # ball y may sit a little past the bottom edge on the terminal tick
        self.observation_space = spaces.Box(low=-0.5, high=1.5, shape=(4,), dtype=np.float32)
        self._viewer = LazyViewer(
            self.cfg.screen_width, self.cfg.screen_height, self.cfg.task, viewer_factory, viewer
        )
        self.seed(self.cfg.seed)

    # ------------------------------------------------------------------
    # Environment contract
    # ------------------------------------------------------------------

    def _build_blocks(self) -> List[Block]:
        c = self.cfg
        return [
            Block(color, col * c.block_width, row * c.block_height + c.top_row_y, c.block_width, c.block_height)
            for row, color in enumerate(c.row_colors)
            for col in range(c.columns)
        ]

    def _rebuild(self) -> None:
        """Restore the full block grid, ball and paddle."""
        self.blocks = self._build_blocks()
        self.ball = Ball(self.cfg)
        self.paddle = Paddle(self.cfg)

    def seed(self, seed: int) -> List[int]:
        """Re-create the RNG and rebuild the whole playfield."""
        self._rng, used = seed_rng(seed)
        self._rebuild()
        self._needs_reset = True
        logger.debug("%s seeded with %d", self.cfg.task, used)
        return [used]

    def reset(self) -> np.ndarray:
        """Start a new game with every block standing."""
        self._rebuild()
        self._needs_reset = False
        return self._get_obs()

    @property
    def blocks_remaining(self) -> int:
        return sum(1 for b in self.blocks if not b.destroyed)

    def _hit_paddle(self, ball_rect: Rect) -> None:
        """Return the ball upwards, angled by where it struck the paddle."""
        paddle_rect = self.paddle.rect
        if not paddle_rect.overlaps(ball_rect):
            return
        diff = (paddle_rect.x + paddle_rect.width / 2) - (ball_rect.x + ball_rect.width / 2)
        self.ball.y = float(self.cfg.screen_height - self.cfg.paddle_height - self.cfg.ball_height - 1)
        self.ball.bounce(diff)

    def _hit_block(self, ball_rect: Rect) -> float:
        """Destroy the first standing block overlapping the ball.

        Returns:
            ``1.0`` if a block was destroyed, else ``0.0``.
        """
        for block in self.blocks:
            if block.destroyed or not block.rect.overlaps(ball_rect):
                continue
            block.destroyed = True
            self.ball.bounce(0)
            return 1.0
        return 0.0

    def step(self, action: int) -> StepResult:
        """Move the paddle and ball one tick and resolve collisions.

        Args:
            action: ``0`` hold, ``1`` left, ``2`` right.

        Returns:
            ``StepResult``; ``done`` when the ball is lost or no blocks remain.

        Raises:
            InvalidActionError: If *action* is not 0, 1 or 2.
            InvalidStateError: If the env has not been reset.
        """
        action = check_action(self.action_space, action, self.cfg.task)
        check_running(self._needs_reset, self.cfg.task)
        self.paddle.update(action)
        done = self.ball.update()
        ball_rect = self.ball.rect
        self._hit_paddle(ball_rect)
        reward = self._hit_block(ball_rect)
        remaining = self.blocks_remaining
        if remaining == 0:
            done = True
        self._needs_reset = done
        if done:
            logger.debug("%s episode over, %d blocks remaining", self.cfg.task, remaining)
        return StepResult(self._get_obs(), reward, done, {"blocks_remaining": remaining})

    def _get_obs(self) -> np.ndarray:
        c = self.cfg
        return np.array(
            [
                self.paddle.x / c.screen_width,
                self.ball.x / c.screen_width,
                self.ball.y / c.screen_height,
                self.ball.direction / 360.0,
            ],
            dtype=np.float32,
        )

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, mode: str = RENDER_HUMAN) -> np.ndarray:
        """Render blocks, ball and paddle on a black background.

        Args:
            mode: ``'human'`` also forwards the frame to the viewer;
                ``'rgb_array'`` only returns it.

        Returns:
            (H, W, 3) uint8 NumPy array.
        """
        check_mode(mode)
        canvas = blank_canvas(self.cfg.screen_height, self.cfg.screen_width, COLOR_BLACK)
        for block in self.blocks:
            if not block.destroyed:
                fill_rect(canvas, *block.rect, block.color)
        fill_rect(canvas, *self.ball.rect, self.cfg.ball_color)
        fill_rect(canvas, *self.paddle.rect, self.cfg.paddle_color)
        if mode == RENDER_HUMAN:
            self._viewer.show(canvas)
        return canvas

    def close(self) -> None:
        """Release the viewer if one was created."""
        self._viewer.close()
