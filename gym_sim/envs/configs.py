"""
Dataclass configurations for every simulation environment.

Every tunable constant of a simulator lives in its config, so two
environments built from different configs never share mutable state.
Configs are frozen; derive variants with ``dataclasses.replace``.

Classes:
    SimEnvConfig: Base configuration shared by all sim envs.
    PendulumSimConfig: Configuration for the inverted pendulum.
    CartPoleSimConfig: Configuration for the cart-pole.
    BreakoutSimConfig: Configuration for the ball-and-paddle game.
    ReplayConfig: Replay-memory settings used by the driver.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from gym_sim.utils.constants import (
    BREAKOUT_ROW_COLORS,
    BREAKOUT_SCREEN_HEIGHT,
    BREAKOUT_SCREEN_WIDTH,
    CARTPOLE_SCREEN_HEIGHT,
    CARTPOLE_SCREEN_WIDTH,
    COLOR_DARK_RED,
    COLOR_RED,
    Color,
    PENDULUM_SCREEN_SIZE,
)


@dataclass(frozen=True)
class SimEnvConfig:
    """Base configuration shared by all gym_sim environments.

    Attributes:
        task: Human-readable task identifier, also the viewer title.
        seed: Random seed applied at construction.
        render_fps: Frame rate advertised in the env metadata.
    """

    task: str = "base"
    seed: int = 0
    render_fps: int = 30

    @property
    def env_type(self) -> str:
        """Return a short string identifying the environment type.

        Returns:
            The ``task`` field value.
        """
        return self.task


@dataclass(frozen=True)
class PendulumSimConfig(SimEnvConfig):
    """Configuration for the inverted-pendulum swing-up task.

    Attributes:
        max_speed: Angular-velocity clamp (rad/s).
        max_torque: Magnitude of the torque applied by either action.
        dt: Integration time step (s).
        gravity: Gravitational acceleration.
        mass: Bob mass.
        length: Rod length.
        episode_steps: Episode ends once the step counter exceeds this.
        theta_high: Reset draws theta from [-theta_high, theta_high].
        theta_dot_high: Reset draws theta_dot from [-theta_dot_high, theta_dot_high].
        screen_size: Side of the square render canvas in pixels.
    """

    task: str = "Pendulum-v0"
    render_fps: int = 30
    max_speed: float = 8.0
    max_torque: float = 2.0
    dt: float = 0.05
    gravity: float = 10.0
    mass: float = 1.0
    length: float = 1.0
    episode_steps: int = 100
    theta_high: float = math.pi
    theta_dot_high: float = 1.0
    screen_size: int = PENDULUM_SCREEN_SIZE


@dataclass(frozen=True)
class CartPoleSimConfig(SimEnvConfig):
    """Configuration for the cart-pole balancing task.

    Attributes:
        gravity: Gravitational acceleration.
        mass_cart: Cart mass.
        mass_pole: Pole mass.
        half_length: Half of the pole length.
        force_mag: Magnitude of the push applied by either action.
        tau: Integration time step (s).
        theta_threshold_radians: Pole angle beyond which the episode fails.
        x_threshold: Cart position beyond which the episode fails.
        max_episode_steps: Step budget per episode.
        reset_high: Reset draws every state component from [-reset_high, reset_high].
        screen_width: Render canvas width in pixels.
        screen_height: Render canvas height in pixels.
    """

    task: str = "CartPole-v1"
    render_fps: int = 50
    gravity: float = 9.8
    mass_cart: float = 1.0
    mass_pole: float = 0.1
    half_length: float = 0.5
    force_mag: float = 10.0
    tau: float = 0.02
    theta_threshold_radians: float = 12 * 2 * math.pi / 360
    x_threshold: float = 2.4
    max_episode_steps: int = 500
    reset_high: float = 0.05
    screen_width: int = CARTPOLE_SCREEN_WIDTH
    screen_height: int = CARTPOLE_SCREEN_HEIGHT

    @property
    def total_mass(self) -> float:
        return self.mass_cart + self.mass_pole

    @property
    def pole_mass_length(self) -> float:
        return self.mass_pole * self.half_length


@dataclass(frozen=True)
class BreakoutSimConfig(SimEnvConfig):
    """Configuration for the ball-and-paddle breakout game.

    The block grid has one row per entry of ``row_colors``, each holding
    ``columns`` blocks, starting ``top_row_y`` pixels from the top.

    Attributes:
        screen_width: Playfield width in pixels.
        screen_height: Playfield height in pixels.
        columns: Blocks per row.
        top_row_y: Y coordinate of the first block row.
        block_width: Block width in pixels.
        block_height: Block height in pixels.
        row_colors: Colour of each block row, top to bottom.
        paddle_width: Paddle width in pixels.
        paddle_height: Paddle height in pixels.
        paddle_speed: Paddle displacement per tick.
        paddle_color: Paddle colour.
        ball_width: Ball width in pixels.
        ball_height: Ball height in pixels.
        ball_speed: Ball displacement per tick.
        ball_start: Ball (x, y) at reset.
        ball_direction: Ball heading at reset, in degrees (0 is up).
        ball_color: Ball colour.
        min_bounce_angle: Minimum distance in degrees kept between the
            heading after a bounce and the horizontal headings 90 and 270.
    """

    task: str = "Breakout-v0"
    render_fps: int = 50
    screen_width: int = BREAKOUT_SCREEN_WIDTH
    screen_height: int = BREAKOUT_SCREEN_HEIGHT
    columns: int = 18
    top_row_y: int = 80
    block_width: int = 23
    block_height: int = 15
    row_colors: Tuple[Color, ...] = BREAKOUT_ROW_COLORS
    paddle_width: int = 75
    paddle_height: int = 15
    paddle_speed: int = 15
    paddle_color: Color = COLOR_RED
    ball_width: int = 23
    ball_height: int = 15
    ball_speed: float = 10.0
    ball_start: Tuple[float, float] = (0.0, 180.0)
    ball_direction: float = 200.0
    ball_color: Color = COLOR_DARK_RED
    min_bounce_angle: float = 15.0

    def __post_init__(self) -> None:
        """Reject geometry the simulation cannot represent."""
        if self.columns < 1 or not self.row_colors:
            raise ValueError("Breakout needs at least one row and one column of blocks")
        if self.paddle_width >= self.screen_width:
            raise ValueError("paddle_width must be smaller than screen_width")
        if not 0.0 <= self.min_bounce_angle < 90.0:
            raise ValueError("min_bounce_angle must lie in [0, 90)")

    @property
    def rows(self) -> int:
        return len(self.row_colors)


@dataclass(frozen=True)
class ReplayConfig:
    """Replay-memory settings for a training driver.

    Attributes:
        stage_frames: Frames per stacked observation.
        episodes_capacity: Completed episodes kept in memory; *None* keeps all.
        max_items: Episodes written by ``save``; *None* writes all.
        skipped_frames: Extra env steps each chosen action is held for.
            Their rewards are summed into one memorised frame.
    """

    stage_frames: int = 2
    episodes_capacity: Optional[int] = None
    max_items: Optional[int] = None
    skipped_frames: int = 0

    def __post_init__(self) -> None:
        if self.stage_frames < 1:
            raise ValueError("stage_frames must be at least 1")
        if self.episodes_capacity is not None and self.episodes_capacity < 1:
            raise ValueError("episodes_capacity must be positive")
        if self.skipped_frames < 0:
            raise ValueError("skipped_frames must not be negative")
