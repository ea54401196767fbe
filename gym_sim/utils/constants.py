"""
Shared constants and type aliases for the gym_sim package.

Holds render-mode names, default screen geometry, the colour palette used
by the NumPy rasterisers, and the keys of the persisted replay format.
"""

from __future__ import annotations

from typing import Tuple

Color = Tuple[int, int, int]

# ---------------------------------------------------------------------------
# Render modes
# ---------------------------------------------------------------------------
RENDER_HUMAN: str = "human"
RENDER_RGB_ARRAY: str = "rgb_array"
RENDER_MODES: Tuple[str, ...] = (RENDER_HUMAN, RENDER_RGB_ARRAY)

# ---------------------------------------------------------------------------
# Default rendering dimensions
# ---------------------------------------------------------------------------
PENDULUM_SCREEN_SIZE: int = 500
CARTPOLE_SCREEN_WIDTH: int = 600
CARTPOLE_SCREEN_HEIGHT: int = 400
BREAKOUT_SCREEN_WIDTH: int = 400
BREAKOUT_SCREEN_HEIGHT: int = 600

# ---------------------------------------------------------------------------
# Color palette (RGB 0-255)
# ---------------------------------------------------------------------------
COLOR_BLACK: Color = (0, 0, 0)
COLOR_WHITE: Color = (255, 255, 255)
COLOR_RED: Color = (255, 0, 0)
COLOR_DARK_RED: Color = (139, 0, 0)
COLOR_ORANGE_RED: Color = (255, 69, 0)
COLOR_ORANGE: Color = (255, 165, 0)
COLOR_YELLOW: Color = (255, 255, 0)
COLOR_GREEN: Color = (0, 128, 0)
COLOR_BLUE: Color = (0, 0, 255)
COLOR_ROD: Color = (211, 110, 109)
COLOR_CART: Color = (30, 30, 30)
COLOR_POLE: Color = (202, 152, 101)
COLOR_AXLE: Color = (129, 132, 203)

BREAKOUT_ROW_COLORS: Tuple[Color, ...] = (
    COLOR_RED,
    COLOR_ORANGE_RED,
    COLOR_ORANGE,
    COLOR_YELLOW,
    COLOR_GREEN,
    COLOR_BLUE,
)

# ---------------------------------------------------------------------------
# Persisted replay format keys
# ---------------------------------------------------------------------------
KEY_OBSERVATIONS: str = "observations"
KEY_ID: str = "id"
KEY_ACTION_TAKEN: str = "actionTaken"
KEY_REWARD: str = "reward"
KEY_IMAGES: str = "images"
KEY_DTYPE: str = "dtype"
