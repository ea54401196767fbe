"""
Small stateless helpers used across the gym_sim package.

Provides numerical clamping, angle wrapping, seeding, and the NumPy
rasterisation primitives the environments use to draw their frames, plus
frame preprocessing for image-based replay memories.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np
from gymnasium.utils import seeding


def clamp(value: float, lo: float, hi: float) -> float:
    """Return *value* clamped to the closed interval [*lo*, *hi*].

    Args:
        value: The scalar to clamp.
        lo: Lower bound (inclusive).
        hi: Upper bound (inclusive).

    Returns:
        The clamped scalar.
    """
    return max(lo, min(hi, value))


def angle_normalize(x: float) -> float:
    """Wrap an angle in radians into [-pi, pi)."""
    return ((x + math.pi) % (2 * math.pi)) - math.pi


def seed_rng(seed: int | None) -> Tuple[np.random.Generator, int]:
    """Create a NumPy generator through Gymnasium's seeding helper.

    Args:
        seed: The integer seed value, or *None* for fresh entropy.

    Returns:
        Tuple of (seeded ``numpy.random.Generator``, seed actually used).
    """
    return seeding.np_random(seed)


def blank_canvas(height: int, width: int, color: Sequence[int]) -> np.ndarray:
    """Return an (H, W, 3) uint8 canvas filled with *color*."""
    canvas = np.empty((height, width, 3), dtype=np.uint8)
    canvas[:] = color
    return canvas


def fill_rect(
    canvas: np.ndarray, x: float, y: float, width: float, height: float, color: Sequence[int]
) -> None:
    """Fill an axis-aligned rectangle on *canvas*, clipped to its bounds.

    Args:
        canvas: Mutable (H, W, 3) uint8 array.
        x: Left edge in pixels.
        y: Top edge in pixels.
        width: Rectangle width in pixels.
        height: Rectangle height in pixels.
        color: RGB fill colour.
    """
    h, w = canvas.shape[:2]
    x0, y0 = max(int(x), 0), max(int(y), 0)
    x1, y1 = min(int(x + width), w), min(int(y + height), h)
    if x0 < x1 and y0 < y1:
        canvas[y0:y1, x0:x1] = color


def fill_circle(canvas: np.ndarray, cx: float, cy: float, radius: float, color: Sequence[int]) -> None:
    """Fill a disc centred on (*cx*, *cy*)."""
    h, w = canvas.shape[:2]
    rr, cc = np.ogrid[:h, :w]
    mask = (rr - cy) ** 2 + (cc - cx) ** 2 <= radius ** 2
    canvas[mask] = color


def fill_segment(
    canvas: np.ndarray,
    start: Tuple[float, float],
    end: Tuple[float, float],
    thickness: float,
    color: Sequence[int],
) -> None:
    """Fill every pixel within ``thickness / 2`` of the segment *start*-*end*.

    Args:
        canvas: Mutable (H, W, 3) uint8 array.
        start: (x, y) of the first endpoint.
        end: (x, y) of the second endpoint.
        thickness: Stroke width in pixels.
        color: RGB fill colour.
    """
    h, w = canvas.shape[:2]
    rr, cc = np.ogrid[:h, :w]
    sx, sy = start
    dx, dy = end[0] - sx, end[1] - sy
    length_sq = dx * dx + dy * dy
    if length_sq == 0.0:
        fill_circle(canvas, sx, sy, thickness / 2.0, color)
        return
    t = np.clip(((cc - sx) * dx + (rr - sy) * dy) / length_sq, 0.0, 1.0)
    dist_sq = (cc - (sx + t * dx)) ** 2 + (rr - (sy + t * dy)) ** 2
    canvas[dist_sq <= (thickness / 2.0) ** 2] = color


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Convert an (H, W, 3) RGB image to (H, W) float32 luminance in [0, 1].

    Raises:
        ValueError: When the image is not 3-D with three channels.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected (H, W, 3) image, got shape {image.shape}")
    weights = np.array([0.299, 0.587, 0.114], dtype=np.float32)
    return (image.astype(np.float32) @ weights) / 255.0


def resize_nearest(image: np.ndarray, width: int, height: int) -> np.ndarray:
    """Nearest-neighbour resize of an (H, W[, C]) image to (*height*, *width*)."""
    src_h, src_w = image.shape[:2]
    rows = (np.arange(height) * src_h // height).astype(np.intp)
    cols = (np.arange(width) * src_w // width).astype(np.intp)
    return np.ascontiguousarray(image[rows][:, cols])


def preprocess_frame(image: np.ndarray, width: int, height: int) -> np.ndarray:
    """Turn a rendered RGB frame into a small grayscale replay frame.

    Args:
        image: (H, W, 3) uint8 frame as returned by ``env.render``.
        width: Target width in pixels.
        height: Target height in pixels.

    Returns:
        (height, width) float32 array in [0, 1].
    """
    return resize_nearest(to_grayscale(image), width, height)
