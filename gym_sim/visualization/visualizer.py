"""
Pygame window viewer and saved-episode replay.

Provides a ``PygameViewer`` that satisfies the ``Viewer`` protocol by
blitting each frame into a Pygame window, and a helper to play back the
frame stacks of a persisted replay file.

Classes:
    PygameViewer: Windowed viewer backed by Pygame.

Functions:
    replay_episodes: Play saved episodes through any viewer.
    replay_file: Load a replay file and play it.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional

import numpy as np

from gym_sim.memory.replay_memory import Episode


@dataclass
class PygameViewer:
    """Pygame-based viewer for simulation environments.

    The window is created on the first ``render`` call.  Frames are
    scaled to the window size, so grayscale replay frames can be shown as
    well as full RGB renders.

    Attributes:
        width: Window width in pixels.
        height: Window height in pixels.
        title: Caption displayed in the title bar.
        fps: Target frames per second; 0 disables throttling.
    """

    width: int = 400
    height: int = 400
    title: str = "gym_sim"
    fps: int = 30
    _screen: Optional[Any] = None
    _clock: Optional[Any] = None

    @classmethod
    def factory(cls, width: int, height: int, title: str) -> "PygameViewer":
        """Viewer factory signature: ``(width, height, title) -> Viewer``."""
        return cls(width=width, height=height, title=title)

    # ------------------------------------------------------------------
    # Initialisation / teardown
    # ------------------------------------------------------------------

    def init_display(self) -> None:
        """Create the Pygame window and clock."""
        import pygame

        pygame.init()
        self._screen = pygame.display.set_mode((self.width, self.height))
        pygame.display.set_caption(self.title)
        self._clock = pygame.time.Clock()

    def close(self) -> None:
        """Destroy the Pygame window."""
        if self._screen is None:
            return
        import pygame

        pygame.display.quit()
        self._screen = None
        self._clock = None

    def dispose(self) -> None:
        """Release Pygame entirely."""
        import pygame

        pygame.quit()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _to_rgb(self, frame: np.ndarray) -> np.ndarray:
        """Coerce *frame* to an (H, W, 3) uint8 image.

        Args:
            frame: RGB uint8 image, or a 2-D float image in [0, 1].

        Returns:
            RGB uint8 array.

        Raises:
            ValueError: For frames that are not images, e.g. state vectors.
        """
        arr = np.asarray(frame)
        if arr.ndim not in (2, 3):
            raise ValueError(f"Cannot display a frame of shape {arr.shape}")
        if arr.ndim == 2:
            if arr.dtype != np.uint8:
                arr = (np.clip(arr, 0.0, 1.0) * 255).astype(np.uint8)
            arr = np.repeat(arr[:, :, np.newaxis], 3, axis=2)
        return arr

    def _image_to_surface(self, image: np.ndarray) -> Any:
        """Convert an (H, W, 3) uint8 NumPy image to a scaled Pygame surface."""
        import pygame

        surface = pygame.surfarray.make_surface(np.transpose(image, (1, 0, 2)))
        return pygame.transform.scale(surface, (self.width, self.height))

    def render(self, frame: np.ndarray) -> None:
        """Blit one frame to the window.

        Args:
            frame: (H, W, 3) uint8 RGB image or (H, W) grayscale image.
        """
        if self._screen is None:
            self.init_display()
        import pygame

        self._screen.blit(self._image_to_surface(self._to_rgb(frame)), (0, 0))
        pygame.display.flip()
        pygame.event.pump()
        if self._clock is not None and self.fps > 0:
            self._clock.tick(self.fps)


def replay_episodes(episodes: Iterable[Episode], viewer: Any) -> int:
    """Show the newest frame of every observation through *viewer*.

    Args:
        episodes: Episodes as returned by ``load_episodes``.
        viewer: Any object satisfying the ``Viewer`` protocol.

    Returns:
        Number of frames shown.
    """
    shown = 0
    for episode in episodes:
        for observation in episode.observations or ():
            viewer.render(observation.frame_stack[-1])
            shown += 1
    return shown


def replay_file(path: str | Path, viewer: Any) -> int:
    """Load a persisted replay file and play it through *viewer*.

    Args:
        path: Path written by ``ReplayMemory.save``.
        viewer: Any object satisfying the ``Viewer`` protocol.

    Returns:
        Number of frames shown.
    """
    from gym_sim.memory.episode_io import load_episodes

    return replay_episodes(load_episodes(path), viewer)
