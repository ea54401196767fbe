"""
Viewer protocol, headless viewer, and the construct-once viewer guard.

Environments never depend on a rendering technology.  They hold a
``LazyViewer`` that builds a ``Viewer`` through a factory the first time a
frame must be shown, and forward frames to it.

Classes:
    Viewer: Structural type every viewer implements.
    NullViewer: Viewer that discards frames (headless runs and tests).
    LazyViewer: Thread-safe, construct-at-most-once holder for a viewer.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol, runtime_checkable

import numpy as np

from gym_sim.errors import MissingConfigurationError

logger = logging.getLogger(__name__)


@runtime_checkable
class Viewer(Protocol):
    """A sink for rendered frames."""

    def render(self, frame: np.ndarray) -> None:
        ...

    def close(self) -> None:
        ...

    def dispose(self) -> None:
        ...


ViewerFactory = Callable[[int, int, str], Viewer]


class NullViewer:
    """Viewer that accepts frames and does nothing with them.

    Keeps a count of rendered frames and the last frame so tests can see
    what reached the viewer.
    """

    def __init__(self, width: int = 0, height: int = 0, title: str = "") -> None:
        self.width = width
        self.height = height
        self.title = title
        self.frames_rendered = 0
        self.last_frame: Optional[np.ndarray] = None
        self.closed = False
        self.disposed = False

    @classmethod
    def factory(cls, width: int, height: int, title: str) -> "NullViewer":
        """Viewer factory signature: ``(width, height, title) -> Viewer``."""
        return cls(width, height, title)

    def render(self, frame: np.ndarray) -> None:
        self.frames_rendered += 1
        self.last_frame = frame

    def close(self) -> None:
        self.closed = True

    def dispose(self) -> None:
        self.disposed = True


class LazyViewer:
    """Holds one viewer per environment, building it on first use.

    Construction uses double-checked locking: the fast path reads the
    ``_initialized`` flag without the lock, and only the first callers
    contend for the lock, of which exactly one runs the factory.

    Attributes:
        width: Width handed to the factory.
        height: Height handed to the factory.
        title: Window title handed to the factory.
    """

    def __init__(
        self,
        width: int,
        height: int,
        title: str,
        factory: Optional[ViewerFactory] = None,
        viewer: Optional[Viewer] = None,
    ) -> None:
        """Initialise the holder.

        Args:
            width: Frame width in pixels.
            height: Frame height in pixels.
            title: Viewer title.
            factory: Callable building a viewer; required unless *viewer* is
                given.
            viewer: An already constructed viewer to use instead of the
                factory.  After ``close`` a factory is needed to rebuild.
        """
        self.width = width
        self.height = height
        self.title = title
        self._factory = factory
        self._viewer: Optional[Viewer] = viewer
        self._initialized = viewer is not None
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        """Whether a viewer currently exists."""
        return self._initialized

    def get(self) -> Viewer:
        """Return the viewer, constructing it at most once.

        Raises:
            MissingConfigurationError: If no viewer exists and no factory
                was configured.
        """
        if not self._initialized:
            with self._lock:
                if not self._initialized:
                    if self._factory is None:
                        raise MissingConfigurationError(
                            f"No viewer factory has been set for '{self.title}'"
                        )
                    logger.debug("Constructing viewer '%s' (%dx%d)", self.title, self.width, self.height)
                    self._viewer = self._factory(self.width, self.height, self.title)
                    self._initialized = True
        return self._viewer

    def show(self, frame: np.ndarray) -> None:
        """Forward *frame* to the viewer, constructing it if needed."""
        self.get().render(frame)

    def close(self) -> None:
        """Close and dispose the viewer if one exists.  Safe to repeat."""
        with self._lock:
            viewer, self._viewer = self._viewer, None
            self._initialized = False
        if viewer is not None:
            logger.debug("Closing viewer '%s'", self.title)
            viewer.close()
            viewer.dispose()
