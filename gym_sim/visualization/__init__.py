"""
Viewers for rendered frames and saved-episode replay.

Provides the ``Viewer`` protocol, a headless ``NullViewer``, the
construct-once ``LazyViewer`` guard, and a Pygame window viewer.
"""

from gym_sim.visualization.viewer import LazyViewer, NullViewer, Viewer, ViewerFactory
from gym_sim.visualization.visualizer import PygameViewer, replay_episodes, replay_file

__all__ = [
    "Viewer",
    "ViewerFactory",
    "NullViewer",
    "LazyViewer",
    "PygameViewer",
    "replay_episodes",
    "replay_file",
]
