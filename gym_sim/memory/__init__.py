"""Frame-stacking replay memory and the persisted replay format."""

from gym_sim.memory.episode_io import load_episodes, save_episodes
from gym_sim.memory.replay_memory import (
    Episode,
    ImageReplayMemory,
    Observation,
    ParameterReplayMemory,
    ReplayMemory,
)

__all__ = [
    "Episode",
    "Observation",
    "ReplayMemory",
    "ImageReplayMemory",
    "ParameterReplayMemory",
    "load_episodes",
    "save_episodes",
]
