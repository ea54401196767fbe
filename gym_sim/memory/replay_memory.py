"""
Frame-stacking replay memory.

``ReplayMemory`` turns the per-tick stream coming out of an environment
into stacked training samples.  Frames are pushed into a sliding window of
``stage_frames`` entries; once the window is full every new frame yields an
``Observation`` holding a snapshot of the whole window.  Observations are
grouped into ``Episode``s at episode boundaries, and the best episodes can
be written to disk.

Classes:
    Observation: One immutable stacked training sample.
    Episode: Observations of one completed episode.
    ReplayMemory: The frame-stacking buffer.
    ImageReplayMemory: Replay memory for (H, W[, C]) image frames.
    ParameterReplayMemory: Replay memory for flat parameter vectors.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Deque, List, Optional, Sequence, Tuple

import numpy as np

from gym_sim.errors import InvalidStateError, ShapeMismatchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Observation:
    """One stacked sample.

    Attributes:
        id: Sequence number within its episode, starting at 0.
        action_taken: Action supplied with the newest frame.
        reward: Reward supplied with the newest frame.
        frame_stack: Read-only array of shape ``(stage_frames, *frame_shape)``,
            oldest frame first.
    """

    id: int
    action_taken: int
    reward: float
    frame_stack: np.ndarray

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Observation):
            return NotImplemented
        return (
            self.id == other.id
            and self.action_taken == other.action_taken
            and self.reward == other.reward
            and np.array_equal(self.frame_stack, other.frame_stack)
        )

    __hash__ = None


@dataclass
class Episode:
    """Observations of one episode in temporal order.

    Attributes:
        observations: The recorded observations, *None* until set.
    """

    observations: Optional[Tuple[Observation, ...]] = None

    @property
    def total_reward(self) -> float:
        """Sum of the observation rewards.

        Raises:
            InvalidStateError: If no observations have been set.
        """
        if not self.observations:
            raise InvalidStateError("No observations set")
        return float(sum(o.reward for o in self.observations))

    def __len__(self) -> int:
        return len(self.observations or ())


class ReplayMemory:
    """Frame-stacking buffer that records episodes of stacked observations.

    Single-writer: one training loop feeds one memory.

    Attributes:
        stage_frames: Number of frames in every stacked observation.
        frame_shape: Shape every frame must have.
        episodes_capacity: Completed episodes kept; *None* keeps all.
    """

    def __init__(
        self,
        stage_frames: int,
        frame_shape: Sequence[int],
        episodes_capacity: Optional[int] = None,
    ) -> None:
        """Initialise an empty memory.

        Args:
            stage_frames: Window size, at least 1.
            frame_shape: Expected shape of every memorised frame.
            episodes_capacity: Optional bound on retained episodes; the
                oldest ones are dropped first.

        Raises:
            ValueError: On a non-positive window size or capacity.
        """
        if stage_frames < 1:
            raise ValueError("stage_frames must be at least 1")
        if episodes_capacity is not None and episodes_capacity < 1:
            raise ValueError("episodes_capacity must be positive")
        self.stage_frames = int(stage_frames)
        self.frame_shape: Tuple[int, ...] = tuple(int(d) for d in frame_shape)
        self.episodes_capacity = episodes_capacity
        self._window: Deque[np.ndarray] = deque(maxlen=self.stage_frames)
        self._observations: List[Observation] = []
        self._episodes: Deque[Episode] = deque(maxlen=episodes_capacity)
        self._current_id = 0

    def __len__(self) -> int:
        return len(self._episodes)

    @property
    def episodes(self) -> Tuple[Episode, ...]:
        """Completed episodes in recording order."""
        return tuple(self._episodes)

    @property
    def current_observations(self) -> Tuple[Observation, ...]:
        """Observations recorded so far in the episode in progress."""
        return tuple(self._observations)

    def _check_frame(self, frame: np.ndarray) -> None:
        if frame.shape != self.frame_shape:
            raise ShapeMismatchError(self.frame_shape, frame.shape)

    def _prepare(self, frame: np.ndarray) -> np.ndarray:
        """Validate *frame* and return an independent copy of it."""
        arr = np.array(frame, copy=True)
        self._check_frame(arr)
        return arr

    def memorize(self, frame: np.ndarray, action: int, reward: float) -> Optional[Observation]:
        """Push *frame* into the window and record an observation once it is full.

        Args:
            frame: Raw per-tick frame of shape ``frame_shape``.
            action: Action taken at this tick.
            reward: Reward received at this tick.

        Returns:
            The new ``Observation``, or *None* while the window is filling.

        Raises:
            ShapeMismatchError: If the frame shape differs from ``frame_shape``.
        """
        self._window.append(self._prepare(frame))
        if len(self._window) < self.stage_frames:
            return None
        stack = np.stack(list(self._window))
        stack.setflags(write=False)
        observation = Observation(
            id=self._current_id,
            action_taken=int(action),
            reward=float(reward),
            frame_stack=stack,
        )
        self._current_id += 1
        self._observations.append(observation)
        return observation

    def get_current(self) -> Optional[np.ndarray]:
        """Return the newest frame stack of the current episode, if any."""
        if not self._observations:
            return None
        return self._observations[-1].frame_stack

    def end_episode(self) -> Optional[Episode]:
        """Close the current episode and start an empty window.

        Returns:
            The recorded ``Episode``, or *None* when the episode produced no
            observations (it is then not stored).
        """
        self._window.clear()
        observations, self._observations = tuple(self._observations), []
        self._current_id = 0
        if not observations:
            logger.debug("Episode ended before the window filled; nothing recorded")
            return None
        episode = Episode(observations=observations)
        self._episodes.append(episode)
        logger.debug(
            "Recorded episode %d: %d observations, total reward %.3f",
            len(self._episodes) - 1,
            len(observations),
            episode.total_reward,
        )
        return episode

    def select(self, max_items: Optional[int] = None) -> List[Episode]:
        """Return the episodes ``save`` would write.

        Args:
            max_items: *None* for every episode in recording order, else the
                ``max_items`` highest-reward episodes, best first, ties kept
                in recording order.

        Raises:
            ValueError: If *max_items* is negative.
        """
        if max_items is None:
            return list(self._episodes)
        if max_items < 0:
            raise ValueError("max_items must not be negative")
        ranked = sorted(self._episodes, key=lambda e: e.total_reward, reverse=True)
        return ranked[:max_items]

    def save(self, path: str | Path, max_items: Optional[int] = None) -> Path:
        """Write episodes to *path* in the replay JSON format.

        Args:
            path: Destination file; parent directories are created.
            max_items: See ``select``.

        Returns:
            ``Path`` of the written file.
        """
        from gym_sim.memory.episode_io import save_episodes

        episodes = self.select(max_items)
        out = save_episodes(path, episodes)
        logger.debug("Saved %d of %d episodes to %s", len(episodes), len(self._episodes), out)
        return out


class ImageReplayMemory(ReplayMemory):
    """Replay memory for image frames of a fixed width and height."""

    def __init__(
        self,
        stage_frames: int,
        width: int,
        height: int,
        channels: Optional[int] = None,
        episodes_capacity: Optional[int] = None,
    ) -> None:
        shape = (height, width) if channels is None else (height, width, channels)
        super().__init__(stage_frames, shape, episodes_capacity)
        self.width = width
        self.height = height


class ParameterReplayMemory(ReplayMemory):
    """Replay memory for flat numeric observation vectors.

    A *None* frame (e.g. the observation of an env whose ``reset`` carries
    no state) is recorded as a zero vector.
    """

    def __init__(
        self,
        stage_frames: int,
        parameter_length: int,
        episodes_capacity: Optional[int] = None,
    ) -> None:
        super().__init__(stage_frames, (parameter_length,), episodes_capacity)
        self.parameter_length = parameter_length

    def _prepare(self, frame: Optional[np.ndarray]) -> np.ndarray:
        if frame is None:
            return np.zeros(self.parameter_length, dtype=np.float32)
        arr = np.asarray(frame, dtype=np.float32).ravel().copy()
        if arr.shape != self.frame_shape:
            raise ShapeMismatchError(self.frame_shape, arr.shape, what="Parameters")
        return arr
