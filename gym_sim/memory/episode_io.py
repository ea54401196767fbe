"""
Persisted replay file format.

A replay file is one UTF-8 JSON array of episode records::

    [{"dtype": "float32",
      "observations": [{"id": 0, "actionTaken": 1, "reward": 0.5,
                        "images": [frame, ...]}]}]

Frames are stored as nested lists.  ``dtype`` names the NumPy type of the
frame stacks so that loading restores them exactly; files without it are
read with the type NumPy infers from the values.

Functions:
    dumps_episodes: Serialise episodes to JSON text.
    loads_episodes: Parse JSON text back into episodes.
    save_episodes: Write episodes to a file.
    load_episodes: Read episodes from a file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Optional

import numpy as np

from gym_sim.memory.replay_memory import Episode, Observation
from gym_sim.utils.constants import (
    KEY_ACTION_TAKEN,
    KEY_DTYPE,
    KEY_ID,
    KEY_IMAGES,
    KEY_OBSERVATIONS,
    KEY_REWARD,
)


def _observation_to_dict(observation: Observation) -> dict:
    return {
        KEY_ID: observation.id,
        KEY_ACTION_TAKEN: observation.action_taken,
        KEY_REWARD: observation.reward,
        KEY_IMAGES: [frame.tolist() for frame in observation.frame_stack],
    }


def _episode_to_dict(episode: Episode) -> dict:
    observations = episode.observations or ()
    record: dict = {}
    if observations:
        record[KEY_DTYPE] = observations[0].frame_stack.dtype.name
    record[KEY_OBSERVATIONS] = [_observation_to_dict(o) for o in observations]
    return record


def _observation_from_dict(raw: dict, dtype: Optional[np.dtype]) -> Observation:
    for key in (KEY_ID, KEY_ACTION_TAKEN, KEY_REWARD, KEY_IMAGES):
        if key not in raw:
            raise ValueError(f"Observation missing '{key}' field")
    stack = np.array(raw[KEY_IMAGES], dtype=dtype)
    stack.setflags(write=False)
    return Observation(
        id=int(raw[KEY_ID]),
        action_taken=int(raw[KEY_ACTION_TAKEN]),
        reward=float(raw[KEY_REWARD]),
        frame_stack=stack,
    )


def _episode_from_dict(raw: dict, dtype: Optional[np.dtype]) -> Episode:
    if not isinstance(raw, dict):
        raise ValueError("Episode record must be a JSON object")
    observations_raw = raw.get(KEY_OBSERVATIONS)
    if observations_raw is None:
        raise ValueError(f"Episode missing '{KEY_OBSERVATIONS}' field")
    if dtype is None and KEY_DTYPE in raw:
        dtype = np.dtype(raw[KEY_DTYPE])
    return Episode(observations=tuple(_observation_from_dict(o, dtype) for o in observations_raw))


def dumps_episodes(episodes: Iterable[Episode]) -> str:
    """Serialise *episodes* to the compact replay JSON text."""
    return json.dumps([_episode_to_dict(e) for e in episodes], separators=(",", ":"))


def loads_episodes(text: str, dtype: Optional[np.dtype] = None) -> List[Episode]:
    """Parse replay JSON text.

    Args:
        text: Contents of a replay file.
        dtype: Forces the frame type.  *None* restores the type recorded in
            each episode, falling back to NumPy inference.

    Returns:
        The episodes in file order.

    Raises:
        ValueError: If the document is not an array of episode records or a
            record lacks a required field.
    """
    payload = json.loads(text)
    if not isinstance(payload, list):
        raise ValueError("Replay file must contain a JSON array of episodes")
    return [_episode_from_dict(raw, dtype) for raw in payload]


def save_episodes(path: str | Path, episodes: Iterable[Episode]) -> Path:
    """Write *episodes* to *path*, creating parent directories.

    Returns:
        ``Path`` of the written file.
    """
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(dumps_episodes(episodes), encoding="utf-8")
    return file_path


def load_episodes(path: str | Path, dtype: Optional[np.dtype] = None) -> List[Episode]:
    """Read a replay file written by ``save_episodes``; see ``loads_episodes``."""
    return loads_episodes(Path(path).read_text(encoding="utf-8"), dtype)
