import json

import numpy as np
import pytest

from gym_sim.envs.breakout import BreakoutSimEnv
from gym_sim.memory.episode_io import load_episodes, loads_episodes, save_episodes
from gym_sim.memory.replay_memory import ImageReplayMemory, ParameterReplayMemory, ReplayMemory


def _collect(env, memory, episodes):
    for _ in range(episodes):
        obs = env.reset()
        done = False
        step = 0
        while not done and step < 60:
            action = step % 3
            frame = obs
            obs, reward, done, _ = env.step(action)
            memory.memorize(frame, action, reward)
            step += 1
        memory.end_episode()


def test_round_trip_reproduces_observations(tmp_path):
    memory = ParameterReplayMemory(3, 4)
    _collect(BreakoutSimEnv(), memory, 2)
    path = save_episodes(tmp_path / "replay.json", memory.episodes)
    loaded = load_episodes(path)
    assert len(loaded) == len(memory.episodes)
    for original, restored in zip(memory.episodes, loaded):
        assert restored.observations == original.observations


def test_round_trip_with_integer_frames(tmp_path):
    rng = np.random.default_rng(0)
    memory = ReplayMemory(2, (4, 5, 3))
    for _ in range(5):
        memory.memorize(rng.integers(0, 256, size=(4, 5, 3), dtype=np.uint8), 2, 0.25)
    memory.end_episode()
    loaded = load_episodes(memory.save(tmp_path / "sub" / "img.json"), dtype=np.uint8)
    restored = loaded[0].observations
    assert restored[0].frame_stack.dtype == np.uint8
    assert restored == memory.episodes[0].observations


def test_file_layout(tmp_path):
    memory = ReplayMemory(1, (2,))
    memory.memorize(np.array([0.5, 1.5]), 1, 2.0)
    memory.end_episode()
    payload = json.loads(memory.save(tmp_path / "r.json").read_text())
    assert payload == [
        {
            "dtype": "float64",
            "observations": [{"id": 0, "actionTaken": 1, "reward": 2.0, "images": [[0.5, 1.5]]}],
        }
    ]


@pytest.mark.parametrize(
    "text",
    [
        '{"observations": []}',
        '[{"steps": []}]',
        '[[]]',
        '[{"observations": [{"id": 0, "reward": 1.0, "images": []}]}]',
    ],
)
def test_malformed_files_are_rejected(text):
    with pytest.raises(ValueError):
        loads_episodes(text)


def test_round_trip_restores_float64_frames_exactly(tmp_path):
    memory = ReplayMemory(2, (3,))
    for i in range(3):
        memory.memorize(np.array([0.1, 1 / 3, 2.0 + i]), i, 0.5)
    memory.end_episode()
    loaded = load_episodes(memory.save(tmp_path / "f64.json"))
    restored = loaded[0].observations
    assert restored[0].frame_stack.dtype == np.float64
    assert restored == memory.episodes[0].observations


def test_round_trip_restores_uint8_frames_without_dtype(tmp_path):
    memory = ImageReplayMemory(1, width=2, height=2, channels=3)
    memory.memorize(np.full((2, 2, 3), 200, dtype=np.uint8), 0, 1.0)
    memory.end_episode()
    restored = load_episodes(memory.save(tmp_path / "u8.json"))[0].observations
    assert restored[0].frame_stack.dtype == np.uint8
    assert restored == memory.episodes[0].observations


def test_files_without_dtype_fall_back_to_inference():
    text = '[{"observations": [{"id": 0, "actionTaken": 0, "reward": 1.0, "images": [[0.25, 0.5]]}]}]'
    (episode,) = loads_episodes(text)
    assert episode.observations[0].frame_stack.dtype == np.float64
    assert episode.total_reward == 1.0
