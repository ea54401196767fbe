import threading
import time

import numpy as np
import pytest

from gym_sim.envs.breakout import BreakoutSimEnv
from gym_sim.envs.pendulum import PendulumSimEnv
from gym_sim.errors import MissingConfigurationError
from gym_sim.memory.replay_memory import ReplayMemory
from gym_sim.visualization.viewer import LazyViewer, NullViewer, Viewer
from gym_sim.visualization.visualizer import replay_episodes, replay_file


@pytest.mark.parametrize(
    "env_fixture, shape",
    [("pendulum", (500, 500, 3)), ("cartpole", (400, 600, 3)), ("breakout", (600, 400, 3))],
)
def test_render_produces_rgb_frame(request, env_fixture, shape):
    env = request.getfixturevalue(env_fixture)
    env.reset()
    frame = env.render("rgb_array")
    assert frame.shape == shape
    assert frame.dtype == np.uint8
    assert len(np.unique(frame.reshape(-1, 3), axis=0)) > 1


def test_human_render_builds_viewer_once(pendulum, viewer_factory):
    pendulum.reset()
    first = pendulum.render()
    pendulum.render()
    assert len(viewer_factory.built) == 1
    viewer = viewer_factory.built[0]
    assert (viewer.width, viewer.height, viewer.title) == (500, 500, "Pendulum-v0")
    assert viewer.frames_rendered == 2
    assert np.array_equal(viewer.last_frame, first)


def test_rgb_array_render_skips_viewer(breakout, viewer_factory):
    breakout.reset()
    breakout.render("rgb_array")
    assert viewer_factory.built == []


def test_render_does_not_touch_state(pendulum):
    pendulum.reset()
    before = (pendulum.theta, pendulum.theta_dot)
    pendulum.render()
    assert (pendulum.theta, pendulum.theta_dot) == before


def test_close_is_idempotent_and_render_rebuilds(pendulum, viewer_factory):
    pendulum.reset()
    pendulum.render()
    pendulum.close()
    pendulum.close()
    first = viewer_factory.built[0]
    assert first.closed and first.disposed
    pendulum.render()
    assert len(viewer_factory.built) == 2
    assert not viewer_factory.built[1].closed


def test_close_without_viewer_is_safe():
    env = BreakoutSimEnv()
    env.close()
    env.close()


def test_missing_factory_fails_for_human_render():
    env = BreakoutSimEnv()
    env.reset()
    env.render("rgb_array")
    with pytest.raises(MissingConfigurationError) as excinfo:
        env.render("human")
    assert isinstance(excinfo.value, RuntimeError)


def test_prebuilt_viewer_is_used():
    viewer = NullViewer()
    env = PendulumSimEnv(viewer=viewer)
    env.reset()
    env.render()
    assert viewer.frames_rendered == 1
    env.close()
    assert viewer.closed
    with pytest.raises(MissingConfigurationError):
        env.render()


def test_unknown_render_mode(pendulum):
    pendulum.reset()
    with pytest.raises(ValueError):
        pendulum.render("ansi")


def test_concurrent_first_render_builds_one_viewer():
    calls = []

    def slow_factory(width, height, title):
        calls.append(title)
        time.sleep(0.05)
        return NullViewer(width, height, title)

    lazy = LazyViewer(10, 10, "race", slow_factory)
    barrier = threading.Barrier(8)
    seen = []

    def worker():
        barrier.wait()
        seen.append(lazy.get())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(calls) == 1
    assert all(v is seen[0] for v in seen)


def test_null_viewer_satisfies_protocol():
    assert isinstance(NullViewer(), Viewer)


def test_replay_episodes_shows_newest_frames():
    memory = ReplayMemory(2, (3,))
    for i in range(4):
        memory.memorize(np.full(3, i, dtype=np.float32), 0, 0.0)
    memory.end_episode()
    viewer = NullViewer()
    assert replay_episodes(memory.episodes, viewer) == 3
    assert np.array_equal(viewer.last_frame, np.full(3, 3, dtype=np.float32))


def test_replay_file_plays_saved_frames(tmp_path):
    memory = ReplayMemory(1, (2, 2))
    for i in range(3):
        memory.memorize(np.full((2, 2), i / 4, dtype=np.float32), 0, 1.0)
    memory.end_episode()
    path = memory.save(tmp_path / "replay.json")
    viewer = NullViewer()
    assert replay_file(path, viewer) == 3
    assert np.allclose(viewer.last_frame, 0.5)
