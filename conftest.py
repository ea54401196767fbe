import pytest

from gym_sim.envs.breakout import BreakoutSimEnv
from gym_sim.envs.cartpole import CartPoleSimEnv
from gym_sim.envs.pendulum import PendulumSimEnv
from gym_sim.visualization.viewer import NullViewer


class CountingFactory:
    """Viewer factory that records every viewer it builds."""

    def __init__(self):
        self.built = []

    def __call__(self, width, height, title):
        viewer = NullViewer(width, height, title)
        self.built.append(viewer)
        return viewer


@pytest.fixture
def viewer_factory():
    return CountingFactory()


@pytest.fixture
def pendulum(viewer_factory):
    env = PendulumSimEnv(viewer_factory=viewer_factory)
    yield env
    env.close()


@pytest.fixture
def cartpole(viewer_factory):
    env = CartPoleSimEnv(viewer_factory=viewer_factory)
    yield env
    env.close()


@pytest.fixture
def breakout(viewer_factory):
    env = BreakoutSimEnv(viewer_factory=viewer_factory)
    yield env
    env.close()
