import math

import numpy as np
import pytest

from gym_sim.envs.configs import PendulumSimConfig
from gym_sim.envs.pendulum import PendulumSimEnv, pendulum_reward
from gym_sim.errors import InvalidActionError, InvalidStateError


def _rollout(env, actions):
    trace = []
    obs = env.reset()
    trace.append((obs.tobytes(), None, None))
    for a in actions:
        obs, reward, done, _ = env.step(a)
        trace.append((obs.tobytes(), reward, done))
        if done:
            break
    return trace


@pytest.mark.parametrize("seed", [0, 1, 7, 123, 2 ** 31 - 1])
def test_identical_seeds_give_identical_trajectories(seed):
    actions = [(i * 7 + i // 3) % 2 for i in range(120)]
    a = PendulumSimEnv()
    b = PendulumSimEnv()
    a.seed(seed)
    b.seed(seed)
    assert _rollout(a, actions) == _rollout(b, actions)


def test_different_seeds_give_different_starts():
    a = PendulumSimEnv()
    b = PendulumSimEnv()
    a.seed(1)
    b.seed(2)
    assert not np.array_equal(a.reset(), b.reset())


def test_reseed_is_equivalent_to_fresh_construction():
    env = PendulumSimEnv()
    env.seed(5)
    env.reset()
    for _ in range(10):
        env.step(1)
    env.seed(5)
    fresh = PendulumSimEnv(PendulumSimConfig(seed=5))
    assert np.array_equal(env.reset(), fresh.reset())


def test_reset_draws_within_bounds(pendulum):
    for seed in range(20):
        pendulum.seed(seed)
        pendulum.reset()
        assert -math.pi <= pendulum.theta <= math.pi
        assert -1.0 <= pendulum.theta_dot <= 1.0


def test_reward_is_never_positive(pendulum):
    pendulum.reset()
    done = False
    step = 0
    while not done:
        _, reward, done, _ = pendulum.step(step % 2)
        assert reward < 0.0
        step += 1


def test_reward_zero_only_at_upright_rest():
    assert pendulum_reward(0.0, 0.0, 0.0) == 0.0
    assert pendulum_reward(0.1, 0.0, 0.0) < 0.0
    assert pendulum_reward(0.0, 0.1, 0.0) < 0.0
    assert pendulum_reward(0.0, 0.0, 0.1) < 0.0


def test_reward_angle_term_ignores_full_turns():
    assert pendulum_reward(6 * math.pi, 0.0, 0.0) == pytest.approx(0.0, abs=1e-9)
    assert pendulum_reward(0.5 + 4 * math.pi, 0.0, 0.0) == pytest.approx(
        pendulum_reward(0.5, 0.0, 0.0)
    )


def test_reward_uses_state_before_the_update(pendulum):
    pendulum.reset()
    theta, theta_dot = pendulum.theta, pendulum.theta_dot
    _, reward, _, _ = pendulum.step(1)
    assert reward == pytest.approx(pendulum_reward(theta, theta_dot, 2.0))


def test_euler_update_and_observation(pendulum):
    pendulum.reset()
    pendulum.theta, pendulum.theta_dot = 0.3, -0.2
    obs, _, _, _ = pendulum.step(0)
    accel = -3 * 10.0 / 2 * math.sin(0.3 + math.pi) + 3.0 * -2.0
    expected_dot = -0.2 + accel * 0.05
    assert pendulum.theta_dot == pytest.approx(expected_dot)
    assert pendulum.theta == pytest.approx(0.3 + expected_dot * 0.05)
    assert obs.dtype == np.float32
    assert obs[0] == pytest.approx(math.cos(pendulum.theta), abs=1e-6)
    assert obs[1] == pytest.approx(math.sin(pendulum.theta), abs=1e-6)
    assert obs[2] == pytest.approx(pendulum.theta_dot, abs=1e-6)


def test_angular_velocity_is_clamped(pendulum):
    pendulum.reset()
    pendulum.theta, pendulum.theta_dot = 0.5, 7.99
    obs, _, _, _ = pendulum.step(1)
    assert pendulum.theta_dot == 8.0
    assert obs[2] == pytest.approx(8.0)


def test_done_after_step_budget_is_exceeded():
    env = PendulumSimEnv(PendulumSimConfig(episode_steps=5))
    env.reset()
    for _ in range(5):
        _, _, done, info = env.step(0)
        assert not done
        assert info is None
    _, _, done, info = env.step(0)
    assert done
    assert info == {"truncated": True}


@pytest.mark.parametrize("action", [-1, 2, 1.5, "1", True, None])
def test_invalid_action_fails_fast(pendulum, action):
    pendulum.reset()
    with pytest.raises(InvalidActionError) as excinfo:
        pendulum.step(action)
    assert "[0, 1]" in str(excinfo.value)
    assert isinstance(excinfo.value, ValueError)


def test_numpy_integer_actions_are_accepted(pendulum):
    pendulum.reset()
    pendulum.step(np.int64(1))


def test_step_requires_reset():
    env = PendulumSimEnv(PendulumSimConfig(episode_steps=0))
    with pytest.raises(InvalidStateError):
        env.step(0)
    env.reset()
    _, _, done, _ = env.step(0)
    assert done
    with pytest.raises(InvalidStateError):
        env.step(0)
    env.reset()
    env.step(0)
