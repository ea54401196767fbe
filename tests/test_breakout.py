import dataclasses
import math

import numpy as np
import pytest

from gym_sim.envs.breakout import BreakoutSimEnv, Rect, guard_direction
from gym_sim.envs.configs import BreakoutSimConfig
from gym_sim.errors import InvalidActionError, InvalidStateError


def test_reset_builds_full_grid(breakout):
    breakout.reset()
    cfg = breakout.cfg
    assert len(breakout.blocks) == 6 * 18
    assert breakout.blocks_remaining == 6 * 18
    assert breakout.blocks[0].rect == Rect(0, 80, 23, 15)
    assert breakout.blocks[18].rect == Rect(0, 95, 23, 15)
    assert breakout.blocks[0].color == cfg.row_colors[0]
    assert breakout.blocks[-1].color == cfg.row_colors[-1]


def test_initial_observation_is_normalised(breakout):
    obs = breakout.reset()
    expected = np.array([162.5 / 400, 0.0, 180 / 600, 200 / 360], dtype=np.float32)
    assert obs.dtype == np.float32
    assert np.array_equal(obs, expected)


def test_first_tick_reflects_off_left_wall(breakout):
    breakout.reset()
    _, reward, done, info = breakout.step(0)
    assert breakout.ball.x == 1.0
    assert breakout.ball.direction == 160.0
    assert breakout.ball.y == pytest.approx(180 - 10 * math.cos(math.radians(200)))
    assert reward == 0.0
    assert not done
    assert info == {"blocks_remaining": 108}


def test_paddle_stays_on_screen(breakout):
    rng = np.random.default_rng(0)
    breakout.reset()
    hi = breakout.cfg.screen_width - breakout.cfg.paddle_width
    for action in rng.integers(0, 3, size=600):
        _, _, done, _ = breakout.step(int(action))
        assert 0 <= breakout.paddle.x <= hi
        if done:
            breakout.reset()


@pytest.mark.parametrize("action, edge", [(1, 0.0), (2, 325.0)])
def test_paddle_clamps_at_edges(breakout, action, edge):
    breakout.reset()
    for _ in range(30):
        breakout.ball.x, breakout.ball.y = 200.0, 300.0
        breakout.step(action)
    assert breakout.paddle.x == edge


@pytest.mark.parametrize("direction", [0.0, 180.0])
def test_ball_below_bottom_ends_episode(breakout, direction):
    breakout.reset()
    breakout.ball.y = breakout.cfg.screen_height + 1
    breakout.ball.direction = direction
    _, _, done, info = breakout.step(0)
    assert done
    assert info["blocks_remaining"] > 0


def test_destroying_last_block_ends_episode_same_tick(breakout):
    breakout.reset()
    for block in breakout.blocks[1:]:
        block.destroyed = True
    breakout.ball.x, breakout.ball.y, breakout.ball.direction = 5.0, 100.0, 0.0
    _, reward, done, info = breakout.step(0)
    assert reward == 1.0
    assert done
    assert info["blocks_remaining"] == 0
    assert breakout.blocks[0].destroyed


def test_at_most_one_block_destroyed_per_tick(breakout):
    breakout.reset()
    # after moving up, the ball overlaps blocks (0,0), (0,1), (1,0) and (1,1)
    breakout.ball.x, breakout.ball.y, breakout.ball.direction = 12.0, 100.0, 0.0
    _, reward, done, _ = breakout.step(0)
    assert reward == 1.0
    assert not done
    destroyed = [i for i, b in enumerate(breakout.blocks) if b.destroyed]
    assert destroyed == [0]
    assert breakout.ball.direction == 180.0


def test_paddle_returns_ball_upwards(breakout):
    breakout.reset()
    breakout.ball.x, breakout.ball.y, breakout.ball.direction = 170.0, 570.0, 180.0
    _, reward, done, _ = breakout.step(0)
    assert not done
    assert reward == 0.0
    assert breakout.ball.y == 600 - 15 - 15 - 1
    # struck 18.5px right of the paddle centre
    assert breakout.ball.direction == pytest.approx(341.5)
    assert math.cos(math.radians(breakout.ball.direction)) > 0


@pytest.mark.parametrize("diff", range(-80, 81, 5))
def test_bounce_never_leaves_a_shallow_heading(breakout, diff):
    breakout.reset()
    breakout.ball.direction = 180.0
    breakout.ball.bounce(diff)
    d = breakout.ball.direction
    assert 0.0 <= d < 360.0
    assert min(abs(d - 90.0), abs(d - 270.0)) >= breakout.cfg.min_bounce_angle - 1e-9


def test_guard_direction():
    assert guard_direction(90.0, 15.0) == 105.0
    assert guard_direction(85.0, 15.0) == 75.0
    assert guard_direction(275.0, 15.0) == 285.0
    assert guard_direction(-10.0, 15.0) == 350.0
    assert guard_direction(45.0, 15.0) == 45.0
    assert guard_direction(100.0, 0.0) == 100.0


def test_rect_overlap_is_strict():
    a = Rect(0, 0, 10, 10)
    assert a.overlaps(Rect(5, 5, 10, 10))
    assert not a.overlaps(Rect(10, 0, 10, 10))
    assert not a.overlaps(Rect(0, 10, 10, 10))


def test_seed_rebuilds_playfield(breakout):
    breakout.reset()
    for block in breakout.blocks[:10]:
        block.destroyed = True
    breakout.seed(0)
    assert breakout.blocks_remaining == 108
    with pytest.raises(InvalidStateError):
        breakout.step(0)


def test_invalid_action(breakout):
    breakout.reset()
    with pytest.raises(InvalidActionError) as excinfo:
        breakout.step(3)
    assert "[0, 2]" in str(excinfo.value)


def test_step_after_done_requires_reset(breakout):
    breakout.reset()
    breakout.ball.y = 700.0
    breakout.step(0)
    with pytest.raises(InvalidStateError):
        breakout.step(0)


def test_config_is_immutable_and_per_instance():
    cfg = BreakoutSimConfig(columns=4)
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.columns = 5
    small = BreakoutSimEnv(cfg)
    full = BreakoutSimEnv()
    small.reset()
    full.reset()
    assert len(small.blocks) == 24
    assert len(full.blocks) == 108
    small.blocks[0].destroyed = True
    assert not full.blocks[0].destroyed


@pytest.mark.parametrize(
    "kwargs",
    [{"columns": 0}, {"row_colors": ()}, {"paddle_width": 400}, {"min_bounce_angle": 90.0}],
)
def test_config_rejects_bad_geometry(kwargs):
    with pytest.raises(ValueError):
        BreakoutSimConfig(**kwargs)
