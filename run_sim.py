#!/usr/bin/env python3
"""
Main entry point for the gym_sim simulation substrate.

Demonstrates the full data pipeline: environment instantiation, rollouts
with a random policy, frame-stacked recording into replay memory, and
saving the most rewarding episodes.  Run directly with ``python run_sim.py``
or import the individual components for a custom training loop.

Usage examples::

    # Record 50 breakout episodes, keep the best 10
    python run_sim.py --task breakout --episodes 50 --max-items 10

    # Watch a random pendulum in a Pygame window
    python run_sim.py --task pendulum --episodes 3 --render

    # Record downscaled grayscale frames instead of state vectors
    python run_sim.py --task breakout --frames image --frame-size 40

    # Play back a saved image replay
    python run_sim.py --replay ./sim_output/replay.json
"""

from __future__ import annotations

import argparse
from typing import Any, List, Optional, Sequence, Tuple

from gym_sim.envs.base import SimEnv
from gym_sim.envs.configs import ReplayConfig, SimEnvConfig
from gym_sim.envs.factory import _resolve_config, available_envs, make_sim_env
from gym_sim.memory.episode_io import load_episodes
from gym_sim.memory.replay_memory import (
    Episode,
    ImageReplayMemory,
    ParameterReplayMemory,
    ReplayMemory,
)
from gym_sim.utils.constants import RENDER_RGB_ARRAY
from gym_sim.utils.helpers import preprocess_frame
from gym_sim.visualization.viewer import NullViewer
from gym_sim.visualization.visualizer import PygameViewer, replay_episodes

# ======================================================================
# Builders
# ======================================================================


def _build_replay_config(args: argparse.Namespace) -> ReplayConfig:
    """Translate CLI arguments into a ``ReplayConfig``.

    Args:
        args: Parsed CLI arguments.

    Returns:
        The replay settings for this run.
    """
    return ReplayConfig(
        stage_frames=args.stage_frames,
        episodes_capacity=args.capacity,
        max_items=args.max_items,
        skipped_frames=args.skipped_frames,
    )


def _build_memory(env: SimEnv, replay_cfg: ReplayConfig, args: argparse.Namespace) -> ReplayMemory:
    """Create a replay memory matching the chosen frame source.

    Args:
        env: The simulator whose outputs will be recorded.
        replay_cfg: Replay settings.
        args: Parsed CLI arguments with ``frames`` and ``frame_size``.

    Returns:
        A ``ParameterReplayMemory`` for state vectors or an
        ``ImageReplayMemory`` for rendered frames.
    """
    if args.frames == "image":
        return ImageReplayMemory(
            replay_cfg.stage_frames,
            width=args.frame_size,
            height=args.frame_size,
            episodes_capacity=replay_cfg.episodes_capacity,
        )
    return ParameterReplayMemory(
        replay_cfg.stage_frames,
        parameter_length=env.observation_space.shape[0],
        episodes_capacity=replay_cfg.episodes_capacity,
    )


# ======================================================================
# Rollouts
# ======================================================================


def _frame_for(env: SimEnv, observation: Any, args: argparse.Namespace) -> Any:
    """Return what gets memorised for this tick.

    Args:
        env: The simulator (rendered in image mode).
        observation: Observation returned by ``reset``/``step``.
        args: Parsed CLI arguments.

    Returns:
        The state vector, or a downscaled grayscale frame.
    """
    if args.frames == "image":
        return preprocess_frame(env.render(RENDER_RGB_ARRAY), args.frame_size, args.frame_size)
    return observation


def _step_skipping(env: SimEnv, action: int, skipped_frames: int) -> Tuple[Any, float, bool]:
    """Apply *action* once plus *skipped_frames* more times.

    Stops early when the episode ends.

    Returns:
        Tuple of (last observation, summed reward, done).
    """
    observation, reward, done, _ = env.step(action)
    for _ in range(skipped_frames):
        if done:
            break
        observation, extra, done, _ = env.step(action)
        reward += extra
    return observation, reward, done


def _run_episode(
    env: SimEnv, memory: ReplayMemory, args: argparse.Namespace, skipped_frames: int = 0
) -> float:
    """Roll out one episode with random actions, recording every kept tick.

    Args:
        env: The simulator.
        memory: Replay memory receiving the frames.
        args: Parsed CLI arguments.
        skipped_frames: Extra steps each action is held for.

    Returns:
        The undiscounted episode return.
    """
    observation = env.reset()
    total_reward = 0.0
    done = False
    while not done:
        action = env.action_space.sample()
        frame = _frame_for(env, observation, args)
        observation, reward, done = _step_skipping(env, action, skipped_frames)
        memory.memorize(frame, action, reward)
        total_reward += reward
        if args.render:
            env.render()
    memory.end_episode()
    return total_reward


def _run(env_cfg: SimEnvConfig, args: argparse.Namespace) -> None:
    """Collect episodes and save the best of them.

    Args:
        env_cfg: Simulation environment configuration.
        args: Parsed CLI arguments.
    """
    factory = PygameViewer.factory if args.render else NullViewer.factory
    env = make_sim_env(env_cfg, viewer_factory=factory)
    env.seed(args.seed)
    env.action_space.seed(args.seed)
    replay_cfg = _build_replay_config(args)
    memory = _build_memory(env, replay_cfg, args)
    try:
        for episode in range(args.episodes):
            ret = _run_episode(env, memory, args, replay_cfg.skipped_frames)
            print(f"  Episode {episode + 1:>4d} | return = {ret:9.3f}")
    finally:
        env.close()
    out = memory.save(args.output, max_items=replay_cfg.max_items)
    kept = len(memory.select(replay_cfg.max_items))
    print(f"Saved {kept} of {len(memory)} episodes to {out}")


def _load_image_replay(path: str) -> List[Episode]:
    """Load a replay file whose frames can be shown as images.

    Raises:
        ValueError: If the file holds state-vector frames.
    """
    episodes = load_episodes(path)
    for episode in episodes:
        for observation in episode.observations or ():
            if observation.frame_stack.ndim - 1 not in (2, 3):
                raise ValueError(
                    f"{path} holds frames of shape {observation.frame_stack.shape[1:]}; "
                    "only image replays (--frames image) can be played back"
                )
    return episodes


def _replay(path: str) -> None:
    """Play the newest frame of every saved observation in a Pygame window."""
    episodes = _load_image_replay(path)
    viewer = PygameViewer(title=path)
    try:
        shown = replay_episodes(episodes, viewer)
    finally:
        viewer.close()
        viewer.dispose()
    print(f"Replayed {shown} frames from {path}")


# ======================================================================
# CLI
# ======================================================================


def _count_or_all(value: str) -> Optional[int]:
    """argparse type accepting a non-negative integer or ``'all'``."""
    if value == "all":
        return None
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError("must be a non-negative integer or 'all'")
    return number


def _positive_or_all(value: str) -> Optional[int]:
    """argparse type accepting a positive integer or ``'all'``."""
    number = _count_or_all(value)
    if number == 0:
        raise argparse.ArgumentTypeError("must be a positive integer or 'all'")
    return number


def _non_negative(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError("must be a non-negative integer")
    return number


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Arguments to parse; *None* reads ``sys.argv``.

    Returns:
        Parsed ``argparse.Namespace``.
    """
    parser = argparse.ArgumentParser(description="gym_sim replay collection")
    parser.add_argument("--task", choices=available_envs(), default="breakout")
    parser.add_argument("--episodes", type=int, default=20)
    parser.add_argument("--stage-frames", type=int, default=2)
    parser.add_argument("--capacity", type=_positive_or_all, default=None)
    parser.add_argument("--max-items", type=_count_or_all, default=10)
    parser.add_argument("--skipped-frames", type=_non_negative, default=0)
    parser.add_argument("--frames", choices=["state", "image"], default="state")
    parser.add_argument("--frame-size", type=int, default=40)
    parser.add_argument("--output", default="./sim_output/replay.json")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--render", action="store_true")
    parser.add_argument(
        "--replay",
        default=None,
        help="Play back an image replay (recorded with --frames image) and exit",
    )
    return parser.parse_args(argv)


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------
if __name__ == "__main__":
    args = _parse_args()
    env_cfg = _resolve_config(args.task)
    print(f"Task: {args.task} | Episodes: {args.episodes} | Seed: {args.seed}")
    print(f"Env config: {env_cfg.task}, stage_frames={args.stage_frames}, frames={args.frames}")
    print("-" * 60)
    if args.replay:
        _replay(args.replay)
    else:
        _run(env_cfg, args)
