"""
Simulation environments for gym_sim.

Provides Pendulum, CartPole and Breakout simulators implementing the
``SimEnv`` contract, their configs, and factory helpers.
"""

from gym_sim.envs.base import SimEnv, StepResult
from gym_sim.envs.breakout import BreakoutSimEnv
from gym_sim.envs.cartpole import CartPoleSimEnv
from gym_sim.envs.configs import (
    BreakoutSimConfig,
    CartPoleSimConfig,
    PendulumSimConfig,
    ReplayConfig,
    SimEnvConfig,
)
from gym_sim.envs.factory import make_gym_env, make_sim_env, make_vector_env
from gym_sim.envs.pendulum import PendulumSimEnv

__all__ = [
    "SimEnv",
    "StepResult",
    "PendulumSimEnv",
    "CartPoleSimEnv",
    "BreakoutSimEnv",
    "SimEnvConfig",
    "PendulumSimConfig",
    "CartPoleSimConfig",
    "BreakoutSimConfig",
    "ReplayConfig",
    "make_sim_env",
    "make_gym_env",
    "make_vector_env",
]
