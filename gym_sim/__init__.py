"""
gym_sim: simulation substrate for reinforcement-learning experiments.

Provides discrete-time environments sharing one seed/reset/step/render/close
contract, and a frame-stacking replay memory that records episodes and
persists the most rewarding ones.

Modules:
    envs: Pendulum, CartPole and Breakout simulators, configs and factory.
    memory: Frame-stacking replay memory and the replay file format.
    visualization: Viewer protocol, headless and Pygame viewers.
    utils: Shared constants and helper utilities.
    errors: Exception types.
"""

__version__ = "0.1.0"
