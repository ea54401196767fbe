"""
Shared constants, type aliases, and helper utilities.

Centralizes render-mode names, screen geometry, the colour palette, replay
file keys, and small stateless helpers used across the gym_sim package.
"""
