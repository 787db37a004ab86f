"""
Game constants and paths.

MAZE_SIZE and DEFAULT_DB_PATH can be overridden through the NEON_MAZE_SIZE
and NEON_MAZE_DB environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


MIN_SIZE = 5
MAZE_SIZE = _env_int("NEON_MAZE_SIZE", 12)
WALL_PROBABILITY = 0.3
TICK_SECONDS = 1.0

DEFAULT_DB_PATH = Path(os.environ.get("NEON_MAZE_DB") or Path.home() / ".neon_maze" / "runs.db")
