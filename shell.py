"""
Home screen for the game suite.

The maze is launched directly; the other mini-games are external
collaborators registered with any zero-argument launcher. Returning home
closes whatever the running game exposes as ``close()``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

import config
from main import MazeSession

logger = logging.getLogger(__name__)


class UnknownGameError(KeyError):
    """Raised when the shell is asked to launch an unregistered game id."""


@dataclass(frozen=True)
class GameEntry:
    id: str
    title: str
    description: str
    difficulty: str
    players: str = "1 Player"


MAZE = GameEntry(
    id="maze",
    title="Neon Maze Runner",
    description="Navigate through glowing mazes and reach the goal before the clock runs up.",
    difficulty="Medium",
)

GAME_CATALOG: tuple[GameEntry, ...] = (
    MAZE,
    GameEntry(
        id="wheel",
        title="Language Wheel",
        description="Spin the wheel to practice French verb conjugations.",
        difficulty="Easy",
    ),
    GameEntry(
        id="match",
        title="Memory Match",
        description="Match French phrases with their English translations.",
        difficulty="Medium",
    ),
    GameEntry(
        id="speaking",
        title="Speaking Cards",
        description="Flashcards with pronunciation guides for French learning.",
        difficulty="Easy",
    ),
    GameEntry(
        id="anagram",
        title="Anagram Builder",
        description="Arrange letter tiles to solve French word puzzles.",
        difficulty="Hard",
    ),
)


class Shell:
    def __init__(self, *, maze_size: int = config.MAZE_SIZE, runs: Any = None, **session_options: Any):
        self._entries = {entry.id: entry for entry in GAME_CATALOG}
        self._launchers: dict[str, Callable[[], Any]] = {
            MAZE.id: lambda: MazeSession(maze_size, runs=runs, **session_options),
        }
        self._current_id: str | None = None
        self._current: Any = None

    def games(self) -> list[GameEntry]:
        return list(self._entries.values())

    def register(self, game_id: str, launcher: Callable[[], Any]) -> None:
        if game_id not in self._entries:
            raise UnknownGameError(game_id)
        self._launchers[game_id] = launcher

    @property
    def current(self) -> Any:
        return self._current

    @property
    def current_id(self) -> str:
        return self._current_id or "home"

    def launch(self, game_id: str) -> Any:
        if game_id not in self._entries:
            raise UnknownGameError(game_id)
        launcher = self._launchers.get(game_id)
        if launcher is None:
            raise UnknownGameError(f"No launcher registered for {game_id!r}")
        self.return_home()
        self._current = launcher()
        self._current_id = game_id
        logger.info("Launched %s", self._entries[game_id].title)
        return self._current

    def return_home(self) -> None:
        game = self._current
        self._current = None
        self._current_id = None
        if game is None:
            return
        close = getattr(game, "close", None)
        if callable(close):
            close()
        logger.info("Returned to home screen")
