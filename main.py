from __future__ import annotations

import logging
import random
import threading
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Any

import config
from clock import GameClock, Ticker
from maze import Accepted, CellView, ConfigurationError, Direction, Grid, Position, generate_grid, try_move

logger = logging.getLogger(__name__)


class SessionState(Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    WON = "won"


@dataclass(frozen=True)
class Command:
    """
    Normalized command object consumed by the session.
    """

    verb: str
    args: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Snapshot:
    """
    Read-only projection of a session for the presentation layer.
    """

    size: int
    grid: tuple[tuple[CellView, ...], ...]
    player: Position
    state: SessionState
    elapsed_seconds: int
    moves: int
    available_moves: list[str]

    @property
    def elapsed_display(self) -> str:
        return format_elapsed(self.elapsed_seconds)


@dataclass
class SessionOutput:
    """
    Wrapper for a snapshot plus user-facing messages from a text command.
    """

    view: Snapshot
    messages: list[str] = field(default_factory=list)


class MazeSession:
    """One maze game from generation to win or abandonment.

    Every public operation runs under a single lock so clock ticks never
    interleave with a half-applied transition. The ticker is released on
    pause, win, restart and close.
    """

    def __init__(
        self,
        size: int = config.MAZE_SIZE,
        *,
        rng: random.Random | None = None,
        tick_seconds: float = config.TICK_SECONDS,
        autotick: bool = True,
        wall_probability: float = config.WALL_PROBABILITY,
        runs: Any = None,
    ):
        if tick_seconds <= 0:
            raise ConfigurationError(f"Tick interval must be positive, got {tick_seconds}")
        self.size = size
        self.runs = runs
        self._rng = rng if rng is not None else random.Random()
        self._tick_seconds = tick_seconds
        self._autotick = autotick
        self._wall_probability = wall_probability
        self._lock = threading.RLock()
        self._clock = GameClock()
        self._ticker: Ticker | None = None
        self._generation = 0
        self._closed = False
        self._begin()

    # -- lifecycle ---------------------------------------------------------

    def _begin(self) -> None:
        grid = generate_grid(self.size, self._rng, wall_probability=self._wall_probability)
        self._stop_ticker()
        self._grid = grid
        self._pos = grid.start
        self._moves = 0
        self._clock.reset()
        self._clock.start()
        self._state = SessionState.PLAYING
        self._start_ticker()
        logger.info("Maze session started (%dx%d)", self.size, self.size)

    def _start_ticker(self) -> None:
        self._generation += 1
        if not self._autotick:
            return
        self._ticker = Ticker(partial(self._on_tick, self._generation), self._tick_seconds)
        self._ticker.start()

    def _stop_ticker(self) -> None:
        # Bumping the generation makes any tick already in flight a no-op.
        self._generation += 1
        if self._ticker is not None:
            self._ticker.cancel(wait=False)
            self._ticker = None

    def _on_tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._closed:
                return
            self._clock.tick()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            ticker = self._ticker
            self._ticker = None
            self._generation += 1
            self._clock.pause()
        if ticker is not None:
            ticker.cancel()
        logger.info("Maze session closed")

    def __enter__(self) -> "MazeSession":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -- properties --------------------------------------------------------

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def position(self) -> Position:
        return self._pos

    @property
    def elapsed_seconds(self) -> int:
        return self._clock.elapsed

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def ticking(self) -> bool:
        return self._ticker is not None and self._ticker.active

    # -- intents -----------------------------------------------------------

    def tick(self) -> int:
        with self._lock:
            if self._closed:
                return self._clock.elapsed
            return self._clock.tick()

    def move(self, direction: Direction | str) -> bool:
        """Move one step; returns True if the player moved."""
        with self._lock:
            if self._closed or self._state is not SessionState.PLAYING:
                logger.debug("Ignoring move %r while %s", direction, self._state.value)
                return False
            if not isinstance(direction, Direction):
                direction = _direction_from_token(direction)
            if direction is None:
                logger.debug("Ignoring unknown direction")
                return False

            result = try_move(self._grid, self._pos, direction.delta)
            if not isinstance(result, Accepted):
                return False

            self._pos = result.position
            self._moves += 1
            if result.reached_end:
                self._win()
            return True

    def toggle_pause(self) -> SessionState:
        with self._lock:
            if self._closed or self._state is SessionState.WON:
                logger.debug("Ignoring pause toggle while %s", self._state.value)
            elif self._state is SessionState.PLAYING:
                self._state = SessionState.PAUSED
                self._clock.pause()
                self._stop_ticker()
            else:
                self._state = SessionState.PLAYING
                self._clock.start()
                self._start_ticker()
            return self._state

    def restart(self) -> None:
        with self._lock:
            if self._closed:
                logger.debug("Ignoring restart on closed session")
                return
            self._begin()

    def _win(self) -> None:
        self._state = SessionState.WON
        self._clock.pause()
        self._stop_ticker()
        elapsed = self._clock.elapsed
        logger.info("Maze solved in %s with %d moves", format_elapsed(elapsed), self._moves)
        if self.runs is None:
            return
        try:
            self.runs.record_run(size=self.size, elapsed_seconds=elapsed, moves=self._moves)
        except Exception:
            logger.exception("Could not record completed run")

    # -- views -------------------------------------------------------------

    def snapshot(self) -> Snapshot:
        with self._lock:
            return Snapshot(
                size=self.size,
                grid=self._grid.view(),
                player=self._pos,
                state=self._state,
                elapsed_seconds=self._clock.elapsed,
                moves=self._moves,
                available_moves=sorted(d.name for d in self._grid.available_moves(self._pos)),
            )

    def handle(self, command: Command) -> SessionOutput:
        verb = (command.verb or "").strip().lower()
        args = command.args or []

        with self._lock:
            if self._closed:
                return SessionOutput(view=self.snapshot(), messages=["Session closed."])

            if verb == "look":
                return SessionOutput(view=self.snapshot())

            if verb == "pause":
                state = self.toggle_pause()
                messages = {
                    SessionState.PAUSED: ["Game paused."],
                    SessionState.PLAYING: ["Game resumed."],
                }.get(state, ["The maze is already solved."])
                return SessionOutput(view=self.snapshot(), messages=messages)

            if verb == "restart":
                self.restart()
                return SessionOutput(view=self.snapshot(), messages=["New maze generated."])

            if verb == "go":
                direction = _direction_from_token(args[0] if args else None)
            else:
                direction = _direction_from_token(verb)
                if direction is None:
                    return SessionOutput(view=self.snapshot(), messages=["Unknown command."])

            if direction is None:
                return SessionOutput(view=self.snapshot(), messages=["Invalid direction."])

            if self._state is SessionState.PAUSED:
                return SessionOutput(view=self.snapshot(), messages=["Game is paused."])

            moved = self.move(direction)
            view = self.snapshot()
            if view.state is SessionState.WON:
                return SessionOutput(view=view, messages=[f"Maze solved in {view.elapsed_display}!"] if moved else [])
            if not moved:
                return SessionOutput(view=view, messages=["Blocked path."])
            return SessionOutput(view=view)


def _direction_from_token(token: Any) -> Direction | None:
    if not isinstance(token, str):
        return None
    t = token.strip().upper()
    if t == "U":
        t = "UP"
    elif t == "D":
        t = "DOWN"
    elif t == "L":
        t = "LEFT"
    elif t == "R":
        t = "RIGHT"
    return Direction.__members__.get(t)


def format_elapsed(seconds: int) -> str:
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{secs:02d}"


# ---------------------------------------------------------------------------
# Presentation-facing operations
# ---------------------------------------------------------------------------


def new_session(size: int = config.MAZE_SIZE, **kwargs: Any) -> MazeSession:
    return MazeSession(size, **kwargs)


def move_intent(session: MazeSession, direction: Direction | str) -> None:
    session.move(direction)


def toggle_pause(session: MazeSession) -> None:
    session.toggle_pause()


def restart(session: MazeSession) -> None:
    session.restart()


def snapshot(session: MazeSession) -> Snapshot:
    return session.snapshot()


def end_session(session: MazeSession) -> None:
    session.close()
