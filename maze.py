from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Union

import config


class ConfigurationError(ValueError):
    """Raised when a maze or session is constructed with unusable parameters."""


class Direction(Enum):
    UP = (-1, 0)
    DOWN = (1, 0)
    LEFT = (0, -1)
    RIGHT = (0, 1)

    @property
    def delta(self) -> tuple[int, int]:
        return self.value


@dataclass(frozen=True)
class Position:
    row: int
    col: int

    def step(self, delta: tuple[int, int]) -> "Position":
        dr, dc = delta
        return Position(row=self.row + dr, col=self.col + dc)


@dataclass
class Cell:
    row: int
    col: int
    is_wall: bool = False
    is_start: bool = False
    is_end: bool = False
    visited: bool = False

    @property
    def pos(self) -> Position:
        return Position(row=self.row, col=self.col)

    def view(self) -> "CellView":
        return CellView(
            row=self.row,
            col=self.col,
            is_wall=self.is_wall,
            is_start=self.is_start,
            is_end=self.is_end,
            visited=self.visited,
        )


@dataclass(frozen=True)
class CellView:
    """
    Read-only copy of a cell handed to the presentation layer.
    """

    row: int
    col: int
    is_wall: bool
    is_start: bool
    is_end: bool
    visited: bool


class Grid:
    def __init__(self, size: int, cells: list[list[Cell]]):
        self.size = size
        self._cells = cells

    @property
    def start(self) -> Position:
        return Position(row=1, col=1)

    @property
    def end(self) -> Position:
        return Position(row=self.size - 2, col=self.size - 2)

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.row < self.size and 0 <= pos.col < self.size

    def cell(self, pos: Position) -> Cell:
        if not self.in_bounds(pos):
            raise ValueError(f"Out of bounds position: {pos}")
        return self._cells[pos.row][pos.col]

    def is_border(self, pos: Position) -> bool:
        last = self.size - 1
        return pos.row in (0, last) or pos.col in (0, last)

    def __iter__(self) -> Iterator[Cell]:
        for row in self._cells:
            yield from row

    def available_moves(self, pos: Position) -> set[Direction]:
        moves: set[Direction] = set()
        for direction in Direction:
            nxt = pos.step(direction.delta)
            if self.in_bounds(nxt) and not self.cell(nxt).is_wall:
                moves.add(direction)
        return moves

    def visited_trail(self) -> set[Position]:
        return {cell.pos for cell in self if cell.visited}

    def view(self) -> tuple[tuple[CellView, ...], ...]:
        return tuple(tuple(cell.view() for cell in row) for row in self._cells)


@dataclass(frozen=True)
class Rejected:
    pass


@dataclass(frozen=True)
class Accepted:
    position: Position
    reached_end: bool = False


MoveResult = Union[Accepted, Rejected]


def generate_grid(
    size: int,
    rng: random.Random,
    *,
    wall_probability: float = config.WALL_PROBABILITY,
) -> Grid:
    """Build a bordered noise grid.

    Each cell is independently a wall with probability ``wall_probability``
    (one ``rng.random()`` draw per cell, row-major). Border cells are then
    forced to walls and the start (1, 1) and end (size-2, size-2) are forced
    open. Nothing guarantees a path from start to end.
    """
    if size < config.MIN_SIZE:
        raise ConfigurationError(f"Maze size must be at least {config.MIN_SIZE}, got {size}")

    last = size - 1
    cells: list[list[Cell]] = []
    for r in range(size):
        row: list[Cell] = []
        for c in range(size):
            row.append(Cell(row=r, col=c, is_wall=rng.random() < wall_probability))
        cells.append(row)

    for i in range(size):
        cells[0][i].is_wall = True
        cells[last][i].is_wall = True
        cells[i][0].is_wall = True
        cells[i][last].is_wall = True

    start = cells[1][1]
    start.is_start = True
    start.is_wall = False

    end = cells[size - 2][size - 2]
    end.is_end = True
    end.is_wall = False

    return Grid(size=size, cells=cells)


def try_move(grid: Grid, pos: Position, delta: tuple[int, int]) -> MoveResult:
    """Apply one cardinal step from ``pos``.

    Out-of-bounds and wall targets are rejected with no side effects. An
    accepted move marks the destination visited.
    """
    nxt = pos.step(delta)
    if not grid.in_bounds(nxt):
        return Rejected()
    target = grid.cell(nxt)
    if target.is_wall:
        return Rejected()
    target.visited = True
    return Accepted(position=nxt, reached_end=target.is_end)
