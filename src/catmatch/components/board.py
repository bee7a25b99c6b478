from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from catmatch.components.tile import Tile
from catmatch.constants import GRID_SIZE
from catmatch.errors import EngineInvariantError

Position = Tuple[int, int]


@dataclass(slots=True)
class Grid:
    """Square matrix of tiles, row 0 at the top.

    Cells are only ``None`` transiently while a cascade step is between its
    gravity and refill stages. Out-of-bounds access raises ``IndexError``.
    """
    size: int
    cells: List[List[Optional[Tile]]]

    @classmethod
    def create_empty(cls, size: int = GRID_SIZE) -> Grid:
        return cls(size=size, cells=[[None] * size for _ in range(size)])

    @classmethod
    def from_kinds(cls, rows: Sequence[Sequence[str]]) -> Grid:
        """Build a fully occupied grid from a square table of kind names."""
        size = len(rows)
        grid = cls.create_empty(size)
        for r, row in enumerate(rows):
            if len(row) != size:
                raise ValueError(f"Row {r} has {len(row)} cells, expected {size}")
            for c, kind in enumerate(row):
                grid.set((r, c), Tile(kind=kind, row=r, col=c))
        return grid

    def in_bounds(self, pos: Position) -> bool:
        row, col = pos
        return 0 <= row < self.size and 0 <= col < self.size

    def _check(self, pos: Position) -> None:
        if not self.in_bounds(pos):
            raise IndexError(f"Position {pos} outside {self.size}x{self.size} grid")

    def get(self, pos: Position) -> Optional[Tile]:
        self._check(pos)
        return self.cells[pos[0]][pos[1]]

    def set(self, pos: Position, tile: Optional[Tile]) -> None:
        self._check(pos)
        if tile is not None:
            tile.row, tile.col = pos
        self.cells[pos[0]][pos[1]] = tile

    def kind_at(self, pos: Position) -> Optional[str]:
        tile = self.get(pos)
        return tile.kind if tile is not None else None

    def neighbors4(self, pos: Position) -> List[Position]:
        self._check(pos)
        row, col = pos
        candidates = [(row - 1, col), (row + 1, col), (row, col - 1), (row, col + 1)]
        return [p for p in candidates if self.in_bounds(p)]

    def clone(self) -> Grid:
        return Grid(
            size=self.size,
            cells=[[tile.copy() if tile is not None else None for tile in row] for row in self.cells],
        )

    def positions(self) -> Iterator[Position]:
        for row in range(self.size):
            for col in range(self.size):
                yield (row, col)

    def tiles(self) -> Iterator[Tile]:
        for row in self.cells:
            for tile in row:
                if tile is not None:
                    yield tile

    def empty_positions(self) -> List[Position]:
        return [pos for pos in self.positions() if self.cells[pos[0]][pos[1]] is None]

    def is_full(self) -> bool:
        return not self.empty_positions()

    def kinds(self) -> List[List[Optional[str]]]:
        return [[tile.kind if tile is not None else None for tile in row] for row in self.cells]

    def swap(self, a: Position, b: Position) -> None:
        tile_a = self.get(a)
        tile_b = self.get(b)
        self.set(a, tile_b)
        self.set(b, tile_a)

    def clear_flags(self) -> None:
        for tile in self.tiles():
            tile.clear_flags()

    def check_invariants(self) -> None:
        """Raise if a cell is empty or a tile disagrees with its array index."""
        for row, col in self.positions():
            tile = self.cells[row][col]
            if tile is None:
                raise EngineInvariantError(f"Empty cell at {(row, col)} on a settled grid")
            if tile.position != (row, col):
                raise EngineInvariantError(
                    f"Tile {tile.id} reports {tile.position} but sits at {(row, col)}"
                )


@dataclass(slots=True)
class Board:
    """Component holding the session's single live grid."""
    grid: Grid
