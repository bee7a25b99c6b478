from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from esper import World

from catmatch.components.board import Board, Grid
from catmatch.components.tile import Tile
from catmatch.components.tile_type_registry import TileTypeRegistry
from catmatch.components.tile_types import TileTypes
from catmatch.constants import MAX_INITIAL_BOARD_PASSES, MIN_MATCH_SIZE
from catmatch.errors import EngineInvariantError

Position = Tuple[int, int]


@dataclass(slots=True)
class GravityMove:
    source: Position
    target: Position
    tile_id: str


def get_tile_registry(world: World) -> TileTypes:
    for entity, _ in world.get_component(TileTypeRegistry):
        return world.component_for_entity(entity, TileTypes)
    raise RuntimeError("TileTypes definitions not found")


def get_board(world: World) -> Board:
    for _, board in world.get_component(Board):
        return board
    raise RuntimeError("Board not found")


def is_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return (abs(ar - br) == 1 and ac == bc) or (abs(ac - bc) == 1 and ar == br)


def _scan_line(grid: Grid, line: Iterable[Position], matches: List[List[Position]]) -> None:
    run: List[Position] = []
    last_kind: Optional[str] = None
    for pos in line:
        tile = grid.get(pos)
        if tile is None or tile.is_power_up:
            # Power-ups and holes never join a run and always close the current one.
            if len(run) >= MIN_MATCH_SIZE:
                matches.append(run)
            run = []
            last_kind = None
            continue
        if tile.kind == last_kind:
            run.append(pos)
        else:
            if len(run) >= MIN_MATCH_SIZE:
                matches.append(run)
            run = [pos]
            last_kind = tile.kind
    if len(run) >= MIN_MATCH_SIZE:
        matches.append(run)


def find_all_matches(grid: Grid) -> List[List[Position]]:
    """Return every maximal run of >= 3 same-kind regular tiles.

    Rows are scanned first (top to bottom), then columns (left to right). A tile
    can appear in both a horizontal and a vertical run; runs are not merged.
    """
    matches: List[List[Position]] = []
    size = grid.size
    for row in range(size):
        _scan_line(grid, ((row, col) for col in range(size)), matches)
    for col in range(size):
        _scan_line(grid, ((row, col) for row in range(size)), matches)
    return matches


def predict_swap_creates_match(grid: Grid, src: Position, dst: Position) -> bool:
    """Return True if swapping src/dst on a copy of grid yields at least one match."""
    hypothetical = grid.clone()
    hypothetical.swap(src, dst)
    return bool(find_all_matches(hypothetical))


def mark_consumed(grid: Grid, positions: Iterable[Position]) -> None:
    for pos in positions:
        tile = grid.get(pos)
        if tile is not None:
            tile.is_matched = True


def apply_gravity(grid: Grid, consumed: Set[Position]) -> List[GravityMove]:
    """Remove consumed tiles and let the survivors of each column fall.

    Columns are compacted independently toward the bottom row, keeping their
    relative order. Vacated cells at the top of each column are left empty.
    """
    moves: List[GravityMove] = []
    for col in range(grid.size):
        survivors: List[Tile] = []
        for row in range(grid.size - 1, -1, -1):
            tile = grid.get((row, col))
            if tile is None or (row, col) in consumed:
                continue
            survivors.append(tile)
        target_row = grid.size - 1
        for tile in survivors:
            source = tile.position
            grid.set((target_row, col), tile)
            if source != (target_row, col):
                tile.is_falling = True
                moves.append(GravityMove(source=source, target=(target_row, col), tile_id=tile.id))
            target_row -= 1
        for row in range(target_row, -1, -1):
            grid.set((row, col), None)
    return moves


def spawn_tile(kind: str, pos: Position, kinds: Sequence[str]) -> Tile:
    if kind not in kinds:
        raise EngineInvariantError(f"Refusing to spawn tile of unknown kind {kind!r} at {pos}")
    return Tile(kind=kind, row=pos[0], col=pos[1], is_new=True)


def refill_empty(grid: Grid, kinds: Sequence[str], rng: random.Random) -> List[Position]:
    """Fill every empty cell with a fresh regular tile of uniformly random kind."""
    if not kinds:
        raise EngineInvariantError("No regular tile kinds available for refill")
    spawned: List[Position] = []
    for pos in grid.empty_positions():
        grid.set(pos, spawn_tile(rng.choice(list(kinds)), pos, kinds))
        spawned.append(pos)
    return spawned


def write_power_up_spawns(grid: Grid, spawns: Sequence[Tuple[Position, str]]) -> List[Position]:
    """Place freshly created power-up tiles, overwriting whatever sits in their cells."""
    written: List[Position] = []
    for pos, kind in spawns:
        grid.set(pos, Tile(kind=kind, row=pos[0], col=pos[1], is_new=True))
        written.append(pos)
    return written


def generate_initial_grid(
    size: int,
    kinds: Sequence[str],
    rng: random.Random,
    *,
    max_passes: int = MAX_INITIAL_BOARD_PASSES,
) -> Grid:
    """Random fill, then repeatedly re-roll matched cells until the grid is matchless.

    Replacement kinds avoid the four orthogonal neighbours' kinds and the cell's
    current kind where possible; when boxed in, any kind other than the current
    one is used.
    """
    choices = list(kinds)
    if len(choices) < 2:
        raise ValueError("Need at least two tile kinds to build a board")
    grid = Grid.create_empty(size)
    for row, col in grid.positions():
        grid.set((row, col), Tile(kind=rng.choice(choices), row=row, col=col))

    for _ in range(max_passes):
        matches = find_all_matches(grid)
        if not matches:
            return grid
        for match in matches:
            for pos in match:
                tile = grid.get(pos)
                used: Set[str] = {grid.get(n).kind for n in grid.neighbors4(pos)}
                available = [k for k in choices if k not in used and k != tile.kind]
                if not available:
                    available = [k for k in choices if k != tile.kind]
                tile.kind = rng.choice(available)
    raise RuntimeError("Unable to generate a board without matches")

