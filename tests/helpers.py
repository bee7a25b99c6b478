from __future__ import annotations

import random
from collections import deque
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from catmatch.components.board import Grid
from catmatch.components.level import Level, Objective
from catmatch.components.tile import AREA_CLEAR, KIND_CLEAR
from catmatch.events.bus import EventBus
from catmatch.session import GameSession
from catmatch.systems.match import validate_swap

Position = Tuple[int, int]

# One letter per kind keeps scripted boards readable.
LETTERS: Dict[str, str] = {
    'B': 'blue',
    'R': 'red',
    'G': 'green',
    'Y': 'yellow',
    'P': 'purple',
    'O': 'orange',
    'K': 'pink',
    'C': 'cyan',
    'A': AREA_CLEAR,
    'X': KIND_CLEAR,
}
_CYCLE = 'BRGYPOKC'


def base_rows(size: int = 8) -> List[str]:
    """Matchless board: neighbours in a row differ by one kind, in a column by three."""
    return [''.join(_CYCLE[(3 * r + c) % len(_CYCLE)] for c in range(size)) for r in range(size)]


def with_cells(rows: Sequence[str], cells: Mapping[Position, str]) -> List[str]:
    table = [list(row) for row in rows]
    for (r, c), letter in cells.items():
        table[r][c] = letter
    return [''.join(row) for row in table]


def grid_from_rows(rows: Sequence[str]) -> Grid:
    return Grid.from_kinds([[LETTERS[ch] for ch in row] for row in rows])


def default_levels() -> List[Level]:
    return [
        Level(id=1, moves=20, objectives=[Objective.score(1000)], unlocked=True),
        Level(id=2, moves=20, objectives=[Objective.score(1500)]),
    ]


def start_session(
    rows: Optional[Sequence[str]] = None,
    *,
    levels: Optional[Sequence[Level]] = None,
    level_id: int = 1,
    seed: int = 7,
    rng: Optional[random.Random] = None,
    **kwargs,
) -> GameSession:
    """Build a seeded session and start ``level_id`` on the scripted board, if any."""
    session = GameSession(
        levels=list(levels) if levels is not None else default_levels(),
        rng=rng or random.Random(seed),
        **kwargs,
    )
    grid = grid_from_rows(rows) if rows is not None else None
    session.initialize_game(level_id, grid=grid)
    return session


def valid_swaps(grid: Grid) -> List[Tuple[Position, Position]]:
    found = []
    for row, col in grid.positions():
        for dst in ((row, col + 1), (row + 1, col)):
            if grid.in_bounds(dst) and validate_swap(grid, (row, col), dst).accepted:
                found.append(((row, col), dst))
    return found


class EventRecorder:
    """Collects payloads of the named events in emission order."""

    def __init__(self, bus: EventBus, *names: str):
        self.events: List[Tuple[str, dict]] = []
        for name in names:
            bus.subscribe(name, self._handler_for(name))

    def _handler_for(self, name: str):
        def handler(sender, **kwargs):
            self.events.append((name, kwargs))
        return handler

    def of(self, name: str) -> List[dict]:
        return [payload for event, payload in self.events if event == name]

    def names(self) -> List[str]:
        return [event for event, _ in self.events]


class ScriptedRandom(random.Random):
    """Seeded generator whose ``choice`` returns queued values first."""

    def __init__(self, seed: int = 0):
        super().__init__(seed)
        self.script = deque()

    def choice(self, seq):
        if self.script:
            return self.script.popleft()
        return super().choice(seq)
