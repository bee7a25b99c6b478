"""Power-up creation rules and activation effects."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Collection, List, Optional, Sequence, Tuple

from catmatch.components.board import Grid
from catmatch.components.tile import AREA_CLEAR, KIND_CLEAR
from catmatch.constants import (
    AREA_CLEAR_POINTS_PER_TILE,
    AREA_CLEAR_RADIUS,
    KIND_CLEAR_POINTS_PER_TILE,
)

Position = Tuple[int, int]


def classify_match(match: Sequence[Position]) -> Optional[Tuple[Position, str]]:
    """Return (spawn position, power-up kind) for a run, or None for a plain triple.

    Shape is not considered: every run of five or more yields KIND_CLEAR, so an
    L or T pattern only counts through its straight component runs.
    """
    length = len(match)
    if length == 4:
        return match[length // 2], AREA_CLEAR
    if length >= 5:
        return match[length // 2], KIND_CLEAR
    return None


@dataclass(slots=True)
class PowerUpEffect:
    kind: str
    trigger: Position
    target_kind: Optional[str] = None
    positions: List[Position] = field(default_factory=list)
    points: int = 0

    @property
    def clears(self) -> bool:
        return bool(self.positions)


def area_clear_positions(grid: Grid, trigger: Position, radius: int = AREA_CLEAR_RADIUS) -> List[Position]:
    row, col = trigger
    return [
        (r, c)
        for r in range(max(0, row - radius), min(grid.size - 1, row + radius) + 1)
        for c in range(max(0, col - radius), min(grid.size - 1, col + radius) + 1)
    ]


def kind_clear_positions(grid: Grid, target_kind: str) -> List[Position]:
    return [
        tile.position
        for tile in grid.tiles()
        if not tile.is_power_up and tile.kind == target_kind
    ]


def resolve_power_up(
    grid: Grid,
    trigger: Position,
    kind: str,
    *,
    target_kind: Optional[str],
    regular_kinds: Collection[str],
) -> PowerUpEffect:
    """Compute which cells an activation consumes and the bonus it awards.

    AREA_CLEAR consumes the block around ``trigger`` clamped to the grid.
    KIND_CLEAR consumes every regular tile of ``target_kind`` plus the trigger
    cell; when ``target_kind`` is not a regular kind it clears nothing and the
    caller falls back to a plain cascade pass.
    """
    if kind == AREA_CLEAR:
        positions = area_clear_positions(grid, trigger)
        return PowerUpEffect(
            kind=kind,
            trigger=trigger,
            positions=positions,
            points=AREA_CLEAR_POINTS_PER_TILE * len(positions),
        )
    if kind == KIND_CLEAR:
        if target_kind not in regular_kinds:
            return PowerUpEffect(kind=kind, trigger=trigger, target_kind=target_kind)
        positions = kind_clear_positions(grid, target_kind)
        points = KIND_CLEAR_POINTS_PER_TILE * len(positions)
        if trigger not in positions:
            positions.append(trigger)
        return PowerUpEffect(
            kind=kind,
            trigger=trigger,
            target_kind=target_kind,
            positions=sorted(positions),
            points=points,
        )
    raise ValueError(f"Unknown power-up kind {kind!r}")
