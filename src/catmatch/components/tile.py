import itertools
from dataclasses import dataclass, field, replace
from typing import Tuple

# Power-up variants; they never come out of a normal refill.
AREA_CLEAR = 'area_clear'
KIND_CLEAR = 'kind_clear'
POWER_UP_KINDS = frozenset({AREA_CLEAR, KIND_CLEAR})

_tile_ids = itertools.count(1)


def next_tile_id() -> str:
    return f"tile-{next(_tile_ids)}"


def is_power_up_kind(kind: str | None) -> bool:
    return kind in POWER_UP_KINDS


@dataclass(slots=True)
class Tile:
    """A single board cell occupant.

    ``id`` survives swaps and falls and is only regenerated when a new tile is
    spawned into the cell. The ``is_*`` flags are presentation hints written by
    the cascade engine so a renderer can sequence its animations.
    """
    kind: str
    row: int
    col: int
    id: str = field(default_factory=next_tile_id)
    is_matched: bool = False
    is_falling: bool = False
    is_new: bool = False

    @property
    def position(self) -> Tuple[int, int]:
        return (self.row, self.col)

    @property
    def is_power_up(self) -> bool:
        return is_power_up_kind(self.kind)

    def copy(self) -> "Tile":
        return replace(self)

    def clear_flags(self) -> None:
        self.is_matched = False
        self.is_falling = False
        self.is_new = False
