from enum import Enum, auto
from typing import Tuple

from esper import World

from catmatch.components.board import Grid
from catmatch.components.turn_state import CascadePhase
from catmatch.events.bus import (
    EventBus,
    EVENT_TILE_SWAP_REQUEST,
    EVENT_TILE_SWAP_VALID,
    EVENT_TILE_SWAP_INVALID,
)
from catmatch.systems.board_ops import get_board, is_adjacent, predict_swap_creates_match
from catmatch.systems.turn_state_utils import get_or_create_turn_state


class SwapVerdict(Enum):
    NOT_ADJACENT = auto()
    NO_MATCH = auto()
    MATCH = auto()
    POWER_UP = auto()

    @property
    def accepted(self) -> bool:
        return self in (SwapVerdict.MATCH, SwapVerdict.POWER_UP)


def validate_swap(grid: Grid, src: Tuple[int, int], dst: Tuple[int, int]) -> SwapVerdict:
    """Decide whether swapping src/dst is a legal move.

    A power-up on either end is always accepted; otherwise the swapped grid
    must contain at least one match.
    """
    if not (grid.in_bounds(src) and grid.in_bounds(dst)) or not is_adjacent(src, dst):
        return SwapVerdict.NOT_ADJACENT
    if grid.get(src).is_power_up or grid.get(dst).is_power_up:
        return SwapVerdict.POWER_UP
    if predict_swap_creates_match(grid, src, dst):
        return SwapVerdict.MATCH
    return SwapVerdict.NO_MATCH


class MatchSystem:
    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        event_bus.subscribe(EVENT_TILE_SWAP_REQUEST, self.on_swap_request)

    def on_swap_request(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if not src or not dst:
            return
        src, dst = tuple(src), tuple(dst)
        verdict = validate_swap(get_board(self.world).grid, src, dst)
        state = get_or_create_turn_state(self.world)
        if verdict.accepted:
            state.phase = CascadePhase.SWAPPING
            self.event_bus.emit(
                EVENT_TILE_SWAP_VALID,
                src=src,
                dst=dst,
                power_up=verdict is SwapVerdict.POWER_UP,
            )
        else:
            reason = 'not_adjacent' if verdict is SwapVerdict.NOT_ADJACENT else 'no_match'
            self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=dst, reason=reason)
