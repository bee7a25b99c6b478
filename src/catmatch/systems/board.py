from typing import Optional, Tuple

from esper import World

from catmatch.components.selection import Selection
from catmatch.components.turn_state import CascadePhase
from catmatch.events.bus import (
    EventBus,
    EVENT_TILE_CLICK,
    EVENT_TILE_SELECTED,
    EVENT_TILE_DESELECTED,
    EVENT_TILE_SWAP_REQUEST,
    EVENT_TILE_SWAP_VALID,
    EVENT_TILE_SWAP_INVALID,
    EVENT_TILE_SWAP_REVERTED,
    EVENT_TILE_SWAP_FINALIZE,
    EVENT_MOVE_REJECTED,
)
from catmatch.systems.board_ops import get_board, is_adjacent
from catmatch.systems.turn_state_utils import can_accept_input, get_or_create_turn_state
from catmatch.utils.resources import get_singleton


class BoardSystem:
    """Owns tile selection and applies (or reverts) swaps on the live grid."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_TILE_CLICK, self.on_tile_click)
        self.event_bus.subscribe(EVENT_TILE_SWAP_VALID, self.on_swap_valid)
        self.event_bus.subscribe(EVENT_TILE_SWAP_INVALID, self.on_swap_invalid)

    @property
    def selected(self) -> Optional[Tuple[int, int]]:
        return get_singleton(self.world, Selection).position

    def on_tile_click(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        if not can_accept_input(self.world):
            return
        grid = get_board(self.world).grid
        pos = (row, col)
        if not grid.in_bounds(pos):
            return
        selection = get_singleton(self.world, Selection)
        prev = selection.position
        if prev is None:
            selection.position = pos
            self.event_bus.emit(EVENT_TILE_SELECTED, row=row, col=col)
        elif prev == pos:
            selection.position = None
            self.event_bus.emit(EVENT_TILE_DESELECTED, reason='toggle', prev_row=prev[0], prev_col=prev[1])
        elif is_adjacent(prev, pos):
            selection.position = None
            self.event_bus.emit(EVENT_TILE_SWAP_REQUEST, src=prev, dst=pos)
        else:
            # Change selection to new tile
            selection.position = pos
            self.event_bus.emit(EVENT_TILE_SELECTED, row=row, col=col)

    def on_swap_valid(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if not src or not dst:
            return
        get_board(self.world).grid.swap(src, dst)
        self.event_bus.emit(EVENT_TILE_SWAP_FINALIZE, src=src, dst=dst, power_up=bool(kwargs.get('power_up')))

    def on_swap_invalid(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        state = get_or_create_turn_state(self.world)
        state.phase = CascadePhase.IDLE
        if kwargs.get('reason') != 'no_match':
            return
        # Show the attempted swap, then put both tiles back where they were.
        grid = get_board(self.world).grid
        grid.swap(src, dst)
        attempted = grid.clone()
        grid.swap(src, dst)
        self.event_bus.emit(EVENT_TILE_SWAP_REVERTED, src=src, dst=dst, attempted=attempted, restored=grid.clone())
        self.event_bus.emit(EVENT_MOVE_REJECTED, src=src, dst=dst)
