import random
from typing import Dict, Sequence

from esper import World

from catmatch.components.board import Board
from catmatch.components.capture_tally import CaptureTally
from catmatch.components.game_state import GamePhase, GameState
from catmatch.components.level import Level, LevelCatalog
from catmatch.components.move_counter import MoveCounter
from catmatch.components.score import Score
from catmatch.components.selection import Selection
from catmatch.components.tile_type_registry import TileTypeRegistry
from catmatch.components.tile_types import TileTypes
from catmatch.components.turn_state import TurnState
from catmatch.constants import DEFAULT_TILE_KINDS, GRID_SIZE
from catmatch.events.bus import EventBus
from catmatch.factories.levels import generate_initial_levels
from catmatch.systems.board_ops import generate_initial_grid


def create_world(
    event_bus: EventBus,
    initial_phase: GamePhase = GamePhase.MENU,
    *,
    grid_size: int = GRID_SIZE,
    kinds: Dict[str, str] | None = None,
    levels: Sequence[Level] | None = None,
    rng: random.Random | None = None,
) -> World:
    """Create the world holding one session's state.

    Every session-wide resource is a component on a long-lived entity so that
    systems look them up instead of sharing module globals.
    """
    world = World()
    setattr(world, "random", rng or random.Random())

    world.create_entity(
        GameState(phase=initial_phase),
        TurnState(),
        Score(),
        MoveCounter(),
        CaptureTally(),
        Selection(),
    )

    # Single registry entity with the canonical regular kinds
    registry = TileTypes(types=dict(kinds or DEFAULT_TILE_KINDS))
    world.create_entity(TileTypeRegistry(), registry)

    if levels is None:
        levels = generate_initial_levels(registry.regular_kinds(), rng=world.random)
    world.create_entity(LevelCatalog(levels=list(levels)))

    grid = generate_initial_grid(grid_size, registry.regular_kinds(), world.random)
    world.create_entity(Board(grid=grid))
    return world
