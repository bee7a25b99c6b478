"""Session controller: the verbs a UI or test harness drives the engine with.

Builds one ECS world and event bus per session and wires the systems the same
way the game window does, minus rendering and raw input handling.
"""
from __future__ import annotations

import logging
import random
from typing import Dict, Optional, Sequence, Tuple

from catmatch.components.board import Grid
from catmatch.components.capture_tally import CaptureTally
from catmatch.components.game_state import GamePhase
from catmatch.components.level import CurrentLevel, Level, LevelCatalog
from catmatch.components.move_counter import MoveCounter
from catmatch.components.score import Score
from catmatch.components.selection import Selection
from catmatch.components.tile_types import TileTypes
from catmatch.components.turn_state import TurnState
from catmatch.constants import GRID_SIZE, MAX_CASCADE_ITERATIONS
from catmatch.errors import EngineInvariantError, LevelUnavailableError
from catmatch.events.bus import (
    EventBus,
    EVENT_LEVEL_STARTED,
    EVENT_SESSION_FAULTED,
    EVENT_TICK,
    EVENT_TILE_CLICK,
    EVENT_TILE_SWAP_REQUEST,
)
from catmatch.systems.animation import AnimationSystem
from catmatch.systems.board import BoardSystem
from catmatch.systems.board_ops import generate_initial_grid, get_board, get_tile_registry
from catmatch.systems.match import MatchSystem
from catmatch.systems.match_resolution import MatchResolutionSystem
from catmatch.systems.objectives import ObjectiveSystem
from catmatch.systems.turn_state_utils import can_accept_input, get_or_create_turn_state
from catmatch.utils.game_state import get_game_state, set_game_phase
from catmatch.utils.resources import get_singleton, replace_singleton
from catmatch.world import create_world

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


class GameSession:
    """Owns one game's mutable state and exposes the player verbs.

    ``animation_duration`` defaults to 0 so the engine runs headless; pass
    ``constants.ANIMATION_DURATION`` and drive :meth:`tick` to pace stages for a
    renderer. Internal invariant failures fault this session only: the error
    is logged, ``fault`` records it and further input is ignored until the
    level is (re)started.
    """

    def __init__(
        self,
        *,
        levels: Sequence[Level] | None = None,
        kinds: Dict[str, str] | None = None,
        grid_size: int = GRID_SIZE,
        rng: random.Random | None = None,
        animation_duration: float = 0.0,
        max_cascade_iterations: int = MAX_CASCADE_ITERATIONS,
    ):
        self.event_bus = EventBus()
        self.world = create_world(
            self.event_bus,
            GamePhase.MENU,
            grid_size=grid_size,
            kinds=kinds,
            levels=levels,
            rng=rng,
        )
        self.grid_size = grid_size
        self.board_system = BoardSystem(self.world, self.event_bus)
        self.match_system = MatchSystem(self.world, self.event_bus)
        self.match_resolution_system = MatchResolutionSystem(
            self.world, self.event_bus, max_iterations=max_cascade_iterations
        )
        self.objective_system = ObjectiveSystem(self.world, self.event_bus)
        self.animation_system = AnimationSystem(self.world, self.event_bus, duration=animation_duration)

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    def initialize_game(self, level_id: int, *, grid: Grid | None = None) -> None:
        """Start ``level_id`` on a fresh matchless board.

        A copy of ``grid`` replaces the generated board, for scripted scenarios;
        its side must equal the session grid size (ValueError otherwise). Raises
        LevelUnavailableError, leaving the previous session untouched, when the
        level is unknown or locked.
        """
        level = self.catalog.find(level_id)
        if level is None:
            raise LevelUnavailableError(f"Level {level_id} does not exist")
        if not level.unlocked:
            raise LevelUnavailableError(f"Level {level_id} is locked")
        if grid is None:
            grid = generate_initial_grid(self.grid_size, self.tile_types.regular_kinds(), self.world.random)
        else:
            if grid.size != self.grid_size:
                raise ValueError(f"Scripted grid is {grid.size}x{grid.size}, session expects {self.grid_size}")
            grid.check_invariants()
            grid = grid.clone()

        self.animation_system.reset()
        get_board(self.world).grid = grid
        replace_singleton(self.world, Score())
        replace_singleton(self.world, MoveCounter(remaining=level.moves))
        replace_singleton(self.world, CaptureTally())
        replace_singleton(self.world, Selection())
        replace_singleton(self.world, TurnState())
        replace_singleton(self.world, CurrentLevel(level=level))
        get_game_state(self.world).fault = None
        set_game_phase(self.world, self.event_bus, GamePhase.PLAYING)
        logger.info("level %d started with %d moves", level.id, level.moves)
        self.event_bus.emit(EVENT_LEVEL_STARTED, level_id=level.id, moves=level.moves)

    def restart_level(self) -> None:
        level = self.current_level
        if level is None:
            set_game_phase(self.world, self.event_bus, GamePhase.MENU)
            return
        self.initialize_game(level.id)

    def select_tile(self, position: Position) -> None:
        """Select, deselect, or swap with the previously selected tile."""
        row, col = position
        self._dispatch(EVENT_TILE_CLICK, row=row, col=col)

    def swap(self, src: Position, dst: Position) -> None:
        """Attempt a swap directly, bypassing the selection step."""
        if not can_accept_input(self.world):
            return
        get_singleton(self.world, Selection).position = None
        self._dispatch(EVENT_TILE_SWAP_REQUEST, src=tuple(src), dst=tuple(dst))

    def activate_power_up(self, position: Position, target: Position) -> None:
        """Swap the power-up at ``position`` into ``target`` to fire it."""
        grid = get_board(self.world).grid
        if not grid.in_bounds(position):
            return
        tile = grid.get(position)
        if tile is None or not tile.is_power_up:
            return
        self.swap(position, target)

    def tick(self, dt: float) -> None:
        self._dispatch(EVENT_TICK, dt=dt)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def grid(self) -> Grid:
        return get_board(self.world).grid.clone()

    @property
    def score(self) -> int:
        return get_singleton(self.world, Score).value

    @property
    def moves_left(self) -> int:
        return get_singleton(self.world, MoveCounter).remaining

    @property
    def captures(self) -> Dict[str, int]:
        return dict(get_singleton(self.world, CaptureTally).counts)

    @property
    def selected(self) -> Optional[Position]:
        return get_singleton(self.world, Selection).position

    @property
    def busy(self) -> bool:
        return get_or_create_turn_state(self.world).busy

    @property
    def phase(self) -> GamePhase:
        return get_game_state(self.world).phase

    @property
    def fault(self) -> Optional[str]:
        return get_game_state(self.world).fault

    @property
    def current_level(self) -> Optional[Level]:
        for _, current in self.world.get_component(CurrentLevel):
            return current.level
        return None

    @property
    def catalog(self) -> LevelCatalog:
        return get_singleton(self.world, LevelCatalog)

    @property
    def tile_types(self) -> TileTypes:
        return get_tile_registry(self.world)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _dispatch(self, name: str, **payload) -> None:
        if self.phase is GamePhase.FAULTED:
            return
        try:
            self.event_bus.emit(name, **payload)
        except EngineInvariantError as exc:
            self._fault(exc)

    def _fault(self, exc: EngineInvariantError) -> None:
        logger.error("session faulted: %s", exc, exc_info=exc)
        get_game_state(self.world).fault = str(exc)
        set_game_phase(self.world, self.event_bus, GamePhase.FAULTED)
        self.event_bus.emit(EVENT_SESSION_FAULTED, error=str(exc))
