import logging
from typing import Dict, Iterable, List, Sequence, Set, Tuple

from esper import World

from catmatch.components.board import Grid
from catmatch.components.capture_tally import CaptureTally
from catmatch.components.move_counter import MoveCounter
from catmatch.components.score import Score
from catmatch.components.turn_state import CascadePhase
from catmatch.constants import LARGE_MATCH_POINTS_PER_TILE, MATCH_POINTS, MAX_CASCADE_ITERATIONS
from catmatch.errors import CascadeLimitError
from catmatch.events.bus import (
    EventBus,
    EVENT_TILE_SWAP_FINALIZE,
    EVENT_MOVES_CHANGED,
    EVENT_MATCH_FOUND,
    EVENT_MATCH_CLEARED,
    EVENT_SCORE_CHANGED,
    EVENT_CAPTURE_TALLY_CHANGED,
    EVENT_POWER_UP_SPAWNED,
    EVENT_POWER_UP_ACTIVATED,
    EVENT_GRAVITY_APPLIED,
    EVENT_REFILL_COMPLETED,
    EVENT_CASCADE_STAGE,
    EVENT_CASCADE_STEP,
    EVENT_CASCADE_COMPLETE,
)
from catmatch.systems.board_ops import (
    apply_gravity,
    find_all_matches,
    get_board,
    get_tile_registry,
    mark_consumed,
    refill_empty,
    write_power_up_spawns,
)
from catmatch.systems.power_ups import classify_match, resolve_power_up
from catmatch.systems.turn_state_utils import get_or_create_turn_state
from catmatch.utils.resources import get_singleton

logger = logging.getLogger(__name__)

Position = Tuple[int, int]

# Stage names carried by EVENT_CASCADE_STAGE, in the order one step emits them.
STAGE_PRE_MATCH = 'pre_match'
STAGE_MATCHED = 'matched'
STAGE_GRAVITY = 'gravity'
STAGE_REFILL = 'refill'
STAGE_SPAWN = 'spawn'


def points_for_length(length: int) -> int:
    return MATCH_POINTS.get(length, length * LARGE_MATCH_POINTS_PER_TILE)


class MatchResolutionSystem:
    """Cascade engine: resolves a committed swap until the grid is matchless.

    Each step detects matches, scores them, marks the consumed cells, drops the
    survivors, refills from the top and finally writes any power-ups the step
    earned. Tiles lying in both a row and a column run are scored and tallied
    once per run.
    """

    def __init__(self, world: World, event_bus: EventBus, *, max_iterations: int = MAX_CASCADE_ITERATIONS):
        self.world = world
        self.event_bus = event_bus
        self.max_iterations = max_iterations
        self.event_bus.subscribe(EVENT_TILE_SWAP_FINALIZE, self.on_swap_finalize)

    @property
    def grid(self) -> Grid:
        return get_board(self.world).grid

    def on_swap_finalize(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        power_up = bool(kwargs.get('power_up'))
        state = get_or_create_turn_state(self.world)
        state.action_source = 'power_up' if power_up else 'swap'
        state.cascade_depth = 0
        state.phase = CascadePhase.RESOLVING
        self._consume_move()
        if power_up:
            self.activate_power_up(src, dst)
        self.resolve()

    def resolve(self) -> int:
        """Run the resolving loop to a fixed point and return the cascade depth."""
        state = get_or_create_turn_state(self.world)
        state.phase = CascadePhase.RESOLVING
        grid = self.grid
        # Counted apart from cascade_depth, which a power-up activation also advances.
        iterations = 0
        while True:
            matches = find_all_matches(grid)
            if not matches:
                break
            if iterations >= self.max_iterations:
                raise CascadeLimitError(
                    f"Cascade still unresolved after {self.max_iterations} iterations"
                )
            iterations += 1
            state.cascade_depth += 1
            self._resolve_matches(matches, state.cascade_depth)
        grid.clear_flags()
        grid.check_invariants()
        state.phase = CascadePhase.SETTLED
        logger.debug("cascade settled at depth %d (%s)", state.cascade_depth, state.action_source)
        self.event_bus.emit(EVENT_CASCADE_COMPLETE, depth=state.cascade_depth)
        if get_singleton(self.world, MoveCounter).remaining > 0:
            state.phase = CascadePhase.IDLE
        return state.cascade_depth

    def activate_power_up(self, src: Position, dst: Position) -> None:
        """Fire the power-up involved in a committed swap.

        The tile that was dragged wins when both ends are power-ups. The trigger
        is the power-up's cell after the swap; the other tile supplies the kind
        a KIND_CLEAR targets.
        """
        grid = self.grid
        if grid.get(dst).is_power_up:
            trigger, partner = dst, src
        elif grid.get(src).is_power_up:
            trigger, partner = src, dst
        else:
            return
        kind = grid.get(trigger).kind
        target_kind = grid.get(partner).kind
        registry = get_tile_registry(self.world)
        effect = resolve_power_up(
            grid,
            trigger,
            kind,
            target_kind=target_kind,
            regular_kinds=registry.regular_kinds(),
        )
        self.event_bus.emit(
            EVENT_POWER_UP_ACTIVATED,
            position=trigger,
            kind=kind,
            target_kind=effect.target_kind,
            positions=list(effect.positions),
        )
        if not effect.clears:
            # Nothing to clear; the regular resolving loop still runs afterwards.
            return
        state = get_or_create_turn_state(self.world)
        state.cascade_depth += 1
        depth = state.cascade_depth
        grid.clear_flags()
        self._emit_stage(STAGE_PRE_MATCH, depth, effect.positions)
        consumed = set(effect.positions)
        typed = [(r, c, grid.get((r, c)).kind) for r, c in effect.positions]
        mark_consumed(grid, consumed)
        self.event_bus.emit(EVENT_CASCADE_STEP, depth=depth, positions=sorted(consumed))
        self._award(
            effect.points,
            [kind_ for r, c, kind_ in typed if registry.is_regular(kind_)],
            source=kind,
        )
        self._emit_stage(STAGE_MATCHED, depth, effect.positions)
        self.event_bus.emit(
            EVENT_MATCH_CLEARED, positions=sorted(consumed), types=typed, points=effect.points, source=kind
        )
        self._collapse(consumed, depth, [])

    def _resolve_matches(self, matches: List[List[Position]], depth: int) -> None:
        grid = self.grid
        grid.clear_flags()
        consumed: Set[Position] = {pos for match in matches for pos in match}
        positions = sorted(consumed)
        self._emit_stage(STAGE_PRE_MATCH, depth, positions)

        spawns: List[Tuple[Position, str]] = []
        points = 0
        captured: List[str] = []
        typed: List[Tuple[int, int, str]] = []
        for match in matches:
            special = classify_match(match)
            if special is not None:
                spawns.append(special)
            points += points_for_length(len(match))
            for pos in match:
                kind = grid.get(pos).kind
                captured.append(kind)
                typed.append((pos[0], pos[1], kind))
        mark_consumed(grid, consumed)
        logger.debug("cascade step %d: %d matches, %d points", depth, len(matches), points)

        self.event_bus.emit(EVENT_CASCADE_STEP, depth=depth, positions=positions)
        self.event_bus.emit(EVENT_MATCH_FOUND, matches=[list(m) for m in matches], positions=positions, depth=depth)
        self._award(points, captured, source='match')
        self._emit_stage(STAGE_MATCHED, depth, positions)
        self.event_bus.emit(EVENT_MATCH_CLEARED, positions=positions, types=typed, points=points, source='match')
        self._collapse(consumed, depth, spawns)

    def _collapse(self, consumed: Set[Position], depth: int, spawns: Sequence[Tuple[Position, str]]) -> None:
        grid = self.grid
        moves = apply_gravity(grid, consumed)
        self.event_bus.emit(EVENT_GRAVITY_APPLIED, moves=moves)
        self._emit_stage(STAGE_GRAVITY, depth, [move.target for move in moves])

        registry = get_tile_registry(self.world)
        new_tiles = refill_empty(grid, registry.regular_kinds(), self.world.random)
        self.event_bus.emit(EVENT_REFILL_COMPLETED, new_tiles=new_tiles)
        self._emit_stage(STAGE_REFILL, depth, new_tiles)

        if spawns:
            written = write_power_up_spawns(grid, spawns)
            for pos, kind in spawns:
                self.event_bus.emit(EVENT_POWER_UP_SPAWNED, position=pos, kind=kind)
            self._emit_stage(STAGE_SPAWN, depth, written)

    def _award(self, points: int, captured_kinds: Iterable[str], *, source: str) -> None:
        score = get_singleton(self.world, Score)
        if points:
            score.add(points)
            self.event_bus.emit(EVENT_SCORE_CHANGED, score=score.value, delta=points, source=source)
        tally = get_singleton(self.world, CaptureTally)
        delta: Dict[str, int] = {}
        for kind in captured_kinds:
            tally.add(kind, 1)
            delta[kind] = delta.get(kind, 0) + 1
        if delta:
            self.event_bus.emit(EVENT_CAPTURE_TALLY_CHANGED, counts=dict(tally.counts), delta=delta)

    def _consume_move(self) -> None:
        moves = get_singleton(self.world, MoveCounter)
        before = moves.remaining
        remaining = moves.consume()
        self.event_bus.emit(EVENT_MOVES_CHANGED, remaining=remaining, delta=remaining - before)

    def _emit_stage(self, stage: str, depth: int, positions: Iterable[Position]) -> None:
        self.event_bus.emit(
            EVENT_CASCADE_STAGE,
            stage=stage,
            depth=depth,
            grid=self.grid.clone(),
            positions=list(positions),
        )
