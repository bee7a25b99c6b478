"""Level objective evaluation and the end-of-moves transition."""
from __future__ import annotations

import logging
from typing import Mapping, Optional

from esper import World

from catmatch.components.capture_tally import CaptureTally
from catmatch.components.game_state import GamePhase
from catmatch.components.level import CurrentLevel, Level, LevelCatalog, Objective, ObjectiveKind
from catmatch.components.move_counter import MoveCounter
from catmatch.components.score import Score
from catmatch.constants import THREE_STAR_RATIO, TWO_STAR_RATIO
from catmatch.events.bus import (
    EventBus,
    EVENT_CASCADE_COMPLETE,
    EVENT_GAME_OVER,
    EVENT_LEVEL_COMPLETED,
    EVENT_LEVEL_UNLOCKED,
)
from catmatch.utils.game_state import set_game_phase
from catmatch.utils.resources import get_singleton

logger = logging.getLogger(__name__)


def objective_satisfied(objective: Objective, score: int, tally: Mapping[str, int]) -> bool:
    if objective.kind is ObjectiveKind.SCORE:
        return score >= objective.target
    if objective.kind is ObjectiveKind.COLLECT_KIND:
        return tally.get(objective.target_kind, 0) >= objective.target
    return False


def is_level_complete(level: Level, score: int, tally: Mapping[str, int]) -> bool:
    """A level is complete only when every objective is satisfied."""
    return all(objective_satisfied(obj, score, tally) for obj in level.objectives)


def calculate_stars(level: Level, score: int, moves_left: int) -> int:
    """Rate a completed level from 1 to 3 against its Score objective.

    Levels without a Score objective always earn one star.
    """
    objective = level.score_objective()
    if objective is None:
        return 1
    if score >= objective.target * THREE_STAR_RATIO and moves_left > 0:
        return 3
    if score >= objective.target * TWO_STAR_RATIO:
        return 2
    return 1


class ObjectiveSystem:
    """Decides level completion or game over once the last move has settled."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_CASCADE_COMPLETE, self.on_cascade_complete)

    def _current_level(self) -> Optional[Level]:
        for _, current in self.world.get_component(CurrentLevel):
            return current.level
        return None

    def on_cascade_complete(self, sender, **kwargs):
        moves = get_singleton(self.world, MoveCounter)
        if moves.remaining > 0:
            return
        self.evaluate()

    def evaluate(self) -> bool:
        level = self._current_level()
        score = get_singleton(self.world, Score).value
        tally = get_singleton(self.world, CaptureTally).counts
        if level is not None and is_level_complete(level, score, tally):
            self._complete(level, score)
            return True
        logger.info("game over on level %s with %d points", level.id if level else None, score)
        set_game_phase(self.world, self.event_bus, GamePhase.GAME_OVER)
        self.event_bus.emit(EVENT_GAME_OVER, level_id=level.id if level else None, score=score)
        return False

    def _complete(self, level: Level, score: int) -> None:
        moves_left = get_singleton(self.world, MoveCounter).remaining
        stars = calculate_stars(level, score, moves_left)
        unlocked = None
        for _, catalog in self.world.get_component(LevelCatalog):
            unlocked = catalog.record_completion(level.id, stars)
        logger.info("level %d complete with %d points (%d stars)", level.id, score, stars)
        set_game_phase(self.world, self.event_bus, GamePhase.LEVEL_COMPLETE)
        self.event_bus.emit(EVENT_LEVEL_COMPLETED, level_id=level.id, score=score, stars=stars)
        if unlocked is not None:
            self.event_bus.emit(EVENT_LEVEL_UNLOCKED, level_id=unlocked.id)
