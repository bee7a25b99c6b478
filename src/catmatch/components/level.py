from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class ObjectiveKind(Enum):
    SCORE = "score"
    COLLECT_KIND = "collect_kind"


@dataclass(slots=True)
class Objective:
    kind: ObjectiveKind
    target: int
    target_kind: Optional[str] = None
    description: str = ""

    @classmethod
    def score(cls, target: int) -> Objective:
        return cls(ObjectiveKind.SCORE, target, description=f"Score {target} points")

    @classmethod
    def collect(cls, target_kind: str, target: int) -> Objective:
        return cls(
            ObjectiveKind.COLLECT_KIND,
            target,
            target_kind=target_kind,
            description=f"Collect {target} {target_kind} tiles",
        )


@dataclass(slots=True)
class Level:
    id: int
    moves: int
    objectives: List[Objective] = field(default_factory=list)
    name: str = ""
    unlocked: bool = False
    completed: bool = False
    stars: int = 0

    def score_objective(self) -> Optional[Objective]:
        for objective in self.objectives:
            if objective.kind is ObjectiveKind.SCORE:
                return objective
        return None


@dataclass(slots=True)
class CurrentLevel:
    """Reference to the level the session is playing."""
    level: Level


@dataclass(slots=True)
class LevelCatalog:
    """Level list as handed over by the external store, keyed by level id."""
    levels: List[Level] = field(default_factory=list)

    def find(self, level_id: int) -> Optional[Level]:
        for level in self.levels:
            if level.id == level_id:
                return level
        return None

    def record_completion(self, level_id: int, stars: int) -> Optional[Level]:
        """Mark level completed, keep its best star rating and unlock the next id.

        Returns the newly unlocked level, if any.
        """
        level = self.find(level_id)
        if level is None:
            return None
        level.completed = True
        level.stars = max(level.stars, stars)
        following = self.find(level_id + 1)
        if following is not None and not following.unlocked:
            following.unlocked = True
            return following
        return None
