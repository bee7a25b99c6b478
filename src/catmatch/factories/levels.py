from __future__ import annotations

import math
import random
from typing import List, Sequence

from catmatch.components.level import Level, Objective
from catmatch.constants import (
    COLLECT_BASE_TARGET,
    COLLECT_OBJECTIVE_EVERY,
    COLLECT_TARGET_STEP,
    LEVEL_BASE_MOVES,
    LEVEL_BASE_SCORE,
    LEVEL_COUNT,
    LEVEL_MOVES_GROWTH,
    LEVEL_SCORE_STEP,
)


def create_level(index: int, kinds: Sequence[str], rng: random.Random) -> Level:
    """Build level ``index`` (1-based) of the default progression."""
    # Halves round up.
    moves = math.floor(LEVEL_BASE_MOVES + index * LEVEL_MOVES_GROWTH + 0.5)
    objectives = [Objective.score(LEVEL_BASE_SCORE + index * LEVEL_SCORE_STEP)]
    if index % COLLECT_OBJECTIVE_EVERY == 0:
        target = COLLECT_BASE_TARGET + (index // COLLECT_OBJECTIVE_EVERY) * COLLECT_TARGET_STEP
        objectives.append(Objective.collect(rng.choice(list(kinds)), target))
    return Level(
        id=index,
        name=f"Level {index}",
        moves=moves,
        objectives=objectives,
        unlocked=index == 1,
    )


def generate_initial_levels(
    kinds: Sequence[str],
    *,
    count: int = LEVEL_COUNT,
    rng: random.Random | None = None,
) -> List[Level]:
    rng = rng or random.Random()
    return [create_level(i, kinds, rng) for i in range(1, count + 1)]
