"""Game state resource describing the session's discrete phase."""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class GamePhase(Enum):
    """High-level phases consumed by navigation/UI."""
    MENU = auto()
    PLAYING = auto()
    LEVEL_COMPLETE = auto()
    GAME_OVER = auto()
    FAULTED = auto()


@dataclass
class GameState:
    """Singleton component storing the current phase and any session fault."""
    phase: GamePhase = GamePhase.MENU
    fault: Optional[str] = None
