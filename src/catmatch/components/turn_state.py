from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class CascadePhase(Enum):
    IDLE = auto()
    SWAPPING = auto()
    RESOLVING = auto()
    SETTLED = auto()


@dataclass(slots=True)
class TurnState:
    """Tracks the in-flight player action shared across systems.

    ``busy`` gates new input: it holds while a cascade resolves and while the
    animation system still has stage frames queued for playback.
    """

    phase: CascadePhase = CascadePhase.IDLE
    action_source: Optional[str] = None
    cascade_depth: int = 0
    pending_animations: int = 0

    @property
    def cascade_active(self) -> bool:
        return self.phase in (CascadePhase.SWAPPING, CascadePhase.RESOLVING)

    @property
    def busy(self) -> bool:
        return self.cascade_active or self.pending_animations > 0
