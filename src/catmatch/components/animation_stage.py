from dataclasses import dataclass, field
from typing import List, Tuple

from catmatch.components.board import Grid

@dataclass(slots=True)
class StageAnimation:
    """One queued board snapshot waiting to be shown for ``duration`` seconds."""
    kind: str
    grid: Grid
    duration: float
    depth: int = 0
    positions: List[Tuple[int, int]] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def progress(self) -> float:
        if self.duration <= 0.0:
            return 1.0
        return min(1.0, self.elapsed / self.duration)
