from dataclasses import dataclass, field
from typing import Dict

@dataclass(slots=True)
class CaptureTally:
    """Per-kind count of tiles removed by matches or power-ups.

    counts only ever grow within a session; a restart replaces the component.
    """
    counts: Dict[str, int] = field(default_factory=dict)

    def add(self, kind: str, amount: int = 1):
        if amount <= 0:
            return
        self.counts[kind] = self.counts.get(kind, 0) + amount

    def get(self, kind: str) -> int:
        return self.counts.get(kind, 0)
