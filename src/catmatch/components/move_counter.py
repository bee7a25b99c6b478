from dataclasses import dataclass

@dataclass(slots=True)
class MoveCounter:
    """Moves left in the current level; only accepted player swaps consume one."""
    remaining: int = 0

    def consume(self) -> int:
        if self.remaining > 0:
            self.remaining -= 1
        return self.remaining
