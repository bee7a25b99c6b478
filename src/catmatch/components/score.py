from dataclasses import dataclass

@dataclass(slots=True)
class Score:
    value: int = 0

    def add(self, points: int) -> int:
        if points > 0:
            self.value += points
        return self.value
