from dataclasses import dataclass, field
from typing import Dict, List, Optional

@dataclass(slots=True)
class TileTypes:
    """Canonical regular tile kinds stored on a single entity.

    This component lives alongside TileTypeRegistry (tag). ``types`` maps each
    regular kind to its default display colour; ``assets`` holds optional
    custom image references keyed by kind (regular or power-up). The engine
    never interprets either, it only hands them to whoever renders.
    """
    types: Dict[str, str]
    assets: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if len(self.types) < 5:
            raise ValueError(f"At least five regular tile kinds are required, got {len(self.types)}")

    def regular_kinds(self) -> List[str]:
        return list(self.types.keys())

    def is_regular(self, kind: Optional[str]) -> bool:
        return kind in self.types

    def color_for(self, kind: str) -> str:
        return self.types[kind]

    def set_custom_asset(self, kind: str, reference: Optional[str]) -> None:
        if reference:
            self.assets[kind] = reference
        else:
            self.assets.pop(kind, None)

    def asset_for(self, kind: str) -> Optional[str]:
        return self.assets.get(kind)
