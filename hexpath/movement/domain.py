"""
Domena ruchu jednostki i rejestr typów jednostek.

Domena decyduje, które tabele kosztów obowiązują:
    LAND        - tylko ląd (elewacja >= poziom morza)
    NAVAL       - tylko woda (pod poziomem morza, ocean, wybrzeże)
    AMPHIBIOUS  - ląd i woda, wybór tańszej opcji na każdej krawędzi

MovementDomain to zamknięty zbiór - każde miejsce dispatchu (rejestr
strategii w costs.py) musi pokrywać wszystkie trzy wartości.

Rejestr typów jednostek tłumaczy "cavalry" -> LAND itd. na podstawie
unit_types.yaml. Sama domena nigdy nie jest zapisywana w komórce -
jest parametrem każdego zapytania.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.config_loader import ConfigLoader


class MovementDomain(Enum):
    """Klasa mobilności jednostki."""
    LAND = "land"
    NAVAL = "naval"
    AMPHIBIOUS = "amphibious"

    @property
    def can_traverse_land(self) -> bool:
        return self in (MovementDomain.LAND, MovementDomain.AMPHIBIOUS)

    @property
    def can_traverse_water(self) -> bool:
        return self in (MovementDomain.NAVAL, MovementDomain.AMPHIBIOUS)

    @classmethod
    def parse(cls, value: str) -> MovementDomain:
        """
        Parsuje nazwę domeny z YAML.

        Raises:
            ValueError: Jeśli nieznana domena
        """
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(
                f"Unknown movement domain: {value}. "
                f"Available: {[d.value for d in cls]}"
            ) from None


@dataclass(frozen=True)
class UnitTypeInfo:
    """
    Statyczne dane typu jednostki istotne dla ruchu.

    Attributes:
        id (str): Klucz typu (np. "galley")
        name (str): Nazwa wyświetlana
        domain (MovementDomain): Domena ruchu
        movement (float): Punkty ruchu na turę (budżet dla get_reachable_cells)
    """
    id: str
    name: str
    domain: MovementDomain
    movement: float


class UnitTypeRegistry:
    """
    Rejestr typ jednostki -> domena ruchu.

    Example:
        >>> registry = UnitTypeRegistry.from_config()
        >>> registry.get_domain("galley")
        <MovementDomain.NAVAL: 'naval'>
        >>> registry.resolve_domain("dragon") is None
        True
    """

    def __init__(self, unit_types: Optional[Dict[str, UnitTypeInfo]] = None):
        self._types: Dict[str, UnitTypeInfo] = dict(unit_types or {})

    @classmethod
    def from_config(cls, loader: Optional["ConfigLoader"] = None) -> UnitTypeRegistry:
        """
        Buduje rejestr z unit_types.yaml (z uzupełnionymi defaults).

        Raises:
            ValueError: Jeśli któryś typ ma nieznaną domenę
        """
        if loader is None:
            from ..core.config_loader import get_default_loader
            loader = get_default_loader()

        unit_types = {}
        for type_id, data in loader.load_all_unit_types().items():
            unit_types[type_id] = UnitTypeInfo(
                id=type_id,
                name=data.get("name", type_id),
                domain=MovementDomain.parse(data.get("domain", "land")),
                movement=float(data.get("movement", 0)),
            )
        return cls(unit_types)

    def register(self, info: UnitTypeInfo) -> None:
        """Dodaje lub podmienia typ jednostki."""
        self._types[info.id] = info

    def get(self, unit_type: str) -> UnitTypeInfo:
        """
        Zwraca dane typu.

        Raises:
            KeyError: Jeśli typ nie istnieje
        """
        if unit_type not in self._types:
            raise KeyError(f"Unknown unit type: '{unit_type}'")
        return self._types[unit_type]

    def get_domain(self, unit_type: str) -> MovementDomain:
        """
        Zwraca domenę typu.

        Raises:
            KeyError: Jeśli typ nie istnieje
        """
        return self.get(unit_type).domain

    def resolve_domain(self, unit_type: str) -> Optional[MovementDomain]:
        """Jak get_domain, ale dla nieznanego typu zwraca None zamiast wyjątku."""
        info = self._types.get(unit_type)
        return info.domain if info is not None else None

    def types_in_domain(self, domain: MovementDomain) -> List[str]:
        """Lista ID typów należących do domeny."""
        return [t.id for t in self._types.values() if t.domain is domain]

    def __contains__(self, unit_type: object) -> bool:
        return unit_type in self._types

    def __len__(self) -> int:
        return len(self._types)
