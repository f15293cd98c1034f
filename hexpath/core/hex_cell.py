"""
Komórka mapy (HexCell) i typy terenu.

HexCell to dane tylko-do-odczytu z punktu widzenia pathfindingu:
- elewacja, teren i rzeki są zapisywane przez generator mapy
- occupant jest zapisywany przez zarządzanie jednostkami

Rzeki:
    river_directions to zbiór krawędzi (HexDirection), przez które rzeka
    WYPŁYWA z komórki. Krawędź między A i B jest przekraczana przez rzekę,
    jeśli A ma rzekę w kierunku B albo B ma rzekę w kierunku A
    (czyli w kierunku przeciwnym).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, Iterable, Optional

from .hex_coord import HexCoord, HexDirection


class TerrainType(Enum):
    """Typ terenu (biom). Wartości są kluczami w terrain_costs.yaml."""
    OCEAN = "ocean"
    COAST = "coast"
    PLAINS = "plains"
    FOREST = "forest"
    HILLS = "hills"
    MOUNTAINS = "mountains"
    SNOW = "snow"
    DESERT = "desert"
    TUNDRA = "tundra"
    JUNGLE = "jungle"
    SAVANNA = "savanna"
    TAIGA = "taiga"

    @property
    def is_water(self) -> bool:
        """Czy teren jest wodny (ocean lub wybrzeże)."""
        return self in (TerrainType.OCEAN, TerrainType.COAST)

    @classmethod
    def parse(cls, value: str) -> TerrainType:
        """
        Parsuje nazwę terenu z YAML (bez względu na wielkość liter).

        Raises:
            ValueError: Jeśli nazwa nie jest znanym terenem
        """
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(
                f"Unknown terrain type: {value}. "
                f"Available: {[t.value for t in cls]}"
            ) from None


@dataclass(eq=False)
class HexCell:
    """
    Pojedyncza komórka siatki.

    Komórki są porównywane i hashowane po tożsamości (jak obiekty
    w siatce), więc mogą być kluczami w ReachableSet.

    Attributes:
        coord (HexCoord): Pozycja komórki
        elevation (int): Poziom elewacji (< 0 = pod wodą)
        terrain (TerrainType): Biom
        river_directions (FrozenSet[HexDirection]): Krawędzie z wypływającą rzeką
        occupant (Optional[Any]): ID jednostki stojącej na komórce
    """
    coord: HexCoord
    elevation: int = 0
    terrain: TerrainType = TerrainType.PLAINS
    river_directions: FrozenSet[HexDirection] = field(default_factory=frozenset)
    occupant: Optional[Any] = None

    def __post_init__(self) -> None:
        if not isinstance(self.river_directions, frozenset):
            self.river_directions = frozenset(
                HexDirection(d) for d in self.river_directions
            )

    @classmethod
    def at(
        cls,
        q: int,
        r: int,
        elevation: int = 0,
        terrain: TerrainType = TerrainType.PLAINS,
        rivers: Iterable[int] = (),
        occupant: Optional[Any] = None,
    ) -> HexCell:
        """Skrót: tworzy komórkę z surowych (q, r)."""
        return cls(
            coord=HexCoord(q, r),
            elevation=elevation,
            terrain=terrain,
            river_directions=frozenset(HexDirection(d) for d in rivers),
            occupant=occupant,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # WŁAŚCIWOŚCI
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def q(self) -> int:
        return self.coord.q

    @property
    def r(self) -> int:
        return self.coord.r

    @property
    def has_river(self) -> bool:
        return bool(self.river_directions)

    def has_river_toward(self, direction: HexDirection) -> bool:
        """Czy rzeka wypływa krawędzią w podanym kierunku."""
        return direction in self.river_directions

    def __repr__(self) -> str:
        return (
            f"HexCell({self.q}, {self.r}) "
            f"elev={self.elevation} terrain={self.terrain.value}"
        )
