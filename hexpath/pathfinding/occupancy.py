"""
Wyrocznia zajętości pól (kto stoi na (q, r)).

Pathfinder pyta tylko o `unit_at(q, r)`. Źródło danych jest zewnętrzne
(zarządzanie jednostkami); tu są dwa proste adaptery:

    CellOccupancy     - czyta HexCell.occupant z siatki
    MappingOccupancy  - słownik {HexCoord: unit_id}

Brak wyroczni = wszystkie pola wolne.
"""

from __future__ import annotations
from typing import Any, Dict, Mapping, Optional, Protocol, TYPE_CHECKING

from ..core.hex_coord import HexCoord

if TYPE_CHECKING:
    from ..core.hex_grid import HexGrid


class OccupancyOracle(Protocol):
    """Interfejs odczytu zajętości: ID jednostki na (q, r) albo None."""

    def unit_at(self, q: int, r: int) -> Optional[Any]:
        ...


class CellOccupancy:
    """Zajętość odczytywana z pola `occupant` komórek siatki."""

    def __init__(self, grid: "HexGrid"):
        self.grid = grid

    def unit_at(self, q: int, r: int) -> Optional[Any]:
        cell = self.grid.cell_at(q, r)
        return cell.occupant if cell is not None else None


class MappingOccupancy:
    """
    Zajętość z gotowego słownika pozycja -> jednostka.

    Example:
        >>> occupancy = MappingOccupancy({HexCoord(1, 0): "enemy_1"})
        >>> occupancy.unit_at(1, 0)
        'enemy_1'
    """

    def __init__(self, units: Optional[Mapping[HexCoord, Any]] = None):
        self._units: Dict[HexCoord, Any] = dict(units or {})

    def unit_at(self, q: int, r: int) -> Optional[Any]:
        return self._units.get(HexCoord(q, r))
