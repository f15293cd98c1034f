"""
Pathfinding module - A* i zasięg ruchu.

Zawiera:
- Pathfinder: Wyszukiwanie ścieżek na jednej siatce
- PathOptions, PathResult: Parametry i wynik zapytania
- OccupancyOracle: Interfejs zajętości pól (+ adaptery)
"""

from .occupancy import OccupancyOracle, CellOccupancy, MappingOccupancy
from .pathfinder import (
    Pathfinder,
    PathOptions,
    PathResult,
    find_path,
    get_reachable_cells,
)

__all__ = [
    "OccupancyOracle", "CellOccupancy", "MappingOccupancy",
    "Pathfinder", "PathOptions", "PathResult", "find_path", "get_reachable_cells",
]
