"""
Core module - podstawowe komponenty siatki.

Zawiera:
- HexCoord, HexDirection: System współrzędnych hexagonalnych
- HexCell, TerrainType: Dane pojedynczego pola
- HexGrid: Siatka hexagonalna (tylko odczyt podczas wyszukiwania)
- BucketQueue: Kolejka priorytetowa z kubełkami
- ConfigLoader: Wczytywanie konfiguracji z defaults
"""

from .hex_coord import HexCoord, HexDirection, HexMetrics, DEFAULT_METRICS, hex_from_cube
from .hex_cell import HexCell, TerrainType
from .hex_grid import HexGrid
from .priority_queue import BucketQueue
from .config_loader import ConfigLoader, get_default_loader

__all__ = [
    "HexCoord", "HexDirection", "HexMetrics", "DEFAULT_METRICS", "hex_from_cube",
    "HexCell", "TerrainType", "HexGrid", "BucketQueue",
    "ConfigLoader", "get_default_loader",
]
