"""
hexpath - koszty ruchu i wyszukiwanie ścieżek na siatce hexagonalnej.

Moduły:
- core: współrzędne, komórki, siatka, kolejka priorytetowa, konfiguracja
- movement: domeny ruchu i model kosztów
- pathfinding: A* i zasięg ruchu
- events: logowanie przebiegu wyszukiwania do JSON
"""

__version__ = "0.1.0"
