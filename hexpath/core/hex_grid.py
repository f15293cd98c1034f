"""
Siatka hexagonalna (HexGrid) - magazyn komórek mapy.

HexGrid przechowuje przestrzeń mapy:
- Określa wymiary siatki (width x height)
- Mapuje HexCoord -> HexCell
- Waliduje czy pozycje są w granicach
- Wylicza sąsiadów komórki (interfejs odczytu dla pathfindingu)

Siatka jest wypełniana hurtowo przez generator mapy (zewnętrzny) i nie jest
modyfikowana przez wyszukiwanie ścieżek.

Układ siatki:
    Używamy układu "odd-r" (offset coordinates) do mapowania
    na regularną siatkę width x height:

    r=0:  (0,0) (1,0) (2,0) (3,0) ...
    r=1:   (0,1) (1,1) (2,1) (3,1) ...  <- przesunięte o 0.5 wizualnie
    r=2:  (0,2) (1,2) (2,2) (3,2) ...

Konwersja offset <-> axial:
    axial.q = offset.x - (offset.y // 2)
    axial.r = offset.y

Przykład użycia:
    >>> grid = HexGrid.filled(width=7, height=8)
    >>> grid.cell_at(0, 0)
    HexCell(0, 0) elev=0 terrain=plains
    >>> grid.cell_at(-5, 0) is None
    True
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .hex_coord import HexCoord, HexDirection
from .hex_cell import HexCell, TerrainType


# Litery dla debug_print
_TERRAIN_LETTERS: Dict[TerrainType, str] = {
    TerrainType.OCEAN: "~",
    TerrainType.COAST: "c",
    TerrainType.PLAINS: ".",
    TerrainType.FOREST: "f",
    TerrainType.HILLS: "h",
    TerrainType.MOUNTAINS: "M",
    TerrainType.SNOW: "s",
    TerrainType.DESERT: "d",
    TerrainType.TUNDRA: "t",
    TerrainType.JUNGLE: "j",
    TerrainType.SAVANNA: "v",
    TerrainType.TAIGA: "g",
}


@dataclass
class HexGrid:
    """
    Siatka hexagonalna z komórkami terenu.

    Attributes:
        width (int): Szerokość siatki w hexach
        height (int): Wysokość siatki w hexach
        _cells (Dict[HexCoord, HexCell]): Mapa pozycja -> komórka

    Note:
        - Pozycje są w układzie axial (q, r)
        - Grid waliduje granice używając konwersji do offset
        - Brakująca komórka to "brak sąsiada", nigdy wyjątek
    """
    width: int
    height: int
    _cells: Dict[HexCoord, HexCell] = field(default_factory=dict, repr=False)

    # ─────────────────────────────────────────────────────────────────────────
    # BUDOWANIE
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def filled(
        cls,
        width: int,
        height: int,
        terrain: TerrainType = TerrainType.PLAINS,
        elevation: int = 0,
    ) -> HexGrid:
        """
        Tworzy siatkę wypełnioną jednolitym terenem.

        Args:
            width: Szerokość w hexach
            height: Wysokość w hexach
            terrain: Teren każdej komórki
            elevation: Elewacja każdej komórki

        Returns:
            HexGrid: Pełna siatka width * height komórek
        """
        grid = cls(width=width, height=height)
        for y in range(height):
            for x in range(width):
                coord = HexCoord.from_offset(x, y)
                grid._cells[coord] = HexCell(
                    coord=coord, elevation=elevation, terrain=terrain
                )
        return grid

    @classmethod
    def from_cells(cls, width: int, height: int, cells: Iterable[HexCell]) -> HexGrid:
        """
        Tworzy siatkę z gotowych komórek (np. z generatora mapy).

        Raises:
            ValueError: Jeśli któraś komórka jest poza granicami
        """
        grid = cls(width=width, height=height)
        for cell in cells:
            grid.set_cell(cell)
        return grid

    def set_cell(self, cell: HexCell) -> None:
        """
        Wstawia (lub podmienia) komórkę na jej pozycji.

        Raises:
            ValueError: Jeśli pozycja jest poza siatką
        """
        if not self.is_valid(cell.coord):
            raise ValueError(f"Position {cell.coord} is outside grid bounds")
        self._cells[cell.coord] = cell

    # ─────────────────────────────────────────────────────────────────────────
    # WALIDACJA POZYCJI
    # ─────────────────────────────────────────────────────────────────────────

    def is_valid(self, pos: HexCoord) -> bool:
        """
        Sprawdza czy pozycja jest w granicach siatki.

        Konwertuje axial na offset i sprawdza granice.

        Example:
            >>> grid = HexGrid(7, 8)
            >>> grid.is_valid(HexCoord(0, 0))
            True
            >>> grid.is_valid(HexCoord(-1, 0))
            False
        """
        offset_x, offset_y = pos.to_offset()
        return 0 <= offset_x < self.width and 0 <= offset_y < self.height

    # ─────────────────────────────────────────────────────────────────────────
    # ODCZYT KOMÓREK
    # ─────────────────────────────────────────────────────────────────────────

    def cell_at(self, q: int, r: int) -> Optional[HexCell]:
        """
        Zwraca komórkę na pozycji (q, r).

        Returns:
            Optional[HexCell]: Komórka lub None jeśli brak
        """
        return self._cells.get(HexCoord(q, r))

    def get_cell(self, pos: HexCoord) -> Optional[HexCell]:
        """Zwraca komórkę na pozycji lub None."""
        return self._cells.get(pos)

    def neighbor(self, cell: HexCell, direction: HexDirection) -> Optional[HexCell]:
        """
        Zwraca sąsiada komórki w podanym kierunku.

        Returns:
            Optional[HexCell]: Sąsiad lub None jeśli poza mapą
        """
        return self._cells.get(cell.coord.neighbor(direction))

    def neighbors_of(self, cell: HexCell) -> List[HexCell]:
        """
        Zwraca istniejących sąsiadów komórki w kolejności HexDirection.

        Kolejność jest stała - od niej zależy deterministyczna kolejność
        ekspansji w wyszukiwaniu.

        Args:
            cell: Komórka bazowa

        Returns:
            List[HexCell]: 0-6 sąsiadów
        """
        result = []
        for neighbor_pos in cell.coord.neighbors():
            neighbor = self._cells.get(neighbor_pos)
            if neighbor is not None:
                result.append(neighbor)
        return result

    # ─────────────────────────────────────────────────────────────────────────
    # ZAPYTANIA
    # ─────────────────────────────────────────────────────────────────────────

    def all_cells(self) -> List[HexCell]:
        """Zwraca wszystkie komórki siatki."""
        return list(self._cells.values())

    def cells_in_radius(self, center: HexCell, radius: int) -> List[HexCell]:
        """
        Zwraca komórki w odległości <= radius od centrum (włącznie z nim).

        Note:
            Dla radius=1 na pełnej mapie zwraca 7 komórek.
        """
        result = []
        for pos in center.coord.spiral(radius):
            cell = self._cells.get(pos)
            if cell is not None:
                result.append(cell)
        return result

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, pos: object) -> bool:
        return pos in self._cells

    # ─────────────────────────────────────────────────────────────────────────
    # DEBUG / VISUALIZACJA
    # ─────────────────────────────────────────────────────────────────────────

    def debug_print(self) -> str:
        """
        Zwraca tekstową reprezentację siatki do debugowania.

        Legenda:
            . = równina, ~ = ocean, c = wybrzeże, M = góry, ...
            X = zajęte pole
            ? = brak komórki

        Returns:
            str: Tekstowa wizualizacja siatki
        """
        lines = []
        for y in range(self.height):
            indent = " " if y % 2 == 1 else ""
            row = []
            for x in range(self.width):
                cell = self._cells.get(HexCoord.from_offset(x, y))
                if cell is None:
                    row.append("?")
                elif cell.occupant is not None:
                    row.append("X")
                else:
                    row.append(_TERRAIN_LETTERS[cell.terrain])
            lines.append(indent + " ".join(row))
        return "\n".join(lines)
