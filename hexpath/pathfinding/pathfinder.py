"""
Algorytm A* i flood-fill zasięgu dla siatki hexagonalnej z kosztami terenu.

Pathfinder łączy siatkę, model kosztów ruchu (domena jednostki)
i opcjonalną wyrocznię zajętości pól.

Jak działa A*:
    1. Front (BucketQueue) trzyma pary (komórka, g) z priorytetem g + h
    2. Dla każdego węzła:
       - g: koszt od startu (suma kosztów kroków z MovementStrategy)
       - h: odległość hex do celu
       - f: g + h
    3. Zawsze eksploruj węzeł z najniższym f (FIFO przy remisach)
    4. Gdy cel zostanie zdjęty z frontu, odtwórz ścieżkę z mapy rodziców

Heurystyka:
    Odległość hex jest dopuszczalna, bo każdy skończony koszt kroku
    jest >= 1.0 (walidowane przy wczytywaniu tabel kosztów).

Zasięg (get_reachable_cells):
    Dijkstra bez celu - wszystkie komórki o koszcie <= budżet.

Przykład użycia:
    >>> grid = HexGrid.filled(3, 1, TerrainType.PLAINS)
    >>> pathfinder = Pathfinder(grid)
    >>> result = pathfinder.find_path(HexCoord(0, 0), HexCoord(2, 0))
    >>> result.cost
    2.0
    >>> [c.coord for c in result.path]
    [HexCoord(q=0, r=0), HexCoord(q=1, r=0), HexCoord(q=2, r=0)]

Edge cases:
    - Start == cel: ścieżka [start], koszt 0.0
    - Brak ścieżki: pusta ścieżka, koszt inf, reachable=False
    - Współrzędne bez komórki w siatce: jak brak ścieżki
    - Nieznany typ jednostki: jak brak ścieżki (bez wyjątku)
    - Zajętość pola docelowego nigdy nie blokuje (cel ataku)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple, Union
import math

from ..core.config_loader import get_default_loader
from ..core.hex_cell import HexCell
from ..core.hex_coord import HexCoord
from ..core.hex_grid import HexGrid
from ..core.priority_queue import BucketQueue
from ..events.search_logger import SearchLogger
from ..movement.costs import (
    INF,
    MovementRules,
    MovementStrategy,
    get_default_unit_types,
    get_strategy,
)
from ..movement.domain import MovementDomain, UnitTypeRegistry
from .occupancy import OccupancyOracle


CellRef = Union[HexCell, HexCoord]


@dataclass
class PathOptions:
    """
    Parametry pojedynczego zapytania.

    Attributes:
        ignore_occupants: Czy traktować zajęte pola jak wolne
        max_cost: Górny limit kosztu ścieżki (inf = bez limitu)
        unit_type: Typ jednostki (domena z UnitTypeRegistry)
        domain: Domena podana wprost (ma pierwszeństwo przed unit_type)
    """
    ignore_occupants: bool = False
    max_cost: float = INF
    unit_type: Optional[str] = None
    domain: Optional[MovementDomain] = None


@dataclass
class PathResult:
    """
    Wynik find_path.

    Attributes:
        path: Komórki od startu do celu (włącznie), pusta gdy brak ścieżki
        cost: Łączny koszt (inf gdy brak ścieżki)
        reachable: Czy cel jest osiągalny
        nodes_explored: Liczba węzłów zdjętych z frontu
    """
    path: List[HexCell] = field(default_factory=list)
    cost: float = INF
    reachable: bool = False
    nodes_explored: int = 0

    @classmethod
    def unreachable(cls, nodes_explored: int = 0) -> PathResult:
        return cls([], INF, False, nodes_explored)

    @property
    def steps(self) -> int:
        """Liczba kroków (0 dla ścieżki trywialnej i dla braku ścieżki)."""
        return max(len(self.path) - 1, 0)


def _coord_of(ref: CellRef) -> HexCoord:
    return ref.coord if isinstance(ref, HexCell) else ref


class Pathfinder:
    """
    Wyszukiwanie ścieżek i zasięgu na jednej siatce.

    Pathfinder nie trzyma stanu zapytań - front, mapy kosztów i rodziców
    są tworzone w każdym wywołaniu. Równoległe zapytania na niezmienianej
    siatce są bezpieczne.

    Attributes:
        grid: Siatka (tylko odczyt)
        occupancy: Wyrocznia zajętości (None = wszystkie pola wolne)
        unit_types: Rejestr typ -> domena (None = z unit_types.yaml)
        precision: Rozdzielczość kubełków kolejki priorytetowej
    """

    def __init__(
        self,
        grid: HexGrid,
        occupancy: Optional[OccupancyOracle] = None,
        unit_types: Optional[UnitTypeRegistry] = None,
        rules: Optional[MovementRules] = None,
        precision: Optional[int] = None,
    ):
        """
        Args:
            grid: Siatka hexagonalna
            occupancy: Wyrocznia zajętości pól
            unit_types: Rejestr typów jednostek
            rules: Reguły kosztów (None = domyślne z YAML)
            precision: Precyzja BucketQueue (None = search.precision z YAML)

        Raises:
            ValueError: Jeśli grid jest None albo precision jest za gruba
                dla kroków kosztu w regułach
        """
        if grid is None:
            raise ValueError("Pathfinder requires a grid")

        self.grid = grid
        self.occupancy = occupancy
        self.unit_types = unit_types
        self._strategies: Dict[MovementDomain, MovementStrategy] = {
            domain: get_strategy(domain, rules) for domain in MovementDomain
        }

        if precision is None:
            precision = int(get_default_loader().get_search_config().get("precision", 10))
        self._strategies[MovementDomain.LAND].rules.check_precision(precision)
        self.precision = precision

    # ─────────────────────────────────────────────────────────────────────────
    # A*
    # ─────────────────────────────────────────────────────────────────────────

    def find_path(
        self,
        start: CellRef,
        end: CellRef,
        options: Optional[PathOptions] = None,
        logger: Optional[SearchLogger] = None,
    ) -> PathResult:
        """
        Znajduje najtańszą ścieżkę ze `start` do `end`.

        Args:
            start: Komórka lub pozycja startowa
            end: Komórka lub pozycja docelowa
            options: Parametry zapytania (None = domyślne, domena LAND)
            logger: Opcjonalny logger zdarzeń

        Returns:
            PathResult: Ścieżka i koszt, albo wynik "nieosiągalny"

        Algorithm:
            1. Rozwiąż komórki, przypadek trywialny, domenę, przekraczalność celu
            2. Front z komórką startową (priorytet h)
            3. Dopóki front nie jest pusty:
               a. Zdejmij węzeł, pomiń nieaktualne wpisy
               b. Jeśli to cel - odtwórz ścieżkę
               c. Dla każdego sąsiada: zajętość, koszt kroku, max_cost, relaksacja
            4. Front pusty - brak ścieżki
        """
        options = options or PathOptions()

        if logger is not None:
            logger.log_search_start(
                _coord_of(start),
                goal=list(_coord_of(end).axial),
                domain=self._domain_name(options),
                unit_type=options.unit_type,
                ignore_occupants=options.ignore_occupants,
                max_cost=options.max_cost if math.isfinite(options.max_cost) else None,
            )

        start_cell = self._resolve_cell(start)
        end_cell = self._resolve_cell(end)
        if start_cell is None or end_cell is None:
            if logger is not None:
                logger.log_early_exit("missing_cell", _coord_of(end))
            return PathResult.unreachable()

        # Przypadek trywialny - przed sprawdzeniem domeny i terenu
        if start_cell is end_cell:
            if logger is not None:
                logger.log_early_exit("same_cell", start_cell.coord, reachable=True, cost=0.0)
            return PathResult([start_cell], 0.0, True)

        strategy = self._resolve_strategy(options)
        if strategy is None:
            if logger is not None:
                logger.log_early_exit("unknown_unit_type", end_cell.coord)
            return PathResult.unreachable()

        if not strategy.is_passable(end_cell):
            if logger is not None:
                logger.log_early_exit("goal_impassable", end_cell.coord)
            return PathResult.unreachable()

        goal = end_cell.coord
        frontier: BucketQueue[Tuple[HexCell, float]] = BucketQueue(self.precision)
        g_costs: Dict[HexCell, float] = {start_cell: 0.0}
        parents: Dict[HexCell, HexCell] = {}
        closed: Set[HexCell] = set()

        frontier.enqueue((start_cell, 0.0), start_cell.coord.distance(goal))
        nodes_explored = 0

        while frontier:
            current, g = frontier.dequeue()

            # Nieaktualny wpis (komórka już zamknięta albo znaleziono tańszą drogę)
            if current in closed or g > g_costs[current]:
                continue

            closed.add(current)
            nodes_explored += 1
            if logger is not None:
                logger.log_expand(nodes_explored, current.coord, g)

            if current is end_cell:
                path = _reconstruct_path(parents, start_cell, end_cell)
                if logger is not None:
                    logger.log_path_found(nodes_explored, [c.coord for c in path], g)
                return PathResult(path, g, True, nodes_explored)

            for neighbor in self.grid.neighbors_of(current):
                if neighbor in closed:
                    continue

                # Cel może być zajęty (np. atakowana jednostka)
                if (
                    not options.ignore_occupants
                    and neighbor is not end_cell
                    and self._is_occupied(neighbor)
                ):
                    continue

                step = strategy.movement_cost(current, neighbor)
                if not math.isfinite(step):
                    continue

                tentative_g = g + step
                if tentative_g > options.max_cost:
                    continue

                if neighbor not in g_costs or tentative_g < g_costs[neighbor]:
                    g_costs[neighbor] = tentative_g
                    parents[neighbor] = current

                    priority = tentative_g + neighbor.coord.distance(goal)
                    frontier.enqueue((neighbor, tentative_g), priority)
                    if logger is not None:
                        logger.log_relax(nodes_explored, neighbor.coord, tentative_g, priority)

        if logger is not None:
            logger.log_path_not_found(nodes_explored)
        return PathResult.unreachable(nodes_explored)

    # ─────────────────────────────────────────────────────────────────────────
    # ZASIĘG
    # ─────────────────────────────────────────────────────────────────────────

    def get_reachable_cells(
        self,
        start: CellRef,
        budget: float,
        options: Optional[PathOptions] = None,
        logger: Optional[SearchLogger] = None,
    ) -> Dict[HexCell, float]:
        """
        Wszystkie komórki osiągalne ze `start` za co najwyżej `budget`.

        Args:
            start: Komórka lub pozycja startowa
            budget: Punkty ruchu
            options: Domena / typ jednostki / ignore_occupants
                     (max_cost nie jest tu używane - limitem jest budget)
            logger: Opcjonalny logger zdarzeń

        Returns:
            Dict[HexCell, float]: Komórka -> najtańszy koszt dotarcia.
                                  Zawsze zawiera start z kosztem 0.0
                                  (pusty słownik tylko gdy startu nie ma w siatce).

        Example:
            >>> reachable = pathfinder.get_reachable_cells(unit_cell, 2.0)
            >>> reachable[unit_cell]
            0.0
        """
        options = options or PathOptions()

        if logger is not None:
            logger.log_search_start(
                _coord_of(start),
                budget=budget,
                domain=self._domain_name(options),
                unit_type=options.unit_type,
                ignore_occupants=options.ignore_occupants,
            )

        start_cell = self._resolve_cell(start)
        if start_cell is None:
            if logger is not None:
                logger.log_early_exit("missing_cell", _coord_of(start))
            return {}

        reachable: Dict[HexCell, float] = {start_cell: 0.0}

        strategy = self._resolve_strategy(options)
        if strategy is None:
            if logger is not None:
                logger.log_early_exit("unknown_unit_type", start_cell.coord)
            return reachable

        frontier: BucketQueue[Tuple[HexCell, float]] = BucketQueue(self.precision)
        closed: Set[HexCell] = set()
        frontier.enqueue((start_cell, 0.0), 0.0)
        nodes_explored = 0

        while frontier:
            current, g = frontier.dequeue()

            if current in closed or g > reachable[current]:
                continue

            closed.add(current)
            nodes_explored += 1
            if logger is not None:
                logger.log_expand(nodes_explored, current.coord, g)

            for neighbor in self.grid.neighbors_of(current):
                if neighbor in closed:
                    continue
                if not options.ignore_occupants and self._is_occupied(neighbor):
                    continue

                step = strategy.movement_cost(current, neighbor)
                if not math.isfinite(step):
                    continue

                tentative_g = g + step
                if tentative_g > budget:
                    continue

                if neighbor not in reachable or tentative_g < reachable[neighbor]:
                    reachable[neighbor] = tentative_g
                    frontier.enqueue((neighbor, tentative_g), tentative_g)
                    if logger is not None:
                        logger.log_relax(nodes_explored, neighbor.coord, tentative_g, tentative_g)

        if logger is not None:
            logger.log_reachable_done(nodes_explored, len(reachable))
        return reachable

    # ─────────────────────────────────────────────────────────────────────────
    # ZAPYTANIA POMOCNICZE
    # ─────────────────────────────────────────────────────────────────────────

    def has_path(
        self,
        start: CellRef,
        end: CellRef,
        ignore_occupants: bool = False,
        unit_type: Optional[str] = None,
    ) -> bool:
        options = PathOptions(ignore_occupants=ignore_occupants, unit_type=unit_type)
        return self.find_path(start, end, options).reachable

    def next_step(
        self,
        start: CellRef,
        end: CellRef,
        options: Optional[PathOptions] = None,
    ) -> Optional[HexCell]:
        """
        Tylko następny krok na ścieżce do celu.

        Returns:
            Optional[HexCell]: Druga komórka ścieżki lub None
                               (brak ścieżki albo już jesteśmy w celu)

        Example:
            >>> step = pathfinder.next_step(unit_cell, target_cell)
            >>> if step is not None:
            ...     move_unit(unit, step)
        """
        path = self.find_path(start, end, options).path

        if len(path) < 2:
            return None

        return path[1]

    def get_step_cost(
        self,
        from_cell: HexCell,
        to_cell: HexCell,
        unit_type: Optional[str] = None,
    ) -> float:
        """Koszt pojedynczego kroku (inf dla komórek niesąsiednich)."""
        if from_cell.coord.distance(to_cell.coord) != 1:
            return INF

        strategy = self._resolve_strategy(PathOptions(unit_type=unit_type))
        if strategy is None:
            return INF

        return strategy.movement_cost(from_cell, to_cell)

    def path_cost(
        self,
        path: List[HexCell],
        domain: MovementDomain = MovementDomain.LAND,
    ) -> float:
        """
        Suma kosztów kroków podanej ścieżki.

        Returns:
            float: Koszt (0.0 dla jednej komórki), inf jeśli ścieżka pusta,
                   niespójna lub któryś krok jest niedozwolony
        """
        if not path:
            return INF

        strategy = self._strategies[domain]
        total = 0.0
        for from_cell, to_cell in zip(path, path[1:]):
            if from_cell.coord.distance(to_cell.coord) != 1:
                return INF
            total += strategy.movement_cost(from_cell, to_cell)

        return total

    # ─────────────────────────────────────────────────────────────────────────
    # HELPERY
    # ─────────────────────────────────────────────────────────────────────────

    def _resolve_cell(self, ref: CellRef) -> Optional[HexCell]:
        """Komórka siatki dla komórki lub pozycji (None jeśli jej nie ma)."""
        return self.grid.get_cell(_coord_of(ref))

    def _resolve_domain(self, options: PathOptions) -> Optional[MovementDomain]:
        if options.domain is not None:
            return options.domain
        if options.unit_type is not None:
            registry = self.unit_types or get_default_unit_types()
            return registry.resolve_domain(options.unit_type)
        return MovementDomain.LAND

    def _resolve_strategy(self, options: PathOptions) -> Optional[MovementStrategy]:
        """Strategia kosztów dla zapytania (None = nieznany typ jednostki)."""
        domain = self._resolve_domain(options)
        if domain is None:
            return None
        return self._strategies[domain]

    def _domain_name(self, options: PathOptions) -> Optional[str]:
        domain = self._resolve_domain(options)
        return domain.value if domain is not None else None

    def _is_occupied(self, cell: HexCell) -> bool:
        if self.occupancy is None:
            return False
        return self.occupancy.unit_at(cell.q, cell.r) is not None


def _reconstruct_path(
    parents: Dict[HexCell, HexCell],
    start: HexCell,
    goal: HexCell,
) -> List[HexCell]:
    """
    Odtwarza ścieżkę od goal do start używając mapy rodziców.

    Returns:
        List[HexCell]: Ścieżka od start do goal
    """
    path = [goal]
    current = goal

    while current is not start:
        current = parents[current]
        path.append(current)

    path.reverse()
    return path


# ═══════════════════════════════════════════════════════════════════════════
# API MODUŁOWE
# ═══════════════════════════════════════════════════════════════════════════

def find_path(
    grid: HexGrid,
    start: CellRef,
    end: CellRef,
    occupancy: Optional[OccupancyOracle] = None,
    **options: Any,
) -> PathResult:
    """
    Jednorazowe wyszukiwanie ścieżki.

    Example:
        >>> find_path(grid, HexCoord(0, 0), HexCoord(2, 0), unit_type="cavalry").cost
        2.0
    """
    return Pathfinder(grid, occupancy).find_path(start, end, PathOptions(**options))


def get_reachable_cells(
    grid: HexGrid,
    start: CellRef,
    budget: float,
    occupancy: Optional[OccupancyOracle] = None,
    **options: Any,
) -> Dict[HexCell, float]:
    """Jednorazowy flood-fill zasięgu."""
    return Pathfinder(grid, occupancy).get_reachable_cells(
        start, budget, PathOptions(**options)
    )
