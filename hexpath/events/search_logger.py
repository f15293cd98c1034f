"""
System logowania zdarzeń wyszukiwania do formatu JSON.

Każde zapytanie Pathfindera może dostać własny SearchLogger. Zdarzenia
(start, ekspansja węzła, relaksacja, wynik) są zapisywane z pełnym
kontekstem, więc log można później odtworzyć w wizualizacji lub użyć
do debugowania kolejności ekspansji.

Logger jest opcjonalny - bez niego wyszukiwanie nic nie zapisuje.

TYPY ZDARZEŃ:
═══════════════════════════════════════════════════════════════════

    SEARCH_START
    ─────────────────────────────────────────────────────────────
    Początek zapytania.
    Data: start, goal / budget, domain, ignore_occupants, max_cost

    NODE_EXPAND
    ─────────────────────────────────────────────────────────────
    Zdjęcie węzła z frontu.
    Data: cost (g)

    NODE_RELAX
    ─────────────────────────────────────────────────────────────
    Poprawa najlepszego znanego kosztu sąsiada.
    Data: cost (g), priority (g + h)

    PATH_FOUND
    ─────────────────────────────────────────────────────────────
    Cel zdjęty z frontu.
    Data: path [[q, r], ...], cost

    PATH_NOT_FOUND
    ─────────────────────────────────────────────────────────────
    Front wyczerpany przed dotarciem do celu.

    EARLY_EXIT
    ─────────────────────────────────────────────────────────────
    Zapytanie rozstrzygnięte bez przeszukiwania.
    Data: reason (same_cell, goal_impassable, unknown_unit_type, missing_cell)

    REACHABLE_DONE
    ─────────────────────────────────────────────────────────────
    Koniec flood-fill.
    Data: count

FORMAT LOGU:
═══════════════════════════════════════════════════════════════════

{
    "metadata": {
        "version": "1.0",
        "query": "find_path",
        "grid": {"width": 40, "height": 30},
        "timestamp": "2024-01-01T12:00:00",
        "domain": "land",
        "params": {...}
    },
    "events": [
        {"step": 0, "type": "SEARCH_START", "coord": [0, 0], "data": {...}},
        {"step": 1, "type": "NODE_EXPAND", "coord": [0, 0], "data": {"cost": 0.0}},
        ...
    ],
    "result": {"reachable": true, "cost": 2.0, "nodes_explored": 3}
}
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Sequence
from datetime import datetime
import json
import math
from pathlib import Path

from ..core.hex_coord import HexCoord


class SearchEventType(Enum):
    """Typ zdarzenia w wyszukiwaniu."""

    SEARCH_START = auto()
    NODE_EXPAND = auto()
    NODE_RELAX = auto()

    # Wynik
    PATH_FOUND = auto()
    PATH_NOT_FOUND = auto()
    EARLY_EXIT = auto()
    REACHABLE_DONE = auto()


@dataclass
class SearchEvent:
    """
    Pojedyncze zdarzenie wyszukiwania.

    Attributes:
        step (int): Liczba węzłów zdjętych z frontu do tej chwili
        event_type (SearchEventType): Typ zdarzenia
        coord (Optional[HexCoord]): Pozycja, której dotyczy zdarzenie
        data (Dict): Dodatkowe dane specyficzne dla typu zdarzenia
    """
    step: int
    event_type: SearchEventType
    coord: Optional[HexCoord] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serializuje zdarzenie do słownika."""
        result: Dict[str, Any] = {
            "step": self.step,
            "type": self.event_type.name,
        }

        if self.coord is not None:
            result["coord"] = [self.coord.q, self.coord.r]
        if self.data:
            result["data"] = self.data

        return result


def _json_cost(cost: float) -> Optional[float]:
    """JSON nie ma nieskończoności - inf zapisujemy jako null."""
    return cost if math.isfinite(cost) else None


class SearchLogger:
    """
    Logger zdarzeń jednego zapytania.

    Attributes:
        events (List[SearchEvent]): Lista wszystkich zdarzeń
        metadata (Dict): Metadane zapytania
        result (Dict): Podsumowanie wyniku

    Example:
        >>> logger = SearchLogger(query="find_path", grid_width=40, grid_height=30)
        >>> result = pathfinder.find_path(start, end, logger=logger)
        >>> logger.summary()["NODE_EXPAND"]
        12
        >>> logger.save("output/path_trace.json")
    """

    def __init__(
        self,
        query: str = "find_path",
        grid_width: int = 0,
        grid_height: int = 0,
        record_relaxations: bool = True,
    ):
        """
        Args:
            query: Nazwa zapytania (find_path / get_reachable_cells)
            grid_width: Szerokość siatki
            grid_height: Wysokość siatki
            record_relaxations: Czy zapisywać NODE_RELAX (najliczniejsze)
        """
        self.record_relaxations = record_relaxations
        self.events: List[SearchEvent] = []
        self.metadata: Dict[str, Any] = {
            "version": "1.0",
            "query": query,
            "grid": {"width": grid_width, "height": grid_height},
            "timestamp": datetime.now().isoformat(),
        }
        self.result: Dict[str, Any] = {}

    # ─────────────────────────────────────────────────────────────────────────
    # LOGOWANIE OGÓLNE
    # ─────────────────────────────────────────────────────────────────────────

    def log(self, event: SearchEvent) -> None:
        """Dodaje zdarzenie do logu."""
        self.events.append(event)

    def log_event(
        self,
        step: int,
        event_type: SearchEventType,
        coord: Optional[HexCoord] = None,
        **data: Any,
    ) -> SearchEvent:
        """
        Tworzy i loguje zdarzenie.

        Returns:
            SearchEvent: Utworzone zdarzenie
        """
        event = SearchEvent(
            step=step,
            event_type=event_type,
            coord=coord,
            data=dict(data),
        )
        self.log(event)
        return event

    # ─────────────────────────────────────────────────────────────────────────
    # POMOCNICZE METODY LOGOWANIA
    # ─────────────────────────────────────────────────────────────────────────

    def log_search_start(self, start: HexCoord, **params: Any) -> None:
        """Loguje start zapytania (parametry trafiają też do metadanych)."""
        params = {
            key: _json_cost(value) if isinstance(value, float) else value
            for key, value in params.items()
        }
        self.metadata["domain"] = params.get("domain")
        self.metadata["params"] = dict(params)
        self.log_event(0, SearchEventType.SEARCH_START, start, **params)

    def log_expand(self, step: int, coord: HexCoord, cost: float) -> None:
        self.log_event(step, SearchEventType.NODE_EXPAND, coord, cost=cost)

    def log_relax(self, step: int, coord: HexCoord, cost: float, priority: float) -> None:
        if self.record_relaxations:
            self.log_event(
                step, SearchEventType.NODE_RELAX, coord,
                cost=cost, priority=priority,
            )

    def log_path_found(
        self,
        step: int,
        path: Sequence[HexCoord],
        cost: float,
    ) -> None:
        """Loguje znalezioną ścieżkę."""
        self.result = {"reachable": True, "cost": cost, "nodes_explored": step}
        self.log_event(
            step, SearchEventType.PATH_FOUND, path[-1] if path else None,
            path=[[c.q, c.r] for c in path], cost=cost,
        )

    def log_path_not_found(self, step: int) -> None:
        self.result = {"reachable": False, "cost": None, "nodes_explored": step}
        self.log_event(step, SearchEventType.PATH_NOT_FOUND)

    def log_early_exit(
        self,
        reason: str,
        coord: Optional[HexCoord] = None,
        reachable: bool = False,
        cost: float = math.inf,
    ) -> None:
        """Loguje zapytanie rozstrzygnięte bez przeszukiwania."""
        self.result = {
            "reachable": reachable,
            "cost": _json_cost(cost),
            "nodes_explored": 0,
            "reason": reason,
        }
        self.log_event(0, SearchEventType.EARLY_EXIT, coord, reason=reason)

    def log_reachable_done(self, step: int, count: int) -> None:
        self.result = {"count": count, "nodes_explored": step}
        self.log_event(step, SearchEventType.REACHABLE_DONE, count=count)

    # ─────────────────────────────────────────────────────────────────────────
    # ZAPYTANIA
    # ─────────────────────────────────────────────────────────────────────────

    def events_of_type(self, event_type: SearchEventType) -> List[SearchEvent]:
        """Zwraca zdarzenia danego typu (w kolejności zapisu)."""
        return [e for e in self.events if e.event_type == event_type]

    def summary(self) -> Dict[str, int]:
        """Liczba zdarzeń per typ (tylko typy, które wystąpiły)."""
        counts: Dict[str, int] = {}
        for event in self.events:
            name = event.event_type.name
            counts[name] = counts.get(name, 0) + 1
        return counts

    # ─────────────────────────────────────────────────────────────────────────
    # SERIALIZACJA
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        """Eksportuje cały log do słownika."""
        return {
            "metadata": self.metadata,
            "events": [e.to_dict() for e in self.events],
            "result": self.result,
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Eksportuje log do JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def save(self, filepath: str) -> None:
        """
        Zapisuje log do pliku JSON.

        Tworzy katalogi nadrzędne, jeśli nie istnieją.
        """
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            f.write(self.to_json())

    def __len__(self) -> int:
        return len(self.events)
