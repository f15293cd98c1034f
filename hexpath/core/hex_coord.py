"""
System współrzędnych hexagonalnych (Axial Coordinates) dla mapy strategicznej.

Używamy Axial Coordinates (q, r) gdzie:
- q = kolumna
- r = wiersz (oś ukośna)

Konwersja do Cube Coordinates:
    s = -q - r
    Cube: (q, r, s) gdzie q + r + s = 0

s NIGDY nie jest przechowywane - zawsze wyliczane z q i r.

Układ kierunków (kolejność rotacyjna, krawędzie 0-5):
    Kierunek   (dq, dr)
    ─────────────────────
    NE  0      (+1,  0)
    E   1      (+1, -1)
    SE  2      ( 0, -1)
    SW  3      (-1,  0)
    W   4      (-1, +1)
    NW  5      ( 0, +1)

    opposite(d) = (d + 3) % 6
    next(d)     = (d + 1) % 6

Indeksy kierunków są też indeksami krawędzi używanymi przez dane rzek
(HexCell.river_directions) - kolejność musi być stała.

Odległość między hexami:
    distance = max(|dq|, |dr|, |ds|)

    Lub equivalentnie:
    distance = (|dq| + |dr| + |ds|) / 2

Pozycja w świecie (rzut jednokierunkowy):
    x = (q + r / 2) * inner_radius * 2
    z = r * outer_radius * 1.5
    y = elevation * elevation_step

Konwersja odwrotna (świat -> hex) używa cube rounding - patrz _cube_round.

Przykład użycia:
    >>> a = HexCoord(0, 0)
    >>> b = HexCoord(2, 1)
    >>> a.distance(b)
    3
    >>> a.neighbor(HexDirection.E)
    HexCoord(q=1, r=-1)
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
import math
from typing import List, Optional, Tuple, Iterator, TYPE_CHECKING

if TYPE_CHECKING:
    from .config_loader import ConfigLoader


# Offsety kierunków w układzie axial
# Kolejność: NE, E, SE, SW, W, NW
HEX_DIRECTIONS: List[Tuple[int, int]] = [
    (+1, 0),   # NE
    (+1, -1),  # E
    (0, -1),   # SE
    (-1, 0),   # SW
    (-1, +1),  # W
    (0, +1),   # NW
]


class HexDirection(IntEnum):
    """
    Sześć kierunków (krawędzi) hexa w stałej kolejności rotacyjnej.

    Wartość liczbowa to indeks krawędzi (0-5).
    """
    NE = 0
    E = 1
    SE = 2
    SW = 3
    W = 4
    NW = 5

    @property
    def offset(self) -> Tuple[int, int]:
        """Offset (dq, dr) sąsiada w tym kierunku."""
        return HEX_DIRECTIONS[self.value]

    def opposite(self) -> HexDirection:
        """Kierunek przeciwny: (d + 3) % 6."""
        return HexDirection((self.value + 3) % 6)

    def next(self) -> HexDirection:
        """Następny kierunek (zgodnie z zegarem): (d + 1) % 6."""
        return HexDirection((self.value + 1) % 6)

    def previous(self) -> HexDirection:
        """Poprzedni kierunek: (d + 5) % 6."""
        return HexDirection((self.value + 5) % 6)


# ─────────────────────────────────────────────────────────────────────────────
# METRYKI GEOMETRII
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class HexMetrics:
    """
    Stałe geometrii hexa używane przy rzutowaniu do świata.

    Attributes:
        outer_radius (float): Odległość środek -> narożnik
        inner_radius (float): Odległość środek -> środek krawędzi (outer * sqrt(3)/2)
        elevation_step (float): Wysokość jednego poziomu elewacji
    """
    outer_radius: float = 1.0
    inner_radius: float = 0.866025404
    elevation_step: float = 0.4

    @classmethod
    def from_config(cls, loader: "ConfigLoader") -> HexMetrics:
        """
        Tworzy metryki z sekcji `geometry` w defaults.yaml.

        Brakujące klucze dostają wartości domyślne klasy.
        """
        geometry = loader.get_geometry_config()
        defaults = cls()
        return cls(
            outer_radius=float(geometry.get("outer_radius", defaults.outer_radius)),
            inner_radius=float(geometry.get("inner_radius", defaults.inner_radius)),
            elevation_step=float(geometry.get("elevation_step", defaults.elevation_step)),
        )


DEFAULT_METRICS = HexMetrics()


@dataclass(frozen=True)
class HexCoord:
    """
    Współrzędna hexagonalna w systemie axial (q, r).

    Klasa jest niemutowalna (frozen=True).
    Może być używana jako klucz w słowniku lub element zbioru.

    Attributes:
        q (int): Współrzędna kolumny
        r (int): Współrzędna wiersza (oś ukośna)

    Note:
        Współrzędna s w systemie cube jest wyliczana jako: s = -q - r
        Zachodzi zawsze: q + r + s = 0
    """
    q: int
    r: int

    # ─────────────────────────────────────────────────────────────────────────
    # WŁAŚCIWOŚCI
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def s(self) -> int:
        """
        Trzecia współrzędna w systemie cube.

        Returns:
            int: Wartość s spełniająca q + r + s = 0
        """
        return -self.q - self.r

    @property
    def cube(self) -> Tuple[int, int, int]:
        """Konwersja do współrzędnych cube (q, r, s)."""
        return (self.q, self.r, self.s)

    @property
    def axial(self) -> Tuple[int, int]:
        """Współrzędne axial jako krotka (q, r)."""
        return (self.q, self.r)

    # ─────────────────────────────────────────────────────────────────────────
    # ODLEGŁOŚĆ
    # ─────────────────────────────────────────────────────────────────────────

    def distance(self, other: HexCoord) -> int:
        """
        Oblicza odległość między dwoma hexami (w krokach).

        Wzór (cube distance):
            distance = max(|dq|, |dr|, |ds|)

        Args:
            other: Druga współrzędna hexagonalna

        Returns:
            int: Odległość w liczbie kroków (hexów)

        Example:
            >>> HexCoord(0, 0).distance(HexCoord(2, 1))
            3
        """
        return max(
            abs(self.q - other.q),
            abs(self.r - other.r),
            abs(self.s - other.s),
        )

    # ─────────────────────────────────────────────────────────────────────────
    # SĄSIEDZI
    # ─────────────────────────────────────────────────────────────────────────

    def neighbor(self, direction: int) -> HexCoord:
        """
        Zwraca sąsiada w określonym kierunku.

        Args:
            direction: HexDirection lub indeks 0-5
                0 = NE, 1 = E, 2 = SE, 3 = SW, 4 = W, 5 = NW

        Returns:
            HexCoord: Sąsiad w podanym kierunku

        Raises:
            IndexError: Jeśli direction nie jest w zakresie 0-5
        """
        dq, dr = HEX_DIRECTIONS[direction]
        return HexCoord(self.q + dq, self.r + dr)

    def neighbors(self) -> List[HexCoord]:
        """
        Zwraca listę 6 sąsiednich hexów w kolejności HexDirection.

        Returns:
            List[HexCoord]: Lista 6 sąsiadów (NE, E, SE, SW, W, NW)
        """
        return [
            HexCoord(self.q + dq, self.r + dr)
            for dq, dr in HEX_DIRECTIONS
        ]

    def direction_to(self, other: HexCoord) -> Optional[HexDirection]:
        """
        Zwraca kierunek do sąsiedniego hexa.

        Returns:
            Optional[HexDirection]: Kierunek lub None jeśli hexy nie sąsiadują
        """
        delta = (other.q - self.q, other.r - self.r)
        for direction in HexDirection:
            if HEX_DIRECTIONS[direction] == delta:
                return direction
        return None

    # ─────────────────────────────────────────────────────────────────────────
    # POZYCJA W ŚWIECIE
    # ─────────────────────────────────────────────────────────────────────────

    def to_world(
        self,
        elevation: int = 0,
        metrics: HexMetrics = DEFAULT_METRICS,
    ) -> Tuple[float, float, float]:
        """
        Rzutuje środek hexa do przestrzeni świata.

        Args:
            elevation: Poziom elewacji komórki
            metrics: Stałe geometrii

        Returns:
            Tuple[float, float, float]: Pozycja (x, y, z), y = wysokość
        """
        x = (self.q + self.r / 2) * metrics.inner_radius * 2
        z = self.r * metrics.outer_radius * 1.5
        y = elevation * metrics.elevation_step
        return (x, y, z)

    @staticmethod
    def from_world(
        x: float,
        z: float,
        metrics: HexMetrics = DEFAULT_METRICS,
    ) -> HexCoord:
        """
        Znajduje hex zawierający punkt (x, z) na płaszczyźnie mapy.

        Elewacja (y) nie wpływa na wynik.

        Args:
            x, z: Pozycja w świecie
            metrics: Stałe geometrii

        Returns:
            HexCoord: Najbliższy hex (cube rounding)
        """
        q = (x * math.sqrt(3) / 3 - z / 3) / metrics.outer_radius
        r = z * 2 / 3 / metrics.outer_radius
        return _cube_round(q, r, -q - r)

    # ─────────────────────────────────────────────────────────────────────────
    # OFFSET (odd-r)
    # ─────────────────────────────────────────────────────────────────────────

    @staticmethod
    def from_offset(col: int, row: int) -> HexCoord:
        """
        Tworzy współrzędną z offset (odd-r).

        Wzór:
            q = col - (row // 2)
            r = row
        """
        return HexCoord(col - (row // 2), row)

    def to_offset(self) -> Tuple[int, int]:
        """
        Konwertuje axial (q, r) na offset (col, row) - układ odd-r.

        Wzór:
            col = q + (r // 2)
            row = r
        """
        return (self.q + (self.r // 2), self.r)

    # ─────────────────────────────────────────────────────────────────────────
    # LINIA DO CELU
    # ─────────────────────────────────────────────────────────────────────────

    def line_to(self, other: HexCoord) -> List[HexCoord]:
        """
        Zwraca listę hexów tworzących linię prostą do celu.

        Używa interpolacji liniowej w przestrzeni cube z zaokrąglaniem.

        Args:
            other: Cel linii

        Returns:
            List[HexCoord]: Lista hexów od self do other (włącznie)
        """
        n = self.distance(other)
        if n == 0:
            return [self]

        results: List[HexCoord] = []
        for i in range(n + 1):
            t = i / n
            q = self.q + (other.q - self.q) * t
            r = self.r + (other.r - self.r) * t
            s = self.s + (other.s - self.s) * t
            results.append(_cube_round(q, r, s))

        return results

    # ─────────────────────────────────────────────────────────────────────────
    # RING I SPIRAL
    # ─────────────────────────────────────────────────────────────────────────

    def ring(self, radius: int) -> List[HexCoord]:
        """
        Zwraca wszystkie hexy w pierścieniu o danym promieniu.

        Args:
            radius: Promień pierścienia (>= 0)

        Returns:
            List[HexCoord]: Hexy tworzące pierścień

        Note:
            - radius=0 zwraca [self]
            - radius=n zwraca 6*n hexów (dla n > 0)
        """
        if radius == 0:
            return [self]

        results: List[HexCoord] = []
        # Start od kierunku W * radius, potem obchodzimy pierścień od NE
        current = HexCoord(
            self.q + HEX_DIRECTIONS[HexDirection.W][0] * radius,
            self.r + HEX_DIRECTIONS[HexDirection.W][1] * radius,
        )

        for direction in HexDirection:
            for _ in range(radius):
                results.append(current)
                current = current.neighbor(direction)

        return results

    def spiral(self, radius: int) -> Iterator[HexCoord]:
        """
        Generator hexów w spirali od centrum do promienia.

        Yields hexy warstwami: centrum, potem ring(1), ring(2), ...
        """
        for r in range(radius + 1):
            for hex_coord in self.ring(r):
                yield hex_coord

    # ─────────────────────────────────────────────────────────────────────────
    # OPERATORY ARYTMETYCZNE
    # ─────────────────────────────────────────────────────────────────────────

    def __add__(self, other: HexCoord) -> HexCoord:
        return HexCoord(self.q + other.q, self.r + other.r)

    def __sub__(self, other: HexCoord) -> HexCoord:
        return HexCoord(self.q - other.q, self.r - other.r)

    def __mul__(self, scalar: int) -> HexCoord:
        return HexCoord(self.q * scalar, self.r * scalar)

    # ─────────────────────────────────────────────────────────────────────────
    # REPREZENTACJA
    # ─────────────────────────────────────────────────────────────────────────

    def __repr__(self) -> str:
        return f"HexCoord(q={self.q}, r={self.r})"

    def __str__(self) -> str:
        return f"({self.q}, {self.r})"


# ─────────────────────────────────────────────────────────────────────────────
# FUNKCJE POMOCNICZE
# ─────────────────────────────────────────────────────────────────────────────

def _round_half_up(value: float) -> int:
    """Zaokrągla do najbliższej liczby całkowitej, połówki w górę (2.5 -> 3, -0.5 -> 0)."""
    return math.floor(value + 0.5)


def _cube_round(q: float, r: float, s: float) -> HexCoord:
    """
    Zaokrągla współrzędne cube do najbliższego hexa.

    Algorytm:
    1. Zaokrąglij każdą współrzędną niezależnie
    2. Policz błąd zaokrąglenia każdej z nich
    3. Przelicz współrzędną z NAJWIĘKSZYM błędem z dwóch pozostałych,
       żeby przywrócić q + r + s = 0

    Kolejność rozstrzygania remisów jest istotna - na granicy hexów
    decyduje o tym, który hex wygrywa:
        błąd q ściśle największy -> przelicz q
        w przeciwnym razie błąd r > błąd s -> przelicz r
        w przeciwnym razie -> s (wyliczane, nie przechowujemy)

    Args:
        q, r, s: Współrzędne cube (float)

    Returns:
        HexCoord: Najbliższy hex
    """
    rq = _round_half_up(q)
    rr = _round_half_up(r)
    rs = _round_half_up(s)

    dq = abs(rq - q)
    dr = abs(rr - r)
    ds = abs(rs - s)

    if dq > dr and dq > ds:
        rq = -rr - rs
    elif dr > ds:
        rr = -rq - rs

    return HexCoord(int(rq), int(rr))


def hex_from_cube(q: int, r: int, s: int) -> HexCoord:
    """
    Tworzy HexCoord z współrzędnych cube.

    Raises:
        ValueError: Jeśli q + r + s != 0
    """
    if q + r + s != 0:
        raise ValueError(f"Invalid cube coordinates: {q} + {r} + {s} != 0")
    return HexCoord(q, r)
