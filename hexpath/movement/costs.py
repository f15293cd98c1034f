"""
Model kosztów ruchu zależny od domeny jednostki.

Koszt kroku jest KIERUNKOWY: liczony z `from` do sąsiedniego `to`
(podjazd pod górę kosztuje, zjazd nie).

REGUŁY:
═══════════════════════════════════════════════════════════════════

    LAND
    ─────────────────────────────────────────────────────────────
    1. to.elevation < sea_level              -> inf (woda)
    2. base = land_costs[to.terrain]         -> inf jeśli teren nieprzekraczalny
    3. Δ = to.elevation - from.elevation
       |Δ| >= cliff_threshold                -> inf (klif)
       Δ > 0                                 -> base += Δ * climb_cost_per_level
    4. krawędź przecina rzekę                -> base += river_crossing_cost
       (from ma rzekę w kierunku to, albo to ma rzekę w kierunku przeciwnym)

    NAVAL
    ─────────────────────────────────────────────────────────────
    1. to jest wodą jeśli elevation < sea_level LUB teren to ocean/wybrzeże,
       w przeciwnym razie                    -> inf
    2. base = naval_costs[to.terrain]
       inf, ale woda "po elewacji"           -> naval_water_fallback

    AMPHIBIOUS
    ─────────────────────────────────────────────────────────────
    min(land, naval) - liczone NIEZALEŻNIE dla każdej krawędzi.
    Jednostka może zmieniać domenę na każdym kroku.

PRZEKRACZALNOŚĆ:
═══════════════════════════════════════════════════════════════════

    is_passable(cell) to szybki filtr na komórce docelowej
    (bez liczenia pełnego kosztu krawędzi):
        LAND        - nie pod wodą i skończony koszt terenu
        NAVAL       - komórka wodna o skończonym koszcie morskim
        AMPHIBIOUS  - którykolwiek z powyższych

    Kanoniczny test to math.isfinite(cost).

UŻYCIE:
═══════════════════════════════════════════════════════════════════

    strategy = get_strategy(MovementDomain.NAVAL)
    cost = strategy.movement_cost(coast_cell, ocean_cell)   # 1.0

    # API modułowe (domyślne reguły z YAML)
    get_movement_cost_for_unit(a, b, "galley")
    is_passable_for_unit(cell, "marine")
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, TYPE_CHECKING
import math

from ..core.hex_cell import HexCell, TerrainType
from .domain import MovementDomain, UnitTypeRegistry

if TYPE_CHECKING:
    from ..core.config_loader import ConfigLoader


INF = math.inf


# ═══════════════════════════════════════════════════════════════════════════
# REGUŁY
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class MovementRules:
    """
    Niemutowalny zestaw reguł kosztów ruchu.

    Attributes:
        land_costs (Dict[TerrainType, float]): Koszt wejścia dla domeny LAND
        naval_costs (Dict[TerrainType, float]): Koszt wejścia dla domeny NAVAL
        sea_level (int): Elewacja poniżej której komórka jest pod wodą
        cliff_threshold (int): Minimalna |Δelewacji| tworząca klif
        climb_cost_per_level (float): Koszt za poziom pod górę
        river_crossing_cost (float): Koszt przekroczenia rzeki
        naval_water_fallback (float): Koszt wody bez wpisu w tabeli naval
    """
    land_costs: Dict[TerrainType, float]
    naval_costs: Dict[TerrainType, float]
    sea_level: int = 0
    cliff_threshold: int = 2
    climb_cost_per_level: float = 0.5
    river_crossing_cost: float = 1.0
    naval_water_fallback: float = 1.0

    @classmethod
    def from_config(
        cls,
        loader: Optional["ConfigLoader"] = None,
        overrides: Optional[Dict] = None,
    ) -> MovementRules:
        """
        Buduje reguły z defaults.yaml i terrain_costs.yaml.

        Args:
            loader: ConfigLoader (None = dane wbudowane w pakiet)
            overrides: {"movement": {...}, "terrain_costs": {"land": {...}}}

        Returns:
            MovementRules: Zwalidowane reguły

        Raises:
            ValueError: Jeśli tabela kosztów jest niekompletna lub niepoprawna
        """
        if loader is None:
            from ..core.config_loader import get_default_loader
            loader = get_default_loader()

        overrides = overrides or {}
        movement = loader.get_movement_config(overrides.get("movement"))
        tables = loader.get_terrain_costs(overrides.get("terrain_costs"))

        rules = cls(
            land_costs=_parse_cost_table("land", tables.get("land", {})),
            naval_costs=_parse_cost_table("naval", tables.get("naval", {})),
            sea_level=int(movement.get("sea_level", 0)),
            cliff_threshold=int(movement.get("cliff_threshold", 2)),
            climb_cost_per_level=float(movement.get("climb_cost_per_level", 0.5)),
            river_crossing_cost=float(movement.get("river_crossing_cost", 1.0)),
            naval_water_fallback=float(movement.get("naval_water_fallback", 1.0)),
        )
        rules.check_precision(int(loader.get_search_config().get("precision", 10)))
        return rules

    def is_underwater(self, cell: HexCell) -> bool:
        return cell.elevation < self.sea_level

    def check_precision(self, precision: int) -> None:
        """
        Sprawdza, czy kubełki BucketQueue o szerokości 1/precision
        rozróżniają każdy możliwy krok kosztu.

        Wyszukiwanie zamyka komórkę przy pierwszym zdjęciu z frontu, więc
        dwa koszty w tym samym kubełku mogłyby wyjść w złej kolejności.
        Każdy skończony koszt pomnożony przez precision musi być liczbą
        całkowitą, a precision >= 2.

        Raises:
            ValueError: Jeśli precision jest za gruba dla tych reguł
        """
        if precision < 2:
            raise ValueError(f"Search precision must be >= 2, got {precision}")

        steps = {
            "climb_cost_per_level": self.climb_cost_per_level,
            "river_crossing_cost": self.river_crossing_cost,
            "naval_water_fallback": self.naval_water_fallback,
        }
        for terrain, cost in self.land_costs.items():
            steps[f"land.{terrain.value}"] = cost
        for terrain, cost in self.naval_costs.items():
            steps[f"naval.{terrain.value}"] = cost

        for name, cost in steps.items():
            if not math.isfinite(cost):
                continue
            scaled = cost * precision
            if abs(scaled - round(scaled)) > _PRECISION_EPSILON:
                raise ValueError(
                    f"Cost {name}={cost} is not a multiple of 1/{precision}; "
                    f"raise search precision or round the cost"
                )


# Tolerancja na szum zmiennoprzecinkowy (np. 0.1 * 3)
_PRECISION_EPSILON = 1e-9


def _parse_cost_table(name: str, raw: Dict) -> Dict[TerrainType, float]:
    """
    Parsuje i waliduje tabelę kosztów z YAML.

    Każdy teren musi mieć wpis, a każdy koszt skończony musi być >= 1.0
    (najmniejszy krok nie może być tańszy niż jedna jednostka heurystyki).
    """
    table: Dict[TerrainType, float] = {}
    for key, value in raw.items():
        terrain = TerrainType.parse(str(key))
        cost = float(value)
        if math.isnan(cost) or cost < 1.0:
            raise ValueError(
                f"Invalid {name} cost for '{terrain.value}': {value} "
                f"(must be >= 1.0 or .inf)"
            )
        table[terrain] = cost

    missing = [t.value for t in TerrainType if t not in table]
    if missing:
        raise ValueError(f"Missing {name} costs for terrain: {missing}")

    return table


_default_rules: Optional[MovementRules] = None


def get_default_rules() -> MovementRules:
    """Reguły z plików wbudowanych w pakiet (wczytywane raz)."""
    global _default_rules
    if _default_rules is None:
        _default_rules = MovementRules.from_config()
    return _default_rules


# ═══════════════════════════════════════════════════════════════════════════
# STRATEGIE
# ═══════════════════════════════════════════════════════════════════════════

class MovementStrategy(ABC):
    """
    Bazowa klasa strategii kosztu ruchu dla jednej domeny.

    Strategie są bezstanowe (poza niemutowalnymi regułami), więc jedna
    instancja może obsługiwać równoległe zapytania.

    Attributes:
        rules: Reguły kosztów
    """
    domain: MovementDomain

    def __init__(self, rules: Optional[MovementRules] = None):
        self.rules = rules or get_default_rules()

    @abstractmethod
    def movement_cost(self, from_cell: HexCell, to_cell: HexCell) -> float:
        """
        Koszt wejścia z `from_cell` na sąsiednią `to_cell`.

        Returns:
            float: Koszt (>= 1.0) lub inf jeśli ruch niemożliwy
        """
        pass

    @abstractmethod
    def is_passable(self, cell: HexCell) -> bool:
        """Czy na komórkę można w ogóle wejść w tej domenie."""
        pass

    def can_move_between(self, from_cell: HexCell, to_cell: HexCell) -> bool:
        """Czy ruch między sąsiednimi komórkami jest możliwy."""
        return math.isfinite(self.movement_cost(from_cell, to_cell))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class LandMovementStrategy(MovementStrategy):
    """Jednostki lądowe: teren, elewacja (klify, podjazdy) i rzeki."""
    domain = MovementDomain.LAND

    def movement_cost(self, from_cell: HexCell, to_cell: HexCell) -> float:
        rules = self.rules

        # Woda jest nieprzekraczalna dla lądu
        if rules.is_underwater(to_cell):
            return INF

        cost = rules.land_costs.get(to_cell.terrain, INF)
        if not math.isfinite(cost):
            return INF

        elev_diff = to_cell.elevation - from_cell.elevation

        # Klif
        if abs(elev_diff) >= rules.cliff_threshold:
            return INF

        # Pod górę kosztuje więcej, w dół nie
        if elev_diff > 0:
            cost += elev_diff * rules.climb_cost_per_level

        if crosses_river(from_cell, to_cell):
            cost += rules.river_crossing_cost

        return cost

    def is_passable(self, cell: HexCell) -> bool:
        if self.rules.is_underwater(cell):
            return False
        return math.isfinite(self.rules.land_costs.get(cell.terrain, INF))


class NavalMovementStrategy(MovementStrategy):
    """Jednostki morskie: tylko woda (pod poziomem morza, ocean, wybrzeże)."""
    domain = MovementDomain.NAVAL

    def _is_water(self, cell: HexCell) -> bool:
        return self.rules.is_underwater(cell) or cell.terrain.is_water

    def _entry_cost(self, cell: HexCell) -> float:
        """Koszt wejścia na komórkę (inf dla lądu i wody wyłączonej w tabeli)."""
        if not self._is_water(cell):
            return INF

        cost = self.rules.naval_costs.get(cell.terrain, INF)

        # Teren bez kosztu morskiego, ale komórka jest pod wodą
        if not math.isfinite(cost) and self.rules.is_underwater(cell):
            cost = self.rules.naval_water_fallback

        return cost

    def movement_cost(self, from_cell: HexCell, to_cell: HexCell) -> float:
        return self._entry_cost(to_cell)

    def is_passable(self, cell: HexCell) -> bool:
        return math.isfinite(self._entry_cost(cell))


class AmphibiousMovementStrategy(MovementStrategy):
    """
    Jednostki amfibijne: tańsza z opcji land / naval na każdej krawędzi.

    Jednostka nie jest przypisana do jednej domeny na całą ścieżkę.
    """
    domain = MovementDomain.AMPHIBIOUS

    def __init__(self, rules: Optional[MovementRules] = None):
        super().__init__(rules)
        self.land = LandMovementStrategy(self.rules)
        self.naval = NavalMovementStrategy(self.rules)

    def movement_cost(self, from_cell: HexCell, to_cell: HexCell) -> float:
        return min(
            self.land.movement_cost(from_cell, to_cell),
            self.naval.movement_cost(from_cell, to_cell),
        )

    def is_passable(self, cell: HexCell) -> bool:
        return self.land.is_passable(cell) or self.naval.is_passable(cell)


def crosses_river(from_cell: HexCell, to_cell: HexCell) -> bool:
    """
    Czy krawędź między sąsiednimi komórkami przecina rzekę.

    Rzeka leży na krawędzi, jeśli `from` ma rzekę wypływającą w stronę `to`
    albo `to` ma rzekę wypływającą w stronę `from`.
    """
    if not from_cell.has_river and not to_cell.has_river:
        return False

    direction = from_cell.coord.direction_to(to_cell.coord)
    if direction is None:
        return False

    return (
        from_cell.has_river_toward(direction)
        or to_cell.has_river_toward(direction.opposite())
    )


# ═══════════════════════════════════════════════════════════════════════════
# REGISTRY
# ═══════════════════════════════════════════════════════════════════════════

# Registry strategii - musi pokrywać KAŻDĄ wartość MovementDomain
STRATEGY_REGISTRY: Dict[MovementDomain, type] = {
    MovementDomain.LAND: LandMovementStrategy,
    MovementDomain.NAVAL: NavalMovementStrategy,
    MovementDomain.AMPHIBIOUS: AmphibiousMovementStrategy,
}


def get_strategy(
    domain: MovementDomain,
    rules: Optional[MovementRules] = None,
) -> MovementStrategy:
    """
    Tworzy strategię kosztów dla domeny.

    Args:
        domain: Domena ruchu
        rules: Reguły (None = domyślne z YAML)

    Returns:
        MovementStrategy: Instancja strategii

    Raises:
        ValueError: Jeśli domena nie ma strategii
    """
    strategy_class = STRATEGY_REGISTRY.get(domain)

    if strategy_class is None:
        raise ValueError(f"Unknown movement domain: {domain}. "
                         f"Available: {list(STRATEGY_REGISTRY.keys())}")

    return strategy_class(rules)


# ═══════════════════════════════════════════════════════════════════════════
# API MODUŁOWE (domyślne reguły i rejestr typów)
# ═══════════════════════════════════════════════════════════════════════════

_default_strategies: Dict[MovementDomain, MovementStrategy] = {}
_default_unit_types: Optional[UnitTypeRegistry] = None


def _default_strategy(domain: MovementDomain) -> MovementStrategy:
    strategy = _default_strategies.get(domain)
    if strategy is None:
        strategy = get_strategy(domain)
        _default_strategies[domain] = strategy
    return strategy


def get_default_unit_types() -> UnitTypeRegistry:
    """Rejestr typów jednostek z unit_types.yaml (wczytywany raz)."""
    global _default_unit_types
    if _default_unit_types is None:
        _default_unit_types = UnitTypeRegistry.from_config()
    return _default_unit_types


def get_land_movement_cost(from_cell: HexCell, to_cell: HexCell) -> float:
    """Koszt ruchu dla jednostki lądowej."""
    return _default_strategy(MovementDomain.LAND).movement_cost(from_cell, to_cell)


def get_naval_movement_cost(from_cell: HexCell, to_cell: HexCell) -> float:
    """Koszt ruchu dla jednostki morskiej."""
    return _default_strategy(MovementDomain.NAVAL).movement_cost(from_cell, to_cell)


def get_movement_cost_for_domain(
    from_cell: HexCell,
    to_cell: HexCell,
    domain: MovementDomain,
) -> float:
    """Koszt ruchu dla podanej domeny."""
    return _default_strategy(domain).movement_cost(from_cell, to_cell)


def get_movement_cost_for_unit(
    from_cell: HexCell,
    to_cell: HexCell,
    unit_type: str,
    registry: Optional[UnitTypeRegistry] = None,
) -> float:
    """
    Koszt ruchu dla typu jednostki.

    Nieznany typ jednostki nie może się nigdzie ruszyć (inf).
    """
    domain = (registry or get_default_unit_types()).resolve_domain(unit_type)
    if domain is None:
        return INF
    return get_movement_cost_for_domain(from_cell, to_cell, domain)


def get_movement_cost(from_cell: HexCell, to_cell: HexCell) -> float:
    """Koszt ruchu (legacy - zakłada jednostkę lądową)."""
    return get_land_movement_cost(from_cell, to_cell)


def is_passable_for_domain(cell: HexCell, domain: MovementDomain) -> bool:
    return _default_strategy(domain).is_passable(cell)


def is_passable_for_unit(
    cell: HexCell,
    unit_type: str,
    registry: Optional[UnitTypeRegistry] = None,
) -> bool:
    """Czy typ jednostki może wejść na komórkę (nieznany typ -> False)."""
    domain = (registry or get_default_unit_types()).resolve_domain(unit_type)
    if domain is None:
        return False
    return is_passable_for_domain(cell, domain)


def is_passable(cell: HexCell) -> bool:
    """Czy komórka jest przekraczalna (legacy - zakłada jednostkę lądową)."""
    return is_passable_for_domain(cell, MovementDomain.LAND)


def can_move_between(
    from_cell: HexCell,
    to_cell: HexCell,
    domain: MovementDomain = MovementDomain.LAND,
) -> bool:
    """Czy ruch między sąsiednimi komórkami jest możliwy."""
    return _default_strategy(domain).can_move_between(from_cell, to_cell)
