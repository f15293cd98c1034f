"""
Movement module - domeny ruchu i koszty kroków.

Zawiera:
- MovementDomain: LAND / NAVAL / AMPHIBIOUS
- UnitTypeRegistry: Typ jednostki -> domena
- MovementRules: Tabele kosztów i parametry z YAML
- MovementStrategy: Strategie kosztów per domena (STRATEGY_REGISTRY)
"""

from .domain import MovementDomain, UnitTypeInfo, UnitTypeRegistry
from .costs import (
    INF,
    MovementRules,
    MovementStrategy,
    LandMovementStrategy,
    NavalMovementStrategy,
    AmphibiousMovementStrategy,
    STRATEGY_REGISTRY,
    get_strategy,
    crosses_river,
    get_land_movement_cost,
    get_naval_movement_cost,
    get_movement_cost_for_domain,
    get_movement_cost_for_unit,
    get_movement_cost,
    is_passable_for_domain,
    is_passable_for_unit,
    is_passable,
    can_move_between,
)

__all__ = [
    "MovementDomain", "UnitTypeInfo", "UnitTypeRegistry",
    "INF", "MovementRules", "MovementStrategy",
    "LandMovementStrategy", "NavalMovementStrategy", "AmphibiousMovementStrategy",
    "STRATEGY_REGISTRY", "get_strategy", "crosses_river",
    "get_land_movement_cost", "get_naval_movement_cost",
    "get_movement_cost_for_domain", "get_movement_cost_for_unit", "get_movement_cost",
    "is_passable_for_domain", "is_passable_for_unit", "is_passable", "can_move_between",
]
