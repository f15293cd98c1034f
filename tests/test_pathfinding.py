"""
Testy dla Pathfindera (A* i zasięg ruchu).

Poza scenariuszami ręcznymi porównuje wyniki z referencyjnym
Bellmanem-Fordem na małych losowych siatkach (stałe ziarno).
"""

import math
import random
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from hexpath.core.hex_coord import HexCoord, HexDirection
from hexpath.core.hex_cell import HexCell, TerrainType
from hexpath.core.hex_grid import HexGrid
from hexpath.movement.costs import INF, MovementRules, get_strategy
from hexpath.movement.domain import MovementDomain, UnitTypeInfo, UnitTypeRegistry
from hexpath.pathfinding.occupancy import CellOccupancy, MappingOccupancy
from hexpath.pathfinding.pathfinder import (
    Pathfinder, PathOptions, PathResult, find_path, get_reachable_cells,
)


# ═══════════════════════════════════════════════════════════════════════════
# HELPERY
# ═══════════════════════════════════════════════════════════════════════════

def make_row(*terrains: TerrainType, elevations=None) -> HexGrid:
    """Siatka 1 x N: komórki (0, 0) ... (N-1, 0)."""
    elevations = elevations or [0] * len(terrains)
    cells = [
        HexCell.at(q, 0, elevation=elev, terrain=terrain)
        for q, (terrain, elev) in enumerate(zip(terrains, elevations))
    ]
    return HexGrid.from_cells(len(cells), 1, cells)


def random_grid(seed: int, width: int = 6, height: int = 5) -> HexGrid:
    """Losowa siatka z terenem, elewacją i rzekami."""
    rng = random.Random(seed)
    terrains = [
        TerrainType.PLAINS, TerrainType.PLAINS, TerrainType.FOREST,
        TerrainType.HILLS, TerrainType.MOUNTAINS, TerrainType.OCEAN,
        TerrainType.COAST, TerrainType.SNOW,
    ]
    cells = []
    for row in range(height):
        for col in range(width):
            rivers = [d for d in HexDirection if rng.random() < 0.15]
            cells.append(HexCell(
                coord=HexCoord.from_offset(col, row),
                elevation=rng.choice([-1, 0, 0, 1, 1, 2]),
                terrain=rng.choice(terrains),
                river_directions=frozenset(rivers),
            ))
    return HexGrid.from_cells(width, height, cells)


def bellman_ford(grid: HexGrid, start: HexCell, domain: MovementDomain, rules=None):
    """Referencyjne najtańsze koszty ze startu do każdej komórki."""
    strategy = get_strategy(domain, rules)
    cells = grid.all_cells()
    dist = {cell: INF for cell in cells}
    dist[start] = 0.0

    for _ in range(len(cells)):
        changed = False
        for cell in cells:
            if not math.isfinite(dist[cell]):
                continue
            for neighbor in grid.neighbors_of(cell):
                candidate = dist[cell] + strategy.movement_cost(cell, neighbor)
                if candidate < dist[neighbor]:
                    dist[neighbor] = candidate
                    changed = True
        if not changed:
            break

    return dist


def assert_valid_path(result: PathResult, start: HexCell, end: HexCell):
    assert result.path[0] is start
    assert result.path[-1] is end
    for a, b in zip(result.path, result.path[1:]):
        assert a.coord.distance(b.coord) == 1


# ═══════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def plains_row():
    return make_row(TerrainType.PLAINS, TerrainType.PLAINS, TerrainType.PLAINS)


@pytest.fixture
def open_grid():
    return HexGrid.filled(7, 7)


# ═══════════════════════════════════════════════════════════════════════════
# TEST: SCENARIUSZE PODSTAWOWE
# ═══════════════════════════════════════════════════════════════════════════

def test_straight_row(plains_row):
    pathfinder = Pathfinder(plains_row)
    result = pathfinder.find_path(HexCoord(0, 0), HexCoord(2, 0))

    assert result.reachable
    assert result.cost == 2.0
    assert [c.coord for c in result.path] == [HexCoord(0, 0), HexCoord(1, 0), HexCoord(2, 0)]
    assert result.steps == 2
    assert result.nodes_explored >= 3


def test_accepts_cells_and_coords(plains_row):
    pathfinder = Pathfinder(plains_row)
    start, end = plains_row.cell_at(0, 0), plains_row.cell_at(2, 0)

    by_cell = pathfinder.find_path(start, end)
    by_coord = pathfinder.find_path(start.coord, end.coord)

    assert by_cell.path == by_coord.path
    assert_valid_path(by_cell, start, end)


def test_mountain_blocks_row():
    grid = make_row(TerrainType.PLAINS, TerrainType.MOUNTAINS, TerrainType.PLAINS)
    result = Pathfinder(grid).find_path(HexCoord(0, 0), HexCoord(2, 0))

    assert not result.reachable
    assert result.path == []
    assert result.cost == INF


def test_naval_coast_to_ocean():
    grid = make_row(TerrainType.COAST, TerrainType.OCEAN)
    pathfinder = Pathfinder(grid)

    naval = pathfinder.find_path(HexCoord(0, 0), HexCoord(1, 0), PathOptions(unit_type="galley"))
    assert naval.reachable
    assert naval.cost == 1.0

    land = pathfinder.find_path(HexCoord(0, 0), HexCoord(1, 0), PathOptions(unit_type="infantry"))
    assert not land.reachable
    assert land.cost == INF


def test_same_start_and_end():
    grid = make_row(TerrainType.MOUNTAINS)
    cell = grid.cell_at(0, 0)
    result = Pathfinder(grid).find_path(cell, cell)

    assert result.path == [cell]
    assert result.cost == 0.0
    assert result.reachable
    assert result.nodes_explored == 0


def test_missing_cell_is_unreachable(plains_row):
    result = Pathfinder(plains_row).find_path(HexCoord(0, 0), HexCoord(9, 9))
    assert not result.reachable
    assert result.path == []


def test_impassable_goal_short_circuits():
    grid = make_row(TerrainType.PLAINS, TerrainType.PLAINS, TerrainType.OCEAN)
    result = Pathfinder(grid).find_path(HexCoord(0, 0), HexCoord(2, 0))

    assert not result.reachable
    assert result.nodes_explored == 0


def test_cliff_blocks_but_detour_found():
    grid = HexGrid.filled(3, 2)
    grid.set_cell(HexCell.at(1, 0, elevation=2))
    result = Pathfinder(grid).find_path(HexCoord(0, 0), HexCoord(2, 0))

    assert result.reachable
    assert HexCoord(1, 0) not in [c.coord for c in result.path]
    assert result.cost == 3.0


def test_prefers_cheaper_terrain_over_shorter_path():
    grid = HexGrid.filled(3, 2)
    grid.set_cell(HexCell.at(1, 0, terrain=TerrainType.SNOW))
    result = Pathfinder(grid).find_path(HexCoord(0, 0), HexCoord(2, 0))

    # prosto przez śnieg: 2.5 + 1.0, dookoła: 3 x 1.0
    assert result.cost == 3.0
    assert len(result.path) == 4


def test_pathfinder_requires_grid():
    with pytest.raises(ValueError):
        Pathfinder(None)


# ═══════════════════════════════════════════════════════════════════════════
# TEST: DOMENY I TYPY JEDNOSTEK
# ═══════════════════════════════════════════════════════════════════════════

def test_amphibious_crosses_water():
    grid = make_row(TerrainType.PLAINS, TerrainType.OCEAN, TerrainType.PLAINS)
    pathfinder = Pathfinder(grid)

    assert not pathfinder.find_path(HexCoord(0, 0), HexCoord(2, 0)).reachable

    result = pathfinder.find_path(HexCoord(0, 0), HexCoord(2, 0), PathOptions(unit_type="marine"))
    assert result.reachable
    assert result.cost == 2.0


def test_explicit_domain_wins_over_unit_type():
    grid = make_row(TerrainType.COAST, TerrainType.OCEAN)
    options = PathOptions(unit_type="infantry", domain=MovementDomain.NAVAL)

    assert Pathfinder(grid).find_path(HexCoord(0, 0), HexCoord(1, 0), options).reachable


def test_unknown_unit_type_is_unreachable(plains_row):
    pathfinder = Pathfinder(plains_row)
    options = PathOptions(unit_type="dragon")

    result = pathfinder.find_path(HexCoord(0, 0), HexCoord(2, 0), options)
    assert not result.reachable
    assert result.cost == INF

    start = plains_row.cell_at(0, 0)
    assert pathfinder.get_reachable_cells(start, 5.0, options) == {start: 0.0}


def test_custom_unit_type_registry(plains_row):
    registry = UnitTypeRegistry()
    registry.register(UnitTypeInfo("scout", "Scout", MovementDomain.LAND, 3.0))
    pathfinder = Pathfinder(plains_row, unit_types=registry)

    assert pathfinder.has_path(HexCoord(0, 0), HexCoord(2, 0), unit_type="scout")
    # typ z domyślnego YAML nie istnieje w tym rejestrze
    assert not pathfinder.has_path(HexCoord(0, 0), HexCoord(2, 0), unit_type="infantry")


# ═══════════════════════════════════════════════════════════════════════════
# TEST: ZAJĘTOŚĆ
# ═══════════════════════════════════════════════════════════════════════════

def test_occupied_cell_blocks_row(plains_row):
    occupancy = MappingOccupancy({HexCoord(1, 0): "blocker"})
    pathfinder = Pathfinder(plains_row, occupancy)

    assert not pathfinder.has_path(HexCoord(0, 0), HexCoord(2, 0))
    assert pathfinder.has_path(HexCoord(0, 0), HexCoord(2, 0), ignore_occupants=True)


def test_occupied_goal_does_not_block(plains_row):
    """Cel ataku może być zajęty."""
    occupancy = MappingOccupancy({HexCoord(2, 0): "enemy"})
    result = Pathfinder(plains_row, occupancy).find_path(HexCoord(0, 0), HexCoord(2, 0))

    assert result.reachable
    assert result.cost == 2.0


def test_occupied_cell_forces_detour(open_grid):
    start = HexCoord.from_offset(1, 3)
    end = HexCoord.from_offset(5, 3)
    blockers = {c: f"unit_{i}" for i, c in enumerate(start.line_to(end)[1:-1])}
    pathfinder = Pathfinder(open_grid, MappingOccupancy(blockers))

    free = Pathfinder(open_grid).find_path(start, end)
    blocked = pathfinder.find_path(start, end)

    assert blocked.reachable
    assert blocked.cost > free.cost
    assert not any(c.coord in blockers for c in blocked.path)


def test_cell_occupancy_reads_grid(plains_row):
    plains_row.cell_at(1, 0).occupant = "blocker"
    pathfinder = Pathfinder(plains_row, CellOccupancy(plains_row))

    assert not pathfinder.has_path(HexCoord(0, 0), HexCoord(2, 0))


def test_reachable_skips_occupied(plains_row):
    occupancy = MappingOccupancy({HexCoord(1, 0): "blocker"})
    start = plains_row.cell_at(0, 0)

    reachable = Pathfinder(plains_row, occupancy).get_reachable_cells(start, 10.0)
    assert reachable == {start: 0.0}

    reachable = Pathfinder(plains_row, occupancy).get_reachable_cells(
        start, 10.0, PathOptions(ignore_occupants=True)
    )
    assert len(reachable) == 3


# ═══════════════════════════════════════════════════════════════════════════
# TEST: LIMITY KOSZTU
# ═══════════════════════════════════════════════════════════════════════════

def test_max_cost(plains_row):
    pathfinder = Pathfinder(plains_row)

    assert not pathfinder.find_path(HexCoord(0, 0), HexCoord(2, 0), PathOptions(max_cost=1.5)).reachable
    assert pathfinder.find_path(HexCoord(0, 0), HexCoord(2, 0), PathOptions(max_cost=2.0)).reachable


def test_reachable_budget(plains_row):
    pathfinder = Pathfinder(plains_row)
    start = plains_row.cell_at(0, 0)

    reachable = pathfinder.get_reachable_cells(start, 1.0)
    assert reachable == {start: 0.0, plains_row.cell_at(1, 0): 1.0}

    assert pathfinder.get_reachable_cells(start, 0.0) == {start: 0.0}


def test_reachable_disc_on_open_grid(open_grid):
    center = open_grid.get_cell(HexCoord.from_offset(3, 3))
    reachable = Pathfinder(open_grid).get_reachable_cells(center, 2.0)

    assert len(reachable) == 19
    for cell, cost in reachable.items():
        assert cost == center.coord.distance(cell.coord)


def test_reachable_missing_start(plains_row):
    assert Pathfinder(plains_row).get_reachable_cells(HexCoord(5, 5), 3.0) == {}


# ═══════════════════════════════════════════════════════════════════════════
# TEST: OPTYMALNOŚĆ (Bellman-Ford)
# ═══════════════════════════════════════════════════════════════════════════

@pytest.mark.parametrize("seed", range(6))
@pytest.mark.parametrize("domain", list(MovementDomain))
def test_find_path_matches_bellman_ford(seed, domain):
    grid = random_grid(seed)
    pathfinder = Pathfinder(grid)
    options = PathOptions(domain=domain)
    strategy = get_strategy(domain)
    start = grid.all_cells()[seed % len(grid)]
    expected = bellman_ford(grid, start, domain)

    for end in grid.all_cells():
        result = pathfinder.find_path(start, end, options)

        if end is start:
            assert result.cost == 0.0
            continue

        if math.isinf(expected[end]):
            assert not result.reachable
            assert result.path == []
        else:
            assert result.reachable
            assert result.cost == pytest.approx(expected[end])
            assert_valid_path(result, start, end)
            assert pathfinder.path_cost(result.path, domain) == pytest.approx(result.cost)
            assert strategy.is_passable(end)


@pytest.mark.parametrize("seed", range(6))
@pytest.mark.parametrize("domain", list(MovementDomain))
def test_reachable_matches_bellman_ford(seed, domain):
    grid = random_grid(seed)
    pathfinder = Pathfinder(grid)
    start = grid.all_cells()[(seed * 7) % len(grid)]
    budget = 4.0
    expected = bellman_ford(grid, start, domain)

    reachable = pathfinder.get_reachable_cells(start, budget, PathOptions(domain=domain))

    assert reachable[start] == 0.0
    assert set(reachable) == {c for c, d in expected.items() if d <= budget}
    for cell, cost in reachable.items():
        assert cost == pytest.approx(expected[cell])
        assert cost <= budget


# Koszty w krokach 0.1 - nadal dokładne przy precision = 10
FINE_GRAINED_OVERRIDES = {
    "movement": {"climb_cost_per_level": 0.3, "river_crossing_cost": 0.9},
    "terrain_costs": {
        "land": {"forest": 1.2, "hills": 1.7, "snow": 2.3},
        "naval": {"coast": 1.4},
    },
}


@pytest.mark.parametrize("seed", range(6))
@pytest.mark.parametrize("domain", list(MovementDomain))
def test_custom_costs_match_bellman_ford(seed, domain):
    rules = MovementRules.from_config(overrides=FINE_GRAINED_OVERRIDES)
    grid = random_grid(seed + 17)
    pathfinder = Pathfinder(grid, rules=rules)
    options = PathOptions(domain=domain)
    start = grid.all_cells()[(seed * 5) % len(grid)]
    expected = bellman_ford(grid, start, domain, rules)

    for end in grid.all_cells():
        result = pathfinder.find_path(start, end, options)
        if math.isinf(expected[end]):
            assert not result.reachable
        else:
            assert result.cost == pytest.approx(expected[end])

    # budżet poza siatką 0.1, żeby szum sumowania nie decydował o granicy
    budget = 4.05
    reachable = pathfinder.get_reachable_cells(start, budget, options)
    assert set(reachable) == {c for c, d in expected.items() if d <= budget}
    for cell, cost in reachable.items():
        assert cost == pytest.approx(expected[cell])


@pytest.mark.parametrize("seed", range(4))
@pytest.mark.parametrize("domain", list(MovementDomain))
def test_reachable_grows_with_budget(seed, domain):
    grid = random_grid(seed, width=7, height=6)
    pathfinder = Pathfinder(grid)
    options = PathOptions(domain=domain)
    start = grid.all_cells()[(seed * 11) % len(grid)]

    previous = {}
    for budget in [0.0, 1.0, 2.0, 3.5, 5.0, 8.0]:
        reachable = pathfinder.get_reachable_cells(start, budget, options)

        assert set(previous) <= set(reachable)
        for cell, cost in previous.items():
            assert reachable[cell] == cost
        previous = reachable


@pytest.mark.parametrize("seed", range(3))
def test_reachable_consistent_with_find_path(seed):
    grid = random_grid(seed)
    pathfinder = Pathfinder(grid)
    start = grid.all_cells()[0]
    budget = 3.5
    reachable = pathfinder.get_reachable_cells(start, budget)

    for end in grid.all_cells():
        result = pathfinder.find_path(start, end)
        in_budget = result.reachable and result.cost <= budget
        assert in_budget == (end in reachable)


def test_search_is_deterministic():
    grid = random_grid(42, width=8, height=8)
    start, end = grid.all_cells()[0], grid.all_cells()[-1]
    pathfinder = Pathfinder(grid)
    options = PathOptions(domain=MovementDomain.AMPHIBIOUS)

    first = pathfinder.find_path(start, end, options)
    second = pathfinder.find_path(start, end, options)

    assert first.path == second.path
    assert first.nodes_explored == second.nodes_explored


def test_search_does_not_mutate_grid():
    grid = random_grid(3)
    snapshot = [(c.coord, c.elevation, c.terrain, c.river_directions, c.occupant)
                for c in grid.all_cells()]

    pathfinder = Pathfinder(grid)
    pathfinder.find_path(grid.all_cells()[0], grid.all_cells()[-1])
    pathfinder.get_reachable_cells(grid.all_cells()[0], 5.0)

    assert snapshot == [(c.coord, c.elevation, c.terrain, c.river_directions, c.occupant)
                        for c in grid.all_cells()]


# ═══════════════════════════════════════════════════════════════════════════
# TEST: ZAPYTANIA POMOCNICZE
# ═══════════════════════════════════════════════════════════════════════════

def test_next_step(plains_row):
    pathfinder = Pathfinder(plains_row)

    assert pathfinder.next_step(HexCoord(0, 0), HexCoord(2, 0)) is plains_row.cell_at(1, 0)
    assert pathfinder.next_step(HexCoord(0, 0), HexCoord(0, 0)) is None


def test_next_step_no_path():
    grid = make_row(TerrainType.PLAINS, TerrainType.MOUNTAINS, TerrainType.PLAINS)
    assert Pathfinder(grid).next_step(HexCoord(0, 0), HexCoord(2, 0)) is None


def test_get_step_cost():
    grid = make_row(TerrainType.PLAINS, TerrainType.HILLS, TerrainType.OCEAN,
                    elevations=[0, 1, 0])
    pathfinder = Pathfinder(grid)
    a, b, c = grid.cell_at(0, 0), grid.cell_at(1, 0), grid.cell_at(2, 0)

    assert pathfinder.get_step_cost(a, b) == 2.5
    assert pathfinder.get_step_cost(a, c) == INF          # nie sąsiadują
    assert pathfinder.get_step_cost(b, c) == INF
    assert pathfinder.get_step_cost(b, c, unit_type="galley") == 1.0
    assert pathfinder.get_step_cost(a, b, unit_type="dragon") == INF


def test_path_cost(plains_row):
    pathfinder = Pathfinder(plains_row)
    a, b, c = (plains_row.cell_at(q, 0) for q in range(3))

    assert pathfinder.path_cost([a, b, c]) == 2.0
    assert pathfinder.path_cost([a]) == 0.0
    assert pathfinder.path_cost([]) == INF
    assert pathfinder.path_cost([a, c]) == INF
    assert pathfinder.path_cost([a, b], MovementDomain.NAVAL) == INF


def test_module_level_helpers(plains_row):
    result = find_path(plains_row, HexCoord(0, 0), HexCoord(2, 0), unit_type="cavalry")
    assert result.cost == 2.0

    occupancy = MappingOccupancy({HexCoord(1, 0): "blocker"})
    assert not find_path(plains_row, HexCoord(0, 0), HexCoord(2, 0), occupancy).reachable

    reachable = get_reachable_cells(plains_row, HexCoord(0, 0), 2.0)
    assert sorted(reachable.values()) == [0.0, 1.0, 2.0]


@pytest.mark.parametrize("precision", [0, 1, 3, 5])
def test_precision_coarser_than_cost_step_rejected(plains_row, precision):
    # domyślne koszty idą krokami 0.5 - wymagają wielokrotności 2
    with pytest.raises(ValueError):
        Pathfinder(plains_row, precision=precision)


def test_precision_must_resolve_custom_costs(plains_row):
    rules = MovementRules.from_config(overrides=FINE_GRAINED_OVERRIDES)

    with pytest.raises(ValueError):
        Pathfinder(plains_row, rules=rules, precision=2)
    assert Pathfinder(plains_row, rules=rules, precision=20).precision == 20


def test_finer_precision_gives_same_result(plains_row):
    result = Pathfinder(plains_row, precision=20).find_path(HexCoord(0, 0), HexCoord(2, 0))
    assert result.cost == 2.0
