"""Tests for the resource economy engine.

Covers:
- can_afford / spend_resources / add_resources with partial cost maps
- trade_resources at the default and faction ratios
- production and upkeep lookup tables
- population cube placement and removal at the track bounds
- influence disk movement and upkeep recalculation
- calculate_production / execute_upkeep including the money shortfall
- reset_influence_after_round
- colony ship pool
- validate_economy and disk / ship conservation across operations
"""

from dataclasses import replace

import pytest

from eclipse_engine.engine.economy import (
    DEFAULT_STARTING_ECONOMY,
    INFLUENCE_UPKEEP_TABLE,
    POPULATION_PRODUCTION_TABLE,
    ColonyShips,
    ResourceType,
    Resources,
    add_bonus_colony_ship,
    add_bonus_influence,
    add_resources,
    calculate_production,
    can_afford,
    create_economy,
    execute_upkeep,
    get_available_colony_ships,
    get_production_value,
    get_upkeep_cost,
    place_influence_on_action,
    place_influence_on_sector,
    place_population_cube,
    refresh_colony_ships,
    remove_population_cube,
    reset_influence_after_round,
    return_influence_from_action,
    return_influence_from_sector,
    spend_resources,
    trade_resources,
    use_colony_ship,
    validate_colony_ships,
    validate_economy,
)
from eclipse_engine.exceptions import (
    InsufficientResources,
    InvalidTrade,
    RuleViolation,
    TrackExhausted,
)


def _economy(money: int = 0, science: int = 0, materials: int = 0, **kwargs):
    return create_economy(Resources(money=money, science=science, materials=materials), **kwargs)


def _with_money_cubes(economy, deployed: int):
    for _ in range(deployed):
        economy = place_population_cube(economy, ResourceType.money)
    return economy


def _with_disks_on_actions(economy, count: int):
    for _ in range(count):
        economy = place_influence_on_action(economy)
    return economy


# ---------------------------------------------------------------------------
# Resource storage
# ---------------------------------------------------------------------------

class TestResourceStorage:
    def test_can_afford_exact_amount(self):
        economy = _economy(money=10, science=5, materials=3)
        assert can_afford(economy, {"money": 10}) is True
        assert can_afford(economy, {"money": 11}) is False

    def test_can_afford_omitted_resources_count_as_zero(self):
        economy = _economy(money=1)
        assert can_afford(economy, {}) is True
        assert can_afford(economy, {ResourceType.science: 0}) is True

    def test_spend_partial_cost(self):
        economy = _economy(money=10, science=5, materials=3)
        spent = spend_resources(economy, {"money": 3, "materials": 2})
        assert spent.resources == Resources(money=7, science=5, materials=1)

    def test_spend_does_not_modify_input(self):
        economy = _economy(money=10, science=5, materials=3)
        spend_resources(economy, {"money": 3})
        assert economy.resources.money == 10

    def test_spend_more_than_stored_raises(self):
        economy = _economy(money=2)
        with pytest.raises(InsufficientResources):
            spend_resources(economy, {"money": 3})

    def test_can_afford_negative_amount_is_false(self):
        assert can_afford(_economy(money=5), {"money": -1}) is False

    def test_negative_cost_rejected(self):
        with pytest.raises(RuleViolation):
            spend_resources(_economy(money=5), {"money": -1})

    def test_add_resources(self):
        economy = add_resources(_economy(money=1), {"science": 4, "materials": 2})
        assert economy.resources == Resources(money=1, science=4, materials=2)


# ---------------------------------------------------------------------------
# Trading
# ---------------------------------------------------------------------------

class TestTrade:
    def test_trade_at_default_ratio(self):
        economy = trade_resources(_economy(money=10), "money", "science", 2)
        assert economy.resources.money == 6
        assert economy.resources.science == 2

    def test_trade_at_faction_ratio(self):
        economy = trade_resources(
            _economy(materials=9, trade_ratio=3), ResourceType.materials, ResourceType.money, 3
        )
        assert economy.resources.materials == 0
        assert economy.resources.money == 3

    def test_trade_same_resource_rejected(self):
        with pytest.raises(InvalidTrade):
            trade_resources(_economy(money=10), "money", "money", 1)

    def test_trade_non_positive_amount_rejected(self):
        with pytest.raises(InvalidTrade):
            trade_resources(_economy(money=10), "money", "science", 0)

    def test_trade_insufficient_source(self):
        with pytest.raises(InsufficientResources):
            trade_resources(_economy(money=3), "money", "science", 2)

    def test_invalid_trade_is_a_rule_violation(self):
        with pytest.raises(RuleViolation) as exc:
            trade_resources(_economy(money=10), "science", "science", 1)
        assert "itself" in exc.value.reason


# ---------------------------------------------------------------------------
# Population & production
# ---------------------------------------------------------------------------

class TestPopulation:
    def test_production_table_endpoints(self):
        assert get_production_value(13) == 0
        assert get_production_value(0) == 13

    def test_production_table_non_increasing(self):
        values = [get_production_value(i) for i in range(14)]
        assert all(a >= b for a, b in zip(values, values[1:]))
        assert len(POPULATION_PRODUCTION_TABLE) == 14

    def test_production_out_of_range_is_zero(self):
        assert get_production_value(-1) == 0
        assert get_production_value(14) == 0

    def test_place_cube_raises_production(self):
        economy = place_population_cube(DEFAULT_STARTING_ECONOMY, "science")
        track = economy.track(ResourceType.science)
        assert track.cubes_remaining == 12
        assert track.production_value == 1

    def test_place_then_remove_restores_track(self):
        economy = _with_money_cubes(DEFAULT_STARTING_ECONOMY, 4)
        before = economy.track(ResourceType.money)
        after = remove_population_cube(
            place_population_cube(economy, ResourceType.money), ResourceType.money
        ).track(ResourceType.money)
        assert after == before

    def test_place_with_no_cubes_left_raises(self):
        economy = _with_money_cubes(DEFAULT_STARTING_ECONOMY, 13)
        assert economy.track(ResourceType.money).production_value == 13
        with pytest.raises(TrackExhausted):
            place_population_cube(economy, ResourceType.money)

    def test_remove_from_full_track_raises(self):
        with pytest.raises(TrackExhausted):
            remove_population_cube(DEFAULT_STARTING_ECONOMY, ResourceType.materials)


# ---------------------------------------------------------------------------
# Influence disks
# ---------------------------------------------------------------------------

class TestInfluence:
    def test_upkeep_table_literal_values(self):
        assert INFLUENCE_UPKEEP_TABLE == (
            30, 25, 21, 17, 16, 14, 13, 11, 10, 8, 6, 5, 3, 0, 0, 0, 0,
        )

    def test_upkeep_table_non_increasing(self):
        values = [get_upkeep_cost(i) for i in range(17)]
        assert all(a >= b for a, b in zip(values, values[1:]))
        assert get_upkeep_cost(0) == 30
        assert all(get_upkeep_cost(i) == 0 for i in range(13, 17))

    def test_upkeep_out_of_range_is_maximum(self):
        assert get_upkeep_cost(-1) == 30
        assert get_upkeep_cost(17) == 30

    def test_place_on_action_from_default(self):
        economy = place_influence_on_action(DEFAULT_STARTING_ECONOMY)
        assert economy.influence.on_track == 12
        assert economy.influence.on_actions == 1
        assert economy.influence.upkeep_cost == 3

    def test_place_on_sector_and_return(self):
        economy = place_influence_on_sector(DEFAULT_STARTING_ECONOMY)
        assert economy.influence.on_sectors == 1
        economy = return_influence_from_sector(economy)
        assert economy.influence == DEFAULT_STARTING_ECONOMY.influence

    def test_empty_track_raises(self):
        economy = _with_disks_on_actions(DEFAULT_STARTING_ECONOMY, 13)
        assert economy.influence.upkeep_cost == 30
        with pytest.raises(TrackExhausted):
            place_influence_on_action(economy)
        with pytest.raises(TrackExhausted):
            place_influence_on_sector(economy)

    def test_return_from_empty_bucket_raises(self):
        with pytest.raises(TrackExhausted):
            return_influence_from_action(DEFAULT_STARTING_ECONOMY)
        with pytest.raises(TrackExhausted):
            return_influence_from_sector(DEFAULT_STARTING_ECONOMY)

    def test_bonus_influence(self):
        economy = add_bonus_influence(DEFAULT_STARTING_ECONOMY, 3)
        assert economy.influence.on_track == 16
        assert economy.influence.total_available == 16
        assert economy.influence.upkeep_cost == 0
        assert validate_economy(economy) == []

    def test_negative_bonus_rejected(self):
        with pytest.raises(RuleViolation):
            add_bonus_influence(DEFAULT_STARTING_ECONOMY, -1)


# ---------------------------------------------------------------------------
# Production & upkeep
# ---------------------------------------------------------------------------

class TestUpkeep:
    def test_calculate_production(self):
        economy = _with_money_cubes(_economy(), 3)
        economy = place_population_cube(economy, ResourceType.science)
        economy = _with_disks_on_actions(economy, 2)
        production = calculate_production(economy)
        assert production.money_income == 3
        assert production.science_income == 1
        assert production.materials_income == 0
        assert production.upkeep_cost == 5
        assert production.net_money == -2

    def test_execute_upkeep_with_shortfall(self):
        # 2 cubes deployed -> +2 money; 8 disks on track -> upkeep 10
        economy = _with_money_cubes(_economy(money=3), 2)
        economy = _with_disks_on_actions(economy, 5)
        assert economy.influence.upkeep_cost == 10

        result = execute_upkeep(economy)
        assert result.production.net_money == -8
        assert result.shortfall == 5
        assert result.economy.resources.money == 0

    def test_execute_upkeep_positive_net(self):
        economy = place_population_cube(_with_money_cubes(_economy(money=1), 5), "materials")
        result = execute_upkeep(economy)
        assert result.shortfall == 0
        assert result.economy.resources.money == 6
        assert result.economy.resources.materials == 1

    def test_science_and_materials_never_pay_upkeep(self):
        economy = _with_disks_on_actions(_economy(science=4, materials=4), 6)
        result = execute_upkeep(economy)
        assert result.economy.resources.science == 4
        assert result.economy.resources.materials == 4

    def test_reset_influence_keeps_sector_disks(self):
        economy = _with_disks_on_actions(DEFAULT_STARTING_ECONOMY, 3)
        economy = place_influence_on_sector(economy)
        economy = replace(economy, colony_ships=use_colony_ship(economy.colony_ships))

        reset = reset_influence_after_round(economy)
        assert reset.influence.on_actions == 0
        assert reset.influence.on_sectors == 1
        assert reset.influence.on_track == 12
        assert reset.influence.upkeep_cost == 3
        assert reset.colony_ships.available == reset.colony_ships.total


# ---------------------------------------------------------------------------
# Colony ships
# ---------------------------------------------------------------------------

class TestColonyShips:
    def test_use_and_refresh(self):
        ships = use_colony_ship(ColonyShips())
        assert get_available_colony_ships(ships) == 2
        assert ships.used == 1
        assert refresh_colony_ships(ships) == ColonyShips()

    def test_use_with_none_available_raises(self):
        ships = ColonyShips(total=1, available=0, used=1)
        with pytest.raises(TrackExhausted):
            use_colony_ship(ships)

    def test_bonus_ship(self):
        ships = add_bonus_colony_ship(use_colony_ship(ColonyShips()))
        assert ships == ColonyShips(total=4, available=3, used=1)

    def test_validate_detects_mismatch(self):
        errors = validate_colony_ships(ColonyShips(total=3, available=3, used=1))
        assert any("mismatch" in e for e in errors)


# ---------------------------------------------------------------------------
# Invariants
# ---------------------------------------------------------------------------

class TestInvariants:
    def test_default_economy_is_valid(self):
        assert validate_economy(DEFAULT_STARTING_ECONOMY) == []

    def test_conservation_across_operations(self):
        economy = _economy(money=20, science=5, materials=5)
        steps = [
            place_influence_on_action,
            place_influence_on_sector,
            place_influence_on_action,
            return_influence_from_sector,
            lambda e: place_population_cube(e, "money"),
            lambda e: trade_resources(e, "money", "materials", 2),
            lambda e: add_bonus_influence(e, 1),
            lambda e: execute_upkeep(e).economy,
            reset_influence_after_round,
        ]
        for step in steps:
            economy = step(economy)
            influence = economy.influence
            assert (
                influence.on_track + influence.on_actions + influence.on_sectors
                == influence.total_available
            )
            ships = economy.colony_ships
            assert ships.available + ships.used == ships.total
            assert validate_economy(economy) == []

    def test_validate_reports_negative_resources(self):
        economy = create_economy(Resources(money=-1))
        assert "Money cannot be negative" in validate_economy(economy)
