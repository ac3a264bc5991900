"""Resource economy engine for player economies in Eclipse: Second Dawn.

Every function here is a pure transform over one player's economy snapshot:
the input is never modified and a new snapshot is returned.

Bounds are enforced strictly. Spending, trading, placing or removing past a
bound raises a RuleViolation subclass instead of clamping. The one exception
is the money step of upkeep, which clamps at zero and reports the uncovered
amount as a shortfall.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Mapping

from eclipse_engine.exceptions import (
    InsufficientResources,
    InvalidTrade,
    RuleViolation,
    TrackExhausted,
)


class ResourceType(str, enum.Enum):
    money = "money"
    science = "science"
    materials = "materials"


# Index = cubes left on the population track, value = production per round.
# 13 cubes left (none deployed) produces nothing.
POPULATION_PRODUCTION_TABLE: tuple[int, ...] = (
    13, 12, 11, 10, 9, 8, 7, 6, 5, 4, 3, 2, 1, 0,
)
MAX_POPULATION_CUBES = len(POPULATION_PRODUCTION_TABLE) - 1

# Index = disks left on the influence track, value = money owed per round.
# Empirical values from the physical board, not a formula.
# Positions 14-16 hold bonus disks from technologies.
INFLUENCE_UPKEEP_TABLE: tuple[int, ...] = (
    30, 25, 21, 17, 16, 14, 13, 11, 10, 8, 6, 5, 3, 0,
    0, 0, 0,
)

DEFAULT_TRADE_RATIO = 2
DEFAULT_INFLUENCE_DISKS = 13
DEFAULT_COLONY_SHIPS = 3


# ---------------------------------------------------------------------------
# Snapshot types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Resources:
    money: int = 0
    science: int = 0
    materials: int = 0

    def get(self, resource: ResourceType | str) -> int:
        return getattr(self, ResourceType(resource).value)

    def as_dict(self) -> dict[str, int]:
        return {"money": self.money, "science": self.science, "materials": self.materials}


@dataclass(frozen=True)
class PopulationTrack:
    resource: ResourceType
    cubes_remaining: int = MAX_POPULATION_CUBES
    production_value: int = 0


@dataclass(frozen=True)
class InfluenceTrack:
    on_track: int = DEFAULT_INFLUENCE_DISKS
    on_actions: int = 0
    on_sectors: int = 0
    total_available: int = DEFAULT_INFLUENCE_DISKS
    upkeep_cost: int = 0


@dataclass(frozen=True)
class ColonyShips:
    total: int = DEFAULT_COLONY_SHIPS
    available: int = DEFAULT_COLONY_SHIPS
    used: int = 0


@dataclass(frozen=True)
class PlayerEconomy:
    resources: Resources
    population_tracks: Mapping[ResourceType, PopulationTrack]
    influence: InfluenceTrack
    colony_ships: ColonyShips
    trade_ratio: int = DEFAULT_TRADE_RATIO

    def track(self, resource: ResourceType | str) -> PopulationTrack:
        return self.population_tracks[ResourceType(resource)]


@dataclass(frozen=True)
class ProductionResult:
    money_income: int
    science_income: int
    materials_income: int
    upkeep_cost: int
    net_money: int


@dataclass(frozen=True)
class UpkeepResult:
    economy: PlayerEconomy
    production: ProductionResult
    shortfall: int


Cost = Mapping[ResourceType | str, int]


def create_economy(
    resources: Resources | None = None,
    influence_disks: int = DEFAULT_INFLUENCE_DISKS,
    colony_ships: int = DEFAULT_COLONY_SHIPS,
    trade_ratio: int = DEFAULT_TRADE_RATIO,
) -> PlayerEconomy:
    """Build a starting economy: every cube and disk on its track, all colony ships face up."""
    return PlayerEconomy(
        resources=resources or Resources(),
        population_tracks={r: PopulationTrack(resource=r) for r in ResourceType},
        influence=InfluenceTrack(
            on_track=influence_disks,
            total_available=influence_disks,
            upkeep_cost=get_upkeep_cost(influence_disks),
        ),
        colony_ships=ColonyShips(total=colony_ships, available=colony_ships, used=0),
        trade_ratio=trade_ratio,
    )


# ---------------------------------------------------------------------------
# Resource storage
# ---------------------------------------------------------------------------

def _normalize(amounts: Cost) -> dict[ResourceType, int]:
    normalized: dict[ResourceType, int] = {}
    for key, value in amounts.items():
        if value < 0:
            raise RuleViolation(f"Resource amounts cannot be negative: {key}={value}")
        normalized[ResourceType(key)] = value
    return normalized


def can_afford(economy: PlayerEconomy, cost: Cost) -> bool:
    """True if stored resources cover every amount in cost (omitted resources count as 0).

    A negative amount is never affordable.
    """
    return all(
        0 <= amount <= economy.resources.get(ResourceType(resource))
        for resource, amount in cost.items()
    )


def spend_resources(economy: PlayerEconomy, cost: Cost) -> PlayerEconomy:
    amounts = _normalize(cost)
    if not can_afford(economy, amounts):
        raise InsufficientResources(
            f"Cannot afford cost: need {_as_plain(cost)}, "
            f"have {economy.resources.as_dict()}"
        )
    current = economy.resources
    return replace(
        economy,
        resources=Resources(
            money=current.money - amounts.get(ResourceType.money, 0),
            science=current.science - amounts.get(ResourceType.science, 0),
            materials=current.materials - amounts.get(ResourceType.materials, 0),
        ),
    )


def add_resources(economy: PlayerEconomy, gain: Cost) -> PlayerEconomy:
    amounts = _normalize(gain)
    current = economy.resources
    return replace(
        economy,
        resources=Resources(
            money=current.money + amounts.get(ResourceType.money, 0),
            science=current.science + amounts.get(ResourceType.science, 0),
            materials=current.materials + amounts.get(ResourceType.materials, 0),
        ),
    )


def trade_resources(
    economy: PlayerEconomy,
    from_resource: ResourceType | str,
    to_resource: ResourceType | str,
    amount: int,
) -> PlayerEconomy:
    """Trade at the player's ratio.

    amount is how many units to RECEIVE; it costs amount * trade_ratio of
    from_resource.
    """
    source = ResourceType(from_resource)
    target = ResourceType(to_resource)
    if source == target:
        raise InvalidTrade("Cannot trade a resource for itself")
    if amount <= 0:
        raise InvalidTrade(f"Trade amount must be positive, got {amount}")

    cost = amount * economy.trade_ratio
    have = economy.resources.get(source)
    if have < cost:
        raise InsufficientResources(
            f"Cannot trade: need {cost} {source.value}, have {have}"
        )

    values = economy.resources.as_dict()
    values[source.value] -= cost
    values[target.value] += amount
    return replace(economy, resources=Resources(**values))


def _as_plain(cost: Cost) -> dict[str, int]:
    return {ResourceType(k).value: v for k, v in cost.items()}


# ---------------------------------------------------------------------------
# Population & production
# ---------------------------------------------------------------------------

def get_production_value(cubes_remaining: int) -> int:
    if cubes_remaining < 0 or cubes_remaining >= len(POPULATION_PRODUCTION_TABLE):
        return 0
    return POPULATION_PRODUCTION_TABLE[cubes_remaining]


def _with_track(economy: PlayerEconomy, resource: ResourceType, cubes_remaining: int) -> PlayerEconomy:
    tracks = dict(economy.population_tracks)
    tracks[resource] = PopulationTrack(
        resource=resource,
        cubes_remaining=cubes_remaining,
        production_value=get_production_value(cubes_remaining),
    )
    return replace(economy, population_tracks=tracks)


def place_population_cube(economy: PlayerEconomy, resource: ResourceType | str) -> PlayerEconomy:
    """Move one cube from the track onto a planet, raising production."""
    resource = ResourceType(resource)
    track = economy.track(resource)
    if track.cubes_remaining <= 0:
        raise TrackExhausted(f"No {resource.value} population cubes remaining to place")
    return _with_track(economy, resource, track.cubes_remaining - 1)


def remove_population_cube(economy: PlayerEconomy, resource: ResourceType | str) -> PlayerEconomy:
    """Return one cube to the track, e.g. when a sector is lost."""
    resource = ResourceType(resource)
    track = economy.track(resource)
    if track.cubes_remaining >= MAX_POPULATION_CUBES:
        raise TrackExhausted(f"All {resource.value} population cubes already on track")
    return _with_track(economy, resource, track.cubes_remaining + 1)


# ---------------------------------------------------------------------------
# Influence disks
# ---------------------------------------------------------------------------

def get_upkeep_cost(disks_on_track: int) -> int:
    if disks_on_track < 0 or disks_on_track >= len(INFLUENCE_UPKEEP_TABLE):
        return INFLUENCE_UPKEEP_TABLE[0]
    return INFLUENCE_UPKEEP_TABLE[disks_on_track]


def _move_disk(economy: PlayerEconomy, source: str, target: str, empty_message: str) -> PlayerEconomy:
    influence = economy.influence
    if getattr(influence, source) <= 0:
        raise TrackExhausted(empty_message)
    counts = {
        "on_track": influence.on_track,
        "on_actions": influence.on_actions,
        "on_sectors": influence.on_sectors,
    }
    counts[source] -= 1
    counts[target] += 1
    return replace(
        economy,
        influence=replace(
            influence,
            **counts,
            upkeep_cost=get_upkeep_cost(counts["on_track"]),
        ),
    )


def place_influence_on_action(economy: PlayerEconomy) -> PlayerEconomy:
    return _move_disk(economy, "on_track", "on_actions", "No influence disks available on track")


def place_influence_on_sector(economy: PlayerEconomy) -> PlayerEconomy:
    return _move_disk(economy, "on_track", "on_sectors", "No influence disks available on track")


def return_influence_from_action(economy: PlayerEconomy) -> PlayerEconomy:
    return _move_disk(economy, "on_actions", "on_track", "No influence disks on actions to return")


def return_influence_from_sector(economy: PlayerEconomy) -> PlayerEconomy:
    return _move_disk(economy, "on_sectors", "on_track", "No influence disks on sectors to return")


def add_bonus_influence(economy: PlayerEconomy, amount: int) -> PlayerEconomy:
    """Add disks granted by technology; they go onto the track."""
    if amount < 0:
        raise RuleViolation(f"Bonus influence cannot be negative, got {amount}")
    influence = economy.influence
    on_track = influence.on_track + amount
    return replace(
        economy,
        influence=replace(
            influence,
            on_track=on_track,
            total_available=influence.total_available + amount,
            upkeep_cost=get_upkeep_cost(on_track),
        ),
    )


# ---------------------------------------------------------------------------
# Upkeep
# ---------------------------------------------------------------------------

def calculate_production(economy: PlayerEconomy) -> ProductionResult:
    tracks = economy.population_tracks
    money_income = tracks[ResourceType.money].production_value
    upkeep_cost = economy.influence.upkeep_cost
    return ProductionResult(
        money_income=money_income,
        science_income=tracks[ResourceType.science].production_value,
        materials_income=tracks[ResourceType.materials].production_value,
        upkeep_cost=upkeep_cost,
        net_money=money_income - upkeep_cost,
    )


def execute_upkeep(economy: PlayerEconomy) -> UpkeepResult:
    """Collect production and pay influence upkeep.

    Money never goes below zero; the uncovered part of a negative net income
    is reported as shortfall. Science and materials just accumulate.
    """
    production = calculate_production(economy)
    stored = economy.resources
    shortfall = max(0, -production.net_money - stored.money)
    new_economy = replace(
        economy,
        resources=Resources(
            money=max(0, stored.money + production.net_money),
            science=stored.science + production.science_income,
            materials=stored.materials + production.materials_income,
        ),
    )
    return UpkeepResult(economy=new_economy, production=production, shortfall=shortfall)


def reset_influence_after_round(economy: PlayerEconomy) -> PlayerEconomy:
    """Return action disks to the track and flip all colony ships face up.

    Disks controlling sectors stay where they are.
    """
    influence = economy.influence
    on_track = influence.on_track + influence.on_actions
    return replace(
        economy,
        influence=replace(
            influence,
            on_track=on_track,
            on_actions=0,
            upkeep_cost=get_upkeep_cost(on_track),
        ),
        colony_ships=refresh_colony_ships(economy.colony_ships),
    )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_economy(economy: PlayerEconomy) -> list[str]:
    """Return every broken invariant as a message; an empty list means valid."""
    errors: list[str] = []

    for resource in ResourceType:
        if economy.resources.get(resource) < 0:
            errors.append(f"{resource.value.capitalize()} cannot be negative")

    for resource in ResourceType:
        track = economy.population_tracks.get(resource)
        if track is None:
            errors.append(f"{resource.value} population track is missing")
        elif not 0 <= track.cubes_remaining <= MAX_POPULATION_CUBES:
            errors.append(
                f"{resource.value} cubes remaining out of range: {track.cubes_remaining}"
            )

    influence = economy.influence
    placed = influence.on_track + influence.on_actions + influence.on_sectors
    if placed != influence.total_available:
        errors.append(
            f"Influence disk count mismatch: {placed} vs {influence.total_available}"
        )
    if influence.on_track < 0:
        errors.append("Influence on track cannot be negative")
    if influence.on_actions < 0:
        errors.append("Influence on actions cannot be negative")
    if influence.on_sectors < 0:
        errors.append("Influence on sectors cannot be negative")

    errors.extend(validate_colony_ships(economy.colony_ships))
    return errors


# ---------------------------------------------------------------------------
# Colony ships
# ---------------------------------------------------------------------------

def get_available_colony_ships(colony_ships: ColonyShips) -> int:
    return colony_ships.available


def use_colony_ship(colony_ships: ColonyShips) -> ColonyShips:
    """Flip one ship face down; it stays used until an explicit refresh."""
    if colony_ships.available <= 0:
        raise TrackExhausted("No colony ships available")
    return replace(
        colony_ships,
        available=colony_ships.available - 1,
        used=colony_ships.used + 1,
    )


def refresh_colony_ships(colony_ships: ColonyShips) -> ColonyShips:
    return replace(colony_ships, available=colony_ships.total, used=0)


def add_bonus_colony_ship(colony_ships: ColonyShips) -> ColonyShips:
    return ColonyShips(
        total=colony_ships.total + 1,
        available=colony_ships.available + 1,
        used=colony_ships.used,
    )


def validate_colony_ships(colony_ships: ColonyShips) -> list[str]:
    errors: list[str] = []
    if colony_ships.available < 0:
        errors.append("Available colony ships cannot be negative")
    if colony_ships.used < 0:
        errors.append("Used colony ships cannot be negative")
    if colony_ships.available + colony_ships.used != colony_ships.total:
        errors.append(
            f"Colony ship count mismatch: {colony_ships.available} + "
            f"{colony_ships.used} != {colony_ships.total}"
        )
    return errors


DEFAULT_STARTING_ECONOMY = create_economy()
