"""Persistence mapping between PlayerEconomyRecord rows and engine snapshots."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eclipse_engine.config import settings
from eclipse_engine.data.factions import get_faction
from eclipse_engine.engine.economy import (
    ColonyShips,
    InfluenceTrack,
    PlayerEconomy,
    PopulationTrack,
    ResourceType,
    Resources,
    get_production_value,
    get_upkeep_cost,
    validate_economy,
)
from eclipse_engine.engine.turns import IncomeMultipliers
from eclipse_engine.exceptions import InvariantViolation
from eclipse_engine.models.player_economy import PlayerEconomyRecord

logger = logging.getLogger(__name__)

_CUBE_COLUMNS: dict[ResourceType, str] = {
    ResourceType.money: "money_cubes",
    ResourceType.science: "science_cubes",
    ResourceType.materials: "materials_cubes",
}


async def create_player_economy(
    db: AsyncSession, match_id: int, player_id: str, faction_id: str | None = None
) -> PlayerEconomyRecord:
    """Create and persist the starting economy for a player based on their faction."""
    faction = get_faction(faction_id)
    record = PlayerEconomyRecord(
        match_id=match_id,
        player_id=player_id,
        faction=faction.faction_id,
        money=faction.starting_money,
        science=faction.starting_science,
        materials=faction.starting_materials,
        money_cubes=13,
        science_cubes=13,
        materials_cubes=13,
        influence_on_track=faction.starting_influence_disks,
        influence_on_actions=0,
        influence_on_sectors=0,
        influence_total=faction.starting_influence_disks,
        max_influence=faction.max_influence_disks or settings.max_influence,
        colony_ships_total=faction.colony_ships,
        colony_ships_available=faction.colony_ships,
        colony_ships_used=0,
        trade_ratio=faction.trade_ratio,
        money_multiplier=faction.money_multiplier,
        science_multiplier=faction.science_multiplier,
        materials_multiplier=faction.materials_multiplier,
    )
    db.add(record)
    await db.flush()
    return record


async def get_player_economy(
    db: AsyncSession, match_id: int, player_id: str
) -> PlayerEconomyRecord | None:
    result = await db.execute(
        select(PlayerEconomyRecord)
        .where(
            PlayerEconomyRecord.match_id == match_id,
            PlayerEconomyRecord.player_id == player_id,
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_economies_for_match(
    db: AsyncSession, match_id: int
) -> dict[str, PlayerEconomyRecord]:
    result = await db.execute(
        select(PlayerEconomyRecord)
        .where(PlayerEconomyRecord.match_id == match_id)
        .execution_options(populate_existing=True)
    )
    return {record.player_id: record for record in result.scalars().all()}


def to_economy(record: PlayerEconomyRecord) -> PlayerEconomy:
    tracks = {}
    for resource, column in _CUBE_COLUMNS.items():
        cubes = getattr(record, column)
        tracks[resource] = PopulationTrack(
            resource=resource,
            cubes_remaining=cubes,
            production_value=get_production_value(cubes),
        )
    return PlayerEconomy(
        resources=Resources(
            money=record.money, science=record.science, materials=record.materials
        ),
        population_tracks=tracks,
        influence=InfluenceTrack(
            on_track=record.influence_on_track,
            on_actions=record.influence_on_actions,
            on_sectors=record.influence_on_sectors,
            total_available=record.influence_total,
            upkeep_cost=get_upkeep_cost(record.influence_on_track),
        ),
        colony_ships=ColonyShips(
            total=record.colony_ships_total,
            available=record.colony_ships_available,
            used=record.colony_ships_used,
        ),
        trade_ratio=record.trade_ratio,
    )


def apply_economy(
    record: PlayerEconomyRecord, economy: PlayerEconomy, match_id: int | None = None
) -> None:
    """Copy an engine snapshot onto its record after checking every invariant.

    Raises InvariantViolation (and leaves the record untouched) if the
    snapshot is inconsistent; the caller must abort the transaction.
    """
    errors = validate_economy(economy)
    if errors:
        logger.error(
            "match=%s player=%s economy invariant broken: %s",
            match_id if match_id is not None else record.match_id,
            record.player_id,
            errors,
        )
        raise InvariantViolation(errors)

    record.money = economy.resources.money
    record.science = economy.resources.science
    record.materials = economy.resources.materials
    for resource, column in _CUBE_COLUMNS.items():
        setattr(record, column, economy.population_tracks[resource].cubes_remaining)
    record.influence_on_track = economy.influence.on_track
    record.influence_on_actions = economy.influence.on_actions
    record.influence_on_sectors = economy.influence.on_sectors
    record.influence_total = economy.influence.total_available
    record.colony_ships_total = economy.colony_ships.total
    record.colony_ships_available = economy.colony_ships.available
    record.colony_ships_used = economy.colony_ships.used
    record.trade_ratio = economy.trade_ratio


def income_multipliers(record: PlayerEconomyRecord) -> IncomeMultipliers:
    return IncomeMultipliers(
        money=record.money_multiplier,
        science=record.science_multiplier,
        materials=record.materials_multiplier,
    )
