"""Runs the combat resolver over every contested sector of a match.

A sector is contested when surviving ships of two or more players share it.
The first two players to have arrived (lowest ship id) fight; player A is
the earlier arrival. The seed is derived from (match id, round, sector id)
so every combat can be replayed from its CombatLog row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eclipse_engine.engine.combat import (
    CombatResolver,
    DiceCombatResolver,
    ShipSnapshot,
    Weapon,
    derive_seed,
)
from eclipse_engine.models.combat_log import CombatLog
from eclipse_engine.models.ship import ShipRecord

logger = logging.getLogger(__name__)

default_resolver: CombatResolver = DiceCombatResolver()


@dataclass(frozen=True)
class CombatOutcome:
    sector_id: str
    seed: str
    player_a_id: str
    player_b_id: str
    winner_player_id: str | None
    ships_destroyed: int


# ---------------------------------------------------------------------------
# Snapshot conversion
# ---------------------------------------------------------------------------

def to_snapshot(ship: ShipRecord) -> ShipSnapshot:
    return ShipSnapshot(
        ship_id=ship.id,
        initiative=ship.initiative,
        hull=max(0, ship.hull_capacity - ship.damage),
        hull_capacity=ship.hull_capacity,
        weapons=tuple(
            Weapon(dice=w.get("dice", 1), damage=w.get("damage", 1)) for w in ship.weapons
        ),
        shield_tier=ship.shield_tier,
        computer=ship.computer,
        alive=not ship.is_destroyed,
    )


def apply_snapshot(ship: ShipRecord, snapshot: ShipSnapshot) -> None:
    ship.damage = snapshot.hull_capacity - snapshot.hull
    ship.is_destroyed = not snapshot.alive


# ---------------------------------------------------------------------------
# DB helpers
# ---------------------------------------------------------------------------

async def add_ship(
    db: AsyncSession,
    match_id: int,
    player_id: str,
    sector_id: str,
    ship_type: str = "interceptor",
    initiative: int = 2,
    hull_capacity: int = 1,
    weapons: list[dict[str, int]] | None = None,
    shield_tier: int = 0,
    computer: int = 0,
) -> ShipRecord:
    ship = ShipRecord(
        match_id=match_id,
        player_id=player_id,
        sector_id=sector_id,
        ship_type=ship_type,
        initiative=initiative,
        hull_capacity=hull_capacity,
        damage=0,
        weapons=weapons if weapons is not None else [{"dice": 1, "damage": 1}],
        shield_tier=shield_tier,
        computer=computer,
        is_destroyed=False,
    )
    db.add(ship)
    await db.flush()
    return ship


async def find_contested_sectors(
    db: AsyncSession, match_id: int
) -> dict[str, dict[str, list[ShipRecord]]]:
    """Return sector_id -> player_id -> ships for sectors with 2+ players present."""
    result = await db.execute(
        select(ShipRecord)
        .where(ShipRecord.match_id == match_id, ShipRecord.is_destroyed == False)  # noqa: E712
        .order_by(ShipRecord.id)
    )
    sectors: dict[str, dict[str, list[ShipRecord]]] = {}
    for ship in result.scalars().all():
        sectors.setdefault(ship.sector_id, {}).setdefault(ship.player_id, []).append(ship)

    return {
        sector_id: by_player
        for sector_id, by_player in sorted(sectors.items())
        if len(by_player) >= 2
    }


async def get_combat_logs(
    db: AsyncSession, match_id: int, round_number: int | None = None
) -> list[CombatLog]:
    query = select(CombatLog).where(CombatLog.match_id == match_id)
    if round_number is not None:
        query = query.where(CombatLog.round_number == round_number)
    result = await db.execute(query.order_by(CombatLog.id))
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Resolve all combat for a match (called from turn_engine)
# ---------------------------------------------------------------------------

async def resolve_combat_for_match(
    db: AsyncSession,
    match_id: int,
    round_number: int,
    resolver: CombatResolver | None = None,
) -> list[CombatOutcome]:
    """Fight every contested sector, write ship damage back and log each combat."""
    resolver = resolver or default_resolver
    outcomes: list[CombatOutcome] = []

    contested = await find_contested_sectors(db, match_id)
    for sector_id, by_player in contested.items():
        player_a_id, player_b_id = list(by_player)[:2]
        ships_a = by_player[player_a_id]
        ships_b = by_player[player_b_id]
        seed = derive_seed(match_id, round_number, sector_id)

        result = resolver.simulate(
            seed,
            player_a_id,
            player_b_id,
            [to_snapshot(s) for s in ships_a],
            [to_snapshot(s) for s in ships_b],
        )

        destroyed = 0
        for ships, final_fleet in ((ships_a, result.final_fleet_a), (ships_b, result.final_fleet_b)):
            for ship, snapshot in zip(ships, final_fleet):
                apply_snapshot(ship, snapshot)
                if ship.is_destroyed:
                    destroyed += 1

        db.add(
            CombatLog(
                match_id=match_id,
                sector_id=sector_id,
                round_number=round_number,
                seed=seed,
                player_a_id=player_a_id,
                player_b_id=player_b_id,
                winner_player_id=result.winner_player_id,
                log_entries=list(result.round_log),
            )
        )
        logger.info(
            "match=%s combat simulated sector=%s %s vs %s winner=%s destroyed=%s",
            match_id, sector_id, player_a_id, player_b_id, result.winner_player_id, destroyed,
        )
        outcomes.append(
            CombatOutcome(
                sector_id=sector_id,
                seed=seed,
                player_a_id=player_a_id,
                player_b_id=player_b_id,
                winner_player_id=result.winner_player_id,
                ships_destroyed=destroyed,
            )
        )

    await db.flush()
    return outcomes
