"""Combat resolver contract and the default seeded dice resolver.

The round orchestrator only relies on the CombatResolver protocol: given a
seed, two player ids and two fleets it returns a winner, a human-readable
round log and the final state of both fleets. Identical inputs must give
identical output so combats can be replayed and audited.

DiceCombatResolver is the resolver used when none is injected:
  1. Ships fire in descending initiative order; the defender (side B) wins ties.
  2. Each weapon rolls its dice; a 6 always hits, a 1 always misses, otherwise
     roll + computer - target shield >= 6 hits.
  3. Hits go to the surviving enemy with the least hull left.
  4. Repeat until a side is eliminated or MAX_COMBAT_ROUNDS is reached;
     if both sides survive, the defender holds the sector.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from typing import Protocol, Sequence

MAX_COMBAT_ROUNDS = 10


@dataclass(frozen=True)
class Weapon:
    dice: int
    damage: int = 1


@dataclass(frozen=True)
class ShipSnapshot:
    ship_id: int
    initiative: int
    hull: int           # hit points left
    hull_capacity: int
    weapons: tuple[Weapon, ...] = ()
    shield_tier: int = 0
    computer: int = 0   # added to every attack roll
    alive: bool = True


@dataclass(frozen=True)
class CombatResult:
    winner_player_id: str | None
    round_log: tuple[str, ...]
    final_fleet_a: tuple[ShipSnapshot, ...]
    final_fleet_b: tuple[ShipSnapshot, ...]


class CombatResolver(Protocol):
    def simulate(
        self,
        seed: str,
        player_a_id: str,
        player_b_id: str,
        fleet_a: Sequence[ShipSnapshot],
        fleet_b: Sequence[ShipSnapshot],
    ) -> CombatResult: ...


def derive_seed(match_id: int, round_number: int, sector_id: str) -> str:
    return f"{match_id}-{round_number}-{sector_id}"


def roll_hits(roll: int, computer: int, shield: int) -> bool:
    if roll == 6:
        return True
    if roll == 1:
        return False
    return roll + computer - shield >= 6


@dataclass
class _Combatant:
    side: str
    owner: str
    ship: ShipSnapshot
    hull: int = field(init=False)

    def __post_init__(self) -> None:
        self.hull = self.ship.hull if self.ship.alive else 0

    @property
    def alive(self) -> bool:
        return self.hull > 0

    def final(self) -> ShipSnapshot:
        return replace(self.ship, hull=self.hull, alive=self.alive)


class DiceCombatResolver:
    def __init__(self, max_rounds: int = MAX_COMBAT_ROUNDS):
        self.max_rounds = max_rounds

    def simulate(
        self,
        seed: str,
        player_a_id: str,
        player_b_id: str,
        fleet_a: Sequence[ShipSnapshot],
        fleet_b: Sequence[ShipSnapshot],
    ) -> CombatResult:
        rng = random.Random(seed)
        side_a = [_Combatant("A", player_a_id, ship) for ship in fleet_a]
        side_b = [_Combatant("B", player_b_id, ship) for ship in fleet_b]
        log: list[str] = [f"Combat {player_a_id} vs {player_b_id} (seed {seed})"]

        # B before A on equal initiative
        firing_order = sorted(
            side_b + side_a,
            key=lambda c: -c.ship.initiative,
        )

        for combat_round in range(1, self.max_rounds + 1):
            if not (_any_alive(side_a) and _any_alive(side_b)):
                break
            log.append(f"Round {combat_round}")
            for shooter in firing_order:
                if not shooter.alive:
                    continue
                enemies = side_b if shooter.side == "A" else side_a
                self._fire(rng, shooter, enemies, log)
                if not _any_alive(enemies):
                    break

        a_alive = _any_alive(side_a)
        b_alive = _any_alive(side_b)
        if a_alive and not b_alive:
            winner: str | None = player_a_id
        elif b_alive:
            winner = player_b_id
        else:
            winner = None
        log.append(f"Winner: {winner if winner is not None else 'none'}")

        return CombatResult(
            winner_player_id=winner,
            round_log=tuple(log),
            final_fleet_a=tuple(c.final() for c in side_a),
            final_fleet_b=tuple(c.final() for c in side_b),
        )

    def _fire(
        self,
        rng: random.Random,
        shooter: _Combatant,
        enemies: list[_Combatant],
        log: list[str],
    ) -> None:
        for weapon in shooter.ship.weapons:
            for _ in range(weapon.dice):
                target = _pick_target(enemies)
                if target is None:
                    return
                roll = rng.randint(1, 6)
                if not roll_hits(roll, shooter.ship.computer, target.ship.shield_tier):
                    log.append(
                        f"{shooter.owner} ship {shooter.ship.ship_id} rolls {roll} "
                        f"at ship {target.ship.ship_id}: miss"
                    )
                    continue
                target.hull = max(0, target.hull - weapon.damage)
                log.append(
                    f"{shooter.owner} ship {shooter.ship.ship_id} rolls {roll} "
                    f"at ship {target.ship.ship_id}: hit for {weapon.damage}"
                )
                if not target.alive:
                    log.append(f"{target.owner} ship {target.ship.ship_id} destroyed")


def _any_alive(side: list[_Combatant]) -> bool:
    return any(c.alive for c in side)


def _pick_target(enemies: list[_Combatant]) -> _Combatant | None:
    alive = [e for e in enemies if e.alive]
    if not alive:
        return None
    return min(alive, key=lambda e: e.hull)
