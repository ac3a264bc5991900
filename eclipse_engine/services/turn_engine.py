"""Round orchestrator: drives the phase state machine and the economy engine
against the persisted match aggregate.

Every state-changing call is one transaction: read the match and its player
economies, rebuild the ephemeral per-player action state, run the pure
engines, write the results back and commit. The match and economy rows are
versioned, so a concurrent writer makes the commit fail with StaleDataError;
the whole read-validate-write cycle is then retried from fresh data.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified
from sqlalchemy.orm.exc import StaleDataError

from eclipse_engine.config import settings
from eclipse_engine.data.factions import FACTIONS, DEFAULT_FACTION
from eclipse_engine.engine.combat import CombatResolver
from eclipse_engine.engine.economy import (
    PlayerEconomy,
    ProductionResult,
    ResourceType,
    Resources,
    calculate_production,
    execute_upkeep,
    place_influence_on_action,
    place_influence_on_sector,
    place_population_cube,
    refresh_colony_ships,
    reset_influence_after_round,
    return_influence_from_sector,
    spend_resources,
    trade_resources,
    use_colony_ship,
)
from eclipse_engine.engine.turns import (
    ActionKind,
    ActionValidation,
    Phase,
    PlayerActionState,
    TurnState,
    advance_phase as next_phase_state,
    execute_action,
    is_action_phase_complete,
    process_income,
    process_upkeep,
    validate_action,
)
from eclipse_engine.exceptions import (
    InvariantViolation,
    MatchConflictError,
    RuleViolation,
)
from eclipse_engine.models.match import Match, MatchStatus
from eclipse_engine.models.match_action import MatchAction
from eclipse_engine.models.player_economy import PlayerEconomyRecord
from eclipse_engine.services.combat_service import CombatOutcome, resolve_combat_for_match
from eclipse_engine.services.economy_service import (
    apply_economy,
    create_player_economy,
    get_economies_for_match,
    get_player_economy,
    income_multipliers,
    to_economy,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Disks an influence action may move in each direction
MAX_INFLUENCE_MOVES = 2

RESOURCE_COST_ACTIONS = (ActionKind.build, ActionKind.research, ActionKind.upgrade)


@dataclass
class TurnSummary:
    """What the caller needs after an action or phase transition."""
    match_id: int
    phase: Phase
    round_number: int
    active_player_id: str | None
    action_phase_complete: bool
    status: MatchStatus
    combat: list[CombatOutcome] = field(default_factory=list)
    production: dict[str, ProductionResult] = field(default_factory=dict)
    shortfalls: dict[str, int] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

async def get_match(db: AsyncSession, match_id: int) -> Match | None:
    result = await db.execute(
        select(Match).where(Match.id == match_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_match_actions(db: AsyncSession, match_id: int) -> list[MatchAction]:
    result = await db.execute(
        select(MatchAction).where(MatchAction.match_id == match_id).order_by(MatchAction.id)
    )
    return list(result.scalars().all())


async def get_round_actions(
    db: AsyncSession, match_id: int, round_number: int
) -> list[MatchAction]:
    result = await db.execute(
        select(MatchAction)
        .where(MatchAction.match_id == match_id, MatchAction.round_number == round_number)
        .order_by(MatchAction.id)
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Turn state reconstruction
# ---------------------------------------------------------------------------

def rebuild_turn_state(
    match: Match,
    economies: dict[str, PlayerEconomyRecord],
    round_actions: list[MatchAction],
) -> TurnState:
    """Derive the engine TurnState from persisted rows.

    Influence available is the faction maximum minus the disks sitting on
    action spaces, capped by the disks still on the track, so the economy
    stays the single source of truth.
    """
    player_actions: dict[str, PlayerActionState] = {}
    for player_id in match.turn_order:
        record = economies.get(player_id)
        if record is None:
            raise InvariantViolation(f"Match {match.id} has no economy for player {player_id}")
        passed = player_id in match.passed_players
        player_actions[player_id] = PlayerActionState(
            player_id=player_id,
            influence_available=min(
                record.max_influence - record.influence_on_actions,
                record.influence_on_track,
            ),
            max_influence=record.max_influence,
            has_passed=passed,
            actions_this_round=tuple(
                a.action_kind
                for a in round_actions
                if a.player_id == player_id and a.action_kind != ActionKind.pass_action
            ),
            can_react=passed and player_id not in match.reacted_players,
        )

    return TurnState(
        round_num=match.current_round,
        phase=match.current_phase,
        current_player_index=match.current_player_index,
        player_order=tuple(match.turn_order),
        player_actions=player_actions,
        passed_players=tuple(match.passed_players),
        all_players_passed=len(match.passed_players) == len(match.turn_order),
        starting_player_index=match.starting_player_index,
    )


async def get_turn_state(db: AsyncSession, match: Match) -> TurnState:
    economies = await get_economies_for_match(db, match.id)
    actions = await get_round_actions(db, match.id, match.current_round)
    return rebuild_turn_state(match, economies, actions)


def _store_turn_state(match: Match, state: TurnState) -> None:
    match.current_round = state.round_num
    match.current_phase = state.phase
    match.current_player_index = state.current_player_index
    match.starting_player_index = state.starting_player_index
    match.passed_players = list(state.passed_players)
    match.reacted_players = [
        pid for pid in state.passed_players if not state.player_actions[pid].can_react
    ]
    # Always bump the version so racing writers conflict on the match row
    flag_modified(match, "passed_players")


def _summary(match: Match, action_phase_complete: bool = False) -> TurnSummary:
    return TurnSummary(
        match_id=match.id,
        phase=match.current_phase,
        round_number=match.current_round,
        active_player_id=match.active_player_id,
        action_phase_complete=action_phase_complete,
        status=match.status,
    )


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

async def _run_serialized(
    db: AsyncSession, match_id: int, operation: Callable[[], Awaitable[T]]
) -> T:
    """Run operation and commit, retrying the whole cycle on a version conflict.

    Any other failure rolls the session back so nothing partial is persisted.
    """
    for attempt in range(1, settings.max_commit_retries + 1):
        try:
            result = await operation()
            await db.commit()
            return result
        except StaleDataError:
            await db.rollback()
            logger.warning(
                "match=%s version conflict, retrying (attempt %s/%s)",
                match_id, attempt, settings.max_commit_retries,
            )
        except (RuleViolation, InvariantViolation):
            await db.rollback()
            raise
        except Exception:
            await db.rollback()
            raise
    raise MatchConflictError(f"Match {match_id} is being updated concurrently; try again")


async def _load_active_match(db: AsyncSession, match_id: int) -> Match:
    match = await get_match(db, match_id)
    if match is None:
        raise RuleViolation("Match not found")
    if match.status != MatchStatus.active:
        raise RuleViolation("Match is finished")
    return match


# ---------------------------------------------------------------------------
# Match setup
# ---------------------------------------------------------------------------

async def start_match(
    db: AsyncSession,
    name: str,
    player_ids: list[str],
    factions: dict[str, str] | None = None,
    max_rounds: int | None = None,
) -> Match:
    """Create a match in round 1's action phase with one economy per player."""
    if len(player_ids) < 2:
        raise RuleViolation("Need at least 2 players to start")
    if len(set(player_ids)) != len(player_ids):
        raise RuleViolation("Player ids must be unique")
    factions = factions or {}
    for faction_id in factions.values():
        if faction_id not in FACTIONS:
            raise RuleViolation(f"Unknown faction: '{faction_id}'")

    match = Match(
        name=name,
        status=MatchStatus.active,
        current_round=1,
        current_phase=Phase.action,
        max_rounds=max_rounds or settings.max_rounds,
        turn_order=list(player_ids),
        passed_players=[],
        reacted_players=[],
        current_player_index=0,
        starting_player_index=0,
    )
    db.add(match)
    await db.flush()  # get match.id before adding economies

    for player_id in player_ids:
        await create_player_economy(
            db, match.id, player_id, factions.get(player_id, DEFAULT_FACTION)
        )

    await db.commit()
    await db.refresh(match)
    logger.info(
        "match=%s started players=%s starting_player=%s",
        match.id, len(player_ids), player_ids[0],
    )
    return match


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

async def check_action(
    db: AsyncSession, match: Match, player_id: str, action_kind: ActionKind
) -> ActionValidation:
    """Dry-run validation; never writes."""
    if match.status != MatchStatus.active:
        return ActionValidation(valid=False, reason="Match is finished")
    state = await get_turn_state(db, match)
    return validate_action(state, player_id, action_kind)


def _apply_action_effects(
    economy: PlayerEconomy, action_kind: ActionKind, payload: dict[str, Any]
) -> PlayerEconomy:
    economy = place_influence_on_action(economy)

    if action_kind == ActionKind.influence:
        returns = payload.get("return_from_sectors", 0)
        places = payload.get("place_on_sectors", 0)
        if not (0 <= returns <= MAX_INFLUENCE_MOVES and 0 <= places <= MAX_INFLUENCE_MOVES):
            raise RuleViolation(
                f"An influence action moves at most {MAX_INFLUENCE_MOVES} disks each way"
            )
        for _ in range(returns):
            economy = return_influence_from_sector(economy)
        for _ in range(places):
            economy = place_influence_on_sector(economy)
        economy = replace(economy, colony_ships=refresh_colony_ships(economy.colony_ships))
    elif action_kind == ActionKind.explore and payload.get("claim_sector"):
        economy = place_influence_on_sector(economy)

    cost = payload.get("cost")
    if cost and action_kind in RESOURCE_COST_ACTIONS:
        economy = spend_resources(economy, cost)
    return economy


async def submit_action(
    db: AsyncSession,
    match_id: int,
    player_id: str,
    action_kind: ActionKind,
    payload: dict[str, Any] | None = None,
    resolver: CombatResolver | None = None,
) -> TurnSummary:
    """Validate and execute one action, then enter combat if everyone has passed."""
    action_kind = ActionKind(action_kind)

    async def operation() -> TurnSummary:
        match = await _load_active_match(db, match_id)
        economies = await get_economies_for_match(db, match.id)
        round_actions = await get_round_actions(db, match.id, match.current_round)
        state = rebuild_turn_state(match, economies, round_actions)

        validation = validate_action(state, player_id, action_kind)
        if not validation.valid:
            logger.warning(
                "match=%s rejected %s from %s: %s",
                match.id, action_kind.value, player_id, validation.reason,
            )
            raise RuleViolation(validation.reason or "Action not allowed")

        is_reaction = (
            state.player_actions[player_id].has_passed
            and action_kind != ActionKind.pass_action
        )
        new_state = execute_action(state, player_id, action_kind)

        if action_kind != ActionKind.pass_action:
            record = economies[player_id]
            economy = _apply_action_effects(to_economy(record), action_kind, payload or {})
            apply_economy(record, economy, match.id)

        db.add(
            MatchAction(
                match_id=match.id,
                player_id=player_id,
                action_kind=action_kind,
                payload=payload,
                round_number=match.current_round,
                action_number=sum(1 for a in round_actions if a.player_id == player_id) + 1,
                is_reaction=is_reaction,
            )
        )
        _store_turn_state(match, new_state)
        logger.info(
            "match=%s round=%s %s took %s%s",
            match.id, match.current_round, player_id, action_kind.value,
            " (reaction)" if is_reaction else "",
        )

        if is_action_phase_complete(new_state):
            return await _enter_next_phase(
                db, match, new_state, economies, resolver, action_phase_complete=True
            )
        return _summary(match)

    return await _run_serialized(db, match_id, operation)


# ---------------------------------------------------------------------------
# Phase transitions
# ---------------------------------------------------------------------------

async def advance_phase(
    db: AsyncSession, match_id: int, resolver: CombatResolver | None = None
) -> TurnSummary:
    """Manually advance a phase that takes no player input."""

    async def operation() -> TurnSummary:
        match = await _load_active_match(db, match_id)
        if match.current_phase == Phase.action:
            raise RuleViolation("Action phase ends when all players pass")
        economies = await get_economies_for_match(db, match.id)
        round_actions = await get_round_actions(db, match.id, match.current_round)
        state = rebuild_turn_state(match, economies, round_actions)
        return await _enter_next_phase(db, match, state, economies, resolver)

    return await _run_serialized(db, match_id, operation)


async def _enter_next_phase(
    db: AsyncSession,
    match: Match,
    state: TurnState,
    economies: dict[str, PlayerEconomyRecord],
    resolver: CombatResolver | None,
    action_phase_complete: bool = False,
) -> TurnSummary:
    previous_phase = state.phase
    new_state = next_phase_state(state)
    combat: list[CombatOutcome] = []
    production: dict[str, ProductionResult] = {}
    shortfalls: dict[str, int] = {}

    if new_state.phase == Phase.combat:
        combat = await resolve_combat_for_match(db, match.id, state.round_num, resolver)

    elif new_state.phase == Phase.upkeep:
        new_state = process_upkeep(new_state)
        for player_id in new_state.player_order:
            production[player_id] = calculate_production(to_economy(economies[player_id]))

    elif new_state.phase == Phase.income:
        upkept: dict[str, PlayerEconomy] = {}
        for player_id in new_state.player_order:
            result = execute_upkeep(to_economy(economies[player_id]))
            upkept[player_id] = result.economy
            production[player_id] = result.production
            shortfalls[player_id] = result.shortfall
            if result.shortfall:
                logger.warning(
                    "match=%s player=%s cannot cover upkeep, shortfall=%s",
                    match.id, player_id, result.shortfall,
                )

        incomes = process_income(
            new_state,
            {pid: economy.resources for pid, economy in upkept.items()},
            {pid: income_multipliers(economies[pid]) for pid in upkept},
            base_income=Resources(
                money=settings.base_income_money,
                science=settings.base_income_science,
                materials=settings.base_income_materials,
            ),
        )
        for player_id, economy in upkept.items():
            apply_economy(
                economies[player_id], replace(economy, resources=incomes[player_id]), match.id
            )

    elif new_state.phase == Phase.cleanup:
        for player_id in new_state.player_order:
            record = economies[player_id]
            apply_economy(record, reset_influence_after_round(to_economy(record)), match.id)

    elif new_state.phase == Phase.end:
        if new_state.round_num >= match.max_rounds:
            match.status = MatchStatus.finished
            logger.info("match=%s finished after round %s", match.id, new_state.round_num)

    _store_turn_state(match, new_state)
    logger.info(
        "match=%s phase advanced %s -> %s round=%s",
        match.id, previous_phase.value, new_state.phase.value, new_state.round_num,
    )

    summary = _summary(match, action_phase_complete)
    summary.combat = combat
    summary.production = production
    summary.shortfalls = shortfalls
    return summary


# ---------------------------------------------------------------------------
# Economy operations outside the action cycle
# ---------------------------------------------------------------------------

async def _load_player_record(
    db: AsyncSession, match: Match, player_id: str
) -> PlayerEconomyRecord:
    record = await get_player_economy(db, match.id, player_id)
    if record is None:
        raise RuleViolation("Player not found")
    return record


async def trade(
    db: AsyncSession,
    match_id: int,
    player_id: str,
    from_resource: ResourceType,
    to_resource: ResourceType,
    amount: int,
) -> PlayerEconomyRecord:
    """Trade resources at the player's faction ratio; allowed in any phase."""

    async def operation() -> PlayerEconomyRecord:
        match = await _load_active_match(db, match_id)
        record = await _load_player_record(db, match, player_id)
        economy = trade_resources(to_economy(record), from_resource, to_resource, amount)
        apply_economy(record, economy, match.id)
        logger.info(
            "match=%s player=%s traded for %s %s",
            match.id, player_id, amount, ResourceType(to_resource).value,
        )
        return record

    return await _run_serialized(db, match_id, operation)


async def colonize(
    db: AsyncSession, match_id: int, player_id: str, resource: ResourceType
) -> PlayerEconomyRecord:
    """Use a colony ship to move one population cube onto a planet.

    Only during the action phase, on the player's own turn or after they
    have passed.
    """

    async def operation() -> PlayerEconomyRecord:
        match = await _load_active_match(db, match_id)
        if match.current_phase != Phase.action:
            raise RuleViolation("Colony ships can only be used during the action phase")
        if player_id not in match.turn_order:
            raise RuleViolation("Player not found")
        if player_id not in match.passed_players and match.active_player_id != player_id:
            raise RuleViolation("Not your turn")

        record = await _load_player_record(db, match, player_id)
        economy = to_economy(record)
        economy = replace(economy, colony_ships=use_colony_ship(economy.colony_ships))
        economy = place_population_cube(economy, resource)
        apply_economy(record, economy, match.id)
        # Colonizing changes no turn state but still goes through the match version
        flag_modified(match, "passed_players")
        logger.info(
            "match=%s player=%s colonized a %s planet",
            match.id, player_id, ResourceType(resource).value,
        )
        return record

    return await _run_serialized(db, match_id, operation)
