"""Phase state machine for the Eclipse round loop.

A round runs action -> combat -> upkeep -> income -> cleanup -> end, then
wraps to the action phase of the next round with the starting player
rotated by one seat.

All functions are pure: they return a new TurnState and never modify the
one passed in. Expected rule breaks (not your turn, out of influence, wrong
phase) come back from validate_action as an ActionValidation, never as an
exception.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, replace
from typing import Mapping, Sequence

from eclipse_engine.engine.economy import Resources
from eclipse_engine.exceptions import InvariantViolation


class Phase(str, enum.Enum):
    action = "action"
    combat = "combat"
    upkeep = "upkeep"
    income = "income"
    cleanup = "cleanup"
    end = "end"


PHASE_ORDER: tuple[Phase, ...] = (
    Phase.action,
    Phase.combat,
    Phase.upkeep,
    Phase.income,
    Phase.cleanup,
    Phase.end,
)


class ActionKind(str, enum.Enum):
    explore = "explore"
    influence = "influence"
    research = "research"
    upgrade = "upgrade"
    build = "build"
    move = "move"
    pass_action = "pass"


# Influence disks each action costs
ACTION_COSTS: dict[ActionKind, int] = {
    ActionKind.explore: 1,
    ActionKind.influence: 1,
    ActionKind.research: 1,
    ActionKind.upgrade: 1,
    ActionKind.build: 1,
    ActionKind.move: 1,
    ActionKind.pass_action: 0,
}

DEFAULT_MAX_INFLUENCE = 16

BASE_INCOME = Resources(money=2, science=1, materials=1)


@dataclass(frozen=True)
class PlayerActionState:
    """Per-round view of one player; rebuilt each round, never stored."""
    player_id: str
    influence_available: int
    max_influence: int = DEFAULT_MAX_INFLUENCE
    has_passed: bool = False
    actions_this_round: tuple[ActionKind, ...] = ()
    can_react: bool = False  # one action allowed after passing


@dataclass(frozen=True)
class TurnState:
    round_num: int
    phase: Phase
    current_player_index: int
    player_order: tuple[str, ...]
    player_actions: Mapping[str, PlayerActionState]
    passed_players: tuple[str, ...] = ()
    all_players_passed: bool = False
    starting_player_index: int = 0


@dataclass(frozen=True)
class ActionValidation:
    valid: bool
    reason: str | None = None
    influence_cost: int = 0


@dataclass(frozen=True)
class IncomeMultipliers:
    money: float = 1
    science: float = 1
    materials: float = 1


def initialize_turn_state(
    player_ids: Sequence[str],
    round_num: int,
    starting_player_index: int = 0,
    max_influence: int | Mapping[str, int] = DEFAULT_MAX_INFLUENCE,
) -> TurnState:
    """Fresh action-phase state: everyone at full influence, nobody passed."""
    if not player_ids:
        raise InvariantViolation("Cannot initialize a turn without players")
    if not 0 <= starting_player_index < len(player_ids):
        raise InvariantViolation(
            f"Starting player index {starting_player_index} out of range for {len(player_ids)} players"
        )

    player_actions: dict[str, PlayerActionState] = {}
    for player_id in player_ids:
        if isinstance(max_influence, Mapping):
            limit = max_influence.get(player_id, DEFAULT_MAX_INFLUENCE)
        else:
            limit = max_influence
        player_actions[player_id] = PlayerActionState(
            player_id=player_id,
            influence_available=limit,
            max_influence=limit,
        )

    return TurnState(
        round_num=round_num,
        phase=Phase.action,
        current_player_index=starting_player_index,
        player_order=tuple(player_ids),
        player_actions=player_actions,
        starting_player_index=starting_player_index,
    )


def get_current_player(state: TurnState) -> str | None:
    if not 0 <= state.current_player_index < len(state.player_order):
        return None
    return state.player_order[state.current_player_index]


def get_player_action_state(state: TurnState, player_id: str) -> PlayerActionState | None:
    return state.player_actions.get(player_id)


def validate_action(
    state: TurnState, player_id: str, action: ActionKind | str
) -> ActionValidation:
    """Check whether player_id may take action now. Read-only."""
    player = state.player_actions.get(player_id)
    if player is None:
        return ActionValidation(valid=False, reason="Player not found")

    try:
        kind = ActionKind(action)
    except ValueError:
        return ActionValidation(valid=False, reason=f"Unknown action: {action}")

    if player.has_passed and not player.can_react:
        return ActionValidation(valid=False, reason="Player has already passed")

    # Passed players act out of turn with their reaction
    if not player.has_passed and get_current_player(state) != player_id:
        return ActionValidation(valid=False, reason="Not your turn")

    if state.phase != Phase.action:
        return ActionValidation(
            valid=False, reason=f"Cannot take actions during {state.phase.value} phase"
        )

    if kind == ActionKind.pass_action:
        return ActionValidation(valid=True)

    cost = ACTION_COSTS[kind]
    if player.influence_available < cost:
        return ActionValidation(
            valid=False,
            reason=f"Not enough influence (need {cost}, have {player.influence_available})",
        )
    return ActionValidation(valid=True, influence_cost=cost)


def execute_action(
    state: TurnState, player_id: str, action: ActionKind | str
) -> TurnState:
    """Apply a validated action and move the turn pointer.

    Executing an action that validate_action would reject is a contract
    violation and raises InvariantViolation.
    """
    validation = validate_action(state, player_id, action)
    if not validation.valid:
        raise InvariantViolation(
            f"Cannot execute {action} for {player_id}: {validation.reason}"
        )
    kind = ActionKind(action)
    player = state.player_actions[player_id]
    passed_players = state.passed_players
    all_passed = state.all_players_passed

    if kind == ActionKind.pass_action:
        if not player.has_passed:
            player = replace(player, has_passed=True, can_react=True)
        if player_id not in passed_players:
            passed_players = passed_players + (player_id,)
        if len(passed_players) == len(state.player_order):
            all_passed = True
    else:
        player = replace(
            player,
            influence_available=player.influence_available - ACTION_COSTS[kind],
            actions_this_round=player.actions_this_round + (kind,),
            # a reaction is usable once
            can_react=False if player.has_passed else player.can_react,
        )

    player_actions = dict(state.player_actions)
    player_actions[player_id] = player
    new_state = replace(
        state,
        player_actions=player_actions,
        passed_players=passed_players,
        all_players_passed=all_passed,
    )
    # Re-passes and reactions come from out of turn and leave the pointer alone
    if get_current_player(state) != player_id:
        return new_state
    return replace(new_state, current_player_index=_next_active_player_index(new_state))


def _next_active_player_index(state: TurnState) -> int:
    """Next seat (clockwise) whose player has not passed; unchanged once all passed."""
    if state.all_players_passed:
        return state.current_player_index

    count = len(state.player_order)
    for offset in range(1, count + 1):
        index = (state.current_player_index + offset) % count
        player = state.player_actions.get(state.player_order[index])
        if player is not None and not player.has_passed:
            return index
    return state.current_player_index


def advance_phase(state: TurnState) -> TurnState:
    """Move to the next phase; wrapping past end starts a new round."""
    position = PHASE_ORDER.index(state.phase)
    next_phase = PHASE_ORDER[(position + 1) % len(PHASE_ORDER)]

    if next_phase == Phase.action:
        return initialize_turn_state(
            state.player_order,
            state.round_num + 1,
            (state.starting_player_index + 1) % len(state.player_order),
            max_influence={pid: p.max_influence for pid, p in state.player_actions.items()},
        )
    return replace(state, phase=next_phase)


def is_action_phase_complete(state: TurnState) -> bool:
    return state.phase == Phase.action and state.all_players_passed


def process_upkeep(state: TurnState) -> TurnState:
    """Refresh every player's influence and clear this round's pass/reaction/action history."""
    player_actions = {
        player_id: replace(
            player,
            influence_available=player.max_influence,
            has_passed=False,
            can_react=False,
            actions_this_round=(),
        )
        for player_id, player in state.player_actions.items()
    }
    return replace(
        state,
        player_actions=player_actions,
        passed_players=(),
        all_players_passed=False,
    )


def process_income(
    state: TurnState,
    snapshots: Mapping[str, Resources],
    multipliers: Mapping[str, IncomeMultipliers] | None = None,
    base_income: Resources = BASE_INCOME,
) -> dict[str, Resources]:
    """Add the base income to each player's stored resources.

    Multipliers scale the base amounts and the result is truncated toward
    zero. Players without a snapshot are skipped. Inputs are not modified.
    """
    multipliers = multipliers or {}
    incomes: dict[str, Resources] = {}
    for player_id in state.player_order:
        current = snapshots.get(player_id)
        if current is None:
            continue
        factor = multipliers.get(player_id, IncomeMultipliers())
        incomes[player_id] = Resources(
            money=current.money + math.trunc(base_income.money * factor.money),
            science=current.science + math.trunc(base_income.science * factor.science),
            materials=current.materials + math.trunc(base_income.materials * factor.materials),
        )
    return incomes
