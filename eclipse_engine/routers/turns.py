from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eclipse_engine.database import get_db
from eclipse_engine.exceptions import MatchConflictError, RuleViolation
from eclipse_engine.models.match import Match
from eclipse_engine.schemas.turn import (
    ActionRequest,
    ActionResponse,
    TurnSummaryResponse,
    ValidateRequest,
    ValidationResponse,
)
from eclipse_engine.services.turn_engine import (
    advance_phase,
    check_action,
    get_match,
    get_match_actions,
    get_round_actions,
    submit_action,
)

router = APIRouter(prefix="/matches", tags=["turns"])


async def _get_match_or_404(db: AsyncSession, match_id: int) -> Match:
    match = await get_match(db, match_id)
    if match is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Match not found")
    return match


@router.post("/{match_id}/actions", response_model=TurnSummaryResponse)
async def submit_player_action(
    match_id: int,
    body: ActionRequest,
    db: AsyncSession = Depends(get_db),
):
    await _get_match_or_404(db, match_id)
    payload = body.payload.model_dump(exclude_none=True) if body.payload else None
    try:
        summary = await submit_action(db, match_id, body.player_id, body.action_kind, payload)
    except RuleViolation as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.reason)
    except MatchConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return summary


@router.post("/{match_id}/actions/validate", response_model=ValidationResponse)
async def validate_player_action(
    match_id: int,
    body: ValidateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Dry run: report whether the action would be accepted right now."""
    match = await _get_match_or_404(db, match_id)
    return await check_action(db, match, body.player_id, body.action_kind)


@router.get("/{match_id}/actions", response_model=list[ActionResponse])
async def get_action_history(
    match_id: int,
    round: int | None = Query(default=None, description="Filter by round"),
    db: AsyncSession = Depends(get_db),
):
    await _get_match_or_404(db, match_id)
    if round is not None:
        return await get_round_actions(db, match_id, round)
    return await get_match_actions(db, match_id)


@router.post("/{match_id}/advance-phase", response_model=TurnSummaryResponse)
async def advance_match_phase(match_id: int, db: AsyncSession = Depends(get_db)):
    """Advance a phase that takes no player input (combat, upkeep, income, cleanup, end).

    The action phase only ends once every player has passed.
    """
    await _get_match_or_404(db, match_id)
    try:
        summary = await advance_phase(db, match_id)
    except RuleViolation as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.reason)
    except MatchConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return summary
