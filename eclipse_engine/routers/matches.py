from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from eclipse_engine.database import get_db
from eclipse_engine.exceptions import MatchConflictError, RuleViolation
from eclipse_engine.models.match import Match
from eclipse_engine.schemas.economy import ColonizeRequest, EconomyResponse, TradeRequest
from eclipse_engine.schemas.match import MatchCreate, MatchResponse
from eclipse_engine.services.economy_service import get_player_economy
from eclipse_engine.services.turn_engine import colonize, get_match, start_match, trade

router = APIRouter(prefix="/matches", tags=["matches"])


async def _get_match_or_404(db: AsyncSession, match_id: int) -> Match:
    match = await get_match(db, match_id)
    if match is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Match not found")
    return match


@router.post("", response_model=MatchResponse, status_code=status.HTTP_201_CREATED)
async def create_match(body: MatchCreate, db: AsyncSession = Depends(get_db)):
    try:
        match = await start_match(
            db, body.name, body.player_ids, factions=body.factions, max_rounds=body.max_rounds
        )
    except RuleViolation as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.reason)
    return match


@router.get("/{match_id}", response_model=MatchResponse)
async def get_match_detail(match_id: int, db: AsyncSession = Depends(get_db)):
    return await _get_match_or_404(db, match_id)


@router.get("/{match_id}/players/{player_id}/economy", response_model=EconomyResponse)
async def get_economy(match_id: int, player_id: str, db: AsyncSession = Depends(get_db)):
    await _get_match_or_404(db, match_id)
    record = await get_player_economy(db, match_id, player_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Player is not in this match"
        )
    return record


@router.post("/{match_id}/players/{player_id}/trade", response_model=EconomyResponse)
async def trade_resources_endpoint(
    match_id: int,
    player_id: str,
    body: TradeRequest,
    db: AsyncSession = Depends(get_db),
):
    """Trade at the player's faction ratio. Allowed in any phase of an active match."""
    await _get_match_or_404(db, match_id)
    try:
        record = await trade(
            db, match_id, player_id, body.from_resource, body.to_resource, body.amount
        )
    except RuleViolation as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.reason)
    except MatchConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return record


@router.post("/{match_id}/players/{player_id}/colonize", response_model=EconomyResponse)
async def colonize_endpoint(
    match_id: int,
    player_id: str,
    body: ColonizeRequest,
    db: AsyncSession = Depends(get_db),
):
    """Spend a colony ship to deploy one population cube of the given resource."""
    await _get_match_or_404(db, match_id)
    try:
        record = await colonize(db, match_id, player_id, body.resource)
    except RuleViolation as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.reason)
    except MatchConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return record
