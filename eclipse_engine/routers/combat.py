"""Combat router: fleet placement and combat logs."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eclipse_engine.database import get_db
from eclipse_engine.models.match import MatchStatus
from eclipse_engine.schemas.combat import CombatLogResponse, ShipCreate, ShipResponse
from eclipse_engine.services.combat_service import add_ship, get_combat_logs
from eclipse_engine.services.turn_engine import get_match

router = APIRouter(prefix="/matches", tags=["combat"])


@router.post(
    "/{match_id}/ships",
    response_model=ShipResponse,
    status_code=status.HTTP_201_CREATED,
)
async def place_ship(match_id: int, body: ShipCreate, db: AsyncSession = Depends(get_db)):
    """Put a ship into a sector. Sectors holding ships of two players fight in the combat phase."""
    match = await get_match(db, match_id)
    if match is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Match not found")
    if match.status != MatchStatus.active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Match is finished")
    if body.player_id not in match.turn_order:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Player is not in this match"
        )

    ship = await add_ship(
        db,
        match_id,
        body.player_id,
        body.sector_id,
        ship_type=body.ship_type,
        initiative=body.initiative,
        hull_capacity=body.hull_capacity,
        weapons=[w.model_dump() for w in body.weapons],
        shield_tier=body.shield_tier,
        computer=body.computer,
    )
    await db.commit()
    return ship


@router.get("/{match_id}/combat/logs", response_model=list[CombatLogResponse])
async def get_combat_logs_endpoint(
    match_id: int,
    round: int | None = Query(default=None, description="Filter by match round"),
    db: AsyncSession = Depends(get_db),
):
    """Return all combat logs for a match, optionally filtered by round."""
    match = await get_match(db, match_id)
    if match is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Match not found")
    return await get_combat_logs(db, match_id, round_number=round)
