from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from eclipse_engine.engine.turns import ActionKind, Phase
from eclipse_engine.models.match import MatchStatus


class ResourceAmounts(BaseModel):
    money: int = Field(default=0, ge=0)
    science: int = Field(default=0, ge=0)
    materials: int = Field(default=0, ge=0)


class ActionPayload(BaseModel):
    """Economy details of an action; every field is optional."""

    # influence action: disks moved between the track and sectors
    place_on_sectors: int = Field(default=0, ge=0, le=2)
    return_from_sectors: int = Field(default=0, ge=0, le=2)
    # explore action: keep the new sector with an influence disk
    claim_sector: bool = False
    # build / research / upgrade
    cost: Optional[ResourceAmounts] = None


class ActionRequest(BaseModel):
    player_id: str
    action_kind: ActionKind
    payload: Optional[ActionPayload] = None


class ValidateRequest(BaseModel):
    player_id: str
    action_kind: ActionKind


class ValidationResponse(BaseModel):
    valid: bool
    reason: Optional[str] = None
    influence_cost: int = 0

    model_config = {"from_attributes": True}


class ActionResponse(BaseModel):
    id: int
    match_id: int
    player_id: str
    action_kind: ActionKind
    payload: Optional[dict[str, Any]]
    round_number: int
    action_number: int
    is_reaction: bool
    timestamp: datetime

    model_config = {"from_attributes": True}


class ProductionResponse(BaseModel):
    money_income: int
    science_income: int
    materials_income: int
    upkeep_cost: int
    net_money: int

    model_config = {"from_attributes": True}


class CombatOutcomeResponse(BaseModel):
    sector_id: str
    seed: str
    player_a_id: str
    player_b_id: str
    winner_player_id: Optional[str]
    ships_destroyed: int

    model_config = {"from_attributes": True}


class TurnSummaryResponse(BaseModel):
    match_id: int
    phase: Phase
    round_number: int
    active_player_id: Optional[str]
    action_phase_complete: bool
    status: MatchStatus
    combat: list[CombatOutcomeResponse] = []
    production: dict[str, ProductionResponse] = {}
    shortfalls: dict[str, int] = {}

    model_config = {"from_attributes": True}
