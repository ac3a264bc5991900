from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from eclipse_engine.engine.turns import Phase
from eclipse_engine.models.match import MatchStatus


class MatchCreate(BaseModel):
    name: str
    player_ids: list[str]
    # player_id -> faction id; players not listed get the default faction
    factions: dict[str, str] = {}
    max_rounds: Optional[int] = None

    @field_validator("player_ids")
    @classmethod
    def validate_player_ids(cls, v: list[str]) -> list[str]:
        if len(v) < 2 or len(v) > 6:
            raise ValueError("A match needs between 2 and 6 players")
        if len(set(v)) != len(v):
            raise ValueError("Player ids must be unique")
        return v

    @field_validator("max_rounds")
    @classmethod
    def validate_max_rounds(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("max_rounds must be at least 1")
        return v


class MatchResponse(BaseModel):
    id: int
    name: str
    status: MatchStatus
    current_round: int
    current_phase: Phase
    max_rounds: int
    turn_order: list[str]
    passed_players: list[str]
    current_player_index: int
    starting_player_index: int
    active_player_id: Optional[str]
    version: int
    created_at: datetime

    model_config = {"from_attributes": True}
