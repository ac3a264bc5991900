from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class WeaponSpec(BaseModel):
    dice: int = Field(default=1, ge=1)
    damage: int = Field(default=1, ge=1)


class ShipCreate(BaseModel):
    player_id: str
    sector_id: str
    ship_type: str = "interceptor"
    initiative: int = Field(default=2, ge=0)
    hull_capacity: int = Field(default=1, ge=1)
    weapons: list[WeaponSpec] = [WeaponSpec()]
    shield_tier: int = Field(default=0, ge=0)
    computer: int = Field(default=0, ge=0)


class ShipResponse(BaseModel):
    id: int
    match_id: int
    player_id: str
    sector_id: str
    ship_type: str
    initiative: int
    hull_capacity: int
    damage: int
    shield_tier: int
    computer: int
    weapons: list[WeaponSpec]
    is_destroyed: bool

    model_config = {"from_attributes": True}


class CombatLogResponse(BaseModel):
    id: int
    match_id: int
    sector_id: str
    round_number: int
    seed: str
    player_a_id: str
    player_b_id: str
    winner_player_id: Optional[str]
    log_entries: list[str]
    created_at: datetime

    model_config = {"from_attributes": True}
