from pydantic import BaseModel, Field, computed_field

from eclipse_engine.engine.economy import ResourceType, get_production_value, get_upkeep_cost


class EconomyResponse(BaseModel):
    match_id: int
    player_id: str
    faction: str
    money: int
    science: int
    materials: int
    money_cubes: int
    science_cubes: int
    materials_cubes: int
    influence_on_track: int
    influence_on_actions: int
    influence_on_sectors: int
    influence_total: int
    max_influence: int
    colony_ships_total: int
    colony_ships_available: int
    colony_ships_used: int
    trade_ratio: int

    @computed_field
    @property
    def production(self) -> dict[str, int]:
        return {
            "money": get_production_value(self.money_cubes),
            "science": get_production_value(self.science_cubes),
            "materials": get_production_value(self.materials_cubes),
        }

    @computed_field
    @property
    def upkeep_cost(self) -> int:
        return get_upkeep_cost(self.influence_on_track)

    model_config = {"from_attributes": True}


class TradeRequest(BaseModel):
    from_resource: ResourceType
    to_resource: ResourceType
    # amount received; the player pays amount * trade_ratio
    amount: int = Field(gt=0)


class ColonizeRequest(BaseModel):
    resource: ResourceType
