from dataclasses import dataclass


@dataclass(frozen=True)
class FactionEconomy:
    name: str
    faction_id: str
    starting_money: int
    starting_science: int
    starting_materials: int
    max_influence_disks: int | None = None  # None: settings.max_influence
    starting_influence_disks: int = 13
    colony_ships: int = 3
    trade_ratio: int = 2
    money_multiplier: float = 1
    science_multiplier: float = 1
    materials_multiplier: float = 1


DEFAULT_FACTION = "terran"

FACTIONS: dict[str, FactionEconomy] = {
    "terran": FactionEconomy(
        name="Terran Directorate",
        faction_id="terran",
        starting_money=2,
        starting_science=2,
        starting_materials=4,
    ),
    "eridani_empire": FactionEconomy(
        name="Eridani Empire",
        faction_id="eridani_empire",
        starting_money=6,
        starting_science=2,
        starting_materials=2,
        # Starts two disks short of the standard track
        max_influence_disks=14,
        starting_influence_disks=11,
        trade_ratio=3,
        money_multiplier=1.5,
    ),
    "hydran_progress": FactionEconomy(
        name="Hydran Progress",
        faction_id="hydran_progress",
        starting_money=2,
        starting_science=6,
        starting_materials=2,
        trade_ratio=3,
        science_multiplier=2,
    ),
    "planta": FactionEconomy(
        name="Planta",
        faction_id="planta",
        starting_money=3,
        starting_science=3,
        starting_materials=3,
        colony_ships=4,
        trade_ratio=3,
    ),
    "descendants_of_draco": FactionEconomy(
        name="Descendants of Draco",
        faction_id="descendants_of_draco",
        starting_money=2,
        starting_science=3,
        starting_materials=4,
        trade_ratio=3,
    ),
    "mechanema": FactionEconomy(
        name="Mechanema",
        faction_id="mechanema",
        starting_money=2,
        starting_science=2,
        starting_materials=6,
        trade_ratio=3,
        materials_multiplier=1.5,
    ),
    "orion_hegemony": FactionEconomy(
        name="Orion Hegemony",
        faction_id="orion_hegemony",
        starting_money=3,
        starting_science=2,
        starting_materials=5,
        colony_ships=2,
        trade_ratio=3,
    ),
}


def get_faction(faction_id: str | None) -> FactionEconomy:
    """Return faction economy data; unknown or missing ids raise KeyError."""
    return FACTIONS[faction_id or DEFAULT_FACTION]
