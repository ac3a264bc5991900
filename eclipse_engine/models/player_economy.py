from sqlalchemy import Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from eclipse_engine.models.base import Base


class PlayerEconomyRecord(Base):
    """Persistent economy of one seated player.

    Production values and upkeep cost are not stored; they are derived from
    the cube and disk counts through the engine lookup tables.
    """

    __tablename__ = "player_economies"
    __table_args__ = (UniqueConstraint("match_id", "player_id", name="uq_player_economy"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(ForeignKey("matches.id"), nullable=False, index=True)
    player_id: Mapped[str] = mapped_column(String(64), nullable=False)
    faction: Mapped[str] = mapped_column(String(64), nullable=False, default="terran")

    money: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    science: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    materials: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Cubes still on each population track (13 = nothing deployed)
    money_cubes: Mapped[int] = mapped_column(Integer, default=13, nullable=False)
    science_cubes: Mapped[int] = mapped_column(Integer, default=13, nullable=False)
    materials_cubes: Mapped[int] = mapped_column(Integer, default=13, nullable=False)

    influence_on_track: Mapped[int] = mapped_column(Integer, default=13, nullable=False)
    influence_on_actions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    influence_on_sectors: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    influence_total: Mapped[int] = mapped_column(Integer, default=13, nullable=False)
    max_influence: Mapped[int] = mapped_column(Integer, default=16, nullable=False)

    colony_ships_total: Mapped[int] = mapped_column(Integer, default=3, nullable=False)
    colony_ships_available: Mapped[int] = mapped_column(Integer, default=3, nullable=False)
    colony_ships_used: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    trade_ratio: Mapped[int] = mapped_column(Integer, default=2, nullable=False)
    money_multiplier: Mapped[float] = mapped_column(Float, default=1.0, nullable=False)
    science_multiplier: Mapped[float] = mapped_column(Float, default=1.0, nullable=False)
    materials_multiplier: Mapped[float] = mapped_column(Float, default=1.0, nullable=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
