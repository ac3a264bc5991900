from sqlalchemy import Boolean, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from eclipse_engine.models.base import Base


class ShipRecord(Base):
    __tablename__ = "ships"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    match_id: Mapped[int] = mapped_column(ForeignKey("matches.id"), nullable=False, index=True)
    player_id: Mapped[str] = mapped_column(String(64), nullable=False)
    sector_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    ship_type: Mapped[str] = mapped_column(String(32), nullable=False)
    initiative: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    hull_capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    damage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    shield_tier: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    computer: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # List of {"dice": int, "damage": int}
    weapons: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_destroyed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
