"""Combat log rows, one per resolved combat encounter."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String, func
from sqlalchemy.orm import Mapped, mapped_column

from eclipse_engine.models.base import Base


class CombatLog(Base):
    """One row per (match_id, sector_id, round_number) combat.

    The seed is stored so the combat can be replayed with the same resolver.
    """

    __tablename__ = "combat_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, index=True)
    match_id: Mapped[int] = mapped_column(ForeignKey("matches.id"), nullable=False, index=True)
    sector_id: Mapped[str] = mapped_column(String(64), nullable=False)
    round_number: Mapped[int] = mapped_column(Integer, nullable=False)
    seed: Mapped[str] = mapped_column(String(255), nullable=False)
    player_a_id: Mapped[str] = mapped_column(String(64), nullable=False)
    player_b_id: Mapped[str] = mapped_column(String(64), nullable=False)
    winner_player_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    log_entries: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
