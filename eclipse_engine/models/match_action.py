from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, JSON, String, func
from sqlalchemy.orm import Mapped, mapped_column

from eclipse_engine.engine.turns import ActionKind
from eclipse_engine.models.base import Base


class MatchAction(Base):
    __tablename__ = "match_actions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    match_id: Mapped[int] = mapped_column(ForeignKey("matches.id"), nullable=False, index=True)
    player_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    action_kind: Mapped[ActionKind] = mapped_column(Enum(ActionKind), nullable=False)
    payload: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    round_number: Mapped[int] = mapped_column(Integer, nullable=False)
    # 1-based position among this player's actions in the round
    action_number: Mapped[int] = mapped_column(Integer, nullable=False)
    is_reaction: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
