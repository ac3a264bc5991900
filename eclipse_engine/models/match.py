import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer, JSON, String, func
from sqlalchemy.orm import Mapped, mapped_column

from eclipse_engine.engine.turns import Phase
from eclipse_engine.models.base import Base


class MatchStatus(str, enum.Enum):
    active = "active"
    finished = "finished"


class Match(Base):
    """One match aggregate; every mutation bumps version (compare-and-swap on UPDATE)."""

    __tablename__ = "matches"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[MatchStatus] = mapped_column(
        Enum(MatchStatus), nullable=False, default=MatchStatus.active
    )
    current_round: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    current_phase: Mapped[Phase] = mapped_column(
        Enum(Phase), nullable=False, default=Phase.action
    )
    max_rounds: Mapped[int] = mapped_column(Integer, nullable=False, default=9)
    # Player ids in seating order
    turn_order: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    passed_players: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    # Passed players who have spent their one reaction this round
    reacted_players: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    current_player_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    starting_player_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def active_player_id(self) -> str | None:
        if self.current_phase != Phase.action or len(self.passed_players) == len(self.turn_order):
            return None
        if not 0 <= self.current_player_index < len(self.turn_order):
            return None
        return self.turn_order[self.current_player_index]
