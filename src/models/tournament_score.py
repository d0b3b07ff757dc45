"""tournament_scores table model."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.mixins import JsonDocument, TimestampMixin


class TournamentScore(TimestampMixin, Base):
    """Running score series for one user in one tournament."""

    __tablename__ = "tournament_scores"
    __table_args__ = (
        UniqueConstraint("user_id", "tournament_id", name="uq_tournament_scores_user_tournament"),
        Index("idx_tournament_scores_tournament", "tournament_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    tournament_id: Mapped[int] = mapped_column(Integer, nullable=False)
    scores: Mapped[list[float]] = mapped_column(JsonDocument, nullable=False, default=list)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
