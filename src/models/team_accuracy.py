"""team_accuracies table model."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.mixins import JsonDocument, TimestampMixin


class TeamAccuracy(TimestampMixin, Base):
    """Running accuracy series for one team in one tournament."""

    __tablename__ = "team_accuracies"
    __table_args__ = (
        UniqueConstraint("team_id", "tournament_id", name="uq_team_accuracies_team_tournament"),
        Index("idx_team_accuracies_tournament", "tournament_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False, index=True)
    tournament_id: Mapped[int] = mapped_column(Integer, nullable=False)
    accuracies: Mapped[list[float]] = mapped_column(JsonDocument, nullable=False, default=list)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
