"""teams table model."""

from __future__ import annotations

from typing import Any

from sqlalchemy import CheckConstraint, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.mixins import JsonDocument, TimestampMixin


class Team(TimestampMixin, Base):
    """Team with its member list, overall accuracy and per-tournament accuracy refs."""

    __tablename__ = "teams"
    __table_args__ = (
        CheckConstraint("accuracy >= 0.0 AND accuracy <= 1.0", name="ck_teams_accuracy"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    member_ids: Mapped[list[int]] = mapped_column(JsonDocument, nullable=False, default=list)
    accuracy: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    accuracy_refs: Mapped[list[dict[str, Any]]] = mapped_column(JsonDocument, nullable=False, default=list)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
