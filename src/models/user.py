"""users table model."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.mixins import JsonDocument, TimestampMixin


class User(TimestampMixin, Base):
    """Platform user with a lifetime score and refs to per-tournament score rows."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    score_refs: Mapped[list[dict[str, Any]]] = mapped_column(JsonDocument, nullable=False, default=list)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
