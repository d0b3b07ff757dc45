"""scoring_ledger and id_allocations table models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class ScoringLedgerEntry(Base):
    """One applied (entity, tournament, match) triple."""

    __tablename__ = "scoring_ledger"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    key: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )


class IdAllocation(Base):
    """Next free id per document kind."""

    __tablename__ = "id_allocations"

    kind: Mapped[str] = mapped_column(String(32), primary_key=True)
    next_id: Mapped[int] = mapped_column(Integer, nullable=False)
