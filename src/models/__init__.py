"""ORM models."""

from models.base import Base
from models.ledger import IdAllocation, ScoringLedgerEntry
from models.team import Team
from models.team_accuracy import TeamAccuracy
from models.tournament_score import TournamentScore
from models.user import User

__all__ = [
    "Base",
    "IdAllocation",
    "ScoringLedgerEntry",
    "Team",
    "TeamAccuracy",
    "TournamentScore",
    "User",
]
