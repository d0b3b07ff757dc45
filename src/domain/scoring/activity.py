"""Default activity sinks."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class LoggingActivityPublisher:
    """Writes team activities to the log instead of a feed."""

    def publish_team_activity(self, team_id: int, activity_type: str, message: str) -> None:
        logger.info("team id=%s activity=%s %s", team_id, activity_type, message)


class RecordingActivityPublisher:
    """Keeps published activities in memory, in publish order."""

    def __init__(self) -> None:
        self.activities: list[tuple[int, str, str]] = []

    def publish_team_activity(self, team_id: int, activity_type: str, message: str) -> None:
        self.activities.append((team_id, activity_type, message))


__all__ = ["LoggingActivityPublisher", "RecordingActivityPublisher"]
