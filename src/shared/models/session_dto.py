# src/shared/models/session_dto.py
"""
DTO сессий: список отслеживаемых треков (watch-list) клиента.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import Field

from src.shared.models.common import CamelModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TrackedUser(CamelModel):
    """Отслеживаемый трек в watch-list."""
    track_id: str = Field(..., min_length=1)
    color: str
    display_name: str
    added_at: datetime = Field(default_factory=_utcnow)


class TrackSession(CamelModel):
    """Сессия: одна запись на sessionId."""
    session_id: str
    tracked_users: list[TrackedUser] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=_utcnow)


class SessionUpdateRequest(CamelModel):
    """Полная замена watch-list."""
    tracked_users: list[TrackedUser]


class SessionResponse(CamelModel):
    """Ответ с сессией."""
    success: bool = True
    session: TrackSession
