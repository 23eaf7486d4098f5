# src/services/tracking/queries.py
"""
Запросы к хранилищу фиксов: последний фикс, путь и активные треки.

Сервис без состояния, всё состояние живёт в PostgreSQL.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from src.config import settings
from src.shared.errors import NotFoundError
from src.shared.models.location_dto import (
    ActiveTrack,
    ActiveTracksResponse,
    LatestLocation,
    PathPoint,
    PathResponse,
)
from src.services.tracking.utils import hours_ago

if TYPE_CHECKING:
    from src.config.loader import TrackingSettings
    from src.services.tracking.repository import LocationRepository


class LocationQueryService:
    def __init__(
        self,
        repository: "LocationRepository",
        config: "TrackingSettings | None" = None,
    ) -> None:
        self._repository = repository
        self._config = config or settings.tracking

    @property
    def recent_window(self) -> timedelta:
        return timedelta(minutes=self._config.RECENT_WINDOW_MINUTES)

    @property
    def active_window(self) -> timedelta:
        return timedelta(minutes=self._config.ACTIVE_WINDOW_MINUTES)

    async def latest(self, track_id: str) -> LatestLocation:
        """
        Последний фикс трека.

        Устаревший трек не ошибка: он возвращается с isRecent=false.

        Raises:
            NotFoundError: по треку нет ни одного фикса
        """
        fix = await self._repository.find_latest(track_id)
        if fix is None:
            raise NotFoundError(
                f"No location found for track {track_id}",
                details={"trackId": track_id},
            )

        now = datetime.now(timezone.utc)
        return LatestLocation(
            **fix.model_dump(),
            is_recent=(now - fix.timestamp) < self.recent_window,
        )

    async def path(self, track_id: str, hours: float) -> PathResponse:
        """
        Путь трека за последние `hours` часов, от старых точек к новым.

        Результат ограничен PATH_MAX_POINTS точками; для широких окон
        клиент сужает окно сам.
        """
        since = hours_ago(hours)
        fixes = await self._repository.find_range(
            track_id, since, self._config.PATH_MAX_POINTS
        )

        points = [
            PathPoint(lat=f.lat, lng=f.lng, timestamp=f.timestamp, speed=f.speed)
            for f in fixes
        ]
        return PathResponse(track_id=track_id, points=points, count=len(points))

    async def active_tracks(self) -> ActiveTracksResponse:
        """Треки с активным фиксом в окне; данные берутся из последнего такого фикса."""
        cutoff = datetime.now(timezone.utc) - self.active_window
        fixes = await self._repository.find_active_since(cutoff)

        tracks = [
            ActiveTrack(
                track_id=f.track_id,
                lat=f.lat,
                lng=f.lng,
                speed=f.speed,
                accuracy=f.accuracy,
                timestamp=f.timestamp,
            )
            for f in fixes
        ]
        return ActiveTracksResponse(count=len(tracks), tracks=tracks)
