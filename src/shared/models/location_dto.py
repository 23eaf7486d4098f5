# src/shared/models/location_dto.py
"""
DTO фиксов геолокации: входящий фикс, сохранённый фикс и ответы запросов.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from src.shared.models.common import CamelModel


class LocationFixIn(CamelModel):
    """
    Фикс в том виде, в каком его прислал клиент.

    Все поля необязательны на уровне схемы: наличие trackId/lat/lng
    проверяет сервис приёма, чтобы отличать «нет поля» от нуля.
    """
    track_id: str | None = None
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)
    speed: float | None = None  # м/с
    accuracy: float | None = None  # метры
    heading: float | None = None  # градусы
    is_active: bool | None = None
    timestamp: datetime | None = None


class LocationFix(CamelModel):
    """Нормализованный фикс (все значения по умолчанию применены)."""
    id: int | None = Field(default=None, exclude=True)
    track_id: str
    lat: float
    lng: float
    speed: float = 0.0
    accuracy: float = 0.0
    heading: float | None = None
    is_active: bool = True
    timestamp: datetime


class LatestLocation(LocationFix):
    """Последний фикс трека с признаком свежести."""
    is_recent: bool


class LocationUpdatedEvent(LocationFix):
    """Payload push-события location_updated."""
    is_recent: bool = True


class IngestResponse(CamelModel):
    """Ответ на приём фикса."""
    success: bool = True
    location: LocationFix


class PathPoint(CamelModel):
    """Точка пути."""
    lat: float
    lng: float
    timestamp: datetime
    speed: float


class PathResponse(CamelModel):
    """Путь трека за окно."""
    track_id: str
    points: list[PathPoint]
    count: int


class ActiveTrack(CamelModel):
    """Активный трек: данные последнего подходящего фикса."""
    track_id: str
    lat: float
    lng: float
    speed: float
    accuracy: float
    timestamp: datetime
    is_active: bool = True
    is_recent: bool = True


class ActiveTracksResponse(CamelModel):
    """Список активных треков."""
    count: int
    tracks: list[ActiveTrack]


class CleanupResponse(CamelModel):
    """Результат ручной очистки."""
    success: bool = True
    deleted_count: int
