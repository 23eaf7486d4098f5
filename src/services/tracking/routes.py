# src/services/tracking/routes.py
"""
HTTP эндпоинты фиксов: приём, запросы и ручная очистка.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from src.config import settings
from src.services.tracking.dependencies import (
    get_ingest_service,
    get_query_service,
    get_retention_service,
)
from src.services.tracking.queries import LocationQueryService
from src.services.tracking.retention import LocationRetentionService
from src.services.tracking.service import LocationIngestService
from src.services.tracking.utils import parse_hours
from src.shared.models.location_dto import (
    ActiveTracksResponse,
    CleanupResponse,
    IngestResponse,
    LatestLocation,
    LocationFixIn,
    PathResponse,
)

router = APIRouter(tags=["Location"])


@router.post("/location", response_model=IngestResponse, status_code=status.HTTP_201_CREATED)
async def ingest_location(
    fix: LocationFixIn,
    service: LocationIngestService = Depends(get_ingest_service),
):
    """Принять фикс, сохранить и разослать подписчикам."""
    saved = await service.ingest(fix)
    return IngestResponse(location=saved)


@router.get("/location/{track_id}", response_model=LatestLocation)
async def get_latest_location(
    track_id: str,
    service: LocationQueryService = Depends(get_query_service),
):
    return await service.latest(track_id)


@router.get("/path/{track_id}", response_model=PathResponse)
async def get_path(
    track_id: str,
    hours: Optional[str] = Query(default=None),
    service: LocationQueryService = Depends(get_query_service),
):
    window = parse_hours(hours, settings.tracking.PATH_DEFAULT_HOURS)
    return await service.path(track_id, window)


@router.get("/tracks/active", response_model=ActiveTracksResponse)
async def get_active_tracks(
    service: LocationQueryService = Depends(get_query_service),
):
    return await service.active_tracks()


@router.delete("/cleanup", response_model=CleanupResponse)
async def cleanup_locations(
    hours: Optional[str] = Query(default=None),
    service: LocationRetentionService = Depends(get_retention_service),
):
    """Удалить фиксы старше hours часов (по умолчанию 24)."""
    window = parse_hours(hours, settings.tracking.CLEANUP_DEFAULT_HOURS)
    deleted = await service.cleanup(window)
    return CleanupResponse(deleted_count=deleted)
