# src/shared/models/__init__.py
"""
Общие DTO и Pydantic-модели.
"""

from src.shared.models.common import (
    CamelModel,
    ErrorResponse,
    HealthStatus,
    ServiceIndex,
    ServiceStats,
)
from src.shared.models.location_dto import (
    ActiveTrack,
    ActiveTracksResponse,
    CleanupResponse,
    IngestResponse,
    LatestLocation,
    LocationFix,
    LocationFixIn,
    LocationUpdatedEvent,
    PathPoint,
    PathResponse,
)
from src.shared.models.session_dto import (
    SessionResponse,
    SessionUpdateRequest,
    TrackedUser,
    TrackSession,
)

__all__ = [
    # Common
    "CamelModel",
    "ErrorResponse",
    "HealthStatus",
    "ServiceIndex",
    "ServiceStats",
    # Location
    "ActiveTrack",
    "ActiveTracksResponse",
    "CleanupResponse",
    "IngestResponse",
    "LatestLocation",
    "LocationFix",
    "LocationFixIn",
    "LocationUpdatedEvent",
    "PathPoint",
    "PathResponse",
    # Session
    "SessionResponse",
    "SessionUpdateRequest",
    "TrackedUser",
    "TrackSession",
]
