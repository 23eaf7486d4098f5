# src/shared/models/common.py
"""
Общие модели для всех эндпоинтов.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """База для DTO: snake_case в Python, camelCase в JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ErrorResponse(BaseModel):
    """Стандартный ответ с ошибкой."""

    error_code: str
    message: str
    details: dict[str, Any] | None = None


class HealthStatus(CamelModel):
    """Статус здоровья сервиса."""

    status: str = "ok"  # ok, degraded
    storage_connected: bool
    session_store_connected: bool
    active_track_count: int
    timestamp: datetime


class ServiceStats(CamelModel):
    """Счётчики сервиса."""

    total_ingested: int = 0
    deliveries_sent: int = 0
    deliveries_dropped: int = 0
    active_connections: int = 0
    active_tracks: int = 0


class ServiceIndex(BaseModel):
    """Описание сервиса и его эндпоинтов."""

    message: str
    version: str
    endpoints: dict[str, str] = Field(default_factory=dict)
