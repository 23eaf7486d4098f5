# src/services/tracking/dependencies.py
"""
FastAPI зависимости сервиса трекинга.

Все объекты создаются в create_app() и живут в app.state.
"""

from fastapi import Request

from src.services.tracking.queries import LocationQueryService
from src.services.tracking.retention import LocationRetentionService
from src.services.tracking.service import LocationIngestService


def get_ingest_service(request: Request) -> LocationIngestService:
    return request.app.state.ingest_service


def get_query_service(request: Request) -> LocationQueryService:
    return request.app.state.query_service


def get_retention_service(request: Request) -> LocationRetentionService:
    return request.app.state.retention_service
