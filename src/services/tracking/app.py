# src/services/tracking/app.py
"""
FastAPI приложение сервиса трекинга.

Endpoints:
- GET /, GET /health, GET /stats
- POST /api/location, GET /api/location/{trackId}
- GET /api/path/{trackId}?hours=N, GET /api/tracks/active
- DELETE /api/cleanup?hours=N
- GET/POST /api/session/{sessionId} (без id: сессия по умолчанию)
- WebSocket /ws
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.common.logger import log_error, log_info, setup_logging
from src.common.constants import TypeMsg
from src.config import settings
from src.infra.database import DatabaseManager, close_db, get_db, init_db
from src.infra.redis_client import RedisClient, close_redis, get_redis, init_redis
from src.services.realtime_ws.connection_manager import SubscriptionRegistry
from src.services.realtime_ws.routes import router as ws_router
from src.services.sessions.repository import SessionRepository
from src.services.sessions.routes import router as session_router
from src.services.tracking.queries import LocationQueryService
from src.services.tracking.repository import LocationRepository
from src.services.tracking.retention import LocationRetentionService
from src.services.tracking.routes import router as tracking_router
from src.services.tracking.service import LocationIngestService
from src.shared.errors import NotFoundError, StorageError, TrackingError
from src.shared.models.common import ErrorResponse, HealthStatus, ServiceIndex, ServiceStats
from src.worker.retention import RetentionWorker


# =============================================================================
# LIFESPAN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Жизненный цикл приложения."""
    setup_logging()
    await log_info(f"{settings.system.PROJECT_NAME} запускается...", type_msg=TypeMsg.INFO)

    # Недоступное хранилище не мешает старту: /health покажет disconnected
    try:
        await init_db()
    except Exception as e:
        await log_error(f"PostgreSQL недоступен при старте: {e}")

    try:
        await init_redis()
    except Exception as e:
        await log_error(f"Redis недоступен при старте: {e}")

    worker = RetentionWorker(
        app.state.retention_service,
        interval=settings.tracking.RETENTION_SWEEP_INTERVAL,
    )
    await worker.start()
    app.state.retention_worker = worker

    await log_info(
        f"Сервер трекинга слушает {settings.deployment.TRACKING_SERVICE_HOST}:"
        f"{settings.deployment.TRACKING_SERVICE_PORT} "
        f"(WebSocket /ws, API /api, срок хранения {settings.tracking.RETENTION_HOURS} ч)",
        type_msg=TypeMsg.INFO,
    )

    yield

    await worker.stop()

    registry: SubscriptionRegistry = app.state.registry
    for connection in registry.connections():
        registry.disconnect(connection)
        await connection.close()

    await close_redis()
    await close_db()
    await log_info(f"{settings.system.PROJECT_NAME} остановлен", type_msg=TypeMsg.INFO)


# =============================================================================
# ОБРАБОТЧИКИ ОШИБОК
# =============================================================================

async def tracking_error_handler(request: Request, exc: TrackingError) -> JSONResponse:
    if isinstance(exc, StorageError):
        await log_error(f"{request.method} {request.url.path}: {exc.message}", extra=exc.details)
    elif not isinstance(exc, NotFoundError):
        await log_info(f"{request.method} {request.url.path}: {exc.message}", type_msg=TypeMsg.DEBUG)

    body = ErrorResponse(error_code=exc.error_code, message=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    body = ErrorResponse(
        error_code="validation_error",
        message="Invalid request",
        details={"errors": jsonable_errors(exc)},
    )
    return JSONResponse(status_code=400, content=body.model_dump())


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Ошибки pydantic без несериализуемых полей (ctx, input)."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


# =============================================================================
# ПРИЛОЖЕНИЕ
# =============================================================================

def create_app(
    location_repository: Optional[LocationRepository] = None,
    session_repository: Optional[SessionRepository] = None,
    db: Optional[DatabaseManager] = None,
    redis: Optional[RedisClient] = None,
) -> FastAPI:
    """
    Собрать приложение.

    Реестр подписок и сервисы принадлежат экземпляру приложения
    (app.state), каждое приложение получает свой реестр.
    """
    app = FastAPI(
        title="Bus Tracker",
        description="Трекинг местоположения в реальном времени",
        version=settings.system.VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    db = db or get_db()
    redis = redis or get_redis()
    location_repository = location_repository or LocationRepository(db)
    session_repository = session_repository or SessionRepository(redis)
    registry = SubscriptionRegistry()

    app.state.db = db
    app.state.redis = redis
    app.state.registry = registry
    app.state.location_repository = location_repository
    app.state.session_repository = session_repository
    app.state.ingest_service = LocationIngestService(location_repository, registry)
    app.state.query_service = LocationQueryService(location_repository)
    app.state.retention_service = LocationRetentionService(location_repository)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.realtime.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TrackingError, tracking_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(tracking_router, prefix="/api")
    app.include_router(session_router, prefix="/api")
    app.include_router(ws_router)

    # =========================================================================
    # СЛУЖЕБНЫЕ ЭНДПОИНТЫ
    # =========================================================================

    @app.get("/", response_model=ServiceIndex, tags=["Health"])
    async def index() -> ServiceIndex:
        return ServiceIndex(
            message=f"{settings.system.PROJECT_NAME} API",
            version=settings.system.VERSION,
            endpoints={
                "POST /api/location": "Принять фикс",
                "GET /api/location/{trackId}": "Последний фикс трека",
                "GET /api/path/{trackId}?hours=N": "Путь за N часов",
                "GET /api/tracks/active": "Активные треки",
                "DELETE /api/cleanup?hours=N": "Удалить фиксы старше N часов",
                "GET /api/session/{sessionId}": "Получить сессию",
                "POST /api/session/{sessionId}": "Заменить watch-list",
                "GET/POST /api/session": "Сессия по умолчанию",
                "GET /health": "Проверка здоровья",
                "GET /stats": "Статистика",
                "WS /ws": "Подписка на обновления",
            },
        )

    @app.get("/health", response_model=HealthStatus, tags=["Health"])
    async def health_check() -> HealthStatus:
        """Проверка здоровья сервиса."""
        storage_ok = await app.state.db.health_check()
        session_ok = await app.state.redis.health_check()
        return HealthStatus(
            status="ok" if storage_ok else "degraded",
            storage_connected=storage_ok,
            session_store_connected=session_ok,
            active_track_count=app.state.registry.active_track_count(),
            timestamp=datetime.now(timezone.utc),
        )

    @app.get("/stats", response_model=ServiceStats, tags=["Stats"])
    async def get_stats() -> ServiceStats:
        """Счётчики приёма и рассылки."""
        ingest = app.state.ingest_service.get_stats()
        registry_stats = app.state.registry.get_stats()
        return ServiceStats(
            total_ingested=ingest["total_ingested"],
            deliveries_sent=ingest["deliveries_sent"],
            deliveries_dropped=ingest["deliveries_dropped"],
            active_connections=registry_stats["active_connections"],
            active_tracks=registry_stats["active_tracks"],
        )

    return app


app = create_app()
