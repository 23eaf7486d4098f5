# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import json
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Iterator, Type, TypeVar
from unittest.mock import AsyncMock, patch

import pytest
from pydantic import BaseModel

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("DB_PASSWORD", "test_password")
os.environ.setdefault("REDIS_PASSWORD", "")

from src.shared.errors import StorageError
from src.shared.models.location_dto import LocationFix

M = TypeVar("M", bound=BaseModel)


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    """Путь к файлу конфигурации."""
    return project_root / "config" / "config.json"


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Мок конфигурации для тестов."""
    return {
        "_comment_system": "Системные настройки",
        "PROJECT_NAME": "bus_tracker_test",
        "VERSION": "1.0.0-test",
        "DEBUG": True,
        "LOG_LEVEL": "DEBUG",
        "ENVIRONMENT": "test",
        "TRACKING_SERVICE_HOST": "127.0.0.1",
        "TRACKING_SERVICE_PORT": 5050,
        "LOG_TO_FILE": False,
        "LOG_FILE_PATH": "logs/test.log",
        "LOG_FORMAT": "json",
        "DB_HOST": "localhost",
        "DB_PORT": 5432,
        "DB_NAME": "bus_tracker_test",
        "DB_USER": "postgres",
        "DB_PASSWORD": "test_password",
        "REDIS_HOST": "localhost",
        "REDIS_PORT": 6379,
        "REDIS_DB": 1,
        "REDIS_NAMESPACE": "tracker_test",
        "RETENTION_HOURS": 12,
        "RECENT_WINDOW_MINUTES": 5,
        "ACTIVE_WINDOW_MINUTES": 5,
        "PATH_DEFAULT_HOURS": 2,
        "PATH_MAX_POINTS": 1000,
        "CLEANUP_DEFAULT_HOURS": 24,
        "RETENTION_SWEEP_INTERVAL": 30,
        "DEFAULT_SESSION_ID": "default-session",
        "SUBSCRIBER_QUEUE_SIZE": 8,
        "CORS_ORIGINS": ["*"],
    }


@pytest.fixture
def temp_config_file(tmp_path: Path, mock_config: dict[str, Any]) -> Path:
    """Создаёт временный файл конфигурации."""
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps(mock_config, ensure_ascii=False, indent=2))
    return config_file


# =============================================================================
# ФЕЙКОВЫЕ ХРАНИЛИЩА
# =============================================================================

class InMemoryLocationRepository:
    """
    Хранилище фиксов в памяти с тем же контрактом, что LocationRepository.

    fail=True имитирует недоступный PostgreSQL.
    """

    def __init__(self) -> None:
        self.rows: list[LocationFix] = []
        self.fail = False
        self._next_id = 1

    def _check(self) -> None:
        if self.fail:
            raise StorageError("Location store failed", details={"reason": "connection refused"})

    async def insert(self, fix: LocationFix) -> LocationFix:
        self._check()
        return self.add(fix)

    def add(self, fix: LocationFix) -> LocationFix:
        """Синхронная вставка для подготовки данных."""
        saved = fix.model_copy(update={"id": self._next_id})
        self._next_id += 1
        self.rows.append(saved)
        return saved

    def _ordered(self, rows: list[LocationFix]) -> list[LocationFix]:
        return sorted(rows, key=lambda f: (f.timestamp, f.id))

    async def find_latest(self, track_id: str) -> LocationFix | None:
        self._check()
        rows = self._ordered([f for f in self.rows if f.track_id == track_id])
        return rows[-1] if rows else None

    async def find_range(self, track_id: str, since: datetime, limit: int) -> list[LocationFix]:
        self._check()
        rows = self._ordered(
            [f for f in self.rows if f.track_id == track_id and f.timestamp >= since]
        )
        return rows[:limit]

    async def find_active_since(self, cutoff: datetime) -> list[LocationFix]:
        self._check()
        latest: dict[str, LocationFix] = {}
        for fix in self._ordered(
            [f for f in self.rows if f.timestamp >= cutoff and f.is_active]
        ):
            latest[fix.track_id] = fix
        return list(latest.values())

    async def delete_older_than(self, cutoff: datetime) -> int:
        self._check()
        before = len(self.rows)
        self.rows = [f for f in self.rows if f.timestamp >= cutoff]
        return before - len(self.rows)


class FakeRedisClient:
    """Минимальный RedisClient в памяти (get_model/set_model с NX)."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.connected = True

    async def get_model(self, key: str, model_class: Type[M]) -> M | None:
        raw = self.data.get(key)
        if raw is None:
            return None
        return model_class.model_validate_json(raw)

    async def set_model(self, key: str, model: BaseModel, ttl: int | None = None, nx: bool = False) -> bool:
        if nx and key in self.data:
            return False
        self.data[key] = model.model_dump_json()
        return True

    async def health_check(self) -> bool:
        return self.connected


class FakeDatabase:
    """DatabaseManager для /health."""

    def __init__(self, healthy: bool = True) -> None:
        self.healthy = healthy

    async def health_check(self) -> bool:
        return self.healthy


# =============================================================================
# ФИКСТУРЫ ИНФРАСТРУКТУРЫ (МОКИ)
# =============================================================================

@pytest.fixture
def mock_db() -> AsyncMock:
    """Мок менеджера базы данных."""
    db = AsyncMock()
    db.fetchrow = AsyncMock(return_value=None)
    db.fetch = AsyncMock(return_value=[])
    db.execute = AsyncMock(return_value="DELETE 0")
    return db


@pytest.fixture
def location_repository() -> InMemoryLocationRepository:
    return InMemoryLocationRepository()


@pytest.fixture
def fake_redis() -> FakeRedisClient:
    return FakeRedisClient()


@pytest.fixture
def tracking_app(location_repository: InMemoryLocationRepository, fake_redis: FakeRedisClient):
    """Приложение на фейковых хранилищах, инфраструктура в lifespan замокана."""
    from src.services.sessions.repository import SessionRepository
    from src.services.tracking.app import create_app

    with patch("src.services.tracking.app.init_db", new=AsyncMock()), \
         patch("src.services.tracking.app.init_redis", new=AsyncMock()), \
         patch("src.services.tracking.app.close_db", new=AsyncMock()), \
         patch("src.services.tracking.app.close_redis", new=AsyncMock()):
        yield create_app(
            location_repository=location_repository,
            session_repository=SessionRepository(fake_redis),
            db=FakeDatabase(),
            redis=fake_redis,
        )


@pytest.fixture
def client(tracking_app) -> Iterator[Any]:
    """TestClient с запущенным lifespan (общий event loop для HTTP и WebSocket)."""
    from fastapi.testclient import TestClient

    with TestClient(tracking_app) as test_client:
        yield test_client


# =============================================================================
# ФИКСТУРЫ МОДЕЛЕЙ
# =============================================================================

def make_fix(
    track_id: str = "bus1",
    lat: float = 53.55,
    lng: float = 10.0,
    *,
    minutes_ago: float = 0,
    speed: float = 10.0,
    accuracy: float = 5.0,
    heading: float | None = None,
    is_active: bool = True,
) -> LocationFix:
    """Нормализованный фикс с timestamp в прошлом."""
    return LocationFix(
        track_id=track_id,
        lat=lat,
        lng=lng,
        speed=speed,
        accuracy=accuracy,
        heading=heading,
        is_active=is_active,
        timestamp=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
    )


@pytest.fixture
def sample_fix_payload() -> dict[str, Any]:
    """Тело POST /api/location."""
    return {
        "trackId": "bus1",
        "lat": 53.5511,
        "lng": 9.9937,
        "speed": 12.5,
        "accuracy": 4.0,
        "heading": 90.0,
        "isActive": True,
    }


@pytest.fixture
def fix_factory():
    """Фабрика нормализованных фиксов."""
    return make_fix
