# src/services/tracking/repository.py
"""
Хранилище фиксов в PostgreSQL (tracking_schema.locations).

Все ошибки драйвера и подключения превращаются в StorageError.
"""

from __future__ import annotations

from datetime import datetime
from functools import wraps
from typing import Any, Callable, TypeVar

import asyncpg
from asyncpg import Record

from src.infra.database import CONNECTION_ERRORS, DatabaseManager
from src.shared.errors import StorageError
from src.shared.models.location_dto import LocationFix

T = TypeVar("T")

STORAGE_ERRORS: tuple[type[BaseException], ...] = (
    asyncpg.PostgresError,
    RuntimeError,  # пул не инициализирован
    *CONNECTION_ERRORS,
)


def storage_call(operation: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Переводит ошибки PostgreSQL в StorageError."""
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return await func(*args, **kwargs)
            except STORAGE_ERRORS as e:
                raise StorageError(
                    f"Location store failed to {operation}",
                    details={"reason": str(e)},
                ) from e
        return wrapper  # type: ignore[return-value]
    return decorator


class LocationRepository:
    TABLE = "tracking_schema.locations"
    COLUMNS = 'id, track_id, lat, lng, speed, accuracy, heading, is_active, "timestamp"'

    def __init__(self, db: DatabaseManager):
        self.db = db

    @storage_call("insert fix")
    async def insert(self, fix: LocationFix) -> LocationFix:
        """Сохранить фикс и вернуть сохранённую строку."""
        query = f"""
            INSERT INTO {self.TABLE}
                (track_id, lat, lng, speed, accuracy, heading, is_active, "timestamp")
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            RETURNING {self.COLUMNS}
        """
        row = await self.db.fetchrow(
            query,
            fix.track_id,
            fix.lat,
            fix.lng,
            fix.speed,
            fix.accuracy,
            fix.heading,
            fix.is_active,
            fix.timestamp,
        )
        return self._to_fix(row)

    @storage_call("find latest fix")
    async def find_latest(self, track_id: str) -> LocationFix | None:
        """Последний фикс трека; при равном timestamp побеждает более поздняя вставка."""
        query = f"""
            SELECT {self.COLUMNS} FROM {self.TABLE}
            WHERE track_id = $1
            ORDER BY "timestamp" DESC, id DESC
            LIMIT 1
        """
        row = await self.db.fetchrow(query, track_id)
        return self._to_fix(row) if row else None

    @storage_call("scan path")
    async def find_range(self, track_id: str, since: datetime, limit: int) -> list[LocationFix]:
        """Фиксы трека начиная с `since`, от старых к новым, не более `limit`."""
        query = f"""
            SELECT {self.COLUMNS} FROM {self.TABLE}
            WHERE track_id = $1 AND "timestamp" >= $2
            ORDER BY "timestamp" ASC, id ASC
            LIMIT $3
        """
        rows = await self.db.fetch(query, track_id, since, limit)
        return [self._to_fix(row) for row in rows]

    @storage_call("find active tracks")
    async def find_active_since(self, cutoff: datetime) -> list[LocationFix]:
        """
        Последний активный фикс каждого трека начиная с `cutoff`.

        Неактивные фиксы в выборку не попадают вовсе.
        """
        query = f"""
            SELECT DISTINCT ON (track_id) {self.COLUMNS}
            FROM {self.TABLE}
            WHERE "timestamp" >= $1 AND is_active
            ORDER BY track_id, "timestamp" DESC, id DESC
        """
        rows = await self.db.fetch(query, cutoff)
        return [self._to_fix(row) for row in rows]

    @storage_call("delete old fixes")
    async def delete_older_than(self, cutoff: datetime) -> int:
        """Удалить фиксы строго старше `cutoff`, вернуть их количество."""
        status = await self.db.execute(
            f'DELETE FROM {self.TABLE} WHERE "timestamp" < $1',
            cutoff,
        )
        return self._parse_count(status)

    @staticmethod
    def _to_fix(row: Record | dict[str, Any]) -> LocationFix:
        return LocationFix(
            id=row["id"],
            track_id=row["track_id"],
            lat=row["lat"],
            lng=row["lng"],
            speed=row["speed"],
            accuracy=row["accuracy"],
            heading=row["heading"],
            is_active=row["is_active"],
            timestamp=row["timestamp"],
        )

    @staticmethod
    def _parse_count(status: str) -> int:
        # asyncpg возвращает тег команды, например "DELETE 42"
        try:
            return int(status.split()[-1])
        except (AttributeError, IndexError, ValueError):
            return 0
