# src/services/sessions/repository.py
"""
Хранилище сессий (watch-list) в Redis.

Одна запись на sessionId под ключом session:{sessionId}.
Уникальность обеспечивает сам ключ.
"""

from __future__ import annotations

from datetime import datetime, timezone
from functools import wraps
from typing import Any, Callable, TypeVar

from redis.exceptions import RedisError

from src.common.constants import SESSION_KEY_PREFIX
from src.infra.redis_client import RedisClient
from src.shared.errors import StorageError
from src.shared.models.session_dto import TrackedUser, TrackSession

T = TypeVar("T")


def session_store_call(operation: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Переводит ошибки Redis в StorageError."""
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return await func(*args, **kwargs)
            except (RedisError, RuntimeError, OSError) as e:
                raise StorageError(
                    f"Session store failed to {operation}",
                    details={"reason": str(e)},
                ) from e
        return wrapper  # type: ignore[return-value]
    return decorator


class SessionRepository:
    def __init__(self, redis: RedisClient):
        self.redis = redis

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{SESSION_KEY_PREFIX}{session_id}"

    @session_store_call("read session")
    async def get(self, session_id: str) -> TrackSession | None:
        return await self.redis.get_model(self._key(session_id), TrackSession)

    @session_store_call("create session")
    async def get_or_create(self, session_id: str) -> TrackSession:
        """
        Вернуть сессию, создав пустую при отсутствии.

        Создание через SET NX: при гонке двух первых чтений
        запись появится ровно одна, и оба получат её.
        """
        session = await self.redis.get_model(self._key(session_id), TrackSession)
        if session is not None:
            return session

        fresh = TrackSession(session_id=session_id)
        created = await self.redis.set_model(self._key(session_id), fresh, nx=True)
        if created:
            return fresh

        existing = await self.redis.get_model(self._key(session_id), TrackSession)
        return existing or fresh

    @session_store_call("save session")
    async def upsert(self, session_id: str, tracked_users: list[TrackedUser]) -> TrackSession:
        """Полностью заменить watch-list (без слияния)."""
        session = TrackSession(
            session_id=session_id,
            tracked_users=tracked_users,
            last_updated=datetime.now(timezone.utc),
        )
        await self.redis.set_model(self._key(session_id), session)
        return session
