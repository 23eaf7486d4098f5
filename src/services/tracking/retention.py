# src/services/tracking/retention.py
"""
Удаление старых фиксов: ручная очистка и автоматическое истечение срока хранения.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.config import settings
from src.common.logger import log_info
from src.services.tracking.utils import hours_ago

if TYPE_CHECKING:
    from src.config.loader import TrackingSettings
    from src.services.tracking.repository import LocationRepository


class LocationRetentionService:
    def __init__(
        self,
        repository: "LocationRepository",
        config: "TrackingSettings | None" = None,
    ) -> None:
        self._repository = repository
        self._config = config or settings.tracking

    async def cleanup(self, hours: float) -> int:
        """
        Удалить фиксы старше `hours` часов.

        Идемпотентно: повторный вызов вернёт 0.
        hours=0 удаляет все фиксы с timestamp в прошлом, отрицательные
        hours захватывают и фиксы с timestamp в будущем.

        Returns:
            Количество удалённых фиксов
        """
        cutoff = hours_ago(hours)
        deleted = await self._repository.delete_older_than(cutoff)
        await log_info(
            f"Очистка: удалено {deleted} фиксов старше {hours} ч",
            extra={"cutoff": cutoff.isoformat(), "deleted": deleted},
        )
        return deleted

    async def expire(self) -> int:
        """Удалить фиксы, у которых истёк срок хранения (RETENTION_HOURS)."""
        return await self.cleanup(self._config.RETENTION_HOURS)
