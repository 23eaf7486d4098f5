# src/worker/retention.py
"""
Воркер истечения срока хранения фиксов.

Раз в RETENTION_SWEEP_INTERVAL секунд удаляет фиксы старше RETENTION_HOURS.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.common.logger import log_debug
from src.worker.base import BaseWorker

if TYPE_CHECKING:
    from src.services.tracking.retention import LocationRetentionService


class RetentionWorker(BaseWorker):
    def __init__(self, retention: "LocationRetentionService", interval: float) -> None:
        super().__init__(interval)
        self.retention = retention
        self.total_expired = 0

    @property
    def name(self) -> str:
        return "retention"

    async def run_once(self) -> None:
        deleted = await self.retention.expire()
        self.total_expired += deleted
        await log_debug(f"Истёк срок хранения у {deleted} фиксов")
