# tests/worker/test_retention_worker.py
"""
Тесты воркера истечения срока хранения.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.worker.retention import RetentionWorker


@pytest.fixture
def retention() -> MagicMock:
    service = MagicMock()
    service.expire = AsyncMock(return_value=3)
    return service


class TestRetentionWorker:
    """Тесты для RetentionWorker."""

    def test_name(self, retention) -> None:
        assert RetentionWorker(retention, interval=60).name == "retention"

    @pytest.mark.asyncio
    async def test_run_once_expires(self, retention) -> None:
        worker = RetentionWorker(retention, interval=60)

        await worker.run_once()
        await worker.run_once()

        assert retention.expire.await_count == 2
        assert worker.total_expired == 6

    @pytest.mark.asyncio
    async def test_sweeps_on_interval(self, retention) -> None:
        worker = RetentionWorker(retention, interval=0.01)

        await worker.start()
        await asyncio.sleep(0.05)
        await worker.stop()

        assert retention.expire.await_count >= 1

    @pytest.mark.asyncio
    async def test_first_sweep_waits_for_interval(self, retention) -> None:
        worker = RetentionWorker(retention, interval=60)

        await worker.start()
        await asyncio.sleep(0)
        await worker.stop()

        retention.expire.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_storage_error_does_not_stop_worker(self, retention, location_repository, fix_factory) -> None:
        from src.services.tracking.retention import LocationRetentionService

        location_repository.fail = True
        worker = RetentionWorker(LocationRetentionService(location_repository), interval=60)

        await worker._tick()

        assert worker.get_stats()["failures"] == 1
        assert worker.total_expired == 0
        # Хранилище ожило, следующий проход работает
        location_repository.fail = False
        await location_repository.insert(fix_factory("old", minutes_ago=60 * 48))
        await worker._tick()
        assert worker.total_expired == 1
