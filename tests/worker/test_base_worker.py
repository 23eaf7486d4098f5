import asyncio

import pytest
from unittest.mock import AsyncMock, patch

from src.worker.base import BaseWorker


class TestWorker(BaseWorker):
    __test__ = False

    def __init__(self, interval: float = 0.01) -> None:
        super().__init__(interval)
        self.calls = 0
        self.fail = False

    @property
    def name(self) -> str:
        return "TestWorker"

    async def run_once(self) -> None:
        self.calls += 1
        if self.fail:
            raise ValueError("boom")


@pytest.fixture
def worker():
    return TestWorker()


@pytest.mark.asyncio
async def test_start(worker):
    await worker.start()

    assert worker.is_running is True
    assert worker._task is not None

    await worker.stop()


@pytest.mark.asyncio
async def test_start_twice_keeps_single_task(worker):
    await worker.start()
    task = worker._task
    await worker.start()

    assert worker._task is task
    await worker.stop()


@pytest.mark.asyncio
async def test_runs_periodically(worker):
    await worker.start()
    await asyncio.sleep(0.05)
    await worker.stop()

    assert worker.calls >= 2
    assert worker.get_stats()["runs"] == worker.calls


@pytest.mark.asyncio
async def test_stop(worker):
    await worker.start()
    await worker.stop()

    assert worker.is_running is False
    assert worker._task is None


@pytest.mark.asyncio
async def test_stop_not_running(worker):
    await worker.stop()
    assert worker.is_running is False


@pytest.mark.asyncio
async def test_error_is_logged_and_loop_continues(worker):
    worker.fail = True

    with patch("src.worker.base.log_error", new_callable=AsyncMock) as mock_log:
        await worker._tick()
        await worker._tick()

    assert worker.get_stats() == {"runs": 2, "failures": 2}
    assert mock_log.await_count == 2
