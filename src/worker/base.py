# src/worker/base.py
"""
Базовый класс для периодических воркеров.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

from src.common.logger import log_info, log_error
from src.common.constants import TypeMsg


class BaseWorker(ABC):
    """
    Базовый класс для всех воркеров.
    Выполняет run_once() каждые `interval` секунд в фоновой задаче.
    """

    def __init__(self, interval: float) -> None:
        """
        Инициализирует воркер.

        Args:
            interval: Пауза между запусками (секунды)
        """
        self.interval = interval
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._runs = 0
        self._failures = 0

    @property
    @abstractmethod
    def name(self) -> str:
        """Имя воркера."""
        pass

    @abstractmethod
    async def run_once(self) -> None:
        """Одна итерация работы."""
        pass

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Запускает воркер."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._loop(), name=f"worker:{self.name}")
        await log_info(
            f"Воркер {self.name} запущен (интервал {self.interval} с)",
            type_msg=TypeMsg.INFO,
        )

    async def stop(self) -> None:
        """Останавливает воркер."""
        if not self._running:
            return

        self._running = False

        if self._task is not None:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None

        await log_info(f"Воркер {self.name} остановлен", type_msg=TypeMsg.INFO)

    async def _loop(self) -> None:
        while self._running:
            await asyncio.sleep(self.interval)
            await self._tick()

    async def _tick(self) -> None:
        """Одна итерация; ошибка логируется, цикл продолжается."""
        self._runs += 1
        try:
            await self.run_once()
        except Exception as e:
            self._failures += 1
            await log_error(f"Ошибка в воркере {self.name}: {e}", exc_info=True)

    def get_stats(self) -> dict[str, int]:
        return {"runs": self._runs, "failures": self._failures}
