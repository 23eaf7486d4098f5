#!/usr/bin/env python3
# main.py
"""
Главная точка входа сервиса трекинга.

Подключение к PostgreSQL/Redis и фоновые воркеры запускаются
в lifespan приложения (src.services.tracking.app).
"""

from __future__ import annotations

import asyncio
import sys

import uvicorn

from src.config import settings
from src.common.logger import setup_logging, log_info
from src.common.constants import TypeMsg


async def run_tracking_service() -> None:
    """Запускает HTTP + WebSocket сервер трекинга."""
    await log_info(
        f"Запуск {settings.system.PROJECT_NAME} v{settings.system.VERSION} "
        f"на порту {settings.deployment.TRACKING_SERVICE_PORT}...",
        type_msg=TypeMsg.INFO,
    )

    config = uvicorn.Config(
        "src.services.tracking.app:app",
        host=settings.deployment.TRACKING_SERVICE_HOST,
        port=settings.deployment.TRACKING_SERVICE_PORT,
        log_level="debug" if settings.system.DEBUG else "info",
    )

    server = uvicorn.Server(config)
    try:
        await server.serve()
    except asyncio.CancelledError:
        await log_info("Tracking Service: graceful shutdown", type_msg=TypeMsg.DEBUG)
        await server.shutdown()


def main() -> None:
    setup_logging()
    try:
        asyncio.run(run_tracking_service())
    except KeyboardInterrupt:
        print("\nОстановлено пользователем")
        sys.exit(0)


if __name__ == "__main__":
    main()
