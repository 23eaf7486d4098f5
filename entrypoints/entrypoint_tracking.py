#!/usr/bin/env python3
"""
Entrypoint для сервиса трекинга.

Запуск:
    python entrypoints/entrypoint_tracking.py

Порт по умолчанию: 5000 (TRACKING_SERVICE_PORT)
"""

import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

import uvicorn

from src.config import settings


def main() -> None:
    """Запустить сервис трекинга."""
    uvicorn.run(
        "src.services.tracking.app:app",
        host=settings.deployment.TRACKING_SERVICE_HOST,
        port=settings.deployment.TRACKING_SERVICE_PORT,
        reload=settings.system.DEBUG,
        log_level=settings.system.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
