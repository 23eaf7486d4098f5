# src/worker/__init__.py
"""
Фоновые воркеры сервиса трекинга.
"""

from src.worker.base import BaseWorker
from src.worker.retention import RetentionWorker

__all__ = ["BaseWorker", "RetentionWorker"]
