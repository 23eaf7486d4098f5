# src/shared/errors.py
"""
Таксономия ошибок сервиса трекинга.

- ValidationError: нет обязательных полей или они некорректны (400, без ретраев)
- NotFoundError: объект запроса отсутствует (404, не логируется как ошибка)
- StorageError: хранилище недоступно или отклонило операцию (500)
- BroadcastDeliveryFailure: не удалось доставить push одному соединению
  (никогда не отдаётся клиенту, который прислал фикс)
"""

from __future__ import annotations

from typing import Any


class TrackingError(Exception):
    """Базовая ошибка сервиса."""

    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(TrackingError):
    """Некорректный или неполный ввод."""

    error_code = "validation_error"
    status_code = 400


class NotFoundError(TrackingError):
    """Запрошенный объект не найден."""

    error_code = "not_found"
    status_code = 404


class StorageError(TrackingError):
    """Ошибка хранилища (PostgreSQL или Redis)."""

    error_code = "storage_error"
    status_code = 500


class BroadcastDeliveryFailure(TrackingError):
    """Сообщение не доставлено конкретному подписчику."""

    error_code = "broadcast_delivery_failure"
    status_code = 500

    def __init__(self, connection_id: str, reason: str) -> None:
        super().__init__(
            f"Доставка в соединение {connection_id} не удалась: {reason}",
            details={"connectionId": connection_id, "reason": reason},
        )
        self.connection_id = connection_id
        self.reason = reason
