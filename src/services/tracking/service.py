# src/services/tracking/service.py
"""
Бизнес-логика приёма фиксов.

Порядок: валидация -> сохранение в PostgreSQL -> рассылка подписчикам.
Рассылка идёт только после успешной записи и никогда не ломает приём.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from src.common.constants import MPS_TO_KMH, WsMessageType
from src.common.logger import log_info, log_warning
from src.shared.errors import BroadcastDeliveryFailure, ValidationError
from src.shared.models.location_dto import LocationFix, LocationFixIn, LocationUpdatedEvent

if TYPE_CHECKING:
    from src.services.realtime_ws.connection_manager import SubscriptionRegistry
    from src.services.tracking.repository import LocationRepository


class LocationIngestService:
    """
    Сервис приёма фиксов.

    Ответственности:
    - Проверка обязательных полей (trackId, lat, lng)
    - Значения по умолчанию для необязательных полей
    - Сохранение фикса
    - Неблокирующая рассылка location_updated подписчикам трека
    """

    def __init__(
        self,
        repository: "LocationRepository",
        registry: "SubscriptionRegistry",
    ) -> None:
        self._repository = repository
        self._registry = registry

        # Статистика
        self._total_ingested = 0
        self._deliveries_sent = 0
        self._deliveries_dropped = 0

    @staticmethod
    def normalize(fix: LocationFixIn) -> LocationFix:
        """
        Проверить обязательные поля и применить значения по умолчанию.

        Ноль считается допустимой координатой: проверяется наличие поля,
        а не его истинность.

        Raises:
            ValidationError: нет trackId, lat или lng
        """
        missing = []
        if fix.track_id is None or not fix.track_id.strip():
            missing.append("trackId")
        if fix.lat is None:
            missing.append("lat")
        if fix.lng is None:
            missing.append("lng")
        if missing:
            raise ValidationError(
                "trackId, lat and lng are required",
                details={"missing": missing},
            )

        timestamp = fix.timestamp or datetime.now(timezone.utc)
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)

        return LocationFix(
            track_id=fix.track_id,
            lat=fix.lat,
            lng=fix.lng,
            speed=fix.speed if fix.speed is not None else 0.0,
            accuracy=fix.accuracy if fix.accuracy is not None else 0.0,
            heading=fix.heading,
            is_active=fix.is_active if fix.is_active is not None else True,
            timestamp=timestamp,
        )

    async def ingest(self, fix_in: LocationFixIn) -> LocationFix:
        """
        Принять фикс.

        1. Валидация (до любой записи)
        2. Сохранение (StorageError пробрасывается, рассылки нет)
        3. Рассылка подписчикам trackId

        Returns:
            Сохранённый фикс
        """
        fix = self.normalize(fix_in)
        saved = await self._repository.insert(fix)

        # Между записью и постановкой в очереди нет await:
        # порядок рассылки по треку совпадает с порядком записи
        failures = self.broadcast(saved)

        self._total_ingested += 1

        await log_info(
            f"Фикс сохранён: {saved.track_id} "
            f"({saved.lat:.6f}, {saved.lng:.6f}) "
            f"{saved.speed * MPS_TO_KMH:.1f} км/ч",
            extra={"track_id": saved.track_id},
        )
        for failure in failures:
            await log_warning(
                f"Обновление {saved.track_id} не доставлено: {failure.message}",
                extra={"connection_id": failure.connection_id, "reason": failure.reason},
            )

        return saved

    def broadcast(self, fix: LocationFix) -> list[BroadcastDeliveryFailure]:
        """
        Поставить location_updated в очередь каждому подписчику трека.

        Не ждёт ни одного клиента. Ошибки доставки собираются и
        возвращаются, наружу не пробрасываются.

        Returns:
            Ошибки доставки по соединениям
        """
        message = self.build_event(fix)
        failures: list[BroadcastDeliveryFailure] = []

        for connection in self._registry.subscribers_of(fix.track_id):
            try:
                connection.deliver(message)
                self._deliveries_sent += 1
            except BroadcastDeliveryFailure as e:
                self._deliveries_dropped += 1
                failures.append(e)

        return failures

    @staticmethod
    def build_event(fix: LocationFix) -> dict[str, Any]:
        """Сообщение location_updated для WebSocket."""
        event = LocationUpdatedEvent(**fix.model_dump())
        return {
            "type": WsMessageType.LOCATION_UPDATED.value,
            "data": event.model_dump(mode="json", by_alias=True),
        }

    def get_stats(self) -> dict[str, int]:
        """Получить статистику приёма."""
        return {
            "total_ingested": self._total_ingested,
            "deliveries_sent": self._deliveries_sent,
            "deliveries_dropped": self._deliveries_dropped,
        }
