# src/services/realtime_ws/connection_manager.py
"""
Реестр подписок WebSocket соединений.

trackId -> множество живых соединений. Каждое соединение имеет свою
ограниченную очередь исходящих сообщений и отдельную задачу-отправителя,
поэтому рассылка никогда не ждёт медленного клиента.
"""

from __future__ import annotations

import asyncio
import threading
from datetime import datetime, timezone
from typing import Any, Hashable
from uuid import uuid4

from fastapi import WebSocket, WebSocketDisconnect

from src.shared.errors import BroadcastDeliveryFailure


class Connection:
    """
    Живое WebSocket-соединение.

    Все исходящие сообщения (ack, pong, location_updated) идут через
    очередь, у сокета ровно один писатель, задача _drain.
    """

    def __init__(
        self,
        websocket: WebSocket,
        queue_size: int = 100,
        connection_id: str | None = None,
    ) -> None:
        self.connection_id = connection_id or uuid4().hex
        self.websocket = websocket
        self.connected_at = datetime.now(timezone.utc)
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=queue_size)
        self._sender: asyncio.Task | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        """Закрыто ли соединение."""
        return self._closed

    @property
    def pending(self) -> int:
        """Сообщений в очереди на отправку."""
        return self._queue.qsize()

    def start(self) -> None:
        """Запустить задачу отправки."""
        if self._sender is None:
            self._sender = asyncio.create_task(self._drain())

    def deliver(self, message: dict[str, Any]) -> None:
        """
        Поставить сообщение в очередь без ожидания.

        Raises:
            BroadcastDeliveryFailure: соединение закрыто или очередь переполнена
        """
        if self._closed:
            raise BroadcastDeliveryFailure(self.connection_id, "connection closed")
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            raise BroadcastDeliveryFailure(self.connection_id, "send buffer full") from None

    async def close(self) -> None:
        """Остановить отправку и закрыть сокет."""
        if self._closed:
            return
        self._closed = True

        if self._sender is not None:
            self._sender.cancel()
            try:
                await self._sender
            except asyncio.CancelledError:
                pass

        try:
            await self.websocket.close()
        except (RuntimeError, WebSocketDisconnect):
            # Сокет уже закрыт клиентом
            pass

    async def _drain(self) -> None:
        """Отправлять сообщения из очереди, пока сокет жив."""
        while True:
            message = await self._queue.get()
            try:
                await self.websocket.send_json(message)
            except Exception:
                # Соединение разорвано; из реестра его уберёт обработчик сокета
                self._closed = True
                return

    def __repr__(self) -> str:
        return f"Connection({self.connection_id})"


class SubscriptionRegistry:
    """
    Реестр подписок: trackId -> множество соединений.

    Инварианты:
    - запись trackId существует тогда и только тогда, когда у неё есть
      хотя бы один подписчик (пустые множества удаляются сразу);
    - одно соединение может быть подписано на много треков и при
      disconnect удаляется из всех.

    Синхронизация внутри реестра: все операции под одной блокировкой,
    вызывающему коду ничего блокировать не нужно.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

        # trackId -> соединения
        self._subscribers: dict[str, set[Hashable]] = {}

        # соединение -> trackId (для disconnect)
        self._tracks_by_connection: dict[Hashable, set[str]] = {}

        # все подключённые соединения, в том числе без подписок
        self._connections: set[Hashable] = set()

        self._total_connections = 0

    def attach(self, connection: Hashable) -> None:
        """Зарегистрировать новое соединение."""
        with self._lock:
            if connection not in self._connections:
                self._connections.add(connection)
                self._total_connections += 1

    def subscribe(self, connection: Hashable, track_id: str) -> None:
        """Подписать соединение на трек (идемпотентно)."""
        with self._lock:
            self._subscribers.setdefault(track_id, set()).add(connection)
            self._tracks_by_connection.setdefault(connection, set()).add(track_id)

    def unsubscribe(self, connection: Hashable, track_id: str) -> None:
        """Отписать соединение от трека (идемпотентно)."""
        with self._lock:
            self._remove(connection, track_id)

    def disconnect(self, connection: Hashable) -> set[str]:
        """
        Удалить соединение из всех треков.

        Returns:
            trackId, от которых соединение было отписано
        """
        with self._lock:
            self._connections.discard(connection)
            track_ids = self._tracks_by_connection.pop(connection, set())
            for track_id in track_ids:
                subscribers = self._subscribers.get(track_id)
                if subscribers is None:
                    continue
                subscribers.discard(connection)
                if not subscribers:
                    del self._subscribers[track_id]
            return track_ids

    def subscribers_of(self, track_id: str) -> frozenset[Hashable]:
        """Снимок подписчиков трека."""
        with self._lock:
            return frozenset(self._subscribers.get(track_id, ()))

    def active_track_count(self) -> int:
        """Количество треков хотя бы с одним подписчиком."""
        with self._lock:
            return len(self._subscribers)

    @property
    def connection_count(self) -> int:
        """Количество подключённых соединений."""
        with self._lock:
            return len(self._connections)

    def connections(self) -> list[Hashable]:
        """Снимок всех подключённых соединений."""
        with self._lock:
            return list(self._connections)

    def get_stats(self) -> dict[str, Any]:
        """Получить статистику."""
        with self._lock:
            return {
                "active_connections": len(self._connections),
                "active_tracks": len(self._subscribers),
                "total_connections_ever": self._total_connections,
            }

    def _remove(self, connection: Hashable, track_id: str) -> None:
        """Удаление пары (соединение, трек). Вызывается под блокировкой."""
        subscribers = self._subscribers.get(track_id)
        if subscribers is not None:
            subscribers.discard(connection)
            if not subscribers:
                del self._subscribers[track_id]

        tracks = self._tracks_by_connection.get(connection)
        if tracks is not None:
            tracks.discard(track_id)
            if not tracks:
                del self._tracks_by_connection[connection]
