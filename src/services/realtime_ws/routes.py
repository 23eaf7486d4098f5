# src/services/realtime_ws/routes.py
"""
WebSocket endpoint /ws для live-tracking.

Входящие сообщения:
- {"action": "subscribe", "trackId": "bus1"}
- {"action": "unsubscribe", "trackId": "bus1"}
- {"action": "ping"}

Исходящие:
- {"type": "subscribed", "trackId": ..., "connectionId": ...}
- {"type": "unsubscribed", "trackId": ...}
- {"type": "pong"}
- {"type": "error", "message": ...}
- {"type": "location_updated", "data": {...}}
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from src.config import settings
from src.common.constants import WsAction, WsMessageType
from src.common.logger import log_debug, log_error, log_warning
from src.services.realtime_ws.connection_manager import Connection, SubscriptionRegistry
from src.shared.errors import BroadcastDeliveryFailure

router = APIRouter(tags=["Realtime"])


def get_registry(websocket: WebSocket) -> SubscriptionRegistry:
    return websocket.app.state.registry


@router.websocket("/ws")
async def websocket_tracking(
    websocket: WebSocket,
    registry: SubscriptionRegistry = Depends(get_registry),
) -> None:
    await websocket.accept()

    connection = Connection(websocket, settings.realtime.SUBSCRIBER_QUEUE_SIZE)
    connection.start()
    registry.attach(connection)
    await log_debug(f"WebSocket подключён: {connection.connection_id}")

    try:
        while True:
            raw = await websocket.receive_text()
            await _handle_client_message(connection, registry, raw)

    except WebSocketDisconnect:
        pass
    except Exception as e:
        await log_error(f"Ошибка WebSocket {connection.connection_id}: {e}", exc_info=True)
    finally:
        track_ids = registry.disconnect(connection)
        await connection.close()
        await log_debug(
            f"WebSocket отключён: {connection.connection_id}",
            extra={"track_ids": sorted(track_ids)},
        )


async def _handle_client_message(
    connection: Connection,
    registry: SubscriptionRegistry,
    raw: str,
) -> None:
    """Обработать сообщение от клиента."""
    try:
        data = json.loads(raw)
    except ValueError:
        await _reply(connection, {"type": WsMessageType.ERROR.value, "message": "Invalid JSON"})
        return

    if not isinstance(data, dict):
        await _reply(connection, {"type": WsMessageType.ERROR.value, "message": "Expected a JSON object"})
        return

    action = data.get("action")
    track_id = data.get("trackId")

    if action == WsAction.PING.value:
        await _reply(connection, {"type": WsMessageType.PONG.value})
        return

    if action not in (WsAction.SUBSCRIBE.value, WsAction.UNSUBSCRIBE.value):
        await _reply(connection, {
            "type": WsMessageType.ERROR.value,
            "message": f"Unknown action: {action}",
        })
        return

    if not isinstance(track_id, str) or not track_id:
        await _reply(connection, {
            "type": WsMessageType.ERROR.value,
            "message": "trackId is required",
        })
        return

    if action == WsAction.SUBSCRIBE.value:
        registry.subscribe(connection, track_id)
        await log_debug(f"{connection.connection_id} подписан на {track_id}")
        await _reply(connection, {
            "type": WsMessageType.SUBSCRIBED.value,
            "trackId": track_id,
            "connectionId": connection.connection_id,
        })
    else:
        registry.unsubscribe(connection, track_id)
        await log_debug(f"{connection.connection_id} отписан от {track_id}")
        await _reply(connection, {
            "type": WsMessageType.UNSUBSCRIBED.value,
            "trackId": track_id,
        })


async def _reply(connection: Connection, message: dict[str, Any]) -> None:
    try:
        connection.deliver(message)
    except BroadcastDeliveryFailure as e:
        await log_warning(e.message, extra={"connection_id": e.connection_id})
