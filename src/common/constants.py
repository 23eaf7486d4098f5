# src/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class WsAction(str, Enum):
    """Действия, которые клиент отправляет по WebSocket."""
    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"
    PING = "ping"


class WsMessageType(str, Enum):
    """Типы сообщений, которые сервер отправляет по WebSocket."""
    SUBSCRIBED = "subscribed"
    UNSUBSCRIBED = "unsubscribed"
    PONG = "pong"
    ERROR = "error"
    LOCATION_UPDATED = "location_updated"


# Ключи Redis (без namespace, его добавляет RedisClient)
SESSION_KEY_PREFIX = "session:"

# Перевод м/с в км/ч для логов
MPS_TO_KMH = 3.6
