# tests/common/test_constants.py
"""
Тесты для модуля констант.
"""

from src.common.constants import (
    MPS_TO_KMH,
    SESSION_KEY_PREFIX,
    TypeMsg,
    WsAction,
    WsMessageType,
)


class TestTypeMsg:
    """Тесты для enum TypeMsg."""

    def test_type_msg_values(self) -> None:
        assert TypeMsg.DEBUG.value == "debug"
        assert TypeMsg.INFO.value == "info"
        assert TypeMsg.WARNING.value == "warning"
        assert TypeMsg.ERROR.value == "error"
        assert TypeMsg.CRITICAL.value == "critical"

    def test_type_msg_is_str_enum(self) -> None:
        assert isinstance(TypeMsg.DEBUG, str)
        assert TypeMsg.INFO == "info"


class TestWebSocketProtocol:
    """Тесты значений протокола WebSocket."""

    def test_actions(self) -> None:
        assert {a.value for a in WsAction} == {"subscribe", "unsubscribe", "ping"}

    def test_message_types(self) -> None:
        assert WsMessageType.LOCATION_UPDATED == "location_updated"
        assert WsMessageType.SUBSCRIBED == "subscribed"
        assert WsMessageType.PONG == "pong"


def test_session_key_prefix() -> None:
    assert SESSION_KEY_PREFIX == "session:"


def test_speed_conversion() -> None:
    assert 10 * MPS_TO_KMH == 36.0
