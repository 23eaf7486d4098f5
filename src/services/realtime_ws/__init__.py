# src/services/realtime_ws/__init__.py
"""
Realtime WebSocket: push обновлений местоположения.

Обеспечивает:
- WebSocket соединения клиентов (/ws)
- Подписки на треки по trackId
- Неблокирующую рассылку location_updated
"""
