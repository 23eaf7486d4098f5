# src/services/__init__.py
"""
Сервисы приложения.

Сервисы:
- tracking: HTTP API трекинга (приём фиксов, запросы, очистка, health)
- realtime_ws: реестр подписок и WebSocket push-канал
- sessions: хранение списков отслеживаемых треков (watch-list)
"""

__all__: list[str] = []
