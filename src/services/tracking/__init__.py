# src/services/tracking/__init__.py
"""
Сервис трекинга местоположения.

Обеспечивает:
- Приём фиксов и сохранение в PostgreSQL
- Рассылку обновлений подписчикам WebSocket
- Запросы: последний фикс, путь, активные треки
- Ручную и автоматическую очистку старых фиксов
"""
