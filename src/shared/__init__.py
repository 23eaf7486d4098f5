# src/shared/__init__.py
"""
Общий код сервиса трекинга.

Модули:
- models: DTO и Pydantic-модели (фиксы, сессии, служебные ответы)
- errors: таксономия ошибок и их HTTP-коды
"""

__all__: list[str] = []
