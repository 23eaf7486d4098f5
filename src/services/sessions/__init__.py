# src/services/sessions/__init__.py
"""
Сессии клиентов: список отслеживаемых треков в Redis.
"""
