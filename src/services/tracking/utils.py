# src/services/tracking/utils.py
"""
Вспомогательные функции сервиса трекинга.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

EARLIEST = datetime.min.replace(tzinfo=timezone.utc)
LATEST = datetime.max.replace(tzinfo=timezone.utc)


def parse_hours(raw: str | None, default: float) -> float:
    """
    Разобрать параметр hours из query string.

    Целые, дробные и отрицательные числа принимаются, 0 допустим.
    Пустое, нечисловое или бесконечное значение заменяется на default.
    """
    if raw is None:
        return default
    try:
        hours = float(raw.strip())
    except ValueError:
        return default
    if not math.isfinite(hours):
        return default
    return hours


def hours_ago(hours: float, now: datetime | None = None) -> datetime:
    """
    Момент `hours` часов назад от `now`.

    Отрицательные hours дают момент в будущем. Слишком широкое окно
    упирается в границы datetime.
    """
    now = now or datetime.now(timezone.utc)
    try:
        return now - timedelta(hours=hours)
    except OverflowError:
        return EARLIEST if hours > 0 else LATEST
