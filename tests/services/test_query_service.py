# tests/services/test_query_service.py
"""
Тесты запросов: последний фикс, путь и активные треки.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.config.loader import TrackingSettings
from src.services.tracking.queries import LocationQueryService
from src.shared.errors import NotFoundError


@pytest.fixture
def queries(location_repository) -> LocationQueryService:
    return LocationQueryService(location_repository, TrackingSettings())


class TestLatest:
    """Тесты для latest()."""

    @pytest.mark.asyncio
    async def test_unknown_track_not_found(self, queries) -> None:
        with pytest.raises(NotFoundError):
            await queries.latest("nobody")

    @pytest.mark.asyncio
    async def test_stale_track_is_not_an_error(self, queries, location_repository, fix_factory) -> None:
        """Устаревший трек возвращается с isRecent=false."""
        await location_repository.insert(fix_factory("bus1", minutes_ago=30))

        latest = await queries.latest("bus1")

        assert latest.is_recent is False

    @pytest.mark.asyncio
    async def test_returns_most_recent_fix(self, queries, location_repository, fix_factory) -> None:
        await location_repository.insert(fix_factory("bus1", lat=1, minutes_ago=3))
        await location_repository.insert(fix_factory("bus1", lat=2, minutes_ago=1))
        await location_repository.insert(fix_factory("bus1", lat=3, minutes_ago=2))

        latest = await queries.latest("bus1")

        assert latest.lat == 2
        assert latest.is_recent is True


class TestPath:
    """Тесты для path()."""

    @pytest.mark.asyncio
    async def test_empty_path_is_not_an_error(self, queries) -> None:
        path = await queries.path("bus1", 2)

        assert path.track_id == "bus1"
        assert path.points == []
        assert path.count == 0

    @pytest.mark.asyncio
    async def test_window_and_order(self, queries, location_repository, fix_factory) -> None:
        """Только точки окна, от старых к новым."""
        await location_repository.insert(fix_factory("bus1", lat=3, minutes_ago=10))
        await location_repository.insert(fix_factory("bus1", lat=1, minutes_ago=90))
        await location_repository.insert(fix_factory("bus1", lat=9, minutes_ago=180))
        await location_repository.insert(fix_factory("bus2", lat=7, minutes_ago=5))

        started = datetime.now(timezone.utc)
        path = await queries.path("bus1", 2)

        assert [p.lat for p in path.points] == [1, 3]
        assert path.count == 2
        assert all(p.timestamp >= started - timedelta(hours=2) for p in path.points)

    @pytest.mark.asyncio
    async def test_capped_at_max_points(self, location_repository, fix_factory) -> None:
        queries = LocationQueryService(location_repository, TrackingSettings(PATH_MAX_POINTS=1000))
        for i in range(1005):
            await location_repository.insert(fix_factory("bus1", lat=i % 90, minutes_ago=i * 0.05))

        path = await queries.path("bus1", 2)

        assert path.count == 1000
        assert len(path.points) == 1000
        timestamps = [p.timestamp for p in path.points]
        assert timestamps == sorted(timestamps)

    @pytest.mark.asyncio
    async def test_fractional_hours(self, queries, location_repository, fix_factory) -> None:
        await location_repository.insert(fix_factory("bus1", minutes_ago=20))
        await location_repository.insert(fix_factory("bus1", minutes_ago=40))

        path = await queries.path("bus1", 0.5)

        assert path.count == 1


class TestActiveTracks:
    """Тесты для active_tracks()."""

    @pytest.mark.asyncio
    async def test_excludes_stale_and_inactive(self, queries, location_repository, fix_factory) -> None:
        """Трек только со старыми или только с неактивными фиксами не попадает в список."""
        await location_repository.insert(fix_factory("live", minutes_ago=1))
        await location_repository.insert(fix_factory("stale", minutes_ago=10))
        await location_repository.insert(fix_factory("parked", minutes_ago=1, is_active=False))

        result = await queries.active_tracks()

        assert result.count == 1
        assert [t.track_id for t in result.tracks] == ["live"]
        track = result.tracks[0]
        assert track.is_active is True
        assert track.is_recent is True

    @pytest.mark.asyncio
    async def test_one_entry_per_track_from_latest_fix(self, queries, location_repository, fix_factory) -> None:
        await location_repository.insert(fix_factory("bus1", lat=1, minutes_ago=4))
        await location_repository.insert(fix_factory("bus1", lat=2, minutes_ago=1))
        await location_repository.insert(fix_factory("bus2", lat=5, minutes_ago=2))

        result = await queries.active_tracks()

        by_track = {t.track_id: t for t in result.tracks}
        assert result.count == 2
        assert by_track["bus1"].lat == 2
        assert by_track["bus2"].lat == 5

    @pytest.mark.asyncio
    async def test_later_inactive_fix_keeps_track(self, queries, location_repository, fix_factory) -> None:
        """Данные берутся из последнего активного фикса, более свежий неактивный не мешает."""
        await location_repository.insert(fix_factory("bus1", lat=1, minutes_ago=3))
        await location_repository.insert(fix_factory("bus1", lat=2, minutes_ago=1, is_active=False))

        result = await queries.active_tracks()

        assert result.count == 1
        assert result.tracks[0].lat == 1
