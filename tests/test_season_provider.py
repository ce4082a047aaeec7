import asyncio
import gc
import logging
import threading
from contextlib import contextmanager
from unittest.mock import Mock

import pytest

from shokobridge import season_provider
from shokobridge.models import ParentSeries, SeasonRequest, ShowInfo
from shokobridge.season_provider import (
    ANIDB_ID,
    SHOKO_SERIES_ID,
    SeasonProvider,
    create_metadata,
    create_metadata_for_series,
    resolve_season,
)
from shokobridge.tracker import UsageTracker


class FakeShoko:
    """Show lookup returning a fixed show and recording the in-flight count"""

    def __init__(self, show, tracker=None):
        self.show = show
        self.tracker = tracker
        self.calls = []
        self.in_flight_during_call = None

    def get_show_info_for_series(self, series_id):
        self.calls.append(series_id)
        if self.tracker is not None:
            self.in_flight_during_call = len(self.tracker.in_flight)
        return self.show


@pytest.fixture
def tracker():
    return UsageTracker()


@pytest.fixture
def scenario_show(season_factory):
    season_two = season_factory("CS2", "Season Two", 200)
    return ShowInfo(
        id="G1",
        name="Season One",
        group_id="G1",
        season_order={2: season_two},
        base_season_numbers={"CS2": 1},
    )


@pytest.mark.asyncio
async def test_missing_season_number_returns_empty(config, tracker):
    client = Mock()

    result = await resolve_season(client, config, tracker, None, "S1")

    assert result.item is None
    assert result.has_metadata is False
    client.get_show_info_for_series.assert_not_called()


@pytest.mark.asyncio
async def test_specials_season_uses_caller_name_only(config, tracker):
    client = Mock()

    result = await resolve_season(
        client, config, tracker, 0, "S1", "en", "US", name="Specials"
    )

    season = result.item
    assert result.has_metadata is True
    assert season.index_number == 0
    assert season.name == "Specials"
    assert season.sort_name == "AA - Specials"
    assert season.forced_sort_name == "AA - Specials"
    assert season.overview is None
    assert season.community_rating is None
    assert season.official_rating is None
    assert season.provider_ids == {}
    client.get_show_info_for_series.assert_not_called()
    assert tracker.in_flight == []


@pytest.mark.asyncio
async def test_missing_series_id_is_logged_at_debug(config, tracker, caplog):
    caplog.set_level(logging.DEBUG, logger="shokobridge.season_provider")
    client = Mock()

    result = await resolve_season(client, config, tracker, 1, None, name="Season 1")

    assert result.item is None
    assert any(
        r.levelno == logging.DEBUG and "Unable to refresh Season 1" in r.message
        for r in caplog.records
    )
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


@pytest.mark.asyncio
async def test_show_not_found_logs_one_warning(config, tracker, caplog):
    caplog.set_level(logging.DEBUG)
    client = FakeShoko(None)

    result = await resolve_season(client, config, tracker, 3, "S1")

    assert result.item is None
    assert result.has_metadata is False
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "Unable to find show info for Season 3" in warnings[0].message
    assert tracker.in_flight == []


@pytest.mark.asyncio
async def test_scenario_offset_and_sort_name(config, tracker, scenario_show, mocker):
    spy = mocker.spy(season_provider, "create_metadata")
    client = FakeShoko(scenario_show)

    result = await resolve_season(client, config, tracker, 2, "S1", "en", "US")

    assert client.calls == ["S1"]
    assert spy.call_args.args[2] == 1
    assert result.item.sort_name == "S2 - Season Two"
    assert result.item.forced_sort_name == "S2 - Season Two"
    assert result.item.index_number == 2
    assert result.item.name == "Season Two English (Other Episodes)"


@pytest.mark.asyncio
async def test_general_case_populates_all_fields(config, tracker, two_season_show):
    client = FakeShoko(two_season_show)

    result = await resolve_season(client, config, tracker, 3, "S1", "en", "US")

    season = result.item
    assert result.has_metadata is True
    assert season.name == "Season Two English"
    assert season.original_title == "Season Two Japanese"
    assert season.overview == "Description of Season Two."
    assert season.production_year == 2021
    assert season.premiere_date.isoformat() == "2021-01-05"
    assert season.genres == ["Action"]
    assert season.tags == ["Shounen"]
    assert season.studios == ["Studio Pierrot"]
    assert season.production_locations == ["Japan"]
    assert season.official_rating == "TV-PG"
    assert season.community_rating == 8.12
    assert season.provider_ids == {SHOKO_SERIES_ID: "CS2"}
    assert season.series_id is None
    assert [p.name for p in result.people] == ["Jane Doe"]


@pytest.mark.asyncio
async def test_other_episodes_season_gets_offset(config, tracker, two_season_show):
    client = FakeShoko(two_season_show)

    result = await resolve_season(client, config, tracker, 2, "S1", "en", "US")

    assert result.item.name == "Season One English (Other Episodes)"
    assert result.item.sort_name == "S2 - Season One"
    assert result.item.provider_ids[SHOKO_SERIES_ID] == "CS1"


@pytest.mark.asyncio
@pytest.mark.parametrize("add_anidb_id", [True, False])
async def test_anidb_id_follows_config_flag(
    config, tracker, two_season_show, add_anidb_id
):
    config.add_anidb_id = add_anidb_id
    client = FakeShoko(two_season_show)

    result = await resolve_season(client, config, tracker, 1, "S1", "en", "US")

    assert (ANIDB_ID in result.item.provider_ids) is add_anidb_id
    if add_anidb_id:
        assert result.item.provider_ids[ANIDB_ID] == "100"


@pytest.mark.asyncio
async def test_unknown_season_number_logs_warning(
    config, tracker, two_season_show, caplog
):
    client = FakeShoko(two_season_show)

    result = await resolve_season(client, config, tracker, 9, "S1")

    assert result.item is None
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "Group=G1" in warnings[0].message


@pytest.mark.asyncio
async def test_missing_base_season_number_returns_empty(
    config, tracker, scenario_show, caplog
):
    scenario_show.base_season_numbers = {}
    client = FakeShoko(scenario_show)

    result = await resolve_season(client, config, tracker, 2, "S1")

    assert result.item is None
    assert result.has_metadata is False
    assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 1


@pytest.mark.asyncio
async def test_unexpected_failure_is_logged_and_absorbed(config, tracker, caplog):
    client = Mock()
    client.get_show_info_for_series.side_effect = RuntimeError("boom")

    result = await resolve_season(
        client, config, tracker, 4, "S1", name="Season 4", path="/anime/show/Season 4"
    )

    assert result.item is None
    assert result.has_metadata is False
    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "boom" in errors[0].message
    assert "Path=/anime/show/Season 4" in errors[0].message
    assert "Series=S1" in errors[0].message
    assert errors[0].exc_info is not None
    assert tracker.in_flight == []


@pytest.mark.asyncio
async def test_tracker_holds_token_only_during_lookup(config, tracker, two_season_show):
    client = FakeShoko(two_season_show, tracker=tracker)

    await resolve_season(client, config, tracker, 1, "S1")

    assert client.in_flight_during_call == 1
    assert tracker.in_flight == []


@pytest.mark.asyncio
async def test_cancellation_before_start_skips_lookup(config, tracker):
    client = Mock()
    cancellation = asyncio.Event()
    cancellation.set()

    result = await resolve_season(
        client, config, tracker, 1, "S1", cancellation=cancellation
    )

    assert result.item is None
    client.get_show_info_for_series.assert_not_called()


@pytest.mark.asyncio
async def test_cancellation_during_lookup_returns_empty(
    config, tracker, two_season_show
):
    release = threading.Event()

    class SlowShoko:
        def get_show_info_for_series(self, series_id):
            release.wait(5)
            return two_season_show

    cancellation = asyncio.Event()
    loop = asyncio.get_running_loop()
    loop.call_later(0.05, cancellation.set)

    try:
        result = await asyncio.wait_for(
            resolve_season(
                SlowShoko(), config, tracker, 1, "S1", cancellation=cancellation
            ),
            timeout=2,
        )
    finally:
        release.set()

    assert result.item is None
    assert result.has_metadata is False
    assert tracker.in_flight == []


@contextmanager
def loop_errors():
    """Collect reports sent to the running loop's exception handler"""
    loop = asyncio.get_running_loop()
    reports = []
    previous = loop.get_exception_handler()
    loop.set_exception_handler(lambda _loop, context: reports.append(context))
    try:
        yield reports
    finally:
        loop.set_exception_handler(previous)


@pytest.mark.asyncio
async def test_abandoned_failed_lookup_is_not_reported():
    async def failing():
        raise RuntimeError("Shoko unreachable")

    with loop_errors() as reports:
        task = asyncio.ensure_future(failing())
        await asyncio.wait({task})
        season_provider._abandon(task)
        del task
        gc.collect()

    assert reports == []


@pytest.mark.asyncio
async def test_abandon_cancels_pending_lookup():
    task = asyncio.ensure_future(asyncio.sleep(10))

    season_provider._abandon(task)
    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_cancellation_racing_failed_lookup_leaves_no_error(config, tracker):
    loop = asyncio.get_running_loop()
    cancellation = asyncio.Event()

    class FailingShoko:
        def get_show_info_for_series(self, series_id):
            loop.call_soon_threadsafe(cancellation.set)
            raise RuntimeError("Shoko unreachable")

    with loop_errors() as reports:
        result = await resolve_season(
            FailingShoko(), config, tracker, 1, "S1", cancellation=cancellation
        )
        await asyncio.sleep(0.05)
        gc.collect()

    assert result.item is None
    assert reports == []
    assert tracker.in_flight == []


@pytest.mark.asyncio
async def test_attached_variant_stamps_series_fields(config, tracker, two_season_show):
    parent = ParentSeries(
        id="jf-series",
        name="My Show",
        presentation_unique_key="pkey",
        preferred_metadata_language="en",
        preferred_metadata_country_code="US",
    )
    client = FakeShoko(two_season_show)

    result = await resolve_season(
        client,
        config,
        tracker,
        1,
        "S1",
        metadata_language="fr",
        parent=parent,
        season_id="season-uuid",
    )

    season = result.item
    assert season.id == "season-uuid"
    assert season.is_virtual_item is True
    assert season.series_id == "jf-series"
    assert season.series_name == "My Show"
    assert season.series_presentation_unique_key == "pkey"
    assert season.date_modified is not None
    assert season.date_last_saved == season.date_modified
    assert season.name == "Season One English"


def test_standalone_and_attached_share_field_derivation(config, season_factory):
    season_info = season_factory()
    parent = ParentSeries(
        id="jf",
        name="Show",
        presentation_unique_key="key",
        preferred_metadata_language="en",
        preferred_metadata_country_code="US",
    )

    standalone = create_metadata(season_info, 1, 0, "en", "US", config)
    attached = create_metadata_for_series(season_info, 1, 0, parent, "sid", config)

    for field_name in (
        "name",
        "original_title",
        "sort_name",
        "overview",
        "genres",
        "official_rating",
        "community_rating",
        "provider_ids",
    ):
        assert getattr(standalone, field_name) == getattr(attached, field_name)
    assert standalone.series_id is None
    assert standalone.is_virtual_item is False


@pytest.mark.asyncio
async def test_provider_reads_series_id_from_request(config, two_season_show):
    client = FakeShoko(two_season_show)
    provider = SeasonProvider(client, config)
    request = SeasonRequest(
        index_number=3,
        name="Season 3",
        series_provider_ids={SHOKO_SERIES_ID: "42"},
        metadata_language="en",
        metadata_country_code="US",
    )

    result = await provider.get_metadata(request)

    assert client.calls == ["42"]
    assert result.item.sort_name == "S3 - Season Two"
    assert await provider.get_search_results(request) == []


@pytest.mark.asyncio
async def test_provider_without_series_id_returns_empty(config):
    client = Mock()
    provider = SeasonProvider(client, config)

    result = await provider.get_metadata(SeasonRequest(index_number=1))

    assert result.has_metadata is False
    client.get_show_info_for_series.assert_not_called()
