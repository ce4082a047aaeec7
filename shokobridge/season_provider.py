"""
Season metadata provider

Turns a library season number into season metadata taken from the Shoko
catalog. The library numbers seasons sequentially per show, while a show may
be made of several catalog series, and one catalog series may occupy more
than one library season. The show layout decides which catalog series a
number points at and how far the number is from that series' base number.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Protocol

from .config import Config
from .content_rating import get_season_content_rating
from .models import (
    MetadataResult,
    ParentSeries,
    Season,
    SeasonInfo,
    SeasonRequest,
    ShowInfo,
)
from .tag_filter import get_season_production_locations
from .text import get_description, get_season_titles
from .tracker import UsageTracker

logger = logging.getLogger(__name__)

SHOKO_SERIES_ID = "Shoko Series"
ANIDB_ID = "AniDB"

# Forces the specials season in front of every numbered season when sorting
SPECIALS_SORT_PREFIX = "AA - "


class ShowLookup(Protocol):
    """Anything able to resolve a series id into a show"""

    def get_show_info_for_series(self, series_id: str) -> ShowInfo | None: ...


class LookupCancelled(Exception):
    """The caller cancelled the request while the show lookup was pending"""


def create_specials_metadata(name: str | None) -> Season:
    """Minimal metadata for season 0, sorted before all other seasons"""
    sort_name = f"{SPECIALS_SORT_PREFIX}{name}"
    return Season(
        name=name,
        index_number=0,
        sort_name=sort_name,
        forced_sort_name=sort_name,
    )


def create_metadata(
    season_info: SeasonInfo,
    season_number: int,
    offset: int,
    metadata_language: str | None,
    metadata_country_code: str | None,
    config: Config,
) -> Season:
    """Build a standalone season record"""
    return _create_metadata(
        season_info,
        season_number,
        offset,
        metadata_language,
        metadata_country_code,
        config,
    )


def create_metadata_for_series(
    season_info: SeasonInfo,
    season_number: int,
    offset: int,
    series: ParentSeries,
    season_id: str,
    config: Config,
) -> Season:
    """Build a season record that is merged into an existing series"""
    return _create_metadata(
        season_info,
        season_number,
        offset,
        series.preferred_metadata_language,
        series.preferred_metadata_country_code,
        config,
        series=series,
        season_id=season_id,
    )


def _create_metadata(
    season_info: SeasonInfo,
    season_number: int,
    offset: int,
    metadata_language: str | None,
    metadata_country_code: str | None,
    config: Config,
    series: ParentSeries | None = None,
    season_id: str | None = None,
) -> Season:
    display_title, alternate_title = get_season_titles(
        season_info,
        offset,
        metadata_language,
        main=config.title_main_language,
        alternate=config.title_alternate_language,
    )
    sort_title = f"S{season_number} - {season_info.name}"
    anidb = season_info.anidb

    season = Season(
        name=display_title,
        original_title=alternate_title,
        index_number=season_number,
        sort_name=sort_title,
        forced_sort_name=sort_title,
        overview=get_description(
            season_info, metadata_language, cleanup=config.description_cleanup
        ),
        premiere_date=anidb.air_date,
        end_date=anidb.end_date,
        production_year=anidb.air_date.year if anidb.air_date else None,
        tags=list(season_info.tags),
        genres=list(season_info.genres),
        studios=list(season_info.studios),
        production_locations=get_season_production_locations(season_info),
        official_rating=get_season_content_rating(season_info, metadata_country_code),
        community_rating=anidb.rating.to_float(10) if anidb.rating else None,
    )

    if series is not None:
        now = datetime.now(timezone.utc)
        season.id = season_id
        season.is_virtual_item = True
        season.series_id = series.id
        season.series_name = series.name
        season.series_presentation_unique_key = series.presentation_unique_key
        season.date_modified = now
        season.date_last_saved = now

    season.set_provider_id(SHOKO_SERIES_ID, season_info.id)
    if config.add_anidb_id:
        season.set_provider_id(ANIDB_ID, str(anidb.id))

    return season


def _abandon(task: asyncio.Future):
    """Drop a lookup we no longer wait for without leaving its error unretrieved"""
    if task.done():
        if not task.cancelled():
            task.exception()
    else:
        task.cancel()


async def _lookup_show(
    client: ShowLookup, series_id: str, cancellation: asyncio.Event | None
) -> ShowInfo | None:
    """Run the blocking show lookup, giving up early if cancelled"""
    lookup = asyncio.ensure_future(
        asyncio.to_thread(client.get_show_info_for_series, series_id)
    )
    if cancellation is None:
        return await lookup

    waiter = asyncio.ensure_future(cancellation.wait())
    try:
        done, _ = await asyncio.wait(
            {lookup, waiter}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        waiter.cancel()

    if cancellation.is_set() or lookup not in done:
        _abandon(lookup)
        raise LookupCancelled(series_id)
    return lookup.result()


async def resolve_season(
    client: ShowLookup,
    config: Config,
    tracker: UsageTracker,
    season_number: int | None,
    series_id: str | None,
    metadata_language: str | None = None,
    metadata_country_code: str | None = None,
    name: str | None = None,
    path: str | None = None,
    cancellation: asyncio.Event | None = None,
    parent: ParentSeries | None = None,
    season_id: str | None = None,
) -> MetadataResult:
    """
    Resolve the metadata for one library season

    Args:
        client: Show lookup, usually a ShokoClient
        config: Configuration object
        tracker: In-flight operation tracker
        season_number: Season number requested by the library
        series_id: Shoko series id of the show
        metadata_language: Preferred language for titles and descriptions
        metadata_country_code: Country used for the content rating
        name: Season name known to the library, used for season 0
        path: Season folder, only used for logging
        cancellation: Event set by the caller to abandon the request
        parent: Existing series to attach the season to; its preferred
            language and country replace the ones passed in
        season_id: Identifier to give the attached season

    Returns:
        A MetadataResult; it is empty whenever no metadata could be built
    """
    result = MetadataResult()
    if season_number is None:
        return result

    if season_number == 0:
        result.item = create_specials_metadata(name)
        result.has_metadata = True
        return result

    if not series_id:
        logger.debug(f"Unable to refresh Season {season_number} {name}")
        return result

    if cancellation is not None and cancellation.is_set():
        logger.debug(f"Refresh of Season {season_number} cancelled before start")
        return result

    with tracker.track(
        f'Providing info for Season "{name}". '
        f'(Path="{path}",Series="{series_id}",Season={season_number})'
    ):
        try:
            show_info = await _lookup_show(client, series_id, cancellation)
            if show_info is None:
                logger.warning(
                    f"Unable to find show info for Season {season_number}. "
                    f"(Series={series_id})"
                )
                return result

            season_info = show_info.get_season_by_number(season_number)
            base_season_number = (
                show_info.get_base_season_number(season_info)
                if season_info is not None
                else None
            )
            if season_info is None or base_season_number is None:
                logger.warning(
                    f"Unable to find series info for Season {season_number}. "
                    f"(Series={series_id},Group={show_info.group_id})"
                )
                return result

            logger.info(
                f"Found info for Season {season_number} in Series {show_info.name} "
                f"(Series={series_id},Group={show_info.group_id})"
            )

            offset = abs(season_number - base_season_number)
            if parent is not None:
                item = create_metadata_for_series(
                    season_info, season_number, offset, parent, season_id, config
                )
            else:
                item = create_metadata(
                    season_info,
                    season_number,
                    offset,
                    metadata_language,
                    metadata_country_code,
                    config,
                )

            result.item = item
            result.has_metadata = True
            result.reset_people()
            for person in season_info.staff:
                result.add_person(person)
            return result

        except LookupCancelled:
            logger.info(
                f"Refresh of Season {season_number} cancelled. (Series={series_id})"
            )
            return MetadataResult()
        except Exception as e:
            logger.exception(
                f"Threw unexpectedly while refreshing season {season_number}; {e} "
                f"(Path={path},Series={series_id})"
            )
            return MetadataResult()


class SeasonProvider:
    """Season metadata provider as seen by the media library"""

    name = "Shoko"
    order = 0

    def __init__(
        self,
        client: ShowLookup,
        config: Config,
        tracker: UsageTracker | None = None,
    ):
        self.client = client
        self.config = config
        self.tracker = tracker or UsageTracker(config.tracker_stall_seconds)

    async def get_metadata(
        self, info: SeasonRequest, cancellation: asyncio.Event | None = None
    ) -> MetadataResult:
        """Refresh one season requested by the library"""
        return await resolve_season(
            self.client,
            self.config,
            self.tracker,
            info.index_number,
            info.series_provider_ids.get(SHOKO_SERIES_ID),
            metadata_language=info.metadata_language,
            metadata_country_code=info.metadata_country_code,
            name=info.name,
            path=info.path,
            cancellation=cancellation,
        )

    async def get_search_results(self, info: SeasonRequest) -> List[Season]:
        """Seasons are never searched for directly"""
        return []
