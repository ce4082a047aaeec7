"""
Shoko Server API Client
"""

import logging
from datetime import date
from typing import List

import requests

from .models import AniDBInfo, Person, Rating, SeasonInfo, ShowInfo, Tag, Title

logger = logging.getLogger(__name__)

# AniDB tags that are shown as genres instead of plain tags
GENRE_TAGS = {
    "action",
    "adventure",
    "comedy",
    "drama",
    "ecchi",
    "fantasy",
    "horror",
    "mahou shoujo",
    "mecha",
    "music",
    "mystery",
    "psychological",
    "romance",
    "science fiction",
    "slice of life",
    "sports",
    "thriller",
}

# Cast role name -> person type
PERSON_TYPES = {
    "Seiyuu": "Actor",
    "Director": "Director",
    "SeriesComposer": "Writer",
    "SourceWork": "Writer",
    "Producer": "Producer",
    "Music": "Composer",
    "CharacterDesign": "Illustrator",
}


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        logger.debug(f"Ignoring unparsable date: {value}")
        return None


def build_show_info(
    seasons: List[SeasonInfo], separate_other_episodes: bool = True
) -> ShowInfo:
    """
    Lay out the seasons of a show

    Seasons are numbered from 1 in air date order. A season with "other"
    episodes takes the following number too, anchored on the same base
    season number.
    """
    ordered = sorted(
        seasons, key=lambda s: (s.anidb.air_date or date.max, s.anidb.id)
    )
    season_order: dict[int, SeasonInfo] = {}
    base_numbers: dict[str, int] = {}

    number = 1
    for season in ordered:
        season_order[number] = season
        base_numbers[season.id] = number
        number += 1
        if separate_other_episodes and season.has_other_episodes:
            season_order[number] = season
            number += 1

    main = ordered[0]
    return ShowInfo(
        id=main.group_id or main.id,
        name=main.name,
        group_id=main.group_id,
        season_order=season_order,
        base_season_numbers=base_numbers,
    )


class ShokoClient:
    """Client to interact with the Shoko Server API"""

    def __init__(self, url: str, api_key: str, separate_other_episodes: bool = True):
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.separate_other_episodes = separate_other_episodes
        self.session = requests.Session()
        self.session.headers.update(
            {"apikey": api_key, "Content-Type": "application/json"}
        )

    def _get(self, endpoint: str, params: dict | None = None) -> dict | list:
        """Perform a GET request to the API"""
        url = f"{self.url}/api/v3/{endpoint}"
        response = self.session.get(url, params=params, timeout=30)
        response.raise_for_status()
        return response.json()

    def get_season_info(self, series_id: str) -> SeasonInfo | None:
        """Fetch a series with its AniDB data, tags and cast"""
        try:
            item = self._get(f"Series/{series_id}", params={"includeDataFrom": "AniDB"})
        except requests.exceptions.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                logger.debug(f"Series {series_id} not found in Shoko")
                return None
            raise

        tags = [
            Tag(
                name=t["Name"],
                namespace=t.get("Namespace"),
                weight=t.get("Weight", 0),
                is_spoiler=t.get("IsSpoiler", False),
            )
            for t in self._get(f"Series/{series_id}/Tags")
        ]
        cast = self._get(f"Series/{series_id}/Cast")

        return self._build_season_info(item, tags, cast)

    def _build_season_info(self, item: dict, tags: List[Tag], cast: list) -> SeasonInfo:
        ids = item.get("IDs", {})
        anidb_data = item.get("AniDB") or {}
        rating_data = anidb_data.get("Rating")

        anidb = AniDBInfo(
            id=anidb_data.get("ID", ids.get("AniDB", 0)),
            title=anidb_data.get("Title", item["Name"]),
            type=anidb_data.get("Type", "TV"),
            titles=[
                Title(
                    name=t["Name"],
                    language=t.get("Language", "x-other"),
                    type=t.get("Type", "Official").lower(),
                )
                for t in anidb_data.get("Titles", [])
            ],
            description=anidb_data.get("Description") or "",
            air_date=_parse_date(anidb_data.get("AirDate")),
            end_date=_parse_date(anidb_data.get("EndDate")),
            rating=Rating(
                value=rating_data["Value"],
                max_value=rating_data.get("MaxValue", 1000),
                votes=rating_data.get("Votes", 0),
            )
            if rating_data
            else None,
            restricted=anidb_data.get("Restricted", False),
        )

        visible_tags = [t for t in tags if not t.is_spoiler]
        genres = [t.name.title() for t in visible_tags if t.name.lower() in GENRE_TAGS]
        plain_tags = [
            t.name.title() for t in visible_tags if t.name.lower() not in GENRE_TAGS
        ]

        studios = []
        staff = []
        for entry in cast:
            role_name = entry.get("RoleName")
            person_name = (entry.get("Staff") or {}).get("Name")
            if not person_name:
                continue
            if role_name == "Studio":
                if person_name not in studios:
                    studios.append(person_name)
                continue
            character = (entry.get("Character") or {}).get("Name")
            staff.append(
                Person(
                    name=person_name,
                    role=character or entry.get("RoleDetails"),
                    type=PERSON_TYPES.get(role_name, "Staff"),
                )
            )

        sizes = (item.get("Sizes") or {}).get("Total") or {}
        group_id = ids.get("ParentGroup")

        return SeasonInfo(
            id=str(ids.get("ID")),
            name=item["Name"],
            anidb=anidb,
            group_id=str(group_id) if group_id is not None else None,
            descriptions={"en": anidb.description} if anidb.description else {},
            tags=plain_tags,
            genres=genres,
            studios=studios,
            raw_tags=tags,
            staff=staff,
            has_other_episodes=sizes.get("Others", 0) > 0,
        )

    def get_group_series_ids(self, group_id: str) -> List[str]:
        """Fetch the ids of the series directly in a group"""
        data = self._get(f"Group/{group_id}/Series", params={"recursive": "false"})
        return [str(item["IDs"]["ID"]) for item in data]

    def get_show_info_for_series(self, series_id: str) -> ShowInfo | None:
        """Build the show the given series belongs to"""
        season = self.get_season_info(series_id)
        if season is None:
            return None

        members = [season]
        if season.group_id:
            for member_id in self.get_group_series_ids(season.group_id):
                if member_id == season.id:
                    continue
                member = self.get_season_info(member_id)
                if member is not None:
                    members.append(member)

        logger.debug(
            f"Series {series_id} resolves to a show with {len(members)} season(s)"
        )
        return build_show_info(members, self.separate_other_episodes)

    def test_connection(self) -> bool:
        """Test the connection to Shoko Server"""
        try:
            self._get("Init/Version")
            return True
        except Exception as e:
            logger.error(f"Connection test failed: {e}")
            return False
