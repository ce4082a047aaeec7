"""
Data models for ShokoBridge
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List


@dataclass
class Title:
    """A localized title from AniDB"""

    name: str
    language: str
    type: str = "official"


@dataclass
class Rating:
    """A community rating as reported by AniDB"""

    value: float
    max_value: float = 1000.0
    votes: int = 0

    def to_float(self, scale: float) -> float:
        """Rescale the rating onto a 0..scale range"""
        if not self.max_value:
            return 0.0
        return round(self.value / self.max_value * scale, 2)


@dataclass
class Tag:
    """A catalog tag, optionally with a namespace and weight"""

    name: str
    namespace: str | None = None
    weight: int = 0
    is_spoiler: bool = False


@dataclass
class Person:
    """A staff or cast member linked to a season"""

    name: str
    role: str | None = None
    type: str = "Actor"
    image_url: str | None = None


@dataclass
class AniDBInfo:
    """AniDB side of a catalog series"""

    id: int
    title: str
    type: str = "TV"
    titles: List[Title] = field(default_factory=list)
    description: str = ""
    air_date: date | None = None
    end_date: date | None = None
    rating: Rating | None = None
    restricted: bool = False


@dataclass
class SeasonInfo:
    """A catalog series acting as one season of a show"""

    id: str
    name: str
    anidb: AniDBInfo
    group_id: str | None = None
    descriptions: dict[str, str] = field(default_factory=dict)
    tags: List[str] = field(default_factory=list)
    genres: List[str] = field(default_factory=list)
    studios: List[str] = field(default_factory=list)
    raw_tags: List[Tag] = field(default_factory=list)
    staff: List[Person] = field(default_factory=list)
    has_other_episodes: bool = False


@dataclass
class ShowInfo:
    """A logical show made of one or more catalog series"""

    id: str
    name: str
    group_id: str | None = None
    season_order: dict[int, SeasonInfo] = field(default_factory=dict)
    base_season_numbers: dict[str, int] = field(default_factory=dict)

    def get_season_by_number(self, season_number: int) -> SeasonInfo | None:
        """Look up the season shown at a library season number"""
        return self.season_order.get(season_number)

    def get_base_season_number(self, season: SeasonInfo) -> int | None:
        """Return the number the season is anchored on, or None if unknown"""
        return self.base_season_numbers.get(season.id)


@dataclass
class ParentSeries:
    """An existing series record in the media library"""

    id: str
    name: str
    presentation_unique_key: str
    preferred_metadata_language: str | None = None
    preferred_metadata_country_code: str | None = None


@dataclass
class Season:
    """Season metadata handed back to the media library"""

    name: str | None
    index_number: int | None
    sort_name: str
    forced_sort_name: str
    original_title: str | None = None
    overview: str | None = None
    premiere_date: date | None = None
    end_date: date | None = None
    production_year: int | None = None
    tags: List[str] = field(default_factory=list)
    genres: List[str] = field(default_factory=list)
    studios: List[str] = field(default_factory=list)
    production_locations: List[str] = field(default_factory=list)
    official_rating: str | None = None
    community_rating: float | None = None
    provider_ids: dict[str, str] = field(default_factory=dict)
    id: str | None = None
    is_virtual_item: bool = False
    series_id: str | None = None
    series_name: str | None = None
    series_presentation_unique_key: str | None = None
    date_modified: datetime | None = None
    date_last_saved: datetime | None = None

    def set_provider_id(self, name: str, value: str):
        """Attach an external identifier"""
        self.provider_ids[name] = value


@dataclass
class SeasonRequest:
    """Lookup information sent by the media library for one season"""

    index_number: int | None
    name: str | None = None
    path: str | None = None
    series_provider_ids: dict[str, str] = field(default_factory=dict)
    metadata_language: str | None = None
    metadata_country_code: str | None = None


@dataclass
class MetadataResult:
    """Result of a metadata refresh; empty when item is None"""

    item: Season | None = None
    has_metadata: bool = False
    people: List[Person] = field(default_factory=list)

    def reset_people(self):
        self.people = []

    def add_person(self, person: Person):
        self.people.append(person)
