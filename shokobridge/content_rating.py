"""
Content rating derived from catalog tags
"""

from .models import SeasonInfo

US_TV_RATINGS = ["TV-Y", "TV-G", "TV-PG", "TV-14", "TV-MA"]

# Tag name -> lowest rating level the tag allows
TAG_RATING_LEVELS = {
    # Target audience
    "kodomo": 0,
    "kids": 0,
    "shounen": 2,
    "shoujo": 2,
    "seinen": 3,
    "josei": 3,
    # Content indicators
    "violence": 3,
    "nudity": 3,
    "horror": 3,
    "gore": 4,
    "sexual content": 4,
    "sex": 4,
    "borderline porn": 4,
}

RESTRICTED_RATINGS = {"US": "XXX"}

SUPPORTED_COUNTRIES = {"US": US_TV_RATINGS}


def get_rating_level(season: SeasonInfo) -> int | None:
    """Highest rating level required by the season's tags"""
    levels = [
        TAG_RATING_LEVELS[tag.name.lower()]
        for tag in season.raw_tags
        if tag.name.lower() in TAG_RATING_LEVELS
    ]
    if not levels:
        return None
    return max(levels)


def get_season_content_rating(
    season: SeasonInfo, country_code: str | None
) -> str | None:
    """
    Content rating for a season in the given country

    Returns None when the country has no rating system here or when the tags
    carry no rating hints.
    """
    country = (country_code or "US").upper()
    ratings = SUPPORTED_COUNTRIES.get(country)
    if ratings is None:
        return None

    if season.anidb.restricted:
        return RESTRICTED_RATINGS[country]

    level = get_rating_level(season)
    if level is None:
        return None
    return ratings[level]
