"""
Tag based lookups
"""

from typing import List

from .models import SeasonInfo

PRODUCTION_COUNTRIES = {
    "japanese production": "Japan",
    "chinese production": "China",
    "korean production": "South Korea",
    "taiwanese production": "Taiwan",
    "american production": "United States of America",
    "french production": "France",
    "canadian production": "Canada",
}


def get_season_production_locations(season: SeasonInfo) -> List[str]:
    """Countries a season was produced in, in tag order"""
    locations: List[str] = []
    for tag in season.raw_tags:
        country = PRODUCTION_COUNTRIES.get(tag.name.lower())
        if country and country not in locations:
            locations.append(country)
    return locations
