import sys
from datetime import date
from pathlib import Path

import pytest

# Ensure root path is available for imports
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from shokobridge.config import Config  # noqa: E402
from shokobridge.models import (  # noqa: E402
    AniDBInfo,
    Person,
    Rating,
    SeasonInfo,
    Tag,
    Title,
)
from shokobridge.shoko import build_show_info  # noqa: E402


@pytest.fixture
def config() -> Config:
    return Config(shoko_url="http://shoko:8111", shoko_api_key="secret")


def make_season_info(
    series_id: str = "CS1",
    name: str = "Season One",
    anidb_id: int = 100,
    air_date: date | None = date(2020, 1, 5),
    has_other_episodes: bool = False,
    tags: list[Tag] | None = None,
    restricted: bool = False,
) -> SeasonInfo:
    anidb = AniDBInfo(
        id=anidb_id,
        title=f"{name} Main",
        titles=[
            Title(name=f"{name} Main", language="x-jat", type="main"),
            Title(name=f"{name} English", language="en", type="official"),
            Title(name=f"{name} Japanese", language="ja", type="official"),
        ],
        description=f"Description of {name}.\n\nSource: AniDB",
        air_date=air_date,
        end_date=date(2020, 3, 29) if air_date else None,
        rating=Rating(value=812, max_value=1000, votes=40),
        restricted=restricted,
    )
    raw_tags = tags if tags is not None else [
        Tag(name="action"),
        Tag(name="Japanese production"),
        Tag(name="shounen"),
    ]
    return SeasonInfo(
        id=series_id,
        name=name,
        anidb=anidb,
        group_id="G1",
        tags=["Shounen"],
        genres=["Action"],
        studios=["Studio Pierrot"],
        raw_tags=raw_tags,
        staff=[Person(name="Jane Doe", role="Hero", type="Actor")],
        has_other_episodes=has_other_episodes,
    )


@pytest.fixture
def season_factory():
    return make_season_info


@pytest.fixture
def two_season_show():
    """Show where series CS1 has other episodes and CS2 follows it"""
    first = make_season_info("CS1", "Season One", 100, date(2020, 1, 5), True)
    second = make_season_info("CS2", "Season Two", 200, date(2021, 1, 5))
    return build_show_info([second, first])
