"""
Title and description selection for catalog seasons
"""

import re

from .models import SeasonInfo, Title

# Romanization language of the main title -> origin language
ORIGIN_LANGUAGES = {
    "x-jat": "ja",
    "x-zht": "zh",
    "x-kot": "ko",
    "x-tht": "th",
}

OTHER_EPISODES_SUFFIX = " (Other Episodes)"

# "http://anidb.net/cr1234 [Name]" -> "Name"
_LINK_PATTERN = re.compile(r"https?://anidb\.net/[a-z]{1,2}\d+ \[([^\]]+)\]")
# AniDB source notes: "Source: ANN", "Note: ...", "* Based on the manga."
_SOURCE_LINE_PATTERN = re.compile(
    r"^(?:Source|Note):.*$|^\* Based on .*$", re.IGNORECASE | re.MULTILINE
)
_BLANK_LINES_PATTERN = re.compile(r"\n{3,}")


def _base_language(language: str | None) -> str | None:
    if not language:
        return None
    return language.split("-")[0].lower()


def _main_title(season: SeasonInfo) -> Title | None:
    for title in season.anidb.titles:
        if title.type == "main":
            return title
    return None


def get_origin_language(season: SeasonInfo) -> str | None:
    """Guess the language a season was produced in from its main title"""
    main = _main_title(season)
    if main is None:
        return None
    return ORIGIN_LANGUAGES.get(main.language.lower(), main.language.lower())


def _title_in_language(season: SeasonInfo, language: str | None) -> str | None:
    wanted = _base_language(language)
    if not wanted:
        return None
    candidates = [t for t in season.anidb.titles if _base_language(t.language) == wanted]
    for preferred_type in ("main", "official"):
        for title in candidates:
            if title.type == preferred_type:
                return title.name
    return None


def get_title(season: SeasonInfo, source: str, metadata_language: str | None) -> str:
    """
    Pick one title for a season

    Args:
        season: The catalog season
        source: "metadata" for the requested language, "origin" for the
            production language, "main" for the AniDB main title
        metadata_language: Language requested by the library

    Returns:
        The selected title, falling back to the AniDB main title
    """
    title = None
    if source == "metadata":
        title = _title_in_language(season, metadata_language)
    elif source == "origin":
        title = _title_in_language(season, get_origin_language(season))
    return title or season.anidb.title or season.name


def _offset_suffix(offset: int) -> str:
    if offset == 0:
        return ""
    if offset == 1:
        return OTHER_EPISODES_SUFFIX
    return f" (Part {offset + 1})"


def get_season_titles(
    season: SeasonInfo,
    offset: int,
    metadata_language: str | None,
    main: str = "metadata",
    alternate: str = "origin",
) -> tuple[str, str | None]:
    """
    Resolve the display and alternate titles of a season

    The offset is the distance between the requested season number and the
    season's base number. A non-zero offset means the library season is an
    extra slot split off from the base season, and both titles get a suffix
    telling the two apart.
    """
    suffix = _offset_suffix(offset)
    display_title = get_title(season, main, metadata_language) + suffix
    alternate_title = get_title(season, alternate, metadata_language) + suffix
    if alternate_title == display_title:
        return display_title, None
    return display_title, alternate_title


def sanitize_description(text: str) -> str:
    """Strip AniDB link markup and trailing source notes from a description"""
    text = text.replace("\r\n", "\n")
    text = _LINK_PATTERN.sub(r"\1", text)
    text = _SOURCE_LINE_PATTERN.sub("", text)
    text = _BLANK_LINES_PATTERN.sub("\n\n", text)
    return text.strip()


def get_description(
    season: SeasonInfo, metadata_language: str | None, cleanup: bool = True
) -> str | None:
    """Pick the description for the requested language"""
    wanted = _base_language(metadata_language)
    description = None
    if wanted:
        description = season.descriptions.get(wanted)
    if not description:
        description = season.anidb.description
    if not description:
        return None
    return sanitize_description(description) if cleanup else description
