"""
File change events pushed by Shoko Server

Shoko announces file changes with a JSON payload describing the file and the
episodes it is linked to. Older servers send the links under "CrossRefs",
newer ones under "CrossReferences".
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, List

from .utils import to_native_path

logger = logging.getLogger(__name__)

CURRENT_CROSS_REFERENCES_KEY = "CrossReferences"
LEGACY_CROSS_REFERENCES_KEY = "CrossRefs"


@dataclass
class FileCrossReference:
    """Link between a file and one catalog episode, passed through as-is"""

    episode_id: int | None = None
    series_id: int | None = None
    anidb_episode_id: int | None = None
    anidb_anime_id: int | None = None
    percentage_start: int | None = None
    percentage_end: int | None = None
    order: int | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FileCrossReference":
        return cls(
            episode_id=data.get("EpisodeID"),
            series_id=data.get("SeriesID"),
            anidb_episode_id=data.get("AnidbEpisodeID"),
            anidb_anime_id=data.get("AnidbAnimeID"),
            percentage_start=data.get("PercentageStart"),
            percentage_end=data.get("PercentageEnd"),
            order=data.get("Order"),
            raw=dict(data),
        )


@dataclass
class FileEventArgs:
    """A file change announced by Shoko Server"""

    file_id: int
    import_folder_id: int
    internal_path: str = ""
    file_location_id: int | None = None
    has_cross_references: bool = False
    cross_references: List[FileCrossReference] = field(default_factory=list)
    _cached_path: str | None = field(default=None, init=False, repr=False, compare=False)

    def get_relative_path(self) -> str:
        """
        Host path of the file relative to its import folder

        Computed from internal_path on first call and reused afterwards, so
        repeated calls always return the same value.
        """
        if self._cached_path is None:
            self._cached_path = to_native_path(self.internal_path)
        return self._cached_path

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "FileEventArgs":
        """Build an event from a decoded JSON payload"""
        if not isinstance(payload, dict):
            raise ValueError(
                f"File event payload must be an object, got {type(payload).__name__}"
            )

        event = cls(
            file_id=payload["FileID"],
            file_location_id=payload.get("FileLocationID"),
            import_folder_id=payload["ImportFolderID"],
            internal_path=payload.get("RelativePath") or "",
        )

        # Presence of either key counts, even with a null value
        has_current = CURRENT_CROSS_REFERENCES_KEY in payload
        has_legacy = LEGACY_CROSS_REFERENCES_KEY in payload
        if has_current and has_legacy:
            logger.warning(
                f"File event {event.file_id} carries both "
                f"{CURRENT_CROSS_REFERENCES_KEY} and {LEGACY_CROSS_REFERENCES_KEY}; "
                f"using {CURRENT_CROSS_REFERENCES_KEY}"
            )

        if has_current or has_legacy:
            key = (
                CURRENT_CROSS_REFERENCES_KEY
                if has_current
                else LEGACY_CROSS_REFERENCES_KEY
            )
            event.has_cross_references = True
            event.cross_references = [
                FileCrossReference.from_dict(entry)
                for entry in payload[key] or []
            ]

        return event

    @classmethod
    def from_json(cls, text: str) -> "FileEventArgs":
        """Build an event from a raw JSON payload"""
        return cls.from_dict(json.loads(text))
