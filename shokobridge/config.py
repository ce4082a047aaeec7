"""
Configuration management
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

TITLE_SOURCES = ("metadata", "origin", "main")


@dataclass
class Config:
    """Application configuration"""

    shoko_url: str
    shoko_api_key: str
    jellyfin_url: str | None = None
    jellyfin_api_key: str | None = None
    log_level: str = "INFO"
    # Add the AniDB id next to the Shoko series id on every season
    add_anidb_id: bool = False
    # Title selection: "metadata", "origin" or "main"
    title_main_language: str = "metadata"
    title_alternate_language: str = "origin"
    description_cleanup: bool = True
    # Give series with "other" episodes an extra season number
    separate_other_episodes: bool = True
    tracker_stall_seconds: float = 60.0

    def __post_init__(self):
        for value in (self.title_main_language, self.title_alternate_language):
            if value not in TITLE_SOURCES:
                raise ValueError(
                    f"Invalid title language source: {value} "
                    f"(expected one of {', '.join(TITLE_SOURCES)})"
                )

    @classmethod
    def from_file(cls, config_path: Path) -> "Config":
        """Load configuration from a YAML file"""
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        return cls(**data)

    @classmethod
    def from_env_and_file(
        cls,
        config_path: Path | None = None,
        shoko_url: str | None = None,
        shoko_api_key: str | None = None,
    ) -> "Config":
        """
        Load configuration from file and/or environment variables

        Explicit shoko_url and shoko_api_key values (from the command line)
        take priority over both.
        """
        config_data: dict[str, Any] = {}

        # Load from file if specified
        if config_path and config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}

        # Environment variables take priority
        if os.getenv("SHOKO_URL"):
            config_data["shoko_url"] = os.getenv("SHOKO_URL")
        if os.getenv("SHOKO_API_KEY"):
            config_data["shoko_api_key"] = os.getenv("SHOKO_API_KEY")
        if os.getenv("JELLYFIN_URL"):
            config_data["jellyfin_url"] = os.getenv("JELLYFIN_URL")
        if os.getenv("JELLYFIN_API_KEY"):
            config_data["jellyfin_api_key"] = os.getenv("JELLYFIN_API_KEY")

        add_anidb_id_env = os.getenv("ADD_ANIDB_ID")
        if add_anidb_id_env:
            config_data["add_anidb_id"] = add_anidb_id_env.lower() in [
                "true",
                "1",
                "yes",
            ]

        if shoko_url:
            config_data["shoko_url"] = shoko_url
        if shoko_api_key:
            config_data["shoko_api_key"] = shoko_api_key

        if "shoko_url" not in config_data or "shoko_api_key" not in config_data:
            raise ValueError(
                "Incomplete configuration. Shoko URL and API Key are required. "
                "Use a config file or environment variables."
            )

        return cls(**config_data)

    def to_file(self, config_path: Path):
        """Save configuration to a YAML file"""
        data = {
            "shoko_url": self.shoko_url,
            "shoko_api_key": self.shoko_api_key,
            "jellyfin_url": self.jellyfin_url,
            "jellyfin_api_key": self.jellyfin_api_key,
            "log_level": self.log_level,
            "add_anidb_id": self.add_anidb_id,
            "title_main_language": self.title_main_language,
            "title_alternate_language": self.title_alternate_language,
            "description_cleanup": self.description_cleanup,
            "separate_other_episodes": self.separate_other_episodes,
            "tracker_stall_seconds": self.tracker_stall_seconds,
        }

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, allow_unicode=True)
