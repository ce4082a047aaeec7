"""
CLI configuration handler
"""

import sys
from pathlib import Path

import click
from rich.console import Console

from .config import Config
from .jellyfin import JellyfinClient
from .shoko import ShokoClient
from .tracker import UsageTracker

console = Console()


def load_config_from_args(
    config_file: str | None,
    shoko_url: str | None,
    shoko_api_key: str | None,
    log_level: str,
) -> Config:
    """
    Load configuration from CLI arguments and files

    The config file (or ./config.yaml when none is given) and the environment
    are always read; the Shoko URL and API key from the CLI go on top.

    Args:
        config_file: Path to config file
        shoko_url: Shoko URL from CLI
        shoko_api_key: Shoko API key from CLI
        log_level: Log level

    Returns:
        Config object

    Raises:
        SystemExit if configuration is invalid
    """
    config_path = Path(config_file) if config_file else Path("config.yaml")
    if not config_path.exists() and not (shoko_url and shoko_api_key):
        console.print(
            "[red]Error:[/red] Missing configuration. Use --config or environment variables."
        )
        console.print("\nExample:")
        console.print(
            "  shokobridge --shoko-url http://localhost:8111 --shoko-api-key YOUR_KEY test"
        )
        sys.exit(1)

    try:
        cfg = Config.from_env_and_file(
            config_path if config_path.exists() else None,
            shoko_url=shoko_url,
            shoko_api_key=shoko_api_key,
        )
    except Exception as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)

    if not config_file:
        cfg.log_level = log_level
    return cfg


def setup_context(config: Config) -> dict:
    """
    Setup CLI context with config, clients and tracker

    Args:
        config: Configuration object

    Returns:
        Dictionary with context objects
    """
    jellyfin = None
    if config.jellyfin_url and config.jellyfin_api_key:
        jellyfin = JellyfinClient(config.jellyfin_url, config.jellyfin_api_key)

    return {
        "config": config,
        "shoko": ShokoClient(
            config.shoko_url,
            config.shoko_api_key,
            separate_other_episodes=config.separate_other_episodes,
        ),
        "jellyfin": jellyfin,
        "tracker": UsageTracker(config.tracker_stall_seconds),
    }


def get_context(ctx: click.Context) -> dict:
    """
    Load configuration and clients on first use by a command

    Commands that never talk to Shoko (file-event) do not call this, so they
    work without any configuration.
    """
    if "config" not in ctx.obj:
        options = ctx.obj["options"]
        cfg = load_config_from_args(
            options["config"],
            options["shoko_url"],
            options["shoko_api_key"],
            options["log_level"],
        )
        ctx.obj.update(setup_context(cfg))
    return ctx.obj
