"""
Season command - resolve one library season against Shoko
"""

import asyncio
import logging
import sys
import uuid

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ..config import Config
from ..jellyfin import JellyfinClient
from ..models import MetadataResult
from ..season_provider import resolve_season
from ..shoko import ShokoClient
from ..tracker import UsageTracker
from ..utils import format_season_info

logger = logging.getLogger(__name__)
console = Console()


def _print_result(result: MetadataResult):
    season = result.item
    table = Table(title=season.name or "Season")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    rows = [
        ("Index", season.index_number),
        ("Id", season.id),
        ("Original title", season.original_title),
        ("Sort name", season.sort_name),
        ("Premiere date", season.premiere_date),
        ("End date", season.end_date),
        ("Production year", season.production_year),
        ("Genres", ", ".join(season.genres)),
        ("Tags", ", ".join(season.tags)),
        ("Studios", ", ".join(season.studios)),
        ("Production locations", ", ".join(season.production_locations)),
        ("Official rating", season.official_rating),
        ("Community rating", season.community_rating),
        (
            "Provider ids",
            ", ".join(f"{k}={v}" for k, v in season.provider_ids.items()),
        ),
        ("Series", season.series_name),
        ("People", len(result.people)),
    ]
    for field_name, value in rows:
        if value in (None, ""):
            continue
        table.add_row(field_name, str(value))

    console.print(table)
    if season.overview:
        console.print(f"\n[dim]{season.overview}[/dim]")


def season_command(
    config: Config,
    shoko: ShokoClient,
    jellyfin: JellyfinClient | None,
    tracker: UsageTracker,
    series_id: str,
    season_number: int,
    name: str | None = None,
    language: str | None = None,
    country: str | None = None,
    attach_to: str | None = None,
    season_id: str | None = None,
):
    """
    Resolve and display one season

    Args:
        config: Configuration object
        shoko: Shoko client
        jellyfin: Jellyfin client, required when attach_to is given
        tracker: In-flight operation tracker
        series_id: Shoko series id
        season_number: Library season number
        name: Season name, used for season 0
        language: Metadata language
        country: Metadata country code
        attach_to: Jellyfin series id to attach the season to
        season_id: Id for the attached season, generated when not given
    """
    parent = None
    if attach_to:
        if jellyfin is None:
            console.print(
                "[red]Error:[/red] --attach-to requires Jellyfin to be configured"
            )
            sys.exit(1)
        parent = jellyfin.get_series(attach_to)
        if parent is None:
            console.print(f"[red]Error:[/red] Jellyfin series {attach_to} not found")
            sys.exit(1)
        if not season_id:
            season_id = str(uuid.uuid4())

    console.print(
        f"[bold cyan]Resolving:[/bold cyan] "
        f"{format_season_info(series_id, season_number, name)}"
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Querying Shoko...", total=None)
        result = asyncio.run(
            resolve_season(
                shoko,
                config,
                tracker,
                season_number,
                series_id,
                metadata_language=language,
                metadata_country_code=country,
                name=name,
                parent=parent,
                season_id=season_id,
            )
        )
        progress.update(task, completed=True)

    if not result.has_metadata:
        console.print("[yellow]No metadata found for this season[/yellow]")
        sys.exit(1)

    _print_result(result)
