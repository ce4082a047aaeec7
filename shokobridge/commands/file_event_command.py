"""
File event command - inspect a Shoko file change payload
"""

import json
import sys
from typing import IO

from rich.console import Console
from rich.table import Table

from ..file_events import FileEventArgs

console = Console()


def file_event_command(source: IO[str]):
    """
    Parse and display a file change payload

    Args:
        source: Open file (or stdin) holding the JSON payload
    """
    try:
        event = FileEventArgs.from_json(source.read())
    except (json.JSONDecodeError, KeyError, ValueError) as e:
        console.print(f"[red]Invalid file event:[/red] {e}")
        sys.exit(1)

    console.print(f"[bold]File:[/bold] {event.file_id}")
    console.print(f"[dim]Import folder:[/dim] {event.import_folder_id}")
    if event.file_location_id is not None:
        console.print(f"[dim]File location:[/dim] {event.file_location_id}")
    console.print(f"[dim]Path:[/dim] {event.get_relative_path()}")

    if not event.has_cross_references:
        console.print("[yellow]No cross references in payload[/yellow]")
        return

    table = Table(title=f"Cross References ({len(event.cross_references)})")
    table.add_column("Episode", style="cyan")
    table.add_column("Series", style="green")
    table.add_column("AniDB Episode", style="blue")
    table.add_column("AniDB Anime", style="blue")
    table.add_column("Range", style="magenta")

    for xref in event.cross_references:
        if xref.percentage_start is not None and xref.percentage_end is not None:
            span = f"{xref.percentage_start}-{xref.percentage_end}%"
        else:
            span = "-"
        table.add_row(
            str(xref.episode_id or "-"),
            str(xref.series_id or "-"),
            str(xref.anidb_episode_id or "-"),
            str(xref.anidb_anime_id or "-"),
            span,
        )

    console.print(table)
