"""
Command Line Interface (CLI) with Click
"""

import logging

import click

from shokobridge.cli_config import get_context
from shokobridge.commands import file_event_command, season_command, test_command
from shokobridge.utils import setup_logging

logger = logging.getLogger(__name__)


@click.group()
@click.option(
    "--config", "-c", type=click.Path(exists=True), help="YAML configuration file"
)
@click.option("--shoko-url", envvar="SHOKO_URL", help="Shoko Server URL")
@click.option("--shoko-api-key", envvar="SHOKO_API_KEY", help="Shoko API key")
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
)
@click.pass_context
def cli(ctx, config, shoko_url, shoko_api_key, log_level):
    """ShokoBridge - Shoko anime catalog to media library season bridge"""

    setup_logging(log_level)

    # Configuration is loaded by the commands that need it
    ctx.ensure_object(dict)
    ctx.obj["options"] = {
        "config": config,
        "shoko_url": shoko_url,
        "shoko_api_key": shoko_api_key,
        "log_level": log_level,
    }


@cli.command()
@click.argument("series_id")
@click.argument("season_number", type=int)
@click.option("--name", "-n", help="Season name (used for season 0)")
@click.option("--language", "-l", help="Metadata language (e.g. en)")
@click.option("--country", help="Metadata country code (e.g. US)")
@click.option(
    "--attach-to", help="Jellyfin series id to attach the season to"
)
@click.option("--season-id", help="Id of the attached season")
@click.pass_context
def season(ctx, series_id, season_number, name, language, country, attach_to, season_id):
    """Resolve the metadata of a library season"""
    obj = get_context(ctx)
    season_command(
        obj["config"],
        obj["shoko"],
        obj["jellyfin"],
        obj["tracker"],
        series_id,
        season_number,
        name=name,
        language=language,
        country=country,
        attach_to=attach_to,
        season_id=season_id,
    )


@cli.command("file-event")
@click.argument("source", type=click.File("r", encoding="utf-8"))
def file_event(source):
    """Parse a Shoko file change payload (use - for stdin)"""
    file_event_command(source)


@cli.command()
@click.pass_context
def test(ctx):
    """Test connection to Shoko and Jellyfin"""
    obj = get_context(ctx)
    test_command(obj["config"], obj["shoko"], obj["jellyfin"])


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
