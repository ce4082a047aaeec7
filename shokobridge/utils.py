"""
Miscellaneous utilities
"""

import logging
import os


def setup_logging(log_level: str = "INFO"):
    """Configure logging system"""
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def format_season_info(series_id: str, season_number: int, name: str | None) -> str:
    """Format season information for display"""
    return f"Series {series_id} - S{season_number:02d} - {name or 'Unknown'}"


def to_native_path(internal_path: str, separator: str = os.sep) -> str:
    """
    Convert a catalog relative path into a host path rooted at the separator

    Both forward and backward slashes are replaced, so the result does not
    depend on which platform produced the catalog path.
    """
    return separator + internal_path.replace("/", separator).replace(
        "\\", separator
    )
