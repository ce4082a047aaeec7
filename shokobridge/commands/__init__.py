"""
Commands module for ShokoBridge CLI
"""

from .file_event_command import file_event_command
from .season_command import season_command
from .test_command import test_command

__all__ = ["season_command", "file_event_command", "test_command"]
