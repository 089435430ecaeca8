"""
Utility functions and helpers.

Logging setup and external command execution shared across Lightspeed.
"""

from lightspeed.utils.command import run_command, set_verbose_commands, is_verbose_commands
from lightspeed.utils.logging import configure_logging

__all__ = [
    "run_command",
    "set_verbose_commands",
    "is_verbose_commands",
    "configure_logging",
]
