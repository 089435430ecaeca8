"""Command execution utilities with verbose output support.

Used to run kubectl for live resource lookups. When verbose mode is on the
command and its output are echoed to stderr.
"""

import subprocess
import time
from typing import Dict, List, Optional

import structlog
from rich.console import Console


logger = structlog.get_logger(__name__)

# Global flag for verbose command output
_VERBOSE_COMMANDS = False
_console = Console(stderr=True)

_MAX_ECHO_LINES = 50


def set_verbose_commands(enabled: bool) -> None:
    """Enable or disable verbose command output.

    Args:
        enabled: True to echo every external command and its output
    """
    global _VERBOSE_COMMANDS
    _VERBOSE_COMMANDS = enabled


def is_verbose_commands() -> bool:
    """Check if verbose command output is enabled."""
    return _VERBOSE_COMMANDS


def _echo_stream(label: str, style: str, content: str) -> None:
    _console.print(f"[bold {style}]  {label}:[/bold {style}]")
    lines = content.split("\n")
    if len(lines) > _MAX_ECHO_LINES:
        half = _MAX_ECHO_LINES // 2
        for line in lines[:half]:
            _console.print(f"    {line}")
        _console.print(f"    [dim]... ({len(lines) - _MAX_ECHO_LINES} lines omitted) ...[/dim]")
        for line in lines[-half:]:
            _console.print(f"    {line}")
    else:
        for line in lines:
            _console.print(f"    {line}")


def run_command(
    cmd: List[str],
    check: bool = True,
    timeout: Optional[float] = None,
    env: Optional[Dict[str, str]] = None,
) -> subprocess.CompletedProcess:
    """Run an external command, capturing text output.

    Args:
        cmd: Command and arguments as list
        check: Whether to raise exception on non-zero exit
        timeout: Command timeout in seconds
        env: Environment variables

    Returns:
        CompletedProcess instance with command results

    Raises:
        subprocess.CalledProcessError: If command fails and check=True
        subprocess.TimeoutExpired: If command times out
    """
    cmd_str = " ".join(cmd)
    if _VERBOSE_COMMANDS:
        _console.print("\n[bold cyan]→ Executing command:[/bold cyan]")
        _console.print(f"  [dim]{cmd_str}[/dim]")

    start_time = time.time()
    result = subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        check=False,  # We'll handle check ourselves
        timeout=timeout,
        env=env,
    )
    duration = time.time() - start_time
    logger.debug("command finished", command=cmd_str, exit_code=result.returncode, duration=round(duration, 3))

    if _VERBOSE_COMMANDS:
        _console.print(f"  [dim]Exit code: {result.returncode}[/dim]")
        if result.stdout:
            _echo_stream("stdout", "green", result.stdout)
        if result.stderr:
            _echo_stream("stderr", "red", result.stderr)
        _console.print()

    if check and result.returncode != 0:
        raise subprocess.CalledProcessError(
            result.returncode,
            cmd,
            output=result.stdout,
            stderr=result.stderr
        )

    return result
