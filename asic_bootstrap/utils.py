"""Shared utility functions for asic-bootstrap.

Provides synchronous command execution, file download and
Rich-based console reporting.  Every public function is designed to be
side-effect-free where possible, with clear error messages when something
goes wrong.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path
from typing import Any

import httpx
from rich.console import Console
from rich.rule import Rule
from rich.table import Table

console = Console()


class CommandError(Exception):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, message: str, command: str = "", returncode: int = 0, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


# ---------------------------------------------------------------------------
# Command execution
# ---------------------------------------------------------------------------


def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: int = 120,
    capture: bool = True,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run an external command and wait for it.

    Args:
        cmd: Argument list; no shell is involved.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams so long installs stay visible).
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  A timeout yields ``-1`` and
        a missing executable yields ``127``.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
            capture_output=capture,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return -1, "", f"Command timed out after {timeout}s: {' '.join(cmd)}"
    except FileNotFoundError:
        return 127, "", f"Command not found: {cmd[0]}"

    stdout = (result.stdout or "").strip() if capture else ""
    stderr = (result.stderr or "").strip() if capture else ""
    return result.returncode, stdout, stderr


def run_checked(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: int = 120,
    capture: bool = False,
    env: dict[str, str] | None = None,
) -> str:
    """Run a command and raise :class:`CommandError` if it fails.

    Returns the captured stdout (empty when *capture* is ``False``).
    """
    returncode, stdout, stderr = run_command(
        cmd, cwd=cwd, timeout=timeout, capture=capture, env=env
    )
    if returncode != 0:
        cmd_str = " ".join(cmd)
        detail = f"\n{stderr}" if stderr else ""
        raise CommandError(
            f"Command failed (exit {returncode}): {cmd_str}{detail}",
            command=cmd_str,
            returncode=returncode,
            stderr=stderr,
        )
    return stdout


def command_exists(name: str) -> bool:
    """Return ``True`` if *name* resolves to an executable on ``PATH``."""
    return shutil.which(name) is not None


def with_sudo(cmd: list[str]) -> list[str]:
    """Prefix *cmd* with ``sudo`` unless we are already root."""
    if hasattr(os, "geteuid") and os.geteuid() == 0:
        return list(cmd)
    return ["sudo", *cmd]


# ---------------------------------------------------------------------------
# Downloads
# ---------------------------------------------------------------------------


def download_file(url: str, dest: str | Path, timeout: float = 60.0) -> Path:
    """Stream *url* to *dest*, following redirects.

    Raises:
        httpx.HTTPError: On connection failures or non-2xx responses.
    """
    target = Path(dest)
    target.parent.mkdir(parents=True, exist_ok=True)
    with httpx.stream(
        "GET", url, follow_redirects=True, timeout=httpx.Timeout(timeout, connect=10.0)
    ) as response:
        response.raise_for_status()
        with target.open("wb") as fh:
            for chunk in response.iter_bytes():
                fh.write(chunk)
    return target


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
        format_duration(3661.0) -> "1h 1m 1s"
    """
    if seconds < 0:
        return "0.0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    if hours > 0 or minutes > 0:
        parts.append(f"{int(secs)}s")
    else:
        parts.append(f"{secs:.1f}s")

    return " ".join(parts)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_section_header(title: str, color: str = "bright_cyan") -> None:
    """Print a full-width rule announcing a new section of work."""
    console.print()
    console.print(Rule(f"[bold {color}] {title} [/bold {color}]", style=color))
    console.print()


def print_summary_table(data: dict[str, Any], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_info(message: str) -> None:
    """Print an informational message."""
    console.print(f"[green][INFO][/green] {message}")


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
