"""Helpers shared by the development command-line tools."""

from __future__ import annotations

import os
import subprocess
from collections.abc import Iterable
from pathlib import Path


class ToolError(Exception):
    """Raised when an external tool cannot be run or reports a failure."""


def should_ignore_file(file_path: str, ignored_dirs: Iterable[str]) -> bool:
    """Return True when ``file_path`` is one of ``ignored_dirs`` or lies beneath one."""
    return any(
        directory and (file_path == directory or file_path.startswith(directory + "/"))
        for directory in ignored_dirs
    )


def parse_ignore_list(value: str | None) -> list[str]:
    """Split a comma-separated directory list, trimming whitespace around each entry."""
    if not value:
        return []
    return [part.strip() for part in value.split(",")]


def parse_env_output(output: str) -> dict[str, str]:
    """Parse the output of ``env`` into a mapping; lines without ``=`` are skipped."""
    env: dict[str, str] = {}
    for line in output.split("\n"):
        key, sep, value = line.partition("=")
        if sep:
            env[key] = value
    return env


def load_asdf() -> dict[str, str]:
    """Source ``~/.asdf/asdf.sh`` and copy the resulting environment into this process.

    Returns the variables that were applied; an empty mapping when asdf could
    not be loaded.
    """
    try:
        home = Path.home()
    except (RuntimeError, KeyError):
        print("Failed to get home directory")
        return {}

    script = home / ".asdf" / "asdf.sh"
    try:
        result = subprocess.run(
            ["bash", "-c", f". {script} && env"],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        print("Failed to load asdf")
        return {}

    applied: dict[str, str] = {}
    for key, value in parse_env_output(result.stdout).items():
        if not key:
            continue
        try:
            os.environ[key] = value
        except ValueError:
            continue
        applied[key] = value
    return applied


def print_lines(output: str | bytes) -> None:
    """Print every non-empty line of ``output`` indented by three spaces."""
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    for line in output.split("\n"):
        if line:
            print(f"   {line}")