"""Report and fix Go source files that gofmt would change."""

from __future__ import annotations

import argparse
import subprocess
from collections.abc import Sequence

from tfdevtools.shell import ToolError, load_asdf, parse_ignore_list, should_ignore_file


def _gofmt_listing() -> list[str]:
    try:
        result = subprocess.run(
            ["gofmt", "-l", "."], capture_output=True, text=True, check=True
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        raise ToolError(f"Error checking files: {exc}") from exc
    listing = result.stdout.strip()
    return listing.split("\n") if listing else []


def list_unformatted(ignored_dirs: Sequence[str]) -> list[str]:
    """Return the files gofmt would change, leaving out ignored directories."""
    return [f for f in _gofmt_listing() if not should_ignore_file(f, ignored_dirs)]


def format_sources(ignored_dirs: Sequence[str]) -> int:
    """Rewrite badly formatted files with gofmt and return how many were listed."""
    print("Checking which files need formatting...")
    files = _gofmt_listing()
    if not files:
        print("✅ All files are already properly formatted")
        return 0

    print("Formatting the following files:")
    selected = [f for f in files if not should_ignore_file(f, ignored_dirs)]
    for name in selected:
        print(f"  - {name}")

    if not selected:
        print("No files need formatting after applying ignore rules")
        return 0

    print("Running gofmt to fix formatting...")
    try:
        subprocess.run(["gofmt", "-w", "."], check=True)
    except (OSError, subprocess.CalledProcessError) as exc:
        raise ToolError(f"Error running gofmt: {exc}") from exc

    print(f"✨ Format complete - fixed {len(selected)} file(s)")
    return len(selected)


def main(argv: Sequence[str] | None = None) -> int:
    """Command entry point; returns the process exit status."""
    parser = argparse.ArgumentParser(prog="format", description="Format Go sources with gofmt.")
    parser.add_argument("--ignore", default="", help="Comma-separated list of directories to ignore")
    args = parser.parse_args(argv)

    load_asdf()
    print("Formatting Go code...")

    ignored = parse_ignore_list(args.ignore)
    if len(ignored) == 1:
        print(f"⚠️  Ignoring directory during formatting: {ignored[0]}")
    elif len(ignored) > 1:
        print(f"⚠️  Ignoring directories during formatting: {', '.join(ignored)}")

    try:
        format_sources(ignored)
    except ToolError as exc:
        print(exc)
        return 1
    return 0