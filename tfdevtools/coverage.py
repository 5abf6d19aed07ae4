"""Run groups of Go tests with coverage, merge the profiles and print a summary."""

from __future__ import annotations

import json
import os
import subprocess
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from tfdevtools.shell import ToolError

COVERAGE_DIR = "tmp/coverage"
COMBINED_PROFILE = "coverage.out"
COMBINED_NAME = "Combined Total Coverage (All Components)"
COMBINED_EMOJI = "🧩"

_JSON_FIELDS = {
    "name": "name",
    "emoji": "emoji",
    "outputFile": "output_file",
    "testPath": "test_path",
    "coverPkg": "cover_pkg",
}
_JSON_FIELDS_FOLDED = {key.lower(): attr for key, attr in _JSON_FIELDS.items()}


def _join(directory: str, name: str) -> str:
    return os.path.normpath(f"{directory}/{name}")


@dataclass(frozen=True)
class CoverageGroup:
    """One set of test packages whose coverage is measured together."""

    name: str = ""
    emoji: str = ""
    output_file: str = ""
    test_path: str = ""
    cover_pkg: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> CoverageGroup:
        """Build a group from its JSON object; unknown keys are ignored."""
        values: dict[str, str] = {}
        for key, value in data.items():
            attr = _JSON_FIELDS.get(key) or _JSON_FIELDS_FOLDED.get(key.lower())
            if attr is None or value is None:
                continue
            if not isinstance(value, str):
                raise ValueError(f"field {key!r} must be a string, not {type(value).__name__}")
            values[attr] = value
        return cls(**values)


def load_groups(path: str | os.PathLike[str]) -> list[CoverageGroup]:
    """Read the coverage group definitions from a JSON file."""
    try:
        raw = Path(path).read_bytes()
    except OSError as exc:
        raise ToolError(f"Error reading coverage groups file: {exc}") from exc

    try:
        data = json.loads(raw)
        if data is None:
            data = []
        if not isinstance(data, list):
            raise ValueError(f"expected a JSON array, not {type(data).__name__}")
        groups = []
        for item in data:
            if item is None:
                groups.append(CoverageGroup())
            elif isinstance(item, dict):
                groups.append(CoverageGroup.from_mapping(item))
            else:
                raise ValueError(f"expected a JSON object, not {type(item).__name__}")
    except (ValueError, UnicodeDecodeError) as exc:
        raise ToolError(f"Error parsing coverage groups: {exc}") from exc

    if not groups:
        raise ToolError("Error: No coverage groups provided in the JSON file")
    return groups


def summary_log_name(output_file: str) -> str:
    """Return the summary log name that belongs to a coverage profile name."""
    return output_file.replace(".out", "-summary.log", 1)


def run_test_with_coverage(
    group: CoverageGroup, coverage_dir: str = COVERAGE_DIR, quiet: bool = False
) -> bool:
    """Run ``go test`` for a group, writing its profile; True when the tests passed."""
    cmd = [
        "go",
        "test",
        "-covermode=atomic",
        f"-coverprofile={_join(coverage_dir, group.output_file)}",
    ]
    if group.cover_pkg:
        cmd.append(f"-coverpkg={group.cover_pkg}")
    cmd.append(group.test_path)

    stream = subprocess.DEVNULL if quiet else None
    try:
        result = subprocess.run(cmd, stdout=stream, stderr=stream)
    except OSError as exc:
        error = str(exc)
    else:
        if result.returncode == 0:
            return True
        error = f"exit status {result.returncode}"

    if not quiet:
        print(f"Warning: Test command returned error: {error}")
    return False


def write_coverage_summary(
    coverage_file: str, coverage_dir: str = COVERAGE_DIR, echo: bool = False
) -> str:
    """Write the per-function report of a profile to its summary log and return it.

    The summary log is created before the report is produced, so it is left
    empty when ``go tool cover`` fails; that failure raises ``ToolError``.
    """
    coverage_path = _join(coverage_dir, coverage_file)
    summary_path = _join(coverage_dir, summary_log_name(coverage_file))

    with open(summary_path, "w", encoding="utf-8") as summary:
        try:
            result = subprocess.run(
                ["go", "tool", "cover", "-func", coverage_path],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except OSError as exc:
            raise ToolError(str(exc)) from exc
        if result.returncode != 0:
            raise ToolError(f"exit status {result.returncode}")

        output = result.stdout or ""
        if echo:
            print(output, end="")
        summary.write(output)
    return output


def merge_coverage_profiles(
    groups: Sequence[CoverageGroup], coverage_dir: str = COVERAGE_DIR, mode: str = "atomic"
) -> dict[str, str]:
    """Concatenate the groups' profiles into one under a single mode header.

    Returns the profiles that could not be read, mapped to the reason.
    """
    unreadable: dict[str, str] = {}
    with open(_join(coverage_dir, COMBINED_PROFILE), "wb") as merged:
        merged.write(f"mode: {mode}\n".encode())
        for group in groups:
            try:
                data = Path(_join(coverage_dir, group.output_file)).read_bytes()
            except OSError as exc:
                unreadable[group.output_file] = str(exc)
                continue
            for line in data.split(b"\n")[1:]:
                if line:
                    merged.write(line + b"\n")
    return unreadable


def total_line(summary_text: str) -> str | None:
    """Return the first three fields of the report's total line, space separated."""
    for line in summary_text.split("\n"):
        if "total:" in line:
            parts = line.split()
            if len(parts) >= 3:
                return " ".join(parts[:3])
    return None


def print_coverage_summary(
    groups: Sequence[CoverageGroup], coverage_dir: str = COVERAGE_DIR
) -> None:
    """Print the total coverage of every group and of the merged profile."""
    entries = [(g.name, g.emoji, summary_log_name(g.output_file)) for g in groups]
    entries.append((COMBINED_NAME, COMBINED_EMOJI, summary_log_name(COMBINED_PROFILE)))

    for name, emoji, log in entries:
        print(f"{emoji} {name}:")
        try:
            text = Path(_join(coverage_dir, log)).read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            print(f"  Warning: Could not read {log}: {exc}")
            continue
        line = total_line(text)
        if line is not None:
            print(f"  {line}")
        print()


def main(argv: Sequence[str] | None = None) -> int:
    """Command entry point; returns the process exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("Error: JSON file path must be provided")
        print("Usage: test-coverage path/to/coverage-groups.json")
        return 1

    try:
        groups = load_groups(args[0])
    except ToolError as exc:
        print(exc)
        return 1

    try:
        os.makedirs(COVERAGE_DIR, exist_ok=True)
    except OSError as exc:
        print(f"Error creating coverage directory: {exc}")
        return 1

    print("🔍 Running tests with coverage...")
    for group in groups:
        print(f"\n{group.emoji} {group.name}:")
        run_test_with_coverage(group, COVERAGE_DIR, quiet=False)
        try:
            write_coverage_summary(group.output_file, COVERAGE_DIR, echo=True)
        except OSError as exc:
            print(f"Error creating summary file: {exc}")
        except ToolError as exc:
            print(f"Warning: Error getting coverage details: {exc}")

    print("\n🔗 Merging coverage profiles...")
    try:
        unreadable = merge_coverage_profiles(groups, COVERAGE_DIR, "atomic")
    except OSError as exc:
        print(f"Error creating merged coverage file: {exc}")
    else:
        for name, error in unreadable.items():
            print(f"Warning: Could not read {name}: {error}")
        try:
            write_coverage_summary(COMBINED_PROFILE, COVERAGE_DIR, echo=False)
        except OSError as exc:
            print(f"Error creating summary file: {exc}")
        except ToolError as exc:
            print(f"Warning: Error generating coverage summary: {exc}")

    print("\n📊 Test Coverage Summary:")
    print_coverage_summary(groups, COVERAGE_DIR)
    return 0


__all__ = [
    "COVERAGE_DIR",
    "CoverageGroup",
    "load_groups",
    "summary_log_name",
    "run_test_with_coverage",
    "write_coverage_summary",
    "merge_coverage_profiles",
    "total_line",
    "print_coverage_summary",
    "main",
]

_ = fields  # dataclass introspection helper kept available for callers