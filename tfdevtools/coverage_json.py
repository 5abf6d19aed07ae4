"""Run the coverage groups quietly and print the results as JSON."""

from __future__ import annotations

import json
import os
import re
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from tfdevtools.coverage import (
    COVERAGE_DIR,
    CoverageGroup,
    load_groups,
    merge_coverage_profiles,
    run_test_with_coverage,
    summary_log_name,
    write_coverage_summary,
)
from tfdevtools.shell import ToolError

_COMBINED_SUMMARY = "coverage-summary.log"
_LEADING_FLOAT = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_TOTAL_PERCENT = re.compile(r"(\d+\.\d+%)")
_JSON_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _join(directory: str, name: str) -> str:
    return os.path.normpath(f"{directory}/{name}")


@dataclass(frozen=True)
class FileCoverage:
    """Coverage percentage reported for one function or file entry."""

    file: str
    coverage: float

    def to_dict(self) -> dict[str, Any]:
        return {"file": self.file, "coverage": self.coverage}


def parse_percentage(text: str) -> float:
    """Convert text such as ``75.0%`` to a number; unparsable text gives 0.0."""
    match = _LEADING_FLOAT.match(text.removesuffix("%").lstrip())
    return float(match.group()) if match else 0.0


def parse_coverage_output(path: str | os.PathLike[str]) -> tuple[list[FileCoverage], str]:
    """Parse a ``go tool cover -func`` report into its entries and total percentage."""
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        print(f"Error reading coverage file {os.fspath(path)}: {exc}", file=sys.stderr)
        return [], "0.0%"

    entries: list[FileCoverage] = []
    total = ""
    for line in text.split("\n"):
        if not line.strip():
            continue
        if "total:" in line:
            total = line
            continue
        parts = line.split()
        if len(parts) < 3:
            continue
        name, percent = parts[0], parts[-1]
        if name == "mode:" or not percent.endswith("%"):
            continue
        entries.append(FileCoverage(name, parse_percentage(percent)))

    match = _TOTAL_PERCENT.search(total) if total else None
    return entries, match.group(1) if match else "0.0%"


def build_report(
    groups: Sequence[CoverageGroup], coverage_dir: str = COVERAGE_DIR
) -> dict[str, Any]:
    """Collect each group's coverage and the combined total, keyed in sorted order.

    A group is keyed by the lower-cased first word of its name; ``files`` is
    None when the report held no entries.
    """
    report: dict[str, Any] = {}
    for group in groups:
        entries, total = parse_coverage_output(
            _join(coverage_dir, summary_log_name(group.output_file))
        )
        key = group.name.split(" ")[0].lower()
        report[key] = {
            "name": group.name,
            "total": total,
            "files": [entry.to_dict() for entry in entries] or None,
        }

    _, combined = parse_coverage_output(_join(coverage_dir, _COMBINED_SUMMARY))
    report["combined_total"] = combined
    return {key: report[key] for key in sorted(report)}


def _plain_numbers(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return int(value)
    if isinstance(value, dict):
        return {k: _plain_numbers(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain_numbers(v) for v in value]
    return value


def _render(report: dict[str, Any]) -> str:
    text = json.dumps(_plain_numbers(report), indent=2, ensure_ascii=False)
    for char, escape in _JSON_ESCAPES.items():
        text = text.replace(char, escape)
    return text


def main(argv: Sequence[str] | None = None) -> int:
    """Command entry point; returns the process exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("Error: JSON file path must be provided")
        print("Usage: test-coverage-json path/to/coverage-groups.json")
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

    for group in groups:
        run_test_with_coverage(group, COVERAGE_DIR, quiet=True)
        try:
            write_coverage_summary(group.output_file, COVERAGE_DIR, echo=False)
        except (OSError, ToolError):
            pass

    try:
        merge_coverage_profiles(groups, COVERAGE_DIR, "set")
    except OSError as exc:
        print(f"Error creating merged coverage file: {exc}")
    else:
        try:
            write_coverage_summary("coverage.out", COVERAGE_DIR, echo=False)
        except (OSError, ToolError):
            pass

    print(_render(build_report(groups, COVERAGE_DIR)))
    return 0