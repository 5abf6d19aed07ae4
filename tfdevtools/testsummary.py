"""Run Go unit and functional tests and summarise their JSON event stream."""

from __future__ import annotations

import json
import os
import subprocess
import sys
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from tfdevtools.shell import ToolError

COVERAGE_DIR = "tmp/coverage"
_EVENT_FIELDS = ("Action", "Package", "Test")


@dataclass
class TestSummary:
    """Counts of passed, failed and skipped tests."""

    __test__ = False

    passed: int = 0
    failed: int = 0
    skipped: int = 0

    def record(self, event: Mapping[str, Any]) -> None:
        """Count one ``go test -json`` event; package-level events are ignored."""
        if not event.get("Test"):
            return
        action = event.get("Action")
        if action == "pass":
            self.passed += 1
        elif action == "fail":
            self.failed += 1
        elif action == "skip":
            self.skipped += 1

    def render(self, label: str) -> str:
        """Return the printable summary block headed by ``label``."""
        return "\n".join(
            [
                f"📊 {label}:",
                f"✅ Passed: {self.passed}",
                f"❌ Failed: {self.failed}",
                f"⚠️ Skipped: {self.skipped}",
            ]
        )


def summarize_events(lines: Iterable[str | bytes]) -> TestSummary:
    """Build a summary from lines of ``go test -json`` output, skipping malformed ones."""
    summary = TestSummary()
    for line in lines:
        try:
            event = json.loads(line)
        except (json.JSONDecodeError, UnicodeDecodeError):
            continue
        if not isinstance(event, dict):
            continue
        if any(event.get(f) is not None and not isinstance(event[f], str) for f in _EVENT_FIELDS):
            continue
        summary.record(event)
    return summary


def _run_ignoring_errors(cmd: Sequence[str]) -> None:
    try:
        subprocess.run(list(cmd))
    except OSError:
        pass


def _collect_json_results(cmd: Sequence[str]) -> TestSummary:
    try:
        with subprocess.Popen(list(cmd), stdout=subprocess.PIPE, text=True) as proc:
            return summarize_events(proc.stdout)
    except OSError as exc:
        raise ToolError(f"Error starting test command: {exc}") from exc


def run_unit_tests(test_paths: Sequence[str]) -> TestSummary:
    """Clean the test cache, run the tests verbosely, then summarise a JSON run."""
    print("Cleaning Go test cache...")
    _run_ignoring_errors(["go", "clean", "-testcache"])

    print("Running unit tests (verbose output)...")
    _run_ignoring_errors(["go", "test", "-v", *test_paths])

    print("\nSummarizing unit test results...")
    return _collect_json_results(["go", "test", "-json", *test_paths])


def _module_path() -> str:
    try:
        result = subprocess.run(
            ["go", "list", "-m"], capture_output=True, text=True, check=True
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        raise ToolError(f"Error reading module path: {exc}") from exc
    return result.stdout.strip()


def run_functional_tests(test_path: str) -> TestSummary:
    """Build the CLI, run functional tests with coverage, then summarise a JSON run."""
    try:
        version = Path("VERSION").read_text().strip()
    except OSError as exc:
        raise ToolError(f"Error reading VERSION file: {exc}") from exc
    version_tag = f"v{version}"

    print("Running functional tests (verbose output)...")
    module = _module_path()
    build = [
        "go",
        "build",
        "-o",
        "bin/tftest",
        f"-ldflags=-X '{module}/cmd/tftest.Version={version_tag}'",
        "./cmd/tftest",
    ]
    try:
        subprocess.run(build, check=True)
    except (OSError, subprocess.CalledProcessError) as exc:
        raise ToolError(f"Error building CLI: {exc}") from exc
    print("🎉 TFTest CLI built at bin/tftest")

    try:
        os.makedirs(COVERAGE_DIR, exist_ok=True)
    except OSError as exc:
        raise ToolError(f"Error creating coverage directory: {exc}") from exc

    coverage_file = os.path.join(COVERAGE_DIR, "functional.out")
    # Failing tests must not stop the coverage report.
    _run_ignoring_errors(
        [
            "go",
            "test",
            "-v",
            "-covermode=atomic",
            f"-coverprofile={coverage_file}",
            "-coverpkg=./pkg/...",
            test_path,
        ]
    )

    print("\nFunctional Test Coverage of Packages:")
    try:
        cover = subprocess.run(
            ["go", "tool", "cover", "-func", coverage_file],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        pass
    else:
        print(cover.stdout)

    print("\nSummarizing functional test results...")
    return _collect_json_results(["go", "test", "-json", test_path])


def unit_main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the unit test runner; returns the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("Error: Test path argument is required")
        print('Usage: unit-test "./path/to/tests/..."')
        return 1
    try:
        summary = run_unit_tests(args[0].split(" "))
    except ToolError as exc:
        print(exc)
        return 1
    print(summary.render("Unit Test Summary"))
    return 0


def functional_main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the functional test runner; returns the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("Error: Test path argument is required")
        print("Usage: functional-test <test-path>")
        return 1
    try:
        summary = run_functional_tests(args[0])
    except ToolError as exc:
        print(exc)
        return 1
    print(summary.render("Functional Test Summary"))
    return 0