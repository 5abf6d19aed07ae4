"""Run gofmt and go vet checks and print a summary."""

from __future__ import annotations

import argparse
import os
import subprocess
from collections.abc import Iterator, Sequence

from tfdevtools.shell import load_asdf, parse_ignore_list, print_lines, should_ignore_file

_SCRIPTS_DIR = "scripts"


def format_status(success: bool, fail_message: str) -> str:
    """Render a PASS/FAIL status line."""
    if success:
        return "PASS ✅"
    return f"FAIL ❌ ({fail_message})"


def run_gofmt_checks(ignored_dirs: Sequence[str]) -> bool:
    """Return True when gofmt reports no files outside the ignored directories."""
    try:
        result = subprocess.run(
            ["gofmt", "-l", "."], capture_output=True, text=True, check=True
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        print(f"Error running gofmt: {exc}")
        return False

    files = result.stdout.strip()
    if files:
        print("Files needing formatting (violates gofmt policy):")
        failing = [f for f in files.split("\n") if not should_ignore_file(f, ignored_dirs)]
        for name in failing:
            print(f"❌ {name}")
        if failing:
            return False

    print("✅ All files properly formatted")
    return True


def _vet(target: str) -> bool:
    try:
        result = subprocess.run(
            ["go", "vet", target], stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True
        )
        ok, output = result.returncode == 0, result.stdout or ""
    except OSError as exc:
        ok, output = False, str(exc)

    if ok:
        print(f"✅ {target}")
    else:
        print(f"❌ {target} (violates go vet policy)")
        print_lines(output)
    return ok


def _go_files(directory: str) -> Iterator[str]:
    try:
        entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
    except OSError:
        return
    for entry in entries:
        path = f"{directory}/{entry.name}"
        if entry.is_dir(follow_symlinks=False):
            yield from _go_files(path)
        elif entry.name.endswith(".go"):
            yield path


def run_go_vet_checks(ignored_dirs: Sequence[str], skip_prefix: str) -> bool:
    """Vet every package and every Go file under ``scripts``; True when all pass."""
    try:
        listed = subprocess.run(
            ["go", "list", "./..."], capture_output=True, text=True, check=True
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        print("Failed to list Go packages:", exc)
        return False

    ok = True
    for package in listed.stdout.strip().split("\n"):
        if not package:
            continue
        if skip_prefix and package.startswith(skip_prefix):
            continue
        if should_ignore_file(package, ignored_dirs):
            continue
        ok = _vet(package) and ok

    for path in _go_files(_SCRIPTS_DIR):
        if should_ignore_file(path, ignored_dirs):
            continue
        ok = _vet(path) and ok

    return ok


def main(argv: Sequence[str] | None = None) -> int:
    """Command entry point; returns the process exit status."""
    parser = argparse.ArgumentParser(prog="lint", description="Run gofmt and go vet checks.")
    parser.add_argument(
        "--ignore", default="", help="Comma-separated list of directories to ignore during linting"
    )
    parser.add_argument(
        "--skip-prefix", default="", help="Package prefix to skip during linting"
    )
    args = parser.parse_args(argv)

    ignored = parse_ignore_list(args.ignore)
    if len(ignored) == 1:
        print(f"⚠️  Ignoring directory during linting: {ignored[0]}")
    elif len(ignored) > 1:
        print(f"⚠️  Ignoring directories during linting: {', '.join(ignored)}")

    load_asdf()
    os.environ["GOGC"] = "off"

    print("Step 1: Running gofmt checks...")
    gofmt_ok = run_gofmt_checks(ignored)

    print("Step 2: Running go vet checks...")
    vet_ok = run_go_vet_checks(ignored, args.skip_prefix)

    print("\n=== Lint Summary ===")
    print(f"gofmt checks: {format_status(gofmt_ok, 'violates code formatting policy')}")
    print(f"go vet checks: {format_status(vet_ok, 'violates code correctness policy')}")

    return 0 if gofmt_ok and vet_ok else 1