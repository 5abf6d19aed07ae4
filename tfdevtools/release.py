"""Bump the project version, tag it in git and push the release."""

from __future__ import annotations

import os
import re
import shutil
import subprocess
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from tfdevtools.shell import ToolError

VERSION_FILE = "VERSION"
BUMP_TYPES = ("major", "minor", "patch")

_BREAKING_PATTERNS = (
    "^BREAKING CHANGE:", "^breaking!:", "!:", "feat!:", "fix!:",
    "refactor!:", "docs!:", "style!:", "test!:", "chore!:",
    "ci!:", "build!:", "perf!:",
)
_FEATURE_PATTERNS = ("^feat:", "^feature:")


def _atoi(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        return 0


@dataclass(frozen=True)
class Version:
    """A semantic version made of major, minor and patch numbers."""

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse ``vX.Y.Z`` or ``X.Y.Z``; a non-numeric part counts as zero."""
        parts = text.strip().removeprefix("v").split(".")
        if len(parts) != 3:
            raise ValueError("Invalid version format in VERSION file. Expected format: vX.Y.Z")
        major, minor, patch = (_atoi(p) for p in parts)
        return cls(major, minor, patch)

    def bump(self, bump_type: str) -> Version:
        """Return the version raised by a ``major``, ``minor`` or ``patch`` step."""
        if bump_type == "major":
            return Version(self.major + 1, 0, 0)
        if bump_type == "minor":
            return Version(self.major, self.minor + 1, 0)
        if bump_type == "patch":
            return Version(self.major, self.minor, self.patch + 1)
        raise ValueError(f"Invalid bump type: {bump_type}")

    def tag(self) -> str:
        """Return the git tag name for this version."""
        return f"v{self}"

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def determine_from_commits(commits: Sequence[str]) -> str:
    """Pick a bump type from conventional commit subjects."""
    for commit in commits:
        if any(re.search(p, commit) for p in _BREAKING_PATTERNS):
            return "major"
    for commit in commits:
        if any(re.search(p, commit) for p in _FEATURE_PATTERNS):
            return "minor"
    return "patch"


def _git_output(args: Sequence[str]) -> str | None:
    try:
        result = subprocess.run(
            ["git", *args], capture_output=True, text=True, check=True
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    return result.stdout


def _commit_subjects(args: Sequence[str]) -> list[str]:
    output = _git_output(["log", *args, "--pretty=format:%s"])
    if output is None:
        return []
    return output.strip().split("\n")


def determine_bump_type() -> str:
    """Pick a bump type from the commits since the last tag, or from all commits."""
    last_tag = _git_output(["describe", "--tags", "--abbrev=0"])
    if last_tag is None:
        return determine_from_commits(_commit_subjects([]))
    return determine_from_commits(_commit_subjects([f"{last_tag.strip()}..HEAD"]))


def check_tag_exists(tag: str) -> bool:
    """Return True when git already knows a tag named ``tag``."""
    output = _git_output(["tag", "-l", tag])
    return output is not None and output.strip() != ""


def _put_asdf_on_path() -> None:
    if shutil.which("asdf") is not None:
        return
    try:
        home = Path.home()
    except (RuntimeError, KeyError):
        print("Warning: Could not determine home directory")
        return
    asdf_dir = home / ".asdf"
    if (asdf_dir / "asdf.sh").exists():
        path = os.environ.get("PATH", "")
        os.environ["PATH"] = f"{asdf_dir / 'bin'}:{asdf_dir / 'shims'}:{path}"


def _run_command(*cmd: str) -> None:
    try:
        subprocess.run(list(cmd), check=True)
    except (OSError, subprocess.CalledProcessError) as exc:
        raise ToolError(f"Error running command: {cmd[0]} {list(cmd[1:])}") from exc


def main(argv: Sequence[str] | None = None) -> int:
    """Command entry point; returns the process exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    _put_asdf_on_path()

    try:
        text = Path(VERSION_FILE).read_text()
    except OSError as exc:
        print("Error reading VERSION file:", exc)
        return 1
    print("Current version:", text.strip().removeprefix("v"))

    try:
        current = Version.parse(text)
    except ValueError as exc:
        print(exc)
        return 1

    bump_type = args[0] if args else determine_bump_type()
    print("Bump type:", bump_type)
    try:
        new = current.bump(bump_type)
    except ValueError as exc:
        print(exc)
        print("Usage: release [major|minor|patch]")
        return 1

    tag = new.tag()
    print("Version bumped to", tag)
    if check_tag_exists(tag):
        print(f"Tag {tag} already exists. Please use a different version.")
        return 1

    try:
        Path(VERSION_FILE).write_text(f"{tag}\n")
    except OSError as exc:
        print("Error writing VERSION file:", exc)
        return 1

    try:
        _run_command("git", "add", VERSION_FILE)
        _run_command("git", "commit", "-m", f"release: cut {tag} [skip ci]")
        _run_command("git", "tag", "-a", tag, "-m", f"release: {tag}")
        print("Pushing changes and tags to remote...")
        _run_command("git", "push")
        _run_command("git", "push", "--tags")
    except ToolError as exc:
        print(exc)
        return 1

    print("Release", tag, "created and pushed successfully! 🚀")
    return 0