"""Install or update the asdf version manager and the tools in ``.tool-versions``."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path

from tfdevtools.shell import ToolError

MAX_ASDF_VERSION = "v0.15.0"
ASDF_REPOSITORY = "https://github.com/asdf-vm/asdf.git"
TOOL_VERSIONS = ".tool-versions"


def compare_versions(v1: str, v2: str) -> int:
    """Compare dotted versions part by part as strings; return -1, 0 or 1.

    A leading ``v`` is ignored. When one version is a prefix of the other,
    the one with fewer parts is the smaller.
    """
    parts1 = v1.removeprefix("v").split(".")
    parts2 = v2.removeprefix("v").split(".")
    for a, b in zip(parts1, parts2):
        if a < b:
            return -1
        if a > b:
            return 1
    if len(parts1) < len(parts2):
        return -1
    if len(parts1) > len(parts2):
        return 1
    return 0


def select_asdf_version(requested: str) -> str:
    """Return ``requested`` unless it exceeds the maximum allowed asdf version."""
    if compare_versions(requested, MAX_ASDF_VERSION) <= 0:
        return requested
    print(
        f"Warning: Requested asdf version {requested} is higher than maximum allowed "
        f"{MAX_ASDF_VERSION}. Using {MAX_ASDF_VERSION} instead."
    )
    return MAX_ASDF_VERSION


def read_tool_plugins(path: str | os.PathLike[str] = TOOL_VERSIONS) -> list[str]:
    """Return the plugin name from every non-empty line of a ``.tool-versions`` file."""
    try:
        content = Path(path).read_text()
    except OSError as exc:
        raise ToolError(f"Error reading .tool-versions file: {exc}") from exc
    plugins = []
    for line in content.split("\n"):
        fields = line.split()
        if fields:
            plugins.append(fields[0])
    return plugins


def _run_checked(cmd: Sequence[str], message: str) -> None:
    try:
        subprocess.run(list(cmd), check=True)
    except (OSError, subprocess.CalledProcessError) as exc:
        raise ToolError(f"{message} {exc}") from exc


def install_asdf(version: str) -> Path:
    """Clone asdf at ``version`` into ``~/.asdf`` and put it on ``PATH``."""
    try:
        home = Path.home()
    except (RuntimeError, KeyError) as exc:
        raise ToolError(f"Error getting home directory: {exc}") from exc

    asdf_dir = home / ".asdf"
    _run_checked(
        ["git", "clone", ASDF_REPOSITORY, str(asdf_dir), "--branch", version],
        "Error cloning asdf repository:",
    )
    path = os.environ.get("PATH", "")
    os.environ["PATH"] = f"{asdf_dir / 'bin'}:{asdf_dir / 'shims'}:{path}"
    return asdf_dir


def _install_and_reshim() -> None:
    _run_checked(["asdf", "install"], "Error installing tools:")
    _run_checked(["asdf", "reshim"], "Error reshimming:")


def _add_plugin(plugin: str, quiet: bool) -> None:
    output = subprocess.DEVNULL if quiet else None
    try:
        subprocess.run(["asdf", "plugin", "add", plugin], stdout=output, stderr=output)
    except OSError:
        pass


def install_plugins(path: str | os.PathLike[str] = TOOL_VERSIONS) -> None:
    """Add every listed asdf plugin, then install and reshim the tools."""
    for plugin in read_tool_plugins(path):
        print(f"Adding plugin: {plugin}")
        _add_plugin(plugin, quiet=False)

    print("Installing tools from .tool-versions...")
    _install_and_reshim()


def update_tools(path: str | os.PathLike[str] = TOOL_VERSIONS) -> None:
    """Ensure every listed plugin is present, then install and reshim the tools."""
    if shutil.which("asdf") is None:
        raise ToolError("asdf not found. Please run 'make install-tools' first.")

    print("Checking and updating asdf tools...")
    for plugin in read_tool_plugins(path):
        print(f"Ensuring plugin {plugin} is installed...")
        _add_plugin(plugin, quiet=True)

    print("Installing/updating tools from .tool-versions...")
    _install_and_reshim()
    print("All tools are up to date.")


def main(argv: Sequence[str] | None = None) -> int:
    """Command entry point; returns the process exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    update_only = False
    asdf_version = MAX_ASDF_VERSION
    for arg in args:
        if arg == "--update":
            update_only = True
        elif arg.startswith("--asdf-version="):
            asdf_version = select_asdf_version(arg.removeprefix("--asdf-version="))

    try:
        if update_only:
            update_tools()
            return 0

        if os.environ.get("DEVCONTAINER") == "true":
            print("Devcontainer detected. Tools already installed.")
            print("Running update-tools to ensure everything is up to date...")
            update_tools()
            return 0

        if shutil.which("asdf") is None:
            print(f"Installing asdf version {asdf_version}...")
            install_asdf(asdf_version)
        else:
            print("asdf already installed.")

        install_plugins()
    except ToolError as exc:
        print(exc)
        return 1
    return 0