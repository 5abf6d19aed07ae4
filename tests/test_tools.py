import os
import subprocess

import pytest

from tfdevtools import tools
from tfdevtools.shell import ToolError


class FakeRun:
    def __init__(self, failing=()):
        self.calls = []
        self.failing = {tuple(cmd) for cmd in failing}

    def __call__(self, cmd, **kwargs):
        cmd = list(cmd)
        self.calls.append(cmd)
        code = 1 if tuple(cmd) in self.failing else 0
        if code and kwargs.get("check"):
            raise subprocess.CalledProcessError(code, cmd)
        return subprocess.CompletedProcess(cmd, code, stdout="", stderr="")


@pytest.fixture
def fake_run(monkeypatch):
    fake = FakeRun()
    monkeypatch.setattr(tools.subprocess, "run", fake)
    return fake


@pytest.fixture
def tool_versions(tmp_path):
    path = tmp_path / ".tool-versions"
    path.write_text("nodejs 20.0.0\n\n  terraform 1.12.0  \n")
    return path


@pytest.fixture
def asdf_on_path(tmp_path, monkeypatch):
    bindir = tmp_path / "bin"
    bindir.mkdir()
    exe = bindir / "asdf"
    exe.write_text("#!/bin/sh\n")
    exe.chmod(0o755)
    monkeypatch.setenv("PATH", str(bindir))
    return bindir


def test_compare_equal_versions():
    assert tools.compare_versions("v0.15.0", "0.15.0") == 0


@pytest.mark.parametrize(
    "low, high",
    [("v0.14.0", "v0.15.0"), ("v0.15", "v0.15.0"), ("v0.1.0", "v1.0.0")],
)
def test_compare_is_antisymmetric(low, high):
    assert tools.compare_versions(low, high) == -1
    assert tools.compare_versions(high, low) == 1


def test_compare_parts_as_strings():
    assert tools.compare_versions("v0.9.0", "v0.15.0") == 1


def test_select_allowed_version():
    assert tools.select_asdf_version("v0.14.0") == "v0.14.0"
    assert tools.select_asdf_version(tools.MAX_ASDF_VERSION) == tools.MAX_ASDF_VERSION


def test_select_too_new_version_falls_back(capsys):
    assert tools.select_asdf_version("v0.16.0") == tools.MAX_ASDF_VERSION
    assert "higher than maximum allowed" in capsys.readouterr().out


def test_read_tool_plugins(tool_versions):
    assert tools.read_tool_plugins(tool_versions) == ["nodejs", "terraform"]


def test_read_tool_plugins_missing_file(tmp_path):
    with pytest.raises(ToolError, match="Error reading .tool-versions file"):
        tools.read_tool_plugins(tmp_path / "missing")


def test_install_plugins_runs_commands_in_order(fake_run, tool_versions, capsys):
    tools.install_plugins(tool_versions)
    out = capsys.readouterr().out
    assert "Adding plugin: nodejs" in out
    assert "Adding plugin: terraform" in out
    assert "Installing tools from .tool-versions..." in out
    assert fake_run.calls == [
        ["asdf", "plugin", "add", "nodejs"],
        ["asdf", "plugin", "add", "terraform"],
        ["asdf", "install"],
        ["asdf", "reshim"],
    ]


def test_install_plugins_fails_when_install_fails(monkeypatch, tool_versions):
    fake = FakeRun(failing=[["asdf", "install"]])
    monkeypatch.setattr(tools.subprocess, "run", fake)
    with pytest.raises(ToolError, match="Error installing tools"):
        tools.install_plugins(tool_versions)
    assert ["asdf", "reshim"] not in fake.calls


def test_plugin_add_failure_is_ignored(monkeypatch, tool_versions):
    fake = FakeRun(failing=[["asdf", "plugin", "add", "nodejs"]])
    monkeypatch.setattr(tools.subprocess, "run", fake)
    tools.install_plugins(tool_versions)
    assert fake.calls[-1] == ["asdf", "reshim"]


def test_update_tools_without_asdf(tmp_path, monkeypatch, tool_versions):
    empty = tmp_path / "empty"
    empty.mkdir()
    monkeypatch.setenv("PATH", str(empty))
    with pytest.raises(ToolError, match="asdf not found"):
        tools.update_tools(tool_versions)


def test_update_tools_with_asdf(fake_run, asdf_on_path, tool_versions, capsys):
    tools.update_tools(tool_versions)
    assert fake_run.calls[-2:] == [["asdf", "install"], ["asdf", "reshim"]]
    assert ["asdf", "plugin", "add", "terraform"] in fake_run.calls
    assert "All tools are up to date." in capsys.readouterr().out


def test_install_asdf_clones_and_extends_path(fake_run, tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("PATH", "/usr/bin")
    asdf_dir = tools.install_asdf("v0.14.0")
    assert asdf_dir == tmp_path / ".asdf"
    clone = fake_run.calls[0]
    assert clone[:2] == ["git", "clone"]
    assert clone[-2:] == ["--branch", "v0.14.0"]
    assert os.environ["PATH"] == f"{asdf_dir / 'bin'}:{asdf_dir / 'shims'}:/usr/bin"


def test_main_update_without_asdf(tmp_path, monkeypatch):
    empty = tmp_path / "empty"
    empty.mkdir()
    monkeypatch.setenv("PATH", str(empty))
    assert tools.main(["--update"]) == 1


def test_main_devcontainer_runs_update(fake_run, asdf_on_path, tool_versions, monkeypatch):
    monkeypatch.chdir(tool_versions.parent)
    monkeypatch.setenv("DEVCONTAINER", "true")
    assert tools.main([]) == 0
    assert fake_run.calls[-1] == ["asdf", "reshim"]