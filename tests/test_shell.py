import os
import subprocess

import pytest

from tfdevtools.shell import (
    load_asdf,
    parse_env_output,
    parse_ignore_list,
    print_lines,
    should_ignore_file,
)


@pytest.mark.parametrize(
    ("path", "ignored", "expected"),
    [
        ("bin/tool.go", ["bin"], True),
        ("bin", ["bin"], True),
        ("binary/tool.go", ["bin"], False),
        ("bin/tool.go", [""], False),
        ("main.go", [], False),
        ("vendor/x/y.go", ["bin", "vendor"], True),
    ],
)
def test_should_ignore_file(path, ignored, expected):
    assert should_ignore_file(path, ignored) is expected


def test_parse_ignore_list_trims_entries():
    assert parse_ignore_list(" bin , vendor") == ["bin", "vendor"]


def test_parse_ignore_list_empty():
    assert parse_ignore_list("") == []
    assert parse_ignore_list(None) == []


def test_parse_env_output_splits_on_first_equals():
    output = "A=1\nB=x=y\nnoequals\n"
    assert parse_env_output(output) == {"A": "1", "B": "x=y"}


def test_load_asdf_applies_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    monkeypatch.setenv("TFDEVTOOLS_PROBE", "before")
    calls = []

    def fake_run(cmd, *args, **kwargs):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, stdout="TFDEVTOOLS_PROBE=loaded\n", stderr=None)

    monkeypatch.setattr(subprocess, "run", fake_run)
    applied = load_asdf()
    assert applied == {"TFDEVTOOLS_PROBE": "loaded"}
    assert os.environ["TFDEVTOOLS_PROBE"] == "loaded"
    assert calls[0][:2] == ["bash", "-c"]
    assert str(tmp_path / ".asdf" / "asdf.sh") in calls[0][2]


def test_load_asdf_failure_reports_and_returns_empty(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))

    def fake_run(cmd, *args, **kwargs):
        raise subprocess.CalledProcessError(1, cmd)

    monkeypatch.setattr(subprocess, "run", fake_run)
    assert load_asdf() == {}
    assert "Failed to load asdf" in capsys.readouterr().out


def test_print_lines_skips_blank_lines(capsys):
    print_lines(b"first\n\nsecond\n")
    assert capsys.readouterr().out == "   first\n   second\n"