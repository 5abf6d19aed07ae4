import json
import subprocess
from unittest.mock import patch

import pytest

from tfdevtools.coverage import CoverageGroup
from tfdevtools.coverage_json import (
    FileCoverage,
    build_report,
    main,
    parse_coverage_output,
    parse_percentage,
)

REPORT = (
    "pkg/a.go:10:\tFoo\t\t75.0%\n"
    "pkg/a.go:20:\tBar\t\t50.5%\n"
    "mode: set 1 2%\n"
    "short line\n"
    "pkg/b.go:5:\tBaz\t\tn/a\n"
    "total:\t\t\t(statements)\t62.5%\n"
)


@pytest.mark.parametrize(
    "text, expected",
    [("75.0%", 75.0), ("50.5%", 50.5), ("100%", 100.0), ("abc%", 0.0), ("", 0.0)],
)
def test_parse_percentage(text, expected):
    assert parse_percentage(text) == expected


def test_parse_coverage_output(tmp_path):
    path = tmp_path / "unit-summary.log"
    path.write_text(REPORT)
    entries, total = parse_coverage_output(path)
    assert entries == [FileCoverage("pkg/a.go:10:", 75.0), FileCoverage("pkg/a.go:20:", 50.5)]
    assert total == "62.5%"


def test_parse_coverage_output_without_total(tmp_path):
    path = tmp_path / "x.log"
    path.write_text("pkg/a.go:10:\tFoo\t\t75.0%\n")
    entries, total = parse_coverage_output(path)
    assert total == "0.0%"
    assert len(entries) == 1


def test_parse_coverage_output_missing_file(tmp_path, capsys):
    missing = tmp_path / "nope.log"
    assert parse_coverage_output(missing) == ([], "0.0%")
    assert str(missing) in capsys.readouterr().err


def test_build_report(tmp_path):
    (tmp_path / "unit-summary.log").write_text(REPORT)
    (tmp_path / "coverage-summary.log").write_text("total:\t(statements)\t40.0%\n")
    groups = [
        CoverageGroup(name="Unit Tests", output_file="unit.out"),
        CoverageGroup(name="Functional Tests", output_file="functional.out"),
    ]
    report = build_report(groups, str(tmp_path))
    assert list(report) == sorted(report)
    assert report["combined_total"] == "40.0%"
    assert report["unit"]["name"] == "Unit Tests"
    assert report["unit"]["total"] == "62.5%"
    assert report["unit"]["files"][0] == {"file": "pkg/a.go:10:", "coverage": 75.0}
    assert report["functional"]["files"] is None
    assert report["functional"]["total"] == "0.0%"


def test_main_requires_argument(capsys):
    assert main([]) == 1
    assert "JSON file path must be provided" in capsys.readouterr().out


def test_main_prints_json_report(tmp_path, monkeypatch, capsys):
    groups = tmp_path / "groups.json"
    groups.write_text(json.dumps([{"name": "Unit Tests", "outputFile": "unit.out"}]))
    monkeypatch.chdir(tmp_path)

    def fake_run(cmd, **kwargs):
        if cmd[:3] == ["go", "tool", "cover"]:
            return subprocess.CompletedProcess(cmd, 0, stdout=REPORT)
        return subprocess.CompletedProcess(cmd, 0)

    with patch("subprocess.run", side_effect=fake_run):
        assert main([str(groups)]) == 0

    out = capsys.readouterr().out
    data = json.loads(out)
    assert data["combined_total"] == "62.5%"
    assert data["unit"]["total"] == "62.5%"
    assert '"coverage": 75' in out
    assert (tmp_path / "tmp" / "coverage" / "coverage.out").read_text().startswith("mode: set\n")


def test_main_failed_tools_give_zero_totals(tmp_path, monkeypatch, capsys):
    groups = tmp_path / "groups.json"
    groups.write_text(json.dumps([{"name": "Unit", "outputFile": "unit.out"}]))
    monkeypatch.chdir(tmp_path)

    with patch("subprocess.run", return_value=subprocess.CompletedProcess([], 1, stdout="")):
        assert main([str(groups)]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["combined_total"] == "0.0%"
    assert data["unit"]["files"] is None