"""Tests for the household-seed command line."""

import json
from dataclasses import fields

import pytest

from household_seed.cli import main
from household_seed.config import Thresholds


@pytest.fixture
def lenient_env(monkeypatch):
    for f in fields(Thresholds):
        monkeypatch.setenv("FIXTURE_" + f.name.upper(), "0")


def _args(tmp_path, *extra):
    return [
        "--db", str(tmp_path / "cli.sqlite3"),
        "--seed", "42",
        "--households", "2",
        "--events", "200",
        "--notes", "100",
        "--attachments-count", "60",
        "--quiet",
        *extra,
    ]


class TestMain:
    def test_prints_json_summary(self, tmp_path, capsys, lenient_env):
        main(_args(tmp_path, "--summary", str(tmp_path / "summary.json")))
        out, err = capsys.readouterr()

        summary = json.loads(out)
        assert summary["households"] == 2
        assert summary["events"]["total"] == 200
        assert summary["notes"]["total"] == 100
        assert summary["attachments"]["bySourceKind"] == {"small": 44, "medium": 16}
        assert err == ""
        assert json.loads((tmp_path / "summary.json").read_text(encoding="utf-8")) == summary

    def test_progress_goes_to_stderr(self, tmp_path, capsys, lenient_env):
        args = [a for a in _args(tmp_path) if a != "--quiet"]
        main(args)
        out, err = capsys.readouterr()
        json.loads(out)
        assert "[1/7]" in err

    def test_households_below_minimum(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["--db", str(tmp_path / "x.sqlite3"), "--households", "1"])
        assert excinfo.value.code == 2
        assert "households" in capsys.readouterr().err

    def test_missing_corpus_exits_nonzero(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(_args(tmp_path, "--corpus", str(tmp_path / "absent")))
        assert excinfo.value.code == 1
        out, err = capsys.readouterr()
        assert out == ""
        assert err.startswith("household-seed: Attachment corpus directory missing")

    def test_quality_failure_exits_nonzero(self, tmp_path, capsys, monkeypatch):
        monkeypatch.setenv("FIXTURE_MIN_ALL_DAY", "1.0")
        with pytest.raises(SystemExit) as excinfo:
            main(_args(tmp_path))
        assert excinfo.value.code == 1
        assert "All-day event ratio" in capsys.readouterr().err
