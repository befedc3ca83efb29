"""Tests for run options, environment defaults and threshold overrides."""

import pytest

from household_seed.config import (
    DEFAULTS,
    SeedOptions,
    Thresholds,
    get_defaults,
    get_thresholds,
)
from household_seed.errors import ConfigurationError


class TestSeedOptions:
    def test_attachments_default_beside_db(self, tmp_path):
        options = SeedOptions(db_path=tmp_path / "data" / "store.sqlite3")
        assert options.attachments_dir == (tmp_path / "data" / "attachments").resolve()
        assert options.app_data_dir == (tmp_path / "data").resolve()

    def test_explicit_attachments_dir(self, tmp_path):
        options = SeedOptions(db_path=tmp_path / "s.sqlite3", attachments_dir=tmp_path / "elsewhere")
        assert options.attachments_dir == (tmp_path / "elsewhere").resolve()

    def test_defaults(self, tmp_path):
        options = SeedOptions(db_path=tmp_path / "s.sqlite3")
        assert options.seed == 42
        assert (options.households, options.events, options.notes, options.attachments) == (
            3, 10_000, 5_000, 300,
        )
        assert options.reset is False

    @pytest.mark.parametrize("field, value", [
        ("households", 1),
        ("events", 0),
        ("notes", 0),
        ("attachments", -5),
        ("seed", "42"),
        ("seed", True),
    ])
    def test_rejects_bad_values(self, tmp_path, field, value):
        with pytest.raises(ConfigurationError):
            SeedOptions(db_path=tmp_path / "s.sqlite3", **{field: value})


class TestEnvironment:
    def test_defaults_without_env(self, monkeypatch):
        for name in ("FIXTURE_SEED", "FIXTURE_EVENTS", "FIXTURE_DB_PATH"):
            monkeypatch.delenv(name, raising=False)
        defaults = get_defaults()
        assert defaults["seed"] == DEFAULTS["seed"]
        assert defaults["events"] == DEFAULTS["events"]
        assert defaults["db_path"].name == "arklowdun.sqlite3"

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FIXTURE_SEED", "7")
        monkeypatch.setenv("FIXTURE_DB_PATH", str(tmp_path / "env.sqlite3"))
        defaults = get_defaults()
        assert defaults["seed"] == 7
        assert defaults["db_path"] == (tmp_path / "env.sqlite3").resolve()

    def test_env_not_an_integer(self, monkeypatch):
        monkeypatch.setenv("FIXTURE_EVENTS", "ten")
        with pytest.raises(ConfigurationError, match="FIXTURE_EVENTS"):
            get_defaults()


class TestThresholds:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("FIXTURE_MIN_ALL_DAY", raising=False)
        assert get_thresholds().min_all_day == Thresholds().min_all_day == 0.20

    def test_override(self, monkeypatch):
        monkeypatch.setenv("FIXTURE_MIN_ALL_DAY", "0.3")
        monkeypatch.setenv("FIXTURE_MIN_NOTE_DEADLINE", "0.1")
        thresholds = get_thresholds()
        assert thresholds.min_all_day == 0.3
        assert thresholds.min_note_deadline == 0.1
        assert thresholds.min_recurring == 0.10

    @pytest.mark.parametrize("raw", ["abc", "1.5", "-0.1"])
    def test_invalid_override(self, monkeypatch, raw):
        monkeypatch.setenv("FIXTURE_MIN_RECURRING", raw)
        with pytest.raises(ConfigurationError, match="FIXTURE_MIN_RECURRING"):
            get_thresholds()
