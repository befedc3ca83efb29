"""Seeder configuration. Reads .env and exposes defaults, paths and thresholds."""

import os
from dataclasses import dataclass, fields
from pathlib import Path

from dotenv import load_dotenv

from household_seed.errors import ConfigurationError

PROJECT_ROOT = Path(__file__).resolve().parent.parent
MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"
CORPUS_DIR = PROJECT_ROOT / "fixtures" / "large" / "attachments"
SNAPSHOT_DIR = PROJECT_ROOT / "fixtures" / "large"

DEFAULT_DB_NAME = "arklowdun.sqlite3"

DEFAULTS: dict[str, int] = {
    "seed": 42,
    "households": 3,
    "events": 10_000,
    "notes": 5_000,
    "attachments": 300,
}


def _load_env() -> None:
    """Load environment variables from .env file in project root."""
    load_dotenv(PROJECT_ROOT / ".env")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _env_path(name: str) -> Path | None:
    raw = os.getenv(name)
    if not raw:
        return None
    return Path(raw).expanduser().resolve()


def get_defaults() -> dict[str, int | Path | None]:
    """Return seeder defaults, with FIXTURE_* environment overrides applied."""
    _load_env()
    db_path = _env_path("FIXTURE_DB_PATH") or Path(DEFAULT_DB_NAME).resolve()
    return {
        "db_path": db_path,
        "attachments_dir": _env_path("FIXTURE_ATTACHMENTS_DIR"),
        "corpus_dir": _env_path("FIXTURE_CORPUS_DIR") or CORPUS_DIR,
        "seed": _env_int("FIXTURE_SEED", DEFAULTS["seed"]),
        "households": _env_int("FIXTURE_HOUSEHOLDS", DEFAULTS["households"]),
        "events": _env_int("FIXTURE_EVENTS", DEFAULTS["events"]),
        "notes": _env_int("FIXTURE_NOTES", DEFAULTS["notes"]),
        "attachments": _env_int("FIXTURE_ATTACHMENTS", DEFAULTS["attachments"]),
    }


# ============================================================
# Run options
# ============================================================


@dataclass
class SeedOptions:
    """Everything one seeding run needs; validated on construction."""

    db_path: Path
    attachments_dir: Path | None = None
    corpus_dir: Path = CORPUS_DIR
    migrations_dir: Path = MIGRATIONS_DIR
    seed: int = DEFAULTS["seed"]
    households: int = DEFAULTS["households"]
    events: int = DEFAULTS["events"]
    notes: int = DEFAULTS["notes"]
    attachments: int = DEFAULTS["attachments"]
    reset: bool = False
    summary_path: Path | None = None

    def __post_init__(self) -> None:
        self.db_path = Path(self.db_path).resolve()
        if self.attachments_dir is None:
            self.attachments_dir = self.db_path.parent / "attachments"
        self.attachments_dir = Path(self.attachments_dir).resolve()
        self.corpus_dir = Path(self.corpus_dir)
        self.migrations_dir = Path(self.migrations_dir)
        if self.summary_path is not None:
            self.summary_path = Path(self.summary_path).resolve()

        if isinstance(self.seed, bool) or not isinstance(self.seed, int):
            raise ConfigurationError("seed must be an integer")
        if self.households < 2:
            raise ConfigurationError("households must be an integer >= 2")
        for name in ("events", "notes", "attachments"):
            if getattr(self, name) < 1:
                raise ConfigurationError(f"{name} must be positive")

    @property
    def app_data_dir(self) -> Path:
        """The appData storage root is the directory holding the database."""
        return self.db_path.parent


# ============================================================
# Corpus-quality thresholds
# ============================================================


@dataclass(frozen=True)
class Thresholds:
    """Minimum ratios a generated corpus must reach to be accepted."""

    min_all_day: float = 0.20
    min_recurring: float = 0.10
    min_event_soft_deleted: float = 0.05
    min_event_restored: float = 0.02
    min_recurring_with_exdates: float = 0.05
    min_note_soft_deleted: float = 0.05
    min_note_restored: float = 0.02
    min_note_deadline: float = 0.25


def get_thresholds() -> Thresholds:
    """Return thresholds, honouring FIXTURE_MIN_<NAME> overrides from the environment."""
    _load_env()
    overrides: dict[str, float] = {}
    for field in fields(Thresholds):
        env_name = "FIXTURE_" + field.name.upper()
        raw = os.getenv(env_name)
        if raw is None or raw.strip() == "":
            continue
        try:
            value = float(raw)
        except ValueError:
            raise ConfigurationError(f"{env_name} must be a number, got {raw!r}") from None
        if not 0.0 <= value <= 1.0:
            raise ConfigurationError(f"{env_name} must be between 0 and 1, got {value}")
        overrides[field.name] = value
    return Thresholds(**overrides)


if __name__ == "__main__":
    print("Seeder defaults:")
    for key, value in get_defaults().items():
        print(f"  {key}: {value}")
    print("\nQuality thresholds:")
    for key, value in vars(get_thresholds()).items():
        print(f"  {key}: {value:.0%}")
