"""Shared fixtures: sample corpus, migrated store, seeded Faker."""

from pathlib import Path

import pytest
from faker import Faker

from household_seed.config import CORPUS_DIR, MIGRATIONS_DIR, SeedOptions
from household_seed.households import generate_households
from household_seed.prng import Mulberry32
from household_seed.seed import generate_corpus
from household_seed.store import apply_migrations, connect, foreign_keys_suspended, ensure_directories
from household_seed.attachments import load_attachment_corpus


@pytest.fixture
def fake() -> Faker:
    f = Faker()
    f.seed_instance(1234)
    return f


@pytest.fixture
def corpus_dir(tmp_path: Path) -> Path:
    """Four-file corpus: three small files and one just over the medium threshold."""
    root = tmp_path / "corpus"
    root.mkdir()
    (root / "b-notes.txt").write_text("beta\n", encoding="utf-8")
    (root / "A receipt.csv").write_text("a,b\n1,2\n", encoding="utf-8")
    (root / "Résumé.txt").write_text("cv\n", encoding="utf-8")
    (root / "manual.bin").write_bytes(b"x" * 100_001)
    return root


@pytest.fixture
def conn(tmp_path: Path):
    connection = connect(tmp_path / "store.sqlite3")
    apply_migrations(connection, MIGRATIONS_DIR)
    yield connection
    connection.close()


@pytest.fixture
def households(conn, fake):
    return generate_households(conn, Mulberry32(7), 2, fake)


def make_options(work_dir: Path, **overrides) -> SeedOptions:
    params = {
        "db_path": work_dir / "arklowdun.sqlite3",
        "attachments_dir": work_dir / "attachments",
        "corpus_dir": CORPUS_DIR,
        "seed": 42,
        "households": 2,
        "events": 5000,
        "notes": 3000,
        "attachments": 60,
    }
    params.update(overrides)
    return SeedOptions(**params)


@pytest.fixture(scope="module")
def seeded_store(tmp_path_factory):
    """A small store generated without the quality gate, shared per test module."""
    work_dir = tmp_path_factory.mktemp("seeded")
    options = make_options(work_dir, events=300, notes=150, attachments=24)
    ensure_directories(options)
    connection = connect(options.db_path)
    try:
        apply_migrations(connection, options.migrations_dir)
        with foreign_keys_suspended(connection):
            summary = generate_corpus(
                connection, options, load_attachment_corpus(options.corpus_dir)
            )
    finally:
        connection.close()
    return options, summary
