"""SQLite store helpers: connection, migrations, schema-adaptive inserts.

Generators never write SQL column lists by hand. They describe the logical
columns they want and ``make_inserter`` projects them onto whatever the
migrated schema actually has, so additive migrations never break seeding.
"""

import math
import shutil
import sqlite3
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Mapping, Sequence

from household_seed.config import SeedOptions
from household_seed.errors import MissingInputError, SchemaMismatchError


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


# ============================================================
# Connection and targets
# ============================================================


def connect(db_path: str | Path) -> sqlite3.Connection:
    """Open the store in autocommit mode; transactions are explicit."""
    conn = sqlite3.connect(str(db_path), isolation_level=None)
    conn.execute("PRAGMA journal_mode = WAL")
    conn.execute("PRAGMA synchronous = NORMAL")
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def reset_targets(options: SeedOptions) -> None:
    """Remove the database (with WAL siblings) and the attachments root."""
    for suffix in ("", "-wal", "-shm"):
        Path(f"{options.db_path}{suffix}").unlink(missing_ok=True)
    shutil.rmtree(options.attachments_dir, ignore_errors=True)


def ensure_directories(options: SeedOptions) -> None:
    options.db_path.parent.mkdir(parents=True, exist_ok=True)
    options.attachments_dir.mkdir(parents=True, exist_ok=True)


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """All-or-nothing scope: commit on success, roll back on any exception."""
    conn.execute("BEGIN")
    try:
        yield conn
    except BaseException:
        conn.execute("ROLLBACK")
        raise
    conn.execute("COMMIT")


@contextmanager
def foreign_keys_suspended(conn: sqlite3.Connection) -> Iterator[None]:
    """Turn FK enforcement off for the block, then restore the previous setting."""
    previous = conn.execute("PRAGMA foreign_keys").fetchone()[0]
    conn.execute("PRAGMA foreign_keys = OFF")
    try:
        yield
    finally:
        conn.execute(f"PRAGMA foreign_keys = {'ON' if previous else 'OFF'}")


# ============================================================
# Migrations
# ============================================================


def list_migrations(migrations_dir: Path) -> list[Path]:
    """Return ``*.up.sql`` files in lexical order."""
    try:
        files = sorted(p for p in Path(migrations_dir).iterdir() if p.name.endswith(".up.sql"))
    except OSError as e:
        raise MissingInputError(f"Migrations directory unreadable at {migrations_dir}: {e}") from e
    if not files:
        raise MissingInputError(f"No *.up.sql migrations found in {migrations_dir}")
    return files


def _table_exists(conn: sqlite3.Connection, table: str) -> bool:
    row = conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?", (table,)
    ).fetchone()
    return row is not None


def applied_migrations(conn: sqlite3.Connection) -> set[str]:
    if not _table_exists(conn, "schema_migrations"):
        return set()
    return {row[0] for row in conn.execute("SELECT version FROM schema_migrations")}


def apply_migrations(conn: sqlite3.Connection, migrations_dir: Path) -> list[str]:
    """Apply pending migrations, each in its own transaction. Returns applied versions."""
    done = applied_migrations(conn)
    applied: list[str] = []

    for path in list_migrations(migrations_dir):
        version = path.name
        if version in done:
            continue
        sql = path.read_text(encoding="utf-8")
        try:
            conn.executescript("BEGIN;\n" + sql)
            if _table_exists(conn, "schema_migrations"):
                conn.execute(
                    "INSERT OR REPLACE INTO schema_migrations (version, applied_at) VALUES (?, ?)",
                    (version, int(time.time() * 1000)),
                )
            conn.execute("COMMIT")
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        applied.append(version)

    return applied


# ============================================================
# Schema-adaptive inserts
# ============================================================


@dataclass(frozen=True)
class Column:
    """A logical column and the physical names it may fall back to."""

    name: str
    fallbacks: tuple[str, ...] = ()


def table_columns(conn: sqlite3.Connection, table: str) -> list[str]:
    """Return physical column names of ``table``."""
    rows = conn.execute(f"PRAGMA table_info({_quote(table)})").fetchall()
    if not rows:
        raise SchemaMismatchError(f"Table {table} not found")
    return [row[1] for row in rows]


def resolve_columns(
    table: str, available: Sequence[str], requested: Sequence[str | Column]
) -> list[tuple[str, str]]:
    """Map requested logical columns to ``(physical, logical)`` pairs.

    The exact name wins; otherwise the first fallback present in the table
    is used. A physical column is never picked twice. Requests that match
    nothing are dropped.
    """
    present = set(available)
    taken: set[str] = set()
    projection: list[tuple[str, str]] = []

    for request in requested:
        column = request if isinstance(request, Column) else Column(request)
        if column.name in present and column.name not in taken:
            physical = column.name
        else:
            physical = next(
                (alt for alt in column.fallbacks if alt in present and alt not in taken),
                None,
            )
        if physical is None:
            continue
        taken.add(physical)
        projection.append((physical, column.name))

    if not projection:
        raise SchemaMismatchError(f"No usable columns for {table}")
    return projection


class Inserter:
    """Prepared INSERT bound to a fixed column projection."""

    def __init__(
        self, conn: sqlite3.Connection, table: str, projection: list[tuple[str, str]]
    ) -> None:
        self.conn = conn
        self.table = table
        self.projection = projection
        column_list = ", ".join(_quote(physical) for physical, _ in projection)
        placeholders = ", ".join("?" for _ in projection)
        self.sql = f"INSERT INTO {_quote(table)} ({column_list}) VALUES ({placeholders})"

    @property
    def columns(self) -> list[str]:
        return [physical for physical, _ in self.projection]

    def __call__(self, values: Mapping[str, object]) -> None:
        self.conn.execute(self.sql, [values.get(logical) for _, logical in self.projection])


def make_inserter(
    conn: sqlite3.Connection, table: str, columns: Sequence[str | Column]
) -> Inserter:
    """Introspect ``table`` once and return an inserter for the usable columns."""
    projection = resolve_columns(table, table_columns(conn, table), columns)
    return Inserter(conn, table, projection)


# ============================================================
# Soft-delete lifecycle
# ============================================================


@dataclass(frozen=True)
class PendingRestore:
    """A soft-deleted row and the timestamp it gets if restored."""

    id: str
    restore_at: int


def restore_soft_deleted(
    conn: sqlite3.Connection,
    table: str,
    pending: Sequence[PendingRestore],
    fraction: float,
    total: int,
) -> int:
    """Restore the first ``clamp(floor(total * fraction), 1, len(pending))`` rows.

    Restoring clears ``deleted_at`` and bumps ``updated_at``. Returns the
    number of rows restored.
    """
    target = min(max(1, math.floor(total * fraction)), len(pending))
    batch = pending[:target]
    if batch:
        with transaction(conn):
            conn.executemany(
                f"UPDATE {_quote(table)} SET deleted_at = NULL, updated_at = ? WHERE id = ?",
                [(item.restore_at, item.id) for item in batch],
            )
    return len(batch)


def count_rows(conn: sqlite3.Connection, table: str) -> int:
    return conn.execute(f"SELECT COUNT(*) FROM {_quote(table)}").fetchone()[0]
