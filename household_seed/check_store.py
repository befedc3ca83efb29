"""Store checks: reads a seeded SQLite store and prints a PASS/FAIL summary.

Verifies row counts and the per-row invariants the generators promise:
event ordering, RRULE shape, note deadline timezones and attachment files
actually present on disk.
"""

import argparse
import sqlite3
import sys
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd

from household_seed.attachments import ENTITY_TABLES, ROOT_APP_DATA, ROOT_ATTACHMENTS
from household_seed.events import is_well_formed_rrule
from household_seed.store import count_rows


@dataclass(frozen=True)
class CheckResult:
    name: str
    passed: bool
    detail: str


# ── Helpers ──────────────────────────────────────────────────


def check_row_counts(
    conn: sqlite3.Connection, expected: dict[str, int]
) -> list[CheckResult]:
    """Compare ``COUNT(*)`` per table against expected totals."""
    results: list[CheckResult] = []
    for table, want in expected.items():
        actual = count_rows(conn, table)
        results.append(CheckResult(f"Row count ({table})", actual == want, f"{actual:,} / {want:,}"))
    return results


def check_events(conn: sqlite3.Connection) -> list[CheckResult]:
    events = pd.read_sql_query("SELECT id, start_at_utc, end_at_utc, rrule FROM events", conn)

    backwards = int(np.count_nonzero(events["end_at_utc"].to_numpy() < events["start_at_utc"].to_numpy()))
    rules = events["rrule"].dropna()
    well_formed = rules.map(is_well_formed_rrule).to_numpy(dtype=bool)
    malformed = int(np.count_nonzero(~well_formed))

    return [
        CheckResult("Event end >= start", backwards == 0, f"{backwards} reversed"),
        CheckResult("Well-formed RRULE", malformed == 0, f"{malformed} of {len(rules)} malformed"),
    ]


def check_notes(conn: sqlite3.Connection) -> list[CheckResult]:
    notes = pd.read_sql_query(
        """SELECT n.id, n.deadline, n.deadline_tz, h.tz AS household_tz
           FROM notes n
           JOIN household h ON h.id = n.household_id""",
        conn,
    )
    has_deadline = notes["deadline"].notna().to_numpy()
    has_tz = notes["deadline_tz"].notna().to_numpy()
    unpaired = int(np.count_nonzero(has_deadline ^ has_tz))
    wrong_tz = int((notes.loc[has_tz, "deadline_tz"] != notes.loc[has_tz, "household_tz"]).sum())

    return [
        CheckResult("Deadline paired with tz", unpaired == 0, f"{unpaired} unpaired"),
        CheckResult("Deadline tz = household tz", wrong_tz == 0, f"{wrong_tz} mismatched"),
    ]


def check_attachment_files(
    conn: sqlite3.Connection, roots: dict[str, Path]
) -> list[CheckResult]:
    """Every attachment row names a known root and a file that exists under it."""
    frames = [
        pd.read_sql_query(f"SELECT root_key, relative_path FROM {table}", conn)
        for table, _ in ENTITY_TABLES.values()
    ]
    rows = pd.concat(frames, ignore_index=True)

    unknown_root = int((~rows["root_key"].isin(list(roots))).sum())
    known = rows[rows["root_key"].isin(list(roots))]
    missing = int(
        sum(
            not (roots[root] / rel).is_file()
            for root, rel in zip(known["root_key"], known["relative_path"])
        )
    )

    return [
        CheckResult("Attachment root key", unknown_root == 0, f"{unknown_root} unknown"),
        CheckResult("Attachment file on disk", missing == 0, f"{missing} of {len(known)} missing"),
    ]


def run_checks(
    conn: sqlite3.Connection,
    roots: dict[str, Path],
    expected_rows: dict[str, int] | None = None,
) -> list[CheckResult]:
    results: list[CheckResult] = []
    if expected_rows:
        results.extend(check_row_counts(conn, expected_rows))
    results.extend(check_events(conn))
    results.extend(check_notes(conn))
    results.extend(check_attachment_files(conn, roots))
    return results


def print_report(results: list[CheckResult]) -> None:
    print("=" * 65)
    print("  STORE CHECKS")
    print("=" * 65)
    print(f"  {'Check':<32} {'Detail':<24} {'':>6}")
    print("-" * 65)
    for result in results:
        status = "PASS" if result.passed else "FAIL"
        print(f"  {result.name:<32} {result.detail:<24} {status:>6}")
    print("-" * 65)
    passed = sum(r.passed for r in results)
    print(f"  {passed}/{len(results)} checks passed")
    print("=" * 65)


# ── Main ─────────────────────────────────────────────────────


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="household-seed-check", description="Check a seeded store for fixture invariants."
    )
    parser.add_argument("--db", type=Path, required=True, help="seeded SQLite store")
    parser.add_argument("--attachments", type=Path, default=None,
                        help="attachments root (default <db dir>/attachments)")
    parser.add_argument("--events", type=int, default=None, help="expected event rows")
    parser.add_argument("--notes", type=int, default=None, help="expected note rows")
    args = parser.parse_args(argv)

    db_path = args.db.resolve()
    if not db_path.is_file():
        print(f"household-seed-check: no database at {db_path}", file=sys.stderr)
        sys.exit(1)

    roots = {
        ROOT_ATTACHMENTS: (args.attachments or db_path.parent / "attachments").resolve(),
        ROOT_APP_DATA: db_path.parent,
    }
    expected = {}
    if args.events is not None:
        expected["events"] = args.events
    if args.notes is not None:
        expected["notes"] = args.notes

    conn = sqlite3.connect(str(db_path))
    try:
        results = run_checks(conn, roots, expected)
    except (sqlite3.Error, pd.errors.DatabaseError) as e:
        print(f"household-seed-check: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        conn.close()

    print_report(results)
    if not all(r.passed for r in results):
        sys.exit(1)


if __name__ == "__main__":
    main()
