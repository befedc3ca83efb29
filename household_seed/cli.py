"""Command-line entry point for the large-fixture seeder.

Usage: household-seed [--db PATH] [--seed N] [--events N] ... [--reset]
"""

import argparse
import sqlite3
import sys
from pathlib import Path

from household_seed.config import MIGRATIONS_DIR, SeedOptions, get_defaults, get_thresholds
from household_seed.errors import FixtureError
from household_seed.seed import run


def _int_at_least(minimum: int):
    def parse(raw: str) -> int:
        try:
            value = int(raw)
        except ValueError:
            raise argparse.ArgumentTypeError(f"expected an integer, got {raw!r}") from None
        if value < minimum:
            raise argparse.ArgumentTypeError(f"must be an integer >= {minimum}")
        return value

    return parse


def build_parser(defaults: dict) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="household-seed",
        description="Seed a household-management SQLite store with a large deterministic fixture.",
    )
    parser.add_argument("--db", type=Path, default=defaults["db_path"],
                        help="SQLite destination (default ./arklowdun.sqlite3)")
    parser.add_argument("--attachments", type=Path, default=defaults["attachments_dir"],
                        help="attachments root (default <db dir>/attachments)")
    parser.add_argument("--corpus", type=Path, default=defaults["corpus_dir"],
                        help="directory of sample attachment files")
    parser.add_argument("--migrations", type=Path, default=MIGRATIONS_DIR,
                        help="directory of *.up.sql migrations")
    parser.add_argument("--seed", type=int, default=defaults["seed"],
                        help="PRNG seed (default 42)")
    parser.add_argument("--households", type=_int_at_least(2), default=defaults["households"],
                        help="number of households (default 3, minimum 2)")
    parser.add_argument("--events", type=_int_at_least(1), default=defaults["events"],
                        help="number of events (default 10000)")
    parser.add_argument("--notes", type=_int_at_least(1), default=defaults["notes"],
                        help="number of notes (default 5000)")
    parser.add_argument("--attachments-count", dest="attachments_count", type=_int_at_least(1),
                        default=defaults["attachments"],
                        help="number of attachment-backed rows (default 300)")
    parser.add_argument("--summary", type=Path, default=None,
                        help="also write the JSON summary to this path")
    parser.add_argument("--reset", action="store_true",
                        help="remove the existing database and attachments first")
    parser.add_argument("--quiet", action="store_true",
                        help="no progress output on stderr")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse flags, seed the store, print the JSON summary on stdout."""
    try:
        defaults = get_defaults()
        args = build_parser(defaults).parse_args(argv)
        options = SeedOptions(
            db_path=args.db,
            attachments_dir=args.attachments,
            corpus_dir=args.corpus,
            migrations_dir=args.migrations,
            seed=args.seed,
            households=args.households,
            events=args.events,
            notes=args.notes,
            attachments=args.attachments_count,
            reset=args.reset,
            summary_path=args.summary,
        )
        summary = run(options, get_thresholds(), progress=not args.quiet)
    except (FixtureError, sqlite3.Error, OSError) as e:
        print(f"household-seed: {e}", file=sys.stderr)
        sys.exit(1)

    sys.stdout.write(summary.to_json())


if __name__ == "__main__":
    main()
