"""Top-level sequencing of one seeding run.

households -> categories -> events -> notes -> vehicles/pets -> attachments
-> summary -> validation. Each generator commits its own transaction; a
failure later in the run does not roll back earlier generators.
"""

import sqlite3
import sys

from faker import Faker

from household_seed.attachments import (
    ROOT_APP_DATA,
    ROOT_ATTACHMENTS,
    AttachmentSource,
    generate_attachments,
    load_attachment_corpus,
)
from household_seed.config import SeedOptions, Thresholds
from household_seed.events import generate_events
from household_seed.households import (
    generate_categories,
    generate_households,
    generate_supporting_records,
)
from household_seed.notes import generate_notes
from household_seed.prng import Mulberry32
from household_seed.store import (
    apply_migrations,
    connect,
    ensure_directories,
    foreign_keys_suspended,
    list_migrations,
    reset_targets,
)
from household_seed.summary import GenerationSummary, write_summary
from household_seed.validate import validate_summary

TOTAL_STAGES = 7


def _stage(step: int, message: str, progress: bool) -> None:
    if progress:
        print(f"[{step}/{TOTAL_STAGES}] {message}", file=sys.stderr)


def _done(message: str, progress: bool) -> None:
    if progress:
        print(f"  Done: {message}", file=sys.stderr)


def generate_corpus(
    conn: sqlite3.Connection,
    options: SeedOptions,
    sources: list[AttachmentSource],
    *,
    progress: bool = False,
) -> GenerationSummary:
    """Run every generator against a migrated store and return the unvalidated summary."""
    rng = Mulberry32(options.seed)
    fake = Faker()
    fake.seed_instance(options.seed)

    _stage(1, f"Generating households ({options.households} rows)...", progress)
    households = generate_households(conn, rng, options.households, fake)

    _stage(2, "Generating categories...", progress)
    categories = generate_categories(conn, households)
    _done(f"{sum(len(c) for c in categories.values())} categories", progress)

    _stage(3, f"Generating events ({options.events:,} rows)...", progress)
    event_stats = generate_events(conn, households, rng, options.events, progress=progress)
    _done(
        f"{event_stats.recurring:,} recurring, {event_stats.soft_deleted:,} soft-deleted, "
        f"{event_stats.restored:,} restored",
        progress,
    )

    _stage(4, f"Generating notes ({options.notes:,} rows)...", progress)
    note_stats = generate_notes(
        conn, households, rng, options.notes, categories, fake, progress=progress
    )
    _done(f"{note_stats.with_deadline:,} with deadlines", progress)

    _stage(5, "Generating vehicles and pets...", progress)
    supporting = generate_supporting_records(conn, households, rng, fake, progress=progress)

    _stage(6, f"Placing attachments ({options.attachments:,} rows)...", progress)
    roots = {ROOT_ATTACHMENTS: options.attachments_dir, ROOT_APP_DATA: options.app_data_dir}
    attachment_stats = generate_attachments(
        conn, households, rng, roots, options.attachments, sources, supporting, progress=progress
    )
    _done(f"{attachment_stats.reused_logical_files} source files reused", progress)

    return GenerationSummary(
        database=str(options.db_path),
        households=len(households),
        seed=options.seed,
        events=event_stats,
        notes=note_stats,
        attachments=attachment_stats,
    )


def run(
    options: SeedOptions,
    thresholds: Thresholds | None = None,
    *,
    progress: bool = False,
) -> GenerationSummary:
    """Seed a store end to end, validate the corpus, and write the optional summary file."""
    # inputs are checked before anything is deleted or written
    sources = load_attachment_corpus(options.corpus_dir)
    list_migrations(options.migrations_dir)

    if options.reset:
        reset_targets(options)
    ensure_directories(options)

    conn = connect(options.db_path)
    try:
        apply_migrations(conn, options.migrations_dir)
        with foreign_keys_suspended(conn):
            summary = generate_corpus(conn, options, sources, progress=progress)
    finally:
        conn.close()

    _stage(7, "Validating corpus...", progress)
    validate_summary(summary, options, thresholds)

    if options.summary_path is not None:
        write_summary(summary, options.summary_path)
    return summary
