"""Sticky-note generator with per-household position/z/category cursors."""

import sqlite3
from dataclasses import dataclass

from faker import Faker
from tqdm import tqdm

from household_seed.households import Household, SeedCategory
from household_seed.prng import Mulberry32, random_choice, random_int
from household_seed.store import (
    Column,
    PendingRestore,
    make_inserter,
    restore_soft_deleted,
    transaction,
)
from household_seed.summary import NoteStats
from household_seed.timestamps import DAY_MS, HOUR_MS, utc_ms

NOTE_COLORS = ["#FFF4B8", "#FFFF88", "#CFF7E3", "#DDEBFF", "#FFD9D3", "#EADCF9", "#F6EBDC"]

DEADLINE_CHANCE = 0.35
SOFT_DELETE_CHANCE = 0.12
CATEGORY_CHANCE = 0.35
RESTORE_FRACTION = 0.04

NOTE_COLUMNS: list[str | Column] = [
    "id",
    "household_id",
    "category_id",
    Column("text", ("text", "body", "content")),
    Column("color", ("color",)),
    Column("x", ("x",)),
    Column("y", ("y",)),
    Column("z", ("z", "z_index")),
    Column("position", ("position",)),
    "created_at",
    "updated_at",
    "deleted_at",
    Column("deadline", ("deadline",)),
    Column("deadline_tz", ("deadline_tz", "deadline_timezone", "deadline_tz_name")),
]


@dataclass
class NoteCursor:
    """Running counters for one household; position and z only ever increase."""

    position: int = 0
    z: int = 0
    category_cursor: int = 0

    def next_category(self, categories: list[SeedCategory]) -> str:
        cursor = self.category_cursor % len(categories)
        self.category_cursor = (cursor + 1) % len(categories)
        return categories[cursor].id


def generate_notes(
    conn: sqlite3.Connection,
    households: list[Household],
    rng: Mulberry32,
    total: int,
    categories_by_household: dict[str, list[SeedCategory]],
    fake: Faker,
    *,
    progress: bool = False,
) -> NoteStats:
    """Insert ``total`` notes round-robin across households and return their stats."""
    insert_note = make_inserter(conn, "notes", NOTE_COLUMNS)
    cursors = {household.id: NoteCursor() for household in households}
    stats = NoteStats(total=total)
    soft_deleted: list[PendingRestore] = []

    with transaction(conn):
        for i in tqdm(range(total), desc="  Notes", leave=False, disable=not progress):
            household = households[i % len(households)]
            cursor = cursors[household.id]
            categories = categories_by_household.get(household.id, [])

            created_at = utc_ms(2024, 1, 1) + random_int(rng, -120, 120) * DAY_MS
            updated_at = (
                created_at + random_int(rng, 0, 14) * DAY_MS + random_int(rng, 0, 8) * HOUR_MS
            )
            has_deadline = rng.next() < DEADLINE_CHANCE
            if has_deadline:
                stats.with_deadline += 1
            deadline = created_at + random_int(rng, 1, 30) * DAY_MS if has_deadline else None
            note_id = f"note_{i + 1:05d}"
            deleted_at = (
                updated_at + random_int(rng, 1, 10) * DAY_MS
                if rng.next() < SOFT_DELETE_CHANCE
                else None
            )
            if deleted_at is not None:
                soft_deleted.append(
                    PendingRestore(note_id, deleted_at + random_int(rng, 1, 5) * DAY_MS)
                )

            category_id = None
            if categories and (cursor.position % 2 == 0 or rng.next() < CATEGORY_CHANCE):
                category_id = cursor.next_category(categories)

            insert_note({
                "id": note_id,
                "household_id": household.id,
                "category_id": category_id,
                "text": f"Sticky note {i + 1}: {fake.sentence(nb_words=8)}",
                "color": random_choice(rng, NOTE_COLORS),
                "x": random_int(rng, 0, 600),
                "y": random_int(rng, 0, 400),
                "z": cursor.z,
                "position": cursor.position,
                "created_at": created_at,
                "updated_at": max(updated_at, created_at),
                "deleted_at": deleted_at,
                "deadline": deadline,
                "deadline_tz": household.tz if has_deadline else None,
            })
            cursor.z += 1
            cursor.position += 1

    restored = restore_soft_deleted(conn, "notes", soft_deleted, RESTORE_FRACTION, total)
    stats.soft_deleted = len(soft_deleted) - restored
    stats.restored = restored
    return stats
