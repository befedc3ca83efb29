"""Attachment corpus loading and placement of attachment-backed rows.

Which source file and which storage root a row gets is a pure function of
its logical key ``household:type:index`` (SHA-256, not the PRNG), so the
file layout is identical for any seed as long as the counts match. The PRNG
only drives row content.
"""

import hashlib
import re
import shutil
import sqlite3
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from tqdm import tqdm

from household_seed.errors import MissingInputError
from household_seed.households import Household, SupportingRecords
from household_seed.prng import Mulberry32, random_choice, random_int
from household_seed.store import Inserter, make_inserter, transaction
from household_seed.summary import AttachmentStats
from household_seed.timestamps import DAY_MS, utc_ms

SMALL_MAX_BYTES = 100_000
APP_DATA_THRESHOLD = 196  # first digest byte below this -> "attachments"
SOFT_DELETE_CHANCE = 0.07

ROOT_ATTACHMENTS = "attachments"
ROOT_APP_DATA = "appData"

ENTITY_TYPES = ("bill", "policy", "property", "inventory", "vehicle", "pet")

LIFECYCLE_COLUMNS = ["household_id", "created_at", "updated_at", "deleted_at", "root_key", "relative_path"]

ENTITY_TABLES: dict[str, tuple[str, list[str]]] = {
    "bill": ("bills", ["id", "amount", "due_date", "reminder", "position"]),
    "policy": ("policies", ["id", "amount", "due_date", "reminder", "position"]),
    "property": (
        "property_documents",
        ["id", "description", "renewal_date", "reminder", "position"],
    ),
    "inventory": (
        "inventory_items",
        ["id", "name", "purchase_date", "warranty_expiry", "reminder", "position"],
    ),
    "vehicle": ("vehicle_maintenance", ["id", "vehicle_id", "type", "date", "cost"]),
    "pet": ("pet_medical", ["id", "pet_id", "date", "description", "reminder"]),
}


@dataclass(frozen=True)
class AttachmentSource:
    disk_name: str
    display_name: str
    abs_path: Path
    size: int
    kind: str  # "small" | "medium"


# ============================================================
# Corpus loading
# ============================================================


def load_attachment_corpus(corpus_dir: Path) -> list[AttachmentSource]:
    """List regular files in ``corpus_dir``, classified by size, in codepoint order."""
    corpus_dir = Path(corpus_dir).resolve()
    try:
        entries = list(corpus_dir.iterdir())
    except FileNotFoundError:
        raise MissingInputError(f"Attachment corpus directory missing at {corpus_dir}") from None

    files = [entry for entry in entries if entry.is_file()]
    if not files:
        raise MissingInputError(f"Attachment corpus directory is empty: {corpus_dir}")

    sources = []
    for entry in files:
        size = entry.stat().st_size
        sources.append(AttachmentSource(
            disk_name=entry.name,
            display_name=unicodedata.normalize("NFC", entry.name),
            abs_path=entry,
            size=size,
            kind="small" if size <= SMALL_MAX_BYTES else "medium",
        ))
    # plain str ordering is by codepoint, independent of locale
    sources.sort(key=lambda s: (s.display_name, s.disk_name))
    return sources


# ============================================================
# Deterministic placement
# ============================================================


def pick_source(logical_key: str, sources: list[AttachmentSource]) -> AttachmentSource:
    """First 4 digest bytes, big-endian, modulo the corpus size."""
    digest = hashlib.sha256(logical_key.encode("utf-8")).digest()
    return sources[int.from_bytes(digest[:4], "big") % len(sources)]


def choose_root_key(logical_key: str) -> str:
    digest = hashlib.sha256(f"root:{logical_key}".encode("utf-8")).digest()
    return ROOT_ATTACHMENTS if digest[0] < APP_DATA_THRESHOLD else ROOT_APP_DATA


_DASH_RUNS = re.compile(r"-+")


def sanitize_segment(text: str) -> str:
    """NFC-normalise, turn runs of anything but letters/0-9/._- into one dash, lowercase."""
    text = unicodedata.normalize("NFC", text)
    chars = []
    for ch in text:
        if ch in "0123456789._-" or unicodedata.category(ch).startswith("L"):
            chars.append(ch)
        else:
            chars.append("-")
    return _DASH_RUNS.sub("-", "".join(chars)).strip("-").lower()


def relative_path_for(household_id: str, entity_type: str, index: int, source: AttachmentSource) -> str:
    return (
        f"{sanitize_segment(household_id)}/{entity_type}/{index:04d}"
        f"-{sanitize_segment(source.display_name)}"
    )


def copy_attachment(source: AttachmentSource, root_dir: Path, relative_path: str) -> Path:
    dest = root_dir / relative_path
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source.abs_path, dest)
    return dest


# ============================================================
# Entity rows
# ============================================================
# Each builder returns the entity-specific fields. Draw order is part of the
# output contract; keep field order stable.


def _bill_row(rng, household, position, supporting):
    return {
        "id": f"bill_{household.id}_{position:04d}",
        "amount": random_int(rng, 2_500, 12_500),
        "due_date": utc_ms(2024, random_int(rng, 0, 11) + 1, random_int(rng, 1, 28)),
        "reminder": utc_ms(2024, 1, 1) + random_int(rng, 1, 20) * DAY_MS if rng.next() < 0.4 else None,
        "position": position,
    }


def _policy_row(rng, household, position, supporting):
    return {
        "id": f"policy_{household.id}_{position:04d}",
        "amount": random_int(rng, 15_000, 65_000),
        "due_date": utc_ms(2024, random_int(rng, 0, 11) + 1, random_int(rng, 1, 28)),
        "reminder": utc_ms(2024, 1, 1) + random_int(rng, 5, 40) * DAY_MS if rng.next() < 0.45 else None,
        "position": position,
    }


def _property_row(rng, household, position, supporting):
    return {
        "id": f"prop_{household.id}_{position:04d}",
        "description": f"{household.name} document {position + 1}",
        "renewal_date": utc_ms(2025, random_int(rng, 0, 11) + 1, random_int(rng, 1, 28)),
        "reminder": utc_ms(2025, 1, 1) + random_int(rng, 1, 60) * DAY_MS if rng.next() < 0.5 else None,
        "position": position,
    }


def _inventory_row(rng, household, position, supporting):
    return {
        "id": f"inv_{household.id}_{position:04d}",
        "name": f"{household.name} asset {position + 1}",
        "purchase_date": utc_ms(2022, random_int(rng, 0, 11) + 1, random_int(rng, 1, 28)),
        "warranty_expiry": utc_ms(2026, random_int(rng, 0, 11) + 1, random_int(rng, 1, 28)),
        "reminder": utc_ms(2025, 1, 1) + random_int(rng, 1, 90) * DAY_MS if rng.next() < 0.25 else None,
        "position": position,
    }


def _vehicle_maintenance_row(rng, household, position, supporting):
    return {
        "id": f"vehmaint_{household.id}_{position:04d}",
        "vehicle_id": random_choice(rng, supporting.vehicles[household.id]),
        "type": random_choice(rng, ["Inspection", "Repair", "Tyre change", "Insurance"]),
        "date": utc_ms(2024, random_int(rng, 0, 11) + 1, random_int(rng, 1, 28)),
        "cost": random_int(rng, 150, 2_500),
    }


def _pet_medical_row(rng, household, position, supporting):
    return {
        "id": f"petmed_{household.id}_{position:04d}",
        "pet_id": random_choice(rng, supporting.pets[household.id]),
        "date": utc_ms(2024, random_int(rng, 0, 11) + 1, random_int(rng, 1, 28)),
        "description": f"{household.name} pet check {position + 1}",
        "reminder": utc_ms(2024, 1, 1) + random_int(rng, 1, 30) * DAY_MS if rng.next() < 0.2 else None,
    }


RowBuilder = Callable[[Mulberry32, Household, int, SupportingRecords], dict]

ROW_BUILDERS: dict[str, RowBuilder] = {
    "bill": _bill_row,
    "policy": _policy_row,
    "property": _property_row,
    "inventory": _inventory_row,
    "vehicle": _vehicle_maintenance_row,
    "pet": _pet_medical_row,
}


# ============================================================
# Generator: attachment-backed rows
# ============================================================


def generate_attachments(
    conn: sqlite3.Connection,
    households: list[Household],
    rng: Mulberry32,
    roots: dict[str, Path],
    target: int,
    sources: list[AttachmentSource],
    supporting: SupportingRecords,
    *,
    progress: bool = False,
) -> AttachmentStats:
    """Place ``target`` attachment-backed rows, copying each source file into its root.

    ``target`` is split evenly across households; the last one absorbs the
    remainder. Within a household the six entity types are cycled.
    """
    inserters: dict[str, Inserter] = {
        entity_type: make_inserter(conn, table, columns + LIFECYCLE_COLUMNS)
        for entity_type, (table, columns) in ENTITY_TABLES.items()
    }
    per_household = max(1, target // len(households))
    stats = AttachmentStats()
    source_usage: dict[str, int] = {}
    generated = 0
    logical_index = 0

    with transaction(conn), tqdm(
        total=target, desc="  Attachments", leave=False, disable=not progress
    ) as bar:
        for household in households:
            positions = dict.fromkeys(ENTITY_TYPES, 0)
            is_last = household is households[-1]
            household_target = target - generated if is_last else per_household

            i = 0
            while i < household_target and generated < target:
                entity_type = ENTITY_TYPES[i % len(ENTITY_TYPES)]
                logical_key = f"{household.id}:{entity_type}:{logical_index}"
                source = pick_source(logical_key, sources)
                root_key = choose_root_key(logical_key)
                relative_path = relative_path_for(household.id, entity_type, logical_index, source)
                copy_attachment(source, roots[root_key], relative_path)

                stats.total += 1
                stats.by_root_key[root_key] = stats.by_root_key.get(root_key, 0) + 1
                stats.by_source_kind[source.kind] = stats.by_source_kind.get(source.kind, 0) + 1
                source_usage[source.disk_name] = source_usage.get(source.disk_name, 0) + 1

                created_at = utc_ms(2024, 1, 1) + random_int(rng, -90, 90) * DAY_MS
                updated_at = created_at + random_int(rng, 0, 30) * DAY_MS
                deleted_at = (
                    updated_at + random_int(rng, 1, 30) * DAY_MS
                    if rng.next() < SOFT_DELETE_CHANCE
                    else None
                )

                row = ROW_BUILDERS[entity_type](rng, household, positions[entity_type], supporting)
                row.update({
                    "household_id": household.id,
                    "created_at": created_at,
                    "updated_at": max(updated_at, created_at),
                    "deleted_at": deleted_at,
                    "root_key": root_key,
                    "relative_path": relative_path,
                })
                inserters[entity_type](row)
                positions[entity_type] += 1

                logical_index += 1
                generated += 1
                i += 1
                bar.update(1)

    stats.reused_logical_files = sum(1 for uses in source_usage.values() if uses > 1)
    return stats
