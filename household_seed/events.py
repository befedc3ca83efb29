"""Calendar event generator and RRULE helpers.

Events cycle through four shapes (timed, all-day, recurring, multi-day).
Recurring events carry an RRULE with exactly one of UNTIL/COUNT and exactly
one of BYDAY/BYMONTHDAY; some also carry EXDATE lists, including deliberate
duplicates. The first recurring event is pinned to the 2024 US spring-forward
instant so every corpus has a DST-boundary series.

After insertion, a prefix of the soft-deleted events is restored so both the
"still deleted" and "restored" populations are present.
"""

import sqlite3

from tqdm import tqdm

from household_seed.households import Household
from household_seed.prng import Mulberry32, random_choice, random_int
from household_seed.store import PendingRestore, make_inserter, restore_soft_deleted, transaction
from household_seed.summary import EventStats
from household_seed.timestamps import DAY_MS, HOUR_MS, MINUTE_MS, align_to_day, format_iso, utc_ms

EVENT_TIMEZONES = [
    "UTC",
    "America/New_York",
    "America/Chicago",
    "America/Los_Angeles",
    "Europe/Berlin",
    "Europe/Dublin",
    "Asia/Tokyo",
    "Asia/Kolkata",
    "Australia/Sydney",
]

EVENT_TYPES = ("timed", "all-day", "recurring", "multi-day")
FREQUENCIES = ("DAILY", "WEEKLY", "MONTHLY")
BYDAY_OPTIONS = ["MO", "TU", "WE", "TH", "FR", "SA", "SU", "MO,WE,FR", "TU,TH", "SA,SU"]

EPOCH_MS = utc_ms(2024, 1, 1)
DST_EDGE_START_MS = utc_ms(2024, 3, 10, 6, 0)
DST_EDGE_TZ = "America/New_York"

TYPE_OVERRIDE_CHANCE = 0.1
REMINDER_CHANCE = 0.45
SOFT_DELETE_CHANCE = 0.1
RESTORE_FRACTION = 0.03

EVENT_COLUMNS = [
    "id", "title", "tz", "start_at_utc", "end_at_utc", "rrule", "exdates", "reminder",
    "household_id", "created_at", "updated_at", "deleted_at",
]


# ============================================================
# RRULE helpers
# ============================================================


def parse_rrule(rule: str) -> dict[str, str]:
    """Split ``KEY=VALUE;KEY=VALUE`` into a dict. Raises ValueError on repeated keys."""
    parts: dict[str, str] = {}
    for chunk in rule.split(";"):
        key, sep, value = chunk.partition("=")
        if not sep or not key or not value:
            raise ValueError(f"malformed RRULE part {chunk!r}")
        if key in parts:
            raise ValueError(f"RRULE key {key} repeated")
        parts[key] = value
    return parts


def is_well_formed_rrule(rule: str) -> bool:
    """One FREQ and INTERVAL, one of UNTIL/COUNT, BYMONTHDAY iff MONTHLY else BYDAY."""
    try:
        parts = parse_rrule(rule)
    except ValueError:
        return False
    if parts.get("FREQ") not in FREQUENCIES or "INTERVAL" not in parts:
        return False
    if ("UNTIL" in parts) == ("COUNT" in parts):
        return False
    if parts["FREQ"] == "MONTHLY":
        return "BYMONTHDAY" in parts and "BYDAY" not in parts
    return "BYDAY" in parts and "BYMONTHDAY" not in parts


def _until_span_ms(rng: Mulberry32, freq: str) -> int:
    if freq == "DAILY":
        return random_int(rng, 25, 90) * DAY_MS
    if freq == "WEEKLY":
        return random_int(rng, 8, 26) * 7 * DAY_MS
    return random_int(rng, 6, 18) * 30 * DAY_MS


def _exdate_list(rng: Mulberry32, start_ms: int, force_duplicate: bool) -> tuple[list[str], bool]:
    """1-3 distinct exception dates after ``start_ms``, maybe with one repeated."""
    skip_count = random_int(rng, 1, 3)
    points: list[str] = []
    for j in range(skip_count):
        offset_days = random_int(rng, 1, 6 + j * 2)
        point = format_iso(start_ms + offset_days * DAY_MS)
        if point not in points:
            points.append(point)

    if force_duplicate:
        points.append(points[0])
        return points, True
    if rng.next() < 0.2:
        points.append(points[random_int(rng, 0, len(points) - 1)])
        return points, True
    return points, False


# ============================================================
# Generator: events
# ============================================================


def generate_events(
    conn: sqlite3.Connection,
    households: list[Household],
    rng: Mulberry32,
    total: int,
    *,
    progress: bool = False,
) -> EventStats:
    """Insert ``total`` events round-robin across households and return their stats."""
    insert_event = make_inserter(conn, "events", EVENT_COLUMNS)
    stats = EventStats(total=total)
    recurrence = stats.recurrence
    soft_deleted: list[PendingRestore] = []

    with transaction(conn):
        for i in tqdm(range(total), desc="  Events", leave=False, disable=not progress):
            household = households[i % len(households)]
            base_type = EVENT_TYPES[i % len(EVENT_TYPES)]
            event_type = (
                random_choice(rng, EVENT_TYPES) if rng.next() < TYPE_OVERRIDE_CHANCE else base_type
            )
            event_id = f"evt_{i + 1:06d}"

            tz = random_choice(rng, EVENT_TIMEZONES)
            day_start = align_to_day(EPOCH_MS + (i - total // 2) * DAY_MS)
            if event_type == "all-day":
                start_ms = day_start
            else:
                start_ms = (
                    day_start
                    + random_int(rng, 0, 18) * HOUR_MS
                    + random_int(rng, 0, 45) * MINUTE_MS
                )

            rrule = None
            exdates = None

            if event_type == "timed":
                stats.timed += 1
                end_ms = start_ms + random_int(rng, 1, 4) * HOUR_MS
            elif event_type == "all-day":
                stats.all_day += 1
                end_ms = start_ms + DAY_MS
            elif event_type == "multi-day":
                stats.multi_day += 1
                end_ms = start_ms + random_int(rng, 2, 5) * DAY_MS
            else:
                stats.recurring += 1
                freq = FREQUENCIES[(i + stats.recurring) % len(FREQUENCIES)]
                interval = random_int(rng, 1, 2) if freq == "MONTHLY" else random_int(rng, 1, 4)

                if recurrence.dst_edge == 0:
                    tz = DST_EDGE_TZ
                    start_ms = DST_EDGE_START_MS
                    freq = "DAILY"
                    interval = 1
                    recurrence.dst_edge += 1

                parts = [f"FREQ={freq}", f"INTERVAL={interval}"]
                if (i + 3) % 5 == 0:
                    parts.append(f"UNTIL={format_iso(start_ms + _until_span_ms(rng, freq))}")
                    recurrence.until += 1
                else:
                    parts.append(f"COUNT={random_int(rng, 10, 40)}")
                    recurrence.count += 1

                if freq == "DAILY":
                    recurrence.daily += 1
                elif freq == "WEEKLY":
                    recurrence.weekly += 1
                else:
                    recurrence.monthly += 1

                if freq != "MONTHLY":
                    parts.append(f"BYDAY={BYDAY_OPTIONS[(i + interval) % len(BYDAY_OPTIONS)]}")
                    recurrence.by_day += 1
                else:
                    parts.append(f"BYMONTHDAY={random_int(rng, 1, 28)}")
                    recurrence.by_month_day += 1

                end_ms = start_ms + random_int(rng, 1, 3) * HOUR_MS

                wants_exdates = stats.recurring % 3 == 0 or rng.next() < 0.4
                if wants_exdates and recurrence.with_exdates < stats.recurring:
                    points, duplicated = _exdate_list(
                        rng, start_ms, force_duplicate=recurrence.with_duplicate_exdates == 0
                    )
                    exdates = ",".join(points)
                    recurrence.with_exdates += 1
                    if duplicated:
                        recurrence.with_duplicate_exdates += 1

                rrule = ";".join(parts)

            created_at = start_ms - random_int(rng, 1, 14) * DAY_MS
            updated_at = (
                created_at + random_int(rng, 1, 5) * DAY_MS + random_int(rng, 0, 12) * HOUR_MS
            )
            reminder = (
                start_ms - random_int(rng, 15, 240) * MINUTE_MS
                if rng.next() < REMINDER_CHANCE
                else None
            )
            if reminder is not None:
                stats.with_reminder += 1
            deleted_at = (
                updated_at + random_int(rng, 1, 5) * DAY_MS
                if rng.next() < SOFT_DELETE_CHANCE
                else None
            )
            if deleted_at is not None:
                soft_deleted.append(
                    PendingRestore(event_id, deleted_at + random_int(rng, 1, 5) * DAY_MS)
                )

            insert_event({
                "id": event_id,
                "title": f"{event_type.replace('-', ' ')} event #{i + 1}",
                "tz": tz,
                "start_at_utc": start_ms,
                "end_at_utc": end_ms,
                "rrule": rrule,
                "exdates": exdates,
                "reminder": reminder,
                "household_id": household.id,
                "created_at": created_at,
                "updated_at": max(updated_at, created_at),
                "deleted_at": deleted_at,
            })

    restored = restore_soft_deleted(conn, "events", soft_deleted, RESTORE_FRACTION, total)
    stats.soft_deleted = len(soft_deleted) - restored
    stats.restored = restored
    return stats
