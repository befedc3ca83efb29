"""Tests for the event generator and RRULE helpers."""

import math
from collections import Counter

import pytest
from faker import Faker

from household_seed.config import MIGRATIONS_DIR
from household_seed.events import (
    DST_EDGE_START_MS,
    DST_EDGE_TZ,
    RESTORE_FRACTION,
    generate_events,
    is_well_formed_rrule,
    parse_rrule,
)
from household_seed.households import generate_households
from household_seed.prng import Mulberry32
from household_seed.store import apply_migrations, connect

TOTAL = 400


@pytest.fixture
def event_stats(conn, households):
    return generate_events(conn, households, Mulberry32(42), TOTAL)


class TestRRuleHelpers:
    def test_parse(self):
        assert parse_rrule("FREQ=WEEKLY;INTERVAL=2;COUNT=10;BYDAY=MO,WE,FR") == {
            "FREQ": "WEEKLY",
            "INTERVAL": "2",
            "COUNT": "10",
            "BYDAY": "MO,WE,FR",
        }

    def test_parse_rejects_repeated_key(self):
        with pytest.raises(ValueError, match="repeated"):
            parse_rrule("FREQ=DAILY;FREQ=WEEKLY")

    def test_parse_rejects_malformed_part(self):
        with pytest.raises(ValueError):
            parse_rrule("FREQ=DAILY;INTERVAL")

    @pytest.mark.parametrize("rule", [
        "FREQ=DAILY;INTERVAL=1;COUNT=12;BYDAY=MO",
        "FREQ=WEEKLY;INTERVAL=3;UNTIL=2024-06-01T00:00:00Z;BYDAY=TU,TH",
        "FREQ=MONTHLY;INTERVAL=2;COUNT=20;BYMONTHDAY=14",
    ])
    def test_well_formed(self, rule):
        assert is_well_formed_rrule(rule)

    @pytest.mark.parametrize("rule", [
        "FREQ=DAILY;INTERVAL=1;BYDAY=MO",                                   # no terminator
        "FREQ=DAILY;INTERVAL=1;COUNT=3;UNTIL=2024-06-01T00:00:00Z;BYDAY=MO",  # both terminators
        "FREQ=MONTHLY;INTERVAL=1;COUNT=3;BYDAY=MO",                         # monthly needs BYMONTHDAY
        "FREQ=WEEKLY;INTERVAL=1;COUNT=3;BYMONTHDAY=3",
        "FREQ=YEARLY;INTERVAL=1;COUNT=3;BYDAY=MO",
        "FREQ=DAILY;COUNT=3;BYDAY=MO",
        "FREQ=DAILY;FREQ=DAILY;INTERVAL=1;COUNT=3;BYDAY=MO",
    ])
    def test_malformed(self, rule):
        assert not is_well_formed_rrule(rule)


class TestGenerateEvents:
    def test_row_count_and_shape_totals(self, conn, event_stats):
        assert conn.execute("SELECT COUNT(*) FROM events").fetchone()[0] == TOTAL
        assert event_stats.total == TOTAL
        assert (
            event_stats.timed + event_stats.all_day + event_stats.recurring + event_stats.multi_day
            == TOTAL
        )

    def test_recurrence_counters_partition_recurring(self, event_stats):
        r = event_stats.recurrence
        assert r.daily + r.weekly + r.monthly == event_stats.recurring
        assert r.until + r.count == event_stats.recurring
        assert r.by_day + r.by_month_day == event_stats.recurring
        assert r.with_exdates <= event_stats.recurring

    def test_end_never_before_start(self, conn, event_stats):
        reversed_rows = conn.execute(
            "SELECT COUNT(*) FROM events WHERE end_at_utc < start_at_utc"
        ).fetchone()[0]
        assert reversed_rows == 0

    def test_only_recurring_events_have_rrules(self, conn, event_stats):
        rows = conn.execute("SELECT title, rrule FROM events").fetchall()
        for title, rrule in rows:
            assert (rrule is not None) == title.startswith("recurring event")
        assert sum(1 for _, rrule in rows if rrule) == event_stats.recurring

    def test_every_rrule_well_formed(self, conn, event_stats):
        rules = [r for (r,) in conn.execute("SELECT rrule FROM events WHERE rrule IS NOT NULL")]
        assert rules
        assert all(is_well_formed_rrule(rule) for rule in rules)

    def test_dst_edge_series(self, conn, event_stats):
        rows = conn.execute(
            "SELECT tz, rrule FROM events WHERE start_at_utc = ?", (DST_EDGE_START_MS,)
        ).fetchall()
        assert event_stats.recurrence.dst_edge == 1
        assert any(
            tz == DST_EDGE_TZ and rrule.startswith("FREQ=DAILY;INTERVAL=1;")
            for tz, rrule in rows
            if rrule
        )

    def test_exdate_counters_match_rows(self, conn, event_stats):
        lists = [
            value.split(",")
            for (value,) in conn.execute("SELECT exdates FROM events WHERE exdates IS NOT NULL")
        ]
        duplicated = sum(1 for points in lists if max(Counter(points).values()) > 1)
        assert len(lists) == event_stats.recurrence.with_exdates
        assert duplicated == event_stats.recurrence.with_duplicate_exdates
        assert duplicated >= 1

    def test_exdates_only_on_recurring(self, conn, event_stats):
        stray = conn.execute(
            "SELECT COUNT(*) FROM events WHERE exdates IS NOT NULL AND rrule IS NULL"
        ).fetchone()[0]
        assert stray == 0

    def test_soft_delete_and_restore(self, conn, event_stats):
        deleted = conn.execute("SELECT COUNT(*) FROM events WHERE deleted_at IS NOT NULL").fetchone()[0]
        assert deleted == event_stats.soft_deleted
        pending = event_stats.soft_deleted + event_stats.restored
        assert event_stats.restored == min(max(1, math.floor(TOTAL * RESTORE_FRACTION)), pending)

    def test_reminder_before_start(self, conn, event_stats):
        early = conn.execute(
            "SELECT COUNT(*) FROM events WHERE reminder IS NOT NULL AND reminder >= start_at_utc"
        ).fetchone()[0]
        assert early == 0
        with_reminder = conn.execute(
            "SELECT COUNT(*) FROM events WHERE reminder IS NOT NULL"
        ).fetchone()[0]
        assert with_reminder == event_stats.with_reminder

    def test_round_robin_households(self, conn, households, event_stats):
        first, second = households
        assert conn.execute(
            "SELECT household_id FROM events WHERE id = 'evt_000001'"
        ).fetchone() == (first.id,)
        assert conn.execute(
            "SELECT household_id FROM events WHERE id = 'evt_000002'"
        ).fetchone() == (second.id,)


class TestDeterminism:
    def _seed(self, path):
        db = connect(path)
        apply_migrations(db, MIGRATIONS_DIR)
        fake = Faker()
        fake.seed_instance(5)
        households = generate_households(db, Mulberry32(5), 2, fake)
        stats = generate_events(db, households, Mulberry32(99), 250)
        rows = db.execute("SELECT * FROM events ORDER BY id").fetchall()
        db.close()
        return stats, rows

    def test_same_seed_same_rows(self, tmp_path):
        stats_a, rows_a = self._seed(tmp_path / "a.sqlite3")
        stats_b, rows_b = self._seed(tmp_path / "b.sqlite3")
        assert stats_a == stats_b
        assert rows_a == rows_b
