"""Tests for the JSON summary."""

import json

from household_seed.summary import (
    AttachmentStats,
    EventStats,
    GenerationSummary,
    NoteStats,
    write_summary,
)


def make_summary() -> GenerationSummary:
    return GenerationSummary(
        database="/data/arklowdun.sqlite3",
        households=3,
        seed=42,
        events=EventStats(total=10, all_day=3),
        notes=NoteStats(total=5, with_deadline=2),
        attachments=AttachmentStats(total=4),
    )


class TestSummary:
    def test_camel_case_keys_in_order(self):
        data = make_summary().to_dict()
        assert list(data) == ["database", "households", "seed", "events", "notes", "attachments"]
        assert list(data["events"]) == [
            "total", "timed", "allDay", "recurring", "multiDay", "withReminder",
            "softDeleted", "restored", "recurrence",
        ]
        assert "withDuplicateExdates" in data["events"]["recurrence"]
        assert data["attachments"]["byRootKey"] == {"attachments": 0, "appData": 0}
        assert data["attachments"]["bySourceKind"] == {"small": 0, "medium": 0}

    def test_json_ends_with_newline(self):
        text = make_summary().to_json()
        assert text.endswith("}\n")
        assert json.loads(text)["events"]["allDay"] == 3

    def test_write_creates_parents(self, tmp_path):
        target = tmp_path / "nested" / "dir" / "summary.json"
        write_summary(make_summary(), target)
        assert json.loads(target.read_text(encoding="utf-8"))["notes"]["withDeadline"] == 2
