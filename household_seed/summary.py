"""In-memory counters collected while generating, and the JSON summary built from them."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class RecurrenceStats:
    daily: int = 0
    weekly: int = 0
    monthly: int = 0
    until: int = 0
    count: int = 0
    by_day: int = 0
    by_month_day: int = 0
    with_exdates: int = 0
    with_duplicate_exdates: int = 0
    dst_edge: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "daily": self.daily,
            "weekly": self.weekly,
            "monthly": self.monthly,
            "until": self.until,
            "count": self.count,
            "byDay": self.by_day,
            "byMonthDay": self.by_month_day,
            "withExdates": self.with_exdates,
            "withDuplicateExdates": self.with_duplicate_exdates,
            "dstEdge": self.dst_edge,
        }


@dataclass
class EventStats:
    total: int = 0
    timed: int = 0
    all_day: int = 0
    recurring: int = 0
    multi_day: int = 0
    with_reminder: int = 0
    soft_deleted: int = 0
    restored: int = 0
    recurrence: RecurrenceStats = field(default_factory=RecurrenceStats)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "timed": self.timed,
            "allDay": self.all_day,
            "recurring": self.recurring,
            "multiDay": self.multi_day,
            "withReminder": self.with_reminder,
            "softDeleted": self.soft_deleted,
            "restored": self.restored,
            "recurrence": self.recurrence.to_dict(),
        }


@dataclass
class NoteStats:
    total: int = 0
    soft_deleted: int = 0
    restored: int = 0
    with_deadline: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "softDeleted": self.soft_deleted,
            "restored": self.restored,
            "withDeadline": self.with_deadline,
        }


@dataclass
class AttachmentStats:
    total: int = 0
    by_root_key: dict[str, int] = field(default_factory=lambda: {"attachments": 0, "appData": 0})
    by_source_kind: dict[str, int] = field(default_factory=lambda: {"small": 0, "medium": 0})
    reused_logical_files: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "byRootKey": dict(self.by_root_key),
            "bySourceKind": dict(self.by_source_kind),
            "reusedLogicalFiles": self.reused_logical_files,
        }


@dataclass
class GenerationSummary:
    database: str
    households: int
    seed: int
    events: EventStats
    notes: NoteStats
    attachments: AttachmentStats

    def to_dict(self) -> dict[str, Any]:
        return {
            "database": self.database,
            "households": self.households,
            "seed": self.seed,
            "events": self.events.to_dict(),
            "notes": self.notes.to_dict(),
            "attachments": self.attachments.to_dict(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n"


def write_summary(summary: GenerationSummary, path: Path) -> None:
    """Write the summary JSON, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(summary.to_json(), encoding="utf-8")
