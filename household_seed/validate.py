"""Corpus-quality gate over the in-memory generation summary.

Every check runs and every violation is reported, so one failed run shows
all of its coverage gaps at once.
"""

from household_seed.config import SeedOptions, Thresholds
from household_seed.errors import CorpusQualityError
from household_seed.summary import GenerationSummary

# ── Exact totals ─────────────────────────────────────────────
# (label, summary path, option attribute)
TOTAL_CHECKS: list[tuple[str, str, str]] = [
    ("events", "events.total", "events"),
    ("notes", "notes.total", "notes"),
    ("attachments", "attachments.total", "attachments"),
]

# ── Ratio floors ─────────────────────────────────────────────
# (label, count path, total path, threshold attribute)
RATIO_CHECKS: list[tuple[str, str, str, str]] = [
    ("All-day event", "events.all_day", "events.total", "min_all_day"),
    ("Recurring event", "events.recurring", "events.total", "min_recurring"),
    ("Soft-deleted event", "events.soft_deleted", "events.total", "min_event_soft_deleted"),
    ("Restored event", "events.restored", "events.total", "min_event_restored"),
    (
        "Recurring events with EXDATE",
        "events.recurrence.with_exdates",
        "events.recurring",
        "min_recurring_with_exdates",
    ),
    ("Soft-deleted notes", "notes.soft_deleted", "notes.total", "min_note_soft_deleted"),
    ("Restored notes", "notes.restored", "notes.total", "min_note_restored"),
    ("Notes with deadlines", "notes.with_deadline", "notes.total", "min_note_deadline"),
]

# Ratios evaluated only when their denominator is non-zero.
OPTIONAL_DENOMINATORS = {"events.recurring"}

# ── Coverage counts (must be > 0) ────────────────────────────
POSITIVE_CHECKS: list[tuple[str, str]] = [
    ("Duplicate EXDATE coverage", "events.recurrence.with_duplicate_exdates"),
    ("DST edge recurrence coverage", "events.recurrence.dst_edge"),
    ("RRULE UNTIL coverage", "events.recurrence.until"),
    ("RRULE COUNT coverage", "events.recurrence.count"),
    ("RRULE BYDAY coverage", "events.recurrence.by_day"),
    ("RRULE BYMONTHDAY coverage", "events.recurrence.by_month_day"),
    ("Small attachment coverage", "attachments.by_source_kind.small"),
    ("Medium attachment coverage", "attachments.by_source_kind.medium"),
    ("appData attachment coverage", "attachments.by_root_key.appData"),
    ("Attachment reuse coverage", "attachments.reused_logical_files"),
]


def _lookup(summary: GenerationSummary, path: str) -> int:
    value: object = summary
    for part in path.split("."):
        value = value.get(part, 0) if isinstance(value, dict) else getattr(value, part)
    return int(value)


def check_ratio(count: int, total: int, minimum: float, label: str) -> str | None:
    """Return a violation message, or None when ``count / total >= minimum``."""
    if total == 0:
        return f"Cannot evaluate ratio for {label} with zero total"
    ratio = count / total
    if ratio < minimum:
        return (
            f"{label} ratio {ratio * 100:.2f}% is below minimum {minimum * 100:.1f}% "
            f"({count}/{total}, short by {(minimum - ratio) * 100:.2f} points)"
        )
    return None


def check_positive(value: int, label: str) -> str | None:
    if value <= 0:
        return f"{label} must be greater than zero"
    return None


def find_violations(
    summary: GenerationSummary,
    options: SeedOptions,
    thresholds: Thresholds | None = None,
) -> list[str]:
    """Run every check and return the violation messages (empty when the corpus passes)."""
    thresholds = thresholds or Thresholds()
    violations: list[str] = []

    for label, path, option in TOTAL_CHECKS:
        expected = getattr(options, option)
        actual = _lookup(summary, path)
        if actual != expected:
            violations.append(f"Expected {expected} {label}, generated {actual}")

    for label, count_path, total_path, attr in RATIO_CHECKS:
        total = _lookup(summary, total_path)
        if total == 0 and total_path in OPTIONAL_DENOMINATORS:
            continue
        message = check_ratio(
            _lookup(summary, count_path), total, getattr(thresholds, attr), label
        )
        if message:
            violations.append(message)

    for label, path in POSITIVE_CHECKS:
        message = check_positive(_lookup(summary, path), label)
        if message:
            violations.append(message)

    return violations


def validate_summary(
    summary: GenerationSummary,
    options: SeedOptions,
    thresholds: Thresholds | None = None,
) -> None:
    """Raise CorpusQualityError listing every violated threshold."""
    violations = find_violations(summary, options, thresholds)
    if violations:
        raise CorpusQualityError(violations)
