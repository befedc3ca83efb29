"""Exception hierarchy for the fixture seeder.

Every error the seeder raises on purpose derives from ``FixtureError`` so the
console scripts can turn it into a one-line message and a non-zero exit.
"""


class FixtureError(Exception):
    """Base class for all seeder failures."""


class ConfigurationError(FixtureError):
    """Bad option or environment value, raised before any side effect."""


class MissingInputError(FixtureError):
    """Attachment corpus or migrations directory is missing or empty."""


class SchemaMismatchError(FixtureError):
    """A target table is missing or none of the requested columns exist."""


class CorpusQualityError(FixtureError):
    """The generated corpus misses one or more coverage thresholds."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = list(violations)
        lines = "\n".join(f"  - {v}" for v in self.violations)
        super().__init__(
            f"Generated corpus failed {len(self.violations)} quality check(s):\n{lines}"
        )


class SnapshotMismatchError(FixtureError):
    """A fresh canonical run differs from the committed golden snapshots."""
