"""Golden-snapshot determinism check for the large fixture.

Seeds a throwaway directory with the canonical options, then compares the
normalised summary and the on-disk attachment manifest against
``fixtures/large/expected-summary.json`` and ``expected-attachments.json``.
``--update`` rewrites both files from a fresh run instead.
"""

import argparse
import hashlib
import json
import os
import shutil
import sqlite3
import sys
import tempfile
from pathlib import Path
from typing import Any, Callable

from household_seed.config import CORPUS_DIR, SNAPSHOT_DIR, SeedOptions
from household_seed.errors import FixtureError, SnapshotMismatchError
from household_seed.seed import run

SUMMARY_FILE = "expected-summary.json"
ATTACHMENTS_FILE = "expected-attachments.json"
CANONICAL_SEED = 42


def hash_file(path: Path) -> str:
    hasher = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1 << 16), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def collect_attachments(
    root_dir: Path, root_key: str, skip: Callable[[str], bool] | None = None
) -> list[dict[str, Any]]:
    """Walk ``root_dir`` and describe every file; missing roots yield nothing."""
    items: list[dict[str, Any]] = []
    if not root_dir.is_dir():
        return items

    for current, dirnames, filenames in os.walk(root_dir):
        rel_dir = Path(current).relative_to(root_dir)
        if skip:
            dirnames[:] = [d for d in dirnames if not skip((rel_dir / d).as_posix())]
        for name in filenames:
            relative = (rel_dir / name).as_posix()
            if skip and skip(relative):
                continue
            absolute = Path(current) / name
            items.append({
                "rootKey": root_key,
                "relativePath": relative,
                "size": absolute.stat().st_size,
                "sha256": hash_file(absolute),
            })

    items.sort(key=lambda item: (item["rootKey"], item["relativePath"]))
    return items


def build_manifest(options: SeedOptions) -> list[dict[str, Any]]:
    """Manifest of both storage roots, excluding the store and summary files."""
    db_name = options.db_path.name
    skipped = {options.attachments_dir.name}
    if options.summary_path is not None:
        skipped.add(options.summary_path.name)

    def skip_app_data(relative: str) -> bool:
        return relative in skipped or relative.startswith(db_name)

    manifest = collect_attachments(options.attachments_dir, "attachments")
    manifest += collect_attachments(options.app_data_dir, "appData", skip=skip_app_data)
    manifest.sort(key=lambda item: (item["rootKey"], item["relativePath"]))
    return manifest


def normalize_summary(summary: dict[str, Any]) -> dict[str, Any]:
    return {**summary, "database": "<normalized>"}


def canonical_options(work_dir: Path, **overrides: Any) -> SeedOptions:
    params: dict[str, Any] = {
        "db_path": work_dir / "arklowdun.sqlite3",
        "attachments_dir": work_dir / "attachments",
        "summary_path": work_dir / "summary.json",
        "corpus_dir": CORPUS_DIR,
        "seed": CANONICAL_SEED,
        "reset": True,
    }
    params.update(overrides)
    return SeedOptions(**params)


def capture(options: SeedOptions) -> tuple[dict[str, Any], list[dict[str, Any]]]:
    """Seed with ``options`` and return (normalised summary, attachment manifest)."""
    summary = run(options)
    return normalize_summary(summary.to_dict()), build_manifest(options)


def _first_mismatch(expected: list[dict], actual: list[dict]) -> str:
    for index, item in enumerate(actual):
        if index >= len(expected) or expected[index] != item:
            want = expected[index] if index < len(expected) else None
            return f"first mismatch at index {index}: expected {want}, actual {item}"
    return f"attachment list lengths differ: expected {len(expected)}, actual {len(actual)}"


def compare_to_snapshots(
    snapshot_dir: Path, summary: dict[str, Any], manifest: list[dict[str, Any]]
) -> None:
    """Raise SnapshotMismatchError describing the first difference found."""
    expected_summary = normalize_summary(
        json.loads((snapshot_dir / SUMMARY_FILE).read_text(encoding="utf-8"))
    )
    if expected_summary != summary:
        raise SnapshotMismatchError(
            "Large fixture summary does not match golden snapshot.\n"
            f"Expected:\n{json.dumps(expected_summary, indent=2)}\n"
            f"Actual:\n{json.dumps(summary, indent=2)}"
        )

    expected_manifest = json.loads((snapshot_dir / ATTACHMENTS_FILE).read_text(encoding="utf-8"))
    expected_manifest.sort(key=lambda item: (item["rootKey"], item["relativePath"]))
    if expected_manifest != manifest:
        raise SnapshotMismatchError(
            "Attachment corpus output does not match golden snapshot: "
            + _first_mismatch(expected_manifest, manifest)
        )


def write_snapshots(
    snapshot_dir: Path, summary: dict[str, Any], manifest: list[dict[str, Any]]
) -> None:
    snapshot_dir.mkdir(parents=True, exist_ok=True)
    stored = {**summary, "database": "/tmp/roundtrip.sqlite3"}
    (snapshot_dir / SUMMARY_FILE).write_text(json.dumps(stored, indent=2) + "\n", encoding="utf-8")
    (snapshot_dir / ATTACHMENTS_FILE).write_text(
        json.dumps(manifest, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
    )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="household-seed-snapshots",
        description="Verify (or --update) the large-fixture golden snapshots.",
    )
    parser.add_argument("--update", action="store_true", help="rewrite the golden files")
    parser.add_argument("--snapshot-dir", type=Path, default=SNAPSHOT_DIR)
    args = parser.parse_args(argv)

    keep_tmp = os.getenv("KEEP_LARGE_FIXTURE_TMP") == "1"
    work_dir = Path(tempfile.mkdtemp(prefix="arklowdun-fixture-"))
    try:
        summary, manifest = capture(canonical_options(work_dir))
        if args.update:
            write_snapshots(args.snapshot_dir, summary, manifest)
            print("Updated golden snapshots:")
            print(f" - {args.snapshot_dir / SUMMARY_FILE}")
            print(f" - {args.snapshot_dir / ATTACHMENTS_FILE}")
        else:
            compare_to_snapshots(args.snapshot_dir, summary, manifest)
            print("Large fixture determinism check passed.")
    except (FixtureError, sqlite3.Error, OSError) as e:
        print(f"household-seed-snapshots: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        if keep_tmp:
            print(f"Preserving temporary directory: {work_dir}", file=sys.stderr)
        else:
            shutil.rmtree(work_dir, ignore_errors=True)


if __name__ == "__main__":
    main()
