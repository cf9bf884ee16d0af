# src/storage/local_snapshot_store.py

"""Best-effort local copy of the most recent run record."""

import errno
import json
import logging
from pathlib import Path

from src.config.settings import Settings
from src.models.outcomes import LocalSaveStatus
from src.models.price_sample import RunRecord, records_from_json

logger = logging.getLogger("spot_tracker.local_store")


class LocalSnapshotStore:
    """Keeps the latest run on local disk, if the disk allows it.

    The snapshot is advisory only: it holds a single record, not the
    history, and a read-only filesystem is treated as a normal
    condition rather than an error.
    """

    def __init__(self, snapshot_path: Path | None = None) -> None:
        self.snapshot_path: Path = (
            snapshot_path or Settings.LOCAL_SNAPSHOT_PATH
        )

    def try_save(self, record: RunRecord) -> LocalSaveStatus:
        """Overwrite the snapshot file with *record*."""
        try:
            self.snapshot_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.snapshot_path, "w", encoding="utf-8") as f:
                json.dump(record.to_dict(), f, indent=2)
        except OSError as exc:
            if exc.errno == errno.EROFS:
                logger.info(
                    "Read-only filesystem, skipping local snapshot at %s",
                    self.snapshot_path,
                )
                return LocalSaveStatus.SKIPPED_READONLY
            logger.warning(
                "Could not write local snapshot %s: %s",
                self.snapshot_path,
                exc,
            )
            return LocalSaveStatus.FAILED

        logger.info(
            "Saved local snapshot to %s (%d regions)",
            self.snapshot_path,
            len(record.regions),
        )
        return LocalSaveStatus.SAVED

    def load_last(self) -> list[RunRecord]:
        """Return the snapshot as a one-element dataset.

        A JSON array (the legacy full-history file) is returned as-is.
        Missing or unreadable files yield an empty list.
        """
        if not self.snapshot_path.exists():
            return []
        try:
            with open(self.snapshot_path, encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, list):
                return records_from_json(data)
            return [RunRecord.from_dict(data)]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning(
                "Ignoring unreadable local snapshot %s: %s",
                self.snapshot_path,
                exc,
            )
            return []
