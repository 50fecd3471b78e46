"""
File-backed record store for relayed posts.

The whole store is a single JSON array. Writes go to ``<path>.tmp`` first and
are moved into place with ``os.replace`` so readers only ever see a complete
document. One lock serialises every load and save.
"""
from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import List, Sequence

from pydantic import TypeAdapter, ValidationError

from relay.models import Record

logger = logging.getLogger(__name__)

_RECORDS = TypeAdapter(List[Record])


class RecordStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    @property
    def temp_path(self) -> Path:
        return self.path.with_name(self.path.name + ".tmp")

    @property
    def corrupt_path(self) -> Path:
        return self.path.with_name(self.path.name + ".corrupt")

    def load(self) -> List[Record]:
        with self._lock:
            return self._read()

    def save(self, records: Sequence[Record]) -> bool:
        payload = json.dumps(
            _RECORDS.dump_python(list(records), mode="json"),
            indent=4,
            ensure_ascii=False,
        )
        with self._lock:
            return self._write(payload, len(records))

    def _read(self) -> List[Record]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("Data file %s not found. Starting fresh.", self.path)
            return []
        except OSError as exc:
            logger.error("Error loading data from %s: %s", self.path, exc)
            return []

        if not raw.strip():
            logger.info("Data file %s is empty. Starting fresh.", self.path)
            return []

        try:
            blob = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("Data file %s is not valid JSON (%s). Starting fresh.", self.path, exc)
            self._keep_copy(raw)
            return []

        if not isinstance(blob, list):
            logger.error("Data in %s is not an array. Starting fresh.", self.path)
            self._keep_copy(raw)
            return []

        records: List[Record] = []
        skipped = 0
        for index, entry in enumerate(blob):
            try:
                records.append(Record.model_validate(entry))
            except ValidationError as exc:
                skipped += 1
                logger.error(
                    "Skipping entry %d in %s: does not match the record layout (%d errors)",
                    index,
                    self.path,
                    exc.error_count(),
                )
        if skipped:
            self._keep_copy(raw)

        logger.info("Successfully loaded %d items from %s", len(records), self.path)
        return records

    def _write(self, payload: str, count: int) -> bool:
        tmp_path = self.temp_path
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self.path)
        except OSError as exc:
            logger.error("Error saving data to %s: %s", self.path, exc)
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError as cleanup_exc:
                logger.debug("Could not remove temp file %s: %s", tmp_path, cleanup_exc)
            return False

        logger.info("Data successfully saved to %s (%d items)", self.path, count)
        return True

    def _keep_copy(self, raw: str) -> None:
        """Copy an unreadable or partly readable document aside before a later save replaces it."""
        try:
            self.corrupt_path.write_text(raw, encoding="utf-8")
        except OSError as exc:
            logger.error("Could not keep a copy of %s at %s: %s", self.path, self.corrupt_path, exc)
            return
        logger.warning("Original content of %s kept at %s", self.path, self.corrupt_path)
