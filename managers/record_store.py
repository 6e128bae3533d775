"""Mint record store for tracking mint attempts"""

import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

from models.errors import RecordStoreWriteFailed
from models.mint import MintRecord

logger = logging.getLogger("MCP_Server")


class MintRecordStore:
    """Keyed store of MintRecord by request_id.

    Backed by a JSON file when a path is given, in-memory otherwise. Records
    are never deleted here.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None
        self._records: Dict[str, MintRecord] = {}
        self._lock = threading.Lock()
        if self.path:
            self._records = self._load()
        logger.info(f"Initialized MintRecordStore ({self.path or 'in-memory'}, {len(self._records)} records)")

    def _load(self) -> Dict[str, MintRecord]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to read mint records from {self.path}, starting empty: {e}")
            return {}

        records = {}
        for request_id, data in raw.items():
            try:
                records[request_id] = MintRecord.from_dict(data)
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping malformed mint record {request_id}: {e}")
        return records

    def _flush(self, records: Dict[str, MintRecord]):
        # Atomic write: write to temp file then rename
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump({key: record.to_dict() for key, record in records.items()}, f, indent=2)
            temp_path.replace(self.path)
        except (OSError, TypeError, ValueError) as e:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    pass
            raise RecordStoreWriteFailed(f"Failed to write mint records to {self.path}: {e}") from e

    def upsert(self, record: MintRecord) -> MintRecord:
        """Insert or overwrite the record for record.request_id.

        created_at of an existing record is preserved.

        Raises:
            RecordStoreWriteFailed: If the backing file cannot be written
        """
        with self._lock:
            existing = self._records.get(record.request_id)
            if existing:
                record.created_at = existing.created_at
            record.updated_at = datetime.utcnow()

            records = dict(self._records)
            records[record.request_id] = record
            if self.path:
                self._flush(records)
            self._records = records

        logger.debug(f"Upserted mint record {record.request_id} (status={record.status})")
        return record

    def get(self, request_id: str) -> Optional[MintRecord]:
        return self._records.get(request_id)

    def list_records(self, status: Optional[str] = None) -> List[MintRecord]:
        records = sorted(self._records.values(), key=lambda r: r.created_at)
        if status:
            records = [r for r in records if r.status == status]
        return records
