"""
In-process record store for vigils.

Holds the identifier -> record mapping and its aggregate metadata. The whole
mapping is the unit of replication, so `snapshot()` and `restore()` speak
the same wire form that is pushed to and pulled from remote endpoints.
"""

import threading
import time
import uuid as uuid_module
from datetime import date as date_type
from typing import Any, Callable, Dict, List, Optional

from .schema import DEFAULT_ORGANIZER, RECORD_FIELDS, SnapshotMetadata, VigilRecord
from util.logging import logger


def generate_vigil_id() -> str:
    """Default identifier generator. Practically unique, not a security token."""
    return f"vigil-{uuid_module.uuid4().hex}"


def now_ms() -> int:
    return int(time.time() * 1000)


class VigilStore:
    """Owns every vigil record. All access is serialized by a re-entrant lock."""

    def __init__(self, id_generator: Callable[[], str] = generate_vigil_id, clock: Callable[[], int] = now_ms):
        self._vigils: Dict[str, VigilRecord] = {}
        self._metadata = SnapshotMetadata()
        self._id_generator = id_generator
        self._clock = clock
        self._lock = threading.RLock()

    def _recompute_metadata(self):
        self._metadata.last_updated = self._clock()
        self._metadata.total_vigils = len(self._vigils)

    def _new_id(self) -> str:
        vigil_id = self._id_generator()
        while vigil_id in self._vigils:
            vigil_id = self._id_generator()
        return vigil_id

    def create(self, fields: Dict[str, Any]) -> VigilRecord:
        """
        Insert a new vigil built from client fields.

        Server-assigned fields (`uuid`, `createdAt`) in `fields` are ignored.
        """
        extra = {k: v for k, v in fields.items() if k not in RECORD_FIELDS}
        with self._lock:
            record = VigilRecord(
                uuid=self._new_id(),
                zipcode=fields["zipcode"],
                location=fields["location"],
                date=fields["date"],
                time=fields["time"],
                created_at=self._clock(),
                description=fields.get("description"),
                contact=fields.get("contact"),
                organizer_name=fields.get("organizerName") or DEFAULT_ORGANIZER,
                extra=extra,
            )
            self._vigils[record.uuid] = record
            self._recompute_metadata()

        logger.log_vigil_operation("create", record.uuid, details={"zipcode": record.zipcode})
        return record

    def get(self, vigil_id: str) -> Optional[VigilRecord]:
        with self._lock:
            return self._vigils.get(vigil_id)

    def delete(self, vigil_id: str) -> bool:
        """Remove a vigil. Returns False when the identifier is unknown."""
        with self._lock:
            if vigil_id not in self._vigils:
                logger.log_vigil_operation("delete", vigil_id, status="not_found")
                return False
            del self._vigils[vigil_id]
            self._recompute_metadata()

        logger.log_vigil_operation("delete", vigil_id)
        return True

    def list_all(self) -> List[VigilRecord]:
        with self._lock:
            return list(self._vigils.values())

    def count(self) -> int:
        with self._lock:
            return len(self._vigils)

    def count_today(self, today: date_type = None) -> int:
        """Number of vigils whose date is the current local calendar date."""
        today_str = (today or date_type.today()).isoformat()
        with self._lock:
            return sum(1 for record in self._vigils.values() if record.date == today_str)

    @property
    def metadata(self) -> SnapshotMetadata:
        with self._lock:
            return SnapshotMetadata(self._metadata.last_updated, self._metadata.total_vigils)

    def snapshot(self) -> Dict[str, Any]:
        """Full store contents in wire form."""
        with self._lock:
            return {
                "vigils": {vigil_id: record.to_dict() for vigil_id, record in self._vigils.items()},
                "metadata": self._metadata.to_dict(),
            }

    def restore(self, snapshot: Dict[str, Any]) -> int:
        """
        Replace the store contents with a pulled snapshot.

        Entries without a uuid or zipcode are skipped, and a snapshot whose
        vigils are not a mapping loads as empty. Returns the number of vigils
        loaded.
        """
        entries = snapshot.get("vigils") or {}
        if not isinstance(entries, dict):
            logger.warning(f"Ignoring snapshot with malformed vigils: {type(entries).__name__}")
            entries = {}

        metadata = snapshot.get("metadata")
        if not isinstance(metadata, dict):
            metadata = {}

        vigils = {}
        for key, data in entries.items():
            if not isinstance(data, dict):
                continue
            data = dict(data)
            data.setdefault("uuid", key)
            try:
                record = VigilRecord.from_dict(data)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed vigil '{key}' in snapshot: {e}")
                continue
            vigils[record.uuid] = record

        last_updated = metadata.get("lastUpdated")
        with self._lock:
            self._vigils = vigils
            self._metadata = SnapshotMetadata(last_updated=last_updated, total_vigils=len(vigils))

        logger.log_operation("vigil.restore", "success", {"count": len(vigils)})
        return len(vigils)
