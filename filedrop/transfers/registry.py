import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Sequence

from filedrop.shared.errors import Expired, InvalidInput, NotFound, StorageFailure
from filedrop.shared.ids import generate_id
from filedrop.transfers.models import FileRecord, TransferRecord
from filedrop.transfers.storage import ContentStore

log = logging.getLogger(__name__)

DEFAULT_RETENTION = timedelta(days=7)

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransferRegistry:
    """
    In-memory mapping download id -> TransferRecord.

    Records are inserted and removed whole. Removing a record, whether through
    expiry on lookup, a sweep or an explicit delete, also deletes its stored
    content. The lock only covers the mapping; content deletion happens after
    the entry is gone and outside the lock.
    """

    def __init__(
        self,
        store: ContentStore,
        retention: timedelta = DEFAULT_RETENTION,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = generate_id,
    ):
        self.store = store
        self.retention = retention
        self.clock = clock
        self.id_factory = id_factory
        self._records: Dict[str, TransferRecord] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, download_id: str) -> bool:
        with self._lock:
            return download_id in self._records

    def create(
        self,
        files: Sequence[FileRecord],
        email: str | None = None,
        message: str | None = None,
    ) -> str:
        if not files:
            raise InvalidInput("Please select files to upload")
        now = self.clock()
        rec = TransferRecord(
            files=tuple(files),
            email=email,
            message=message,
            created_at=now,
            expires_at=now + self.retention,
        )
        with self._lock:
            download_id = self.id_factory()
            while download_id in self._records:
                log.warning("download id collision, drawing a new one")
                download_id = self.id_factory()
            self._records[download_id] = rec
        return download_id

    def resolve(self, download_id: str) -> TransferRecord:
        now = self.clock()
        with self._lock:
            rec = self._records.get(download_id)
            if rec is None:
                raise NotFound(download_id)
            if not rec.is_expired(now):
                return rec
            del self._records[download_id]
        log.info("transfer %s expired on lookup", download_id)
        self._purge(download_id, rec)
        raise Expired(download_id)

    def resolve_file(self, download_id: str, stored_name: str) -> FileRecord:
        rec = self.resolve(download_id)
        f = rec.find(stored_name)
        if f is None:
            raise NotFound(f"{download_id}/{stored_name}")
        return f

    def delete(self, download_id: str) -> bool:
        with self._lock:
            rec = self._records.pop(download_id, None)
        if rec is None:
            return False
        self._purge(download_id, rec)
        return True

    def sweep_expired(self, now: datetime | None = None) -> int:
        now = now or self.clock()
        with self._lock:
            expired = [(k, r) for k, r in self._records.items() if r.is_expired(now)]
            for k, _ in expired:
                del self._records[k]
        for k, r in expired:
            self._purge(k, r)
        if expired:
            log.info("swept %d expired transfer(s)", len(expired))
        return len(expired)

    def _purge(self, download_id: str, rec: TransferRecord) -> None:
        # best effort: one failed delete must not stop the others
        for f in rec.files:
            try:
                self.store.delete(f.storage_path)
            except StorageFailure as e:
                log.warning("transfer %s: %s", download_id, e)
