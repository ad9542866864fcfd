import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Sequence, Union
from pydantic import BaseModel
from urllib.parse import quote

from filedrop.shared.errors import InvalidInput, StorageFailure
from filedrop.transfers.models import FileRecord, UploadPart
from filedrop.transfers.registry import TransferRegistry
from filedrop.transfers.storage import ContentStore

log = logging.getLogger(__name__)

SIZE_UNITS = ("Bytes", "KB", "MB", "GB")
CENTS = Decimal("0.01")

def format_size(n: int) -> str:
    """Human readable size, base 1024: 1536 -> '1.5 KB'. No unit above GB."""
    if n == 0:
        return "0 Bytes"
    # floor(log_1024(n)) without float error
    i = min((n.bit_length() - 1) // 10, len(SIZE_UNITS) - 1)
    # half up, like toFixed(2) on exact ties (1152 -> 1.13 KB)
    value = float((Decimal(n) / Decimal(1024 ** i)).quantize(CENTS, rounding=ROUND_HALF_UP))
    if value == int(value):
        value = int(value)
    return f"{value} {SIZE_UNITS[i]}"

def download_url(download_id: str, stored_name: str) -> str:
    return f"/download-file/{quote(download_id, safe='')}/{quote(stored_name, safe='')}"


class UploadResult(BaseModel):
    download_id: str
    file_count: int

class SingleFile(BaseModel):
    path: str
    display_name: str

class ManifestEntry(BaseModel):
    download_url: str
    display_name: str
    size: str

class Manifest(BaseModel):
    download_id: str
    entries: List[ManifestEntry]


class TransferService:
    def __init__(self, registry: TransferRegistry, store: ContentStore):
        self.registry = registry
        self.store = store

    def handle_upload(
        self,
        parts: Sequence[UploadPart],
        email: str | None = None,
        message: str | None = None,
    ) -> UploadResult:
        if not parts:
            raise InvalidInput("Please select files to upload")
        log.info("upload received: %d file(s)", len(parts))

        committed: List[FileRecord] = []
        try:
            for part in parts:
                committed.append(self.store.commit(part))
        except StorageFailure:
            # leave nothing behind for a batch that never got an id
            for rec in committed:
                self.store.delete(rec.storage_path)
            for part in parts[len(committed):]:
                self.store.discard(part)
            raise

        download_id = self.registry.create(committed, email=email or None, message=message or None)
        log.info("upload successful: %s", download_id)
        return UploadResult(download_id=download_id, file_count=len(committed))

    def handle_download(self, download_id: str) -> Union[SingleFile, Manifest]:
        rec = self.registry.resolve(download_id)
        if len(rec.files) == 1:
            return self._single(rec.files[0])
        entries = [
            ManifestEntry(
                download_url=download_url(download_id, f.stored_name),
                display_name=f.original_name,
                size=format_size(f.size_bytes),
            )
            for f in rec.files
        ]
        return Manifest(download_id=download_id, entries=entries)

    def handle_file_download(self, download_id: str, stored_name: str) -> SingleFile:
        return self._single(self.registry.resolve_file(download_id, stored_name))

    def _single(self, f: FileRecord) -> SingleFile:
        if not self.store.exists(f.storage_path):
            raise StorageFailure(f"stored content missing for {f.stored_name}")
        return SingleFile(path=f.storage_path, display_name=f.original_name)
