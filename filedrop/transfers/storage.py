import logging
import os
import secrets
import time
import uuid
from pathlib import Path

from fastapi import UploadFile

from filedrop.shared.errors import StorageFailure
from filedrop.transfers.models import FileRecord, UploadPart

log = logging.getLogger(__name__)

CHUNK = 1024 * 1024
JITTER = 10**9
MAX_NAME_ATTEMPTS = 5

def _safe_name(name: str) -> str:
    # browsers on Windows may send full paths
    return Path(name.replace("\\", "/")).name or "upload.bin"

def stored_name_for(original_name: str) -> str:
    """<epoch-millis>-<jitter><ext>, keeping the original extension."""
    ext = Path(_safe_name(original_name)).suffix
    return f"{int(time.time() * 1000)}-{secrets.randbelow(JITTER)}{ext}"


class ContentStore:
    """
    Local disk content for transfers.

    ``tmp/`` receives parts while a request body is decoded, ``uploads/`` holds
    committed content addressed by stored name.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()
        self.tmp_dir = self.root / "tmp"
        self.uploads_dir = self.root / "uploads"
        self.tmp_dir.mkdir(parents=True, exist_ok=True)
        self.uploads_dir.mkdir(parents=True, exist_ok=True)

    async def save_upload(self, file: UploadFile) -> UploadPart:
        """
        Stream an incoming part to tmp/ and return its UploadPart.
        Raises StorageFailure if the disk write fails.
        """
        fname = _safe_name(file.filename or "upload.bin")
        target = self.tmp_dir / uuid.uuid4().hex
        size = 0
        try:
            with target.open("wb") as out:
                while True:
                    chunk = await file.read(CHUNK)
                    if not chunk:
                        break
                    size += len(chunk)
                    out.write(chunk)
        except OSError as e:
            target.unlink(missing_ok=True)
            raise StorageFailure(f"could not write upload {fname!r}: {e}") from e
        finally:
            await file.close()
        return UploadPart(original_name=fname, temp_path=str(target), size_bytes=size)

    def commit(self, part: UploadPart) -> FileRecord:
        """Move a temp part into uploads/ under a fresh stored name."""
        for _ in range(MAX_NAME_ATTEMPTS):
            stored = stored_name_for(part.original_name)
            dest = self.uploads_dir / stored
            if dest.exists():
                continue
            try:
                os.replace(part.temp_path, dest)
            except OSError as e:
                raise StorageFailure(f"could not store {part.original_name!r}: {e}") from e
            return FileRecord(
                original_name=part.original_name,
                stored_name=stored,
                storage_path=str(dest),
                size_bytes=part.size_bytes,
            )
        raise StorageFailure(f"no free stored name for {part.original_name!r}")

    def exists(self, path: str) -> bool:
        return Path(path).is_file()

    def delete(self, path: str) -> None:
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as e:
            raise StorageFailure(f"could not delete {path}: {e}") from e

    def discard(self, part: UploadPart) -> None:
        try:
            Path(part.temp_path).unlink(missing_ok=True)
        except OSError as e:
            log.warning("could not remove temp upload %s: %s", part.temp_path, e)
