from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Tuple


class UploadPart(BaseModel):
    """One decoded multipart file part, still sitting in the temp area."""
    model_config = ConfigDict(frozen=True)
    original_name: str
    temp_path: str
    size_bytes: int = Field(ge=0)


class FileRecord(BaseModel):
    model_config = ConfigDict(frozen=True)
    original_name: str  # untrusted, display/download name only
    stored_name: str    # generated, addressable name
    storage_path: str
    size_bytes: int = Field(ge=0)


class TransferRecord(BaseModel):
    model_config = ConfigDict(frozen=True)
    files: Tuple[FileRecord, ...] = Field(min_length=1)
    email: Optional[str] = None
    message: Optional[str] = None
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        # the one comparison shared by lookup-time expiry and the reaper sweep
        return self.expires_at < now

    def find(self, stored_name: str) -> FileRecord | None:
        for f in self.files:
            if f.stored_name == stored_name:
                return f
        return None
