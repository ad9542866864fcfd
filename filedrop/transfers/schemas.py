from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional

class UploadOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    success: bool = True
    download_id: str = Field(alias="downloadId")
    file_count: int = Field(alias="fileCount")
    message: Optional[str] = None

class ErrorOut(BaseModel):
    success: bool = False
    error: str

class PingOut(BaseModel):
    success: bool = True
    message: str
    timestamp: datetime
