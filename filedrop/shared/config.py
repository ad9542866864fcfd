# filedrop/shared/config.py
from datetime import timedelta
from pydantic import BaseModel
import os

class Settings(BaseModel):
    ENV: str = os.getenv("ENV", "dev")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3000"))

    # where uploads live until they expire (tmp/ + uploads/ underneath)
    STORAGE_DIR: str = os.getenv("STORAGE_DIR", "storage")

    # transfers stay downloadable this long
    RETENTION_DAYS: int = int(os.getenv("RETENTION_DAYS", "7"))
    REAPER_INTERVAL_SECONDS: float = float(os.getenv("REAPER_INTERVAL_SECONDS", "3600"))

    @property
    def retention(self) -> timedelta:
        return timedelta(days=self.RETENTION_DAYS)

settings = Settings()
