from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional
import logging

from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, JSONResponse

from filedrop.shared.config import Settings, settings as default_settings
from filedrop.shared.http import ApiError, error_body, ok
from filedrop.shared.logs import configure_logging
from filedrop.transfers.api import router as transfers_router
from filedrop.transfers.reaper import RetentionReaper
from filedrop.transfers.registry import TransferRegistry, utcnow
from filedrop.transfers.schemas import PingOut
from filedrop.transfers.service import TransferService
from filedrop.transfers.storage import ContentStore

log = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"

TAGS_METADATA = [
    {"name": "Transfers", "description": "Upload files, share the link, download before it expires"},
    {"name": "Health", "description": "Service health"},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    cfg: Settings = app.state.settings
    log.info("file transfer app started")
    log.info("files will be stored in: %s", app.state.store.uploads_dir)
    log.info("files auto-delete after %d days", cfg.RETENTION_DAYS)
    app.state.reaper.start()
    try:
        yield
    finally:
        await app.state.reaper.stop()


def create_app(
    settings: Optional[Settings] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    cfg = settings or default_settings
    configure_logging(cfg.LOG_LEVEL)

    store = ContentStore(cfg.STORAGE_DIR)
    registry = TransferRegistry(store, retention=cfg.retention, clock=clock or utcnow)

    app = FastAPI(
        title="filedrop",
        version="0.1.0",
        description="Upload files, get a link, share it for a limited time.",
        openapi_tags=TAGS_METADATA,
        lifespan=lifespan,
    )
    # one registry per app instance; handlers and the reaper share it
    app.state.settings = cfg
    app.state.store = store
    app.state.registry = registry
    app.state.transfers = TransferService(registry, store)
    app.state.reaper = RetentionReaper(registry, interval=cfg.REAPER_INTERVAL_SECONDS)

    @app.exception_handler(ApiError)
    async def _api_error(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status, content=error_body(exc.message))

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception):
        log.exception("unhandled error on %s", request.url.path)
        # only leak the message in dev
        message = f"Server error: {exc}" if cfg.ENV == "dev" else "Server error"
        return JSONResponse(status_code=500, content=error_body(message))

    @app.get("/", include_in_schema=False)
    def home():
        return FileResponse(STATIC_DIR / "index.html")

    @app.get("/api/test", response_model=PingOut, tags=["Health"])
    def api_test():
        return ok(
            message="Server is working perfectly!",
            timestamp=datetime.now(timezone.utc),
        )

    app.include_router(transfers_router)
    return app


app = create_app()


def run():
    import uvicorn

    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)
