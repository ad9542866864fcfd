# filedrop/transfers/api.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import FileResponse, HTMLResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile as StarletteUploadFile

from filedrop.shared.config import Settings
from filedrop.shared.errors import Expired, InvalidInput, NotFound, StorageFailure
from filedrop.shared.http import ok, err
from filedrop.transfers.models import UploadPart
from filedrop.transfers.pages import expired_page, manifest_page, not_found_page
from filedrop.transfers.schemas import ErrorOut, UploadOut
from filedrop.transfers.service import SingleFile, TransferService

log = logging.getLogger(__name__)

router = APIRouter(tags=["Transfers"])

def get_service(request: Request) -> TransferService:
    return request.app.state.transfers

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def _send(f: SingleFile) -> FileResponse:
    return FileResponse(path=f.path, filename=f.display_name)

async def _incoming_files(request: Request) -> List[StarletteUploadFile]:
    # an HTML form with nothing chosen still sends a "files" part with an empty name
    form = await request.form()
    out = []
    for f in form.getlist("files"):
        if isinstance(f, StarletteUploadFile) and f.filename:
            out.append(f)
        elif isinstance(f, StarletteUploadFile):
            await f.close()
    return out

@router.post(
    "/api/upload",
    response_model=UploadOut,
    responses={400: {"model": ErrorOut}, 500: {"model": ErrorOut}},
)
async def upload(
    request: Request,
    email: Optional[str] = Form(default=None),
    message: Optional[str] = Form(default=None),
    service: TransferService = Depends(get_service),
):
    store = service.store
    parts: List[UploadPart] = []
    try:
        for f in await _incoming_files(request):
            parts.append(await store.save_upload(f))
    except StorageFailure as e:
        log.error("upload error: %s", e)
        for p in parts:
            store.discard(p)
        err(f"Server error: {e}", status=500)

    try:
        # commit moves files around; keep it off the event loop
        result = await run_in_threadpool(service.handle_upload, parts, email, message)
    except InvalidInput as e:
        err(str(e), status=400)
    except StorageFailure as e:
        log.error("upload error: %s", e)
        err(f"Server error: {e}", status=500)
    except Exception:
        for p in parts:
            store.discard(p)
        raise

    return ok(
        downloadId=result.download_id,
        fileCount=result.file_count,
        message="Files uploaded successfully!",
    )

@router.get("/download/{download_id}", response_class=HTMLResponse)
def download(
    download_id: str,
    service: TransferService = Depends(get_service),
    settings: Settings = Depends(get_settings),
):
    try:
        out = service.handle_download(download_id)
    except NotFound:
        return HTMLResponse(not_found_page(), status_code=404)
    except Expired:
        return HTMLResponse(expired_page(settings.RETENTION_DAYS), status_code=410)
    except StorageFailure as e:
        log.error("download %s failed: %s", download_id, e)
        return PlainTextResponse("Server error", status_code=500)

    # single file goes straight to the browser, several get a listing
    if isinstance(out, SingleFile):
        return _send(out)
    return HTMLResponse(manifest_page(out))

@router.get("/download-file/{download_id}/{stored_name}")
def download_file(
    download_id: str,
    stored_name: str,
    service: TransferService = Depends(get_service),
    settings: Settings = Depends(get_settings),
):
    try:
        f = service.handle_file_download(download_id, stored_name)
    except NotFound:
        return PlainTextResponse("File not found", status_code=404)
    except Expired:
        return HTMLResponse(expired_page(settings.RETENTION_DAYS), status_code=410)
    except StorageFailure as e:
        log.error("download %s/%s failed: %s", download_id, stored_name, e)
        return PlainTextResponse("Server error", status_code=500)
    return _send(f)
