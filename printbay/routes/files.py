# printbay/routes/files.py
import logging
from uuid import uuid4

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile

from printbay.config.settings import Settings
from printbay.core.exceptions import UploadRejected
from printbay.dependencies import get_settings_dep, get_storage
from printbay.schemas.files import FileUploadResponse
from printbay.services.storage import StorageService
from printbay.utils.files import SUPPORTED_EXTENSIONS, is_valid_model_file
from printbay.utils.hashing import now_ms
from printbay.utils.responses import json_errors, success_response

router = APIRouter()
log = logging.getLogger("uvicorn.error")

CHUNK_SIZE = 1024 * 1024  # 1 MiB


def _reject(status_code: int, message: str, name: str = "", size: int = 0, ctype: str = "") -> UploadRejected:
    # fileId stays empty on every rejection
    return UploadRejected(
        status_code,
        message,
        {"fileId": "", "fileName": name, "fileSize": size, "fileType": ctype},
    )


async def _read_capped(upload: UploadFile, limit: int) -> bytes:
    """Read the upload in chunks; stop as soon as it passes `limit`."""
    chunks = []
    total = 0
    while True:
        chunk = await upload.read(CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > limit:
            raise _reject(
                413,
                f"File too large. Maximum size is {limit // (1024 * 1024)}MB",
                upload.filename or "",
                upload.size or total,
                upload.content_type or "",
            )
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("/files-upload", response_model=FileUploadResponse)
@json_errors("File upload failed")
async def upload_file(
    request: Request,
    storage: StorageService = Depends(get_storage),
    settings: Settings = Depends(get_settings_dep),
):
    content_type = request.headers.get("content-type", "")
    if not content_type.lower().startswith("multipart/form-data"):
        raise _reject(400, "Content-Type must be multipart/form-data")
    if "boundary=" not in content_type:
        raise _reject(400, "Missing multipart boundary")

    form = await request.form()
    upload = form.get("file")
    if not isinstance(upload, UploadFile):
        raise _reject(400, "No file provided")

    name = upload.filename or ""
    ctype = upload.content_type or ""
    limit = settings.max_upload_bytes

    # Size is checked before type: an oversized .txt is a 413, not a 415
    if upload.size is not None and upload.size > limit:
        raise _reject(413, f"File too large. Maximum size is {limit // (1024 * 1024)}MB", name, upload.size, ctype)
    data = await _read_capped(upload, limit)
    size = len(data)

    if not is_valid_model_file(name):
        raise _reject(
            415,
            f"Unsupported file type. Supported formats: {', '.join(SUPPORTED_EXTENSIONS)}",
            name,
            size,
            ctype,
        )

    file_id = str(uuid4())
    customer_id = request.headers.get("x-customer-id") or f"anonymous-{now_ms()}"
    log.info("[upload] customer=%s file=%s size=%d", customer_id, name, size)

    url = await storage.upload(data, name, file_id, customer_id)
    return success_response(
        FileUploadResponse(
            success=True,
            file_id=file_id,
            upload_url=url,
            file_name=name,
            file_size=size,
            file_type=ctype,
        )
    )
