"""
WellNest Backend — Image Upload Routes
=======================================

What:  Upload, inspect and delete images used by events and practitioners.
Who:   Admin accounts only (role check, not a permission check).

Request Flow (POST):
    1. Guard: role must be admin
    2. The body is bounded before parsing: a Content-Length above
       max_bytes + MULTIPART_ALLOWANCE is refused with 413 without reading it,
       and a streamed body is cut off with 413 once it passes that bound
    3. The multipart form is parsed here rather than through `File(...)` so the
       three client mistakes get their own messages:
           file under a field other than "image" → 400 "Unexpected field name for file upload."
           more than one file                    → 400 "Too many files. Only one file is allowed."
           no file                               → 400 "No image file uploaded"
    4. Parts are held in memory: the spool threshold is the body bound, so a
       rejected upload never reaches a temporary file on disk
    5. UploadService validates MIME type, size and content, then writes the file

GET/DELETE /api/upload/{filename}:
    The filename is checked for "..", "/" and "\\" before the filesystem is touched.
"""

import logging
from typing import AsyncIterator, List

from fastapi import APIRouter, Depends, Request, status
from starlette.datastructures import FormData, UploadFile
from starlette.formparsers import MultiPartException, MultiPartParser

from app.dependencies import require_roles
from app.exceptions import PayloadTooLargeError, ValidationError
from app.models.enums import Role
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.upload import ImageInfoResponse, UploadResponse
from app.services.authorization import Principal
from app.services.upload_service import upload_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["Uploads"])

FILE_FIELD = "image"

# Boundaries, part headers and small text fields around the file part
MULTIPART_ALLOWANCE = 64 * 1024

_errors = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    413: {"model": ErrorResponse},
}

require_admin = require_roles(Role.ADMIN)


def _body_limit() -> int:
    return upload_service.max_bytes + MULTIPART_ALLOWANCE


def _check_declared_length(request: Request) -> None:
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > _body_limit():
        raise PayloadTooLargeError(
            upload_service.max_bytes, context={"content_length": int(declared)}
        )


async def _bounded_stream(request: Request, limit: int) -> AsyncIterator[bytes]:
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise PayloadTooLargeError(upload_service.max_bytes, context={"received": received})
        yield chunk


async def _read_form(request: Request) -> FormData:
    _check_declared_length(request)
    content_type = request.headers.get("content-type", "").lower()
    if not content_type.startswith("multipart/form-data"):
        raise ValidationError("No image file uploaded", field=FILE_FIELD)

    limit = _body_limit()
    parser = MultiPartParser(request.headers, _bounded_stream(request, limit))
    parser.spool_max_size = limit
    try:
        return await parser.parse()
    except MultiPartException as e:
        raise ValidationError(e.message, field=FILE_FIELD)


async def _single_image(request: Request) -> UploadFile:
    form = await _read_form(request)
    files: List[UploadFile] = []
    for key, value in form.multi_items():
        if not isinstance(value, UploadFile):
            continue
        if key != FILE_FIELD:
            await form.close()
            raise ValidationError("Unexpected field name for file upload.", field=key)
        files.append(value)

    if len(files) > 1:
        await form.close()
        raise ValidationError("Too many files. Only one file is allowed.", field=FILE_FIELD)
    if not files:
        await form.close()
        raise ValidationError("No image file uploaded", field=FILE_FIELD)
    return files[0]


async def _store_upload(request: Request, purpose: str) -> UploadResponse:
    upload = await _single_image(request)
    try:
        content = await upload.read(upload_service.max_bytes + 1)
        result = await upload_service.save_image(
            content=content,
            original_name=upload.filename,
            content_type=upload.content_type,
            field=FILE_FIELD,
        )
    finally:
        await upload.close()
    logger.info("%s image uploaded: %s", purpose, result.filename)
    return UploadResponse(data=result)


@router.post(
    "/event-image",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_errors,
    summary="Upload an event image (field: image)",
)
async def upload_event_image(request: Request, _: Principal = Depends(require_admin)):
    return await _store_upload(request, "Event")


@router.post(
    "/practitioner-image",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_errors,
    summary="Upload a practitioner image (field: image)",
)
async def upload_practitioner_image(request: Request, _: Principal = Depends(require_admin)):
    return await _store_upload(request, "Practitioner")


@router.get("/{filename}", response_model=ImageInfoResponse, responses=_errors)
async def image_info(filename: str, _: Principal = Depends(require_admin)):
    return ImageInfoResponse(data=await upload_service.image_info(filename))


@router.delete("/{filename}", response_model=MessageResponse, responses=_errors)
async def delete_image(filename: str, _: Principal = Depends(require_admin)):
    await upload_service.delete_image(filename)
    return MessageResponse(message="Image deleted successfully")
