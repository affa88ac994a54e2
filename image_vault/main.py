import logging
import re
from contextlib import asynccontextmanager
from typing import Any, Optional
from urllib.parse import quote

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from config import get_settings
from image_vault.db import init_db
from image_vault.dependencies import get_image_service, get_storage_client
from image_vault.exceptions import (
    ImageServiceError,
    InvalidRequestError,
    NotFoundError,
    UpstreamError,
)
from image_vault.schemas import ImageRecordResponse, ImageUpdateRequest, OrphanReportResponse
from image_vault.services import ImageService

# Get settings and configure logging before anything else
settings = get_settings()
settings.configure_logging()

# Create logger for this module
logger = logging.getLogger(__name__)

_ERROR_STATUS = {
    InvalidRequestError: 400,
    NotFoundError: 404,
    UpstreamError: 502,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown."""
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Object store endpoint: {settings.s3_endpoint_url}")
    logger.info(f"Image bucket: {settings.image_bucket}")

    init_db()
    get_storage_client().ensure_bucket(settings.image_bucket)

    yield

    # Shutdown
    logger.info("Shutting down application")


# Create FastAPI app with settings
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ImageServiceError)
async def image_service_error_handler(request: Request, exc: ImageServiceError) -> JSONResponse:
    """Render service errors as JSON with a matching status code."""
    status_code = _ERROR_STATUS.get(type(exc), 500)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 Bad Request."""
    logger.warning(f"{request.method} {request.url.path} invalid request: {exc.errors()}")
    return JSONResponse(status_code=400, content={"detail": "Invalid request body"})


_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def _content_disposition(file_name: str) -> str:
    """Build an attachment Content-Disposition header for a file name."""
    # Header values cannot carry CR/LF or other control characters
    file_name = _CONTROL_CHARS.sub("", file_name)
    escaped = file_name.replace("\\", "\\\\").replace('"', '\\"')
    try:
        escaped.encode("ascii")
    except UnicodeEncodeError:
        fallback = escaped.encode("ascii", "replace").decode("ascii")
        return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(file_name)}"
    return f'attachment; filename="{escaped}"'


@app.get("/health")
def health_check() -> dict[str, str]:
    """Simple health-check endpoint."""
    return {
        "status": "ok",
        "environment": settings.environment,
        "version": settings.app_version,
    }


@app.get("/config")
def get_config() -> dict[str, Any]:
    """Get current configuration (non-sensitive values only)."""
    return {
        "app_name": settings.app_name,
        "app_version": settings.app_version,
        "environment": settings.environment,
        "debug": settings.debug,
        "s3_endpoint_url": settings.s3_endpoint_url,
        "s3_region": settings.s3_region,
        "image_bucket": settings.image_bucket,
        "default_owner": settings.default_owner,
        "log_level": settings.log_level,
        "log_json": settings.log_json,
        "max_upload_size": settings.max_upload_size,
    }


@app.post("/images", response_model=ImageRecordResponse, status_code=201)
async def upload_image(
    request: Request,
    image_service: ImageService = Depends(get_image_service),
) -> ImageRecordResponse:
    """Upload an image file.

    The first file part of the multipart form is stored, whatever its field
    name. An optional ``owner`` form field sets the owner label.
    The content is stored in the object store under a new random id, then
    the metadata record is created.

    Args:
        request: The incoming multipart request.
        image_service: Service for image record operations.

    Returns:
        ImageRecordResponse: The created record.

    Raises:
        HTTPException: If the file exceeds the upload size limit.
    """
    content = None
    file_name = ""
    async with request.form() as form:
        owner = form.get("owner")
        if not isinstance(owner, str):
            owner = None

        file: Optional[UploadFile] = next(
            (value for _, value in form.multi_items() if isinstance(value, UploadFile)),
            None,
        )
        if file is not None:
            if file.size is not None and file.size > settings.max_upload_size:
                raise HTTPException(status_code=413, detail="File too large")
            content = await file.read()
            file_name = file.filename or ""

    if content is not None and len(content) > settings.max_upload_size:
        raise HTTPException(status_code=413, detail="File too large")

    record = await run_in_threadpool(image_service.upload, file_name, content, owner)
    return ImageRecordResponse.model_validate(record)


@app.get("/maintenance/orphans", response_model=OrphanReportResponse, tags=["maintenance"])
def list_orphans(
    image_service: ImageService = Depends(get_image_service),
) -> OrphanReportResponse:
    """Report stored content without records and records without content.

    Nothing is deleted; the report is meant for manual reconciliation.
    """
    report = image_service.find_orphans()
    return OrphanReportResponse(
        orphan_blobs=report.orphan_blobs,
        dangling_records=report.dangling_records,
        count=report.count,
    )


@app.get("/images/{image_id}")
def get_image(
    image_id: str,
    image_service: ImageService = Depends(get_image_service),
) -> Response:
    """Download an image as an attachment under its original file name."""
    download = image_service.fetch(image_id)
    logger.info(f"Returning image {image_id} ({len(download.content)} bytes)")
    # Set directly so text/* types are not given a charset
    return Response(
        content=download.content,
        headers={
            "Content-Type": download.content_type,
            "Content-Disposition": _content_disposition(download.record.file_name),
        },
    )


@app.patch("/images/{image_id}", response_model=ImageRecordResponse)
def update_image(
    image_id: str,
    payload: ImageUpdateRequest,
    image_service: ImageService = Depends(get_image_service),
) -> ImageRecordResponse:
    """Change the file name and/or owner of an image record."""
    if not payload.has_changes():
        raise InvalidRequestError("No valid data provided for update")
    record = image_service.update(image_id, file_name=payload.file_name, owner=payload.owner)
    return ImageRecordResponse.model_validate(record)


@app.delete("/images/{image_id}")
def delete_image(
    image_id: str,
    image_service: ImageService = Depends(get_image_service),
) -> Response:
    """Delete an image's content and record. Unknown ids are not an error."""
    image_service.delete(image_id)
    return Response(status_code=200)


@app.get("/images/{image_id}/view", response_class=HTMLResponse)
def view_image(image_id: str) -> HTMLResponse:
    """Minimal page embedding the image."""
    return HTMLResponse(f'<img src="/images/{quote(image_id)}" alt="image">')
