"""
Submission API endpoints
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from pydantic.alias_generators import to_camel
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile as StarletteUploadFile

from applypdf.core.dependencies import get_application_service, get_container, valid_submission_id
from applypdf.core.errors import file_upload_error, not_found_error, validation_error
from applypdf.models import SubmissionStatus
from applypdf.schemas import (
    MessageResponse, SubmissionDetailResponse,
    SubmissionListResponse, SubmissionResult, UploadedFile, validate_application_form
)
from applypdf.services import ApplicationService
from applypdf.utils.validation import format_file_size

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/submissions", tags=["Submissions"])

FORM_FIELDS = ("firstName", "lastName", "email", "phone", "jobDescription")


async def _read_form(request: Request, max_file_size: int):
    form = await request.form()
    fields = {name: form.get(name) for name in FORM_FIELDS if isinstance(form.get(name), str)}

    uploaded = None
    file = form.get("file")
    if isinstance(file, StarletteUploadFile) and file.filename:
        # the multipart parser records the spooled size; refuse before loading it
        if file.size is not None and file.size > max_file_size:
            message = f"File size must be less than {format_file_size(max_file_size)}"
            raise file_upload_error(f"File validation failed: {message}", [message])
        content = await file.read()
        uploaded = UploadedFile(
            content=content,
            original_name=file.filename,
            mime_type=file.content_type or "application/octet-stream",
        )
    return fields, uploaded


async def _read_json(request: Request):
    try:
        body = await request.json()
    except ValueError:
        raise validation_error("Request body must be valid JSON")
    if not isinstance(body, dict):
        raise validation_error("Request body must be a JSON object")
    return body, None


@router.post("", response_model=SubmissionResult, status_code=status.HTTP_201_CREATED)
async def create_submission(
    request: Request,
    service: ApplicationService = Depends(get_application_service)
):
    """
    Submit an application and generate its PDF

    Accepts multipart/form-data (fields plus an optional 'file'), a urlencoded
    form, or JSON with firstName, lastName, email, phone and jobDescription.

    Returns:
        SubmissionResult: Submission id, download URL and status

    Raises:
        AppError: VALIDATION (errors keyed by the camelCase field name) or
            FILE_UPLOAD for rejected input
    """
    content_type = request.headers.get("content-type", "")
    if "multipart/form-data" in content_type or "application/x-www-form-urlencoded" in content_type:
        fields, uploaded = await _read_form(request, get_container(request).settings.MAX_FILE_SIZE)
    else:
        fields, uploaded = await _read_json(request)
    logger.info(f"Received submission ({'with' if uploaded else 'without'} attachment)")

    form, errors = validate_application_form(fields)
    if errors:
        errors = {to_camel(field): message for field, message in errors.items()}
        raise validation_error(f"Validation failed: {', '.join(errors.values())}", errors)

    return await run_in_threadpool(service.process_application, form, uploaded)


@router.get("", response_model=SubmissionListResponse)
def list_submissions(
    status_filter: SubmissionStatus = Query(..., alias="status", description="Filter by status"),
    page: Optional[int] = Query(None, description="Page number (1-based)"),
    limit: Optional[int] = Query(None, description="Items per page (max 100)"),
    service: ApplicationService = Depends(get_application_service)
):
    """List submissions in a given status, newest first"""
    result = service.list_submissions_by_status(status_filter, page, limit)
    return SubmissionListResponse(
        data=result.items,
        pagination=result.pagination(),
    )


@router.get("/{submission_id}", response_model=SubmissionDetailResponse)
def get_submission(
    submission_id: str = Depends(valid_submission_id),
    service: ApplicationService = Depends(get_application_service)
):
    """Get a submission with its owning user"""
    submission = service.get_submission(submission_id)
    if submission is None:
        raise not_found_error("Submission")
    return SubmissionDetailResponse(data=submission)


@router.delete("/{submission_id}", response_model=MessageResponse)
def delete_submission(
    submission_id: str = Depends(valid_submission_id),
    service: ApplicationService = Depends(get_application_service)
):
    """Delete a submission and its stored files"""
    service.delete_submission(submission_id)
    return MessageResponse(message="Submission deleted successfully")


@router.post("/{submission_id}/reprocess", response_model=SubmissionResult)
def reprocess_submission(
    submission_id: str = Depends(valid_submission_id),
    service: ApplicationService = Depends(get_application_service)
):
    """Regenerate a submission's PDF"""
    return service.reprocess_submission(submission_id)


@router.get("/{submission_id}/download")
def download_submission(
    submission_id: str = Depends(valid_submission_id),
    service: ApplicationService = Depends(get_application_service)
):
    """Download the generated PDF, regenerating it first if it is missing"""
    download = service.download_submission_pdf(submission_id)
    return Response(
        content=download.content,
        media_type=download.mime_type,
        headers={
            "Content-Disposition": f'attachment; filename="{download.file_name}"',
            "Cache-Control": "private, no-cache, no-store, must-revalidate",
            "Pragma": "no-cache",
            "Expires": "0",
        },
    )
