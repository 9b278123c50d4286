"""
Pydantic schemas for ApplyPDF API
"""
from applypdf.schemas.user import UserCreate, UserUpdate, UserRecord
from applypdf.schemas.submission import (
    SubmissionCreate, SubmissionRecord, Page, SubmissionResult,
    SubmissionDetailResponse, SubmissionListResponse, MessageResponse
)
from applypdf.schemas.application import (
    ApplicationForm, UploadedFile, UploadedFileInfo, PdfDownload,
    form_errors, validate_application_form
)

__all__ = [
    # User schemas
    "UserCreate", "UserUpdate", "UserRecord",
    # Submission schemas
    "SubmissionCreate", "SubmissionRecord", "Page", "SubmissionResult",
    "SubmissionDetailResponse", "SubmissionListResponse", "MessageResponse",
    # Application schemas
    "ApplicationForm", "UploadedFile", "UploadedFileInfo", "PdfDownload",
    "form_errors", "validate_application_form"
]
