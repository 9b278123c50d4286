"""
Pydantic schemas for Submission records and API responses
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from applypdf.models.submission import SubmissionStatus
from applypdf.schemas.user import UserRecord

T = TypeVar("T")

_camel_config = ConfigDict(
    from_attributes=True,
    alias_generator=to_camel,
    populate_by_name=True
)


class SubmissionCreate(BaseModel):
    """Schema for creating a new submission"""
    user_id: str
    job_description: str
    status: SubmissionStatus = SubmissionStatus.PENDING
    uploaded_file_name: Optional[str] = None
    uploaded_file_path: Optional[str] = None
    uploaded_file_size: Optional[int] = None
    uploaded_file_mime_type: Optional[str] = None


class SubmissionRecord(BaseModel):
    """Detached submission record with its owning user"""
    id: str
    user_id: str
    job_description: str
    status: SubmissionStatus
    generated_pdf_path: Optional[str] = None
    uploaded_file_name: Optional[str] = None
    uploaded_file_path: Optional[str] = None
    uploaded_file_size: Optional[int] = None
    uploaded_file_mime_type: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    user: Optional[UserRecord] = None

    model_config = _camel_config


class Page(BaseModel, Generic[T]):
    """One page of a paginated listing"""
    items: List[T]
    total: int
    page: int
    limit: int

    model_config = _camel_config

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit

    def pagination(self) -> dict:
        """Pagination metadata in the API's camelCase shape"""
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
            "hasNext": self.page < self.total_pages,
            "hasPrev": self.page > 1,
        }


class SubmissionResult(BaseModel):
    """Outcome of processing or reprocessing a submission"""
    success: bool = True
    submission_id: str
    pdf_download_url: str
    status: SubmissionStatus

    model_config = _camel_config


class SubmissionDetailResponse(BaseModel):
    """Response wrapper for a single submission"""
    success: bool = True
    data: SubmissionRecord


class SubmissionListResponse(BaseModel):
    """Paginated submissions response"""
    success: bool = True
    data: List[SubmissionRecord]
    pagination: dict = Field(default_factory=dict)


class MessageResponse(BaseModel):
    success: bool = True
    message: str
