"""
User API endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from applypdf.core.dependencies import get_application_service, valid_user_id
from applypdf.schemas import SubmissionListResponse
from applypdf.services import ApplicationService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/{user_id}/submissions", response_model=SubmissionListResponse)
def list_user_submissions(
    user_id: str = Depends(valid_user_id),
    page: Optional[int] = Query(None, description="Page number (1-based)"),
    limit: Optional[int] = Query(None, description="Items per page (max 100)"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    service: ApplicationService = Depends(get_application_service)
):
    """
    List a user's submissions

    Args:
        user_id: Owning user
        page: Page number, default 1
        limit: Page size, default 10 and clamped to 100
        sort_by: createdAt, updatedAt, firstName, lastName, email or status
        sort_order: asc or desc

    Raises:
        AppError: NOT_FOUND for unknown users, VALIDATION for bad paging
    """
    result = service.list_user_submissions(user_id, page, limit, sort_by, sort_order)
    return SubmissionListResponse(
        data=result.items,
        pagination=result.pagination(),
    )
