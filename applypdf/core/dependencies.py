"""
FastAPI dependencies
"""
from fastapi import Path, Request

from applypdf.core.container import ServiceContainer
from applypdf.core.errors import validation_error
from applypdf.services import ApplicationService
from applypdf.utils.identifiers import is_valid_submission_id


def get_container(request: Request) -> ServiceContainer:
    """Service container created by the application lifespan"""
    return request.app.state.services


def get_application_service(request: Request) -> ApplicationService:
    return get_container(request).application_service


def valid_submission_id(submission_id: str = Path(..., description="Submission ID")) -> str:
    """
    Reject identifiers that do not have the submission id shape

    Raises:
        AppError: VALIDATION for malformed ids
    """
    if not is_valid_submission_id(submission_id):
        raise validation_error("Invalid submission ID format", [])
    return submission_id


def valid_user_id(user_id: str = Path(..., description="User ID")) -> str:
    if not is_valid_submission_id(user_id):
        raise validation_error("Invalid user ID format", [])
    return user_id
