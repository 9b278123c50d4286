"""
Submission repository
"""
import logging
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import contains_eager

from applypdf.core.errors import validation_error
from applypdf.models import Submission, SubmissionStatus, User
from applypdf.repositories.base import BaseRepository
from applypdf.schemas import Page, SubmissionCreate, SubmissionRecord
from applypdf.utils.validation import validate_pagination, validate_sort

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "createdAt": Submission.created_at,
    "updatedAt": Submission.updated_at,
    "status": Submission.status,
    "firstName": User.first_name,
    "lastName": User.last_name,
    "email": User.email,
}

UPDATABLE_FIELDS = {
    "job_description",
    "status",
    "generated_pdf_path",
    "uploaded_file_name",
    "uploaded_file_path",
    "uploaded_file_size",
    "uploaded_file_mime_type",
}


class SubmissionRepository(BaseRepository):
    """CRUD access to submissions; every read joins the owning user"""

    resource = "Submission"

    def create(self, data: SubmissionCreate) -> SubmissionRecord:
        with self._session() as db:
            values = data.model_dump()
            values["status"] = SubmissionStatus(values["status"]).value
            submission = Submission(**values)
            db.add(submission)
            db.commit()
            db.refresh(submission)
            logger.info(f"Created submission {submission.id} for user {submission.user_id}")
            return SubmissionRecord.model_validate(submission)

    def find_by_id(self, submission_id: str) -> Optional[SubmissionRecord]:
        with self._session() as db:
            submission = db.get(Submission, submission_id)
            return SubmissionRecord.model_validate(submission) if submission else None

    def find_by_user_id(
        self,
        user_id: str,
        page: Any = None,
        limit: Any = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None
    ) -> Page[SubmissionRecord]:
        """
        List a user's submissions

        Args:
            user_id: Owning user
            page: 1-based page number (default 1)
            limit: Page size (default 10, values above 100 are clamped)
            sort_by: One of createdAt, updatedAt, firstName, lastName, email, status
            sort_order: 'asc' or 'desc' (default desc)

        Raises:
            AppError: VALIDATION for malformed paging or sort parameters
        """
        page, limit, errors = validate_pagination(page, limit)
        sort_by, sort_order, sort_errors = validate_sort(sort_by, sort_order)
        errors.extend(sort_errors)
        if errors:
            raise validation_error("Invalid listing parameters", errors)

        column = SORT_COLUMNS[sort_by]
        order = column.asc() if sort_order == "asc" else column.desc()
        return self._page(Submission.user_id == user_id, order, page, limit)

    def find_by_status(
        self,
        status: SubmissionStatus,
        page: Any = None,
        limit: Any = None
    ) -> Page[SubmissionRecord]:
        """List submissions in a status, newest first"""
        page, limit, errors = validate_pagination(page, limit)
        if errors:
            raise validation_error("Invalid listing parameters", errors)

        status_value = SubmissionStatus(status).value
        return self._page(Submission.status == status_value, Submission.created_at.desc(), page, limit)

    def update_status(
        self,
        submission_id: str,
        status: SubmissionStatus,
        generated_pdf_path: Optional[str] = None
    ) -> SubmissionRecord:
        """
        Set a submission's status, and its PDF path when one is given

        Raises:
            AppError: NOT_FOUND if the submission does not exist
        """
        fields = {"status": status}
        if generated_pdf_path is not None:
            fields["generated_pdf_path"] = generated_pdf_path
        return self.update(submission_id, **fields)

    def update(self, submission_id: str, **fields) -> SubmissionRecord:
        """
        Update selected submission fields; None clears optional fields

        Raises:
            AppError: NOT_FOUND if the submission does not exist,
                VALIDATION for unknown fields
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise validation_error(f"Unknown submission fields: {', '.join(sorted(unknown))}")

        with self._session() as db:
            submission = db.execute(
                select(Submission).where(Submission.id == submission_id)
            ).scalar_one()

            for key, value in fields.items():
                if key == "status":
                    value = SubmissionStatus(value).value
                setattr(submission, key, value)

            db.commit()
            db.refresh(submission)
            return SubmissionRecord.model_validate(submission)

    def delete(self, submission_id: str) -> None:
        """
        Raises:
            AppError: NOT_FOUND if the submission does not exist
        """
        with self._session() as db:
            submission = db.execute(
                select(Submission).where(Submission.id == submission_id)
            ).scalar_one()
            db.delete(submission)
            db.commit()
            logger.info(f"Deleted submission {submission_id}")

    def _page(self, condition, order, page: int, limit: int) -> Page[SubmissionRecord]:
        with self._session() as db:
            total = db.execute(
                select(func.count()).select_from(Submission).where(condition)
            ).scalar_one()

            rows = db.execute(
                select(Submission)
                .join(Submission.user)
                .options(contains_eager(Submission.user))
                .where(condition)
                .order_by(order, Submission.id)
                .offset((page - 1) * limit)
                .limit(limit)
            ).scalars().all()

            return Page[SubmissionRecord](
                items=[SubmissionRecord.model_validate(row) for row in rows],
                total=total,
                page=page,
                limit=limit,
            )
