"""
Application Service
Runs the submission lifecycle: validate, persist, render, store, download

Status transitions:
    PENDING    -> COMPLETED | FAILED          (process_application)
    <any>      -> PROCESSING -> COMPLETED | FAILED   (reprocess_submission)
REJECTED is reserved and never assigned here.

Every call is one sequential unit of work. Nothing serialises concurrent
reprocessing of the same submission; the last status write wins.
"""
import logging
from typing import Any, List, Mapping, Optional, Union

from applypdf.config import Settings
from applypdf.core.errors import (
    AppError, ErrorKind, file_upload_error, log_error, not_found_error, validation_error
)
from applypdf.models import SubmissionStatus
from applypdf.repositories import SubmissionRepository, UserRepository
from applypdf.schemas import (
    ApplicationForm, Page, PdfDownload, SubmissionCreate, SubmissionRecord,
    SubmissionResult, UploadedFile, UploadedFileInfo, UserCreate, UserRecord,
    validate_application_form
)
from applypdf.services.file_storage import FileStorageService
from applypdf.services.pdf_generator import PdfGeneratorService
from applypdf.utils.file_handler import generate_pdf_file_name
from applypdf.utils.validation import validate_file_upload

logger = logging.getLogger(__name__)

UPLOAD_SCOPE = "temp"


class ApplicationService:
    """Orchestrates users, submissions, file storage and PDF rendering"""

    def __init__(
        self,
        users: UserRepository,
        submissions: SubmissionRepository,
        storage: FileStorageService,
        pdf_generator: PdfGeneratorService,
        settings: Settings
    ):
        self.users = users
        self.submissions = submissions
        self.storage = storage
        self.pdf_generator = pdf_generator
        self.settings = settings

    def process_application(
        self,
        form_data: Union[ApplicationForm, Mapping[str, Any]],
        uploaded_file: Optional[UploadedFile] = None
    ) -> SubmissionResult:
        """
        Accept an application and produce its PDF

        Args:
            form_data: A validated ApplicationForm, or raw fields keyed first_name,
                last_name, email, phone, job_description (camelCase also accepted)
            uploaded_file: Optional attached document

        Returns:
            SubmissionResult: Submission id, download URL and COMPLETED status

        Raises:
            AppError: VALIDATION / FILE_UPLOAD before anything is persisted;
                PDF_GENERATION or storage kinds after the submission exists,
                in which case the submission is left FAILED
        """
        if isinstance(form_data, ApplicationForm):
            form = form_data
        else:
            form, errors = validate_application_form(form_data)
            if errors:
                raise validation_error(f"Validation failed: {', '.join(errors.values())}", errors)

        if uploaded_file is not None:
            file_validation = validate_file_upload(
                uploaded_file.original_name,
                uploaded_file.size,
                uploaded_file.mime_type,
                content=uploaded_file.content,
                max_size=self.settings.MAX_FILE_SIZE,
                allowed_types=self.settings.allowed_mime_types_list,
                max_name_length=self.settings.MAX_FILE_NAME_LENGTH,
            )
            if not file_validation.is_valid:
                raise file_upload_error(
                    f"File validation failed: {', '.join(file_validation.errors)}",
                    file_validation.errors
                )

        user = self.users.find_or_create(UserCreate(
            first_name=form.first_name,
            last_name=form.last_name,
            email=form.email,
            phone=form.phone,
        ))

        stored_upload = None
        if uploaded_file is not None:
            stored_upload = self.storage.save_file(
                uploaded_file.content,
                uploaded_file.original_name,
                uploaded_file.mime_type,
                UPLOAD_SCOPE,
            )

        try:
            submission = self.submissions.create(SubmissionCreate(
                user_id=user.id,
                job_description=form.job_description,
                status=SubmissionStatus.PENDING,
                uploaded_file_name=uploaded_file.original_name if uploaded_file else None,
                uploaded_file_path=stored_upload.file_path if stored_upload else None,
                uploaded_file_size=stored_upload.file_size if stored_upload else None,
                uploaded_file_mime_type=uploaded_file.mime_type if uploaded_file else None,
            ))
        except AppError:
            if stored_upload is not None:
                self._delete_quietly(stored_upload.file_path, "orphaned upload")
            raise

        try:
            pdf_path = self._generate_pdf(submission, user)
            self.submissions.update_status(submission.id, SubmissionStatus.COMPLETED, pdf_path)
        except AppError as e:
            log_error(e, f"process_application {submission.id}")
            self._mark_failed(submission.id)
            raise

        logger.info(f"Submission {submission.id} completed for user {user.id}")
        return self._result(submission.id, SubmissionStatus.COMPLETED)

    def get_submission(self, submission_id: str) -> Optional[SubmissionRecord]:
        return self.submissions.find_by_id(submission_id)

    def download_submission_pdf(self, submission_id: str) -> PdfDownload:
        """
        Fetch a submission's generated PDF

        A missing PDF path, missing user data or a missing stored artifact
        triggers a reprocess before the bytes are returned.

        Raises:
            AppError: NOT_FOUND if the submission does not exist
        """
        submission = self.submissions.find_by_id(submission_id)
        if submission is None:
            raise not_found_error("Submission")

        content = None
        if submission.generated_pdf_path and submission.user:
            try:
                content = self.storage.get_file(submission.generated_pdf_path)
            except AppError as e:
                if e.kind != ErrorKind.FILE_NOT_FOUND:
                    raise
                logger.warning(f"Stored PDF for submission {submission_id} is missing")

        if content is None:
            logger.info(f"Regenerating PDF for submission {submission_id}")
            self.reprocess_submission(submission_id)
            submission = self.submissions.find_by_id(submission_id)
            if submission is None or not submission.generated_pdf_path:
                raise AppError(ErrorKind.PDF_GENERATION, "Failed to generate PDF")
            content = self.storage.get_file(submission.generated_pdf_path)

        return PdfDownload(
            content=content,
            file_name=self._pdf_file_name(submission, submission.user),
            mime_type="application/pdf",
        )

    def reprocess_submission(self, submission_id: str) -> SubmissionResult:
        """
        Re-render a submission's PDF

        Raises:
            AppError: NOT_FOUND for unknown submissions or users; the original
                render/storage error after the submission is marked FAILED
        """
        submission = self.submissions.find_by_id(submission_id)
        if submission is None:
            raise not_found_error("Submission")

        user = self.users.find_by_id(submission.user_id)
        if user is None:
            raise not_found_error("User")

        self.submissions.update_status(submission_id, SubmissionStatus.PROCESSING)

        try:
            pdf_path = self._generate_pdf(submission, user)
            self.submissions.update_status(submission_id, SubmissionStatus.COMPLETED, pdf_path)
        except AppError as e:
            log_error(e, f"reprocess_submission {submission_id}")
            self._mark_failed(submission_id)
            raise

        previous = submission.generated_pdf_path
        if previous and previous != pdf_path:
            self._delete_quietly(previous, "superseded PDF")

        logger.info(f"Submission {submission_id} reprocessed")
        return self._result(submission_id, SubmissionStatus.COMPLETED)

    def delete_submission(self, submission_id: str) -> None:
        """
        Delete a submission and, best-effort, its stored files

        Raises:
            AppError: NOT_FOUND if the submission does not exist
        """
        submission = self.submissions.find_by_id(submission_id)
        if submission is None:
            raise not_found_error("Submission")

        if submission.uploaded_file_path:
            self._delete_quietly(submission.uploaded_file_path, "submission file")
        if submission.generated_pdf_path:
            self._delete_quietly(submission.generated_pdf_path, "PDF file")

        self.submissions.delete(submission_id)

    def list_user_submissions(
        self,
        user_id: str,
        page: Any = None,
        limit: Any = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None
    ) -> Page[SubmissionRecord]:
        if self.users.find_by_id(user_id) is None:
            raise not_found_error("User")
        return self.submissions.find_by_user_id(user_id, page, limit, sort_by, sort_order)

    def list_submissions_by_status(
        self,
        status: SubmissionStatus,
        page: Any = None,
        limit: Any = None
    ) -> Page[SubmissionRecord]:
        return self.submissions.find_by_status(status, page, limit)

    def download_url(self, submission_id: str) -> str:
        return f"{self.settings.API_V1_PREFIX}/submissions/{submission_id}/download"

    def _generate_pdf(self, submission: SubmissionRecord, user: UserRecord) -> str:
        """Render and store a submission's PDF; returns the stored path"""
        uploaded_files: List[UploadedFileInfo] = []

        if submission.uploaded_file_path and submission.uploaded_file_name:
            file_size = submission.uploaded_file_size
            try:
                file_size = self.storage.get_file_metadata(submission.uploaded_file_path).size
            except AppError as e:
                logger.warning(f"Could not read metadata for {submission.uploaded_file_path}: {e.message}")
            uploaded_files.append(UploadedFileInfo(
                original_name=submission.uploaded_file_name,
                file_path=submission.uploaded_file_path,
                file_size=file_size,
            ))

        pdf_bytes = self.pdf_generator.render(submission, user, uploaded_files)
        stored = self.storage.save_generated_pdf(pdf_bytes, self._pdf_file_name(submission, user))
        return stored.file_path

    def _pdf_file_name(self, submission: SubmissionRecord, user: Optional[UserRecord]) -> str:
        if user is None:
            return f"application-{submission.id}.pdf"
        return generate_pdf_file_name(user.first_name, user.last_name, submission.id, submission.created_at)

    def _mark_failed(self, submission_id: str) -> None:
        try:
            self.submissions.update_status(submission_id, SubmissionStatus.FAILED)
        except AppError as e:
            log_error(e, f"mark_failed {submission_id}")

    def _delete_quietly(self, file_path: str, description: str) -> None:
        try:
            self.storage.delete_file(file_path)
        except AppError as e:
            logger.warning(f"Failed to delete {description} {file_path}: {e.message}")

    def _result(self, submission_id: str, status: SubmissionStatus) -> SubmissionResult:
        return SubmissionResult(
            submission_id=submission_id,
            pdf_download_url=self.download_url(submission_id),
            status=status,
        )
