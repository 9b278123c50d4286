#!/usr/bin/env python3
"""
Integration tests for the application service lifecycle
"""
from concurrent.futures import ThreadPoolExecutor

import pytest

from applypdf.core.errors import AppError, ErrorKind, pdf_generation_error
from applypdf.models import SubmissionStatus
from applypdf.schemas import ApplicationForm, UploadedFile
from applypdf.utils.identifiers import generate_id

from tests.helpers import ADA_DESCRIPTION, pdf_text, squash


def _fail_render(*args, **kwargs):
    raise pdf_generation_error("Failed to generate PDF: renderer offline")


class TestProcessApplication:
    """Test the submit pipeline"""

    def test_valid_application_completes(self, service, container, ada_form):
        result = service.process_application(ada_form)

        assert result.success is True
        assert result.status == SubmissionStatus.COMPLETED
        assert result.pdf_download_url == f"/api/v1/submissions/{result.submission_id}/download"

        submission = container.submissions.find_by_id(result.submission_id)
        assert submission.status == SubmissionStatus.COMPLETED
        assert container.storage.file_exists(submission.generated_pdf_path)

    def test_pdf_contains_applicant_and_description(self, service, ada_form):
        result = service.process_application(ada_form)
        download = service.download_submission_pdf(result.submission_id)
        text = pdf_text(download.content)

        assert download.content.startswith(b"%PDF")
        assert "Ada" in text and "Lovelace" in text
        assert squash(ADA_DESCRIPTION) in text
        assert "RESUME" not in text

    def test_job_description_is_kept_verbatim(self, service, container, ada_form):
        description = "I'm a C & C++ engineer who \"loves\" compilers and <runtimes>."
        ada_form["job_description"] = f"  {description}\n"

        result = service.process_application(ada_form)

        submission = container.submissions.find_by_id(result.submission_id)
        assert submission.job_description == description
        text = pdf_text(service.download_submission_pdf(result.submission_id).content)
        assert squash(description) in text

    def test_accepts_application_form_model(self, service):
        form = ApplicationForm(
            firstName="Grace",
            lastName="Hopper",
            email="grace@example.com",
            jobDescription="Pioneered machine independent programming languages and compilers.",
        )
        assert service.process_application(form).status == SubmissionStatus.COMPLETED

    def test_upload_is_stored_and_listed_in_pdf(self, service, container, ada_form, resume_file):
        result = service.process_application(ada_form, resume_file)

        submission = container.submissions.find_by_id(result.submission_id)
        assert submission.uploaded_file_name == "resume.pdf"
        assert submission.uploaded_file_size == len(resume_file.content)
        assert submission.uploaded_file_mime_type == "application/pdf"
        assert submission.uploaded_file_path.startswith("uploads/temp/")

        text = pdf_text(service.download_submission_pdf(result.submission_id).content)
        assert "RESUME" in text
        assert "resume.pdf" in text
        assert "2.0MB" in text
        assert "SuccessfullyUploaded" in text

    def test_same_email_reuses_user(self, service, container, ada_form):
        first = service.process_application(ada_form)
        ada_form["email"] = "ADA@example.com"
        second = service.process_application(ada_form)

        assert first.submission_id != second.submission_id
        first_record = container.submissions.find_by_id(first.submission_id)
        second_record = container.submissions.find_by_id(second.submission_id)
        assert first_record.user_id == second_record.user_id

    def test_invalid_form_persists_nothing(self, service, container, ada_form):
        ada_form["job_description"] = "Seasoned compiler engineer"

        with pytest.raises(AppError) as exc_info:
            service.process_application(ada_form)

        error = exc_info.value
        assert error.kind == ErrorKind.VALIDATION
        assert "at least 5 words" in error.message
        assert error.details == {
            "validationErrors": {"job_description": "Job description must contain at least 5 words"}
        }
        assert container.users.find_by_email("ada@example.com") is None

    def test_rejected_file_persists_nothing(self, service, container, ada_form):
        upload = UploadedFile(content=b"MZ\x90\x00", original_name="malware.exe", mime_type="application/exe")

        with pytest.raises(AppError) as exc_info:
            service.process_application(ada_form, upload)

        assert exc_info.value.kind == ErrorKind.FILE_UPLOAD
        assert exc_info.value.message.startswith("File validation failed:")
        assert container.users.find_by_email("ada@example.com") is None
        assert container.storage.get_storage_stats()["total_files"] == 0

    def test_render_failure_marks_submission_failed(self, service, container, ada_form, monkeypatch):
        monkeypatch.setattr(container.pdf_generator, "render", _fail_render)

        with pytest.raises(AppError) as exc_info:
            service.process_application(ada_form)
        assert exc_info.value.kind == ErrorKind.PDF_GENERATION

        user = container.users.find_by_email("ada@example.com")
        page = container.submissions.find_by_user_id(user.id)
        assert page.total == 1
        assert page.items[0].status == SubmissionStatus.FAILED
        assert page.items[0].generated_pdf_path is None


class TestDownload:
    """Test downloads, including regeneration of missing PDFs"""

    def test_download_name(self, service, ada_form):
        result = service.process_application(ada_form)
        download = service.download_submission_pdf(result.submission_id)

        assert download.mime_type == "application/pdf"
        assert download.file_name.startswith("application_ada_lovelace_")
        assert download.file_name.endswith(f"_{result.submission_id[:8]}.pdf")

    def test_cleared_path_is_regenerated(self, service, container, ada_form):
        result = service.process_application(ada_form)
        container.submissions.update(result.submission_id, generated_pdf_path=None)

        download = service.download_submission_pdf(result.submission_id)

        assert download.content.startswith(b"%PDF")
        submission = container.submissions.find_by_id(result.submission_id)
        assert submission.status == SubmissionStatus.COMPLETED
        assert submission.generated_pdf_path is not None

    def test_missing_artifact_is_regenerated(self, service, container, ada_form):
        result = service.process_application(ada_form)
        submission = container.submissions.find_by_id(result.submission_id)
        (container.storage.base_dir / submission.generated_pdf_path).unlink()

        download = service.download_submission_pdf(result.submission_id)

        assert download.content.startswith(b"%PDF")
        assert container.storage.file_exists(submission.generated_pdf_path)

    def test_unknown_submission(self, service):
        with pytest.raises(AppError) as exc_info:
            service.download_submission_pdf(generate_id())
        assert exc_info.value.kind == ErrorKind.NOT_FOUND


class TestReprocess:
    """Test PDF regeneration"""

    def test_reprocess_completes(self, service, container, ada_form):
        result = service.process_application(ada_form)

        reprocessed = service.reprocess_submission(result.submission_id)

        assert reprocessed.status == SubmissionStatus.COMPLETED
        assert reprocessed.submission_id == result.submission_id
        submission = container.submissions.find_by_id(result.submission_id)
        assert container.storage.file_exists(submission.generated_pdf_path)

    def test_reprocess_failure_marks_failed(self, service, container, ada_form, monkeypatch):
        result = service.process_application(ada_form)
        monkeypatch.setattr(container.pdf_generator, "render", _fail_render)

        with pytest.raises(AppError) as exc_info:
            service.reprocess_submission(result.submission_id)

        assert exc_info.value.kind == ErrorKind.PDF_GENERATION
        submission = container.submissions.find_by_id(result.submission_id)
        assert submission.status == SubmissionStatus.FAILED

    def test_superseded_pdf_is_deleted(self, service, container, ada_form):
        result = service.process_application(ada_form)
        old_path = "generated/application_old_copy.pdf"
        container.storage.save_generated_pdf(b"%PDF-old", "application_old_copy.pdf")
        container.submissions.update(result.submission_id, generated_pdf_path=old_path)

        service.reprocess_submission(result.submission_id)

        assert not container.storage.file_exists(old_path)

    def test_concurrent_reprocess_settles_completed(self, service, container, ada_form):
        result = service.process_application(ada_form)

        with ThreadPoolExecutor(max_workers=2) as pool:
            futures = [pool.submit(service.reprocess_submission, result.submission_id) for _ in range(2)]
            outcomes = [future.result() for future in futures]

        assert all(outcome.status == SubmissionStatus.COMPLETED for outcome in outcomes)
        submission = container.submissions.find_by_id(result.submission_id)
        assert submission.status == SubmissionStatus.COMPLETED
        assert container.storage.get_storage_stats()["generated_files"] == 1
        content = container.storage.get_file(submission.generated_pdf_path)
        assert squash(ADA_DESCRIPTION) in pdf_text(content)

    def test_unknown_submission(self, service):
        with pytest.raises(AppError) as exc_info:
            service.reprocess_submission(generate_id())
        assert exc_info.value.kind == ErrorKind.NOT_FOUND


class TestDeleteAndList:
    """Test deletion and listings"""

    def test_delete_removes_files_and_record(self, service, container, ada_form, resume_file):
        result = service.process_application(ada_form, resume_file)
        submission = container.submissions.find_by_id(result.submission_id)

        service.delete_submission(result.submission_id)

        assert service.get_submission(result.submission_id) is None
        assert not container.storage.file_exists(submission.uploaded_file_path)
        assert not container.storage.file_exists(submission.generated_pdf_path)

    def test_delete_unknown(self, service):
        with pytest.raises(AppError) as exc_info:
            service.delete_submission(generate_id())
        assert exc_info.value.kind == ErrorKind.NOT_FOUND

    def test_delete_with_missing_files_still_succeeds(self, service, container, ada_form):
        result = service.process_application(ada_form)
        submission = container.submissions.find_by_id(result.submission_id)
        container.storage.delete_file(submission.generated_pdf_path)

        service.delete_submission(result.submission_id)

        assert service.get_submission(result.submission_id) is None

    def test_list_user_submissions(self, service, container, ada_form):
        for _ in range(3):
            service.process_application(ada_form)
        user = container.users.find_by_email("ada@example.com")

        page = service.list_user_submissions(user.id, page=2, limit=2)

        assert page.total == 3
        assert len(page.items) == 1

    def test_list_unknown_user(self, service):
        with pytest.raises(AppError) as exc_info:
            service.list_user_submissions(generate_id())
        assert exc_info.value.kind == ErrorKind.NOT_FOUND

    def test_list_by_status(self, service, ada_form):
        service.process_application(ada_form)

        assert service.list_submissions_by_status(SubmissionStatus.COMPLETED).total == 1
        assert service.list_submissions_by_status(SubmissionStatus.REJECTED).total == 0
