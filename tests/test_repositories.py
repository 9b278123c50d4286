#!/usr/bin/env python3
"""
Integration tests for the user and submission repositories (SQLite)
"""
import pytest

from applypdf.core.errors import AppError, ErrorKind
from applypdf.models import SubmissionStatus
from applypdf.schemas import SubmissionCreate, UserCreate, UserUpdate
from applypdf.utils.identifiers import generate_id, is_valid_submission_id

from tests.helpers import ADA_DESCRIPTION


@pytest.fixture
def users(container):
    return container.users


@pytest.fixture
def submissions(container):
    return container.submissions


@pytest.fixture
def ada(users):
    return users.create(UserCreate(
        first_name="Ada", last_name="Lovelace", email="Ada@Example.com", phone="+44 20 7946 0958"
    ))


def _submission(submissions, user_id, description=ADA_DESCRIPTION, **extra):
    return submissions.create(SubmissionCreate(user_id=user_id, job_description=description, **extra))


class TestUserRepository:
    """Test user CRUD and find-or-create"""

    def test_create_assigns_id_and_lowercases_email(self, ada):
        assert is_valid_submission_id(ada.id)
        assert ada.email == "ada@example.com"
        assert ada.created_at is not None

    def test_duplicate_email_conflicts(self, users, ada):
        with pytest.raises(AppError) as exc_info:
            users.create(UserCreate(first_name="Ada", last_name="King", email="ada@example.com"))

        assert exc_info.value.kind == ErrorKind.CONFLICT
        assert exc_info.value.status_code == 409
        assert exc_info.value.message == "A user with this email already exists"

    def test_find_by_email_ignores_case(self, users, ada):
        assert users.find_by_email("ADA@EXAMPLE.COM").id == ada.id
        assert users.find_by_email("nobody@example.com") is None

    def test_find_or_create_is_idempotent(self, users):
        data = UserCreate(first_name="Grace", last_name="Hopper", email="grace@example.com")

        first = users.find_or_create(data)
        second = users.find_or_create(data)

        assert first.id == second.id

    def test_update(self, users, ada):
        updated = users.update(ada.id, UserUpdate(phone="+1 555 010 0000"))

        assert updated.phone == "+1 555 010 0000"
        assert updated.first_name == "Ada"

    def test_update_missing_user(self, users):
        with pytest.raises(AppError) as exc_info:
            users.update(generate_id(), UserUpdate(first_name="Nobody"))

        assert exc_info.value.kind == ErrorKind.NOT_FOUND
        assert exc_info.value.message == "User not found"

    def test_delete_cascades_to_submissions(self, users, submissions, ada):
        submission = _submission(submissions, ada.id)

        users.delete(ada.id)

        assert users.find_by_id(ada.id) is None
        assert submissions.find_by_id(submission.id) is None


class TestSubmissionRepository:
    """Test submission CRUD, status updates and listings"""

    def test_create_defaults_to_pending_with_user(self, submissions, ada):
        submission = _submission(submissions, ada.id)

        assert is_valid_submission_id(submission.id)
        assert submission.status == SubmissionStatus.PENDING
        assert submission.generated_pdf_path is None
        assert submission.user.email == "ada@example.com"

    def test_find_missing_returns_none(self, submissions):
        assert submissions.find_by_id(generate_id()) is None

    def test_update_status_sets_path_only_when_given(self, submissions, ada):
        submission = _submission(submissions, ada.id)

        completed = submissions.update_status(submission.id, SubmissionStatus.COMPLETED, "generated/a.pdf")
        failed = submissions.update_status(submission.id, SubmissionStatus.FAILED)

        assert completed.generated_pdf_path == "generated/a.pdf"
        assert failed.status == SubmissionStatus.FAILED
        assert failed.generated_pdf_path == "generated/a.pdf"

    def test_update_can_clear_fields(self, submissions, ada):
        submission = _submission(submissions, ada.id, uploaded_file_name="cv.pdf")

        updated = submissions.update(submission.id, uploaded_file_name=None)

        assert updated.uploaded_file_name is None

    def test_update_rejects_unknown_fields(self, submissions, ada):
        submission = _submission(submissions, ada.id)

        with pytest.raises(AppError) as exc_info:
            submissions.update(submission.id, user_id=generate_id())
        assert exc_info.value.kind == ErrorKind.VALIDATION

    def test_update_missing_submission(self, submissions):
        with pytest.raises(AppError) as exc_info:
            submissions.update_status(generate_id(), SubmissionStatus.COMPLETED)

        assert exc_info.value.kind == ErrorKind.NOT_FOUND
        assert exc_info.value.message == "Submission not found"

    def test_delete(self, submissions, ada):
        submission = _submission(submissions, ada.id)

        submissions.delete(submission.id)

        assert submissions.find_by_id(submission.id) is None
        with pytest.raises(AppError) as exc_info:
            submissions.delete(submission.id)
        assert exc_info.value.kind == ErrorKind.NOT_FOUND

    def test_find_by_user_id_pages_newest_first(self, submissions, ada):
        created = [_submission(submissions, ada.id, f"{ADA_DESCRIPTION} Entry {i}.") for i in range(3)]

        page = submissions.find_by_user_id(ada.id, page=1, limit=2)

        assert page.total == 3
        assert page.total_pages == 2
        assert [s.id for s in page.items] == [created[2].id, created[1].id]
        assert page.pagination()["hasNext"] is True

    def test_find_by_user_id_ascending(self, submissions, ada):
        created = [_submission(submissions, ada.id) for _ in range(2)]

        page = submissions.find_by_user_id(ada.id, sort_by="createdAt", sort_order="asc")

        assert [s.id for s in page.items] == [created[0].id, created[1].id]

    def test_limit_is_clamped(self, submissions, ada):
        page = submissions.find_by_user_id(ada.id, limit=500)
        assert page.limit == 100

    @pytest.mark.parametrize("page_number", [0, -1])
    def test_non_positive_page_is_rejected(self, submissions, ada, page_number):
        with pytest.raises(AppError) as exc_info:
            submissions.find_by_user_id(ada.id, page=page_number)

        assert exc_info.value.kind == ErrorKind.VALIDATION
        assert exc_info.value.details == {"validationErrors": ["Page must be a positive integer"]}

    def test_unknown_sort_field_is_rejected(self, submissions, ada):
        with pytest.raises(AppError) as exc_info:
            submissions.find_by_user_id(ada.id, sort_by="jobDescription")
        assert exc_info.value.kind == ErrorKind.VALIDATION

    def test_find_by_status(self, submissions, ada):
        pending = _submission(submissions, ada.id)
        done = _submission(submissions, ada.id)
        submissions.update_status(done.id, SubmissionStatus.COMPLETED, "generated/done.pdf")

        completed = submissions.find_by_status(SubmissionStatus.COMPLETED)
        still_pending = submissions.find_by_status(SubmissionStatus.PENDING)

        assert [s.id for s in completed.items] == [done.id]
        assert [s.id for s in still_pending.items] == [pending.id]
        assert completed.items[0].user.first_name == "Ada"
