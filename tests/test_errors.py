#!/usr/bin/env python3
"""
Unit tests for error classification, response bodies and retries
"""
import errno

import pytest
from sqlalchemy.exc import IntegrityError, NoResultFound, OperationalError

from applypdf.core.errors import (
    AppError, ErrorKind, error_response_body, map_database_error, map_os_error,
    not_found_error, retry_operation, validation_error
)


class TestErrorMapping:
    """Test translation of store and filesystem errors"""

    def test_no_result_is_not_found(self):
        error = map_database_error(NoResultFound(), "Submission")

        assert error.kind == ErrorKind.NOT_FOUND
        assert error.message == "Submission not found"

    def test_unique_violation_is_conflict(self):
        exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: users.email"))
        error = map_database_error(exc, "User")

        assert error.kind == ErrorKind.CONFLICT
        assert error.status_code == 409

    def test_foreign_key_violation_is_validation(self):
        exc = IntegrityError("INSERT", {}, Exception("FOREIGN KEY constraint failed"))
        assert map_database_error(exc).kind == ErrorKind.VALIDATION

    def test_other_store_errors(self):
        exc = OperationalError("SELECT", {}, Exception("database is locked"))
        assert map_database_error(exc).kind == ErrorKind.DATABASE

    @pytest.mark.parametrize("code,kind,status", [
        (errno.ENOENT, ErrorKind.FILE_NOT_FOUND, 404),
        (errno.EACCES, ErrorKind.FILE_PERMISSION_DENIED, 403),
        (errno.ENOSPC, ErrorKind.INSUFFICIENT_STORAGE, 507),
        (errno.EMFILE, ErrorKind.TOO_MANY_FILES, 503),
        (errno.EIO, ErrorKind.FILE_SYSTEM, 500),
    ])
    def test_os_errors(self, code, kind, status):
        error = map_os_error(OSError(code, "boom"), "Save file")

        assert error.kind == kind
        assert error.status_code == status


class TestErrorResponseBody:
    """Test the client-facing error body"""

    def test_operational_error_body(self):
        body = error_response_body(validation_error("Validation failed", {"email": "Email is required"}))

        assert body["success"] is False
        assert body["error"] == "Validation failed"
        assert body["code"] == "VALIDATION_ERROR"
        assert body["statusCode"] == 400
        assert body["details"] == {"validationErrors": {"email": "Email is required"}}
        assert "referenceId" not in body

    def test_internal_messages_are_elided(self):
        error = AppError(ErrorKind.DATABASE, "Database operation failed: secret table", {"sql": "SELECT"})
        body = error_response_body(error, reference_id="abc123")

        assert body["error"] == "Database operation failed"
        assert "details" not in body
        assert body["referenceId"] == "abc123"

    def test_programming_errors_are_elided(self):
        error = AppError(ErrorKind.INTERNAL, "KeyError: 'x'", is_operational=False)
        assert error_response_body(error)["error"] == "An unexpected error occurred"

    def test_development_exposes_internal_messages(self):
        error = AppError(ErrorKind.INTERNAL, "KeyError: 'x'", is_operational=False)
        assert error_response_body(error, expose_internal=True)["error"] == "KeyError: 'x'"


class TestRetryOperation:
    """Test retry with exponential backoff"""

    def test_retries_until_success(self):
        attempts = []
        delays = []

        def flaky():
            attempts.append(1)
            if len(attempts) < 3:
                raise ConnectionError("not yet")
            return "ok"

        assert retry_operation(flaky, max_retries=3, base_delay=0.5, sleep=delays.append) == "ok"
        assert delays == [0.5, 1.0]

    def test_operational_errors_are_not_retried(self):
        attempts = []

        def missing():
            attempts.append(1)
            raise not_found_error("Submission")

        with pytest.raises(AppError):
            retry_operation(missing, sleep=lambda _: None)
        assert len(attempts) == 1

    def test_last_error_is_raised(self):
        def always_down():
            raise ConnectionError("down")

        with pytest.raises(ConnectionError):
            retry_operation(always_down, max_retries=2, sleep=lambda _: None)

    @pytest.mark.parametrize("max_retries", [0, -1])
    def test_at_least_one_attempt_is_required(self, max_retries):
        attempts = []

        with pytest.raises(ValueError, match="max_retries must be at least 1"):
            retry_operation(lambda: attempts.append(1), max_retries=max_retries, sleep=lambda _: None)
        assert attempts == []
