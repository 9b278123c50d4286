"""
Error handling for ApplyPDF API

A single AppError type carries an ErrorKind discriminant. Store and
filesystem failures are translated into AppError once, at the repository
and storage boundaries, by map_database_error / map_os_error.
"""
import errno
import logging
import time
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Error discriminant; the value is the client-facing error code"""
    VALIDATION = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    FILE_UPLOAD = "FILE_UPLOAD_ERROR"
    PATH_TRAVERSAL = "PATH_TRAVERSAL"
    PDF_GENERATION = "PDF_GENERATION_ERROR"
    DATABASE = "DATABASE_ERROR"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_PERMISSION_DENIED = "FILE_PERMISSION_DENIED"
    INSUFFICIENT_STORAGE = "INSUFFICIENT_STORAGE"
    TOO_MANY_FILES = "TOO_MANY_FILES"
    FILE_SYSTEM = "FILE_SYSTEM_ERROR"
    INTERNAL = "INTERNAL_ERROR"


STATUS_CODES: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.FILE_UPLOAD: 400,
    ErrorKind.PATH_TRAVERSAL: 400,
    ErrorKind.PDF_GENERATION: 500,
    ErrorKind.DATABASE: 500,
    ErrorKind.FILE_NOT_FOUND: 404,
    ErrorKind.FILE_PERMISSION_DENIED: 403,
    ErrorKind.INSUFFICIENT_STORAGE: 507,
    ErrorKind.TOO_MANY_FILES: 503,
    ErrorKind.FILE_SYSTEM: 500,
    ErrorKind.INTERNAL: 500,
}

# Kinds whose message may leak store/engine internals
_INTERNAL_KINDS = {ErrorKind.DATABASE, ErrorKind.INTERNAL}


class AppError(Exception):
    """Application error tagged with an ErrorKind"""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        is_operational: bool = True
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details
        self.is_operational = is_operational
        self.timestamp = datetime.now(timezone.utc)

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    @property
    def code(self) -> str:
        return self.kind.value

    def __repr__(self):
        return f"<AppError {self.code}: {self.message}>"


def validation_error(message: str = "Validation failed", errors: Optional[Any] = None) -> AppError:
    details = {"validationErrors": errors} if errors is not None else None
    return AppError(ErrorKind.VALIDATION, message, details)


def not_found_error(resource: str = "Resource") -> AppError:
    return AppError(ErrorKind.NOT_FOUND, f"{resource} not found")


def conflict_error(message: str = "Resource already exists") -> AppError:
    return AppError(ErrorKind.CONFLICT, message)


def file_upload_error(message: str = "File upload failed", errors: Optional[Any] = None) -> AppError:
    details = {"errors": errors} if errors is not None else None
    return AppError(ErrorKind.FILE_UPLOAD, message, details)


def pdf_generation_error(message: str = "PDF generation failed") -> AppError:
    return AppError(ErrorKind.PDF_GENERATION, message)


def map_database_error(exc: SQLAlchemyError, resource: str = "Record") -> AppError:
    """
    Translate a SQLAlchemy error into the domain error taxonomy

    Args:
        exc: Error raised by the store
        resource: Human-readable name of the affected resource

    Returns:
        AppError: NOT_FOUND, CONFLICT, VALIDATION or DATABASE error
    """
    if isinstance(exc, NoResultFound):
        return not_found_error(resource)

    if isinstance(exc, IntegrityError):
        reason = str(exc.orig).lower() if exc.orig is not None else str(exc).lower()
        if "unique" in reason or "duplicate" in reason:
            return conflict_error(f"A {resource.lower()} with this value already exists")
        if "foreign key" in reason:
            return AppError(
                ErrorKind.VALIDATION,
                "Cannot perform operation due to related records"
            )

    return AppError(ErrorKind.DATABASE, f"Database operation failed: {exc}")


_OS_ERROR_KINDS = {
    errno.ENOENT: (ErrorKind.FILE_NOT_FOUND, "File not found"),
    errno.EACCES: (ErrorKind.FILE_PERMISSION_DENIED, "Permission denied"),
    errno.EPERM: (ErrorKind.FILE_PERMISSION_DENIED, "Permission denied"),
    errno.ENOSPC: (ErrorKind.INSUFFICIENT_STORAGE, "Insufficient storage space"),
    errno.EMFILE: (ErrorKind.TOO_MANY_FILES, "Too many open files"),
    errno.ENFILE: (ErrorKind.TOO_MANY_FILES, "Too many open files"),
}


def map_os_error(exc: OSError, action: str = "File system operation") -> AppError:
    """
    Translate an OSError into the domain error taxonomy

    Args:
        exc: Error raised by the filesystem
        action: Description of the attempted operation, used in the message

    Returns:
        AppError: One of the FILE_* kinds
    """
    kind, message = _OS_ERROR_KINDS.get(
        exc.errno, (ErrorKind.FILE_SYSTEM, f"{action} failed")
    )
    return AppError(kind, message, {"reason": exc.strerror or str(exc)})


def error_response_body(
    error: AppError,
    expose_internal: bool = False,
    reference_id: Optional[str] = None
) -> Dict[str, Any]:
    """
    Build the structured error body returned to clients

    Args:
        error: Error to describe
        expose_internal: Include messages of internal errors (development only)
        reference_id: Support correlation id for server-side failures

    Returns:
        Dict: {success, error, code, statusCode, timestamp, details?, referenceId?}
    """
    message = error.message
    if not expose_internal and (error.kind in _INTERNAL_KINDS or not error.is_operational):
        message = (
            "Database operation failed" if error.kind == ErrorKind.DATABASE
            else "An unexpected error occurred"
        )

    body: Dict[str, Any] = {
        "success": False,
        "error": message,
        "code": error.code,
        "statusCode": error.status_code,
        "timestamp": error.timestamp.isoformat(),
    }
    if error.details and (expose_internal or error.kind not in _INTERNAL_KINDS):
        body["details"] = error.details
    if reference_id:
        body["referenceId"] = reference_id
    return body


def new_reference_id() -> str:
    return uuid.uuid4().hex[:12]


def is_operational_error(error: BaseException) -> bool:
    return isinstance(error, AppError) and error.is_operational


def log_error(error: BaseException, context: Optional[str] = None) -> None:
    """Log an error; expected errors at WARNING, everything else with a traceback"""
    prefix = f"[{context}] " if context else ""
    if isinstance(error, AppError) and error.is_operational:
        logger.warning(
            f"{prefix}Operational error: {error.message} "
            f"(code={error.code}, status={error.status_code}, details={error.details})"
        )
    elif isinstance(error, AppError):
        logger.error(f"{prefix}Programming error: {error.message} (code={error.code})", exc_info=error)
    else:
        logger.error(f"{prefix}Unhandled error: {error}", exc_info=error)


def retry_operation(
    operation: Callable[[], T],
    max_retries: int = 3,
    base_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep
) -> T:
    """
    Retry an operation with exponential backoff

    Operational AppErrors are expected outcomes and are raised immediately.

    Args:
        operation: Zero-argument callable to run
        max_retries: Maximum number of attempts
        base_delay: Delay in seconds before the second attempt; doubles each time
        sleep: Sleep function (injectable for tests)

    Returns:
        Result of the first successful attempt

    Raises:
        ValueError: If max_retries is less than 1
        Exception: The last error once attempts are exhausted
    """
    if max_retries < 1:
        raise ValueError(f"max_retries must be at least 1, got {max_retries}")

    last_error: Optional[BaseException] = None

    for attempt in range(1, max_retries + 1):
        try:
            return operation()
        except Exception as e:
            last_error = e

            if attempt == max_retries or is_operational_error(e):
                break

            delay = base_delay * (2 ** (attempt - 1))
            log_error(e, f"retry_operation attempt {attempt}/{max_retries}")
            sleep(delay)

    raise last_error
