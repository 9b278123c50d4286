"""
Validation utilities for uploads and listing parameters, plus the shared
field rules used by the application form schema

All functions are pure: they never raise for invalid input, they report it.
"""
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
DEFAULT_ALLOWED_MIME_TYPES = ("application/pdf",)
DEFAULT_MAX_NAME_LENGTH = 255

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
JOB_DESCRIPTION_MIN_LENGTH = 10
JOB_DESCRIPTION_MAX_LENGTH = 5000
JOB_DESCRIPTION_MIN_WORDS = 5

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
MAX_PAGE = 1000

SORT_FIELDS = ("createdAt", "updatedAt", "firstName", "lastName", "email", "status")
SORT_ORDERS = ("asc", "desc")

DANGEROUS_EXTENSIONS = {
    ".exe", ".bat", ".cmd", ".com", ".pif", ".scr", ".vbs", ".js",
    ".jar", ".app", ".deb", ".pkg", ".dmg", ".sh", ".ps1",
}

PHONE_REGEX = re.compile(r"^\+?[1-9][\d\s\-()]{8,20}$")
NAME_REGEX = re.compile(r"^[a-zA-Z\s\-']+$")
_DANGEROUS_CHARS = re.compile(r"[<>\"'&]")
_WHITESPACE = re.compile(r"\s+")

NAME_ERROR = "must be 2-50 characters and contain only letters, spaces, hyphens, and apostrophes"


@dataclass
class FileValidationResult:
    """Outcome of validating an uploaded file"""
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def sanitize_string(value: str) -> str:
    """Trim, drop markup-sensitive characters and collapse whitespace"""
    return _WHITESPACE.sub(" ", _DANGEROUS_CHARS.sub("", value.strip()))


def is_valid_phone_number(phone: str) -> bool:
    """Accept 10-15 digit numbers with optional leading + and common separators"""
    digits = re.sub(r"\D", "", phone)
    if len(digits) < 10 or len(digits) > 15:
        return False
    return bool(PHONE_REGEX.match(phone.strip()))


def count_words(text: str) -> int:
    return len(text.split())


def get_extension(file_name: str) -> str:
    """Lower-cased extension including the dot, or '' if there is none"""
    dot = file_name.rfind(".")
    if dot <= 0 or dot == len(file_name) - 1:
        return ""
    return file_name[dot:].lower()


def is_dangerous_file_name(file_name: str) -> bool:
    """Reject path traversal sequences and executable extensions"""
    if ".." in file_name or "/" in file_name or "\\" in file_name:
        return True
    return get_extension(file_name) in DANGEROUS_EXTENSIONS


def matches_magic_bytes(content: bytes, mime_type: str) -> bool:
    """
    Check that leading bytes agree with the declared MIME type

    Types without a known signature only need non-empty content.
    """
    if mime_type == "application/pdf":
        return content[:4] == b"%PDF"
    if mime_type == "image/jpeg":
        return content[:2] == b"\xff\xd8"
    if mime_type == "image/png":
        return content[:4] == b"\x89PNG"
    return len(content) > 0


def format_file_size(size: int) -> str:
    """Human readable size, e.g. '10 MB'"""
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{round(value, 2):g} {units[index]}"


def validate_file_upload(
    name: str,
    size: int,
    mime_type: str,
    content: Optional[bytes] = None,
    max_size: int = DEFAULT_MAX_FILE_SIZE,
    allowed_types=DEFAULT_ALLOWED_MIME_TYPES,
    max_name_length: int = DEFAULT_MAX_NAME_LENGTH
) -> FileValidationResult:
    """
    Validate an uploaded file's name, size, type and content signature

    Args:
        name: Original file name
        size: Size in bytes
        mime_type: Declared MIME type
        content: File bytes; the signature check is skipped when omitted
        max_size: Maximum size in bytes
        allowed_types: Allowed MIME types
        max_name_length: Maximum file name length

    Returns:
        FileValidationResult: Collected error messages
    """
    result = FileValidationResult()

    if not name or not name.strip():
        result.errors.append("File name is required")
    elif len(name) > max_name_length:
        result.errors.append(f"File name must be less than {max_name_length} characters")

    if size <= 0 or size > max_size:
        result.errors.append(f"File size must be less than {format_file_size(max_size)}")

    if mime_type not in allowed_types:
        result.errors.append(f"File type must be one of: {', '.join(allowed_types)}")

    if name and is_dangerous_file_name(name):
        result.errors.append("File name contains potentially dangerous characters")

    if content is not None and mime_type in allowed_types and not matches_magic_bytes(content, mime_type):
        result.errors.append(f"File content does not match declared type '{mime_type}'")

    return result


def validate_pagination(page: Any = None, limit: Any = None) -> Tuple[int, int, List[str]]:
    """
    Validate pagination parameters

    Pages are 1-based. Limits above MAX_LIMIT are clamped rather than rejected.

    Returns:
        Tuple[int, int, List[str]]: page, limit, error messages
    """
    errors: List[str] = []
    validated_page = DEFAULT_PAGE
    validated_limit = DEFAULT_LIMIT

    if page is not None:
        page_number = _to_int(page)
        if page_number is None or page_number < 1:
            errors.append("Page must be a positive integer")
        elif page_number > MAX_PAGE:
            errors.append("Page number is too large")
        else:
            validated_page = page_number

    if limit is not None:
        limit_number = _to_int(limit)
        if limit_number is None or limit_number < 1:
            errors.append("Limit must be a positive integer")
        else:
            validated_limit = min(limit_number, MAX_LIMIT)

    return validated_page, validated_limit, errors


def validate_sort(sort_by: Optional[str] = None, sort_order: Optional[str] = None) -> Tuple[str, str, List[str]]:
    """
    Validate sort parameters against the allow-lists

    Returns:
        Tuple[str, str, List[str]]: sort field, sort order, error messages
    """
    errors: List[str] = []
    validated_sort_by = "createdAt"
    validated_sort_order = "desc"

    if sort_by:
        if sort_by in SORT_FIELDS:
            validated_sort_by = sort_by
        else:
            errors.append(f"Sort field must be one of: {', '.join(SORT_FIELDS)}")

    if sort_order:
        if sort_order in SORT_ORDERS:
            validated_sort_order = sort_order
        else:
            errors.append('Sort order must be either "asc" or "desc"')

    return validated_sort_by, validated_sort_order, errors


def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None
