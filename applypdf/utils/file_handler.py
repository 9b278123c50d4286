"""
File naming utilities for stored uploads and generated PDFs
"""
import re
import uuid
from datetime import datetime
from typing import Optional

from applypdf.utils.identifiers import short_id
from applypdf.utils.validation import get_extension

# Expected extensions per MIME type; types not listed accept any extension
MIME_EXTENSIONS = {
    "application/pdf": [".pdf"],
    "image/jpeg": [".jpg", ".jpeg"],
    "image/png": [".png"],
    "text/plain": [".txt"],
}


def sanitize_file_name(file_name: str) -> str:
    """
    Reduce a name to a filesystem-safe lower-case token

    Args:
        file_name: Arbitrary name

    Returns:
        str: Name containing only letters, digits, dots, hyphens and single underscores
    """
    sanitized = re.sub(r"[^a-zA-Z0-9.-]", "_", file_name)
    sanitized = re.sub(r"_{2,}", "_", sanitized)
    return sanitized.strip("_").lower()


def generate_unique_filename(original_filename: str) -> str:
    """
    Generate a unique filename to avoid collisions

    Args:
        original_filename: Original filename from upload

    Returns:
        str: UUID-based filename keeping the original extension
    """
    return f"{uuid.uuid4()}{get_extension(original_filename)}"


def extension_matches_mime(file_name: str, mime_type: str) -> bool:
    """Check the file extension against the extensions expected for a MIME type"""
    expected = MIME_EXTENSIONS.get(mime_type)
    if expected is None:
        return True
    return get_extension(file_name) in expected


def generate_pdf_file_name(
    first_name: str,
    last_name: str,
    submission_id: str,
    timestamp: Optional[datetime] = None
) -> str:
    """
    Build the download name of a generated application PDF

    Args:
        first_name: Applicant first name
        last_name: Applicant last name
        submission_id: Submission identifier
        timestamp: Date to embed; defaults to now

    Returns:
        str: application_<first>_<last>_<YYYY-MM-DD>_<shortId>.pdf
    """
    date_string = (timestamp or datetime.now()).strftime("%Y-%m-%d")
    return (
        f"application_{sanitize_file_name(first_name)}_{sanitize_file_name(last_name)}"
        f"_{date_string}_{short_id(submission_id)}.pdf"
    )


def format_size_mb(size: int) -> str:
    """Size in mebibytes with one decimal, e.g. '2.0 MB'"""
    return f"{size / (1024 * 1024):.1f} MB"
