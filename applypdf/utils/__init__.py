"""
Utility functions for ApplyPDF API
"""
from applypdf.utils.identifiers import generate_id, is_valid_submission_id, short_id
from applypdf.utils.validation import (
    sanitize_string, is_valid_phone_number, count_words,
    validate_file_upload, is_dangerous_file_name, matches_magic_bytes,
    format_file_size, validate_pagination, validate_sort
)
from applypdf.utils.file_handler import (
    sanitize_file_name, generate_unique_filename, extension_matches_mime,
    generate_pdf_file_name, format_size_mb
)

__all__ = [
    "generate_id", "is_valid_submission_id", "short_id",
    "sanitize_string", "is_valid_phone_number", "count_words",
    "validate_file_upload", "is_dangerous_file_name", "matches_magic_bytes",
    "format_file_size", "validate_pagination", "validate_sort",
    "sanitize_file_name", "generate_unique_filename", "extension_matches_mime",
    "generate_pdf_file_name", "format_size_mb"
]
