"""
Schemas for incoming application forms and uploaded files
"""
from dataclasses import dataclass
from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError
from typing import Any, Dict, Mapping, Optional, Tuple

from applypdf.utils.validation import (
    JOB_DESCRIPTION_MAX_LENGTH, JOB_DESCRIPTION_MIN_LENGTH, JOB_DESCRIPTION_MIN_WORDS,
    NAME_ERROR, NAME_MAX_LENGTH, NAME_MIN_LENGTH, NAME_REGEX,
    count_words, is_valid_phone_number, sanitize_string
)

FIELD_LABELS = {
    "first_name": "First name",
    "last_name": "Last name",
    "email": "Email",
    "phone": "Phone number",
    "job_description": "Job description",
}
_FIELD_BY_ALIAS = {to_camel(name): name for name in FIELD_LABELS}


class ApplicationForm(BaseModel):
    """
    Application form fields, checked and normalised on construction

    Names are sanitized and the email is lower-cased. The job description is
    checked in its sanitized form but kept exactly as the applicant wrote it,
    apart from surrounding whitespace.
    """
    first_name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    last_name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    email: EmailStr
    phone: Optional[str] = None
    job_description: str = Field(
        ...,
        min_length=JOB_DESCRIPTION_MIN_LENGTH,
        max_length=JOB_DESCRIPTION_MAX_LENGTH,
        description="What the applicant brings to the role (at least 5 words)"
    )

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True
    )

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def sanitize_name(cls, v):
        if isinstance(v, str):
            return sanitize_string(v)
        return v

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name_characters(cls, v):
        """Letters, spaces, hyphens and apostrophes only"""
        if not NAME_REGEX.match(v):
            raise PydanticCustomError("name_characters", "Name contains characters that are not allowed")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("phone", mode="before")
    @classmethod
    def blank_phone_is_absent(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v is not None and not is_valid_phone_number(v):
            raise PydanticCustomError("phone_number", "Please enter a valid phone number")
        return v

    @field_validator("job_description")
    @classmethod
    def validate_job_description(cls, v):
        """Apply the length and word-count rules to the sanitized text, keep the original"""
        sanitized = sanitize_string(v)
        if len(sanitized) < JOB_DESCRIPTION_MIN_LENGTH:
            raise PydanticCustomError(
                "job_description_length",
                "Job description must be at least {min_length} characters",
                {"min_length": JOB_DESCRIPTION_MIN_LENGTH}
            )
        if count_words(sanitized) < JOB_DESCRIPTION_MIN_WORDS:
            raise PydanticCustomError(
                "job_description_words",
                "Job description must contain at least {min_words} words",
                {"min_words": JOB_DESCRIPTION_MIN_WORDS}
            )
        return v


def form_errors(exc: ValidationError) -> Dict[str, str]:
    """
    Turn a form ValidationError into a field -> message map

    Keys are the snake_case field names; the first error per field wins.
    """
    errors: Dict[str, str] = {}
    for err in exc.errors():
        key = str(err["loc"][0]) if err["loc"] else "form"
        field = _FIELD_BY_ALIAS.get(key, key)
        if field not in errors:
            errors[field] = _error_message(field, err)
    return errors


def _error_message(field: str, err: Dict[str, Any]) -> str:
    label = FIELD_LABELS.get(field, field)
    value = err.get("input")
    if err["type"] == "missing" or value is None or (isinstance(value, str) and not value.strip()):
        return f"{label} is required"
    if field in ("first_name", "last_name"):
        return f"{label} {NAME_ERROR}"
    if field == "email":
        return "Please enter a valid email address"
    if field == "phone":
        return "Please enter a valid phone number"
    if err["type"] == "string_too_short":
        return f"{label} must be at least {err['ctx']['min_length']} characters"
    if err["type"] == "string_too_long":
        return f"{label} must be at most {err['ctx']['max_length']} characters"
    return err["msg"]


def validate_application_form(data: Mapping[str, Any]) -> Tuple[Optional[ApplicationForm], Dict[str, str]]:
    """
    Validate raw form fields

    Args:
        data: Fields keyed by snake_case name or camelCase alias

    Returns:
        Tuple[Optional[ApplicationForm], Dict[str, str]]: The normalised form
        (None when invalid) and the field -> message error map
    """
    try:
        return ApplicationForm.model_validate(dict(data)), {}
    except ValidationError as e:
        return None, form_errors(e)


@dataclass
class UploadedFile:
    """An uploaded document held in memory"""
    content: bytes
    original_name: str
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class UploadedFileInfo:
    """Attached-file description rendered into the PDF"""
    original_name: str
    file_path: Optional[str] = None
    file_size: Optional[int] = None


@dataclass
class PdfDownload:
    """Generated PDF ready to be streamed to a client"""
    content: bytes
    file_name: str
    mime_type: str = "application/pdf"
