"""
Record identifiers: 'c' followed by 24 lowercase alphanumeric characters
"""
import re
import secrets
import string

ID_LENGTH = 25
_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_PATTERN = re.compile(r"^c[a-z0-9]{24}$")


def generate_id() -> str:
    """Generate a new opaque record identifier"""
    return "c" + "".join(secrets.choice(_ID_ALPHABET) for _ in range(ID_LENGTH - 1))


def is_valid_submission_id(value: str) -> bool:
    """Check that a value has the exact identifier shape"""
    return bool(value) and _ID_PATTERN.match(value) is not None


def short_id(value: str) -> str:
    """Short prefix of an identifier, used in generated file names"""
    return value[:8]
