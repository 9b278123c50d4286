"""
Test helpers for building uploads and reading generated PDFs
"""
import io
import re

from PyPDF2 import PdfReader

ADA_DESCRIPTION = (
    "Experienced software engineer with ten years building compilers and runtime systems."
)

TWO_MB = 2 * 1024 * 1024


def make_pdf_bytes(size: int) -> bytes:
    """Bytes with a PDF header, padded to an exact size"""
    header = b"%PDF-1.4\n"
    return header + b"0" * (size - len(header))


def squash(text: str) -> str:
    """Remove all whitespace so wrapped lines compare equal"""
    return re.sub(r"\s+", "", text)


def pdf_text(content: bytes) -> str:
    """Extract a PDF's text with all whitespace removed"""
    reader = PdfReader(io.BytesIO(content))
    return squash("".join(page.extract_text() or "" for page in reader.pages))
