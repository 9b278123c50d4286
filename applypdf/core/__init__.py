"""
Core functionality for ApplyPDF API
"""
from applypdf.core.errors import AppError, ErrorKind

__all__ = ["AppError", "ErrorKind"]
