"""
Database models for ApplyPDF API
"""
from applypdf.models.user import User
from applypdf.models.submission import Submission, SubmissionStatus

__all__ = ["User", "Submission", "SubmissionStatus"]
