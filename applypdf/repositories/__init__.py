"""
Persistence layer for ApplyPDF API
"""
from applypdf.repositories.user_repository import UserRepository
from applypdf.repositories.submission_repository import SubmissionRepository

__all__ = ["UserRepository", "SubmissionRepository"]
