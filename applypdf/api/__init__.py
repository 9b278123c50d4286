"""
API routers
"""
from applypdf.api import submissions, users

__all__ = ["submissions", "users"]
