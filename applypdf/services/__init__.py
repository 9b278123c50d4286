"""
Services for ApplyPDF API
"""
from applypdf.services.file_storage import FileStorageService, StoredFile, FileMetadata
from applypdf.services.pdf_generator import PdfGeneratorService
from applypdf.services.application_service import ApplicationService

__all__ = [
    "FileStorageService", "StoredFile", "FileMetadata",
    "PdfGeneratorService", "ApplicationService"
]
