"""
File Storage Service
Stores uploads and generated PDFs under a single root directory

Layout:
    uploads/<scope_key>/<uuid><ext>   uploaded documents
    generated/<file_name>             rendered PDFs
    temp/                             staging area for in-flight writes
"""
import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, Iterable, Optional

from applypdf.core.errors import AppError, ErrorKind, file_upload_error, map_os_error
from applypdf.utils.file_handler import extension_matches_mime, generate_unique_filename
from applypdf.utils.validation import get_extension, matches_magic_bytes

logger = logging.getLogger(__name__)

UPLOADS_DIR = "uploads"
GENERATED_DIR = "generated"
TEMP_DIR = "temp"


@dataclass
class StoredFile:
    """Result of a successful write"""
    file_path: str  # relative to the storage root
    file_name: str
    file_size: int


@dataclass
class FileMetadata:
    file_name: str
    file_path: str
    size: int
    created_at: datetime
    modified_at: datetime


class FileStorageService:
    """Key-value byte storage confined to a root directory"""

    def __init__(
        self,
        base_dir: str,
        max_file_size: int = 10 * 1024 * 1024,
        allowed_mime_types: Optional[Iterable[str]] = None
    ):
        self.base_dir = Path(base_dir).resolve()
        self.max_file_size = max_file_size
        self.allowed_mime_types = list(allowed_mime_types or ["application/pdf"])

    def initialize(self) -> None:
        """Create the root directory and its namespaces"""
        try:
            for name in (UPLOADS_DIR, GENERATED_DIR, TEMP_DIR):
                (self.base_dir / name).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise map_os_error(e, "Initialize file storage")
        logger.info(f"File storage initialized at {self.base_dir}")

    def save_file(self, content: bytes, original_name: str, mime_type: str, scope_key: str) -> StoredFile:
        """
        Validate and store an uploaded file

        Args:
            content: File bytes
            original_name: Name supplied by the client
            mime_type: Declared MIME type
            scope_key: Namespace for the file, usually a submission id

        Returns:
            StoredFile: Location and size of the stored file

        Raises:
            AppError: FILE_UPLOAD for rejected content, PATH_TRAVERSAL for a bad
                scope key, FILE_* kinds for filesystem failures
        """
        self._validate_file(content, mime_type, original_name)

        file_name = generate_unique_filename(original_name)
        relative_path = f"{UPLOADS_DIR}/{scope_key}/{file_name}"
        self._write(relative_path, content)

        logger.info(f"Stored upload '{original_name}' as {relative_path} ({len(content)} bytes)")
        return StoredFile(file_path=relative_path, file_name=file_name, file_size=len(content))

    def save_generated_pdf(self, content: bytes, file_name: str) -> StoredFile:
        """
        Store a rendered PDF under the generated namespace

        An existing file with the same name is replaced.
        """
        relative_path = f"{GENERATED_DIR}/{file_name}"
        self._write(relative_path, content)

        logger.info(f"Stored generated PDF {relative_path} ({len(content)} bytes)")
        return StoredFile(file_path=relative_path, file_name=file_name, file_size=len(content))

    def get_file(self, file_path: str) -> bytes:
        full_path = self._resolve(file_path)
        try:
            return full_path.read_bytes()
        except OSError as e:
            raise map_os_error(e, "Read file")

    def delete_file(self, file_path: str) -> None:
        """Delete a stored file; deleting a missing file is not an error"""
        full_path = self._resolve(file_path)
        try:
            full_path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise map_os_error(e, "Delete file")

    def get_file_metadata(self, file_path: str) -> FileMetadata:
        full_path = self._resolve(file_path)
        try:
            stats = full_path.stat()
        except OSError as e:
            raise map_os_error(e, "Read file metadata")

        return FileMetadata(
            file_name=full_path.name,
            file_path=file_path,
            size=stats.st_size,
            created_at=datetime.fromtimestamp(getattr(stats, "st_birthtime", stats.st_ctime)),
            modified_at=datetime.fromtimestamp(stats.st_mtime),
        )

    def file_exists(self, file_path: str) -> bool:
        return self._resolve(file_path).is_file()

    def cleanup_temp_files(self, older_than_hours: int = 24) -> int:
        """
        Remove staging files left behind by interrupted writes

        Args:
            older_than_hours: Minimum age of files to remove

        Returns:
            int: Number of files deleted
        """
        temp_dir = self.base_dir / TEMP_DIR
        cutoff = datetime.now() - timedelta(hours=older_than_hours)
        deleted = 0

        try:
            if not temp_dir.exists():
                return 0
            for entry in temp_dir.iterdir():
                if entry.is_file() and datetime.fromtimestamp(entry.stat().st_mtime) < cutoff:
                    entry.unlink()
                    deleted += 1
        except OSError as e:
            raise map_os_error(e, "Clean up temp files")

        if deleted:
            logger.info(f"Removed {deleted} stale temp file(s)")
        return deleted

    def get_storage_stats(self) -> Dict[str, int]:
        """Count files and bytes in the uploads and generated namespaces"""
        try:
            upload_count, upload_size = self._directory_stats(self.base_dir / UPLOADS_DIR)
            generated_count, generated_size = self._directory_stats(self.base_dir / GENERATED_DIR)
        except OSError as e:
            raise map_os_error(e, "Read storage statistics")

        return {
            "total_files": upload_count + generated_count,
            "total_size": upload_size + generated_size,
            "uploaded_files": upload_count,
            "generated_files": generated_count,
        }

    def _validate_file(self, content: bytes, mime_type: str, original_name: str) -> None:
        if len(content) > self.max_file_size:
            raise file_upload_error(
                f"File size exceeds maximum allowed size of {self.max_file_size} bytes"
            )

        if mime_type not in self.allowed_mime_types:
            raise file_upload_error(
                f"File type '{mime_type}' is not allowed. "
                f"Allowed types: {', '.join(self.allowed_mime_types)}"
            )

        if not extension_matches_mime(original_name, mime_type):
            raise file_upload_error(
                f"File extension '{get_extension(original_name)}' does not match MIME type '{mime_type}'"
            )

        if mime_type == "application/pdf" and not matches_magic_bytes(content, mime_type):
            raise file_upload_error("Invalid PDF file: Missing PDF header")

    def _resolve(self, relative_path: str) -> Path:
        """Resolve a storage key to an absolute path inside the root"""
        full_path = (self.base_dir / relative_path).resolve()
        if full_path != self.base_dir and self.base_dir not in full_path.parents:
            raise AppError(
                ErrorKind.PATH_TRAVERSAL,
                "Invalid file path: Path traversal detected",
                {"path": relative_path}
            )
        return full_path

    def _write(self, relative_path: str, content: bytes) -> None:
        """Stage bytes in temp/, verify the size, then move them into place"""
        full_path = self._resolve(relative_path)
        staging_path = self.base_dir / TEMP_DIR / f"{uuid.uuid4().hex}.part"

        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            staging_path.parent.mkdir(parents=True, exist_ok=True)
            staging_path.write_bytes(content)

            written = staging_path.stat().st_size
            if written != len(content):
                raise AppError(
                    ErrorKind.FILE_SYSTEM,
                    "File size mismatch after saving",
                    {"expected": len(content), "written": written}
                )

            os.replace(staging_path, full_path)
        except OSError as e:
            raise map_os_error(e, "Save file")
        finally:
            if staging_path.exists():
                staging_path.unlink()

    @staticmethod
    def _directory_stats(directory: Path):
        count = 0
        total = 0
        if not directory.exists():
            return count, total
        for entry in directory.rglob("*"):
            if entry.is_file():
                count += 1
                total += entry.stat().st_size
        return count, total
