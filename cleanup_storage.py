"""
Cleanup script to remove stale staging files from file storage
"""
from applypdf.config import settings
from applypdf.core.errors import AppError
from applypdf.services.file_storage import FileStorageService
from applypdf.utils.validation import format_file_size


def cleanup_storage(older_than_hours: int = settings.TEMP_FILE_MAX_AGE_HOURS):
    """
    Delete temp/ files older than the configured age and report storage usage
    """
    storage = FileStorageService(
        settings.STORAGE_DIR,
        max_file_size=settings.MAX_FILE_SIZE,
        allowed_mime_types=settings.allowed_mime_types_list,
    )

    try:
        storage.initialize()
        deleted = storage.cleanup_temp_files(older_than_hours)
        stats = storage.get_storage_stats()
    except AppError as e:
        print(f"Error during cleanup: {e.message}")
        raise

    print(f"\n{'='*60}")
    print(f"Cleanup complete!")
    print(f"Stale temp files deleted: {deleted} (older than {older_than_hours}h)")
    print(f"Uploaded files: {stats['uploaded_files']}")
    print(f"Generated PDFs: {stats['generated_files']}")
    print(f"Total size: {format_file_size(stats['total_size'])}")
    print(f"{'='*60}\n")
    return deleted


if __name__ == "__main__":
    cleanup_storage()
