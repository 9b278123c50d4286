"""
Process-wide service instances

Built once at startup and handed to consumers explicitly; nothing here is
a module-level singleton.
"""
import logging
from dataclasses import dataclass

from sqlalchemy.engine import Engine

from applypdf.config import Settings
from applypdf.core.errors import retry_operation
from applypdf.database import create_db_engine, create_session_factory, init_db
from applypdf.repositories import SubmissionRepository, UserRepository
from applypdf.services import ApplicationService, FileStorageService, PdfGeneratorService

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    engine: Engine
    users: UserRepository
    submissions: SubmissionRepository
    storage: FileStorageService
    pdf_generator: PdfGeneratorService
    application_service: ApplicationService

    def close(self):
        self.engine.dispose()


def build_container(settings: Settings, initialize: bool = True) -> ServiceContainer:
    """
    Wire repositories and services for one process

    Args:
        settings: Application settings
        initialize: Create database tables and storage directories

    Returns:
        ServiceContainer: Shared instances
    """
    engine = create_db_engine(settings.DATABASE_URL)
    session_factory = create_session_factory(engine)

    storage = FileStorageService(
        settings.STORAGE_DIR,
        max_file_size=settings.MAX_FILE_SIZE,
        allowed_mime_types=settings.allowed_mime_types_list,
    )

    if initialize:
        # the database may still be starting when the service comes up
        retry_operation(lambda: init_db(engine), max_retries=3, base_delay=1.0)
        storage.initialize()
        logger.info("Database and file storage initialized")

    users = UserRepository(session_factory)
    submissions = SubmissionRepository(session_factory)
    pdf_generator = PdfGeneratorService(
        title=settings.PDF_TITLE,
        position_title=settings.POSITION_TITLE,
    )

    return ServiceContainer(
        settings=settings,
        engine=engine,
        users=users,
        submissions=submissions,
        storage=storage,
        pdf_generator=pdf_generator,
        application_service=ApplicationService(users, submissions, storage, pdf_generator, settings),
    )
