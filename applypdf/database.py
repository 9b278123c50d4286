"""
Database connection and session management
Supports SQLite (default) and PostgreSQL
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

# Base class for models
Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    """
    Create the database engine for a connection URL

    Args:
        database_url: SQLAlchemy connection URL

    Returns:
        Engine: Configured engine
    """
    connect_args = {}
    engine_kwargs = {"pool_pre_ping": True}  # Verify connections before using

    if database_url.startswith("sqlite"):
        # Sessions are used from FastAPI's worker threads
        connect_args = {"check_same_thread": False}
    elif database_url.startswith("postgresql"):
        connect_args = {
            "connect_timeout": 10,
            "options": "-c timezone=utc"
        }
        engine_kwargs.update(pool_size=10, max_overflow=20)

    return create_engine(database_url, connect_args=connect_args, **engine_kwargs)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to an engine"""
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine):
    """Initialize database - create all tables"""
    # Import all models here to ensure they're registered
    from applypdf.models import user, submission  # noqa: F401
    Base.metadata.create_all(bind=engine)
