"""
Shared session handling for repositories
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from applypdf.core.errors import map_database_error

logger = logging.getLogger(__name__)


class BaseRepository:
    """
    Opens one short-lived session per operation

    Store errors never leave a repository raw: they are translated into
    AppError by map_database_error.
    """

    resource = "Record"

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            error = map_database_error(e, self.resource)
            logger.debug(f"{self.__class__.__name__}: {type(e).__name__} mapped to {error.code}")
            raise error from e
        finally:
            db.close()
