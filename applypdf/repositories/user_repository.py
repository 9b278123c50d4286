"""
User repository
"""
import logging
from typing import Optional

from sqlalchemy import select

from applypdf.core.errors import AppError, ErrorKind, conflict_error
from applypdf.models import User
from applypdf.repositories.base import BaseRepository
from applypdf.schemas import UserCreate, UserUpdate, UserRecord

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository):
    """CRUD access to users; email is unique and stored lower-cased"""

    resource = "User"

    def create(self, data: UserCreate) -> UserRecord:
        """
        Create a user

        Raises:
            AppError: CONFLICT if a user with the same email exists
        """
        try:
            with self._session() as db:
                user = User(
                    first_name=data.first_name,
                    last_name=data.last_name,
                    email=data.email.strip().lower(),
                    phone=data.phone or None,
                )
                db.add(user)
                db.commit()
                db.refresh(user)
                logger.info(f"Created user {user.id}")
                return UserRecord.model_validate(user)
        except AppError as e:
            if e.kind == ErrorKind.CONFLICT:
                raise conflict_error("A user with this email already exists") from e
            raise

    def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        with self._session() as db:
            user = db.get(User, user_id)
            return UserRecord.model_validate(user) if user else None

    def find_by_email(self, email: str) -> Optional[UserRecord]:
        with self._session() as db:
            user = db.execute(
                select(User).where(User.email == email.strip().lower())
            ).scalar_one_or_none()
            return UserRecord.model_validate(user) if user else None

    def update(self, user_id: str, data: UserUpdate) -> UserRecord:
        """
        Update a user's name or phone

        Raises:
            AppError: NOT_FOUND if the user does not exist
        """
        with self._session() as db:
            user = db.execute(select(User).where(User.id == user_id)).scalar_one()
            for key, value in data.model_dump(exclude_unset=True).items():
                setattr(user, key, value)
            db.commit()
            db.refresh(user)
            return UserRecord.model_validate(user)

    def delete(self, user_id: str) -> None:
        """Delete a user and, by cascade, their submissions"""
        with self._session() as db:
            user = db.execute(select(User).where(User.id == user_id)).scalar_one()
            db.delete(user)
            db.commit()
            logger.info(f"Deleted user {user_id}")

    def find_or_create(self, data: UserCreate) -> UserRecord:
        """
        Return the user with this email, creating it on first use

        A concurrent create of the same email surfaces as a conflict; the
        winner's record is then read back.
        """
        existing = self.find_by_email(data.email)
        if existing:
            return existing

        try:
            return self.create(data)
        except AppError as e:
            if e.kind != ErrorKind.CONFLICT:
                raise
            existing = self.find_by_email(data.email)
            if existing is None:
                raise
            return existing
