"""
User model for applicants
"""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship

from applypdf.database import Base
from applypdf.models.timestamps import utc_now
from applypdf.utils.identifiers import generate_id


class User(Base):
    """Applicant; created on first submission and reused by email"""
    __tablename__ = "users"

    id = Column(String(25), primary_key=True, default=generate_id, index=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(32))
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    # Relationships
    submissions = relationship("Submission", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.email}>"
