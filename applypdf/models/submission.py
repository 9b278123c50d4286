"""
Submission model for tracking applications and their generated PDFs
"""
from enum import Enum

from sqlalchemy import Column, String, Integer, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship

from applypdf.database import Base
from applypdf.models.timestamps import utc_now
from applypdf.utils.identifiers import generate_id


class SubmissionStatus(str, Enum):
    """
    Submission lifecycle

    PENDING is the initial state. Rendering moves a submission to COMPLETED
    or FAILED; reprocessing goes through PROCESSING first. REJECTED is
    reserved and not assigned by any operation.
    """
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REJECTED = "rejected"


class Submission(Base):
    """One application: job description, optional upload and generated PDF"""
    __tablename__ = "submissions"

    id = Column(String(25), primary_key=True, default=generate_id, index=True)
    user_id = Column(String(25), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    job_description = Column(Text, nullable=False)
    status = Column(String(20), default=SubmissionStatus.PENDING.value, nullable=False, index=True)
    generated_pdf_path = Column(String(500))
    uploaded_file_name = Column(String(255))
    uploaded_file_path = Column(String(500))
    uploaded_file_size = Column(Integer)
    uploaded_file_mime_type = Column(String(100))
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    # Relationships
    user = relationship("User", back_populates="submissions", lazy="joined")

    def __repr__(self):
        return f"<Submission {self.id} - {self.status}>"
