"""
Modèles SQLAlchemy pour les supports de cours.
FileUpload = l'objet physique stocké sur S3 ; SubjectFile = sa publication dans une matière.
"""

import uuid
from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class FileUpload(Base):
    __tablename__ = "file_uploads"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    filename = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    file_size = Column(BigInteger, nullable=False)
    mime_type = Column(String(255), nullable=False)
    storage_key = Column(String(500), nullable=False)
    storage_url = Column(String(1000), nullable=False)
    uploaded_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    uploaded_at = Column(DateTime, server_default=func.now())

    uploader = relationship("User")
    subject_files = relationship(
        "SubjectFile", back_populates="file_upload", cascade="all, delete-orphan"
    )


class SubjectFile(Base):
    """Rattachement d'un fichier à une matière, avec titre et description."""
    __tablename__ = "subject_files"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    subject_id = Column(UUID(as_uuid=True), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    file_upload_id = Column(UUID(as_uuid=True), ForeignKey("file_uploads.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    uploaded_at = Column(DateTime, server_default=func.now())

    subject = relationship("Subject")
    file_upload = relationship("FileUpload", back_populates="subject_files")
