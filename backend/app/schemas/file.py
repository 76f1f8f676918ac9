"""
Schémas Pydantic pour les supports de cours (upload, listing, suppression).
"""

import uuid
from datetime import datetime
from typing import List, Optional

from app.schemas.base import CamelModel


class UploadedFileInfo(CamelModel):
    id: uuid.UUID
    filename: str
    original_name: str
    file_size: int
    mime_type: str
    storage_url: str
    title: str
    subject_file_id: Optional[uuid.UUID] = None


class UploadResponse(CamelModel):
    message: str
    file: UploadedFileInfo


class UploaderInfo(CamelModel):
    name: str
    email: str


class AttachedSubject(CamelModel):
    id: uuid.UUID
    name: str
    code: str


class SubjectFileRef(CamelModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    subject: AttachedSubject


class FileUploadResponse(CamelModel):
    id: uuid.UUID
    filename: str
    original_name: str
    file_size: int
    mime_type: str
    storage_url: str
    uploaded_by: uuid.UUID
    uploaded_at: Optional[datetime] = None
    uploader: Optional[UploaderInfo] = None
    subject_files: List[SubjectFileRef] = []


class FileUploadBrief(CamelModel):
    id: uuid.UUID
    original_name: str
    file_size: int
    mime_type: str
    storage_url: str


class SubjectFileResponse(CamelModel):
    """Support publié dans une matière, tel que listé dans les portails."""
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    subject: AttachedSubject
    file_upload: FileUploadBrief
