"""
Router pour les supports de cours : upload, listing, téléchargement, suppression.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import ValidationFailedError
from app.schemas.base import MessageResponse
from app.schemas.file import FileUploadResponse, UploadResponse
from app.services import file_service
from app.services.storage import S3StorageService, get_storage

router = APIRouter(prefix="/api", tags=["Fichiers"])

NOT_FOUND = "Fichier introuvable."


def _parse_optional_uuid(value: Optional[str], label: str) -> Optional[uuid.UUID]:
    """Les formulaires envoient une chaîne vide pour un champ non renseigné."""
    if value is None or not value.strip():
        return None
    try:
        return uuid.UUID(value.strip())
    except ValueError:
        raise ValidationFailedError(f"{label} invalide.")


@router.post("/upload", response_model=UploadResponse, summary="Déposer un fichier")
async def upload_file(
    file: Optional[UploadFile] = File(default=None),
    title: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    subject_id: Optional[str] = Form(default=None, alias="subjectId"),
    uploaded_by: uuid.UUID = Form(..., alias="uploadedBy"),
    db: Session = Depends(get_db),
    storage: S3StorageService = Depends(get_storage),
):
    """
    Envoie le fichier au stockage puis l'enregistre en base.
    Avec subjectId, le fichier est publié dans la matière (titre par défaut : nom du fichier).
    """
    if file is None or not file.filename:
        raise ValidationFailedError("Aucun fichier fourni.")

    content = await file.read()
    file_upload, subject_file = await file_service.upload_file(
        db,
        storage,
        content=content,
        original_name=file.filename,
        content_type=file.content_type,
        uploaded_by=uploaded_by,
        subject_id=_parse_optional_uuid(subject_id, "subjectId"),
        title=title,
        description=description,
    )

    return {
        "message": "Fichier déposé avec succès.",
        "file": {
            "id": file_upload.id,
            "filename": file_upload.filename,
            "original_name": file_upload.original_name,
            "file_size": file_upload.file_size,
            "mime_type": file_upload.mime_type,
            "storage_url": file_upload.storage_url,
            "title": subject_file.title if subject_file is not None else file_upload.original_name,
            "subject_file_id": subject_file.id if subject_file is not None else None,
        },
    }


@router.get("/files", response_model=List[FileUploadResponse], summary="Lister les fichiers")
def list_files(
    subject_id: Optional[uuid.UUID] = Query(default=None, alias="subjectId"),
    uploaded_by: Optional[uuid.UUID] = Query(default=None, alias="uploadedBy"),
    db: Session = Depends(get_db),
):
    return file_service.get_files(db, subject_id, uploaded_by)


@router.get("/files/{file_id}", response_model=FileUploadResponse, summary="Détail d'un fichier")
def get_file(file_id: uuid.UUID, db: Session = Depends(get_db)):
    file_upload = file_service.get_file(db, file_id)
    if file_upload is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return file_upload


@router.get("/files/{file_id}/download", summary="Télécharger un fichier")
async def download_file(
    file_id: uuid.UUID,
    db: Session = Depends(get_db),
    storage: S3StorageService = Depends(get_storage),
):
    """Redirige vers un lien de téléchargement temporaire."""
    url = await file_service.get_download_url(db, storage, file_id)
    if url is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return RedirectResponse(url, status_code=307)


@router.delete("/files/{file_id}", response_model=MessageResponse, summary="Supprimer un fichier")
async def delete_file(
    file_id: uuid.UUID,
    db: Session = Depends(get_db),
    storage: S3StorageService = Depends(get_storage),
):
    """Supprime l'objet distant, puis le fichier et ses publications."""
    if not await file_service.delete_file(db, storage, file_id):
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Fichier supprimé."}
