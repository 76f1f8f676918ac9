"""
Service métier pour les supports de cours.

L'objet est d'abord envoyé au stockage distant, puis les lignes file_uploads
et subject_files sont enregistrées en une transaction. Si la transaction
échoue, l'objet distant est supprimé.
"""

import uuid
import logging
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import NotFoundError, ValidationFailedError
from app.models.academic import Subject
from app.models.file_upload import FileUpload, SubjectFile
from app.models.user import User
from app.services.storage import S3StorageService, StorageError

logger = logging.getLogger(__name__)


async def upload_file(
    db: Session,
    storage: S3StorageService,
    *,
    content: bytes,
    original_name: str,
    content_type: Optional[str],
    uploaded_by: uuid.UUID,
    subject_id: Optional[uuid.UUID] = None,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> Tuple[FileUpload, Optional[SubjectFile]]:
    """
    Enregistre un fichier et, si subject_id est fourni, le publie dans la matière.
    Le titre par défaut est le nom d'origine du fichier.
    """
    if not content:
        raise ValidationFailedError("Aucun fichier fourni.")
    max_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    if len(content) > max_bytes:
        raise ValidationFailedError(
            f"Le fichier dépasse la taille maximale autorisée ({settings.MAX_UPLOAD_SIZE_MB} Mo)."
        )
    if db.get(User, uploaded_by) is None:
        raise NotFoundError("Utilisateur introuvable.")
    if subject_id is not None and db.get(Subject, subject_id) is None:
        raise NotFoundError("Matière introuvable.")

    mime_type = content_type or "application/octet-stream"
    stored = await storage.upload_file(content, original_name, mime_type)

    file_upload = FileUpload(
        id=uuid.uuid4(),
        filename=stored.key.rsplit("/", 1)[-1],
        original_name=original_name,
        file_size=stored.size,
        mime_type=mime_type,
        storage_key=stored.key,
        storage_url=stored.url,
        uploaded_by=uploaded_by,
    )
    subject_file = None
    if subject_id is not None:
        subject_file = SubjectFile(
            id=uuid.uuid4(),
            subject_id=subject_id,
            file_upload_id=file_upload.id,
            title=(title or "").strip() or original_name,
            description=description,
        )

    try:
        db.add(file_upload)
        if subject_file is not None:
            db.add(subject_file)
        db.commit()
    except Exception:
        db.rollback()
        await _discard_remote(storage, stored.key)
        raise

    logger.info("Fichier enregistré : %s (%s, %d octets)", original_name, file_upload.id, stored.size)
    return file_upload, subject_file


def get_files(
    db: Session,
    subject_id: Optional[uuid.UUID] = None,
    uploaded_by: Optional[uuid.UUID] = None,
) -> list[FileUpload]:
    """Fichiers les plus récents d'abord, filtrés par matière et/ou auteur."""
    query = select(FileUpload).order_by(FileUpload.uploaded_at.desc())
    if subject_id is not None:
        query = query.where(FileUpload.subject_files.any(SubjectFile.subject_id == subject_id))
    if uploaded_by is not None:
        query = query.where(FileUpload.uploaded_by == uploaded_by)
    return db.execute(query).scalars().all()


def get_file(db: Session, file_id: uuid.UUID) -> Optional[FileUpload]:
    return db.get(FileUpload, file_id)


async def get_download_url(
    db: Session, storage: S3StorageService, file_id: uuid.UUID
) -> Optional[str]:
    """Lien de téléchargement temporaire, ou None si le fichier n'existe pas."""
    file_upload = db.get(FileUpload, file_id)
    if file_upload is None:
        return None
    return await storage.generate_presigned_url(file_upload.storage_key)


async def delete_file(db: Session, storage: S3StorageService, file_id: uuid.UUID) -> bool:
    """
    Supprime l'objet distant (un seul appel), puis le fichier et ses
    publications dans une même transaction. Retourne False si introuvable.
    """
    file_upload = db.get(FileUpload, file_id)
    if file_upload is None:
        return False

    await storage.delete_file(file_upload.storage_key)

    try:
        # Les subject_files suivent via la cascade de la relation.
        db.delete(file_upload)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Fichier supprimé : %s", file_id)
    return True


def get_subject_files(
    db: Session, subject_ids: list[uuid.UUID], subject_id: Optional[uuid.UUID] = None
) -> list[SubjectFile]:
    """
    Publications des matières `subject_ids`, les plus récentes d'abord.
    Avec subject_id, restreint à cette matière si elle fait partie de la liste.
    """
    if subject_id is not None:
        if subject_id not in subject_ids:
            return []
        subject_ids = [subject_id]
    if not subject_ids:
        return []

    return db.execute(
        select(SubjectFile)
        .where(SubjectFile.subject_id.in_(subject_ids))
        .order_by(SubjectFile.uploaded_at.desc())
    ).scalars().all()


async def _discard_remote(storage: S3StorageService, key: str) -> None:
    try:
        await storage.delete_file(key)
    except StorageError:
        logger.error("Objet distant orphelin après échec d'enregistrement : %s", key, exc_info=True)
