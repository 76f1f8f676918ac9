"""
Service métier pour les matières.
Le code d'une matière est unique au sein de sa filière uniquement.
"""

import uuid
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import ConflictError, NotFoundError
from app.models.academic import Course, Subject
from app.models.file_upload import SubjectFile
from app.models.student import Enrollment
from app.models.teacher import TeacherSubject
from app.schemas.academic import SubjectCreate, SubjectUpdate

logger = logging.getLogger(__name__)

DUPLICATE_CODE = "Une matière avec ce code existe déjà dans cette filière."


def create_subject(db: Session, data: SubjectCreate) -> Subject:
    if db.get(Course, data.course_id) is None:
        raise NotFoundError("Filière introuvable.")
    if _code_taken(db, data.course_id, data.code):
        raise ConflictError(DUPLICATE_CODE)

    subject = Subject(**data.model_dump())
    db.add(subject)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE_CODE)
    db.refresh(subject)
    logger.info("Matière créée : %s (%s)", subject.code, subject.id)
    return subject


def get_subjects(
    db: Session,
    course_id: Optional[uuid.UUID] = None,
    department_id: Optional[uuid.UUID] = None,
) -> list[Subject]:
    """
    Retourne les matières triées par nom.
    Filtre par filière si course_id est fourni, sinon par département (via la filière).
    """
    query = select(Subject).order_by(Subject.name)
    if course_id is not None:
        query = query.where(Subject.course_id == course_id)
    elif department_id is not None:
        query = query.join(Course, Course.id == Subject.course_id).where(
            Course.department_id == department_id
        )
    return db.execute(query).scalars().all()


def get_subject(db: Session, subject_id: uuid.UUID) -> Optional[Subject]:
    return db.get(Subject, subject_id)


def update_subject(db: Session, subject_id: uuid.UUID, data: SubjectUpdate) -> Optional[Subject]:
    subject = db.get(Subject, subject_id)
    if subject is None:
        return None

    if db.get(Course, data.course_id) is None:
        raise NotFoundError("Filière introuvable.")
    if _code_taken(db, data.course_id, data.code, exclude_id=subject_id):
        raise ConflictError(DUPLICATE_CODE)

    for field, value in data.model_dump().items():
        setattr(subject, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE_CODE)
    db.refresh(subject)
    return subject


def delete_subject(db: Session, subject_id: uuid.UUID) -> bool:
    """
    Supprime une matière.
    Bloqué tant que des classes (enseignants affectés), des inscriptions ou des
    fichiers de cours y sont rattachés : les fichiers sont supprimés d'abord via
    /api/files pour que l'objet stocké parte avec eux.
    """
    subject = db.get(Subject, subject_id)
    if subject is None:
        return False

    nb_classes = db.execute(
        select(func.count()).select_from(TeacherSubject).where(TeacherSubject.subject_id == subject_id)
    ).scalar() or 0
    nb_enrollments = db.execute(
        select(func.count()).select_from(Enrollment).where(Enrollment.subject_id == subject_id)
    ).scalar() or 0
    nb_files = db.execute(
        select(func.count()).select_from(SubjectFile).where(SubjectFile.subject_id == subject_id)
    ).scalar() or 0

    if nb_classes or nb_enrollments or nb_files:
        raise ConflictError(
            "Impossible de supprimer cette matière : des classes, des inscriptions "
            "ou des fichiers y sont rattachés."
        )

    db.delete(subject)
    db.commit()
    logger.info("Matière supprimée : %s", subject_id)
    return True


def _code_taken(
    db: Session, course_id: uuid.UUID, code: str, exclude_id: Optional[uuid.UUID] = None
) -> bool:
    query = select(Subject.id).where(Subject.course_id == course_id, Subject.code == code)
    if exclude_id is not None:
        query = query.where(Subject.id != exclude_id)
    return db.execute(query.limit(1)).scalar() is not None
