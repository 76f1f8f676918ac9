"""
Service métier pour les filières (programmes d'études d'un département).
"""

import uuid
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import ConflictError, NotFoundError
from app.models.academic import Course, Department, Subject
from app.models.student import Student
from app.schemas.academic import CourseCreate, CourseUpdate

logger = logging.getLogger(__name__)

DUPLICATE_CODE = "Une filière avec ce code existe déjà."


def create_course(db: Session, data: CourseCreate) -> Course:
    """
    Crée une filière dans un département existant.
    Lève NotFoundError si le département n'existe pas, ConflictError si le code est pris.
    """
    _ensure_department(db, data.department_id)
    if _code_taken(db, data.code):
        raise ConflictError(DUPLICATE_CODE)

    course = Course(**data.model_dump())
    db.add(course)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE_CODE)
    db.refresh(course)
    logger.info("Filière créée : %s (%s)", course.code, course.id)
    return course


def get_courses(db: Session, department_id: Optional[uuid.UUID] = None) -> list[Course]:
    """Retourne les filières triées par nom, éventuellement filtrées par département."""
    query = select(Course).order_by(Course.name)
    if department_id is not None:
        query = query.where(Course.department_id == department_id)
    return db.execute(query).scalars().all()


def get_course(db: Session, course_id: uuid.UUID) -> Optional[Course]:
    return db.get(Course, course_id)


def update_course(db: Session, course_id: uuid.UUID, data: CourseUpdate) -> Optional[Course]:
    course = db.get(Course, course_id)
    if course is None:
        return None

    _ensure_department(db, data.department_id)
    if _code_taken(db, data.code, exclude_id=course_id):
        raise ConflictError(DUPLICATE_CODE)

    for field, value in data.model_dump().items():
        setattr(course, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE_CODE)
    db.refresh(course)
    return course


def delete_course(db: Session, course_id: uuid.UUID) -> bool:
    """
    Supprime une filière.
    Bloqué tant que des matières ou des étudiants y sont rattachés.
    """
    course = db.get(Course, course_id)
    if course is None:
        return False

    nb_subjects = db.execute(
        select(func.count()).select_from(Subject).where(Subject.course_id == course_id)
    ).scalar() or 0
    nb_students = db.execute(
        select(func.count()).select_from(Student).where(Student.course_id == course_id)
    ).scalar() or 0

    if nb_subjects or nb_students:
        raise ConflictError(
            "Impossible de supprimer cette filière : des matières ou des étudiants y sont rattachés."
        )

    db.delete(course)
    db.commit()
    logger.info("Filière supprimée : %s", course_id)
    return True


def _ensure_department(db: Session, department_id: uuid.UUID) -> None:
    if db.get(Department, department_id) is None:
        raise NotFoundError("Département introuvable.")


def _code_taken(db: Session, code: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
    query = select(Course.id).where(Course.code == code)
    if exclude_id is not None:
        query = query.where(Course.id != exclude_id)
    return db.execute(query.limit(1)).scalar() is not None
