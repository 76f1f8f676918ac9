"""
Service métier pour les départements.
"""

import uuid
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import ConflictError
from app.models.academic import Course, Department
from app.models.student import Student
from app.models.teacher import Teacher
from app.schemas.academic import DepartmentCreate, DepartmentUpdate

logger = logging.getLogger(__name__)

DUPLICATE_CODE = "Un département avec ce code existe déjà."


def create_department(db: Session, data: DepartmentCreate) -> Department:
    """
    Crée un département.
    Lève ConflictError si le code est déjà utilisé.
    """
    if _code_taken(db, data.code):
        raise ConflictError(DUPLICATE_CODE)

    department = Department(**data.model_dump())
    db.add(department)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE_CODE)
    db.refresh(department)
    logger.info("Département créé : %s (%s)", department.code, department.id)
    return department


def get_departments(db: Session) -> list[Department]:
    """Retourne tous les départements, triés par nom."""
    return db.execute(
        select(Department).order_by(Department.name)
    ).scalars().all()


def get_department(db: Session, department_id: uuid.UUID) -> Optional[Department]:
    return db.get(Department, department_id)


def update_department(
    db: Session, department_id: uuid.UUID, data: DepartmentUpdate
) -> Optional[Department]:
    """Met à jour un département. Retourne None s'il n'existe pas."""
    department = db.get(Department, department_id)
    if department is None:
        return None

    if _code_taken(db, data.code, exclude_id=department_id):
        raise ConflictError(DUPLICATE_CODE)

    for field, value in data.model_dump().items():
        setattr(department, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE_CODE)
    db.refresh(department)
    return department


def delete_department(db: Session, department_id: uuid.UUID) -> bool:
    """
    Supprime un département.
    Bloqué tant que des filières, enseignants ou étudiants y sont rattachés.
    Retourne True si supprimé, False si introuvable.
    """
    department = db.get(Department, department_id)
    if department is None:
        return False

    nb_courses = _count(db, Course, Course.department_id, department_id)
    nb_teachers = _count(db, Teacher, Teacher.department_id, department_id)
    nb_students = _count(db, Student, Student.department_id, department_id)

    if nb_courses or nb_teachers or nb_students:
        raise ConflictError(
            "Impossible de supprimer ce département : des filières, enseignants "
            "ou étudiants y sont rattachés."
        )

    db.delete(department)
    db.commit()
    logger.info("Département supprimé : %s", department_id)
    return True


def _code_taken(db: Session, code: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
    query = select(Department.id).where(Department.code == code)
    if exclude_id is not None:
        query = query.where(Department.id != exclude_id)
    return db.execute(query.limit(1)).scalar() is not None


def _count(db: Session, model, column, value) -> int:
    return db.execute(
        select(func.count()).select_from(model).where(column == value)
    ).scalar() or 0
