"""
Service métier pour les enseignants.

Un enseignant = un compte users (rôle TEACHER) + un profil teachers, créés et
supprimés ensemble dans une seule transaction.
"""

import uuid
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import ConflictError, NotFoundError
from app.models.academic import Department, Subject
from app.models.teacher import Teacher, TeacherSubject
from app.models.user import User
from app.schemas.teacher import TeacherCreate, TeacherUpdate
from app.security import hash_password
from app.services.account_service import DUPLICATE_EMAIL, email_taken

logger = logging.getLogger(__name__)

DUPLICATE_TEACHER_ID = "Un enseignant avec ce matricule existe déjà."


def class_code(teacher_id: str, subject_code: str) -> str:
    return f"{teacher_id}-{subject_code}"


def create_teacher(db: Session, data: TeacherCreate) -> Teacher:
    """
    Crée le compte, le profil enseignant et ses classes.

    Les identifiants de matières inconnus sont ignorés. Rien n'est persisté
    si l'une des insertions échoue.
    """
    if email_taken(db, data.email):
        raise ConflictError(DUPLICATE_EMAIL)
    if _teacher_id_taken(db, data.profile.teacher_id):
        raise ConflictError(DUPLICATE_TEACHER_ID)
    if db.get(Department, data.profile.department_id) is None:
        raise NotFoundError("Département introuvable.")

    user = User(
        id=uuid.uuid4(),
        email=data.email,
        password_hash=hash_password(data.password),
        name=data.name,
        role="TEACHER",
    )
    teacher = Teacher(
        id=uuid.uuid4(),
        teacher_id=data.profile.teacher_id,
        user_id=user.id,
        department_id=data.profile.department_id,
    )

    try:
        db.add(user)
        db.flush()
        db.add(teacher)
        db.flush()

        subjects = _find_subjects(db, data.subjects)
        for subject in subjects:
            db.add(TeacherSubject(
                teacher_id=teacher.id,
                subject_id=subject.id,
                class_code=class_code(teacher.teacher_id, subject.code),
            ))
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Un enseignant avec cet email ou ce matricule existe déjà.")
    except Exception:
        db.rollback()
        raise

    db.refresh(teacher)
    logger.info(
        "Enseignant créé : %s (%s), %d classes", teacher.teacher_id, teacher.id, len(subjects)
    )
    return teacher


def get_teachers(db: Session) -> list[Teacher]:
    """Retourne les enseignants triés par nom."""
    return db.execute(
        select(Teacher).join(User, User.id == Teacher.user_id).order_by(User.name)
    ).scalars().all()


def get_teacher(db: Session, teacher_id: uuid.UUID) -> Optional[Teacher]:
    return db.get(Teacher, teacher_id)


def update_teacher(db: Session, teacher_id: uuid.UUID, data: TeacherUpdate) -> Optional[Teacher]:
    """
    Met à jour le compte et le profil dans une même transaction.
    Le mot de passe n'est re-haché que s'il est fourni ; le rôle ne change jamais.
    """
    teacher = db.get(Teacher, teacher_id)
    if teacher is None:
        return None

    if email_taken(db, data.email, exclude_user_id=teacher.user_id):
        raise ConflictError(DUPLICATE_EMAIL)
    if _teacher_id_taken(db, data.profile.teacher_id, exclude_id=teacher_id):
        raise ConflictError(DUPLICATE_TEACHER_ID)
    if db.get(Department, data.profile.department_id) is None:
        raise NotFoundError("Département introuvable.")

    user = teacher.user
    user.name = data.name
    user.email = data.email
    if data.password:
        user.password_hash = hash_password(data.password)

    if teacher.teacher_id != data.profile.teacher_id:
        for teacher_subject in teacher.classes:
            teacher_subject.class_code = class_code(data.profile.teacher_id, teacher_subject.subject.code)
    teacher.teacher_id = data.profile.teacher_id
    teacher.department_id = data.profile.department_id

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Un enseignant avec cet email ou ce matricule existe déjà.")
    db.refresh(teacher)
    return teacher


def delete_teacher(db: Session, teacher_id: uuid.UUID) -> bool:
    """
    Supprime le profil enseignant et son compte.
    Bloqué tant que l'enseignant a des classes affectées.
    """
    teacher = db.get(Teacher, teacher_id)
    if teacher is None:
        return False

    nb_classes = db.execute(
        select(func.count()).select_from(TeacherSubject).where(TeacherSubject.teacher_id == teacher_id)
    ).scalar() or 0
    if nb_classes:
        raise ConflictError("Impossible de supprimer un enseignant qui a des classes affectées.")

    user = db.get(User, teacher.user_id)
    try:
        db.delete(teacher)
        if user is not None:
            db.delete(user)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Enseignant supprimé : %s", teacher_id)
    return True


def _teacher_id_taken(db: Session, value: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
    query = select(Teacher.id).where(Teacher.teacher_id == value)
    if exclude_id is not None:
        query = query.where(Teacher.id != exclude_id)
    return db.execute(query.limit(1)).scalar() is not None


def _find_subjects(db: Session, subject_ids: list[uuid.UUID]) -> list[Subject]:
    unique_ids = list(dict.fromkeys(subject_ids))
    if not unique_ids:
        return []
    return db.execute(
        select(Subject).where(Subject.id.in_(unique_ids))
    ).scalars().all()
