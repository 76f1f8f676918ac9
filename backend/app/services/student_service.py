"""
Service métier pour les étudiants.

Un étudiant = un compte users (rôle STUDENT) + un profil students + ses
inscriptions initiales, créés ensemble dans une seule transaction.
"""

import uuid
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import ConflictError, NotFoundError, ValidationFailedError
from app.models.academic import Course, Department, Subject
from app.models.student import Enrollment, Student
from app.models.user import User
from app.schemas.student import StudentCreate, StudentProfileIn, StudentUpdate
from app.security import hash_password
from app.services.account_service import DUPLICATE_EMAIL, email_taken

logger = logging.getLogger(__name__)

DUPLICATE_STUDENT_ID = "Un étudiant avec ce matricule existe déjà."


def create_student(db: Session, data: StudentCreate) -> Student:
    """
    Crée le compte, le profil étudiant et les inscriptions aux matières choisies.

    Toutes les matières doivent exister et appartenir à la filière choisie,
    sinon ValidationFailedError est levée avant toute écriture.
    """
    if email_taken(db, data.email):
        raise ConflictError(DUPLICATE_EMAIL)
    if _student_id_taken(db, data.profile.student_id):
        raise ConflictError(DUPLICATE_STUDENT_ID)
    _ensure_placement(db, data.profile)

    subject_ids = list(dict.fromkeys(data.subjects))
    _ensure_subjects_in_course(db, subject_ids, data.profile.course_id)

    user = User(
        id=uuid.uuid4(),
        email=data.email,
        password_hash=hash_password(data.password),
        name=data.name,
        role="STUDENT",
    )
    student = Student(
        id=uuid.uuid4(),
        student_id=data.profile.student_id,
        user_id=user.id,
        department_id=data.profile.department_id,
        course_id=data.profile.course_id,
        year=data.profile.year,
        semester=data.profile.semester,
    )

    try:
        db.add(user)
        db.flush()
        db.add(student)
        db.flush()
        for subject_id in subject_ids:
            db.add(Enrollment(student_id=student.id, subject_id=subject_id))
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Un étudiant avec cet email ou ce matricule existe déjà.")
    except Exception:
        db.rollback()
        raise

    db.refresh(student)
    logger.info(
        "Étudiant créé : %s (%s), %d inscriptions", student.student_id, student.id, len(subject_ids)
    )
    return student


def get_students(db: Session) -> list[Student]:
    """Retourne les étudiants triés par nom."""
    return db.execute(
        select(Student).join(User, User.id == Student.user_id).order_by(User.name)
    ).scalars().all()


def get_student(db: Session, student_id: uuid.UUID) -> Optional[Student]:
    return db.get(Student, student_id)


def update_student(db: Session, student_id: uuid.UUID, data: StudentUpdate) -> Optional[Student]:
    student = db.get(Student, student_id)
    if student is None:
        return None

    if email_taken(db, data.email, exclude_user_id=student.user_id):
        raise ConflictError(DUPLICATE_EMAIL)
    if _student_id_taken(db, data.profile.student_id, exclude_id=student_id):
        raise ConflictError(DUPLICATE_STUDENT_ID)
    _ensure_placement(db, data.profile)

    user = student.user
    user.name = data.name
    user.email = data.email
    if data.password:
        user.password_hash = hash_password(data.password)

    for field, value in data.profile.model_dump().items():
        setattr(student, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Un étudiant avec cet email ou ce matricule existe déjà.")
    db.refresh(student)
    return student


def delete_student(db: Session, student_id: uuid.UUID) -> bool:
    """
    Supprime le profil étudiant et son compte.
    Bloqué tant que l'étudiant a des inscriptions.
    """
    student = db.get(Student, student_id)
    if student is None:
        return False

    nb_enrollments = db.execute(
        select(func.count()).select_from(Enrollment).where(Enrollment.student_id == student_id)
    ).scalar() or 0
    if nb_enrollments:
        raise ConflictError("Impossible de supprimer un étudiant inscrit à des matières.")

    user = db.get(User, student.user_id)
    try:
        db.delete(student)
        if user is not None:
            db.delete(user)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Étudiant supprimé : %s", student_id)
    return True


def _ensure_placement(db: Session, profile: StudentProfileIn) -> None:
    if db.get(Department, profile.department_id) is None:
        raise NotFoundError("Département introuvable.")
    if db.get(Course, profile.course_id) is None:
        raise NotFoundError("Filière introuvable.")


def _ensure_subjects_in_course(db: Session, subject_ids: list[uuid.UUID], course_id: uuid.UUID) -> None:
    if not subject_ids:
        return
    found = set(db.execute(
        select(Subject.id).where(Subject.id.in_(subject_ids), Subject.course_id == course_id)
    ).scalars().all())
    invalid = [str(subject_id) for subject_id in subject_ids if subject_id not in found]
    if invalid:
        raise ValidationFailedError(
            "Certaines matières n'existent pas ou n'appartiennent pas à la filière choisie.",
            extra={"invalidIds": invalid},
        )


def _student_id_taken(db: Session, value: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
    query = select(Student.id).where(Student.student_id == value)
    if exclude_id is not None:
        query = query.where(Student.id != exclude_id)
    return db.execute(query.limit(1)).scalar() is not None
