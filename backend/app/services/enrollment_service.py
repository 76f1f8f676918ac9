"""
Service métier pour les inscriptions des étudiants aux matières.

La mise à jour est une réconciliation : l'ensemble des inscriptions devient
exactement l'ensemble demandé, en une seule transaction.
"""

import uuid
import logging
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import ConflictError, ValidationFailedError
from app.models.academic import Course, Department, Subject
from app.models.student import Enrollment, Student

logger = logging.getLogger(__name__)


def resolve_student(db: Session, student_or_user_id: uuid.UUID) -> Optional[Student]:
    """Retrouve un étudiant par l'id de son profil ou par l'id de son compte."""
    return db.execute(
        select(Student).where(
            or_(Student.id == student_or_user_id, Student.user_id == student_or_user_id)
        ).limit(1)
    ).scalars().first()


def get_enrollments(db: Session, student: Student) -> list[dict]:
    """Matières suivies par l'étudiant, les plus récentes d'abord."""
    rows = db.execute(
        select(Enrollment, Subject, Course.name, Department.name)
        .join(Subject, Subject.id == Enrollment.subject_id)
        .join(Course, Course.id == Subject.course_id)
        .join(Department, Department.id == Course.department_id)
        .where(Enrollment.student_id == student.id)
        .order_by(Enrollment.enrolled_at.desc())
    ).all()

    return [
        {
            "id": enrollment.id,
            "subject_id": subject.id,
            "subject_name": subject.name,
            "subject_code": subject.code,
            "semester": subject.semester,
            "course_name": course_name,
            "department_name": department_name,
            "enrolled_at": enrollment.enrolled_at,
        }
        for enrollment, subject, course_name, department_name in rows
    ]


def reconcile_enrollments(db: Session, student: Student, subject_ids: list[uuid.UUID]) -> int:
    """
    Remplace les inscriptions de l'étudiant par l'ensemble `subject_ids` (dédoublonné).

    Les inscriptions conservées ne sont pas touchées, celles qui ne figurent
    plus dans la liste sont supprimées, les manquantes sont créées.
    Lève ValidationFailedError (avec invalidIds) si une matière n'existe pas.
    Retourne le nombre d'inscriptions après réconciliation.
    """
    wanted = list(dict.fromkeys(subject_ids))

    if wanted:
        known = set(db.execute(
            select(Subject.id).where(Subject.id.in_(wanted))
        ).scalars().all())
        invalid = [str(subject_id) for subject_id in wanted if subject_id not in known]
        if invalid:
            raise ValidationFailedError(
                "Certaines matières sont introuvables.", extra={"invalidIds": invalid}
            )

    current = db.execute(
        select(Enrollment).where(Enrollment.student_id == student.id)
    ).scalars().all()
    current_subject_ids = {enrollment.subject_id for enrollment in current}
    wanted_set = set(wanted)

    removed = [e for e in current if e.subject_id not in wanted_set]
    added = [subject_id for subject_id in wanted if subject_id not in current_subject_ids]

    try:
        for enrollment in removed:
            db.delete(enrollment)
        for subject_id in added:
            db.add(Enrollment(student_id=student.id, subject_id=subject_id))
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Les inscriptions ont été modifiées en parallèle, veuillez réessayer.")
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Inscriptions de l'étudiant %s : +%d / -%d (total %d)",
        student.id, len(added), len(removed), len(wanted),
    )
    return len(wanted)
