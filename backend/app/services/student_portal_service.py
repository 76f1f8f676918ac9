"""
Lectures et mises à jour du portail étudiant : matières suivies et leurs
enseignants, choix de filière, catalogue de la filière, supports publiés.
"""

import uuid
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.errors import NotFoundError
from app.models.academic import Course, Department, Subject
from app.models.file_upload import SubjectFile
from app.models.student import Enrollment, Student
from app.models.teacher import Teacher, TeacherSubject
from app.models.user import User
from app.schemas.student import CourseForm
from app.services import file_service

logger = logging.getLogger(__name__)


def pick_primary_instructor(instructors: list[dict]) -> Optional[dict]:
    """
    Enseignant principal d'une matière : défini seulement s'il est unique.
    Avec plusieurs enseignants affectés, aucun n'est privilégié.
    """
    if len(instructors) == 1:
        return instructors[0]
    return None


def get_enrolled_subjects(db: Session, student: Student) -> list[dict]:
    rows = db.execute(
        select(Subject, Enrollment.enrolled_at, Course.name, Department.name)
        .join(Enrollment, Enrollment.subject_id == Subject.id)
        .join(Course, Course.id == Subject.course_id)
        .join(Department, Department.id == Course.department_id)
        .where(Enrollment.student_id == student.id)
        .order_by(Subject.semester, Subject.name)
    ).all()

    instructors = _instructors_by_subject(db, [subject.id for subject, *_ in rows])

    items = []
    for subject, enrolled_at, course_name, department_name in rows:
        subject_instructors = instructors.get(subject.id, [])
        items.append({
            "id": subject.id,
            "name": subject.name,
            "code": subject.code,
            "semester": subject.semester,
            "course_name": course_name,
            "department_name": department_name,
            "instructors": subject_instructors,
            "primary_instructor": pick_primary_instructor(subject_instructors),
            "enrolled_at": enrolled_at,
        })
    return items


def submit_course_form(db: Session, form: CourseForm) -> Student:
    """Met à jour le département, la filière, l'année et le semestre de l'étudiant."""
    student = db.get(Student, form.student_id)
    if student is None:
        raise NotFoundError("Étudiant introuvable.")
    if db.get(Department, form.department_id) is None:
        raise NotFoundError("Département introuvable.")
    if db.get(Course, form.course_id) is None:
        raise NotFoundError("Filière introuvable.")

    student.department_id = form.department_id
    student.course_id = form.course_id
    student.year = form.year
    student.semester = form.semester
    db.commit()
    db.refresh(student)
    logger.info(
        "Filière de l'étudiant %s : %s (année %d, semestre %d)",
        student.id, form.course_id, form.year, form.semester,
    )
    return student


def get_course_subjects(
    db: Session, course_id: uuid.UUID, semester: Optional[int] = None
) -> list[dict]:
    """
    Matières d'une filière avec leur nombre d'inscrits.
    Restreint au semestre demandé, sinon triées par semestre puis code.
    """
    query = (
        select(Subject, Course.name, Department.name, func.count(Enrollment.id))
        .join(Course, Course.id == Subject.course_id)
        .join(Department, Department.id == Course.department_id)
        .outerjoin(Enrollment, Enrollment.subject_id == Subject.id)
        .where(Subject.course_id == course_id)
        .group_by(Subject.id, Course.name, Department.name)
        .order_by(Subject.semester, Subject.code)
    )
    if semester is not None:
        query = query.where(Subject.semester == semester)

    return [
        {
            "id": subject.id,
            "name": subject.name,
            "code": subject.code,
            "semester": subject.semester,
            "course_name": course_name,
            "department_name": department_name,
            "enrollment_count": count,
        }
        for subject, course_name, department_name, count in db.execute(query).all()
    ]


def get_student_files(
    db: Session, student: Student, subject_id: Optional[uuid.UUID] = None
) -> list[SubjectFile]:
    enrolled = db.execute(
        select(Enrollment.subject_id).where(Enrollment.student_id == student.id)
    ).scalars().all()
    return file_service.get_subject_files(db, enrolled, subject_id)


def _instructors_by_subject(db: Session, subject_ids: list[uuid.UUID]) -> dict:
    if not subject_ids:
        return {}
    rows = db.execute(
        select(TeacherSubject.subject_id, Teacher, User)
        .join(Teacher, Teacher.id == TeacherSubject.teacher_id)
        .join(User, User.id == Teacher.user_id)
        .where(TeacherSubject.subject_id.in_(subject_ids))
        .order_by(User.name)
    ).all()

    grouped: dict = {}
    for subject_id, teacher, user in rows:
        grouped.setdefault(subject_id, []).append({
            "id": teacher.id,
            "teacher_id": teacher.teacher_id,
            "name": user.name,
            "email": user.email,
        })
    return grouped
