"""
Lectures du portail enseignant : matières enseignées, classes, étudiants
inscrits et supports publiés.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.academic import Course, Subject
from app.models.file_upload import SubjectFile
from app.models.student import Enrollment, Student
from app.models.teacher import Teacher, TeacherSubject
from app.models.user import User
from app.services import file_service


def get_teacher(db: Session, teacher_id: uuid.UUID) -> Optional[Teacher]:
    return db.get(Teacher, teacher_id)


def get_taught_subject_ids(db: Session, teacher: Teacher) -> list[uuid.UUID]:
    return db.execute(
        select(TeacherSubject.subject_id).where(TeacherSubject.teacher_id == teacher.id)
    ).scalars().all()


def get_teacher_subjects(db: Session, teacher: Teacher) -> list[dict]:
    rows = db.execute(
        select(Subject, TeacherSubject.class_code)
        .join(TeacherSubject, TeacherSubject.subject_id == Subject.id)
        .where(TeacherSubject.teacher_id == teacher.id)
        .order_by(Subject.name)
    ).all()
    return [
        {"id": subject.id, "name": subject.name, "code": subject.code, "class_code": code}
        for subject, code in rows
    ]


def get_teacher_classes(db: Session, teacher: Teacher) -> list[dict]:
    """Chaque classe de l'enseignant avec sa matière et ses étudiants inscrits."""
    rows = db.execute(
        select(TeacherSubject, Subject, Course.name)
        .join(Subject, Subject.id == TeacherSubject.subject_id)
        .join(Course, Course.id == Subject.course_id)
        .where(TeacherSubject.teacher_id == teacher.id)
        .order_by(TeacherSubject.created_at.desc())
    ).all()

    classes = []
    for teacher_subject, subject, course_name in rows:
        students = db.execute(
            select(Student, User, Enrollment.enrolled_at)
            .join(Enrollment, Enrollment.student_id == Student.id)
            .join(User, User.id == Student.user_id)
            .where(Enrollment.subject_id == subject.id)
            .order_by(User.name)
        ).all()
        classes.append({
            "id": teacher_subject.id,
            "class_code": teacher_subject.class_code,
            "subject": subject,
            "course_name": course_name,
            "students": [_student_item(s, u, enrolled_at) for s, u, enrolled_at in students],
            "created_at": teacher_subject.created_at,
        })
    return classes


def get_teacher_students(
    db: Session, teacher: Teacher, subject_id: Optional[uuid.UUID] = None
) -> list[dict]:
    """Inscriptions aux matières de l'enseignant, les plus récentes d'abord."""
    taught = select(TeacherSubject.subject_id).where(TeacherSubject.teacher_id == teacher.id)
    query = (
        select(Enrollment, Subject, Student, User)
        .join(Subject, Subject.id == Enrollment.subject_id)
        .join(Student, Student.id == Enrollment.student_id)
        .join(User, User.id == Student.user_id)
        .where(Enrollment.subject_id.in_(taught))
        .order_by(Enrollment.enrolled_at.desc())
    )
    if subject_id is not None:
        query = query.where(Enrollment.subject_id == subject_id)

    return [
        {
            "enrollment_id": enrollment.id,
            "enrolled_at": enrollment.enrolled_at,
            "subject": subject,
            "student": _student_item(student, user, enrollment.enrolled_at),
            "year": student.year,
            "semester": student.semester,
        }
        for enrollment, subject, student, user in db.execute(query).all()
    ]


def get_teacher_files(
    db: Session, teacher: Teacher, subject_id: Optional[uuid.UUID] = None
) -> list[SubjectFile]:
    return file_service.get_subject_files(db, get_taught_subject_ids(db, teacher), subject_id)


def _student_item(student: Student, user: User, enrolled_at) -> dict:
    return {
        "id": student.id,
        "student_id": student.student_id,
        "name": user.name,
        "email": user.email,
        "enrolled_at": enrolled_at,
    }
