"""
Router du portail étudiant (/api/student/*).
Les routes identifient l'étudiant par le paramètre studentId (id du profil).
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import NotFoundError, ValidationFailedError
from app.models.student import Student
from app.schemas.base import MessageResponse
from app.schemas.file import SubjectFileResponse
from app.schemas.student import (
    CourseForm,
    CourseSubjectItem,
    EnrolledSubjectItem,
    EnrollmentItem,
    EnrollmentReconcile,
    EnrollmentResult,
    StudentResponse,
)
from app.schemas.user import PasswordChange, ProfileUpdate
from app.services import account_service, enrollment_service, student_portal_service, student_service

router = APIRouter(prefix="/api/student", tags=["Portail étudiant"])

STUDENT_NOT_FOUND = "Étudiant introuvable."


def current_student(
    student_id: Optional[uuid.UUID] = Query(default=None, alias="studentId"),
    db: Session = Depends(get_db),
) -> Student:
    if student_id is None:
        raise ValidationFailedError("Le paramètre studentId est obligatoire.")
    student = student_service.get_student(db, student_id)
    if student is None:
        raise NotFoundError(STUDENT_NOT_FOUND)
    return student


# --- Profil ---

@router.get("/profile", response_model=StudentResponse, summary="Profil de l'étudiant")
def get_profile(student: Student = Depends(current_student)):
    return student


@router.put("/profile", response_model=StudentResponse, summary="Modifier son profil")
def update_profile(
    data: ProfileUpdate,
    student: Student = Depends(current_student),
    db: Session = Depends(get_db),
):
    account_service.update_account(db, student.user, data)
    return student


@router.put("/password", response_model=MessageResponse, summary="Changer son mot de passe")
def change_password(
    data: PasswordChange,
    student: Student = Depends(current_student),
    db: Session = Depends(get_db),
):
    account_service.change_password(db, student.user, data)
    return {"message": "Mot de passe modifié."}


@router.post("/course-form", response_model=StudentResponse, summary="Choisir sa filière")
def submit_course_form(data: CourseForm, db: Session = Depends(get_db)):
    """Enregistre le département, la filière, l'année et le semestre de l'étudiant."""
    return student_portal_service.submit_course_form(db, data)


# --- Matières ---

@router.get("/subjects", response_model=List[EnrolledSubjectItem], summary="Matières suivies")
def list_subjects(student: Student = Depends(current_student), db: Session = Depends(get_db)):
    """
    Matières suivies avec tous leurs enseignants.
    primaryInstructor n'est renseigné que si la matière a un seul enseignant.
    """
    return student_portal_service.get_enrolled_subjects(db, student)


@router.get(
    "/available-subjects",
    response_model=List[CourseSubjectItem],
    summary="Matières ouvertes pour un semestre",
)
def list_available_subjects(
    course_id: uuid.UUID = Query(..., alias="courseId"),
    year: int = Query(..., ge=1, le=6),
    semester: int = Query(..., ge=1, le=12),
    db: Session = Depends(get_db),
):
    return student_portal_service.get_course_subjects(db, course_id, semester)


@router.get("/all-subjects", response_model=List[CourseSubjectItem], summary="Catalogue d'une filière")
def list_all_subjects(
    course_id: uuid.UUID = Query(..., alias="courseId"),
    db: Session = Depends(get_db),
):
    return student_portal_service.get_course_subjects(db, course_id)


@router.get("/files", response_model=List[SubjectFileResponse], summary="Supports des matières suivies")
def list_files(
    subject_id: Optional[uuid.UUID] = Query(default=None, alias="subjectId"),
    student: Student = Depends(current_student),
    db: Session = Depends(get_db),
):
    return student_portal_service.get_student_files(db, student, subject_id)


# --- Inscriptions ---

@router.get("/enrollments", response_model=List[EnrollmentItem], summary="Inscriptions de l'étudiant")
def list_enrollments(
    student_id: Optional[uuid.UUID] = Query(default=None, alias="studentId"),
    db: Session = Depends(get_db),
):
    """studentId accepte l'id du profil étudiant ou celui de son compte."""
    if student_id is None:
        raise ValidationFailedError("Le paramètre studentId est obligatoire.")
    student = enrollment_service.resolve_student(db, student_id)
    if student is None:
        raise NotFoundError(STUDENT_NOT_FOUND)
    return enrollment_service.get_enrollments(db, student)


@router.post("/enrollments", response_model=EnrollmentResult, summary="Mettre à jour ses inscriptions")
def reconcile_enrollments(data: EnrollmentReconcile, db: Session = Depends(get_db)):
    """Les inscriptions deviennent exactement la liste subjectIds fournie."""
    student = enrollment_service.resolve_student(db, data.student_id)
    if student is None:
        raise NotFoundError(STUDENT_NOT_FOUND)
    count = enrollment_service.reconcile_enrollments(db, student, data.subject_ids)
    return {"message": "Inscriptions mises à jour.", "count": count}
