"""
Router du portail enseignant (/api/teacher/*).
Toutes les routes identifient l'enseignant par le paramètre teacherId (id du profil).
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import NotFoundError, ValidationFailedError
from app.models.teacher import Teacher
from app.schemas.base import MessageResponse
from app.schemas.file import SubjectFileResponse
from app.schemas.teacher import (
    TeacherClassResponse,
    TeacherResponse,
    TeacherStudentItem,
    TeacherSubjectItem,
)
from app.schemas.user import PasswordChange, ProfileUpdate
from app.services import account_service, teacher_portal_service

router = APIRouter(prefix="/api/teacher", tags=["Portail enseignant"])


def current_teacher(
    teacher_id: Optional[uuid.UUID] = Query(default=None, alias="teacherId"),
    db: Session = Depends(get_db),
) -> Teacher:
    if teacher_id is None:
        raise ValidationFailedError("Le paramètre teacherId est obligatoire.")
    teacher = teacher_portal_service.get_teacher(db, teacher_id)
    if teacher is None:
        raise NotFoundError("Enseignant introuvable.")
    return teacher


@router.get("/subjects", response_model=List[TeacherSubjectItem], summary="Matières enseignées")
def list_subjects(teacher: Teacher = Depends(current_teacher), db: Session = Depends(get_db)):
    return teacher_portal_service.get_teacher_subjects(db, teacher)


@router.get("/classes", response_model=List[TeacherClassResponse], summary="Classes et étudiants")
def list_classes(teacher: Teacher = Depends(current_teacher), db: Session = Depends(get_db)):
    return teacher_portal_service.get_teacher_classes(db, teacher)


@router.get("/students", response_model=List[TeacherStudentItem], summary="Étudiants inscrits")
def list_students(
    subject_id: Optional[uuid.UUID] = Query(default=None, alias="subjectId"),
    teacher: Teacher = Depends(current_teacher),
    db: Session = Depends(get_db),
):
    """Inscriptions aux matières de l'enseignant, éventuellement pour une seule matière."""
    return teacher_portal_service.get_teacher_students(db, teacher, subject_id)


@router.get("/files", response_model=List[SubjectFileResponse], summary="Supports publiés")
def list_files(
    subject_id: Optional[uuid.UUID] = Query(default=None, alias="subjectId"),
    teacher: Teacher = Depends(current_teacher),
    db: Session = Depends(get_db),
):
    return teacher_portal_service.get_teacher_files(db, teacher, subject_id)


@router.get("/profile", response_model=TeacherResponse, summary="Profil de l'enseignant")
def get_profile(teacher: Teacher = Depends(current_teacher)):
    return teacher


@router.put("/profile", response_model=TeacherResponse, summary="Modifier son profil")
def update_profile(
    data: ProfileUpdate,
    teacher: Teacher = Depends(current_teacher),
    db: Session = Depends(get_db),
):
    account_service.update_account(db, teacher.user, data)
    return teacher


@router.put("/password", response_model=MessageResponse, summary="Changer son mot de passe")
def change_password(
    data: PasswordChange,
    teacher: Teacher = Depends(current_teacher),
    db: Session = Depends(get_db),
):
    account_service.change_password(db, teacher.user, data)
    return {"message": "Mot de passe modifié."}
