"""
Schémas Pydantic pour les enseignants et leurs classes.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import field_validator

from app.schemas.academic import DepartmentResponse, SubjectBrief
from app.schemas.base import CamelModel, require_min_length
from app.schemas.user import AccountFields, UserSummary, validate_password


class TeacherProfileIn(CamelModel):
    teacher_id: str
    department_id: uuid.UUID

    @field_validator("teacher_id")
    @classmethod
    def teacher_id_min_length(cls, v: str) -> str:
        return require_min_length(v, 3, "Le matricule enseignant")


class TeacherCreate(AccountFields):
    """Corps de POST /api/teachers : compte + profil + matières enseignées."""
    password: str
    profile: TeacherProfileIn
    subjects: List[uuid.UUID] = []

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        return validate_password(v)

    @field_validator("role")
    @classmethod
    def role_is_teacher(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v.upper() != "TEACHER":
            raise ValueError("Le rôle doit être TEACHER.")
        return v


class TeacherUpdate(AccountFields):
    """Corps de PUT /api/teachers/{id}. Mot de passe re-haché seulement s'il est fourni."""
    password: Optional[str] = None
    profile: TeacherProfileIn

    @field_validator("password")
    @classmethod
    def password_length(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        return validate_password(v)

    @field_validator("role")
    @classmethod
    def role_is_teacher(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v.upper() != "TEACHER":
            raise ValueError("Le rôle doit être TEACHER.")
        return v


class TeacherResponse(CamelModel):
    id: uuid.UUID
    teacher_id: str
    user_id: uuid.UUID
    department_id: uuid.UUID
    user: UserSummary
    department: Optional[DepartmentResponse] = None
    created_at: Optional[datetime] = None


class TeacherBrief(CamelModel):
    """Enseignant tel qu'affiché côté étudiant."""
    id: uuid.UUID
    teacher_id: str
    name: str
    email: str


# --- Vues du portail enseignant ---

class TeacherSubjectItem(CamelModel):
    id: uuid.UUID  # id de la matière
    name: str
    code: str
    class_code: str


class ClassStudentItem(CamelModel):
    id: uuid.UUID  # id du profil étudiant
    student_id: str
    name: str
    email: str
    enrolled_at: Optional[datetime] = None


class TeacherClassResponse(CamelModel):
    id: uuid.UUID  # id de la classe (teacher_subjects)
    class_code: str
    subject: SubjectBrief
    course_name: str
    students: List[ClassStudentItem]
    created_at: Optional[datetime] = None


class TeacherStudentItem(CamelModel):
    enrollment_id: uuid.UUID
    enrolled_at: Optional[datetime] = None
    subject: SubjectBrief
    student: ClassStudentItem
    year: int
    semester: int
