"""
Schémas Pydantic pour les étudiants, leurs inscriptions et leur portail.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import field_validator

from app.schemas.academic import CourseResponse, DepartmentResponse
from app.schemas.base import CamelModel, require_min_length, validate_range
from app.schemas.teacher import TeacherBrief
from app.schemas.user import AccountFields, UserSummary, validate_password


class StudentProfileIn(CamelModel):
    student_id: str
    department_id: uuid.UUID
    course_id: uuid.UUID
    year: int
    semester: int

    @field_validator("student_id")
    @classmethod
    def student_id_min_length(cls, v: str) -> str:
        return require_min_length(v, 3, "Le matricule étudiant")

    @field_validator("year")
    @classmethod
    def year_range(cls, v: int) -> int:
        return validate_range(v, 1, 6, "L'année")

    @field_validator("semester")
    @classmethod
    def semester_range(cls, v: int) -> int:
        return validate_range(v, 1, 12, "Le semestre")


class StudentCreate(AccountFields):
    """Corps de POST /api/students : compte + profil + matières suivies."""
    password: str
    profile: StudentProfileIn
    subjects: List[uuid.UUID] = []

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        return validate_password(v)

    @field_validator("role")
    @classmethod
    def role_is_student(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v.upper() != "STUDENT":
            raise ValueError("Le rôle doit être STUDENT.")
        return v


class StudentUpdate(AccountFields):
    """Corps de PUT /api/students/{id}. Mot de passe re-haché seulement s'il est fourni."""
    password: Optional[str] = None
    profile: StudentProfileIn

    @field_validator("password")
    @classmethod
    def password_length(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        return validate_password(v)

    @field_validator("role")
    @classmethod
    def role_is_student(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v.upper() != "STUDENT":
            raise ValueError("Le rôle doit être STUDENT.")
        return v


class StudentResponse(CamelModel):
    id: uuid.UUID
    student_id: str
    user_id: uuid.UUID
    department_id: uuid.UUID
    course_id: uuid.UUID
    year: int
    semester: int
    user: UserSummary
    department: Optional[DepartmentResponse] = None
    course: Optional[CourseResponse] = None
    created_at: Optional[datetime] = None


# --- Inscriptions ---

class EnrollmentReconcile(CamelModel):
    """Corps de POST /api/student/enrollments : l'ensemble complet des matières voulues."""
    student_id: uuid.UUID
    subject_ids: List[uuid.UUID]


class EnrollmentResult(CamelModel):
    message: str
    count: int


class EnrollmentItem(CamelModel):
    id: uuid.UUID
    subject_id: uuid.UUID
    subject_name: str
    subject_code: str
    semester: int
    course_name: str
    department_name: str
    enrolled_at: Optional[datetime] = None


# --- Portail étudiant ---

class CourseForm(CamelModel):
    """Choix de filière / année / semestre soumis par l'étudiant."""
    student_id: uuid.UUID
    department_id: uuid.UUID
    course_id: uuid.UUID
    year: int
    semester: int

    @field_validator("year")
    @classmethod
    def year_range(cls, v: int) -> int:
        return validate_range(v, 1, 6, "L'année")

    @field_validator("semester")
    @classmethod
    def semester_range(cls, v: int) -> int:
        return validate_range(v, 1, 12, "Le semestre")


class EnrolledSubjectItem(CamelModel):
    """
    Matière suivie avec ses enseignants.
    primary_instructor n'est renseigné que si un seul enseignant est affecté :
    avec plusieurs enseignants, l'enseignant principal est indéterminé.
    """
    id: uuid.UUID
    name: str
    code: str
    semester: int
    course_name: str
    department_name: str
    instructors: List[TeacherBrief]
    primary_instructor: Optional[TeacherBrief] = None
    enrolled_at: Optional[datetime] = None


class CourseSubjectItem(CamelModel):
    id: uuid.UUID
    name: str
    code: str
    semester: int
    course_name: str
    department_name: str
    enrollment_count: int

