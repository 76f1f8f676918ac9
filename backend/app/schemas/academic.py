"""
Schémas Pydantic pour les départements, filières et matières.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import field_validator

from app.schemas.base import CamelModel, require_min_length, validate_code, validate_range


# --- Départements ---

class DepartmentCreate(CamelModel):
    name: str
    code: str
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_min_length(cls, v: str) -> str:
        return require_min_length(v, 2, "Le nom du département")

    @field_validator("code")
    @classmethod
    def code_format(cls, v: str) -> str:
        return validate_code(v, 2, 10, "Le code du département")


class DepartmentUpdate(DepartmentCreate):
    """PUT remplace l'ensemble des champs modifiables."""


class DepartmentResponse(CamelModel):
    id: uuid.UUID
    name: str
    code: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# --- Filières ---

class CourseCreate(CamelModel):
    name: str
    code: str
    department_id: uuid.UUID
    duration: int
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_min_length(cls, v: str) -> str:
        return require_min_length(v, 3, "Le nom de la filière")

    @field_validator("code")
    @classmethod
    def code_format(cls, v: str) -> str:
        return validate_code(v, 3, 10, "Le code de la filière")

    @field_validator("duration")
    @classmethod
    def duration_range(cls, v: int) -> int:
        return validate_range(v, 1, 10, "La durée (en années)")


class CourseUpdate(CourseCreate):
    """PUT remplace l'ensemble des champs modifiables."""


class CourseResponse(CamelModel):
    id: uuid.UUID
    name: str
    code: str
    department_id: uuid.UUID
    duration: int
    description: Optional[str] = None
    department: Optional[DepartmentResponse] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# --- Matières ---

class SubjectCreate(CamelModel):
    name: str
    code: str
    course_id: uuid.UUID
    semester: int
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_min_length(cls, v: str) -> str:
        return require_min_length(v, 3, "Le nom de la matière")

    @field_validator("code")
    @classmethod
    def code_format(cls, v: str) -> str:
        return validate_code(v, 3, 10, "Le code de la matière")

    @field_validator("semester")
    @classmethod
    def semester_range(cls, v: int) -> int:
        return validate_range(v, 1, 12, "Le semestre")


class SubjectUpdate(SubjectCreate):
    """PUT remplace l'ensemble des champs modifiables."""


class SubjectResponse(CamelModel):
    id: uuid.UUID
    name: str
    code: str
    course_id: uuid.UUID
    semester: int
    description: Optional[str] = None
    course: Optional[CourseResponse] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SubjectBrief(CamelModel):
    """Résumé d'une matière dans les vues portail."""
    id: uuid.UUID
    name: str
    code: str
    semester: Optional[int] = None
