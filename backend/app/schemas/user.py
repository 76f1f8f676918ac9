"""
Schémas Pydantic pour l'authentification et les comptes utilisateurs.
Aucun schéma de réponse n'expose le hash du mot de passe.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, field_validator

from app.models.user import ROLES
from app.schemas.base import CamelModel, require_min_length

MIN_PASSWORD_LENGTH = 6


def validate_password(value: str) -> str:
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValueError(
            f"Le mot de passe doit contenir au moins {MIN_PASSWORD_LENGTH} caractères."
        )
    return value


# --- Login ---

class LoginRequest(CamelModel):
    email: str
    password: str
    role: str

    @field_validator("email")
    @classmethod
    def email_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Email, mot de passe et rôle sont obligatoires.")
        return v.strip()

    @field_validator("password")
    @classmethod
    def password_not_empty(cls, v: str) -> str:
        # Comparé tel quel au hash : les espaces font partie du mot de passe
        if not v.strip():
            raise ValueError("Email, mot de passe et rôle sont obligatoires.")
        return v

    @field_validator("role")
    @classmethod
    def valid_role(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in ROLES:
            raise ValueError(f"Rôle invalide. Valeurs acceptées : {', '.join(ROLES)}")
        return v


class ProfileRef(CamelModel):
    id: uuid.UUID


class TeacherProfileRef(ProfileRef):
    teacher_id: str
    department_id: uuid.UUID


class StudentProfileRef(ProfileRef):
    student_id: str
    department_id: uuid.UUID
    course_id: uuid.UUID
    year: int
    semester: int


class AuthUserResponse(CamelModel):
    """Utilisateur connecté, avec le profil correspondant à son rôle."""
    id: uuid.UUID
    email: str
    name: str
    role: str
    created_at: Optional[datetime] = None
    admin_profile: Optional[ProfileRef] = None
    teacher_profile: Optional[TeacherProfileRef] = None
    student_profile: Optional[StudentProfileRef] = None


class LoginResponse(CamelModel):
    message: str
    user: AuthUserResponse
    token: str


# --- Comptes ---

class UserSummary(CamelModel):
    id: uuid.UUID
    name: str
    email: str
    created_at: Optional[datetime] = None


class AccountFields(CamelModel):
    """Champs communs à la création / modification d'un compte enseignant ou étudiant."""
    email: EmailStr
    name: str
    role: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_min_length(cls, v: str) -> str:
        return require_min_length(v, 2, "Le nom")


class ProfileUpdate(CamelModel):
    """Modification du nom et de l'email depuis le portail."""
    name: str
    email: EmailStr

    @field_validator("name")
    @classmethod
    def name_min_length(cls, v: str) -> str:
        return require_min_length(v, 2, "Le nom")


class PasswordChange(CamelModel):
    current_password: str
    new_password: str

    @field_validator("current_password")
    @classmethod
    def current_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Le mot de passe actuel est obligatoire.")
        return v

    @field_validator("new_password")
    @classmethod
    def new_password_length(cls, v: str) -> str:
        return validate_password(v)
