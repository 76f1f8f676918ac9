"""
Opérations communes sur les comptes utilisateurs : unicité de l'email,
modification du profil et changement de mot de passe depuis les portails.
"""

import uuid
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import ConflictError, ValidationFailedError
from app.models.user import User
from app.schemas.user import PasswordChange, ProfileUpdate
from app.security import hash_password, verify_password

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "Un utilisateur avec cet email existe déjà."


def email_taken(db: Session, email: str, exclude_user_id: Optional[uuid.UUID] = None) -> bool:
    query = select(User.id).where(User.email == email)
    if exclude_user_id is not None:
        query = query.where(User.id != exclude_user_id)
    return db.execute(query.limit(1)).scalar() is not None


def update_account(db: Session, user: User, data: ProfileUpdate) -> User:
    """Met à jour le nom et l'email d'un utilisateur (email unique, hors lui-même)."""
    if email_taken(db, data.email, exclude_user_id=user.id):
        raise ConflictError(DUPLICATE_EMAIL)

    user.name = data.name
    user.email = data.email
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE_EMAIL)
    db.refresh(user)
    return user


def change_password(db: Session, user: User, data: PasswordChange) -> None:
    """Remplace le mot de passe après vérification du mot de passe actuel."""
    if not verify_password(data.current_password, user.password_hash):
        raise ValidationFailedError("Le mot de passe actuel est incorrect.")

    user.password_hash = hash_password(data.new_password)
    db.commit()
    logger.info("Mot de passe modifié : utilisateur %s", user.id)
