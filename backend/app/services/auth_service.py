"""
Service d'authentification : vérification des identifiants, émission du jeton
de session et résolution de l'utilisateur courant à partir du cookie.

Il n'existe pas de table de sessions : le jeton est le seul artefact de
session, la déconnexion consiste à effacer le cookie côté client.
"""

import logging
import uuid
from typing import Optional, Tuple

from fastapi import Response
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import InvalidCredentialsError, MalformedTokenError, UnauthenticatedError
from app.models.user import User
from app.security import dummy_verify, verify_password
from app.services.session_codec import decode_session_token, issue_session_token

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Identifiants invalides."


def login(db: Session, email: str, password: str, role: str) -> Tuple[User, str]:
    """
    Authentifie un utilisateur sur le portail de son rôle.
    Email inconnu pour ce rôle et mauvais mot de passe produisent la même erreur.
    """
    user = db.execute(
        select(User).where(User.email == email, User.role == role)
    ).scalar_one_or_none()

    if user is None:
        dummy_verify()
        logger.warning("Échec de connexion : %s (%s)", email, role)
        raise InvalidCredentialsError(INVALID_CREDENTIALS)

    if not verify_password(password, user.password_hash):
        logger.warning("Échec de connexion : %s (%s)", email, role)
        raise InvalidCredentialsError(INVALID_CREDENTIALS)

    token = issue_session_token(str(user.id))
    logger.info("Connexion réussie : utilisateur %s (%s)", user.id, user.role)
    return user, token


def load_user_from_token(db: Session, token: str) -> Optional[User]:
    """
    Décode le jeton et charge l'utilisateur correspondant.
    Lève MalformedTokenError si le jeton est illisible, retourne None si
    l'utilisateur n'existe pas (ou plus).
    """
    user_id, _issued_at = decode_session_token(token)
    try:
        uid = uuid.UUID(user_id)
    except ValueError:
        return None
    return db.get(User, uid)


def get_current_user(db: Session, token: Optional[str]) -> User:
    """Utilisateur du cookie de session, ou UnauthenticatedError."""
    if not token:
        raise UnauthenticatedError("Aucun jeton de session.")
    try:
        user = load_user_from_token(db, token)
    except MalformedTokenError:
        raise UnauthenticatedError("Jeton de session invalide.")
    if user is None:
        raise UnauthenticatedError("Utilisateur introuvable.")
    return user


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def clear_session_cookie(response: Response) -> None:
    """Écrase le cookie par une valeur vide expirée immédiatement."""
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value="",
        max_age=0,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
