"""
Router d'authentification : connexion, utilisateur courant, déconnexion.
"""

from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Response
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.schemas.base import MessageResponse
from app.schemas.user import AuthUserResponse, LoginRequest, LoginResponse
from app.services import auth_service

router = APIRouter(prefix="/api/auth", tags=["Authentification"])


@router.post("/login", response_model=LoginResponse, summary="Connexion")
def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """
    Vérifie email + mot de passe pour le rôle demandé et pose le cookie de session.
    Le jeton est aussi renvoyé dans le corps pour les clients sans cookie.
    """
    user, token = auth_service.login(db, data.email, data.password, data.role)
    auth_service.set_session_cookie(response, token)
    return {"message": "Connexion réussie.", "user": user, "token": token}


@router.get("/me", response_model=AuthUserResponse, summary="Utilisateur connecté")
def me(
    db: Session = Depends(get_db),
    session_token: Optional[str] = Cookie(default=None, alias=settings.SESSION_COOKIE_NAME),
):
    return auth_service.get_current_user(db, session_token)


@router.post("/logout", response_model=MessageResponse, summary="Déconnexion")
def logout(response: Response):
    """Efface le cookie de session. Aucun état serveur n'est à révoquer."""
    auth_service.clear_session_cookie(response)
    return {"message": "Déconnexion réussie."}
