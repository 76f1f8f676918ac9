"""
Garde d'accès des portails /admin, /teacher et /student.

Pour chaque requête sur un portail (hors page /login du portail) :
- pas de cookie                      → redirection vers /<portail>/login
- jeton illisible / utilisateur inconnu / erreur quelconque
                                     → cookie effacé, redirection vers /
- rôle différent du portail          → redirection vers /, cookie conservé
- rôle correspondant                 → la requête passe, request.state.session
                                       contient (user_id, role, name)

Les deux cibles de redirection sont volontairement différentes : la page de
login signifie « non authentifié », la racine « authentifié mais pas autorisé ».
Les routes /api/* ne passent pas par ce garde.
"""

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Callable, Optional

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import settings
from app.database import SessionLocal
from app.errors import MalformedTokenError, UnauthenticatedError
from app.models.user import User
from app.services.auth_service import clear_session_cookie
from app.services.session_codec import decode_session_token

logger = logging.getLogger(__name__)

# Préfixe de chemin → rôle autorisé
PORTALS = {
    "admin": "ADMIN",
    "teacher": "TEACHER",
    "student": "STUDENT",
}


@dataclass(frozen=True)
class SessionContext:
    """Contexte de session transmis aux handlers d'un portail."""
    user_id: str
    role: str
    name: str


class GuardOutcome(str, Enum):
    ALLOW = "ALLOW"
    LOGIN_REQUIRED = "LOGIN_REQUIRED"
    INVALID_SESSION = "INVALID_SESSION"
    FORBIDDEN = "FORBIDDEN"


@dataclass(frozen=True)
class GuardDecision:
    outcome: GuardOutcome
    context: Optional[SessionContext] = None
    redirect_to: Optional[str] = None
    clear_cookie: bool = False


UserLoader = Callable[[str], Optional[SessionContext]]


def match_portal(path: str) -> Optional[str]:
    """Retourne le portail protégeant ce chemin, ou None (chemin libre ou page de login)."""
    for portal in PORTALS:
        prefix = f"/{portal}"
        if path != prefix and not path.startswith(prefix + "/"):
            continue
        login_path = f"{prefix}/login"
        if path == login_path or path.startswith(login_path + "/"):
            return None
        return portal
    return None


def _invalid_session() -> GuardDecision:
    return GuardDecision(GuardOutcome.INVALID_SESSION, redirect_to="/", clear_cookie=True)


def resolve_access(portal: str, token: Optional[str], load_user: UserLoader) -> GuardDecision:
    """
    Décide du sort d'une requête sur un portail.
    Toute erreur pendant le décodage ou la recherche de l'utilisateur est
    traitée comme une session invalide : jamais comme un accès autorisé.
    """
    if not token:
        return GuardDecision(GuardOutcome.LOGIN_REQUIRED, redirect_to=f"/{portal}/login")

    try:
        user_id, _issued_at = decode_session_token(token)
        context = load_user(user_id)
    except MalformedTokenError:
        logger.warning("Jeton de session illisible sur le portail %s", portal)
        return _invalid_session()
    except Exception:
        logger.error("Erreur du garde d'accès sur le portail %s", portal, exc_info=True)
        return _invalid_session()

    if context is None:
        logger.warning("Session d'un utilisateur inexistant sur le portail %s", portal)
        return _invalid_session()

    if context.role != PORTALS[portal]:
        logger.info(
            "Accès refusé : utilisateur %s (%s) sur le portail %s",
            context.user_id, context.role, portal,
        )
        return GuardDecision(GuardOutcome.FORBIDDEN, redirect_to="/")

    return GuardDecision(GuardOutcome.ALLOW, context=context)


def load_session_context(session_factory, user_id: str) -> Optional[SessionContext]:
    """Charge l'utilisateur dans une session BDD dédiée, refermée aussitôt."""
    try:
        uid = uuid.UUID(user_id)
    except ValueError:
        return None

    db = session_factory()
    try:
        user = db.get(User, uid)
        if user is None:
            return None
        return SessionContext(user_id=str(user.id), role=user.role, name=user.name)
    finally:
        db.close()


class AccessGuardMiddleware(BaseHTTPMiddleware):
    """Middleware appliquant resolve_access aux chemins des portails."""

    def __init__(self, app, session_factory=None):
        super().__init__(app)
        self.session_factory = session_factory or SessionLocal

    async def dispatch(self, request: Request, call_next):
        portal = match_portal(request.url.path)
        if portal is None:
            return await call_next(request)

        token = request.cookies.get(settings.SESSION_COOKIE_NAME)
        # La recherche en BDD est synchrone : exécutée hors de la boucle d'événements
        decision = await run_in_threadpool(
            resolve_access,
            portal,
            token,
            partial(load_session_context, self.session_factory),
        )

        if decision.outcome is GuardOutcome.ALLOW:
            request.state.session = decision.context
            return await call_next(request)

        target = str(request.base_url).rstrip("/") + decision.redirect_to
        response = RedirectResponse(target, status_code=307)
        if decision.clear_cookie:
            clear_session_cookie(response)
        return response


def get_session_context(request: Request) -> SessionContext:
    """Dépendance FastAPI: contexte posé par le garde pour la requête courante."""
    context = getattr(request.state, "session", None)
    if context is None:
        raise UnauthenticatedError("Session requise.")
    return context
