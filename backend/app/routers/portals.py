"""
Pages des portails /admin, /teacher et /student.

Le rendu est assuré par le front : ces routes renvoient seulement le
descripteur de page et l'utilisateur posé par le garde d'accès.
Les pages /<portail>/login sont publiques.
"""

from fastapi import APIRouter, Depends

from app.access_guard import PORTALS, SessionContext, get_session_context

router = APIRouter(tags=["Portails"])


def _page(portal: str, page: str, context: SessionContext) -> dict:
    return {
        "portal": portal,
        "page": page,
        "user": {"id": context.user_id, "role": context.role, "name": context.name},
    }


def _register(portal: str) -> None:
    @router.get(f"/{portal}/login", name=f"{portal}_login_page", summary=f"Connexion au portail {portal}")
    def login_page():
        return {"portal": portal, "page": "login", "user": None}

    @router.get(f"/{portal}", name=f"{portal}_home_page", summary=f"Accueil du portail {portal}")
    def home_page(context: SessionContext = Depends(get_session_context)):
        return _page(portal, "dashboard", context)

    @router.get(f"/{portal}/{{page:path}}", name=f"{portal}_page", summary=f"Page du portail {portal}")
    def portal_page(page: str, context: SessionContext = Depends(get_session_context)):
        return _page(portal, page, context)


for _portal in PORTALS:
    _register(_portal)
