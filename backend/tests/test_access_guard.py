"""
Tests du garde d'accès des portails.
- resolve_access / match_portal : logique pure, sans HTTP
- AccessGuardMiddleware : redirections et cookie via le client de test
"""

import uuid
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from app.access_guard import (
    GuardOutcome,
    SessionContext,
    load_session_context,
    match_portal,
    resolve_access,
)
from app.security import hash_password
from app.services.session_codec import issue_session_token


def valid_token(user_id=None):
    return issue_session_token(str(user_id or uuid.uuid4()), 1700000000000)


def loader_returning(context):
    return lambda user_id: context


# ============================================================
# match_portal
# ============================================================

@pytest.mark.parametrize("path,expected", [
    ("/admin", "admin"),
    ("/admin/", "admin"),
    ("/admin/departments", "admin"),
    ("/teacher/classes/42", "teacher"),
    ("/student", "student"),
    ("/teacher/loginx", "teacher"),
    ("/admin/login", None),
    ("/student/login", None),
    ("/teacher/login/reset", None),
    ("/administrator", None),
    ("/api/departments", None),
    ("/api/teacher/subjects", None),
    ("/", None),
])
def test_match_portal(path, expected):
    assert match_portal(path) == expected


# ============================================================
# resolve_access
# ============================================================

def test_sans_cookie_redirige_vers_login_du_portail():
    decision = resolve_access("teacher", None, loader_returning(None))
    assert decision.outcome is GuardOutcome.LOGIN_REQUIRED
    assert decision.redirect_to == "/teacher/login"
    assert decision.clear_cookie is False


def test_jeton_malforme_redirige_racine_et_efface_cookie():
    loader = MagicMock()
    decision = resolve_access("admin", "!!!", loader)
    assert decision.outcome is GuardOutcome.INVALID_SESSION
    assert decision.redirect_to == "/"
    assert decision.clear_cookie is True
    loader.assert_not_called()


def test_utilisateur_inconnu_redirige_racine_et_efface_cookie():
    decision = resolve_access("admin", valid_token(), loader_returning(None))
    assert decision.outcome is GuardOutcome.INVALID_SESSION
    assert decision.redirect_to == "/"
    assert decision.clear_cookie is True


def test_erreur_de_recherche_refuse_l_acces():
    def failing_loader(user_id):
        raise RuntimeError("connexion BDD perdue")

    decision = resolve_access("student", valid_token(), failing_loader)
    assert decision.outcome is GuardOutcome.INVALID_SESSION
    assert decision.context is None
    assert decision.clear_cookie is True


def test_role_different_redirige_racine_sans_effacer_cookie():
    context = SessionContext(user_id="u1", role="STUDENT", name="Alice")
    decision = resolve_access("admin", valid_token(), loader_returning(context))
    assert decision.outcome is GuardOutcome.FORBIDDEN
    assert decision.redirect_to == "/"
    assert decision.clear_cookie is False


def test_role_correspondant_autorise_avec_contexte():
    context = SessionContext(user_id="u1", role="TEACHER", name="Jean")
    decision = resolve_access("teacher", valid_token(), loader_returning(context))
    assert decision.outcome is GuardOutcome.ALLOW
    assert decision.context == context
    assert decision.redirect_to is None


def test_le_loader_recoit_l_id_du_jeton():
    uid = uuid.uuid4()
    loader = MagicMock(return_value=None)
    resolve_access("admin", valid_token(uid), loader)
    loader.assert_called_once_with(str(uid))


# ============================================================
# load_session_context
# ============================================================

def test_load_session_context_utilisateur_trouve():
    uid = uuid.uuid4()
    db = MagicMock()
    db.get.return_value = MagicMock(id=uid, role="ADMIN")
    db.get.return_value.name = "Admin"

    context = load_session_context(lambda: db, str(uid))

    assert context == SessionContext(user_id=str(uid), role="ADMIN", name="Admin")
    db.close.assert_called_once()


def test_load_session_context_id_non_uuid():
    factory = MagicMock()
    assert load_session_context(factory, "pas-un-uuid") is None
    factory.assert_not_called()


def test_load_session_context_ferme_la_session_en_cas_d_erreur():
    db = MagicMock()
    db.get.side_effect = RuntimeError("boom")
    with pytest.raises(RuntimeError):
        load_session_context(lambda: db, str(uuid.uuid4()))
    db.close.assert_called_once()


# ============================================================
# AccessGuardMiddleware
# ============================================================

def test_middleware_sans_cookie(client):
    response = client.get("/admin", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"].endswith("/admin/login")


def test_middleware_page_login_publique(client):
    response = client.get("/student/login")
    assert response.status_code == 200
    assert response.json() == {"portal": "student", "page": "login", "user": None}


def test_middleware_jeton_malforme_efface_le_cookie(client):
    client.cookies.set("session-token", "pas-un-jeton")
    response = client.get("/teacher/classes", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"].rstrip("/").endswith("testserver")
    set_cookie = response.headers["set-cookie"]
    assert "session-token=" in set_cookie
    assert "Max-Age=0" in set_cookie


def test_middleware_utilisateur_inconnu(client):
    client.cookies.set("session-token", valid_token())
    with patch("app.access_guard.load_session_context", return_value=None):
        response = client.get("/admin", follow_redirects=False)

    assert response.status_code == 307
    assert "Max-Age=0" in response.headers["set-cookie"]


def test_middleware_role_different_conserve_le_cookie(client):
    client.cookies.set("session-token", valid_token())
    context = SessionContext(user_id="u1", role="STUDENT", name="Alice")
    with patch("app.access_guard.load_session_context", return_value=context):
        response = client.get("/admin/departments", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"].rstrip("/").endswith("testserver")
    assert "set-cookie" not in response.headers


def test_middleware_role_correspondant(client):
    uid = uuid.uuid4()
    client.cookies.set("session-token", valid_token(uid))
    context = SessionContext(user_id=str(uid), role="ADMIN", name="Admin")
    with patch("app.access_guard.load_session_context", return_value=context) as mock_load:
        response = client.get("/admin", follow_redirects=False)

    assert response.status_code == 200
    assert response.json() == {
        "portal": "admin",
        "page": "dashboard",
        "user": {"id": str(uid), "role": "ADMIN", "name": "Admin"},
    }
    assert mock_load.call_args.args[1] == str(uid)


def test_middleware_sous_page_du_portail(client):
    client.cookies.set("session-token", valid_token())
    context = SessionContext(user_id="u1", role="TEACHER", name="Jean")
    with patch("app.access_guard.load_session_context", return_value=context):
        response = client.get("/teacher/classes/TCH001-CS101", follow_redirects=False)

    assert response.status_code == 200
    assert response.json()["page"] == "classes/TCH001-CS101"


def test_middleware_erreur_bdd_refuse_l_acces(client):
    client.cookies.set("session-token", valid_token())
    with patch("app.access_guard.load_session_context", side_effect=RuntimeError("BDD")):
        response = client.get("/student", follow_redirects=False)

    assert response.status_code == 307
    assert "Max-Age=0" in response.headers["set-cookie"]


def test_middleware_ignore_les_routes_api(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_middleware_refus_puis_portail_du_role_avec_le_meme_cookie(client):
    client.cookies.set("session-token", valid_token())
    context = SessionContext(user_id="u1", role="STUDENT", name="Alice")
    with patch("app.access_guard.load_session_context", return_value=context):
        refused = client.get("/admin/departments", follow_redirects=False)
        allowed = client.get("/student/subjects", follow_redirects=False)

    assert refused.status_code == 307
    assert "set-cookie" not in refused.headers
    assert allowed.status_code == 200
    assert allowed.json()["portal"] == "student"
    assert allowed.json()["user"]["name"] == "Alice"


def test_jeton_de_connexion_accepte_sur_le_portail_du_role(client, mock_db):
    user = SimpleNamespace(
        id=uuid.uuid4(), email="jean@test.com", name="Jean Dupont", role="TEACHER",
        password_hash=hash_password("secret1"), created_at=None,
        admin_profile=None, teacher_profile=None, student_profile=None,
    )
    mock_db.execute.return_value.scalar_one_or_none.return_value = user
    login = client.post(
        "/api/auth/login",
        json={"email": "jean@test.com", "password": "secret1", "role": "TEACHER"},
    )
    assert login.status_code == 200

    guard_db = MagicMock()
    guard_db.get.side_effect = lambda model, uid: user if uid == user.id else None
    client.cookies.clear()
    client.cookies.set("session-token", login.json()["token"])
    with patch(
        "app.access_guard.load_session_context",
        side_effect=lambda factory, user_id: load_session_context(lambda: guard_db, user_id),
    ):
        teacher_page = client.get("/teacher", follow_redirects=False)
        admin_page = client.get("/admin", follow_redirects=False)

    assert teacher_page.status_code == 200
    assert teacher_page.json()["user"] == {
        "id": str(user.id), "role": "TEACHER", "name": "Jean Dupont",
    }
    assert admin_page.status_code == 307
    assert "set-cookie" not in admin_page.headers
