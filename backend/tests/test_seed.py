"""
Tests du script d'initialisation (administrateur initial idempotent).
"""

from unittest.mock import MagicMock

import pytest

from app.config import settings
from app.models.user import Admin, User
from app.security import verify_password
from app.seed import seed_admin


def test_seed_admin_deja_present():
    existing = MagicMock()
    db = MagicMock()
    db.execute.return_value.scalar_one_or_none.return_value = existing

    assert seed_admin(db) is existing
    db.add.assert_not_called()
    db.commit.assert_not_called()


def test_seed_admin_cree_compte_et_profil():
    db = MagicMock()
    db.execute.return_value.scalar_one_or_none.return_value = None

    user = seed_admin(db)

    added = [c.args[0] for c in db.add.call_args_list]
    assert isinstance(added[0], User)
    assert isinstance(added[1], Admin)
    assert added[1].user_id == user.id
    assert user.role == "ADMIN"
    assert user.email == settings.SEED_ADMIN_EMAIL
    assert verify_password(settings.SEED_ADMIN_PASSWORD, user.password_hash)
    db.commit.assert_called_once()


def test_seed_admin_echec_rollback():
    db = MagicMock()
    db.execute.return_value.scalar_one_or_none.return_value = None
    db.commit.side_effect = RuntimeError("BDD")

    with pytest.raises(RuntimeError):
        seed_admin(db)
    db.rollback.assert_called_once()
