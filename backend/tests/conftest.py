"""
Configuration partagée pour tous les tests.
Override les dépendances get_db et get_storage pour éviter toute connexion
réelle à PostgreSQL ou au stockage S3.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from app.database import get_db
from app.main import app
from app.services.storage import get_storage


@pytest.fixture
def mock_db():
    return MagicMock()


@pytest.fixture
def mock_storage():
    return AsyncMock()


@pytest.fixture
def client(mock_db, mock_storage):
    """Client HTTP de test avec la BDD et le stockage mockés."""
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_storage] = lambda: mock_storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
