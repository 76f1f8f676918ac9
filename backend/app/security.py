"""
Hachage et vérification des mots de passe (passlib).
"""

from passlib.context import CryptContext

from app.config import settings

pwd_context = CryptContext(schemes=[settings.PASSWORD_HASH_SCHEME], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Compare un mot de passe à son hash. Un hash illisible vaut un échec."""
    try:
        return pwd_context.verify(plain_password, password_hash)
    except (ValueError, TypeError):
        return False


def dummy_verify() -> None:
    """Consomme le même temps qu'une vérification réelle (utilisateur inconnu)."""
    pwd_context.dummy_verify()
