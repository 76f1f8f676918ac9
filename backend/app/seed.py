"""
Initialisation de la base : création des tables et du compte administrateur.
Exécution : python -m app.seed (depuis backend/). Relançable sans effet de bord.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

import app.models  # noqa: F401
from app.config import settings
from app.database import Base, SessionLocal, engine
from app.models.user import Admin, User
from app.security import hash_password

logger = logging.getLogger(__name__)


def seed_admin(db: Session) -> User:
    """Crée l'administrateur initial (compte + profil) s'il n'existe pas déjà."""
    existing = db.execute(
        select(User).where(User.email == settings.SEED_ADMIN_EMAIL)
    ).scalar_one_or_none()
    if existing is not None:
        logger.info("Administrateur déjà présent : %s", existing.email)
        return existing

    user = User(
        id=uuid.uuid4(),
        email=settings.SEED_ADMIN_EMAIL,
        password_hash=hash_password(settings.SEED_ADMIN_PASSWORD),
        name=settings.SEED_ADMIN_NAME,
        role="ADMIN",
    )
    try:
        db.add(user)
        db.flush()
        db.add(Admin(user_id=user.id))
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Administrateur créé : %s", user.email)
    return user


def init_database() -> None:
    Base.metadata.create_all(bind=engine)
    logger.info("Tables créées.")

    db = SessionLocal()
    try:
        seed_admin(db)
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_database()
