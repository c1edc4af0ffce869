# =====================================
# securetrack/database.py
# =====================================
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from .models import Base

logger = logging.getLogger(__name__)

# Base SQLite en mémoire : l'état vit le temps du processus, rien n'est écrit sur disque
DATABASE_URL = "sqlite://"


def create_memory_engine():
    """Crée un moteur SQLite mémoire partagé par toutes les sessions"""
    return create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


engine = create_memory_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None):
    """Initialise le schéma"""
    try:
        Base.metadata.create_all(bind=bind or engine)
        logger.info("Schéma mémoire initialisé")
    except Exception as e:
        logger.error(f"Erreur initialisation DB: {e}")
        raise


def commit_or_rollback(db: Session):
    """Valide la session ; en cas d'échec rien n'est appliqué"""
    try:
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Erreur commit, modifications annulées: {e}")
        raise


def get_db() -> Session:
    """Dependency pour obtenir une session DB"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_db_sync() -> Session:
    """Obtenir une session DB synchrone"""
    return SessionLocal()
