# mindscape/persistence/db.py
# -*- coding: utf-8 -*-
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from contextlib import contextmanager
import os

from mindscape.errors import StorageError

DB_URL = os.getenv("DB_URL", "sqlite:///mindscape.db")

# l'API sert les requêtes depuis un threadpool : SQLite doit accepter plusieurs threads
_connect_args = {"check_same_thread": False} if DB_URL.startswith("sqlite") else {}

engine = create_engine(DB_URL, echo=False, future=True, connect_args=_connect_args)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,  # important pour éviter DetachedInstanceError
    future=True,
)

@contextmanager
def get_session():
    """Contexte gérant automatiquement commit/rollback.

    Les erreurs SQLAlchemy ressortent en StorageError ; les erreurs métier
    levées dans le bloc annulent la transaction et remontent telles quelles.
    """
    s = SessionLocal()
    try:
        yield s
        s.commit()
    except SQLAlchemyError as e:
        s.rollback()
        raise StorageError(f"Erreur de stockage : {e}") from e
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()

def init_db(Base, drop_and_recreate=False):
    """Crée les tables (et les recrée si demandé)."""
    if drop_and_recreate:
        Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
