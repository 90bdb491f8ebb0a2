import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:////data/gestion_locative.db")
SQL_ECHO = os.getenv("SQL_ECHO", "").lower() in ("1", "true", "yes")

# SQLite connections are shared between FastAPI worker threads
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args, echo=SQL_ECHO)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def get_db():
    """Request-scoped session; commits are explicit in the handlers and services."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    from app.models import invoice, lease, property, regularisation  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Base initialisée (%s tables)", len(Base.metadata.tables))
