"""
PostgreSQL engine, session factory and schema creation.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from app.config import settings

logger = logging.getLogger("offleash.database")

Base = declarative_base()

engine = create_engine(
    settings.database_url, echo=settings.db_echo, pool_pre_ping=True, future=True
)

SessionLocal = sessionmaker(bind=engine, future=True)

# Extensions the models rely on: case-insensitive emails
REQUIRED_EXTENSIONS = ("citext",)


def init_database():
    """Create extensions and every table; existing tables are left untouched"""
    with engine.begin() as conn:
        for extension in REQUIRED_EXTENSIONS:
            try:
                # Savepoint keeps the outer transaction usable on failure
                with conn.begin_nested():
                    conn.exec_driver_sql(f"CREATE EXTENSION IF NOT EXISTS {extension};")
            except Exception as e:
                # Needs superuser; the DBA may have installed it already
                logger.warning(f"Could not create extension {extension}: {e}")

        Base.metadata.create_all(bind=conn)
        logger.info(f"Schema ready tables={len(Base.metadata.tables)}")


def get_db_session() -> Iterator[Session]:
    """One session per request; closed when the response is sent"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for scripts: commit on success, roll back on error"""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
