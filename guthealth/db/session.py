import logging
import os
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from guthealth.core.config import settings

logger = logging.getLogger(__name__)

engine_args = {}
if settings.is_sqlite:
    # SQLite needs a directory for file databases and cross-thread access for the test client
    db_path = settings.SQLALCHEMY_DATABASE_URI.replace("sqlite:///", "", 1)
    if db_path and db_path != ":memory:":
        os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
    engine_args["connect_args"] = {"check_same_thread": False}
else:
    # PostgreSQL configuration with connection pooling
    engine_args.update({
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_recycle": 300,      # Recycle connections every 5 minutes
        "pool_pre_ping": True,    # Validate connections before use
        "pool_timeout": 30,
    })

engine = create_engine(settings.SQLALCHEMY_DATABASE_URI, echo=False, **engine_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Get a database session with proper cleanup using context manager.

    Usage:
        with get_db_session() as db:
            result = db.query(Model).all()
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Database session error: {e}")
        raise
    finally:
        db.close()
