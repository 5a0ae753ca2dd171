from contextlib import contextmanager
import os
import logging

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .errors import DomainError, InternalError

load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./mudancas.db")


def build_engine(url: str):
    if url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False})

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine
    return create_engine(url, pool_pre_ping=True)


engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session, operation: str):
    """Run a unit of work: commit on success, roll back on every error.

    Domain errors propagate unchanged. Store failures are logged and
    surfaced as ``InternalError``.
    """
    try:
        yield db
        db.commit()
    except DomainError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logging.exception("Store failure during %s", operation)
        raise InternalError() from exc
    except Exception:
        db.rollback()
        raise
