from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
import os
import threading
from dotenv import load_dotenv

from sharedurl.models.sharedurl import Base
import sharedurl.models.lms  # noqa: F401  (registers the LMS tables on Base)

load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./sharedurl.db")

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    DATABASE_URL,
    connect_args=_connect_args,
    pool_pre_ping=True,
    pool_size=int(os.getenv("DB_POOL_SIZE", "2")),
    max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "0")),
    pool_timeout=int(os.getenv("DB_POOL_TIMEOUT", "30")),
    pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "1800")),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# DDL runs at most once per process
_TABLES_ENSURED = False
_TABLES_LOCK = threading.Lock()


def get_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def ensure_tables_once(db: Session) -> None:
    """
    Creates missing tables on first use.
    In production the host LMS owns its schema; only sharedurl tables are new.
    """
    global _TABLES_ENSURED
    if _TABLES_ENSURED:
        return

    with _TABLES_LOCK:
        if _TABLES_ENSURED:
            return

        Base.metadata.create_all(bind=db.connection(), checkfirst=True)
        db.commit()
        _TABLES_ENSURED = True
