import os
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import sessionmaker, declarative_base

from habitsync.config import DATABASE_URL, LOG_LEVEL
from habitsync.errors import ConflictError, TransientStoreError

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


def build_engine(url: str):
    """Create an engine with driver-appropriate settings."""
    engine_args = {}
    if url.startswith("sqlite"):
        # Only use connect_args if we are using SQLite
        engine_args["connect_args"] = {"check_same_thread": False, "timeout": 30}
    else:
        engine_args.update({
            "pool_size": 5,
            "max_overflow": 10,
            "pool_timeout": 30,
            "pool_recycle": 1800,
            "pool_pre_ping": True,
        })
    return create_engine(url, **engine_args, echo=False)


try:
    engine = build_engine(DATABASE_URL)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
except Exception as e:
    logger.error(f"Failed to create engine: {e}")
    raise

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a database session and closes it after use."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create the data/ directory for SQLite, then create all tables."""
    bind = bind or engine
    if str(bind.url).startswith("sqlite:///./"):
        os.makedirs("data", exist_ok=True)

    # Import all models so they register with Base.metadata
    import habitsync.models  # noqa: F401

    Base.metadata.create_all(bind=bind)
    logger.info("Database initialized successfully.")


@contextmanager
def transaction(db, conflict_message: str | None = None):
    """
    Commit the work done inside the block, or roll all of it back.

    Uniqueness violations become ConflictError when a conflict_message is
    given (invite codes, memberships) and TransientStoreError otherwise.
    Driver-level failures become TransientStoreError, so the caller can retry
    the whole operation.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if conflict_message:
            raise ConflictError(conflict_message) from e
        logger.warning(f"Concurrent write rejected by the store: {e.orig}")
        raise TransientStoreError("A concurrent update won the race, retry the request") from e
    except DBAPIError as e:
        db.rollback()
        logger.warning(f"Store unavailable: {e.orig}")
        raise TransientStoreError("The data store is unavailable, retry the request") from e
    except Exception:
        db.rollback()
        raise
