from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from pydantic_settings import BaseSettings
from functools import lru_cache, wraps
from typing import List
import logging

from core.exceptions import StoreError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    database_url: str = "sqlite:///./ticket_draft.db"
    season: str = "2025-26"
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings():
    return Settings()


Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    """
    Build a SQLAlchemy engine for the given URL.

    SQLite needs check_same_thread=False because FastAPI runs sync endpoints
    in a threadpool and each store call may land on a different thread.
    """
    return create_engine(
        database_url,
        connect_args={"check_same_thread": False} if database_url.startswith("sqlite") else {},
        pool_pre_ping=True
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def transactional(func):
    """
    Transaction decorator for RoomStore methods.

    Opens a fresh session from ``self._session_factory``, passes it to the
    wrapped method as the ``db`` keyword, commits on success and rolls back on
    failure. SQLAlchemy errors are re-raised as StoreError so callers only
    ever see the domain error taxonomy.

    Usage:
        @transactional
        def set_room(self, code, db=None, **fields):
            room = db.get(Room, code)
            ...
            # no manual commit, the decorator handles it

    Notes:
        - Do not commit inside the wrapped method.
        - Room codes the method adds to ``db.info["changed_rooms"]`` are
          handed to ``self._on_commit`` once the commit succeeded.
        - Domain exceptions (RoomNotFound, ValidationError...) propagate
          unchanged after rollback.
    """
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        db = self._session_factory()
        try:
            result = func(self, *args, db=db, **kwargs)
            db.commit()
            changed = db.info.pop("changed_rooms", set())
            if changed:
                self._on_commit(changed)
            return result
        except SQLAlchemyError as e:
            logger.error(f"Transaction failed in {func.__name__}: {e}", exc_info=True)
            db.rollback()
            raise StoreError(f"{func.__name__} failed: {e}") from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    return wrapper
