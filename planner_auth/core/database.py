"""Account store: engine, per-request sessions and a connectivity check for health."""

import logging
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from planner_auth.core.config import Settings, settings

logger = logging.getLogger(__name__)


def engine_options(app_settings: Settings) -> dict[str, Any]:
    """Keyword arguments for create_engine, by backend."""
    options: dict[str, Any] = {"echo": app_settings.DEBUG}
    if app_settings.DATABASE_URL.startswith("sqlite"):
        # Sync endpoints run in the threadpool, so the connection crosses threads.
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_pre_ping"] = True
    return options


engine = create_engine(settings.DATABASE_URL, **engine_options(settings))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency: one session per request, closed when the request ends."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """True if the account store answers SELECT 1."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Account store unreachable: %s", type(e).__name__)
        return False
    return True
