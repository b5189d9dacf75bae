"""SQLite engine and sessions for the override audit trail."""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

DB_PATH = Path(os.getenv("BUILDING_OVERRIDES_DB_PATH", "building_overrides.db"))


def _build_engine(db_path: Path) -> Engine:
    return create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})


_engine = _build_engine(DB_PATH)
_Session = sessionmaker(bind=_engine, autoflush=False, autocommit=False)


def configure_engine(path: str | Path) -> None:
    """Point the audit trail at another database file (settings, tests)."""
    global DB_PATH, _engine, _Session
    DB_PATH = Path(path)
    _engine.dispose()
    _engine = _build_engine(DB_PATH)
    _Session = sessionmaker(bind=_engine, autoflush=False, autocommit=False)


@contextmanager
def session_scope() -> Iterator[Session]:
    """Commit on success, roll back and re-raise on any error."""
    session = _Session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(base) -> None:
    """Create the audit tables, and the database's directory if needed."""
    from . import models  # noqa: F401  # Ensure models are registered

    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    base.metadata.create_all(_engine)
