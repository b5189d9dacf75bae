"""Audit database helpers and ORM models."""

from .session import configure_engine, init_db, session_scope
from .models import Base, OverrideAudit

__all__ = ["Base", "OverrideAudit", "configure_engine", "init_db", "session_scope"]
