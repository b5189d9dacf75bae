"""Record every saved or deleted override in the audit database."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import desc

from ..db.models import OverrideAudit
from ..db.session import session_scope
from .models import Category


@dataclass
class AuditEntry:
    entity_name: str
    category: Category
    action: str
    old_value: int | None
    new_value: int | None
    applied_at: datetime


class OverrideAuditLog:
    def record(
        self,
        entity_name: str,
        category: Category,
        action: str,
        old_value: int | None,
        new_value: int | None,
    ) -> None:
        with session_scope() as session:
            session.add(
                OverrideAudit(
                    entity_name=entity_name,
                    category=category.value,
                    action=action,
                    old_value=old_value,
                    new_value=new_value,
                )
            )

    def history(self, entity_name: str | None = None) -> list[AuditEntry]:
        """Return audit entries, newest first, optionally for one building."""
        with session_scope() as session:
            query = session.query(OverrideAudit)
            if entity_name:
                query = query.filter(OverrideAudit.entity_name == entity_name)
            rows = query.order_by(desc(OverrideAudit.applied_at), desc(OverrideAudit.id)).all()
            return [_to_entry(row) for row in rows]


def _to_entry(row: OverrideAudit) -> AuditEntry:
    return AuditEntry(
        entity_name=row.entity_name,
        category=Category(row.category),
        action=row.action,
        old_value=row.old_value,
        new_value=row.new_value,
        applied_at=row.applied_at,
    )
