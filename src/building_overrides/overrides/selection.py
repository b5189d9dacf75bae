"""Selection state machine behind the homes/jobs edit panel."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from ..exceptions import OverridePersistenceError, SelectionStateError
from .models import Category
from .store import OverrideStore

if TYPE_CHECKING:
    from ..host import EntityClassifier
    from .audit import OverrideAuditLog

INVALID_VALUE_MESSAGE = "ERROR: invalid value"

_COUNT_PATTERN = re.compile(r"^\s*\+?(\d+)\s*$")


class SelectionState(Enum):
    NO_SELECTION = "no_selection"
    WITH_OVERRIDE = "with_override"
    WITHOUT_OVERRIDE = "without_override"


class ActionError(Enum):
    INVALID_INPUT = "invalid_input"
    PERSISTENCE_FAILED = "persistence_failed"


@dataclass(frozen=True)
class ActionResult:
    ok: bool
    error: ActionError | None = None
    message: str | None = None
    count: int | None = None


def parse_count(text: str | None) -> int | None:
    """Parse user text as a positive integer, or return None."""
    if text is None:
        return None
    match = _COUNT_PATTERN.match(text)
    if not match:
        return None
    value = int(match.group(1))
    return value if value >= 1 else None


class SelectionController:
    """Track the selected building and route save/delete requests to the store.

    The controller performs exactly one store query per selection change and
    none when the same building is selected again.
    """

    def __init__(
        self,
        store: OverrideStore,
        classifier: "EntityClassifier",
        audit: Optional["OverrideAuditLog"] = None,
    ):
        self.store = store
        self.classifier = classifier
        self.audit = audit
        self.state = SelectionState.NO_SELECTION
        self.entity_name: str | None = None
        self.category: Category | None = None
        self.message: str | None = None
        self._count: int | None = None

    @property
    def label(self) -> str | None:
        return self.category.label if self.category else None

    @property
    def can_save(self) -> bool:
        return self.state is not SelectionState.NO_SELECTION

    @property
    def can_delete(self) -> bool:
        return self.state is SelectionState.WITH_OVERRIDE

    def current_count(self) -> int | None:
        return self._count

    def has_override(self) -> bool:
        return self.state is SelectionState.WITH_OVERRIDE

    def on_selection_changed(self, entity_name: str | None) -> SelectionState:
        entity_name = entity_name or None
        if entity_name == self.entity_name:
            return self.state
        self.message = None
        if entity_name is None:
            self.entity_name = None
            self.category = None
            self._count = None
            self.state = SelectionState.NO_SELECTION
            return self.state
        self.entity_name = entity_name
        self.category = self.classifier.classify(entity_name)
        self._enter(self.store.get(self.category, entity_name))
        return self.state

    def on_save_requested(self, text: str | None) -> ActionResult:
        self.message = None
        entity_name, category = self._require_selection("save")
        count = parse_count(text)
        if count is None:
            self.message = INVALID_VALUE_MESSAGE
            return ActionResult(ok=False, error=ActionError.INVALID_INPUT, message=self.message)
        previous = self._count
        try:
            self.store.set(category, entity_name, count)
        except OverridePersistenceError as exc:
            self.message = str(exc)
            return ActionResult(ok=False, error=ActionError.PERSISTENCE_FAILED, message=self.message)
        self._enter(count)
        if self.audit is not None:
            self.audit.record(entity_name, category, "save", previous, count)
        return ActionResult(ok=True, count=count)

    def on_delete_requested(self) -> ActionResult:
        self.message = None
        entity_name, category = self._require_selection("delete")
        if self.state is not SelectionState.WITH_OVERRIDE:
            raise SelectionStateError(f"no override to delete for {entity_name}")
        previous = self._count
        try:
            self.store.remove(category, entity_name)
        except OverridePersistenceError as exc:
            self.message = str(exc)
            return ActionResult(ok=False, error=ActionError.PERSISTENCE_FAILED, message=self.message)
        self._enter(None)
        if self.audit is not None:
            self.audit.record(entity_name, category, "delete", previous, None)
        return ActionResult(ok=True)

    def _require_selection(self, action: str) -> tuple[str, Category]:
        if self.entity_name is None or self.category is None:
            raise SelectionStateError(f"cannot {action} without a selected building")
        return self.entity_name, self.category

    def _enter(self, count: int | None) -> None:
        self._count = count
        if count is None:
            self.state = SelectionState.WITHOUT_OVERRIDE
        else:
            self.state = SelectionState.WITH_OVERRIDE


__all__ = [
    "ActionError",
    "ActionResult",
    "INVALID_VALUE_MESSAGE",
    "SelectionController",
    "SelectionState",
    "parse_count",
]
