"""Overrides management."""

from .codec import LoadResult, OverrideCodec
from .models import Category, OverrideRecord
from .selection import ActionError, ActionResult, SelectionController, SelectionState
from .store import DEFAULT_STORE_PATH, OverrideStore

__all__ = [
    "ActionError",
    "ActionResult",
    "Category",
    "DEFAULT_STORE_PATH",
    "LoadResult",
    "OverrideCodec",
    "OverrideRecord",
    "OverrideStore",
    "SelectionController",
    "SelectionState",
]
