"""Persistent store for per-building overrides."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

from ..exceptions import InvalidOverrideError, OverridePersistenceError
from .codec import OverrideCodec, empty_mappings
from .models import Category, OverrideRecord

DEFAULT_STORE_PATH = Path("configs/building_overrides.yml")

_logger = logging.getLogger(__name__)


def _check_override(entity_name: str, count: int) -> None:
    if not isinstance(entity_name, str) or not entity_name:
        raise InvalidOverrideError("entity name must be a non-empty string")
    if not isinstance(count, int) or isinstance(count, bool) or count < 1:
        raise InvalidOverrideError(f"override count must be an integer >= 1, got {count!r}")


class OverrideStore:
    """Homes/jobs overrides keyed by category and building name.

    Every ``set`` and ``remove`` rewrites the whole file before returning. When
    that write fails the in-memory change is undone and
    ``OverridePersistenceError`` is raised, so memory never runs ahead of disk.

    ``set`` requires a non-empty name and a count of at least 1; callers are
    expected to validate user input first, and the store raises
    ``InvalidOverrideError`` if they did not.
    """

    def __init__(self, path: Path | None = None, codec: OverrideCodec | None = None):
        self.path = Path(path or DEFAULT_STORE_PATH)
        self.codec = codec or OverrideCodec()
        self.diagnostic: str | None = None
        self._overrides = empty_mappings()

    @classmethod
    def load(cls, path: Path | None = None, codec: OverrideCodec | None = None) -> "OverrideStore":
        store = cls(path, codec)
        store.reload()
        return store

    def reload(self) -> None:
        result = self.codec.read(self.path)
        self._overrides = result.mappings
        self.diagnostic = result.diagnostic
        if self.diagnostic:
            _logger.warning("Overrides loaded with problems: %s", self.diagnostic)
        _logger.debug("Loaded %d overrides from %s", len(self), self.path)

    def get(self, category: Category, entity_name: str) -> int | None:
        return self._overrides[category].get(entity_name)

    def set(self, category: Category, entity_name: str, count: int) -> None:
        _check_override(entity_name, count)
        mapping = self._overrides[category]
        previous = mapping.get(entity_name)
        mapping[entity_name] = count
        try:
            self.save()
        except OverridePersistenceError:
            if previous is None:
                del mapping[entity_name]
            else:
                mapping[entity_name] = previous
            raise

    def remove(self, category: Category, entity_name: str) -> bool:
        """Drop an override; returns False when there was nothing to drop."""
        mapping = self._overrides[category]
        previous = mapping.pop(entity_name, None)
        try:
            self.save()
        except OverridePersistenceError:
            if previous is not None:
                mapping[entity_name] = previous
            raise
        return previous is not None

    def save(self) -> None:
        self.codec.write(self.path, self._overrides)
        _logger.debug("Wrote %d overrides to %s", len(self), self.path)

    def entries(self, category: Category) -> Dict[str, int]:
        return dict(self._overrides[category])

    def records(self) -> list[OverrideRecord]:
        return [
            OverrideRecord(entity_name=name, category=category, count=count)
            for category in Category
            for name, count in sorted(self._overrides[category].items())
        ]

    def __len__(self) -> int:
        return sum(len(mapping) for mapping in self._overrides.values())
