"""Override records and the category they belong to."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Category(str, Enum):
    RESIDENTIAL = "residential"
    WORKPLACE = "workplace"

    @property
    def label(self) -> str:
        """Caption shown next to the count field."""
        return "Homes" if self is Category.RESIDENTIAL else "Jobs"

    @property
    def section(self) -> str:
        return self.value


@dataclass(frozen=True)
class OverrideRecord:
    entity_name: str
    category: Category
    count: int


__all__ = ["Category", "OverrideRecord"]
