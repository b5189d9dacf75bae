"""Host-side classification of buildings into override categories."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Protocol

from .overrides.models import Category

RESIDENTIAL_SERVICE = "residential"


class EntityClassifier(Protocol):
    def classify(self, entity_name: str) -> Category:
        """Return the category whose mapping holds overrides for ``entity_name``."""


@dataclass
class ServiceClassifier:
    """Classify by host service: residential buildings hold homes, all others jobs.

    Buildings missing from ``services`` fall back to ``default`` so the
    classifier answers for every name.
    """

    services: Mapping[str, str] = field(default_factory=dict)
    default: Category = Category.WORKPLACE

    def classify(self, entity_name: str) -> Category:
        service = self.services.get(entity_name)
        if service is None:
            return self.default
        if service.strip().lower() == RESIDENTIAL_SERVICE:
            return Category.RESIDENTIAL
        return Category.WORKPLACE


@dataclass(frozen=True)
class FixedClassifier:
    category: Category

    def classify(self, entity_name: str) -> Category:
        return self.category


__all__ = ["EntityClassifier", "FixedClassifier", "ServiceClassifier"]
