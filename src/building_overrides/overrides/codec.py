"""YAML encoding of the per-category override mappings."""

from __future__ import annotations

import os
import stat
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Tuple

import yaml

from ..exceptions import OverrideFormatError, OverridePersistenceError
from .models import Category

Pair = Tuple[str, int]
Mappings = Dict[Category, Dict[str, int]]


def empty_mappings() -> Mappings:
    return {category: {} for category in Category}


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _target_mode(path: Path) -> int:
    """Mode for the rewritten file: keep an existing file's mode, else 0666 minus the umask."""
    if path.exists():
        return stat.S_IMODE(path.stat().st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


@dataclass
class LoadResult:
    """Outcome of a fail-soft read: always usable mappings, plus what went wrong."""

    mappings: Mappings = field(default_factory=empty_mappings)
    problems: list[str] = field(default_factory=list)

    @property
    def diagnostic(self) -> str | None:
        if not self.problems:
            return None
        return "; ".join(self.problems)


class OverrideCodec:
    """Translate the override mappings to and from a two-section YAML document.

    Each section is a list of ``{name, count}`` entries sorted by name. Decoding
    rebuilds the mapping entry by entry, so a name listed twice keeps the value
    of its last occurrence.

    Entries with an unusable name or count are dropped on read, so the next
    write removes them from the file for good.
    """

    def encode_pairs(self, mapping: Mapping[str, int]) -> list[Pair]:
        return sorted(mapping.items())

    def decode_pairs(self, pairs: Iterable[Pair]) -> Dict[str, int]:
        mapping: Dict[str, int] = {}
        for name, count in pairs:
            mapping[name] = count
        return mapping

    def encode(self, mappings: Mapping[Category, Mapping[str, int]]) -> Dict[str, Any]:
        document: Dict[str, Any] = {}
        for category in Category:
            pairs = self.encode_pairs(mappings.get(category, {}))
            document[category.section] = [{"name": name, "count": count} for name, count in pairs]
        return document

    def decode(self, document: Any, problems: list[str] | None = None) -> Mappings:
        """Rebuild mappings from a parsed document.

        Raises ``OverrideFormatError`` when the document structure is wrong.
        Entries with an unusable name or count are skipped and described in
        ``problems`` when a list is supplied.
        """
        if problems is None:
            problems = []
        mappings = empty_mappings()
        if document is None:
            return mappings
        if not isinstance(document, dict):
            raise OverrideFormatError(f"expected a mapping at top level, got {type(document).__name__}")
        for category in Category:
            entries = document.get(category.section)
            if entries is None:
                continue
            if not isinstance(entries, list):
                raise OverrideFormatError(f"section '{category.section}' must be a list")
            pairs: list[Pair] = []
            for index, entry in enumerate(entries):
                if not isinstance(entry, dict):
                    raise OverrideFormatError(f"{category.section}[{index}] is not a mapping")
                name = entry.get("name")
                count = entry.get("count")
                if not isinstance(name, str) or not name:
                    problems.append(f"{category.section}[{index}]: missing or empty name")
                    continue
                if not _is_count(count):
                    problems.append(f"{category.section}[{index}] ({name}): invalid count {count!r}")
                    continue
                pairs.append((name, count))
            mappings[category] = self.decode_pairs(pairs)
        return mappings

    def dumps(self, mappings: Mapping[Category, Mapping[str, int]]) -> str:
        return yaml.safe_dump(self.encode(mappings), sort_keys=False)

    def loads(self, text: str) -> Mappings:
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise OverrideFormatError(f"invalid YAML: {exc}") from exc
        return self.decode(document)

    def read(self, path: Path) -> LoadResult:
        """Read ``path`` without ever raising; a missing file is an empty store."""
        path = Path(path)
        if not path.exists():
            return LoadResult()
        try:
            with path.open("r", encoding="utf-8") as handle:
                document = yaml.safe_load(handle)
        except (OSError, UnicodeDecodeError) as exc:
            return LoadResult(problems=[f"could not read {path}: {exc}"])
        except yaml.YAMLError as exc:
            return LoadResult(problems=[f"invalid YAML in {path}: {exc}"])
        problems: list[str] = []
        try:
            mappings = self.decode(document, problems)
        except OverrideFormatError as exc:
            return LoadResult(problems=[f"malformed overrides file {path}: {exc}"])
        return LoadResult(mappings=mappings, problems=problems)

    def write(self, path: Path, mappings: Mapping[Category, Mapping[str, int]]) -> None:
        """Replace ``path`` with the encoded mappings or raise ``OverridePersistenceError``."""
        path = Path(path)
        text = self.dumps(mappings)
        tmp_name = None
        try:
            _ensure_parent(path)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.chmod(tmp_name, _target_mode(path))
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise OverridePersistenceError(f"could not write overrides to {path}: {exc}", path=path) from exc


__all__ = ["LoadResult", "OverrideCodec", "empty_mappings"]
