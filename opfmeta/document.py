"""In-memory model of one parsed OPF document.

`OpfDocument` only holds what the parser collected; it never touches the
file system.  Lookups are case-insensitive because keys are lowercased when
they are inserted.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

__all__ = [
    "GuideReference",
    "Identifier",
    "OpfDocument",
]


@dataclass(frozen=True)
class Identifier:
    """A ``<dc:identifier>`` entry, e.g. scheme ``ISBN``."""

    value: str
    scheme: Optional[str] = None


@dataclass(frozen=True)
class GuideReference:
    """A ``<reference>`` entry of the ``<guide>`` section."""

    type: str
    href: str
    title: Optional[str] = None


@dataclass
class OpfDocument:
    source_path: Path
    metadata: Dict[str, List[str]] = field(default_factory=dict)
    unique_identifier_id: Optional[str] = None
    identifiers: List[Identifier] = field(default_factory=list)
    guide: List[GuideReference] = field(default_factory=list)

    def add_value(self, key: str, value: str) -> None:
        """Append *value* under lowercased *key*, creating the list lazily."""
        self.metadata.setdefault(key.lower(), []).append(value)

    # lookups

    def first_value(self, key: str) -> Optional[str]:
        values = self.metadata.get(key.lower())
        return values[0] if values else None

    def all_values(self, key: str) -> Optional[List[str]]:
        return self.metadata.get(key.lower())

    def cover_reference(self) -> Optional[str]:
        """Return the href of the first guide reference of type ``cover``."""
        for ref in self.guide:
            if ref.type.lower() == "cover":
                return ref.href
        return None

    @property
    def base_dir(self) -> Path:
        # relative hrefs resolve against the directory holding the document
        return self.source_path.parent
