"""High-level book metadata accessors.

`BookMetadataExtractor` lists what callers may ask of a metadata source;
`OpfMetadataExtractor` answers it from a parsed :class:`OpfDocument`.  Other
formats can plug in by implementing the same interface.
"""
from __future__ import annotations

import abc
import datetime as _dt
import logging
from pathlib import Path
from typing import List, Optional
from urllib.parse import unquote

from .document import OpfDocument
from .errors import CoverDecodeError, OpfIOError
from .parser import OpfParser

__all__ = [
    "BookMetadataExtractor",
    "OpfMetadataExtractor",
    "parse_publication_date",
]

logger = logging.getLogger(__name__)

UNKNOWN_TITLE = "Unknown Title"
UNKNOWN_AUTHOR = "Unknown Author"
UNDETERMINED_LANGUAGE = "und"
SUBJECT_SEPARATOR = ";"

# tried in order after the full RFC 3339 timestamp
_DATE_FORMATS = ("%Y-%m-%d", "%Y-%m", "%Y")


def parse_publication_date(value: str) -> Optional[_dt.date]:
    """Parse *value* leniently; return ``None`` if no known format matches.

    >>> parse_publication_date("2020-05")
    datetime.date(2020, 5, 1)
    """
    value = value.strip()
    try:
        # fromisoformat() only learned the "Z" suffix in 3.11
        return _dt.datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        pass  # fall through to the shorter formats
    for fmt in _DATE_FORMATS:
        try:
            return _dt.datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


class BookMetadataExtractor(abc.ABC):
    """Common metadata questions, independent of the source format."""

    @abc.abstractmethod
    def title(self) -> str: ...

    @abc.abstractmethod
    def author(self) -> str: ...

    @abc.abstractmethod
    def authors(self) -> List[str]: ...

    @abc.abstractmethod
    def language(self) -> str: ...

    @abc.abstractmethod
    def publisher(self) -> Optional[str]: ...

    @abc.abstractmethod
    def publication_date(self) -> Optional[_dt.date]: ...

    @abc.abstractmethod
    def isbns(self) -> List[str]: ...

    @abc.abstractmethod
    def subjects(self) -> List[str]: ...

    @abc.abstractmethod
    def description(self) -> Optional[str]: ...

    @abc.abstractmethod
    def cover_image_data(self) -> Optional[bytes]: ...

    def as_dict(self) -> dict:
        """JSON-friendly snapshot of every field."""
        pub_date = self.publication_date()
        return {
            "title": self.title(),
            "author": self.author(),
            "authors": self.authors(),
            "language": self.language(),
            "publisher": self.publisher(),
            "publication_date": pub_date.isoformat() if pub_date else None,
            "isbns": self.isbns(),
            "subjects": self.subjects(),
            "description": self.description(),
        }


class OpfMetadataExtractor(BookMetadataExtractor):
    """Adapter exposing an :class:`OpfDocument` as :class:`BookMetadataExtractor`."""

    def __init__(self, doc: OpfDocument) -> None:
        self.doc = doc

    @classmethod
    def from_path(cls, path: Path | str) -> "OpfMetadataExtractor":
        return cls(OpfParser().parse(path))

    def title(self) -> str:
        return self.doc.first_value("title") or UNKNOWN_TITLE

    def author(self) -> str:
        return self.doc.first_value("creator") or UNKNOWN_AUTHOR

    def authors(self) -> List[str]:
        return [a for a in self.doc.all_values("creator") or [] if a]

    def language(self) -> str:
        return self.doc.first_value("language") or UNDETERMINED_LANGUAGE

    def publisher(self) -> Optional[str]:
        return self.doc.first_value("publisher")

    def publication_date(self) -> Optional[_dt.date]:
        raw = self.doc.first_value("date")
        return parse_publication_date(raw) if raw is not None else None

    def isbns(self) -> List[str]:
        return [
            ident.value.replace("-", "").strip()
            for ident in self.doc.identifiers
            if ident.scheme is not None and ident.scheme.lower() == "isbn"
        ]

    def subjects(self) -> List[str]:
        parts = []
        for raw in self.doc.all_values("subject") or []:
            parts.extend(p.strip() for p in raw.split(SUBJECT_SEPARATOR))
        return [p for p in parts if p]

    def description(self) -> Optional[str]:
        return self.doc.first_value("description")

    def cover_path(self) -> Optional[Path]:
        """Resolve the guide cover href against the document directory."""
        href = self.doc.cover_reference()
        if not href:
            return None
        try:
            decoded = unquote(href, errors="strict")
        except UnicodeDecodeError as exc:
            raise CoverDecodeError(f"Cannot decode cover href {href!r}: {exc}") from exc
        return self.doc.base_dir / decoded

    def cover_image_data(self) -> Optional[bytes]:
        """Return cover bytes, or ``None`` when there is no cover or no such file."""
        path = self.cover_path()
        if path is None:
            return None
        try:
            return path.read_bytes()
        except FileNotFoundError:
            logger.debug("Cover %s referenced by %s does not exist", path, self.doc.source_path)
            return None
        except OSError as exc:
            raise OpfIOError(path, exc.strerror or str(exc)) from exc

    def as_dict(self) -> dict:
        data = super().as_dict()
        data["unique_identifier"] = self.doc.unique_identifier_id
        data["identifiers"] = [
            {"scheme": ident.scheme, "value": ident.value} for ident in self.doc.identifiers
        ]
        data["cover_href"] = self.doc.cover_reference()
        return data
