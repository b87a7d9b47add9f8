"""opfmeta package - book metadata from OPF package documents.

This package provides:
    • OpfParser – single-pass reader turning an .opf file into an OpfDocument.
    • OpfMetadataExtractor – title/author/ISBN/subjects/cover accessors.
    • SQLAlchemy ORM models (opfmeta.models) for a catalog of parsed books.
    • CLI utilities under opfmeta.cli (Click) and a Flask JSON API (opfmeta.web).

The parsing core does no I/O beyond reading the document itself, which keeps
it usable without the catalog or web layers.
"""

__all__ = [
    "BookMetadataExtractor",
    "GuideReference",
    "Identifier",
    "OpfDocument",
    "OpfMetadataExtractor",
    "OpfParseError",
    "OpfParser",
    "parse_opf",
]

from .document import GuideReference, Identifier, OpfDocument  # noqa: E402
from .errors import OpfParseError  # noqa: E402
from .extractor import BookMetadataExtractor, OpfMetadataExtractor  # noqa: E402
from .parser import OpfParser, parse_opf  # noqa: E402
