"""Database population helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from sqlalchemy import func

from .errors import OpfParseError
from .extractor import OpfMetadataExtractor
from .models import DEFAULT_DB_URL, Author, Book, Subject, get_session, init_db

__all__ = ["import_opf_tree", "find_opf_files"]

logger = logging.getLogger(__name__)


def find_opf_files(root: Path | str) -> list[Path]:
    """Return every ``*.opf`` below *root* in a stable order."""
    return sorted(p for p in Path(root).rglob("*.opf") if p.is_file())


def import_opf_tree(
    root: Path | str,
    db_url: str = DEFAULT_DB_URL,
    chunk_size: int = 100,
) -> int:
    """Parse every OPF document under *root* and insert it into DB at *db_url*.

    Documents already catalogued (same resolved path) are left alone and
    documents that fail to parse are logged and skipped.

    Returns the number of imported books.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")
    init_db(db_url)
    session = get_session()

    # performance optimisation caches, keyed by lowercased name
    authors_cache: dict[str, Author] = {}
    subjects_cache: dict[str, Subject] = {}

    count = 0
    try:
        for opf_path in find_opf_files(root):
            stored_path = opf_path.resolve().as_posix()
            if session.query(Book.id).filter_by(opf_path=stored_path).first():
                logger.debug("Already catalogued: %s", stored_path)
                continue
            try:
                meta = OpfMetadataExtractor.from_path(opf_path)
            except OpfParseError as exc:
                logger.warning("Skipping %s: %s", opf_path, exc)
                continue

            session.add(_build_book(session, meta, stored_path, authors_cache, subjects_cache))
            count += 1
            if count % chunk_size == 0:
                session.flush()
                logger.info("Imported %d books so far", count)
        session.commit()
    finally:
        session.close()
    return count


def _build_book(session, meta: OpfMetadataExtractor, stored_path: str, authors_cache, subjects_cache) -> Book:
    isbns = meta.isbns()
    book = Book(
        title=meta.title(),
        language=meta.language(),
        publisher=meta.publisher(),
        pub_date=meta.publication_date(),
        isbn=isbns[0] if isbns else None,
        description=meta.description(),
        unique_identifier=meta.doc.unique_identifier_id,
        opf_path=stored_path,
        cover_href=meta.doc.cover_reference(),
    )
    book.authors = _ensure_named(session, Author, meta.authors(), authors_cache)
    book.subjects = _ensure_named(session, Subject, meta.subjects(), subjects_cache)
    return book


def _ensure_named(session, model, names: Iterable[str], cache: dict) -> list:
    """Fetch or create one *model* row per distinct (case-insensitive) name."""
    objs = []
    for name in names:
        key = name.strip().lower()
        if not key:
            continue
        obj = cache.get(key)
        if obj is None:
            obj = session.query(model).filter(func.lower(model.name) == key).first()
            if obj is None:
                obj = model(name=name.strip())
                session.add(obj)
                session.flush([obj])
            cache[key] = obj
        objs.append(obj)
    # the same person or subject may be listed twice with different casing
    return list(dict.fromkeys(objs))
