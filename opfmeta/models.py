"""SQLAlchemy ORM models for the opfmeta catalog."""

from __future__ import annotations

import datetime as _dt
from typing import List

from sqlalchemy import Date, ForeignKey, Integer, String, Text, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship, sessionmaker

DEFAULT_DB_URL = "sqlite:///opfmeta.db"


class Base(DeclarativeBase):
    pass


class Author(Base):
    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)

    books: Mapped[List["Book"]] = relationship(back_populates="authors", secondary="book_authors")

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Author {self.name}>"


class Subject(Base):
    __tablename__ = "subjects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)

    books: Mapped[List["Book"]] = relationship(back_populates="subjects", secondary="book_subjects")


class Book(Base):
    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    language: Mapped[str] = mapped_column(String, nullable=False)
    publisher: Mapped[str | None] = mapped_column(String)
    pub_date: Mapped[_dt.date | None] = mapped_column(Date)
    isbn: Mapped[str | None] = mapped_column(String)  # first ISBN, hyphens stripped
    description: Mapped[str | None] = mapped_column(Text)
    unique_identifier: Mapped[str | None] = mapped_column(String)

    # location of the source document; cover href is relative to its directory
    opf_path: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    cover_href: Mapped[str | None] = mapped_column(String)

    authors: Mapped[List[Author]] = relationship(back_populates="books", secondary="book_authors")
    subjects: Mapped[List[Subject]] = relationship(back_populates="books", secondary="book_subjects")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "authors": [a.name for a in self.authors],
            "language": self.language,
            "publisher": self.publisher,
            "publication_date": self.pub_date.isoformat() if self.pub_date else None,
            "isbn": self.isbn,
            "subjects": [s.name for s in self.subjects],
            "description": self.description,
            "has_cover": bool(self.cover_href),
        }


class BookAuthor(Base):
    __tablename__ = "book_authors"

    book_id: Mapped[int] = mapped_column(ForeignKey("books.id"), primary_key=True)
    author_id: Mapped[int] = mapped_column(ForeignKey("authors.id"), primary_key=True)


class BookSubject(Base):
    __tablename__ = "book_subjects"

    book_id: Mapped[int] = mapped_column(ForeignKey("books.id"), primary_key=True)
    subject_id: Mapped[int] = mapped_column(ForeignKey("subjects.id"), primary_key=True)


# database helpers

_engine = None
_Session = None


def init_db(url: str = DEFAULT_DB_URL) -> None:
    """Create engine, create tables if not exist, globally store session factory."""
    global _engine, _Session
    from sqlalchemy import event

    _engine = create_engine(url, future=True)

    # SQLite's built-in lower() only folds ASCII
    @event.listens_for(_engine, "connect")
    def register_unicode_lower(dbapi_conn, _):
        if hasattr(dbapi_conn, "create_function"):
            dbapi_conn.create_function("lower", 1, lambda s: s.lower() if isinstance(s, str) else s)

    Base.metadata.create_all(_engine)
    _Session = sessionmaker(_engine, expire_on_commit=False, future=True)


def get_session():
    if _Session is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _Session()
