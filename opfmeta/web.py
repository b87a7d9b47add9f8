"""Flask JSON interface over the opfmeta catalog."""
from __future__ import annotations

import io
import logging
import mimetypes
import re
from typing import List

from flask import Flask, abort, jsonify, request, send_file
from sqlalchemy import and_, func, or_

from .document import OpfDocument
from .errors import OpfParseError
from .extractor import OpfMetadataExtractor
from .models import DEFAULT_DB_URL, Author, Book, get_session, init_db
from .parser import OpfParser

logger = logging.getLogger(__name__)


def create_app(db_url: str = DEFAULT_DB_URL) -> Flask:
    app = Flask(__name__)
    init_db(db_url)

    @app.route("/")
    def index():
        with get_session() as session:
            total = session.query(func.count(Book.id)).scalar()
        return jsonify(service="opfmeta", books=total)

    @app.route("/search")
    def search():
        q = request.args.get("q", "").strip()
        tokens = [w.lower() for w in re.split(r"\s+", q) if w]
        if not tokens:
            return jsonify(query=q, books=[])

        # every token must match the title or one of the authors
        token_conds = []
        for tok in tokens:
            pat = f"%{tok}%"
            token_conds.append(or_(func.lower(Book.title).like(pat), func.lower(Author.name).like(pat)))

        with get_session() as session:
            books: List[Book] = (
                session.query(Book)
                .outerjoin(Book.authors)
                .filter(and_(*token_conds))
                .order_by(Book.title)
                .distinct()
                .all()
            )
            return jsonify(query=q, books=[b.to_dict() for b in books])

    @app.route("/book/<int:book_id>")
    def book_detail(book_id: int):
        with get_session() as session:
            book = session.get(Book, book_id)
            if not book:
                abort(404)
            return jsonify(book.to_dict())

    @app.route("/cover/<int:book_id>")
    def cover(book_id: int):
        with get_session() as session:
            book = session.get(Book, book_id)
            if not book or not book.cover_href:
                abort(404)
            opf_path = book.opf_path

        try:
            doc: OpfDocument = OpfParser().parse(opf_path)
            data = OpfMetadataExtractor(doc).cover_image_data()
        except OpfParseError as e:
            logger.error("%s", e)
            abort(404)
        if data is None:
            abort(404)

        href = doc.cover_reference() or ""
        mimetype = mimetypes.guess_type(href)[0] or "image/jpeg"
        return send_file(io.BytesIO(data), mimetype=mimetype)

    return app
