"""Streaming reader for OPF package documents (``metadata.opf``, ``content.opf``).

The document is walked once with ``ElementTree.iterparse``.  Only the parts
that carry book metadata are looked at:

* ``<package unique-identifier="...">``
* ``<metadata>`` children: Dublin Core elements and ``<meta name content>``
* ``<guide>`` children: ``<reference type title href>``

Anything else inside ``<metadata>`` is skipped together with its subtree so
stray markup cannot leak text into neighbouring fields.  Elements are cleared
as soon as they have been read, so only the open path of the tree is held.

Dublin Core elements are recognised by namespace, not by the literal ``dc:``
prefix; a document using ``dc:`` without declaring it is malformed XML and
raises :class:`OpfXmlError` (unbound prefix).

Example:
>>> doc = OpfParser().parse(Path("Some Author/Some Book (12)/metadata.opf"))
>>> doc.first_value("title")
'Some Book'
"""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterator, Optional, Tuple
from xml.parsers import expat

from .document import GuideReference, Identifier, OpfDocument
from .errors import OpfEncodingError, OpfIOError, OpfXmlError

__all__ = ["OpfParser", "parse_opf"]

logger = logging.getLogger(__name__)

DC_NAMESPACES = frozenset(
    {
        "http://purl.org/dc/elements/1.1/",
        "http://purl.org/dc/elements/1.0/",
    }
)
OPF_NAMESPACE = "http://www.idpf.org/2007/opf"

# namespaced attribute is checked first and wins when both are present
_SCHEME_ATTRS = (f"{{{OPF_NAMESPACE}}}scheme", "scheme")

_INVALID_TOKEN = expat.errors.codes[expat.errors.XML_ERROR_INVALID_TOKEN]

_Events = Iterator[Tuple[str, ET.Element]]


def _split_tag(tag: str) -> Tuple[Optional[str], str]:
    """``'{uri}local'`` -> ``('uri', 'local')``; unqualified -> ``(None, tag)``."""
    if tag[:1] == "{":
        uri, _, local = tag[1:].partition("}")
        return uri, local
    return None, tag


class OpfParser:
    """Parse an OPF file into an :class:`OpfDocument`."""

    EVENTS = ("start", "end")

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------

    def parse(self, path: Path | str) -> OpfDocument:
        """Read *path* and return the collected metadata.

        Raises :class:`OpfIOError` when the file cannot be read,
        :class:`OpfXmlError` on malformed markup and
        :class:`OpfEncodingError` (an :class:`OpfXmlError`) on bytes that
        are not valid UTF-8.
        """
        path = Path(path)
        doc = OpfDocument(source_path=path)
        try:
            with path.open("rb") as fh:
                self._walk(iter(ET.iterparse(fh, events=self.EVENTS)), doc)
        except ET.ParseError as exc:
            position = getattr(exc, "position", None)
            if _is_undecodable(path, exc):
                raise OpfEncodingError(path, str(exc), position) from exc
            raise OpfXmlError(path, str(exc), position) from exc
        except OSError as exc:
            raise OpfIOError(path, exc.strerror or str(exc)) from exc

        logger.debug(
            "Parsed %s: %d metadata keys, %d identifiers, %d guide references",
            path,
            len(doc.metadata),
            len(doc.identifiers),
            len(doc.guide),
        )
        return doc

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _walk(self, events: _Events, doc: OpfDocument) -> None:
        in_metadata = False
        in_guide = False
        root = None
        for event, elem in events:
            if root is None:
                root = elem
            _, name = _split_tag(elem.tag)
            if event == "end":
                if name == "metadata":
                    in_metadata = False
                elif name == "guide":
                    in_guide = False
                # detach finished elements; only the open path stays alive
                elem.clear()
                root.clear()
                continue

            if name == "package":
                uid = elem.get("unique-identifier")
                if uid is not None:
                    doc.unique_identifier_id = uid
            elif name == "metadata":
                in_metadata = True
            elif name == "guide":
                in_guide = True
            elif in_metadata:
                self._handle_metadata_element(elem, events, doc)
            elif in_guide:
                self._handle_guide_element(elem, doc)

    @staticmethod
    def _skip_subtree(events: _Events, clear: bool = True) -> None:
        """Consume events up to and including the end of the current element.

        With *clear* every finished element is emptied on the way; pass
        ``False`` when the caller still needs the subtree's text.
        """
        depth = 1
        for event, elem in events:
            if event == "start":
                depth += 1
            else:
                depth -= 1
                if clear:
                    elem.clear()
                if depth == 0:
                    return

    # ------------------------------------------------------------------
    # Element handlers
    # ------------------------------------------------------------------

    def _handle_metadata_element(self, elem: ET.Element, events: _Events, doc: OpfDocument) -> None:
        uri, name = _split_tag(elem.tag)
        if uri in DC_NAMESPACES:
            key = name.lower()
            # text is only complete once the closing tag has been read
            self._skip_subtree(events, clear=False)
            text = "".join(elem.itertext()).strip()
            if key == "identifier":
                doc.identifiers.append(Identifier(value=text, scheme=self._scheme_of(elem)))
            else:
                doc.add_value(key, text)
            elem.clear()
        elif name == "meta":
            meta_name = elem.get("name")
            content = elem.get("content")
            if meta_name is not None and content is not None:
                doc.add_value(meta_name.strip(), content.strip())
        else:
            self._skip_subtree(events)

    @staticmethod
    def _handle_guide_element(elem: ET.Element, doc: OpfDocument) -> None:
        _, name = _split_tag(elem.tag)
        if name != "reference":
            return
        doc.guide.append(
            GuideReference(
                type=elem.get("type", ""),
                href=elem.get("href", ""),
                title=elem.get("title"),
            )
        )

    @staticmethod
    def _scheme_of(elem: ET.Element) -> Optional[str]:
        for attr in _SCHEME_ATTRS:
            scheme = elem.get(attr)
            if scheme is not None:
                return scheme
        return None


def _is_undecodable(path: Path, exc: ET.ParseError) -> bool:
    """Tell whether expat's invalid-token error sits on a line that is not UTF-8."""
    if getattr(exc, "code", None) != _INVALID_TOKEN or not getattr(exc, "position", None):
        return False
    line_no = exc.position[0]
    try:
        with path.open("rb") as fh:
            for number, line in enumerate(fh, start=1):
                if number == line_no:
                    line.decode("utf-8")
                    return False
    except UnicodeDecodeError:
        return True
    except OSError:
        return False
    return False


def parse_opf(path: Path | str) -> OpfDocument:
    """Shortcut for ``OpfParser().parse(path)``."""
    return OpfParser().parse(path)
