"""Pytest configuration for opfmeta tests."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure project root is importable
PROJECT_ROOT = Path(__file__).resolve().parents[2]  # directory holding the opfmeta package
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


SAMPLE_OPF = """<?xml version='1.0' encoding='utf-8'?>
<package xmlns="http://www.idpf.org/2007/opf" unique-identifier="uuid_id" version="2.0">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:opf="http://www.idpf.org/2007/opf">
    <dc:identifier opf:scheme="calibre" id="calibre_id">42</dc:identifier>
    <dc:identifier opf:scheme="uuid" id="uuid_id">0a8f7c6e-1c3b-4d1e-9a44-5b3e7f0c2d11</dc:identifier>
    <dc:title>Structure and Interpretation</dc:title>
    <dc:creator opf:file-as="Abelson, Harold" opf:role="aut">Harold Abelson</dc:creator>
    <dc:creator opf:role="aut">Gerald Jay Sussman</dc:creator>
    <dc:contributor opf:role="bkp">calibre (5.0.0) [https://calibre-ebook.com]</dc:contributor>
    <dc:date>2020-05-01T00:00:00+00:00</dc:date>
    <dc:description>  A classic.  </dc:description>
    <dc:publisher>MIT Press</dc:publisher>
    <dc:identifier opf:scheme="ISBN">978-0-13-468599-1</dc:identifier>
    <dc:language>eng</dc:language>
    <dc:subject>Computers; Programming</dc:subject>
    <dc:subject>Lisp</dc:subject>
    <meta name="calibre:series" content="Classics"/>
    <meta name="calibre:series_index" content="1.0"/>
    <meta name="calibre:rating"/>
  </metadata>
  <guide>
    <reference type="cover" title="Cover" href="cover.jpg"/>
  </guide>
</package>
"""


def write_opf(directory: Path, text: str = SAMPLE_OPF, name: str = "metadata.opf") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture()
def sample_opf(tmp_path: Path) -> Path:
    """A Calibre-style metadata.opf with a cover image next to it."""
    path = write_opf(tmp_path / "Harold Abelson" / "Structure and Interpretation (42)")
    (path.parent / "cover.jpg").write_bytes(b"\xff\xd8COVER")
    return path
