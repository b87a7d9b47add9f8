import json
from pathlib import Path

from click.testing import CliRunner

from opfmeta.cli import cli

from .conftest import write_opf


def test_show_text(sample_opf: Path):
    result = CliRunner().invoke(cli, ["show", str(sample_opf)])
    assert result.exit_code == 0, result.output
    assert "Title: Structure and Interpretation" in result.output
    assert "ISBN: 9780134685991" in result.output
    assert "Subjects: Computers; Programming; Lisp" in result.output


def test_show_json(sample_opf: Path):
    result = CliRunner().invoke(cli, ["show", "--json", str(sample_opf)])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["author"] == "Harold Abelson"
    assert data["publication_date"] == "2020-05-01"


def test_show_malformed_reports_error(tmp_path: Path):
    path = write_opf(tmp_path, "<package><metadata></package>")
    result = CliRunner().invoke(cli, ["show", str(path)])
    assert result.exit_code == 1
    assert "XML parsing error" in result.output


def test_cover_writes_file(tmp_path: Path, sample_opf: Path):
    out = tmp_path / "out.jpg"
    result = CliRunner().invoke(cli, ["cover", str(sample_opf), str(out)])
    assert result.exit_code == 0, result.output
    assert out.read_bytes() == b"\xff\xd8COVER"


def test_cover_absent(tmp_path: Path):
    path = write_opf(tmp_path, '<package xmlns="http://www.idpf.org/2007/opf"><metadata/></package>')
    result = CliRunner().invoke(cli, ["cover", str(path), str(tmp_path / "out.jpg")])
    assert result.exit_code == 1
    assert "No cover image" in result.output


def test_index_command(tmp_path: Path, sample_opf: Path):
    db_url = f"sqlite:///{tmp_path / 'cli.db'}"
    result = CliRunner().invoke(cli, ["index", str(sample_opf.parents[1]), "--db-url", db_url])
    assert result.exit_code == 0, result.output
    assert "Imported 1 books." in result.output


def test_index_rejects_zero_chunk_size(tmp_path: Path):
    result = CliRunner().invoke(cli, ["index", str(tmp_path), "--chunk-size", "0"])
    assert result.exit_code == 2
    assert "chunk-size" in result.output
