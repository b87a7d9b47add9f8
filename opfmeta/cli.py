"""Command-line interface for opfmeta utilities."""
from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from .errors import OpfParseError
from .extractor import OpfMetadataExtractor
from .importer import import_opf_tree
from .models import DEFAULT_DB_URL

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

DB_URL_ENV = "OPFMETA_DB_URL"


@click.group(invoke_without_command=True)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx, verbose: bool):
    """opfmeta utilities.
    If invoked without a sub-command it starts the web server (same as `run`)."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


def _load(opf: Path) -> OpfMetadataExtractor:
    try:
        return OpfMetadataExtractor.from_path(opf)
    except OpfParseError as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command("show", help="Print the metadata of an OPF document.")
@click.argument("opf", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Emit JSON instead of text.")
def show(opf: Path, as_json: bool):
    data = _load(opf).as_dict()
    if as_json:
        click.echo(json.dumps(data, ensure_ascii=False, indent=2))
        return
    for key in ("title", "author", "language", "publisher", "publication_date", "description", "cover_href"):
        if data[key] is not None:
            click.echo(f"{key.replace('_', ' ').capitalize()}: {data[key]}")
    if data["isbns"]:
        click.echo(f"ISBN: {', '.join(data['isbns'])}")
    if data["subjects"]:
        click.echo(f"Subjects: {'; '.join(data['subjects'])}")


@cli.command("cover", help="Write the cover image of an OPF document to a file.")
@click.argument("opf", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
def cover(opf: Path, output: Path):
    meta = _load(opf)
    try:
        data = meta.cover_image_data()
    except OpfParseError as exc:
        raise click.ClickException(str(exc)) from exc
    if data is None:
        raise click.ClickException(f"No cover image for '{opf}'.")
    output.write_bytes(data)
    click.echo(f"Wrote {len(data)} bytes to '{output}'.")


@cli.command("index", help="Catalog every OPF document under a directory.")
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--db-url", default=DEFAULT_DB_URL, envvar=DB_URL_ENV, help="SQLAlchemy DB URL.")
@click.option("--chunk-size", default=100, type=click.IntRange(min=1), help="Flush to the database every N books.")
def index(root: Path, db_url: str, chunk_size: int):
    """Parse OPF files below ROOT and populate database."""
    click.echo(f"Importing '{root}' into {db_url}…")
    total = import_opf_tree(root, db_url=db_url, chunk_size=chunk_size)
    click.echo(f"Imported {total} books.")


@cli.command("run", help="Run the web server.")
@click.option("--db-url", default=DEFAULT_DB_URL, envvar=DB_URL_ENV, help="SQLAlchemy DB URL.")
@click.option("--host", default="127.0.0.1")
@click.option("--port", default=5000, type=int)
@click.option("--debug/--no-debug", default=False)
def run(db_url: str, host: str, port: int, debug: bool):
    """Run the opfmeta web application."""
    from .web import create_app

    app = create_app(db_url)
    click.echo(f"* Serving on http://{host}:{port} (debug={debug})")
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":  # pragma: no cover
    cli()
