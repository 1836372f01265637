"""dirfile-db CLI — inspect and edit a dirfile-db database from the shell.

Commands:
    dirfile-db init [--root-dir DIR]          write dirfile.toml and create the database
    dirfile-db info                           show id, version and collections
    dirfile-db collections                    list collection names
    dirfile-db new-collection NAME            create a collection
    dirfile-db drop-collection NAME           delete a collection and its documents
    dirfile-db insert COLLECTION JSON         create a document, print its id
    dirfile-db find COLLECTION [QUERY]        print the first matching document
    dirfile-db find-all COLLECTION [QUERY]    print every matching document
    dirfile-db update COLLECTION JSON         merge fields into a document (JSON needs _id)
    dirfile-db delete COLLECTION QUERY        delete the first match (--all for every match)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import click

from dirfile_db.config import DirfileConfig, init_config, load_config
from dirfile_db.db import DirfileDB
from dirfile_db.errors import DirfileDBError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_cfg() -> DirfileConfig:
    try:
        return load_config()
    except Exception as exc:
        raise click.ClickException(str(exc)) from exc


def _open_db(cfg: DirfileConfig) -> DirfileDB:
    logging.basicConfig(
        level=getattr(logging, cfg.logging.level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    try:
        return DirfileDB(config=cfg)
    except DirfileDBError as exc:
        raise click.ClickException(str(exc)) from exc


def _parse_json(text: str | None, what: str) -> dict[str, Any] | None:
    if text is None:
        return None
    try:
        value = json.loads(text)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"not valid JSON: {exc}", param_hint=what) from exc
    if not isinstance(value, dict):
        raise click.BadParameter("must be a JSON object", param_hint=what)
    return value


def _echo_json(value: Any) -> None:
    click.echo(json.dumps(value, indent=2, ensure_ascii=False))


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="dirfile-db")
def cli() -> None:
    """dirfile-db — JSON documents in plain directories."""


@cli.command()
@click.option("--dir", "root", default=".", show_default=True, help="Project root")
@click.option("--root-dir", default=None, help="Database directory, relative to the project root")
def init(root: str, root_dir: str | None) -> None:
    """Create dirfile.toml and the database directory."""
    root_path = Path(root).resolve()
    try:
        config_path = init_config(root_path, root_dir=root_dir)
        click.echo(f"Created {config_path}")
    except FileExistsError:
        click.echo("dirfile.toml already exists — skipping init")

    cfg = load_config(root_path)
    db = _open_db(cfg)
    click.echo(f"Database : {db.get_root_dir()}")


@cli.command()
def info() -> None:
    """Show database id, version and collections."""
    from rich.console import Console
    from rich.table import Table

    db = _open_db(_load_cfg())
    meta = db.get_metadata()
    console = Console()

    table = Table(title=f"dirfile-db — {db.get_root_dir()}", show_header=True, header_style="bold")
    table.add_column("Field", style="dim", no_wrap=True)
    table.add_column("Value")
    table.add_row("Id", meta.id)
    table.add_row("Signature", meta.db_signature)
    table.add_row("Version", meta.version)
    table.add_row("", "")
    for name in db.list_collections():
        path = db.get_collection(name)
        count = len(list(path.glob("*.json"))) if path is not None else 0
        table.add_row(f"[{name}]", f"{path} ({count} documents)")
    console.print(table)


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------


@cli.command()
def collections() -> None:
    """List collection names."""
    db = _open_db(_load_cfg())
    for name in db.list_collections():
        click.echo(name)


@cli.command("new-collection")
@click.argument("name")
def new_collection(name: str) -> None:
    """Create a collection."""
    db = _open_db(_load_cfg())
    try:
        path = db.new_collection(name)
    except DirfileDBError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Created {path}")


@cli.command("drop-collection")
@click.argument("name")
@click.confirmation_option(prompt="Delete the collection and all of its documents?")
def drop_collection(name: str) -> None:
    """Delete a collection and every document in it."""
    db = _open_db(_load_cfg())
    try:
        db.delete_collection(name)
    except DirfileDBError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Deleted [{name}]")


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("collection")
@click.argument("data")
def insert(collection: str, data: str) -> None:
    """Create a document from a JSON object and print its id."""
    document = _parse_json(data, "DATA")
    db = _open_db(_load_cfg())
    try:
        doc_id = db.create(collection, document or {})
    except DirfileDBError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(doc_id)


@cli.command()
@click.argument("collection")
@click.argument("query", required=False)
def find(collection: str, query: str | None) -> None:
    """Print the first document matching QUERY (a JSON object)."""
    criteria = _parse_json(query, "QUERY")
    db = _open_db(_load_cfg())
    try:
        document = db.find(collection, criteria)
    except DirfileDBError as exc:
        raise click.ClickException(str(exc)) from exc
    if document is None:
        raise click.ClickException("No matching document")
    _echo_json(document)


@cli.command("find-all")
@click.argument("collection")
@click.argument("query", required=False)
def find_all(collection: str, query: str | None) -> None:
    """Print every document matching QUERY as a JSON array."""
    criteria = _parse_json(query, "QUERY")
    db = _open_db(_load_cfg())
    try:
        documents = db.find_all(collection, criteria)
    except DirfileDBError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json(documents)


@cli.command()
@click.argument("collection")
@click.argument("data")
def update(collection: str, data: str) -> None:
    """Merge the fields of DATA into the document named by its _id."""
    changes = _parse_json(data, "DATA") or {}
    db = _open_db(_load_cfg())
    try:
        document = db.update(collection, changes)
    except DirfileDBError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json(document)


@cli.command()
@click.argument("collection")
@click.argument("query")
@click.option("--all", "delete_all", is_flag=True, help="Delete every match, not just the first")
def delete(collection: str, query: str, delete_all: bool) -> None:
    """Delete the first document matching QUERY."""
    criteria = _parse_json(query, "QUERY")
    db = _open_db(_load_cfg())
    try:
        if delete_all:
            db.delete_all(collection, criteria)
        else:
            db.delete(collection, criteria)
    except DirfileDBError as exc:
        raise click.ClickException(str(exc)) from exc


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    cli(standalone_mode=True)


if __name__ == "__main__":
    main()
