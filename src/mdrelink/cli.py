"""CLI entry point for mdrelink."""

from __future__ import annotations

import asyncio
import logging
import shutil
import sys
from pathlib import Path

import click

from mdrelink import __version__
from mdrelink.core.models import Document, Edit, EventReport, RenameEvent, SaveEvent
from mdrelink.core.paths import is_within, join, normalize, relative


@click.group()
@click.version_option(version=__version__, prog_name="mdrelink")
def main() -> None:
    """mdrelink: keep Markdown links valid across renames and heading edits."""
    pass


def _common_options(func):  # type: ignore[no-untyped-def]
    func = click.option(
        "-v",
        "--verbose",
        is_flag=True,
        help="Enable verbose (DEBUG) logging",
    )(func)
    func = click.option(
        "-c",
        "--config",
        "config_path",
        default=None,
        help="Path to config file (default: <root>/.mdrelink.yaml)",
    )(func)
    func = click.option(
        "-r",
        "--root",
        default=".",
        type=click.Path(exists=True, file_okay=False),
        help="Project root (default: current directory)",
    )(func)
    return func


@main.command()
@click.argument("source", type=click.Path(exists=True))
@click.argument("destination", type=click.Path())
@click.option("-n", "--dry-run", is_flag=True, help="Show edits without moving or writing")
@_common_options
def mv(
    source: str,
    destination: str,
    dry_run: bool,
    root: str,
    config_path: str | None,
    verbose: bool,
) -> None:
    """Move a file or directory and rewrite the links that point into it."""
    session, container = _load_session(root, config_path)
    _setup_logging(verbose, container.config.log_level)

    src = Path(source).resolve()
    dst = Path(destination).resolve()
    if dst.exists():
        click.echo(f"Destination already exists: {destination}", err=True)
        sys.exit(1)

    event = RenameEvent(path_before=str(src), path_after=str(dst), directory=src.is_dir())

    if dry_run:
        edits = asyncio.run(_preview_move(session, container, event))
        _print_edits(edits, container.options.root)
        return

    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(src), str(dst))
    click.echo(f"Moved: {source} -> {destination}")
    _report(asyncio.run(session.handle(event)), container.options.root)


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "-b",
    "--before",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="File holding the document's content before the save",
)
@click.option("-n", "--dry-run", is_flag=True, help="Show edits without writing")
@_common_options
def save(
    path: str,
    before: str,
    dry_run: bool,
    root: str,
    config_path: str | None,
    verbose: bool,
) -> None:
    """Propagate heading anchor changes in PATH to the documents linking to it."""
    session, container = _load_session(root, config_path)
    _setup_logging(verbose, container.config.log_level)

    event = SaveEvent(
        path=str(Path(path).resolve()),
        content_before=Path(before).read_text(encoding="utf-8"),
        content_after=Path(path).read_text(encoding="utf-8"),
    )

    if dry_run:
        _print_edits(asyncio.run(session.preview(event)), container.options.root)
        return
    _report(asyncio.run(session.handle(event)), container.options.root)


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@_common_options
def links(path: str, root: str, config_path: str | None, verbose: bool) -> None:
    """List the links found in a Markdown document."""
    _, container = _load_session(root, config_path)
    _setup_logging(verbose, container.config.log_level)

    from mdrelink.core.scanner import scan

    doc_path = normalize(str(Path(path).resolve()))
    document = Document(path=doc_path, content=Path(path).read_text(encoding="utf-8"))
    project_root = container.options.root
    for occurrence in scan(document, container.options.resolve(doc_path)):
        start, _ = occurrence.raw_span
        line = document.content.count("\n", 0, start) + 1
        target = occurrence.resolved_target
        shown = relative(project_root, target) if target else "-"
        anchor = f"#{occurrence.anchor}" if occurrence.anchor is not None else ""
        click.echo(f"{line}:{occurrence.kind.value} {occurrence.target}{anchor} -> {shown}")


def _load_session(root: str, config_path: str | None):  # type: ignore[no-untyped-def]
    from mdrelink.config import load_config
    from mdrelink.container import Container
    from mdrelink.session import Session

    try:
        config = load_config(config_path, root=root)
    except Exception as e:
        click.echo(f"Error loading config: {e}", err=True)
        sys.exit(1)

    container = Container.create_default(config, root)
    return Session(container), container


async def _preview_move(  # type: ignore[no-untyped-def]
    session, container, event: RenameEvent
) -> list[Edit]:
    """Plan a move against a snapshot whose paths are rewritten as if it happened."""
    from mdrelink.core import planner

    documents, _ = await session.snapshot()
    moved = [
        Document(path=_moved_path(doc.path, event), content=doc.content) for doc in documents
    ]
    return planner.plan(event, moved, container.options)


def _moved_path(path: str, event: RenameEvent) -> str:
    if path == event.path_before:
        return event.path_after
    if is_within(path, event.path_before):
        return join(event.path_after, relative(event.path_before, path))
    return path


def _print_edits(edits: list[Edit], project_root: str) -> None:
    if not edits:
        click.echo("No links need updating.")
        return
    for edit in edits:
        start, end = edit.span
        click.echo(f"{relative(project_root, edit.document)}:{start}-{end} -> {edit.replacement}")


def _report(report: EventReport, project_root: str) -> None:
    for result in report.applied:
        click.echo(f"  updated {relative(project_root, result.document)} ({result.edits} edits)")
    for result in report.failed:
        click.echo(f"  FAILED {relative(project_root, result.document)}: {result.reason}", err=True)
    if report.failed:
        sys.exit(1)
    if not report.results:
        click.echo("No links needed updating.")


def _setup_logging(verbose: bool, level_name: str = "INFO") -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )
