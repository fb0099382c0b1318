"""CLI entry point using Typer."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, NoReturn, Optional

import click
import typer

from .batch import BatchWriter
from .cache import CoordinateCache
from .config import get_settings
from .contracts import Coordinate, EditUpdate
from .errors import BatchWriteError, RichCellError
from .logging_config import setup_logging
from .sanitizer import sanitize
from .session import EditSession
from .stores.workbook import WorkbookCellStore
from .templates import TemplateLibrary

app = typer.Typer(pretty_exceptions_short=True, no_args_is_help=True)
template_app = typer.Typer(no_args_is_help=True, help="Manage named HTML templates.")
app.add_typer(template_app, name="template")


@dataclass
class CliState:
    workbook: Optional[Path]
    sheet: Optional[str]
    templates_path: Path
    cache_capacity: int


def _state(ctx: typer.Context) -> CliState:
    return ctx.find_root().obj


def _coordinate(reference: str) -> Coordinate:
    try:
        return Coordinate.from_a1(reference)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _open_store(state: CliState) -> WorkbookCellStore:
    if state.workbook is None:
        raise typer.BadParameter("no workbook given; use --workbook or RICHCELL_WORKBOOK")
    return WorkbookCellStore(state.workbook, sheet=state.sheet)


def _session(state: CliState) -> EditSession:
    return EditSession(store=_open_store(state), cache=CoordinateCache(state.cache_capacity))


def _fail(exc: RichCellError) -> NoReturn:
    typer.echo(f"{exc.code}: {exc.message}", err=True)
    raise typer.Exit(1)


@app.callback()
def main(
    ctx: typer.Context,
    workbook: Optional[Path] = typer.Option(None, "--workbook", "-w", help="Workbook (.xlsx) to edit."),
    sheet: Optional[str] = typer.Option(None, "--sheet", help="Worksheet name; defaults to the active sheet."),
    templates: Optional[Path] = typer.Option(None, "--templates", help="Template library JSON file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """Edit sanitized rich content stored in workbook cells."""
    settings = get_settings()
    setup_logging(logging.DEBUG if verbose else settings.log_level_number, json_output=settings.log_json)
    ctx.obj = CliState(
        workbook=workbook or settings.workbook,
        sheet=sheet or settings.sheet,
        templates_path=templates or settings.templates_path,
        cache_capacity=settings.cache_capacity,
    )


@app.command("sanitize")
def sanitize_command() -> None:
    """Sanitize HTML read from stdin and print it."""
    typer.echo(sanitize(sys.stdin.read()), nl=False)


@app.command()
def show(ctx: typer.Context, cell: str = typer.Argument(..., help="Cell reference, e.g. B3.")) -> None:
    """Print the sanitized content of CELL."""
    coordinate = _coordinate(cell)
    try:
        typer.echo(_session(_state(ctx)).load_for_edit(coordinate))
    except RichCellError as exc:
        _fail(exc)


@app.command("set")
def set_command(
    ctx: typer.Context,
    cell: str = typer.Argument(..., help="Cell reference, e.g. B3."),
    value: str = typer.Option(..., "--value", help="New HTML content."),
) -> None:
    """Sanitize VALUE and store it in CELL."""
    coordinate = _coordinate(cell)
    try:
        _session(_state(ctx)).commit(coordinate, value)
    except RichCellError as exc:
        _fail(exc)
    typer.echo(f"updated {coordinate.a1}")


@app.command()
def edit(ctx: typer.Context, cell: str = typer.Argument(..., help="Cell reference, e.g. B3.")) -> None:
    """Open CELL in $EDITOR and store the result."""
    coordinate = _coordinate(cell)
    try:
        changed = _session(_state(ctx)).edit(
            coordinate, lambda current: click.edit(current, extension=".html")
        )
    except RichCellError as exc:
        _fail(exc)
    typer.echo(f"updated {coordinate.a1}" if changed else "no changes")


def _load_updates(path: Path) -> List[EditUpdate]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(f"cannot read {path}: {exc}") from exc
    if not isinstance(payload, list):
        raise typer.BadParameter("batch file must contain a JSON list")
    updates: List[EditUpdate] = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict) or "cell" not in item or "content" not in item:
            raise typer.BadParameter(f"item {index} needs 'cell' and 'content'")
        if not isinstance(item["content"], str):
            raise typer.BadParameter(f"item {index}: 'content' must be a string")
        updates.append(EditUpdate(_coordinate(str(item["cell"])), item["content"]))
    return updates


@app.command()
def apply(ctx: typer.Context, batch_file: Path = typer.Argument(..., help="JSON list of {cell, content}.")) -> None:
    """Apply every update in BATCH_FILE as one batch."""
    state = _state(ctx)
    updates = _load_updates(batch_file)
    try:
        writer = BatchWriter(store=_open_store(state), cache=CoordinateCache(state.cache_capacity))
        result = writer.apply_batch(updates)
    except BatchWriteError as exc:
        typer.echo(f"{exc.code}: {exc.message} (applied {exc.applied_count})", err=True)
        raise typer.Exit(1)
    except RichCellError as exc:
        _fail(exc)
    typer.echo(f"applied {result.applied_count}")


@template_app.command("list")
def template_list(ctx: typer.Context) -> None:
    """List template names."""
    try:
        library = TemplateLibrary(_state(ctx).templates_path)
    except RichCellError as exc:
        _fail(exc)
    for name in library.list_names():
        typer.echo(name)


@template_app.command("save")
def template_save(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Template name."),
    value: str = typer.Option(..., "--value", help="Template HTML."),
) -> None:
    """Store a sanitized template under NAME."""
    try:
        library = TemplateLibrary(_state(ctx).templates_path)
        template = library.save(name, value)
    except RichCellError as exc:
        _fail(exc)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"saved {template.name}")


@template_app.command("delete")
def template_delete(ctx: typer.Context, name: str = typer.Argument(..., help="Template name.")) -> None:
    """Remove the template NAME."""
    try:
        removed = TemplateLibrary(_state(ctx).templates_path).delete(name)
    except RichCellError as exc:
        _fail(exc)
    if not removed:
        typer.echo(f"no template named {name}", err=True)
        raise typer.Exit(1)
    typer.echo(f"deleted {name}")


@template_app.command("apply")
def template_apply(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Template name."),
    cell: str = typer.Argument(..., help="Cell reference, e.g. B3."),
) -> None:
    """Write the template NAME into CELL."""
    state = _state(ctx)
    coordinate = _coordinate(cell)
    try:
        library = TemplateLibrary(state.templates_path)
        _session(state).apply_template(coordinate, library, name)
    except RichCellError as exc:
        _fail(exc)
    typer.echo(f"updated {coordinate.a1}")


def run() -> None:
    """CLI wrapper for console_scripts compatibility."""
    app()


if __name__ == "__main__":
    run()
