"""
Opinion Index CLI - inspect and maintain the relation index
"""

from __future__ import annotations

import logging
from datetime import datetime

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .backends import build_backend
from .errors import OpinionIndexError
from .index import RelationIndex, count_entries, entries
from .models import EntityRef
from .purger import RelationPurger
from .registry import OpinionRegistry
from .settings import settings
from .store import Store

console = Console()


def _configure_logging() -> None:
    level = (settings.log_level or "INFO").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


class EntityParam(click.ParamType):
    name = "Type:id"

    def convert(self, value, param, ctx):
        if isinstance(value, EntityRef):
            return value
        try:
            return EntityRef.parse(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


ENTITY = EntityParam()


def _index(ctx: click.Context, kind: str, obj: EntityRef, target: EntityRef) -> RelationIndex:
    return RelationIndex(ctx.obj["store"], obj, target, kind)


@click.group()
@click.pass_context
def cli(ctx: click.Context):
    """Opinion Index - mirrored opinion relations"""
    ctx.ensure_object(dict)
    if "store" not in ctx.obj:
        _configure_logging()
        ctx.obj["store"] = Store(build_backend(settings))


@cli.command()
def version():
    """Print the package version"""
    from opinion_index import __version__

    click.echo(__version__)


@cli.command()
@click.argument("kind")
@click.argument("obj", metavar="OBJECT", type=ENTITY)
@click.argument("target", type=ENTITY)
@click.option("--at", "at", default=None, help="ISO-8601 timestamp (default: now, UTC)")
@click.pass_context
def persist(ctx, kind, obj, target, at):
    """Record that OBJECT expressed KIND on TARGET"""
    from .service import utc_now

    try:
        when = datetime.fromisoformat(at) if at else utc_now()
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--at")
    _run(lambda: _index(ctx, kind, obj, target).persist(when))
    console.print(f"[green]✓ {escape(f'{obj} {kind} {target}')} at {when.isoformat()}[/green]")


@cli.command()
@click.argument("kind")
@click.argument("obj", metavar="OBJECT", type=ENTITY)
@click.argument("target", type=ENTITY)
@click.pass_context
def remove(ctx, kind, obj, target):
    """Remove the opinion of OBJECT on TARGET"""
    _run(lambda: _index(ctx, kind, obj, target).remove())
    console.print(f"[green]✓ Removed {escape(f'{obj} {kind} {target}')}[/green]")


@cli.command()
@click.argument("kind")
@click.argument("obj", metavar="OBJECT", type=ENTITY)
@click.argument("target", type=ENTITY)
@click.pass_context
def exists(ctx, kind, obj, target):
    """Exit 0 when both mirror entries exist, 1 otherwise"""
    found = _run(lambda: _index(ctx, kind, obj, target).exists())
    console.print("[green]yes[/green]" if found else "[yellow]no[/yellow]")
    ctx.exit(0 if found else 1)


@cli.command()
@click.argument("entity", type=ENTITY)
@click.argument("kind")
@click.option("--counterpart-type", default=None, help="Only keys for this counterpart type")
@click.pass_context
def show(ctx, entity, kind, counterpart_type):
    """Show the raw index entries of KIND anchored on ENTITY"""
    found = _run(lambda: entries(ctx.obj["store"], entity, kind, counterpart_type))
    if not any(found.values()):
        console.print("[yellow]No entries found[/yellow]")
        return

    table = Table(title=escape(f"{kind} entries for {entity}"))
    table.add_column("Key", style="cyan")
    table.add_column("Counterpart", style="blue")
    table.add_column("Since", style="green")
    for key, fields in found.items():
        for counterpart_id, stamp in sorted(fields.items()):
            table.add_row(escape(key), escape(counterpart_id), escape(stamp))
    console.print(table)


@cli.command()
@click.argument("entity", type=ENTITY)
@click.argument("kind")
@click.pass_context
def count(ctx, entity, kind):
    """Count index entries of KIND anchored on ENTITY"""
    click.echo(_run(lambda: count_entries(ctx.obj["store"], entity, kind)))


@cli.command()
@click.argument("entity", type=ENTITY)
@click.option("--kind", "kinds", multiple=True, required=True, help="Opinion kind (repeatable)")
@click.pass_context
def purge(ctx, entity, kinds):
    """Remove every opinion involving ENTITY"""
    registry = OpinionRegistry({entity.type_tag: kinds})
    report = _run(lambda: RelationPurger(ctx.obj["store"], registry).purge(entity))
    console.print(
        f"[green]✓ Removed {len(report.keys_removed)} key(s), "
        f"{report.mirror_fields_removed} mirror field(s)[/green]"
    )
    for key, error in report.failures.items():
        console.print(f"[red]{escape(f'{key}: {error}')}[/red]")
    if not report.ok:
        ctx.exit(1)


def _run(fn):
    try:
        return fn()
    except OpinionIndexError as e:
        raise click.ClickException(e.message) from e


def app() -> None:
    cli(obj={})


if __name__ == "__main__":
    app()
