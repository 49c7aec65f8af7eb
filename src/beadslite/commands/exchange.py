"""bl export / bl import - JSONL exchange."""

from __future__ import annotations

import sys

import click

from beadslite.cli import BeadsContext, pass_ctx
from beadslite.errors import BeadsLiteError
from beadslite.export import export_jsonl, export_to_file
from beadslite.importer import import_from_file


@click.command("export")
@click.argument("file", required=False)
@pass_ctx
def export_cmd(ctx: BeadsContext, file: str | None) -> None:
    """Export all issues as JSONL to FILE (or stdout)."""
    ctx.ensure_initialized()
    assert ctx.store is not None

    try:
        if file:
            count = export_to_file(ctx.store, file)
        else:
            count = export_jsonl(ctx.store, sys.stdout)
    except (BeadsLiteError, OSError) as e:
        ctx.fail(f"export failed: {e}")

    ctx.debug(f"Exported {count} issues")
    if file and not ctx.quiet:
        click.echo(f"Exported to {file}")


@click.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@pass_ctx
def import_cmd(ctx: BeadsContext, file: str) -> None:
    """Import issues from a JSONL FILE (create or update)."""
    ctx.ensure_initialized()
    assert ctx.store is not None

    ctx.debug(f"Importing {file}")
    try:
        result = import_from_file(ctx.store, file)
    except (BeadsLiteError, OSError) as e:
        ctx.fail(f"import failed: {e}")

    if ctx.json_output:
        ctx.output({"created": result.created, "updated": result.updated})
    else:
        click.echo(f"Imported: {result.created} created, {result.updated} updated")
