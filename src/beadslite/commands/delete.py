"""bl delete - permanently remove an issue."""

from __future__ import annotations

import click

from beadslite.cli import BeadsContext, pass_ctx
from beadslite.errors import BeadsLiteError


@click.command("delete")
@click.argument("issue_id")
@click.option("--confirm", is_flag=True, help="Confirm permanent deletion")
@pass_ctx
def delete(ctx: BeadsContext, issue_id: str, confirm: bool) -> None:
    """Delete an issue and every dependency touching it."""
    if not confirm:
        ctx.fail("delete requires --confirm flag")

    ctx.ensure_initialized()
    assert ctx.store is not None

    try:
        # Get issue first to show what was deleted
        issue = ctx.store.get_issue(issue_id)
        ctx.store.delete_issue(issue_id)
    except BeadsLiteError as e:
        ctx.fail(e)

    click.echo(f"Deleted {issue_id}: {issue.title}")
