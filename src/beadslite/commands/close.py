"""bl close - close an issue."""

from __future__ import annotations

import click

from beadslite.cli import BeadsContext, pass_ctx
from beadslite.errors import BeadsLiteError, InvalidResolution
from beadslite.models import Resolution


@click.command("close")
@click.argument("issue_id")
@click.option("--resolution", "-r", default=Resolution.DONE, show_default=True,
              help="Resolution (done, wontfix, duplicate)")
@pass_ctx
def close(ctx: BeadsContext, issue_id: str, resolution: str) -> None:
    """Close an issue."""
    if not resolution or not Resolution.is_valid(resolution):
        ctx.fail(InvalidResolution(
            f"invalid resolution: {resolution!r} (must be done, wontfix, or duplicate)"))

    ctx.ensure_initialized()
    assert ctx.store is not None

    try:
        # Verify issue exists first
        issue = ctx.store.get_issue(issue_id)
        changed = ctx.store.close_issue(issue_id, resolution)
    except BeadsLiteError as e:
        ctx.fail(e)

    if ctx.json_output:
        ctx.output({"closed": issue_id, "changed": bool(changed)})
    elif not changed:
        click.echo(f"Already closed: {issue_id}")
    else:
        click.echo(f"Closed {issue_id}: {issue.title}")
