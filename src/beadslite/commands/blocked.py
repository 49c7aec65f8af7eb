"""bl blocked - show blocked issues."""

from __future__ import annotations

import click

from beadslite.cli import BeadsContext, pass_ctx
from beadslite.errors import BeadsLiteError
from beadslite.ready import get_blocked_issues
from beadslite.utils import format_priority, truncate


@click.command("blocked")
@pass_ctx
def blocked(ctx: BeadsContext) -> None:
    """Show issues that are blocked by other issues."""
    ctx.ensure_initialized()
    assert ctx.store is not None

    try:
        blocked_list = get_blocked_issues(ctx.store)
    except BeadsLiteError as e:
        ctx.fail(e)

    if ctx.json_output:
        data = []
        for issue, blocker_ids in blocked_list:
            d = issue.to_dict()
            del d["dependencies"]
            d["blocked_by"] = blocker_ids
            data.append(d)
        ctx.output(data)
        return

    if not blocked_list:
        click.echo("No blocked issues.")
        return

    for issue, blocker_ids in blocked_list:
        pri = format_priority(issue.priority)
        title = truncate(issue.title, 45)
        blockers = ", ".join(blocker_ids) if blocker_ids else "(blocked parent)"
        click.echo(f"  {issue.id:<12} {pri} {title}")
        click.echo(f"    blocked by: {blockers}")

    if not ctx.quiet:
        click.echo(f"\n{len(blocked_list)} blocked issue(s)")
