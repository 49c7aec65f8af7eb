"""bl ready - show issues ready to work on."""

from __future__ import annotations

import sys

import click

from beadslite.cli import BeadsContext, pass_ctx
from beadslite.errors import BeadsLiteError
from beadslite.export import write_issues_jsonl
from beadslite.models import IssueFilter
from beadslite.ready import get_ready_work
from beadslite.utils import format_issue_row


@click.command("ready")
@click.option("--priority", "-p", type=int, default=None, help="Filter by priority (0-4)")
@click.option("--type", "issue_type", default=None, help="Filter by type (task, bug, feature, epic)")
@click.option("--limit", default=0, type=int, help="Max issues")
@click.option("--json", "jsonl", is_flag=True, help="Output as JSONL")
@pass_ctx
def ready(ctx: BeadsContext, priority: int | None, issue_type: str | None,
          limit: int, jsonl: bool) -> None:
    """Show issues that are ready to work on (open, unblocked)."""
    work_filter = IssueFilter(priority=priority, issue_type=issue_type, limit=limit)
    try:
        work_filter.validate()
    except BeadsLiteError as e:
        ctx.fail(e)

    ctx.ensure_initialized()
    assert ctx.store is not None

    try:
        issues = get_ready_work(ctx.store, work_filter)
        if jsonl or ctx.json_output:
            write_issues_jsonl(issues, ctx.store.get_all_dependencies(), sys.stdout)
            return
    except BeadsLiteError as e:
        ctx.fail(f"failed to get ready work: {e}")

    if not issues:
        click.echo("No ready issues.")
        return

    for issue in issues:
        click.echo(format_issue_row(issue))

    if not ctx.quiet:
        click.echo(f"\n{len(issues)} ready issue(s)")
