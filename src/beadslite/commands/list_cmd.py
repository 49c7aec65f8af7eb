"""bl list - list issues."""

from __future__ import annotations

import sys

import click

from beadslite.cli import BeadsContext, pass_ctx
from beadslite.errors import BeadsLiteError
from beadslite.export import write_issues_jsonl
from beadslite.models import IssueFilter
from beadslite.utils import format_issue_row


@click.command("list")
@click.option("--status", "-s", default=None, help="Filter by status (open, in_progress, closed)")
@click.option("--priority", "-p", type=int, default=None, help="Filter by priority (0-4)")
@click.option("--type", "issue_type", default=None, help="Filter by type (task, bug, feature, epic)")
@click.option("--resolution", default=None, help="Filter by resolution (done, wontfix, duplicate)")
@click.option("--limit", default=0, type=int, help="Max issues to show")
@click.option("--json", "jsonl", is_flag=True, help="Output as JSONL")
@pass_ctx
def list_cmd(ctx: BeadsContext, status: str | None, priority: int | None,
             issue_type: str | None, resolution: str | None, limit: int,
             jsonl: bool) -> None:
    """List issues, most urgent first."""
    f = IssueFilter(status=status, priority=priority, issue_type=issue_type,
                    resolution=resolution, limit=limit)
    # Validate filter values before opening the store
    try:
        f.validate()
    except BeadsLiteError as e:
        ctx.fail(e)

    ctx.ensure_initialized()
    assert ctx.store is not None

    try:
        issues = ctx.store.list_issues(f)
        if jsonl or ctx.json_output:
            write_issues_jsonl(issues, ctx.store.get_all_dependencies(), sys.stdout)
            return
    except BeadsLiteError as e:
        ctx.fail(f"failed to list issues: {e}")

    if not issues:
        click.echo("No issues found")
        return

    for issue in issues:
        click.echo(format_issue_row(issue))

    if not ctx.quiet:
        click.echo(f"\n{len(issues)} issue(s)")
