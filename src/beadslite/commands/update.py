"""bl update - update an issue."""

from __future__ import annotations

import click

from beadslite.cli import BeadsContext, pass_ctx
from beadslite.commands.create import add_blockers
from beadslite.errors import BeadsLiteError
from beadslite.models import DepType, IssueFilter
from beadslite.storage.interface import Storage


@click.command("update")
@click.argument("issue_id")
@click.option("--title", "-t", default=None, help="New title")
@click.option("--status", "-s", default=None, help="New status (open, in_progress, closed)")
@click.option("--priority", "-p", type=int, default=None, help="New priority (0-4)")
@click.option("--type", "issue_type", default=None, help="New type (task, bug, feature, epic)")
@click.option("--description", "-d", default=None, help="New description")
@click.option("--blocked-by", multiple=True, help="Add blocker (repeatable)")
@click.option("--unblock", multiple=True, help="Remove blocker (repeatable)")
@pass_ctx
def update(ctx: BeadsContext, issue_id: str, title: str | None,
           status: str | None, priority: int | None, issue_type: str | None,
           description: str | None, blocked_by: tuple[str, ...],
           unblock: tuple[str, ...]) -> None:
    """Update an existing issue."""
    # Validate inputs before applying changes
    try:
        IssueFilter(status=status, priority=priority, issue_type=issue_type).validate()
    except BeadsLiteError as e:
        ctx.fail(e)

    ctx.ensure_initialized()
    assert ctx.store is not None

    def apply(store: Storage) -> str:
        issue = store.get_issue(issue_id)
        if title:
            issue.title = title
        if status:
            issue.status = status
        if priority is not None:
            issue.priority = priority
        if issue_type:
            issue.issue_type = issue_type
        if description is not None:
            issue.description = description

        store.update_issue(issue)
        add_blockers(store, issue_id, blocked_by)
        for blocker_id in unblock:
            if not store.remove_dependency(issue_id, blocker_id, DepType.BLOCKS):
                ctx.debug(f"{issue_id} was not blocked by {blocker_id}")
        return issue.title

    try:
        new_title = ctx.store.with_transaction(apply)
    except BeadsLiteError as e:
        ctx.fail(f"failed to update {issue_id}: {e}")

    if ctx.json_output:
        ctx.output(ctx.store.get_issue(issue_id).to_dict())
    elif not ctx.quiet:
        click.echo(f"Updated {issue_id}: {new_title}")
