"""bl create - create a new issue."""

from __future__ import annotations

import click

from beadslite.cli import BeadsContext, pass_ctx
from beadslite.errors import BeadsLiteError, DuplicateID, NotFound, ValidationError
from beadslite.models import DepType, Issue, IssueType, new_issue
from beadslite.storage.interface import Storage

# New ids are random; a handful of retries is plenty
MAX_ID_ATTEMPTS = 5


def add_blockers(store: Storage, issue_id: str, blocker_ids: tuple[str, ...] | list[str]) -> None:
    """Add ``blocks`` edges from issue_id to each blocker, which must exist."""
    for blocker_id in blocker_ids:
        if blocker_id == issue_id:
            raise ValidationError("issue cannot block itself")
        store.get_issue(blocker_id)
        store.add_dependency(issue_id, blocker_id, DepType.BLOCKS)


@click.command("create")
@click.argument("title_words", nargs=-1, required=True)
@click.option("--description", "-d", default="", help="Issue description")
@click.option("--priority", "-p", default=2, type=click.IntRange(0, 4),
              help="Priority (0=critical, 2=medium, 4=backlog)")
@click.option("--type", "issue_type", default=IssueType.TASK,
              type=click.Choice(["task", "bug", "feature", "epic"]),
              help="Issue type")
@click.option("--blocked-by", multiple=True, help="Issue ID that blocks this (repeatable)")
@click.option("--parent", default="", help="Parent issue ID")
@click.option("--silent", is_flag=True, help="Only output the issue ID")
@pass_ctx
def create(ctx: BeadsContext, title_words: tuple[str, ...], description: str,
           priority: int, issue_type: str, blocked_by: tuple[str, ...],
           parent: str, silent: bool) -> None:
    """Create a new issue titled TITLE_WORDS."""
    ctx.ensure_initialized()
    assert ctx.store is not None and ctx.config is not None

    title = " ".join(title_words)

    def create_all(store: Storage) -> Issue:
        for _ in range(MAX_ID_ATTEMPTS):
            issue = new_issue(title, description=description, priority=priority,
                              issue_type=issue_type, prefix=ctx.config.issue_prefix,
                              id_length=ctx.config.id_length)
            try:
                store.create_issue(issue)
                break
            except DuplicateID:
                ctx.debug(f"ID collision on {issue.id}, retrying")
        else:
            raise DuplicateID(issue.id)

        if parent:
            store.get_issue(parent)
            store.add_dependency(issue.id, parent, DepType.PARENT_CHILD)
        add_blockers(store, issue.id, blocked_by)
        return issue

    try:
        issue = ctx.store.with_transaction(create_all)
    except NotFound as e:
        ctx.fail(f"blocker or parent {e.issue_id}: not found")
    except BeadsLiteError as e:
        ctx.fail(f"failed to create issue: {e}")

    if ctx.json_output:
        ctx.output(issue.to_dict())
    elif silent:
        click.echo(issue.id)
    else:
        click.echo(f"Created {issue.id}: {issue.title}")
