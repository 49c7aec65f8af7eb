"""bl show - display issue details."""

from __future__ import annotations

import dataclasses

import click

from beadslite.cli import BeadsContext, pass_ctx
from beadslite.errors import BeadsLiteError
from beadslite.utils import format_priority

_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


@click.command("show")
@click.argument("issue_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@pass_ctx
def show(ctx: BeadsContext, issue_id: str, as_json: bool) -> None:
    """Show detailed view of an issue."""
    ctx.ensure_initialized()
    assert ctx.store is not None

    try:
        issue = ctx.store.get_issue(issue_id)
        deps = ctx.store.get_dependencies(issue_id)
        dependents = ctx.store.get_dependents(issue_id)
    except BeadsLiteError as e:
        ctx.fail(e)

    if as_json or ctx.json_output:
        ctx.output(dataclasses.replace(issue, dependencies=deps).to_dict())
        return

    click.echo(f"ID:       {issue.id}")
    click.echo(f"Title:    {issue.title}")
    click.echo(f"Status:   {issue.status}")
    click.echo(f"Priority: {format_priority(issue.priority)}")
    click.echo(f"Type:     {issue.issue_type}")
    if issue.description:
        click.echo(f"Description: {issue.description}")
    click.echo(f"Created:  {issue.created_at.strftime(_TIME_FORMAT)}")
    click.echo(f"Updated:  {issue.updated_at.strftime(_TIME_FORMAT)}")
    if issue.closed_at:
        click.echo(f"Closed:   {issue.closed_at.strftime(_TIME_FORMAT)}")
    if issue.resolution:
        click.echo(f"Resolution: {issue.resolution}")

    if deps:
        click.echo("\nDependencies:")
        for dep in deps:
            click.echo(f"  {dep.type} {dep.depends_on_id}")

    if dependents:
        click.echo("\nDependents:")
        for dep in dependents:
            click.echo(f"  {dep.type} {dep.issue_id}")
