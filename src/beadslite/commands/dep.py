"""bl dep - manage dependencies."""

from __future__ import annotations

import click

from beadslite.cli import BeadsContext, pass_ctx
from beadslite.errors import BeadsLiteError, NotFound
from beadslite.models import DepType
from beadslite.utils import truncate

_DEP_TYPES = click.Choice([DepType.BLOCKS, DepType.PARENT_CHILD, DepType.RELATED])


@click.group("dep")
def dep() -> None:
    """Manage issue dependencies."""


@dep.command("add")
@click.argument("issue_id")
@click.argument("depends_on_id")
@click.option("--type", "dep_type", default=DepType.BLOCKS, type=_DEP_TYPES,
              show_default=True, help="Dependency type")
@pass_ctx
def dep_add(ctx: BeadsContext, issue_id: str, depends_on_id: str,
            dep_type: str) -> None:
    """Add a dependency: ISSUE_ID depends on DEPENDS_ON_ID."""
    ctx.ensure_initialized()
    assert ctx.store is not None

    try:
        ctx.store.get_issue(issue_id)
        ctx.store.get_issue(depends_on_id)
        ctx.store.add_dependency(issue_id, depends_on_id, dep_type)
    except BeadsLiteError as e:
        ctx.fail(e)

    if not ctx.quiet:
        click.echo(f"Added dependency: {issue_id} depends on {depends_on_id} ({dep_type})")


@dep.command("remove")
@click.argument("issue_id")
@click.argument("depends_on_id")
@click.option("--type", "dep_type", default=DepType.BLOCKS, type=_DEP_TYPES,
              show_default=True, help="Dependency type")
@pass_ctx
def dep_remove(ctx: BeadsContext, issue_id: str, depends_on_id: str,
               dep_type: str) -> None:
    """Remove a dependency."""
    ctx.ensure_initialized()
    assert ctx.store is not None

    try:
        removed = ctx.store.remove_dependency(issue_id, depends_on_id, dep_type)
    except BeadsLiteError as e:
        ctx.fail(e)

    if ctx.quiet:
        return
    if removed:
        click.echo(f"Removed dependency: {issue_id} → {depends_on_id} ({dep_type})")
    else:
        click.echo(f"No such dependency: {issue_id} → {depends_on_id} ({dep_type})")


@dep.command("list")
@click.argument("issue_id")
@pass_ctx
def dep_list(ctx: BeadsContext, issue_id: str) -> None:
    """List dependencies for an issue."""
    ctx.ensure_initialized()
    assert ctx.store is not None

    try:
        ctx.store.get_issue(issue_id)
        deps = ctx.store.get_dependencies(issue_id)
        dependents = ctx.store.get_dependents(issue_id)
    except BeadsLiteError as e:
        ctx.fail(e)

    if ctx.json_output:
        ctx.output({
            "dependencies": [d.to_dict() for d in deps],
            "dependents": [d.to_dict() for d in dependents],
        })
        return

    if deps:
        click.echo(f"Dependencies of {issue_id}:")
        for d in deps:
            try:
                target = ctx.store.get_issue(d.depends_on_id)
                status, title = target.status, target.title
            except NotFound:
                status, title = "?", "(unknown)"
            click.echo(f"  → {d.depends_on_id} [{d.type}] ({status}) {truncate(title)}")
    else:
        click.echo(f"No dependencies for {issue_id}")

    if dependents:
        click.echo("\nDepended on by:")
        for d in dependents:
            click.echo(f"  ← {d.issue_id} [{d.type}]")
