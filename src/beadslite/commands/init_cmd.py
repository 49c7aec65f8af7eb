"""bl init - initialize a new .beads-lite/ directory."""

from __future__ import annotations

import os

import click

from beadslite.cli import BeadsContext, pass_ctx
from beadslite.config import BEADS_DIR, BeadsConfig, get_db_path
from beadslite.errors import BeadsLiteError
from beadslite.id_gen import DEFAULT_PREFIX
from beadslite.storage import open_storage


@click.command("init")
@click.option("--prefix", default=DEFAULT_PREFIX, show_default=True, help="Issue ID prefix")
@pass_ctx
def init_cmd(ctx: BeadsContext, prefix: str) -> None:
    """Initialize beads-lite in the current directory."""
    beads_dir = os.path.join(os.getcwd(), BEADS_DIR)

    if os.path.exists(beads_dir):
        click.echo(f"beads-lite already initialized at {beads_dir}")
        return

    os.makedirs(beads_dir, exist_ok=True)

    config = BeadsConfig(issue_prefix=prefix)
    config.save(beads_dir)

    gitignore_path = os.path.join(beads_dir, ".gitignore")
    with open(gitignore_path, "w") as f:
        f.write("# Local database files (share issues via 'bl export')\n")
        f.write("*.db\n")
        f.write("*.db-wal\n")
        f.write("*.db-shm\n")

    db_path = get_db_path(beads_dir, config)
    try:
        open_storage(db_path).close()
    except BeadsLiteError as e:
        ctx.fail(f"failed to initialize database: {e}")

    click.echo(f"Initialized beads-lite in {beads_dir}")
    if not ctx.quiet:
        click.echo(f"  Issue prefix: {prefix}")
        click.echo(f"  Database: {config.db}")
