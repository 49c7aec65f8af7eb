"""Click CLI root and global flags for beads-lite (bl)."""

from __future__ import annotations

import json
import sys
from typing import NoReturn

import click

from beadslite import __version__
from beadslite.config import BeadsConfig, find_beads_dir, get_db_path
from beadslite.errors import BeadsLiteError
from beadslite.storage.sqlite_store import SQLiteStorage, open_storage


class BeadsContext:
    """Shared context for all commands."""

    def __init__(self) -> None:
        self.beads_dir: str | None = None
        self.store: SQLiteStorage | None = None
        self.config: BeadsConfig | None = None
        self.db_override: str | None = None
        self.json_output: bool = False
        self.verbose: bool = False
        self.quiet: bool = False

    def ensure_initialized(self) -> None:
        """Ensure the project directory and storage are available."""
        if self.store is not None:
            return
        self.beads_dir = find_beads_dir()
        if self.beads_dir is None:
            click.echo("Error: not initialized: run 'bl init' first", err=True)
            sys.exit(1)
        try:
            self.config = BeadsConfig.load(self.beads_dir)
        except BeadsLiteError as e:
            self.fail(e)
        if self.db_override:
            self.config.db = self.db_override
        if not self.json_output:
            self.json_output = self.config.json_output
        db_path = get_db_path(self.beads_dir, self.config)
        self.debug(f"Using database {db_path}")
        try:
            self.store = open_storage(db_path)
        except BeadsLiteError as e:
            self.fail(e)
        click.get_current_context().call_on_close(self.store.close)

    def debug(self, msg: str) -> None:
        """Print a diagnostic line to stderr when --verbose is set."""
        if self.verbose:
            click.echo(msg, err=True)

    def fail(self, error: BeadsLiteError | str) -> NoReturn:
        """Report an error on stderr and exit 1."""
        click.echo(f"Error: {error}", err=True)
        if self.verbose and isinstance(error, BaseException):
            for note in getattr(error, "__notes__", []):
                click.echo(f"  {note}", err=True)
            if error.__cause__ is not None:
                click.echo(f"  caused by: {error.__cause__!r}", err=True)
        sys.exit(1)

    def output(self, data: dict | list) -> None:
        """Output data as JSON."""
        click.echo(json.dumps(data, indent=2, default=str))


pass_ctx = click.make_pass_decorator(BeadsContext, ensure=True)


@click.group(invoke_without_command=True)
@click.option("--db", envvar="BL_DB", help="Path to database file")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.version_option(__version__, prog_name="bl")
@click.pass_context
def cli(ctx: click.Context, db: str | None, json_output: bool, verbose: bool,
        quiet: bool) -> None:
    """bl - lightweight issue tracker with dependency-aware ready work"""
    bctx = ctx.ensure_object(BeadsContext)
    bctx.verbose = verbose
    bctx.quiet = quiet
    if json_output:
        bctx.json_output = True
    if db:
        bctx.db_override = db

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# --- Register all commands ---

from beadslite.commands.init_cmd import init_cmd
from beadslite.commands.create import create
from beadslite.commands.list_cmd import list_cmd
from beadslite.commands.show import show
from beadslite.commands.update import update
from beadslite.commands.close import close
from beadslite.commands.delete import delete
from beadslite.commands.ready import ready
from beadslite.commands.blocked import blocked
from beadslite.commands.dep import dep
from beadslite.commands.exchange import export_cmd, import_cmd

cli.add_command(init_cmd, "init")
cli.add_command(create, "create")
cli.add_command(create, "new")  # Alias
cli.add_command(list_cmd, "list")
cli.add_command(show, "show")
cli.add_command(update, "update")
cli.add_command(close, "close")
cli.add_command(delete, "delete")
cli.add_command(ready, "ready")
cli.add_command(blocked, "blocked")
cli.add_command(dep, "dep")
cli.add_command(export_cmd, "export")
cli.add_command(import_cmd, "import")


def main() -> None:
    cli()
