"""Main CLI entry point."""

import logging

import click
from smallbooks.database.factories import create_sqlite_database

# Import and register all commands at module level
from smallbooks.cli.commands import (
    account,
    init_accounts,
    import_cmd,
    view,
    rules,
)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(verbose: bool) -> None:
    """Send smallbooks log records to stderr, at DEBUG when verbose."""
    logger = logging.getLogger("smallbooks")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    # Rebind to the current stderr on every invocation
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides SMALLBOOKS_DB_PATH environment variable)",
    envvar="SMALLBOOKS_DB_PATH",
)
@click.option(
    "--user",
    "user_id",
    default="default",
    show_default=True,
    envvar="SMALLBOOKS_USER",
    help="User whose ledger and learned rules are used",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, user_id: str, verbose: bool):
    """Smallbooks - small-business bookkeeping.

    Keep a double-entry ledger and import bank statement CSV files with
    automatic account suggestions that learn from your choices.
    """
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["user_id"] = user_id

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
init_accounts.register_commands(cli)
import_cmd.register_commands(cli)
view.register_commands(cli)
rules.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
