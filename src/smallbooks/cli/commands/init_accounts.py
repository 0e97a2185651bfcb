"""Initialize the default chart of accounts."""

import click
from smallbooks.domain.account import AccountService, DEFAULT_CHART


@click.command("init-accounts")
@click.pass_context
def init_accounts(ctx):
    """Create the default small-business chart of accounts.

    Accounts whose code already exists are left untouched.
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    click.echo("Creating default chart of accounts...")
    created = service.create_default_chart()

    skipped = len(DEFAULT_CHART) - created
    if skipped == 0:
        click.echo(f"Successfully created {created} accounts.")
    else:
        click.echo(f"Created {created} accounts ({skipped} already existed).")


def register_commands(cli):
    """Register init-accounts command with main CLI."""
    cli.add_command(init_accounts)
