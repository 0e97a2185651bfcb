"""Chart of accounts commands."""

import click
from smallbooks.cli.error_handling import handle_domain_error
from smallbooks.domain.account import AccountService
from smallbooks.domain.entities import AccountType
from smallbooks.domain.errors import DomainError

ACCOUNT_TYPES = [t.value for t in AccountType]


@click.group()
def account_group():
    """Manage the chart of accounts."""
    pass


@account_group.command("create")
@click.argument("code", metavar="CODE")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(ACCOUNT_TYPES, case_sensitive=False),
    required=True,
    help="Account type",
)
@click.option("--inactive", is_flag=True, help="Create the account as inactive")
@click.pass_context
def create_account(ctx, code: str, name: str, account_type: str, inactive: bool):
    """Create a new account.

    The normal balance follows from the type: asset and expense accounts
    are debit-normal, the others credit-normal.

    Examples:
        smallbooks account create 1000 "Checking Account" --type asset
        smallbooks account create 6300 "Meals & Entertainment" --type expense
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    try:
        account_id = service.create_account(
            code=code, name=name, account_type=account_type.lower(), is_active=not inactive
        )
        click.echo(f"Created account {code} '{name}' (ID: {account_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(ACCOUNT_TYPES, case_sensitive=False),
    help="Only show accounts of this type",
)
@click.pass_context
def list_accounts(ctx, account_type: str | None):
    """List accounts by code."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts(
        account_type=AccountType(account_type.lower()) if account_type else None
    )
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 72)
    for acc in accounts:
        status = "" if acc.is_active else " (inactive)"
        click.echo(
            f"ID: {acc.id:3d} | {acc.code:<6s} | {acc.name:30s} | "
            f"{acc.type.value:<9s} | {acc.normal_balance.value}{status}"
        )


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
