"""Ledger viewing commands."""

import click
from smallbooks.domain.account import AccountService
from smallbooks.domain.entities import TransactionStatus
from smallbooks.domain.errors import InvalidDate
from smallbooks.domain.ledger import LedgerService, is_balanced
from smallbooks.utils.date_parser import parse_date


@click.command("transactions")
@click.option("--start-date", help="Start date (YYYY-MM-DD)")
@click.option("--end-date", help="End date (YYYY-MM-DD)")
@click.option(
    "--status",
    type=click.Choice([s.value for s in TransactionStatus], case_sensitive=False),
    help="Only show transactions with this status",
)
@click.option("--search", help="Text to look for in description or reference")
@click.pass_context
def view_transactions(ctx, start_date: str, end_date: str, status: str, search: str):
    """View ledger transactions with their debit and credit lines."""
    db = ctx.obj["db"]
    service = LedgerService(db)
    account_service = AccountService(db)

    # Parse dates
    start = None
    if start_date:
        try:
            start = parse_date(start_date)
        except InvalidDate as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    end = None
    if end_date:
        try:
            end = parse_date(end_date)
        except InvalidDate as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    transactions = service.list_transactions(
        user_id=ctx.obj["user_id"],
        start_date=start,
        end_date=end,
        status=TransactionStatus(status.lower()) if status else None,
        search=search,
    )

    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {acc.id: acc for acc in account_service.list_accounts()}

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("=" * 90)
    for txn in transactions:
        flag = "" if is_balanced(txn) else "  UNBALANCED"
        click.echo(
            f"#{txn.id} {txn.date} {txn.description} "
            f"[{txn.type.value}, {txn.status.value}]{flag}"
        )
        if txn.reference:
            click.echo(f"  Reference: {txn.reference}")
        for line in txn.lines:
            account = accounts.get(line.account_id)
            label = f"{account.code} {account.name}" if account else f"Account {line.account_id}"
            debit = f"{line.debit:,.2f}" if line.debit else ""
            credit = f"{line.credit:,.2f}" if line.credit else ""
            click.echo(f"    {label:<40} {debit:>14} {credit:>14}")
        click.echo("-" * 90)


def register_commands(cli):
    """Register transactions command with main CLI."""
    cli.add_command(view_transactions)
