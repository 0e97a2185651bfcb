"""CSV import command."""

from pathlib import Path
from typing import Any, Optional

import click
from smallbooks.cli.account_resolution import resolve_account_or_exit
from smallbooks.cli.error_handling import handle_domain_error
from smallbooks.domain.account import AccountService
from smallbooks.domain.csv_import import CSVImportService
from smallbooks.domain.csv_ingest import DEFAULT_MAX_FILE_SIZE
from smallbooks.domain.errors import DomainError, NotFoundError
from smallbooks.domain.import_commit import round_to_cents

SKIP = "skip"


def _prompt_account(
    account_service: AccountService, row: dict[str, Any], default: Optional[str]
) -> Optional[int]:
    """Ask for the account of one row; returns None when the row is skipped."""
    while True:
        answer = click.prompt(
            f"  Account for line {row['line_number']} (code, ID or '{SKIP}')",
            default=default or SKIP,
        ).strip()
        if answer.lower() == SKIP:
            return None
        try:
            return account_service.resolve_account(answer).id
        except NotFoundError as e:
            click.echo(f"  {e}", err=True)


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--bank-account", required=True, help="Bank account code or ID the statement belongs to")
@click.option("--yes", "-y", "accept_all", is_flag=True, help="Accept every suggestion without prompting")
@click.option("--dry-run", is_flag=True, help="Show suggestions without posting anything")
@click.option("--dayfirst", is_flag=True, help="Read ambiguous dates such as 03/04/2024 as day first")
@click.option(
    "--max-size",
    type=int,
    default=DEFAULT_MAX_FILE_SIZE,
    show_default=True,
    envvar="SMALLBOOKS_MAX_UPLOAD_BYTES",
    help="Largest accepted file, in bytes",
)
@click.pass_context
def import_csv(
    ctx,
    csv_file: str,
    bank_account: str,
    accept_all: bool,
    dry_run: bool,
    dayfirst: bool,
    max_size: int,
):
    """Import a bank statement CSV file.

    Every row gets a suggested account. Unless --yes is given, you are
    asked to confirm or change each suggestion; answer 'skip' to leave a
    row out. Rows with a zero amount are skipped. Confirmed rows are posted
    together: if one fails, none are.

    Examples:
        smallbooks import statement.csv --bank-account 1000
        smallbooks import statement.csv --bank-account 1000 --yes
    """
    db = ctx.obj["db"]
    user_id = ctx.obj["user_id"]
    account_service = AccountService(db)
    service = CSVImportService(db, max_file_size=max_size)

    bank = resolve_account_or_exit(ctx, account_service, bank_account)
    path = Path(csv_file)

    try:
        result = service.upload(
            path.read_bytes(), path.name, bank.id, user_id, dayfirst=dayfirst
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    accounts = {acc.id: acc for acc in account_service.list_accounts()}

    click.echo(f"\nParsed {result['summary']['total']} transaction(s) from {path.name}:")
    click.echo("-" * 110)
    click.echo(
        f"{'Line':<6} {'Date':<12} {'Amount':>12}  {'Description':<30} {'Suggestion':<30} {'Conf':>5}"
    )
    click.echo("-" * 110)
    for row in result["transactions"]:
        suggested = accounts.get(row["suggested_account_id"])
        label = f"{suggested.code} {suggested.name}" if suggested else row["suggested_account_name"]
        click.echo(
            f"{row['line_number']:<6} {row['date']:<12} {row['amount']:>12,.2f}  "
            f"{row['description'][:30]:<30} {label[:30]:<30} {row['confidence']:>5.2f}"
        )
        click.echo(f"{'':<6} {row['reason']}")

    if result["errors"]:
        click.echo(f"\nErrors: {len(result['errors'])}")
        for error in result["errors"]:
            click.echo(f"  Line {error['line']}: {error['error']}", err=True)

    if dry_run:
        click.echo(f"\nDry run: nothing posted (batch {result['batch_id']}).")
        return

    confirmed = []
    for row in result["transactions"]:
        if round_to_cents(row["amount"]) == 0:
            click.echo(f"Line {row['line_number']}: zero amount, skipped")
            account_id = None
        elif accept_all:
            account_id = row["suggested_account_id"]
        else:
            suggested = accounts.get(row["suggested_account_id"])
            click.echo(f"\nLine {row['line_number']}: {row['date']} {row['amount']:,.2f} {row['description']}")
            account_id = _prompt_account(account_service, row, suggested.code if suggested else None)
        confirmed.append(
            {
                "date": row["date"],
                "description": row["description"],
                "amount": row["amount"],
                "reference": row["reference"],
                "account_id": account_id,
            }
        )

    try:
        outcome = service.import_transactions(
            bank_account_id=bank.id,
            user_id=user_id,
            transactions=confirmed,
            batch_id=result["batch_id"],
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo("\nImport complete:")
    click.echo(f"  Posted: {outcome['count']} transactions")
    click.echo(f"  Skipped: {len(confirmed) - outcome['count']} transactions")
    click.echo(f"  Batch: {result['batch_id']}")


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_csv)
