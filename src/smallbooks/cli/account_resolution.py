"""CLI helpers for account resolution and error handling."""

from __future__ import annotations

import click
from smallbooks.domain.account import AccountService
from smallbooks.domain.entities import Account
from smallbooks.domain.errors import NotFoundError
from smallbooks.cli.error_handling import handle_domain_error


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str | int
) -> Account:
    """Resolve account code or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return account_service.resolve_account(account)
    except NotFoundError as exc:
        handle_domain_error(ctx, exc)
