"""Learned categorization rule commands."""

import click
from smallbooks.domain.account import AccountService
from smallbooks.domain.learning import LearningService


@click.command("rules")
@click.pass_context
def list_rules(ctx):
    """List the categorization rules learned from your imports."""
    db = ctx.obj["db"]
    rules = LearningService(db).list_rules(ctx.obj["user_id"])

    if not rules:
        click.echo("No rules learned yet.")
        return

    accounts = {acc.id: acc for acc in AccountService(db).list_accounts()}

    click.echo("\nLearned rules:")
    click.echo("-" * 90)
    click.echo(f"{'Pattern':<40} {'Account':<30} {'Conf':>6} {'Matches':>8}")
    click.echo("-" * 90)
    for rule in rules:
        account = accounts.get(rule.account_id)
        label = f"{account.code} {account.name}" if account else f"Account {rule.account_id}"
        click.echo(
            f"{rule.pattern[:40]:<40} {label[:30]:<30} {rule.confidence:>6.2f} {rule.match_count:>8d}"
        )


def register_commands(cli):
    """Register rules command with main CLI."""
    cli.add_command(list_rules)
