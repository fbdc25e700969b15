"""Ledger management commands."""

import click
from bankrec.cli.error_handling import handle_domain_error
from bankrec.domain.category import CategoryService
from bankrec.domain.entities import Direction
from bankrec.domain.errors import DomainError
from bankrec.domain.ledger import LedgerService
from bankrec.utils.amount_parser import parse_amount
from bankrec.utils.date_parser import parse_date


@click.group()
def ledger_group():
    """Manage the manually kept ledger."""
    pass


@ledger_group.command("add")
@click.option("--date", "date_str", required=True, help="Date (YYYY-MM-DD, 'today' or 'yesterday')")
@click.option("--amount", required=True, help="Amount; negative for money spent")
@click.option("--description", required=True, help="Transaction description")
@click.option(
    "--direction",
    type=click.Choice([d.value for d in Direction], case_sensitive=False),
    help="Override the direction implied by the amount sign",
)
@click.option("--category", help="Category name")
@click.pass_context
def add_transaction(
    ctx, date_str: str, amount: str, description: str, direction: str | None, category: str | None
):
    """Add a transaction to the ledger."""
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]
    service = LedgerService(db)
    category_service = CategoryService(db)

    try:
        occurred_on = parse_date(date_str)
        parsed_amount = parse_amount(amount)
        category_id = None
        if category:
            category_id = category_service.require_category_by_name(owner, category).id
        transaction_id = service.create_transaction(
            owner_id=owner,
            description=description,
            amount=parsed_amount,
            occurred_on=occurred_on,
            direction=Direction(direction.lower()) if direction else None,
            category_id=category_id,
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created ledger transaction {transaction_id}")


@ledger_group.command("list")
@click.pass_context
def list_transactions(ctx):
    """List ledger transactions."""
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]
    service = LedgerService(db)

    transactions = service.list_transactions(owner)
    if not transactions:
        click.echo("No ledger transactions found.")
        return

    categories = {c.id: c.name for c in CategoryService(db).list_categories(owner)}

    click.echo(f"\n{'ID':>5}  {'Date':<10}  {'Amount':>10}  {'Category':<20}  Description")
    click.echo("-" * 80)
    for txn in transactions:
        signed = txn.amount if txn.direction is Direction.INCOME else -txn.amount
        category_name = categories.get(txn.category_id, "Uncategorized")
        click.echo(
            f"{txn.id:>5}  {txn.occurred_on.isoformat():<10}  {signed:>10.2f}  "
            f"{category_name:<20}  {txn.description}"
        )
    click.echo(f"\nTotal: {len(transactions)} transactions")


def register_commands(cli):
    """Register ledger commands with main CLI."""
    cli.add_command(ledger_group, name="ledger")
