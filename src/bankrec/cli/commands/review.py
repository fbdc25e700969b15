"""Review commands for staged transactions."""

import click
from bankrec.cli.error_handling import handle_domain_error
from bankrec.domain.errors import DomainError
from bankrec.domain.review import ReviewService


@click.group()
def review_group():
    """Review staged transactions."""
    pass


def _apply(ctx, action: str, record_id: int, note: str | None) -> None:
    db = ctx.obj["db"]
    service = ReviewService(db)

    try:
        record = getattr(service, action)(ctx.obj["owner"], record_id, note)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Staged transaction {record.id} is now {record.match_status.value}")
    if record.verification_note:
        click.echo(f"  {record.verification_note}")


@review_group.command("accept")
@click.argument("record_id", type=int)
@click.option("--note", help="Reviewer note")
@click.pass_context
def accept(ctx, record_id: int, note: str | None):
    """Accept a staged transaction as it came from the bank."""
    _apply(ctx, "accept", record_id, note)


@review_group.command("reject")
@click.argument("record_id", type=int)
@click.option("--note", help="Reviewer note")
@click.pass_context
def reject(ctx, record_id: int, note: str | None):
    """Reject the proposed ledger match for a staged transaction."""
    _apply(ctx, "reject", record_id, note)


@review_group.command("verify")
@click.argument("record_id", type=int)
@click.option("--note", help="Reviewer note")
@click.pass_context
def verify(ctx, record_id: int, note: str | None):
    """Confirm the match and keep the ledger entry's description and category."""
    _apply(ctx, "verify", record_id, note)


def register_commands(cli):
    """Register review commands with main CLI."""
    cli.add_command(review_group, name="review")
