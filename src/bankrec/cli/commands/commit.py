"""Commit commands."""

import click
from bankrec.cli.error_handling import handle_domain_error
from bankrec.domain.commit import CommitService
from bankrec.domain.errors import DomainError


@click.command("preview")
@click.pass_context
def preview(ctx):
    """Show what a commit would change."""
    db = ctx.obj["db"]
    service = CommitService(db)

    try:
        summary = service.preview_commit(ctx.obj["owner"])
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo("\nCommit preview:")
    click.echo(f"  Ledger transactions to replace: {summary.to_delete}")
    click.echo(f"  Staged transactions to commit: {summary.staged}")
    for status, count in summary.breakdown.items():
        click.echo(f"    {status.value}: {count}")


@click.command("commit")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def commit(ctx, yes: bool):
    """Replace the ledger with the staged transactions."""
    db = ctx.obj["db"]
    service = CommitService(db)
    owner = ctx.obj["owner"]

    try:
        summary = service.preview_commit(owner)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not yes:
        click.confirm(
            f"This deletes {summary.to_delete} ledger transactions and commits "
            f"{summary.staged} staged ones. Continue?",
            abort=True,
        )

    try:
        result = service.commit_import(owner)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo("\nCommit complete:")
    click.echo(f"  Committed: {result.committed} transactions")
    click.echo(f"  Categories restored: {result.verified_with_category}")
    click.echo(f"  Need categorization: {result.needs_categorization}")
    for warning in result.warnings:
        click.echo(f"  Warning: {warning}", err=True)


def register_commands(cli):
    """Register commit commands with main CLI."""
    cli.add_command(preview)
    cli.add_command(commit)
