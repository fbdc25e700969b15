"""Statement import and staging commands."""

import click
from bankrec.cli.error_handling import handle_domain_error
from bankrec.domain.entities import StagedImportRecord
from bankrec.domain.errors import DomainError
from bankrec.domain.statement import DEFAULT_MAX_FILE_BYTES
from bankrec.domain.statement_import import StatementImportService


def format_staged_record(record: StagedImportRecord, verbose: bool = False) -> list[str]:
    """Render one staged record as display lines."""
    confidence = record.match_confidence.value if record.match_confidence else "-"
    lines = [
        f"{record.id:>5}  {record.started_at.date().isoformat()}  "
        f"{record.amount:>10.2f} {record.currency:<3}  "
        f"{record.match_status.value:<9}  {confidence:<6}  {record.description}"
    ]
    if verbose:
        if record.matched_ledger_id is not None:
            lines.append(f"       Matched ledger ID: {record.matched_ledger_id}")
        for reason in record.match_reasons:
            lines.append(f"       - {reason}")
        if record.verification_note:
            lines.append(f"       Note: {record.verification_note}")
        if record.notes:
            lines.append(f"       Reviewer: {record.notes}")
    return lines


@click.command("import")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--max-size",
    type=int,
    default=DEFAULT_MAX_FILE_BYTES,
    show_default=True,
    help="Largest statement file accepted, in bytes",
    envvar="BANKREC_MAX_FILE_SIZE",
)
@click.option("--workers", type=click.IntRange(min=1), default=1, help="Threads used for match scoring")
@click.pass_context
def import_statement(ctx, statement_file: str, max_size: int, workers: int):
    """Import a bank statement CSV into the staging area."""
    db = ctx.obj["db"]
    service = StatementImportService(db, max_file_bytes=max_size, max_workers=workers)

    try:
        result = service.import_statement(ctx.obj["owner"], statement_file)
    except (DomainError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)
        return

    stats = result.stats
    click.echo("\nStatement parsed:")
    click.echo(f"  Rows: {stats.total_rows} ({stats.completed} completed, "
               f"{stats.reverted} reverted, {stats.pending} pending)")
    click.echo(f"  Income: {stats.income_amount:.2f}")
    click.echo(f"  Expenditure: {stats.expenditure_amount:.2f}")
    if stats.earliest and stats.latest:
        click.echo(f"  Period: {stats.earliest.date()} to {stats.latest.date()}")

    if result.all_duplicates:
        click.echo(
            f"\nAll {result.duplicates_skipped} transactions are already staged or in the ledger. "
            "Nothing imported."
        )
    else:
        click.echo("\nImport complete:")
        click.echo(f"  Staged: {len(result.staged)} transactions")
        click.echo(f"  Skipped: {result.duplicates_skipped} duplicates")
        summary = result.match_summary
        if summary:
            click.echo(
                f"  Matching: {summary['high_confidence']} high, {summary['medium_confidence']} medium, "
                f"{summary['low_confidence']} low confidence, {summary['unmatched']} unmatched"
            )

    if result.rejected_rows:
        click.echo(f"  Rejected rows: {len(result.rejected_rows)}")
        for error in result.rejected_rows:
            click.echo(f"    {error}", err=True)


@click.command("staged")
@click.option("--review", "for_review", is_flag=True, help="Order by confidence for review")
@click.option("--verbose", "-v", is_flag=True, help="Show match reasons and notes")
@click.pass_context
def list_staged(ctx, for_review: bool, verbose: bool):
    """List the staged transactions and their match status."""
    db = ctx.obj["db"]
    service = StatementImportService(db)

    try:
        records = service.get_staged_records(ctx.obj["owner"], for_review=for_review)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not records:
        click.echo("No staged transactions. Run 'import' to stage a statement.")
        return

    click.echo(f"\n{'ID':>5}  {'Date':<10}  {'Amount':>10} {'Cur':<3}  {'Status':<9}  {'Conf':<6}  Description")
    click.echo("-" * 80)
    for record in records:
        for line in format_staged_record(record, verbose=verbose):
            click.echo(line)
    click.echo(f"\nTotal: {len(records)} staged transactions")


@click.command("rematch")
@click.pass_context
def rematch(ctx):
    """Re-score staged transactions against the current ledger."""
    db = ctx.obj["db"]
    service = StatementImportService(db)

    try:
        records = service.rematch(ctx.obj["owner"])
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    matched = sum(1 for record in records if record.matched_ledger_id is not None)
    click.echo(f"Re-scored staging: {matched} of {len(records)} transactions have a ledger match")


@click.command("clear")
@click.pass_context
def clear_staging(ctx):
    """Discard the staged batch without committing it."""
    db = ctx.obj["db"]
    service = StatementImportService(db)

    try:
        cleared = service.clear_staging(ctx.obj["owner"])
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Cleared {cleared} staged transactions")


def register_commands(cli):
    """Register import and staging commands with main CLI."""
    cli.add_command(import_statement)
    cli.add_command(list_staged)
    cli.add_command(rematch)
    cli.add_command(clear_staging)
