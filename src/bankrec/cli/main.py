"""Main CLI entry point."""

import click
from bankrec.database.factories import create_sqlite_database
from bankrec.utils.logging_config import setup_logging

# Import and register all commands at module level
from bankrec.cli.commands import (
    import_cmd,
    review,
    commit,
    ledger,
    category,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BANKREC_DB_PATH environment variable)",
    envvar="BANKREC_DB_PATH",
)
@click.option(
    "--owner",
    default="default",
    show_default=True,
    help="Ledger owner to act for",
    envvar="BANKREC_OWNER",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity",
    envvar="BANKREC_LOG_LEVEL",
)
@click.option("--log-file", type=click.Path(), help="Also write log output to this file")
@click.pass_context
def cli(ctx, db_path: str | None, owner: str, log_level: str, log_file: str | None):
    """Bankrec - Bank statement reconciliation.

    Import a bank statement into a staging area, review how each
    transaction matches your manually kept ledger, then commit the
    reviewed batch as the new ledger.
    """
    ctx.ensure_object(dict)
    setup_logging(level=log_level, log_file=log_file)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)
        ctx.obj["db"] = db
        ctx.obj["owner"] = owner


# Register all commands
import_cmd.register_commands(cli)
review.register_commands(cli)
commit.register_commands(cli)
ledger.register_commands(cli)
category.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
