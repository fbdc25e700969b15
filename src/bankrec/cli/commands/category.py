"""Category management commands."""

import click
from bankrec.cli.error_handling import handle_domain_error
from bankrec.domain.category import CategoryService
from bankrec.domain.entities import CategoryType
from bankrec.domain.errors import DomainError


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List all categories."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    categories = service.list_categories(ctx.obj["owner"])
    if not categories:
        click.echo("No categories found. Use 'category create' to add one.")
        return

    click.echo("\nCategories:")
    for category in categories:
        click.echo(f"{category.name} [{category.category_type.value}] (ID: {category.id})")


@category_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "category_type",
    type=click.Choice([t.value for t in CategoryType], case_sensitive=False),
    default=CategoryType.EXPENDITURE.value,
    help="Category type (default: expenditure)",
)
@click.option("--color", help="Display color, e.g. '#ff8800'")
@click.pass_context
def create_category(ctx, name: str, category_type: str, color: str | None):
    """Create a new category."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    try:
        category_id = service.create_category(
            ctx.obj["owner"], name, CategoryType(category_type.lower()), color
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created category '{name}' (ID: {category_id})")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
