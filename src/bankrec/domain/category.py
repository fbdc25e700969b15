"""Category domain service."""

from typing import Optional

from bankrec.database.base import Database
from bankrec.domain.entities import Category, CategoryType
from bankrec.domain.errors import NotFoundError, ValidationError, category_name_not_found


class CategoryService:
    """Service for looking up and creating categories.

    Names are unique per owner, so a name identifies a category.
    """

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self,
        owner_id: str,
        name: str,
        category_type: CategoryType = CategoryType.EXPENDITURE,
        color: Optional[str] = None,
    ) -> int:
        """Create a category.

        Raises:
            ValidationError: If the name is empty
            ConflictError: If the owner already has a category with that name
        """
        if not name or not name.strip():
            raise ValidationError("Category name is required")
        return self.db.create_category(
            owner_id=owner_id, name=name.strip(), category_type=category_type, color=color
        )

    def get_category_by_name(self, owner_id: str, name: str) -> Optional[Category]:
        return self.db.get_category_by_name(owner_id, name)

    def require_category_by_name(self, owner_id: str, name: str) -> Category:
        """Get a category by name or raise NotFoundError."""
        category = self.db.get_category_by_name(owner_id, name)
        if category is None:
            raise NotFoundError(category_name_not_found(name))
        return category

    def list_categories(self, owner_id: str) -> list[Category]:
        return self.db.list_categories(owner_id)
