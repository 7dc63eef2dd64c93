"""Category catalog: the classification tree content is filed under.

Loaded once per session from the public categories endpoint, which
returns each category with its subcategories embedded.
"""

from __future__ import annotations

import logging

from cmsdesk.api.client import ApiClient
from cmsdesk.errors import CmsError
from cmsdesk.models import Category, CategoryForm, Subcategory, SubcategoryForm
from cmsdesk.validation import ensure_valid, validate_category_form

logger = logging.getLogger(__name__)

NO_CATEGORY = "No category"
NO_SUBCATEGORY = "No subcategory"


class CategoryCatalog:
    """Categories with their subcategories, in API order."""

    def __init__(self, api: ApiClient) -> None:
        self.api = api
        self.categories: list[Category] = []
        self.is_loading = False
        self.error: str | None = None

    def load(self) -> None:
        """Fetch the catalog.  On failure the previous catalog is kept."""
        self.is_loading = True
        self.error = None
        try:
            self.categories = self.api.list_public_categories()
        except CmsError as exc:
            self.error = exc.message or "Failed to load categories"
            logger.warning("Failed to load categories: %s", self.error)
        finally:
            self.is_loading = False

    # ── Lookups ──────────────────────────────────────────────────

    def get_category(self, category_id: int) -> Category | None:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def subcategories_of(self, category_id: int) -> list[Subcategory]:
        category = self.get_category(category_id)
        return list(category.subcategories) if category else []

    def get_subcategory(self, category_id: int, subcategory_id: int) -> Subcategory | None:
        for sub in self.subcategories_of(category_id):
            if sub.id == subcategory_id:
                return sub
        return None

    def category_name(self, category_id: int | None) -> str:
        category = self.get_category(category_id) if category_id else None
        return category.name if category else NO_CATEGORY

    def subcategory_name(self, category_id: int | None, subcategory_id: int | None) -> str:
        if not category_id or not subcategory_id:
            return NO_SUBCATEGORY
        sub = self.get_subcategory(category_id, subcategory_id)
        return sub.name if sub else NO_SUBCATEGORY

    # ── Admin ────────────────────────────────────────────────────

    def create_category(self, form: CategoryForm) -> Category:
        ensure_valid(validate_category_form(form))
        category = self.api.create_category(form)
        self.categories.append(category)
        return category

    def create_subcategory(self, form: SubcategoryForm) -> Subcategory:
        """Create a subcategory and file it under its loaded parent."""
        ensure_valid(validate_category_form(form))
        sub = self.api.create_subcategory(form)
        parent = self.get_category(sub.category_id)
        if parent is not None:
            parent.subcategories.append(sub)
        return sub
