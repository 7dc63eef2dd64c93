"""Content manager: the generic manager plus the documentation view."""

from __future__ import annotations

import logging
from typing import ClassVar

from cmsdesk.api.client import ApiClient
from cmsdesk.managers.base import ResourceManager, ResourceOps, ViewMode
from cmsdesk.managers.sorting import sort_records
from cmsdesk.models import Content, ContentForm, ContentHistory, ContentStatus
from cmsdesk.validation import validate_content_form

logger = logging.getLogger(__name__)


class ContentManager(ResourceManager[Content, ContentForm, ContentForm]):
    """View-state for content items.

    Args:
        api: Client used for every call.
        keep_archived_on_edit: When False (the default), an archived item
            opens in the edit form as a draft.
        order_by: Server-side ordering for the list fetch.
        order_direction: ``ASC`` or ``DESC``.
    """

    modes: ClassVar[frozenset[ViewMode]] = frozenset(ViewMode)
    noun: ClassVar[str] = "content"

    def __init__(
        self,
        api: ApiClient,
        *,
        keep_archived_on_edit: bool = False,
        order_by: str | None = None,
        order_direction: str | None = None,
    ) -> None:
        super().__init__(
            ResourceOps(
                fetch_all=lambda: api.list_content(order_by, order_direction),
                create=api.create_content,
                update=api.update_content,
                delete=api.delete_content,
                validate_create=validate_content_form,
                validate_update=validate_content_form,
            )
        )
        self.api = api
        self.keep_archived_on_edit = keep_archived_on_edit

    def go_to_documentation(self) -> None:
        self._navigate(ViewMode.DOCUMENTATION)

    def form_for_edit(self, record: Content) -> ContentForm:
        """Pre-fill the edit form from an existing item."""
        status = record.status
        if status == ContentStatus.ARCHIVED and not self.keep_archived_on_edit:
            status = ContentStatus.DRAFT
        return ContentForm(
            title=record.title,
            description=record.description,
            category_id=record.category_id,
            subcategory_id=record.subcategory_id,
            tags=list(record.tags),
            status=status,
            priority=record.priority,
        )

    def history(self, content_id: int) -> list[ContentHistory]:
        with self._operation("load history of"):
            return self.api.content_history(content_id)

    def filter_and_sort(
        self,
        search: str = "",
        category_id: int | None = None,
        status: ContentStatus | None = None,
        sort_by: str = "priority",
        descending: bool = True,
    ) -> list[Content]:
        """Items as the list view shows them; the collection is untouched.

        ``search`` matches title, description or any tag, ignoring case.
        """
        needle = search.lower()
        matches = [
            item
            for item in self.items
            if (
                needle in item.title.lower()
                or needle in item.description.lower()
                or any(needle in tag.lower() for tag in item.tags)
            )
            and (not category_id or item.category_id == category_id)
            and (not status or item.status == status)
        ]
        return sort_records(matches, sort_by, descending)

    def published_in(self, subcategory_id: int) -> list[Content]:
        """Published items filed under a subcategory, for the documentation view."""
        return [
            item
            for item in self.items
            if item.subcategory_id == subcategory_id and item.status == ContentStatus.PUBLISHED
        ]
