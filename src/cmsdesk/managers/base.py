"""Generic resource view-state manager.

A manager holds one fetched collection plus the navigation state around
it: which view is showing and which record, if any, is being looked at
or edited.  Content, projects and users all use this one class, each
injecting its own CRUD operations through ``ResourceOps``.

The local collection is patched after each successful write (prepend on
create, replace-by-id on update, filter-by-id on delete).  Nothing is
reconciled with other clients; a manual ``refresh`` is the only way to
pick up their changes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar, Generic, TypeVar

from cmsdesk.errors import CmsError
from cmsdesk.models import Record
from cmsdesk.validation import ensure_valid

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=Record)
CreateT = TypeVar("CreateT")
UpdateT = TypeVar("UpdateT")

Confirm = Callable[[str], bool]


class ViewMode(StrEnum):
    LIST = "list"
    CREATE = "create"
    EDIT = "edit"
    DETAIL = "detail"
    DOCUMENTATION = "documentation"


@dataclass(frozen=True)
class Viewing(Generic[RecordT]):
    """The detail view is showing ``record``."""

    record: RecordT


@dataclass(frozen=True)
class Editing(Generic[RecordT]):
    """The edit form is open on ``record``."""

    record: RecordT


Selection = Viewing[RecordT] | Editing[RecordT] | None


@dataclass(frozen=True)
class ResourceOps(Generic[RecordT, CreateT, UpdateT]):
    """The API calls a manager needs for one resource."""

    fetch_all: Callable[[], list[RecordT]]
    create: Callable[[CreateT], RecordT]
    update: Callable[[int, UpdateT], RecordT]
    delete: Callable[[int], None]
    validate_create: Callable[[CreateT], dict[str, str]] | None = None
    validate_update: Callable[[UpdateT], dict[str, str]] | None = None


class ResourceManager(Generic[RecordT, CreateT, UpdateT]):
    """View-state and CRUD for one resource collection."""

    modes: ClassVar[frozenset[ViewMode]] = frozenset(
        {ViewMode.LIST, ViewMode.CREATE, ViewMode.EDIT, ViewMode.DETAIL}
    )
    noun: ClassVar[str] = "record"

    def __init__(self, ops: ResourceOps[RecordT, CreateT, UpdateT]) -> None:
        self.ops = ops
        self.items: list[RecordT] = []
        self.view = ViewMode.LIST
        self.selection: Selection[RecordT] = None
        self.is_loading = False
        self.error: str | None = None

    # ── Selection views ──────────────────────────────────────────

    @property
    def selected(self) -> RecordT | None:
        if isinstance(self.selection, Viewing):
            return self.selection.record
        return None

    @property
    def editing(self) -> RecordT | None:
        if isinstance(self.selection, Editing):
            return self.selection.record
        return None

    def find(self, record_id: int) -> RecordT | None:
        for record in self.items:
            if record.id == record_id:
                return record
        return None

    # ── Navigation ───────────────────────────────────────────────

    def _navigate(self, mode: ViewMode, selection: Selection[RecordT] = None) -> None:
        if mode not in self.modes:
            raise ValueError(f"{type(self).__name__} has no {mode.value!r} view")
        self.view = mode
        self.selection = selection
        self.error = None

    def go_to_list(self) -> None:
        self._navigate(ViewMode.LIST)

    def go_to_create(self) -> None:
        self._navigate(ViewMode.CREATE)

    def go_to_edit(self, record: RecordT) -> None:
        self._navigate(ViewMode.EDIT, Editing(record))

    def go_to_detail(self, record: RecordT) -> None:
        self._navigate(ViewMode.DETAIL, Viewing(record))

    # ── Operations ───────────────────────────────────────────────

    @contextmanager
    def _operation(self, action: str) -> Iterator[None]:
        """Hold the loading flag and record any API failure as ``error``."""
        self.is_loading = True
        self.error = None
        try:
            yield
        except CmsError as exc:
            self.error = exc.message or f"Failed to {action} {self.noun}"
            logger.warning("Failed to %s %s: %s", action, self.noun, self.error)
            raise
        finally:
            self.is_loading = False

    def mount(self) -> None:
        """Open on the list view and load the collection."""
        self.go_to_list()
        self.refresh()

    def refresh(self) -> None:
        """Reload the whole collection.

        On failure the previous collection stays in place and the reason
        is left in ``error``; nothing is raised.
        """
        try:
            with self._operation("load"):
                records = self.fetch()
        except CmsError:
            return
        self.items = records
        logger.debug("Loaded %d %s records", len(records), self.noun)

    def fetch(self) -> list[RecordT]:
        return self.ops.fetch_all()

    def create(self, data: CreateT) -> RecordT:
        """Create a record and put it at the head of the collection.

        Raises:
            FormValidationError: ``data`` failed client-side validation.
            CmsError: The API call failed; ``error`` is set too.
        """
        if self.ops.validate_create is not None:
            ensure_valid(self.ops.validate_create(data))
        with self._operation("create"):
            record = self.ops.create(data)
        self.items = [record, *self.items]
        self.view = ViewMode.LIST
        self.selection = None
        logger.info("Created %s %d", self.noun, record.id)
        return record

    def update(self, record_id: int, data: UpdateT) -> RecordT:
        """Update a record in place and return to the list."""
        if self.ops.validate_update is not None:
            ensure_valid(self.ops.validate_update(data))
        with self._operation("update"):
            record = self.ops.update(record_id, data)
        self.items = [record if item.id == record_id else item for item in self.items]
        self.view = ViewMode.LIST
        if self.editing is not None:
            self.selection = None
        logger.info("Updated %s %d", self.noun, record_id)
        return record

    def delete(self, record_id: int, confirm: Confirm) -> bool:
        """Delete a record once ``confirm`` agrees.

        Returns:
            False when the confirmation was declined (no request made),
            True once the record is gone.
        """
        if not confirm(f"Delete {self.noun} {record_id}?"):
            logger.debug("Delete of %s %d declined", self.noun, record_id)
            return False
        with self._operation("delete"):
            self.ops.delete(record_id)
        self.items = [item for item in self.items if item.id != record_id]
        if self.selection is not None and self.selection.record.id == record_id:
            self.selection = None
        logger.info("Deleted %s %d", self.noun, record_id)
        return True
