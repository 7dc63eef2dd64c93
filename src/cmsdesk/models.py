"""Domain models as pure Pydantic v2 data types.

Records mirror what the content-management API returns.  Attributes are
snake_case; the wire format is camelCase (``createdAt``, ``categoryId``),
handled by the alias generator on ``ApiModel``.  Form models are what the
client sends back: ``payload()`` renders the request body and leaves out
anything unset.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for everything that crosses the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Record(ApiModel):
    """Anything the API identifies by an integer id."""

    id: int


# ── Enumerations ─────────────────────────────────────────────────


class UserRole(StrEnum):
    ADMIN = "admin"
    CREATOR = "creator"


class ContentStatus(StrEnum):
    """Lifecycle status of a content record."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class SortDirection(StrEnum):
    ASC = "ASC"
    DESC = "DESC"


# ── Embedded references ──────────────────────────────────────────


class NamedRef(ApiModel):
    id: int
    name: str


class AuthorRef(ApiModel):
    """Author or last editor embedded in a record."""

    id: int
    name: str
    email: str
    role: str


# ── Users ────────────────────────────────────────────────────────


class User(Record):
    name: str
    email: str
    role: UserRole
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ── Classification entities ──────────────────────────────────────


class Classification(Record):
    """Shared shape of categories, subcategories, statuses and areas."""

    name: str
    description: str | None = None
    is_active: bool = True
    priority: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Subcategory(Classification):
    category_id: int
    category: NamedRef | None = None


class Category(Classification):
    """A category owns an ordered list of subcategories."""

    subcategories: list[Subcategory] = Field(default_factory=list)

    @field_validator("subcategories", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class ProjectStatus(Classification):
    pass


class ProjectArea(Classification):
    pass


# ── Content ──────────────────────────────────────────────────────


class Content(Record):
    """A content item.  ``description`` holds rich-text HTML."""

    title: str
    description: str
    category_id: int | None = None
    subcategory_id: int | None = None
    category: NamedRef | None = None
    subcategory: NamedRef | None = None
    tags: list[str] = Field(default_factory=list)
    status: ContentStatus = ContentStatus.DRAFT
    priority: int = 0
    author_id: int
    last_updated_by_id: int | None = None
    author: AuthorRef | None = None
    last_updated_by: AuthorRef | None = None
    created_at: datetime
    updated_at: datetime


class ContentHistoryAction(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    STATUS_CHANGED = "status_changed"
    DELETED = "deleted"


class ContentHistory(Record):
    action: ContentHistoryAction
    changes: str
    notes: str | None = None
    previous_data: str | None = None
    new_data: str | None = None
    created_at: datetime
    user: AuthorRef
    content: Content | None = None


# ── Projects ─────────────────────────────────────────────────────


class Project(Record):
    title: str
    description: str
    target: str
    conclusion: str | None = None
    priority: int = 0
    status_id: int
    area_id: int
    author_id: int
    last_updated_by_id: int | None = None
    created_at: datetime
    updated_at: datetime
    author: AuthorRef | None = None
    last_updated_by: AuthorRef | None = None
    status: ProjectStatus | None = None
    area: ProjectArea | None = None


class ProjectHistoryAction(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    STATUS_CHANGED = "status_changed"
    AREA_CHANGED = "area_changed"
    CONCLUSION_ADDED = "conclusion_added"
    DELETED = "deleted"


class ProjectHistory(Record):
    action: ProjectHistoryAction
    changes: str
    notes: str | None = None
    previous_data: str | None = None
    new_data: str | None = None
    created_at: datetime
    user: AuthorRef
    project: Project | None = None


# ── Auth payloads ────────────────────────────────────────────────


class LoginCredentials(ApiModel):
    email: str = ""
    password: str = ""


class RegisterRequest(ApiModel):
    name: str = ""
    email: str = ""
    password: str = ""
    role: UserRole | None = None


class LoginResponse(ApiModel):
    access_token: str = Field(alias="access_token")
    user: User


# ── Forms ────────────────────────────────────────────────────────


class FormModel(ApiModel):
    """A request body built from user input."""

    def payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ContentForm(FormModel):
    title: str = ""
    description: str = ""
    category_id: int | None = None
    subcategory_id: int | None = None
    tags: list[str] = Field(default_factory=list)
    status: ContentStatus = ContentStatus.DRAFT
    priority: int | None = None

    def payload(self) -> dict[str, Any]:
        data = super().payload()
        data["priority"] = self.priority or 0
        return data

    def add_tag(self, tag: str) -> None:
        """Append a tag, ignoring blanks and duplicates."""
        tag = tag.strip()
        if tag and tag not in self.tags:
            self.tags.append(tag)


class ProjectForm(FormModel):
    title: str = ""
    description: str = ""
    target: str = ""
    conclusion: str | None = None
    status_id: int | None = None
    area_id: int | None = None
    priority: int | None = None


class ProjectUpdate(FormModel):
    title: str | None = None
    description: str | None = None
    target: str | None = None
    conclusion: str | None = None
    status_id: int | None = None
    area_id: int | None = None
    priority: int | None = None


class UserForm(FormModel):
    name: str = ""
    email: str = ""
    password: str = ""
    role: UserRole | None = UserRole.CREATOR


class UserUpdate(FormModel):
    """Partial user edit.  A blank password leaves the current one in place."""

    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: UserRole | None = None

    @field_validator("password", mode="before")
    @classmethod
    def _blank_password_is_unchanged(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class CategoryForm(FormModel):
    name: str = ""
    description: str | None = None
    is_active: bool | None = None
    priority: int | None = None


class SubcategoryForm(CategoryForm):
    category_id: int | None = None
