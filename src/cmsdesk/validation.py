"""Client-side form validation.

Each ``validate_*`` function returns a mapping of field name to message;
an empty mapping means the form may be submitted.  ``ensure_valid``
turns a non-empty mapping into a ``FormValidationError`` so callers can
stop before any request is made.
"""

from __future__ import annotations

import re

from cmsdesk.errors import FormValidationError
from cmsdesk.models import (
    CategoryForm,
    ContentForm,
    LoginCredentials,
    ProjectForm,
    ProjectUpdate,
    RegisterRequest,
    SubcategoryForm,
    UserForm,
    UserUpdate,
)

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")
MIN_PASSWORD_LENGTH = 6
PRIORITY_RANGE = (1, 100)


def ensure_valid(errors: dict[str, str]) -> None:
    if errors:
        raise FormValidationError(errors)


def _check_email(email: str | None, errors: dict[str, str]) -> None:
    if not email or not email.strip():
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.search(email):
        errors["email"] = "Email is not valid"


def _check_password(password: str | None, errors: dict[str, str], *, required: bool) -> None:
    if not password or not password.strip():
        if required:
            errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"


def validate_login(credentials: LoginCredentials) -> dict[str, str]:
    errors: dict[str, str] = {}
    _check_email(credentials.email, errors)
    _check_password(credentials.password, errors, required=True)
    return errors


def validate_registration(form: RegisterRequest) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not form.name.strip():
        errors["name"] = "Name is required"
    _check_email(form.email, errors)
    _check_password(form.password, errors, required=True)
    return errors


def validate_content_form(form: ContentForm) -> dict[str, str]:
    """Validate a content form.

    Subcategory is only required once a category has been picked, and
    priority must fall within 1..100.
    """
    errors: dict[str, str] = {}
    if not form.title.strip():
        errors["title"] = "Title is required"
    if not form.description.strip():
        errors["description"] = "Description is required"
    if not form.category_id:
        errors["category_id"] = "Category is required"
    if form.category_id and not form.subcategory_id:
        errors["subcategory_id"] = "Subcategory is required"
    low, high = PRIORITY_RANGE
    if not form.priority or not low <= form.priority <= high:
        errors["priority"] = f"Priority must be between {low} and {high}"
    return errors


def validate_project_form(form: ProjectForm) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not form.title.strip():
        errors["title"] = "Title is required"
    if not form.description.strip():
        errors["description"] = "Description is required"
    if not form.target.strip():
        errors["target"] = "Target is required"
    if not form.status_id:
        errors["status_id"] = "Status is required"
    if not form.area_id:
        errors["area_id"] = "Area is required"
    return errors


def validate_project_update(form: ProjectUpdate) -> dict[str, str]:
    """Validate a partial project update: only the fields being sent."""
    errors: dict[str, str] = {}
    for field in ("title", "description", "target"):
        value = getattr(form, field)
        if value is not None and not value.strip():
            errors[field] = f"{field.capitalize()} cannot be blank"
    return errors


def validate_user_form(form: UserForm) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not form.name.strip():
        errors["name"] = "Name is required"
    _check_email(form.email, errors)
    _check_password(form.password, errors, required=True)
    if not form.role:
        errors["role"] = "Role is required"
    return errors


def validate_user_update(form: UserUpdate) -> dict[str, str]:
    """Validate an edit: password may be left out, but not shortened."""
    errors: dict[str, str] = {}
    if form.name is not None and not form.name.strip():
        errors["name"] = "Name is required"
    if form.email is not None:
        _check_email(form.email, errors)
    _check_password(form.password, errors, required=False)
    return errors


def validate_category_form(form: CategoryForm) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not form.name.strip():
        errors["name"] = "Name is required"
    if isinstance(form, SubcategoryForm) and not form.category_id:
        errors["category_id"] = "Category is required"
    return errors
