"""User manager: list, create and edit only; users have no detail view."""

from __future__ import annotations

from typing import ClassVar

from cmsdesk.api.client import ApiClient
from cmsdesk.managers.base import ResourceManager, ResourceOps, ViewMode
from cmsdesk.models import User, UserForm, UserUpdate
from cmsdesk.validation import validate_user_form, validate_user_update


class UserManager(ResourceManager[User, UserForm, UserUpdate]):
    modes: ClassVar[frozenset[ViewMode]] = frozenset(
        {ViewMode.LIST, ViewMode.CREATE, ViewMode.EDIT}
    )
    noun: ClassVar[str] = "user"

    def __init__(self, api: ApiClient) -> None:
        super().__init__(
            ResourceOps(
                fetch_all=api.list_users,
                create=api.create_user,
                update=api.update_user,
                delete=api.delete_user,
                validate_create=validate_user_form,
                validate_update=validate_user_update,
            )
        )
        self.api = api
