"""Project manager.

Loading projects also loads the public project statuses and areas so the
list can show names instead of ids.  All three are ordered by priority,
highest first.
"""

from __future__ import annotations

import logging
from typing import ClassVar

from cmsdesk.api.client import ApiClient
from cmsdesk.managers.base import ResourceManager, ResourceOps
from cmsdesk.managers.sorting import sort_records
from cmsdesk.models import (
    Project,
    ProjectArea,
    ProjectForm,
    ProjectHistory,
    ProjectStatus,
    ProjectUpdate,
    SortDirection,
)
from cmsdesk.validation import validate_project_form, validate_project_update

logger = logging.getLogger(__name__)

NO_STATUS = "No status"
NO_AREA = "No area"


class ProjectManager(ResourceManager[Project, ProjectForm, ProjectUpdate]):
    noun: ClassVar[str] = "project"

    def __init__(self, api: ApiClient) -> None:
        super().__init__(
            ResourceOps(
                fetch_all=lambda: api.list_projects("priority", SortDirection.DESC),
                create=api.create_project,
                update=api.update_project,
                delete=api.delete_project,
                validate_create=validate_project_form,
                validate_update=validate_project_update,
            )
        )
        self.api = api
        self.statuses: list[ProjectStatus] = []
        self.areas: list[ProjectArea] = []

    def fetch(self) -> list[Project]:
        projects = super().fetch()
        statuses = self.api.list_public_project_statuses("priority", SortDirection.DESC)
        areas = self.api.list_public_project_areas("priority", SortDirection.DESC)
        self.statuses, self.areas = statuses, areas
        return projects

    def status_name(self, status_id: int) -> str:
        for status in self.statuses:
            if status.id == status_id:
                return status.name
        return NO_STATUS

    def area_name(self, area_id: int) -> str:
        for area in self.areas:
            if area.id == area_id:
                return area.name
        return NO_AREA

    def history(self, project_id: int) -> list[ProjectHistory]:
        with self._operation("load history of"):
            return self.api.project_history(project_id)

    def filter_and_sort(
        self,
        search: str = "",
        status_id: int | None = None,
        area_id: int | None = None,
        author_id: int | None = None,
        sort_by: str = "priority",
        descending: bool = True,
    ) -> list[Project]:
        """Projects as the list view shows them; the collection is untouched."""
        needle = search.lower()
        matches = [
            project
            for project in self.items
            if (needle in project.title.lower() or needle in project.description.lower())
            and (not status_id or project.status_id == status_id)
            and (not area_id or project.area_id == area_id)
            and (not author_id or project.author_id == author_id)
        ]
        return sort_records(matches, sort_by, descending)
