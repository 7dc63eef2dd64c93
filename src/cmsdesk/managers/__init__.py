"""Resource view-state managers for content, projects and users."""

from cmsdesk.managers.base import (
    Editing,
    ResourceManager,
    ResourceOps,
    ViewMode,
    Viewing,
)
from cmsdesk.managers.content import ContentManager
from cmsdesk.managers.projects import ProjectManager
from cmsdesk.managers.users import UserManager

__all__ = [
    "ContentManager",
    "Editing",
    "ProjectManager",
    "ResourceManager",
    "ResourceOps",
    "UserManager",
    "ViewMode",
    "Viewing",
]
