"""HTTP access to the content-management API."""

from cmsdesk.api.client import ApiClient
from cmsdesk.api.endpoints import ApiEndpoints

__all__ = [
    "ApiClient",
    "ApiEndpoints",
]
