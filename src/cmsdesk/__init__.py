"""cmsdesk: client and terminal console for a content-management API."""

__version__ = "0.3.0"
