"""Error types shared by the API client, the managers and the CLI."""

from __future__ import annotations

from typing import Any


class CmsError(Exception):
    """Base error for everything cmsdesk raises on purpose."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ApiError(CmsError):
    """The server answered with a non-2xx status.

    ``message`` is what the server said, verbatim, so it can be shown to
    the user as-is.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload

    @classmethod
    def from_response(cls, status_code: int, payload: Any) -> ApiError:
        """Build an error from a decoded error body.

        Array messages are joined with ``", "``.  When the body carries no
        usable message the generic ``HTTP error! status: <code>`` is used.
        """
        message: Any = None
        if isinstance(payload, dict):
            message = payload.get("message")
        if isinstance(message, list):
            message = ", ".join(str(m) for m in message)
        if not message:
            message = f"HTTP error! status: {status_code}"
        return cls(str(message), status_code, payload)


class TransportError(CmsError):
    """Network failure or a response body that could not be understood."""


class FormValidationError(CmsError):
    """Client-side validation failed before any request was made."""

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in errors.items()))
        self.errors = dict(errors)
