"""Content-management API client.

One small transport (``request``) plus typed methods per endpoint.  The
transport adds the JSON content type and, when the session holds one, the
bearer token.  The token is read from the session on every call, so a
login or logout takes effect on the next request.

There are no retries, no enforced timeout and no response caching: a
failure is logged and raised to the caller as-is.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from cmsdesk.api.endpoints import ApiEndpoints
from cmsdesk.errors import ApiError, TransportError
from cmsdesk.models import (
    Category,
    CategoryForm,
    Content,
    ContentForm,
    ContentHistory,
    LoginCredentials,
    LoginResponse,
    Project,
    ProjectArea,
    ProjectForm,
    ProjectHistory,
    ProjectStatus,
    ProjectUpdate,
    RegisterRequest,
    Subcategory,
    SubcategoryForm,
    User,
    UserForm,
    UserUpdate,
)
from cmsdesk.session import Session

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

Params = dict[str, str | int | bool | None]


class ApiClient:
    """Client for the content-management REST API."""

    def __init__(self, base_url: str, session: Session | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else Session()

    # ── Transport ────────────────────────────────────────────────

    def request(
        self,
        endpoint: str,
        method: str = "GET",
        data: dict[str, Any] | None = None,
        params: Params | None = None,
    ) -> Any:
        """Make a request and return the decoded JSON body.

        Args:
            endpoint: Path relative to the base URL, e.g. ``/content``.
            method: HTTP method.
            data: JSON body for POST/PATCH.
            params: Query parameters; ``None`` values are dropped.

        Returns:
            The decoded body, or None when the response has no body.

        Raises:
            ApiError: The server answered with a non-2xx status.
            TransportError: The server could not be reached or answered
                with something that is not JSON.
        """
        url = f"{self.base_url}{endpoint}"
        query = _encode_params(params)
        if query:
            url = f"{url}?{query}"

        headers = {"Content-Type": "application/json"}
        token = self.session.token
        if token:
            headers["Authorization"] = f"Bearer {token}"

        body = json.dumps(data).encode("utf-8") if data is not None else None
        req = urllib.request.Request(url, data=body, method=method, headers=headers)
        logger.debug("%s %s", method, url)

        try:
            with urllib.request.urlopen(req) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as exc:
            error = ApiError.from_response(exc.code, _read_error_body(exc))
            logger.warning("API request failed: %s %s -> %s", method, endpoint, error.message)
            raise error from exc
        except urllib.error.URLError as exc:
            logger.warning("API request failed: %s %s", method, endpoint, exc_info=True)
            raise TransportError(f"Could not reach {self.base_url}: {exc.reason}") from exc

        return _decode_body(raw)

    def _get(self, endpoint: str, params: Params | None = None) -> Any:
        return self.request(endpoint, params=params)

    def _post(self, endpoint: str, data: dict[str, Any]) -> Any:
        return self.request(endpoint, method="POST", data=data)

    def _patch(self, endpoint: str, data: dict[str, Any]) -> Any:
        return self.request(endpoint, method="PATCH", data=data)

    def _delete(self, endpoint: str) -> Any:
        return self.request(endpoint, method="DELETE")

    # ── Authentication ───────────────────────────────────────────

    def login(self, credentials: LoginCredentials) -> LoginResponse:
        data = self._post(ApiEndpoints.LOGIN, credentials.model_dump(by_alias=True))
        return _parse(LoginResponse, data)

    def register(self, form: RegisterRequest) -> LoginResponse:
        data = self._post(
            ApiEndpoints.REGISTER,
            form.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        return _parse(LoginResponse, data)

    # ── Users ────────────────────────────────────────────────────

    def list_users(self) -> list[User]:
        return _parse_list(User, self._get(ApiEndpoints.USERS))

    def get_user(self, user_id: int) -> User:
        return _parse(User, self._get(ApiEndpoints.user(user_id)))

    def create_user(self, form: UserForm) -> User:
        return _parse(User, self._post(ApiEndpoints.USERS, form.payload()))

    def update_user(self, user_id: int, form: UserUpdate) -> User:
        return _parse(User, self._patch(ApiEndpoints.user(user_id), form.payload()))

    def delete_user(self, user_id: int) -> None:
        self._delete(ApiEndpoints.user(user_id))

    # ── Content ──────────────────────────────────────────────────

    def list_content(
        self,
        order_by: str | None = None,
        order_direction: str | None = None,
    ) -> list[Content]:
        params: Params = {"orderBy": order_by, "orderDirection": order_direction}
        return _parse_list(Content, self._get(ApiEndpoints.CONTENT, params))

    def get_content(self, content_id: int) -> Content:
        return _parse(Content, self._get(ApiEndpoints.content(content_id)))

    def create_content(self, form: ContentForm) -> Content:
        return _parse(Content, self._post(ApiEndpoints.CONTENT, form.payload()))

    def update_content(self, content_id: int, form: ContentForm) -> Content:
        return _parse(Content, self._patch(ApiEndpoints.content(content_id), form.payload()))

    def delete_content(self, content_id: int) -> None:
        self._delete(ApiEndpoints.content(content_id))

    def content_history(self, content_id: int) -> list[ContentHistory]:
        return _parse_list(ContentHistory, self._get(ApiEndpoints.content_history(content_id)))

    def user_content_history(self, user_id: int) -> list[ContentHistory]:
        return _parse_list(ContentHistory, self._get(ApiEndpoints.user_content_history(user_id)))

    def my_content_history(self) -> list[ContentHistory]:
        return _parse_list(ContentHistory, self._get(ApiEndpoints.MY_CONTENT_HISTORY))

    # ── Categories ───────────────────────────────────────────────

    def list_categories(
        self,
        active: bool | None = None,
        order_by: str | None = None,
        order_direction: str | None = None,
    ) -> list[Category]:
        params: Params = {
            "active": active,
            "orderBy": order_by,
            "orderDirection": order_direction,
        }
        return _parse_list(Category, self._get(ApiEndpoints.CATEGORIES, params))

    def list_public_categories(
        self,
        order_by: str | None = None,
        order_direction: str | None = None,
    ) -> list[Category]:
        params: Params = {"orderBy": order_by, "orderDirection": order_direction}
        return _parse_list(Category, self._get(ApiEndpoints.PUBLIC_CATEGORIES, params))

    def get_category(self, category_id: int) -> Category:
        return _parse(Category, self._get(ApiEndpoints.category(category_id)))

    def create_category(self, form: CategoryForm) -> Category:
        return _parse(Category, self._post(ApiEndpoints.CATEGORIES, form.payload()))

    def update_category(self, category_id: int, form: CategoryForm) -> Category:
        return _parse(Category, self._patch(ApiEndpoints.category(category_id), form.payload()))

    def delete_category(self, category_id: int) -> None:
        self._delete(ApiEndpoints.category(category_id))

    # ── Subcategories ────────────────────────────────────────────

    def list_subcategories(
        self,
        active: bool | None = None,
        order_by: str | None = None,
        order_direction: str | None = None,
    ) -> list[Subcategory]:
        params: Params = {
            "active": active,
            "orderBy": order_by,
            "orderDirection": order_direction,
        }
        return _parse_list(Subcategory, self._get(ApiEndpoints.SUBCATEGORIES, params))

    def get_subcategory(self, subcategory_id: int) -> Subcategory:
        return _parse(Subcategory, self._get(ApiEndpoints.subcategory(subcategory_id)))

    def create_subcategory(self, form: SubcategoryForm) -> Subcategory:
        return _parse(Subcategory, self._post(ApiEndpoints.SUBCATEGORIES, form.payload()))

    def update_subcategory(self, subcategory_id: int, form: SubcategoryForm) -> Subcategory:
        data = self._patch(ApiEndpoints.subcategory(subcategory_id), form.payload())
        return _parse(Subcategory, data)

    def delete_subcategory(self, subcategory_id: int) -> None:
        self._delete(ApiEndpoints.subcategory(subcategory_id))

    # ── Projects ─────────────────────────────────────────────────

    def list_projects(
        self,
        order_by: str | None = None,
        order_direction: str | None = None,
        status_id: int | None = None,
        area_id: int | None = None,
    ) -> list[Project]:
        params: Params = {
            "orderBy": order_by,
            "orderDirection": order_direction,
            "statusId": status_id,
            "areaId": area_id,
        }
        return _parse_list(Project, self._get(ApiEndpoints.PROJECTS, params))

    def get_project(self, project_id: int) -> Project:
        return _parse(Project, self._get(ApiEndpoints.project(project_id)))

    def create_project(self, form: ProjectForm) -> Project:
        return _parse(Project, self._post(ApiEndpoints.PROJECTS, form.payload()))

    def update_project(self, project_id: int, form: ProjectUpdate) -> Project:
        return _parse(Project, self._patch(ApiEndpoints.project(project_id), form.payload()))

    def delete_project(self, project_id: int) -> None:
        self._delete(ApiEndpoints.project(project_id))

    def project_history(self, project_id: int) -> list[ProjectHistory]:
        return _parse_list(ProjectHistory, self._get(ApiEndpoints.project_history(project_id)))

    # ── Project statuses and areas ───────────────────────────────

    def list_project_statuses(
        self,
        active: bool | None = None,
        order_by: str | None = None,
        order_direction: str | None = None,
    ) -> list[ProjectStatus]:
        params: Params = {
            "active": active,
            "orderBy": order_by,
            "orderDirection": order_direction,
        }
        return _parse_list(ProjectStatus, self._get(ApiEndpoints.PROJECT_STATUSES, params))

    def list_public_project_statuses(
        self,
        order_by: str | None = None,
        order_direction: str | None = None,
    ) -> list[ProjectStatus]:
        params: Params = {"orderBy": order_by, "orderDirection": order_direction}
        return _parse_list(ProjectStatus, self._get(ApiEndpoints.PUBLIC_PROJECT_STATUSES, params))

    def create_project_status(self, form: CategoryForm) -> ProjectStatus:
        return _parse(ProjectStatus, self._post(ApiEndpoints.PROJECT_STATUSES, form.payload()))

    def list_project_areas(
        self,
        active: bool | None = None,
        order_by: str | None = None,
        order_direction: str | None = None,
    ) -> list[ProjectArea]:
        params: Params = {
            "active": active,
            "orderBy": order_by,
            "orderDirection": order_direction,
        }
        return _parse_list(ProjectArea, self._get(ApiEndpoints.PROJECT_AREAS, params))

    def list_public_project_areas(
        self,
        order_by: str | None = None,
        order_direction: str | None = None,
    ) -> list[ProjectArea]:
        params: Params = {"orderBy": order_by, "orderDirection": order_direction}
        return _parse_list(ProjectArea, self._get(ApiEndpoints.PUBLIC_PROJECT_AREAS, params))

    def create_project_area(self, form: CategoryForm) -> ProjectArea:
        return _parse(ProjectArea, self._post(ApiEndpoints.PROJECT_AREAS, form.payload()))


# ── Helpers ──────────────────────────────────────────────────────


def _encode_params(params: Params | None) -> str:
    if not params:
        return ""
    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            pairs.append((key, "true" if value else "false"))
        else:
            pairs.append((key, str(value)))
    return urllib.parse.urlencode(pairs)


def _decode_body(raw: bytes) -> Any:
    if not raw.strip():
        return None
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise TransportError("Response body is not valid JSON") from exc


def _read_error_body(exc: urllib.error.HTTPError) -> Any:
    """Best-effort decode of an error response; None when unreadable."""
    try:
        raw = exc.read()
    except OSError:
        return None
    if not raw:
        return None
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None


def _parse(model: type[ModelT], data: Any) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise TransportError(f"Unexpected {model.__name__} payload from API") from exc


def _parse_list(model: type[ModelT], data: Any) -> list[ModelT]:
    try:
        return TypeAdapter(list[model]).validate_python(data)  # type: ignore[valid-type]
    except ValidationError as exc:
        raise TransportError(f"Unexpected {model.__name__} list payload from API") from exc
