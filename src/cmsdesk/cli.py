"""CLI interface for cmsdesk."""

import html
import logging
import re
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from cmsdesk.api.client import ApiClient
from cmsdesk.auth import AuthManager
from cmsdesk.catalog import CategoryCatalog
from cmsdesk.config import CmsConfig, load_config, merge_cli_overrides
from cmsdesk.errors import CmsError, FormValidationError
from cmsdesk.managers import ContentManager, ProjectManager, UserManager
from cmsdesk.managers.base import ResourceManager
from cmsdesk.models import (
    ContentForm,
    ContentStatus,
    LoginCredentials,
    ProjectForm,
    ProjectUpdate,
    RegisterRequest,
    UserForm,
    UserRole,
    UserUpdate,
)
from cmsdesk.session import Session

app = typer.Typer(
    name="cmsdesk",
    help="Manage content, projects and users on a content-management API.",
    no_args_is_help=True,
)
content_app = typer.Typer(help="List, create, edit and delete content.", no_args_is_help=True)
projects_app = typer.Typer(help="List, create, edit and delete projects.", no_args_is_help=True)
users_app = typer.Typer(help="List, create, edit and delete users.", no_args_is_help=True)
app.add_typer(content_app, name="content")
app.add_typer(projects_app, name="projects")
app.add_typer(users_app, name="users")

console = Console()
err_console = Console(stderr=True)

_TAG_RE = re.compile(r"<[^>]+>")
SUMMARY_LENGTH = 150


@dataclass
class AppState:
    config: CmsConfig
    session: Session
    api: ApiClient


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from cmsdesk import __version__

        console.print(f"cmsdesk {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .cmsdesk.toml file."),
    ] = None,
    api_url: Annotated[
        Optional[str],
        typer.Option("--api-url", help="Base URL of the API, e.g. http://localhost:3000/api."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log requests and manager activity."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """cmsdesk - content-management console."""
    _configure_logging(verbose)
    config = merge_cli_overrides(load_config(config_path), api_url=api_url)
    session = Session.from_path(config.session.resolved_path)
    ctx.obj = AppState(
        config=config,
        session=session,
        api=ApiClient(config.api.base_url, session),
    )


# ── Helpers ──────────────────────────────────────────────────────


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)


@contextmanager
def _handled() -> Iterator[None]:
    """Turn validation and API failures into a red message and exit 1."""
    try:
        yield
    except FormValidationError as exc:
        console.print("[red]Error:[/red] Please fix the following:")
        for field, message in exc.errors.items():
            console.print(f"  - {field}: {message}")
        raise typer.Exit(1) from None
    except CmsError as exc:
        _fail(exc.message)


def _signed_in(ctx: typer.Context) -> AppState:
    state: AppState = ctx.obj
    auth = AuthManager(state.api, state.session)
    if not auth.is_authenticated:
        _fail("Not signed in. Run 'cmsdesk login' first.")
    return state


def _mounted(manager: ResourceManager) -> None:
    manager.mount()
    if manager.error:
        _fail(manager.error)


def _confirm(yes: bool):
    return lambda prompt: yes or typer.confirm(prompt)


def _plain(text: str, limit: int | None = SUMMARY_LENGTH) -> str:
    """Strip rich-text markup for terminal display."""
    plain = html.unescape(_TAG_RE.sub(" ", text))
    plain = " ".join(plain.split())
    if limit is not None and len(plain) > limit:
        return plain[:limit] + "..."
    return plain


def _when(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"


# ── Auth ─────────────────────────────────────────────────────────


@app.command()
def login(
    ctx: typer.Context,
    email: Annotated[str, typer.Option("--email", "-e", prompt=True, help="Account email.")],
    password: Annotated[
        str, typer.Option("--password", "-p", prompt=True, hide_input=True, help="Password.")
    ],
) -> None:
    """Sign in and store the session."""
    state: AppState = ctx.obj
    auth = AuthManager(state.api, state.session)
    with _handled():
        ok = auth.login(LoginCredentials(email=email, password=password))
    if not ok:
        _fail(auth.error or "Authentication failed")
    console.print(f"[green]Signed in as {auth.user.name} ({auth.user.email})[/green]")


@app.command()
def register(
    ctx: typer.Context,
    name: Annotated[str, typer.Option("--name", prompt=True, help="Display name.")],
    email: Annotated[str, typer.Option("--email", "-e", prompt=True, help="Account email.")],
    password: Annotated[
        str,
        typer.Option(
            "--password", "-p", prompt=True, hide_input=True, confirmation_prompt=True,
            help="Password (at least 6 characters).",
        ),
    ],
    role: Annotated[
        Optional[UserRole], typer.Option("--role", help="admin or creator.")
    ] = None,
) -> None:
    """Create an account and sign in with it."""
    state: AppState = ctx.obj
    auth = AuthManager(state.api, state.session)
    with _handled():
        ok = auth.register(RegisterRequest(name=name, email=email, password=password, role=role))
    if not ok:
        _fail(auth.error or "Registration failed")
    console.print(f"[green]Registered and signed in as {auth.user.email}[/green]")


@app.command()
def logout(ctx: typer.Context) -> None:
    """Forget the stored session."""
    state: AppState = ctx.obj
    AuthManager(state.api, state.session).logout()
    console.print("Signed out.")


@app.command()
def whoami(ctx: typer.Context) -> None:
    """Show the signed-in user."""
    state: AppState = ctx.obj
    auth = AuthManager(state.api, state.session)
    if not auth.is_authenticated:
        console.print("[yellow]Not signed in.[/yellow]")
        raise typer.Exit(1)
    user = auth.user
    console.print(f"{user.name} <{user.email}> ({user.role})")


# ── Content ──────────────────────────────────────────────────────


def _content_manager(state: AppState) -> ContentManager:
    return ContentManager(
        state.api,
        keep_archived_on_edit=state.config.content.keep_archived_on_edit,
        order_by=state.config.content.order_by,
        order_direction=state.config.content.order_direction,
    )


@content_app.command("list")
def content_list(
    ctx: typer.Context,
    search: Annotated[str, typer.Option("--search", "-s", help="Match title, text or tag.")] = "",
    category: Annotated[Optional[int], typer.Option("--category", help="Category id.")] = None,
    status: Annotated[Optional[ContentStatus], typer.Option("--status")] = None,
    sort_by: Annotated[
        Optional[str], typer.Option("--sort", help="priority, title, createdAt or updatedAt.")
    ] = None,
    ascending: Annotated[bool, typer.Option("--asc", help="Sort ascending.")] = False,
) -> None:
    """List content items."""
    state = _signed_in(ctx)
    manager = _content_manager(state)
    _mounted(manager)
    display = state.config.display
    items = manager.filter_and_sort(
        search=search,
        category_id=category,
        status=status,
        sort_by=sort_by or display.sort_by,
        descending=not ascending if (sort_by or ascending) else display.descending,
    )

    table = Table(title=f"{len(items)} of {len(manager.items)} content items")
    table.add_column("ID", justify="right")
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Priority", justify="right")
    table.add_column("Category")
    table.add_column("Updated")
    for item in items:
        table.add_row(
            str(item.id),
            item.title,
            item.status.value,
            str(item.priority),
            item.category.name if item.category else "-",
            _when(item.updated_at),
        )
    console.print(table)


@content_app.command("show")
def content_show(
    ctx: typer.Context,
    content_id: Annotated[int, typer.Argument(help="Content id.")],
) -> None:
    """Show one content item."""
    state = _signed_in(ctx)
    manager = _content_manager(state)
    _mounted(manager)
    record = manager.find(content_id)
    if record is None:
        _fail(f"Content {content_id} not found")
    manager.go_to_detail(record)
    item = manager.selected

    lines = [
        f"[bold]Status:[/bold] {item.status.value}    [bold]Priority:[/bold] {item.priority}",
        f"[bold]Category:[/bold] {item.category.name if item.category else '-'}"
        f" / {item.subcategory.name if item.subcategory else '-'}",
        f"[bold]Tags:[/bold] {', '.join(item.tags) or '-'}",
        f"[bold]Author:[/bold] {item.author.name if item.author else item.author_id}",
        f"[bold]Created:[/bold] {_when(item.created_at)}    "
        f"[bold]Updated:[/bold] {_when(item.updated_at)}",
        "",
        _plain(item.description, limit=None),
    ]
    console.print(Panel("\n".join(lines), title=f"#{item.id} {item.title}"))


@content_app.command("create")
def content_create(
    ctx: typer.Context,
    title: Annotated[str, typer.Option("--title", "-t", prompt=True)],
    description: Annotated[
        Optional[str], typer.Option("--description", "-d", help="Body (HTML allowed).")
    ] = None,
    description_file: Annotated[
        Optional[Path],
        typer.Option("--description-file", exists=True, dir_okay=False, help="Read body from file."),
    ] = None,
    category: Annotated[Optional[int], typer.Option("--category")] = None,
    subcategory: Annotated[Optional[int], typer.Option("--subcategory")] = None,
    tags: Annotated[Optional[list[str]], typer.Option("--tag", help="Repeat for several.")] = None,
    status: Annotated[ContentStatus, typer.Option("--status")] = ContentStatus.DRAFT,
    priority: Annotated[Optional[int], typer.Option("--priority", help="1 to 100.")] = None,
) -> None:
    """Create a content item."""
    state = _signed_in(ctx)
    if description_file is not None:
        description = description_file.read_text(encoding="utf-8")
    form = ContentForm(
        title=title,
        description=description or "",
        category_id=category,
        subcategory_id=subcategory,
        status=status,
        priority=priority,
    )
    for tag in tags or []:
        form.add_tag(tag)
    manager = _content_manager(state)
    manager.go_to_create()
    with _handled():
        record = manager.create(form)
    console.print(f"[green]Created content {record.id}: {record.title}[/green]")


@content_app.command("edit")
def content_edit(
    ctx: typer.Context,
    content_id: Annotated[int, typer.Argument(help="Content id.")],
    title: Annotated[Optional[str], typer.Option("--title", "-t")] = None,
    description: Annotated[Optional[str], typer.Option("--description", "-d")] = None,
    description_file: Annotated[
        Optional[Path], typer.Option("--description-file", exists=True, dir_okay=False)
    ] = None,
    category: Annotated[Optional[int], typer.Option("--category")] = None,
    subcategory: Annotated[Optional[int], typer.Option("--subcategory")] = None,
    tags: Annotated[
        Optional[list[str]], typer.Option("--tag", help="Replaces the tag list.")
    ] = None,
    status: Annotated[Optional[ContentStatus], typer.Option("--status")] = None,
    priority: Annotated[Optional[int], typer.Option("--priority")] = None,
) -> None:
    """Edit a content item.  Options left out keep their current value."""
    state = _signed_in(ctx)
    manager = _content_manager(state)
    _mounted(manager)
    record = manager.find(content_id)
    if record is None:
        _fail(f"Content {content_id} not found")
    manager.go_to_edit(record)
    form = manager.form_for_edit(record)

    if description_file is not None:
        description = description_file.read_text(encoding="utf-8")
    overrides = {
        "title": title,
        "description": description,
        "category_id": category,
        "subcategory_id": subcategory,
        "status": status,
        "priority": priority,
    }
    form = form.model_copy(update={k: v for k, v in overrides.items() if v is not None})
    if category is not None and category != record.category_id and subcategory is None:
        form.subcategory_id = None
    if tags is not None:
        form.tags = []
        for tag in tags:
            form.add_tag(tag)
    if record.status == ContentStatus.ARCHIVED and form.status == ContentStatus.DRAFT and status is None:
        console.print("[yellow]Archived content is saved back as draft.[/yellow]")

    with _handled():
        updated = manager.update(content_id, form)
    console.print(f"[green]Updated content {updated.id}: {updated.title}[/green]")


@content_app.command("delete")
def content_delete(
    ctx: typer.Context,
    content_id: Annotated[int, typer.Argument(help="Content id.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation.")] = False,
) -> None:
    """Delete a content item."""
    state = _signed_in(ctx)
    manager = _content_manager(state)
    with _handled():
        deleted = manager.delete(content_id, _confirm(yes))
    console.print(f"Deleted content {content_id}." if deleted else "Cancelled.")


@content_app.command("history")
def content_history(
    ctx: typer.Context,
    content_id: Annotated[int, typer.Argument(help="Content id.")],
) -> None:
    """Show the change history of a content item."""
    state = _signed_in(ctx)
    manager = _content_manager(state)
    with _handled():
        entries = manager.history(content_id)
    table = Table(title=f"History of content {content_id}")
    table.add_column("When")
    table.add_column("Action")
    table.add_column("By")
    table.add_column("Changes")
    for entry in entries:
        table.add_row(_when(entry.created_at), entry.action.value, entry.user.name, entry.changes)
    console.print(table)


@content_app.command("docs")
def content_docs(ctx: typer.Context) -> None:
    """Browse published content by category and subcategory."""
    state = _signed_in(ctx)
    catalog = CategoryCatalog(state.api)
    catalog.load()
    if catalog.error:
        _fail(catalog.error)
    manager = _content_manager(state)
    _mounted(manager)
    manager.go_to_documentation()

    tree = Tree("[bold]Documentation[/bold]")
    for category in catalog.categories:
        branch = tree.add(f"{category.name} ({len(category.subcategories)})")
        for sub in category.subcategories:
            published = manager.published_in(sub.id)
            leaf = branch.add(f"{sub.name} ({len(published)})")
            for item in published:
                leaf.add(f"#{item.id} {item.title}")
    console.print(tree)


# ── Categories ───────────────────────────────────────────────────


@app.command()
def categories(ctx: typer.Context) -> None:
    """Show the category tree."""
    state = _signed_in(ctx)
    catalog = CategoryCatalog(state.api)
    catalog.load()
    if catalog.error:
        _fail(catalog.error)
    tree = Tree("[bold]Categories[/bold]")
    for category in catalog.categories:
        branch = tree.add(f"[{category.id}] {category.name}")
        for sub in category.subcategories:
            branch.add(f"[{sub.id}] {sub.name}")
    console.print(tree)


# ── Projects ─────────────────────────────────────────────────────


@projects_app.command("list")
def projects_list(
    ctx: typer.Context,
    search: Annotated[str, typer.Option("--search", "-s")] = "",
    status: Annotated[Optional[int], typer.Option("--status", help="Status id.")] = None,
    area: Annotated[Optional[int], typer.Option("--area", help="Area id.")] = None,
    author: Annotated[Optional[int], typer.Option("--author", help="Author user id.")] = None,
    sort_by: Annotated[Optional[str], typer.Option("--sort")] = None,
    ascending: Annotated[bool, typer.Option("--asc")] = False,
) -> None:
    """List projects."""
    state = _signed_in(ctx)
    manager = ProjectManager(state.api)
    _mounted(manager)
    display = state.config.display
    items = manager.filter_and_sort(
        search=search,
        status_id=status,
        area_id=area,
        author_id=author,
        sort_by=sort_by or display.sort_by,
        descending=not ascending if (sort_by or ascending) else display.descending,
    )

    table = Table(title=f"{len(items)} of {len(manager.items)} projects")
    table.add_column("ID", justify="right")
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Area")
    table.add_column("Priority", justify="right")
    table.add_column("Updated")
    for project in items:
        table.add_row(
            str(project.id),
            project.title,
            manager.status_name(project.status_id),
            manager.area_name(project.area_id),
            str(project.priority),
            _when(project.updated_at),
        )
    console.print(table)


@projects_app.command("show")
def projects_show(
    ctx: typer.Context,
    project_id: Annotated[int, typer.Argument(help="Project id.")],
) -> None:
    """Show one project."""
    state = _signed_in(ctx)
    manager = ProjectManager(state.api)
    _mounted(manager)
    record = manager.find(project_id)
    if record is None:
        _fail(f"Project {project_id} not found")
    manager.go_to_detail(record)
    project = manager.selected

    lines = [
        f"[bold]Status:[/bold] {manager.status_name(project.status_id)}    "
        f"[bold]Area:[/bold] {manager.area_name(project.area_id)}    "
        f"[bold]Priority:[/bold] {project.priority}",
        f"[bold]Author:[/bold] {project.author.name if project.author else project.author_id}",
        f"[bold]Created:[/bold] {_when(project.created_at)}    "
        f"[bold]Updated:[/bold] {_when(project.updated_at)}",
        "",
        f"[bold]Target:[/bold] {_plain(project.target, limit=None)}",
        "",
        _plain(project.description, limit=None),
    ]
    if project.conclusion:
        lines += ["", f"[bold]Conclusion:[/bold] {_plain(project.conclusion, limit=None)}"]
    console.print(Panel("\n".join(lines), title=f"#{project.id} {project.title}"))


@projects_app.command("create")
def projects_create(
    ctx: typer.Context,
    title: Annotated[str, typer.Option("--title", "-t", prompt=True)],
    description: Annotated[str, typer.Option("--description", "-d", prompt=True)],
    target: Annotated[str, typer.Option("--target", prompt=True)],
    status: Annotated[int, typer.Option("--status", prompt=True, help="Status id.")],
    area: Annotated[int, typer.Option("--area", prompt=True, help="Area id.")],
    conclusion: Annotated[Optional[str], typer.Option("--conclusion")] = None,
    priority: Annotated[Optional[int], typer.Option("--priority")] = None,
) -> None:
    """Create a project."""
    state = _signed_in(ctx)
    manager = ProjectManager(state.api)
    manager.go_to_create()
    form = ProjectForm(
        title=title,
        description=description,
        target=target,
        conclusion=conclusion,
        status_id=status,
        area_id=area,
        priority=priority,
    )
    with _handled():
        record = manager.create(form)
    console.print(f"[green]Created project {record.id}: {record.title}[/green]")


@projects_app.command("edit")
def projects_edit(
    ctx: typer.Context,
    project_id: Annotated[int, typer.Argument(help="Project id.")],
    title: Annotated[Optional[str], typer.Option("--title", "-t")] = None,
    description: Annotated[Optional[str], typer.Option("--description", "-d")] = None,
    target: Annotated[Optional[str], typer.Option("--target")] = None,
    conclusion: Annotated[Optional[str], typer.Option("--conclusion")] = None,
    status: Annotated[Optional[int], typer.Option("--status")] = None,
    area: Annotated[Optional[int], typer.Option("--area")] = None,
    priority: Annotated[Optional[int], typer.Option("--priority")] = None,
) -> None:
    """Edit a project.  Only the options given are sent."""
    state = _signed_in(ctx)
    manager = ProjectManager(state.api)
    _mounted(manager)
    record = manager.find(project_id)
    if record is None:
        _fail(f"Project {project_id} not found")
    manager.go_to_edit(record)
    form = ProjectUpdate(
        title=title,
        description=description,
        target=target,
        conclusion=conclusion,
        status_id=status,
        area_id=area,
        priority=priority,
    )
    with _handled():
        updated = manager.update(project_id, form)
    console.print(f"[green]Updated project {updated.id}: {updated.title}[/green]")


@projects_app.command("delete")
def projects_delete(
    ctx: typer.Context,
    project_id: Annotated[int, typer.Argument(help="Project id.")],
    yes: Annotated[bool, typer.Option("--yes", "-y")] = False,
) -> None:
    """Delete a project."""
    state = _signed_in(ctx)
    manager = ProjectManager(state.api)
    with _handled():
        deleted = manager.delete(project_id, _confirm(yes))
    console.print(f"Deleted project {project_id}." if deleted else "Cancelled.")


@projects_app.command("history")
def projects_history(
    ctx: typer.Context,
    project_id: Annotated[int, typer.Argument(help="Project id.")],
) -> None:
    """Show the change history of a project."""
    state = _signed_in(ctx)
    manager = ProjectManager(state.api)
    with _handled():
        entries = manager.history(project_id)
    table = Table(title=f"History of project {project_id}")
    table.add_column("When")
    table.add_column("Action")
    table.add_column("By")
    table.add_column("Changes")
    for entry in entries:
        table.add_row(_when(entry.created_at), entry.action.value, entry.user.name, entry.changes)
    console.print(table)


# ── Users ────────────────────────────────────────────────────────


@users_app.command("list")
def users_list(ctx: typer.Context) -> None:
    """List users."""
    state = _signed_in(ctx)
    manager = UserManager(state.api)
    _mounted(manager)
    table = Table(title=f"{len(manager.items)} users")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Email")
    table.add_column("Role")
    table.add_column("Created")
    for user in manager.items:
        table.add_row(str(user.id), user.name, user.email, user.role.value, _when(user.created_at))
    console.print(table)


@users_app.command("create")
def users_create(
    ctx: typer.Context,
    name: Annotated[str, typer.Option("--name", prompt=True)],
    email: Annotated[str, typer.Option("--email", "-e", prompt=True)],
    password: Annotated[str, typer.Option("--password", "-p", prompt=True, hide_input=True)],
    role: Annotated[UserRole, typer.Option("--role")] = UserRole.CREATOR,
) -> None:
    """Create a user."""
    state = _signed_in(ctx)
    manager = UserManager(state.api)
    manager.go_to_create()
    with _handled():
        user = manager.create(UserForm(name=name, email=email, password=password, role=role))
    console.print(f"[green]Created user {user.id}: {user.email}[/green]")


@users_app.command("edit")
def users_edit(
    ctx: typer.Context,
    user_id: Annotated[int, typer.Argument(help="User id.")],
    name: Annotated[Optional[str], typer.Option("--name")] = None,
    email: Annotated[Optional[str], typer.Option("--email", "-e")] = None,
    password: Annotated[
        Optional[str], typer.Option("--password", "-p", help="Leave out to keep the current one.")
    ] = None,
    role: Annotated[Optional[UserRole], typer.Option("--role")] = None,
) -> None:
    """Edit a user."""
    state = _signed_in(ctx)
    manager = UserManager(state.api)
    _mounted(manager)
    record = manager.find(user_id)
    if record is None:
        _fail(f"User {user_id} not found")
    manager.go_to_edit(record)
    form = UserUpdate(name=name, email=email, password=password, role=role)
    with _handled():
        user = manager.update(user_id, form)
    console.print(f"[green]Updated user {user.id}: {user.email}[/green]")


@users_app.command("delete")
def users_delete(
    ctx: typer.Context,
    user_id: Annotated[int, typer.Argument(help="User id.")],
    yes: Annotated[bool, typer.Option("--yes", "-y")] = False,
) -> None:
    """Delete a user."""
    state = _signed_in(ctx)
    manager = UserManager(state.api)
    with _handled():
        deleted = manager.delete(user_id, _confirm(yes))
    console.print(f"Deleted user {user_id}." if deleted else "Cancelled.")
