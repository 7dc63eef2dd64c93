"""Configuration: defaults, then a TOML file, then environment, then CLI flags."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".cmsdesk.toml"
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "cmsdesk" / "config.toml"
DEFAULT_SESSION_PATH = "~/.config/cmsdesk/session.json"

ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "CMSDESK_API_URL": ("api", "base_url"),
    "CMSDESK_SESSION_PATH": ("session", "path"),
}

CLI_OVERRIDES: dict[str, tuple[str, str]] = {
    "api_url": ("api", "base_url"),
    "session_path": ("session", "path"),
    "sort_by": ("display", "sort_by"),
    "descending": ("display", "descending"),
}


class ApiSectionConfig(BaseModel):
    """[api] section.

    ``timeout`` (milliseconds) and ``retry_attempts`` are carried for
    deployments that read them; the client itself does not enforce either.
    """

    base_url: str = "http://localhost:3000/api"
    timeout: int = 10000
    retry_attempts: int = 3


class SessionSectionConfig(BaseModel):
    """[session] section."""

    path: str = DEFAULT_SESSION_PATH

    @property
    def resolved_path(self) -> Path:
        return Path(self.path).expanduser()


class ContentSectionConfig(BaseModel):
    """[content] section."""

    keep_archived_on_edit: bool = False
    order_by: str | None = None
    order_direction: str | None = None


class DisplaySectionConfig(BaseModel):
    """[display] section: client-side list ordering."""

    sort_by: str = "priority"
    descending: bool = True


class CmsConfig(BaseModel):
    """Top-level configuration model."""

    api: ApiSectionConfig = Field(default_factory=ApiSectionConfig)
    session: SessionSectionConfig = Field(default_factory=SessionSectionConfig)
    content: ContentSectionConfig = Field(default_factory=ContentSectionConfig)
    display: DisplaySectionConfig = Field(default_factory=DisplaySectionConfig)


def load_config(path: str | Path | None = None) -> CmsConfig:
    """Build the configuration from defaults, one TOML file and the environment.

    An explicit ``path`` wins.  Otherwise ``.cmsdesk.toml`` in the working
    directory is used, then ``GLOBAL_CONFIG_PATH``.  Environment variables
    are applied on top of whichever file was read.
    """
    toml_path = Path(path) if path is not None else _find_config_file()
    data: dict[str, Any] = {}
    if toml_path is not None:
        if toml_path.exists():
            data = _load_toml(toml_path)
            if data:
                logger.info("Loaded config from %s", toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)

    data = _overlay(data, _env_values())
    return CmsConfig.model_validate(data)


def merge_cli_overrides(config: CmsConfig, **flags: Any) -> CmsConfig:
    """Apply CLI flags that were actually passed; ``None`` means not given."""
    values = {
        CLI_OVERRIDES[name]: value
        for name, value in flags.items()
        if name in CLI_OVERRIDES and value is not None
    }
    return CmsConfig.model_validate(_overlay(config.model_dump(), values))


def _find_config_file() -> Path | None:
    local = Path.cwd() / CONFIG_FILENAME
    if local.exists():
        return local
    if GLOBAL_CONFIG_PATH.exists():
        return GLOBAL_CONFIG_PATH
    return None


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _env_values() -> dict[tuple[str, str], Any]:
    values: dict[tuple[str, str], Any] = {
        key: os.environ[var] for var, key in ENV_OVERRIDES.items() if var in os.environ
    }
    timeout_raw = os.environ.get("CMSDESK_API_TIMEOUT")
    if timeout_raw is not None:
        try:
            values[("api", "timeout")] = int(timeout_raw)
        except ValueError:
            logger.warning("Ignoring non-integer CMSDESK_API_TIMEOUT=%r", timeout_raw)
    return values


def _overlay(data: dict[str, Any], values: dict[tuple[str, str], Any]) -> dict[str, Any]:
    """Set ``section.field`` entries on a raw config dict, creating sections as needed."""
    for (section, field), value in values.items():
        data.setdefault(section, {})[field] = value
    return data
