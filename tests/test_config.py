"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from cmsdesk import config as config_module
from cmsdesk.config import CmsConfig, load_config, merge_cli_overrides


@pytest.fixture(autouse=True)
def _isolated(tmp_path, monkeypatch):
    """Keep the real home directory and environment out of the tests."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "GLOBAL_CONFIG_PATH", tmp_path / "global.toml")
    for var in ("CMSDESK_API_URL", "CMSDESK_API_TIMEOUT", "CMSDESK_SESSION_PATH"):
        monkeypatch.delenv(var, raising=False)


class TestDefaults:
    def test_defaults(self):
        cfg = load_config()
        assert cfg.api.base_url == "http://localhost:3000/api"
        assert cfg.api.timeout == 10000
        assert cfg.api.retry_attempts == 3
        assert cfg.content.keep_archived_on_edit is False
        assert cfg.display.sort_by == "priority"
        assert cfg.display.descending is True

    def test_session_path_expands_home(self):
        cfg = CmsConfig()
        assert cfg.session.resolved_path == Path.home() / ".config" / "cmsdesk" / "session.json"


class TestLoadConfig:
    def test_explicit_path(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text(
            '[api]\nbase_url = "https://cms.example.com/api"\n'
            "[content]\nkeep_archived_on_edit = true\n"
        )
        cfg = load_config(path)
        assert cfg.api.base_url == "https://cms.example.com/api"
        assert cfg.content.keep_archived_on_edit is True

    def test_cwd_file(self, tmp_path):
        (tmp_path / ".cmsdesk.toml").write_text(
            '[display]\nsort_by = "title"\ndescending = false\n'
        )
        cfg = load_config()
        assert cfg.display.sort_by == "title"
        assert cfg.display.descending is False

    def test_global_file_when_no_local(self, tmp_path):
        (tmp_path / "global.toml").write_text('[session]\npath = "/tmp/s.json"\n')
        cfg = load_config()
        assert cfg.session.path == "/tmp/s.json"

    def test_local_wins_over_global(self, tmp_path):
        (tmp_path / "global.toml").write_text('[api]\nbase_url = "http://global"\n')
        (tmp_path / ".cmsdesk.toml").write_text('[api]\nbase_url = "http://local"\n')
        assert load_config().api.base_url == "http://local"

    def test_missing_explicit_path_uses_defaults(self, tmp_path):
        cfg = load_config(tmp_path / "nope.toml")
        assert cfg.api.base_url == "http://localhost:3000/api"

    def test_invalid_toml_uses_defaults(self, tmp_path):
        path = tmp_path / "broken.toml"
        path.write_text("[api\nbase_url = ")
        cfg = load_config(path)
        assert cfg.api.base_url == "http://localhost:3000/api"


class TestEnvOverlay:
    def test_env_overrides_file(self, tmp_path, monkeypatch):
        (tmp_path / ".cmsdesk.toml").write_text('[api]\nbase_url = "http://file"\n')
        monkeypatch.setenv("CMSDESK_API_URL", "http://env")
        monkeypatch.setenv("CMSDESK_SESSION_PATH", "/var/cms/session.json")
        cfg = load_config()
        assert cfg.api.base_url == "http://env"
        assert cfg.session.path == "/var/cms/session.json"

    def test_env_fills_section_missing_from_file(self, tmp_path, monkeypatch):
        (tmp_path / ".cmsdesk.toml").write_text("[display]\nsort_by = \"title\"\n")
        monkeypatch.setenv("CMSDESK_API_URL", "http://env")
        cfg = load_config()
        assert cfg.api.base_url == "http://env"
        assert cfg.display.sort_by == "title"

    def test_timeout_from_env(self, monkeypatch):
        monkeypatch.setenv("CMSDESK_API_TIMEOUT", "2500")
        assert load_config().api.timeout == 2500

    def test_bad_timeout_ignored(self, monkeypatch):
        monkeypatch.setenv("CMSDESK_API_TIMEOUT", "soon")
        assert load_config().api.timeout == 10000


class TestMergeCliOverrides:
    def test_only_explicit_flags_apply(self):
        cfg = merge_cli_overrides(CmsConfig(), api_url="http://flag", session_path=None)
        assert cfg.api.base_url == "http://flag"
        assert cfg.session.path == CmsConfig().session.path

    def test_display_flags(self):
        cfg = merge_cli_overrides(CmsConfig(), sort_by="updatedAt", descending=False)
        assert cfg.display.sort_by == "updatedAt"
        assert cfg.display.descending is False

    def test_unknown_flags_ignored(self):
        cfg = merge_cli_overrides(CmsConfig(), verbose=True)
        assert cfg == CmsConfig()
