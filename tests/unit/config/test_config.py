"""Unit tests for config.py — AppConfig and load_config()."""

import os
from unittest.mock import patch

import pytest

from s3_sharepoint.config import AppConfig, load_config

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

# Minimal set of required environment variables for load_config()
_REQUIRED_ENV = {
    "S3SP_CLIENT_ID": "test-client-id",
    "S3SP_CLIENT_SECRET": "test-secret",
    "S3SP_TENANT_ID": "test-tenant-id",
    "S3SP_SITE_ID": "contoso.sharepoint.com,site-guid,web-guid",
}


def _config(**overrides: object) -> AppConfig:
    values: dict = {"client_id": "cid", "client_secret": "cs", "tenant_id": "tid", "site_id": "sid"}
    values.update(overrides)
    return AppConfig(**values)


# ---------------------------------------------------------------------------
# AppConfig tests
# ---------------------------------------------------------------------------


class TestAppConfig:
    def test_filename_pattern_defaults_to_match_all(self) -> None:
        assert _config().filename_pattern == ""

    def test_max_keys_has_default(self) -> None:
        assert _config().max_keys == 1000

    def test_scopes_built_from_graph_resource(self) -> None:
        assert _config().scopes == ["https://graph.microsoft.com/.default"]

    def test_scopes_ignore_trailing_slash(self) -> None:
        config = _config(graph_resource="https://graph.microsoft.us/")
        assert config.scopes == ["https://graph.microsoft.us/.default"]

    def test_is_immutable(self) -> None:
        config = _config()
        with pytest.raises(AttributeError):
            config.site_id = "other"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# load_config tests
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_reads_required_values_from_env(self) -> None:
        with patch.dict(os.environ, _REQUIRED_ENV, clear=True):
            config = load_config()
        assert config.client_id == "test-client-id"
        assert config.client_secret == "test-secret"
        assert config.tenant_id == "test-tenant-id"
        assert config.site_id == "contoso.sharepoint.com,site-guid,web-guid"

    def test_defaults_when_optional_env_missing(self) -> None:
        with patch.dict(os.environ, _REQUIRED_ENV, clear=True):
            config = load_config()
        assert config.filename_pattern == ""
        assert config.graph_base_url == "https://graph.microsoft.com/v1.0"
        assert config.authority_base_url == "https://login.microsoftonline.com"
        assert config.max_keys == 1000

    def test_reads_optional_values_from_env_when_set(self) -> None:
        env = {
            **_REQUIRED_ENV,
            "S3SP_FILENAME_PATTERN": r"(?i)\.pdf$",
            "S3SP_MAX_KEYS": "200",
            "S3SP_GRAPH_BASE_URL": "https://graph.example/v1.0",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config()
        assert config.filename_pattern == r"(?i)\.pdf$"
        assert config.max_keys == 200
        assert config.graph_base_url == "https://graph.example/v1.0"

    def test_raises_key_error_when_site_id_missing(self) -> None:
        env = {k: v for k, v in _REQUIRED_ENV.items() if k != "S3SP_SITE_ID"}
        with patch.dict(os.environ, env, clear=True), pytest.raises(KeyError):
            load_config()
