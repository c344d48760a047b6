"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass

DEFAULT_GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
DEFAULT_AUTHORITY_BASE_URL = "https://login.microsoftonline.com"
DEFAULT_GRAPH_RESOURCE = "https://graph.microsoft.com"
DEFAULT_MAX_KEYS = 1000


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    Required fields have no defaults and will cause a KeyError at startup
    if the corresponding environment variable is missing. The remaining
    values have sensible defaults but can be overridden via environment
    variables.
    """

    # Required — no defaults, fail at startup if missing
    client_id: str
    client_secret: str
    tenant_id: str
    site_id: str

    # Defaults provided, overridable via env
    filename_pattern: str = ""
    graph_base_url: str = DEFAULT_GRAPH_BASE_URL
    authority_base_url: str = DEFAULT_AUTHORITY_BASE_URL
    graph_resource: str = DEFAULT_GRAPH_RESOURCE
    max_keys: int = DEFAULT_MAX_KEYS

    @property
    def scopes(self) -> list[str]:
        """Client-credentials scopes for the configured Graph resource."""
        return [f"{self.graph_resource.rstrip('/')}/.default"]


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Required environment variables:
        S3SP_CLIENT_ID: Entra ID application (client) ID.
        S3SP_CLIENT_SECRET: Entra ID application client secret.
        S3SP_TENANT_ID: Entra ID tenant ID.
        S3SP_SITE_ID: SharePoint site ID whose default document library is
            exposed as the bucket.

    Optional environment variables (with defaults):
        S3SP_FILENAME_PATTERN: Regular expression file names must match to be
            listed or read (default: empty, matches everything).
        S3SP_GRAPH_BASE_URL: Graph API base URL.
        S3SP_AUTHORITY_BASE_URL: Identity platform base URL.
        S3SP_GRAPH_RESOURCE: Resource the client-credentials scope is built from.
        S3SP_MAX_KEYS: Default page size for listings (default: 1000).

    Returns:
        Configured AppConfig instance.
    """
    return AppConfig(
        client_id=os.environ["S3SP_CLIENT_ID"],
        client_secret=os.environ["S3SP_CLIENT_SECRET"],
        tenant_id=os.environ["S3SP_TENANT_ID"],
        site_id=os.environ["S3SP_SITE_ID"],
        filename_pattern=os.environ.get("S3SP_FILENAME_PATTERN", ""),
        graph_base_url=os.environ.get("S3SP_GRAPH_BASE_URL", DEFAULT_GRAPH_BASE_URL),
        authority_base_url=os.environ.get(
            "S3SP_AUTHORITY_BASE_URL", DEFAULT_AUTHORITY_BASE_URL
        ),
        graph_resource=os.environ.get("S3SP_GRAPH_RESOURCE", DEFAULT_GRAPH_RESOURCE),
        max_keys=int(os.environ.get("S3SP_MAX_KEYS", str(DEFAULT_MAX_KEYS))),
    )
