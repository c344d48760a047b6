"""Async Graph client for the document library behind the bucket."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from s3_sharepoint.graph.models import (
    CanonicalItem,
    ListQuery,
    ObjectAddress,
    ObjectContent,
    parse_item,
    parse_item_collection,
)
from s3_sharepoint.graph.paths import content_path, file_name_from_key, item_path, translate

if TYPE_CHECKING:
    from s3_sharepoint.config import AppConfig
    from s3_sharepoint.graph.auth import CredentialBroker

logger = logging.getLogger(__name__)

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Status reported for failures that never produced a usable Graph response.
BAD_GATEWAY = 502


class GraphApiError(Exception):
    """Raised when a Graph call fails or returns a body of unexpected shape."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Graph API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class ItemNotFoundError(GraphApiError):
    """Raised when Graph reports that the addressed item does not exist."""


def _error_from_response(response: httpx.Response) -> GraphApiError:
    try:
        detail = response.json().get("error", {}).get("message") or response.reason_phrase
    except (ValueError, AttributeError):
        detail = response.reason_phrase
    if response.status_code == httpx.codes.NOT_FOUND:
        return ItemNotFoundError(response.status_code, detail)
    return GraphApiError(response.status_code, detail)


class CatalogClient:
    """Lists, describes and downloads drive items of a SharePoint site."""

    def __init__(
        self,
        broker: CredentialBroker,
        base_url: str = GRAPH_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialise the catalog client.

        Args:
            broker: Shared credential broker supplying bearer tokens.
            base_url: Graph API base URL.
            transport: Optional httpx transport, used instead of the network.
        """
        self._broker = broker
        self._base_url = base_url.rstrip("/")
        self._transport = transport

    def drive_root_url(self, container_id: str, relative_path: str) -> str:
        return f"{self._base_url}/sites/{container_id}/drive/root{relative_path}"

    async def _get(self, url: str, *, accept_json: bool = True) -> httpx.Response:
        """Perform an authenticated GET, raising on anything but a 2xx answer.

        Raises:
            GraphAuthError: If token acquisition fails.
            ItemNotFoundError: If Graph answers 404.
            GraphApiError: On any other non-2xx status or transport failure.
        """
        token = await self._broker.get_token()
        headers = {"Authorization": f"Bearer {token.value}"}
        if accept_json:
            headers["Accept"] = "application/json"

        try:
            async with httpx.AsyncClient(
                transport=self._transport, follow_redirects=True
            ) as client:
                response = await client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("[_get] Graph request failed; url:%s;error:%s", url, type(exc).__name__)
            raise GraphApiError(BAD_GATEWAY, f"Graph request failed: {exc}") from exc

        if response.is_success:
            return response

        error = _error_from_response(response)
        if isinstance(error, ItemNotFoundError):
            logger.info("[_get] item not found; url:%s", url)
        else:
            logger.error("[_get] Graph returned an error; url:%s;status:%d", url, error.status_code)
        raise error

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise GraphApiError(BAD_GATEWAY, f"Graph returned invalid JSON: {exc}") from exc

    async def list_items(self, query: ListQuery) -> list[CanonicalItem]:
        """List or search the items below ``query.prefix``.

        Args:
            query: Normalized list request.

        Returns:
            Items in the order Graph returned them.

        Raises:
            GraphAuthError: If token acquisition fails.
            GraphApiError: If the call fails or the body is not an item collection.
        """
        relative_path = translate(query.prefix, query.search_query)
        url = f"{self.drive_root_url(query.container_id, relative_path)}?$top={query.max_keys}"
        payload = self._json(await self._get(url))
        try:
            items = parse_item_collection(payload)
        except (ValueError, TypeError) as exc:
            raise GraphApiError(BAD_GATEWAY, f"Unexpected listing payload: {exc}") from exc
        logger.info(
            "[list_items] listed items; prefix:%s;searching:%s;item_count:%d",
            query.prefix,
            bool(query.search_query),
            len(items),
        )
        return items

    async def fetch_metadata(self, address: ObjectAddress) -> CanonicalItem:
        """Fetch the metadata of the item at ``address.key``.

        Raises:
            GraphAuthError: If token acquisition fails.
            ItemNotFoundError: If no item exists at the key.
            GraphApiError: If the call fails or the body is not a drive item.
        """
        url = self.drive_root_url(address.container_id, item_path(address.key))
        payload = self._json(await self._get(url))
        try:
            return parse_item(payload)
        except (ValueError, TypeError) as exc:
            raise GraphApiError(BAD_GATEWAY, f"Unexpected item payload: {exc}") from exc

    async def fetch_content(self, address: ObjectAddress) -> ObjectContent:
        """Download the raw bytes of the file at ``address.key``.

        Raises:
            GraphAuthError: If token acquisition fails.
            ItemNotFoundError: If no file exists at the key.
            GraphApiError: If the download fails.
        """
        url = self.drive_root_url(address.container_id, content_path(address.key))
        response = await self._get(url, accept_json=False)
        content = ObjectContent(
            data=response.content,
            content_type=response.headers.get("Content-Type", DEFAULT_CONTENT_TYPE),
            file_name=file_name_from_key(address.key),
        )
        logger.info(
            "[fetch_content] downloaded object; key:%s;size:%d", address.key, len(content.data)
        )
        return content


def catalog_client_from_config(config: AppConfig, broker: CredentialBroker) -> CatalogClient:
    """Construct a CatalogClient from application configuration.

    Args:
        config: Application configuration instance.
        broker: Credential broker shared by the whole process.

    Returns:
        Configured CatalogClient instance.
    """
    return CatalogClient(broker=broker, base_url=config.graph_base_url)
