"""Object gateway — S3 list/get/head operations over the drive catalog."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from s3_sharepoint.graph.auth import credential_broker_from_config
from s3_sharepoint.graph.catalog import CatalogClient, ItemNotFoundError, catalog_client_from_config
from s3_sharepoint.graph.paths import file_name_from_key
from s3_sharepoint.s3.filters import NameFilter
from s3_sharepoint.s3.head import HeadResult, resolve_head
from s3_sharepoint.s3.responses import render_list_bucket_result

if TYPE_CHECKING:
    from s3_sharepoint.config import AppConfig
    from s3_sharepoint.graph.models import ListQuery, ObjectAddress, ObjectContent

logger = logging.getLogger(__name__)


class AccessDeniedError(Exception):
    """Raised when a requested key's file name fails the configured pattern."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Access denied: {key}")
        self.key = key


class ObjectGateway:
    """Process-wide service root shared by every request.

    Holds the catalog client (and through it the single credential broker)
    and the compiled name filter; neither is mutated after construction
    except for the broker's token cache.
    """

    def __init__(self, catalog: CatalogClient, name_filter: NameFilter) -> None:
        """Initialise the gateway.

        Args:
            catalog: Catalog client bound to the shared credential broker.
            name_filter: File-name gate compiled from configuration.
        """
        self._catalog = catalog
        self.name_filter = name_filter

    async def list_objects(self, query: ListQuery) -> bytes:
        """Run ListObjectsV2 (or a search) and render the ListBucketResult XML.

        Folders are reported as common prefixes for plain listings only;
        search results are flattened to matching files.

        Raises:
            GraphAuthError: If token acquisition fails.
            GraphApiError: If the listing call fails.
        """
        items = await self._catalog.list_items(query)
        return render_list_bucket_result(
            container_id=query.container_id,
            prefix=query.prefix,
            items=items,
            name_filter=self.name_filter,
            include_common_prefixes=not query.search_query,
        )

    async def get_object(self, address: ObjectAddress) -> ObjectContent:
        """Download an object, refusing names the filter rejects without calling Graph.

        Raises:
            AccessDeniedError: If the key's file name fails the pattern.
            GraphAuthError: If token acquisition fails.
            ItemNotFoundError: If the key does not exist or names a folder.
            GraphApiError: If the download fails.
        """
        # A trailing slash (or the bare root) addresses a folder, never a file.
        if address.key.endswith("/") or not file_name_from_key(address.key):
            logger.info("[get_object] folder key requested; key:%s", address.key)
            raise ItemNotFoundError(404, f"Not a file: {address.key}")
        if not self.name_filter.allows_key(address.key):
            logger.warning("[get_object] key refused by filename pattern; key:%s", address.key)
            raise AccessDeniedError(address.key)
        return await self._catalog.fetch_content(address)

    async def head_object(self, address: ObjectAddress) -> HeadResult:
        """Compute a synthetic HEAD response from the item's metadata.

        Only a "not found" answer from Graph is folded into the result; any
        other failure propagates.

        Raises:
            GraphAuthError: If token acquisition fails.
            GraphApiError: If the metadata call fails for another reason.
        """
        try:
            item = await self._catalog.fetch_metadata(address)
        except ItemNotFoundError:
            item = None
        result = resolve_head(address.key, item, self.name_filter)
        logger.info(
            "[head_object] resolved head; key:%s;status:%d", address.key, result.status_code
        )
        return result


def gateway_from_config(config: AppConfig) -> ObjectGateway:
    """Construct an ObjectGateway from application configuration.

    Creates the credential broker and catalog client from the config, then
    wires them into an ObjectGateway together with the compiled filter.

    Args:
        config: Application configuration instance.

    Returns:
        Configured ObjectGateway instance.
    """
    broker = credential_broker_from_config(config)
    catalog = catalog_client_from_config(config, broker)
    return ObjectGateway(catalog=catalog, name_filter=NameFilter(config.filename_pattern))
