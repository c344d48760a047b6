"""Synthetic HEAD responses computed from fetched item metadata."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from s3_sharepoint.graph.models import FileFacet

if TYPE_CHECKING:
    from s3_sharepoint.graph.models import CanonicalItem
    from s3_sharepoint.s3.filters import NameFilter

XML_CONTENT_TYPE = "application/xml"


@dataclass(frozen=True)
class HeadResult:
    """Status and headers of a HEAD response; the body is always empty."""

    status_code: int
    content_type: str = XML_CONTENT_TYPE
    size: int = 0


def resolve_head(
    requested_key: str, item: CanonicalItem | None, name_filter: NameFilter
) -> HeadResult:
    """Derive the HEAD answer for ``requested_key``.

    A key ending in ``/`` asks for a folder, any other key for a file. Files
    are additionally subject to the name filter.

    Args:
        requested_key: Key as sent by the S3 client.
        item: Metadata fetched for the key, or None if Graph reported it missing.
        name_filter: Configured file-name gate.

    Returns:
        HeadResult with status 200, 403 or 404.
    """
    if requested_key.endswith("/"):
        if item is not None and item.is_folder:
            return HeadResult(status_code=200)
        return HeadResult(status_code=404)

    if item is None or not isinstance(item.kind, FileFacet):
        return HeadResult(status_code=404)
    if not name_filter.matches(item.name):
        return HeadResult(status_code=403)
    return HeadResult(status_code=200, content_type=item.kind.mime_type, size=item.size or 0)
