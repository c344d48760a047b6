"""Data models for Graph drive items and the S3 requests mapped onto them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union
from urllib.parse import quote

# Graph API JSON field names
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_WEB_URL = "webUrl"
FIELD_CREATED = "createdDateTime"
FIELD_LAST_MODIFIED = "lastModifiedDateTime"
FIELD_ETAG = "eTag"
FIELD_SIZE = "size"
FIELD_FOLDER = "folder"
FIELD_FILE = "file"
FIELD_CHILD_COUNT = "childCount"
FIELD_MIME_TYPE = "mimeType"

# OData response keys
ODATA_VALUE = "value"

DEFAULT_PREFIX = "/"
DEFAULT_MAX_KEYS = 1000


@dataclass(frozen=True)
class FolderFacet:
    """Marks a drive item as a folder."""

    child_count: int


@dataclass(frozen=True)
class FileFacet:
    """Marks a drive item as a file."""

    mime_type: str


ItemKind = Union[FolderFacet, FileFacet]


@dataclass(frozen=True)
class CanonicalItem:
    """A file or folder entry of the document library.

    ``kind`` is None when Graph returned neither a ``folder`` nor a ``file``
    facet (e.g. packages or notebooks); such items are never rendered.
    """

    id: str
    name: str
    web_url: str
    created_at: str
    last_modified_at: str | None = None
    e_tag: str | None = None
    size: int | None = None
    kind: ItemKind | None = None

    @property
    def is_folder(self) -> bool:
        return isinstance(self.kind, FolderFacet)

    @property
    def is_file(self) -> bool:
        return isinstance(self.kind, FileFacet)


@dataclass(frozen=True)
class ListQuery:
    """Normalized ListObjectsV2 / search request."""

    container_id: str
    prefix: str = DEFAULT_PREFIX
    max_keys: int = DEFAULT_MAX_KEYS
    search_query: str | None = None


@dataclass(frozen=True)
class ObjectAddress:
    """S3 ``(bucket, key)`` pair; the bucket is the SharePoint site ID."""

    container_id: str
    key: str


@dataclass(frozen=True)
class ObjectContent:
    """Downloaded object body plus what is needed to serve it."""

    data: bytes
    content_type: str
    file_name: str

    @property
    def content_disposition(self) -> str:
        """``attachment`` header value with an ASCII fallback and an RFC 5987 UTF-8 name."""
        fallback = self.file_name.encode("ascii", "replace").decode("ascii")
        fallback = fallback.replace("\\", "\\\\").replace('"', '\\"')
        encoded = quote(self.file_name, safe="")
        return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{encoded}"


def _require_str(raw: dict[str, Any], field: str) -> str:
    value = raw.get(field)
    if not isinstance(value, str):
        raise ValueError(f"drive item field {field!r} missing or not a string")
    return value


def _optional_str(raw: dict[str, Any], field: str) -> str | None:
    value = raw.get(field)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"drive item field {field!r} is not a string")
    return value


def _parse_kind(raw: dict[str, Any]) -> ItemKind | None:
    folder = raw.get(FIELD_FOLDER)
    file = raw.get(FIELD_FILE)
    if folder is not None and file is not None:
        raise ValueError("drive item has both folder and file facets")
    if isinstance(folder, dict):
        return FolderFacet(child_count=int(folder.get(FIELD_CHILD_COUNT) or 0))
    if isinstance(file, dict):
        # Graph omits mimeType for some file types.
        mime_type = file.get(FIELD_MIME_TYPE) or "application/octet-stream"
        return FileFacet(mime_type=str(mime_type))
    if folder is not None or file is not None:
        raise ValueError("drive item facet is not an object")
    return None


def parse_item(raw: Any) -> CanonicalItem:
    """Map a raw Graph driveItem dict to a CanonicalItem.

    Raises:
        ValueError: If required fields are missing or have the wrong type.
    """
    if not isinstance(raw, dict):
        raise ValueError("drive item is not a JSON object")

    size = raw.get(FIELD_SIZE)
    if size is not None and (isinstance(size, bool) or not isinstance(size, int) or size < 0):
        raise ValueError(f"drive item field {FIELD_SIZE!r} is not a non-negative integer")

    return CanonicalItem(
        id=_require_str(raw, FIELD_ID),
        name=_require_str(raw, FIELD_NAME),
        web_url=_require_str(raw, FIELD_WEB_URL),
        created_at=_require_str(raw, FIELD_CREATED),
        last_modified_at=_optional_str(raw, FIELD_LAST_MODIFIED),
        e_tag=_optional_str(raw, FIELD_ETAG),
        size=size,
        kind=_parse_kind(raw),
    )


def parse_item_collection(raw: Any) -> list[CanonicalItem]:
    """Map a Graph collection response (``{"value": [...]}``) to items in order."""
    if not isinstance(raw, dict) or not isinstance(raw.get(ODATA_VALUE), list):
        raise ValueError("collection response has no 'value' array")
    return [parse_item(entry) for entry in raw[ODATA_VALUE]]
