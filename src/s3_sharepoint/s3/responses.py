"""S3 XML response builders."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable
from xml.etree.ElementTree import Element, SubElement, indent, tostring

if TYPE_CHECKING:
    from s3_sharepoint.graph.models import CanonicalItem
    from s3_sharepoint.s3.filters import NameFilter

S3_NAMESPACE = "http://s3.amazonaws.com/doc/2006-03-01/"
XML_DECLARATION = b'<?xml version="1.0" encoding="UTF-8"?>\n'

# Listings are never paginated, so these are informational only.
MAX_KEYS = "1000"
IS_TRUNCATED = "false"
STORAGE_CLASS = "STANDARD"


def _create_root(tag: str) -> Element:
    """Create root element with S3 namespace"""
    return Element(tag, xmlns=S3_NAMESPACE)


def _to_xml(root: Element) -> bytes:
    """Serialize with a declaration, two-space indentation and explicit end tags."""
    indent(root, space="  ")
    return XML_DECLARATION + tostring(root, encoding="utf-8", short_empty_elements=False)


def _text(parent: Element, tag: str, value: str) -> Element:
    element = SubElement(parent, tag)
    element.text = value
    return element


def _join(trimmed_prefix: str, name: str) -> str:
    return f"{trimmed_prefix}/{name}" if trimmed_prefix else name


def _add_contents(
    root: Element, key: str, size: int, last_modified: str, etag: str
) -> None:
    contents = SubElement(root, "Contents")
    _text(contents, "Key", key)
    _text(contents, "Size", str(size))
    _text(contents, "LastModified", last_modified)
    _text(contents, "ETag", etag)
    _text(contents, "StorageClass", STORAGE_CLASS)


def render_list_bucket_result(
    container_id: str,
    prefix: str,
    items: Iterable[CanonicalItem],
    name_filter: NameFilter,
    include_common_prefixes: bool,
) -> bytes:
    """Render a ListBucketResult document for one catalog listing.

    <ListBucketResult xmlns="http://s3.amazonaws.com/doc/2006-03-01/">
      <Name>site-id</Name>
      <Prefix>docs/</Prefix>
      <IsTruncated>false</IsTruncated>
      <MaxKeys>1000</MaxKeys>
      <Marker></Marker>
      <CommonPrefixes>
        <Prefix>docs/2024/</Prefix>
      </CommonPrefixes>
      <Contents>
        <Key>docs/</Key>
        <Size>0</Size>
        ...
      </Contents>
      <Contents>
        <Key>docs/report.pdf</Key>
        <Size>1024</Size>
        <LastModified>2024-05-01T10:00:00Z</LastModified>
        <ETag>"{...},2"</ETag>
        <StorageClass>STANDARD</StorageClass>
      </Contents>
    </ListBucketResult>

    Every Contents element carries all five children even when Graph did not
    report the value: size defaults to 0, timestamp and ETag to empty text.
    A non-root prefix gets a zero-size folder-marker entry keyed ``{prefix}/``.
    Folders only ever appear as common prefixes; items that are neither file
    nor folder are skipped.

    Args:
        container_id: Bucket name echoed in ``Name``.
        prefix: Requested prefix, with or without surrounding slashes.
        items: Catalog listing in Graph order.
        name_filter: File-name gate; non-matching files are left out.
        include_common_prefixes: Whether folders are rendered as CommonPrefixes.

    Returns:
        UTF-8 encoded XML document.
    """
    items = list(items)
    trimmed = prefix.strip("/")

    root = _create_root("ListBucketResult")
    _text(root, "Name", container_id)
    _text(root, "Prefix", f"{trimmed}/" if trimmed else "")
    _text(root, "IsTruncated", IS_TRUNCATED)
    _text(root, "MaxKeys", MAX_KEYS)
    _text(root, "Marker", "")

    if include_common_prefixes:
        for folder in (item for item in items if item.is_folder):
            common_prefixes = SubElement(root, "CommonPrefixes")
            _text(common_prefixes, "Prefix", f"{_join(trimmed, folder.name)}/")

    if trimmed:
        _add_contents(root, key=f"{trimmed}/", size=0, last_modified="", etag="")

    for item in items:
        if not name_filter.include(item):
            continue
        _add_contents(
            root,
            key=_join(trimmed, item.name),
            size=item.size or 0,
            last_modified=item.last_modified_at or "",
            etag=item.e_tag or "",
        )

    return _to_xml(root)

