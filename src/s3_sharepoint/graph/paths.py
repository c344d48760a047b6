"""Translation of S3 prefixes and keys into drive-root relative Graph paths.

Graph addresses drive items relative to ``/drive/root`` in two ways:

- the root itself: ``/drive/root/children``, ``/drive/root/search(q='...')``
- a path below it: ``/drive/root:/a/b:/children``, ``/drive/root:/a/b:/search(q='...')``

Every function here returns the part that follows ``/drive/root``.
"""

from urllib.parse import quote

CHILDREN = "children"
CONTENT = "content"


def _trim(path: str) -> str:
    return path.strip("/")


def _quote_path(path: str) -> str:
    return quote(path, safe="/")


def _search(search_query: str) -> str:
    # OData string literals escape a single quote by doubling it.
    literal = search_query.replace("'", "''")
    return f"search(q='{quote(literal, safe='')}')"


def translate(prefix: str, search_query: str | None = None) -> str:
    """Map an S3 ``(prefix, search query)`` pair to a listing or search path.

    The prefix alone decides between root and sub-path addressing; the search
    query alone decides between listing children and searching.

    Args:
        prefix: S3 prefix; empty or made only of ``/`` means the library root.
        search_query: Free-text query; empty or None lists children instead.

    Returns:
        Path relative to ``/drive/root``.
    """
    trimmed = _trim(prefix)
    operation = _search(search_query) if search_query else CHILDREN
    if not trimmed:
        return f"/{operation}"
    return f":/{_quote_path(trimmed)}:/{operation}"


def item_path(key: str) -> str:
    """Path of a single item's metadata; the root key maps to the root item."""
    trimmed = _trim(key)
    if not trimmed:
        return ""
    return f":/{_quote_path(trimmed)}"


def content_path(key: str) -> str:
    """Path of a file's raw content."""
    return f":/{_quote_path(_trim(key))}:/{CONTENT}"


def file_name_from_key(key: str) -> str:
    """Trailing name of a key, e.g. ``report.pdf`` for ``docs/2024/report.pdf``."""
    segments = [segment for segment in key.split("/") if segment]
    return segments[-1] if segments else ""
