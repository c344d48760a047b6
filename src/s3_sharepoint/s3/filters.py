"""File-name gate applied to listings and to object reads."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from s3_sharepoint.graph.paths import file_name_from_key

if TYPE_CHECKING:
    from s3_sharepoint.graph.models import CanonicalItem


class NameFilter:
    """Single regular expression compiled once at startup.

    The pattern is searched in the raw item name; case-insensitive matching
    has to be expressed in the pattern itself (e.g. ``(?i)\\.pdf$``). An empty
    pattern matches every name.
    """

    def __init__(self, pattern: str = "") -> None:
        try:
            self._regex = re.compile(pattern)
        except re.error as exc:
            raise ValueError(f"Invalid filename pattern {pattern!r}: {exc}") from exc
        self.pattern = pattern

    def matches(self, name: str) -> bool:
        return self._regex.search(name) is not None

    def include(self, item: CanonicalItem) -> bool:
        """Whether ``item`` is listed as an object (files only)."""
        return item.is_file and self.matches(item.name)

    def allows_key(self, key: str) -> bool:
        """Whether the object at ``key`` may be read, judged by its trailing name."""
        return self.matches(file_name_from_key(key))

    def __repr__(self) -> str:
        return f"NameFilter(pattern={self.pattern!r})"
