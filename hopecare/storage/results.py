"""Result envelopes returned by every storage backend method.

A result carries either a payload with error=None, or the empty payload with
the caught error. Backends never raise across the interface.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class UrlResult:
    """Result of uploads and URL resolution."""

    url: str = ""
    error: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class DeleteResult:
    success: bool = False
    error: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ListResult:
    """Result of listing a directory; files are resolved URLs, not keys."""

    files: list[str] = field(default_factory=list)
    error: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None
