"""Ports (interfaces) used by the core tracker.

Ports define the minimal contracts for reading the request's query string
and storing the session blob, so the core can run behind any web framework
or persistence backend.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol


class QueryParams(Protocol):
    """Read access to one URL's query parameters."""

    def get(self, name: str) -> str:
        ...


class SessionStore(Protocol):
    """Opaque blob persistence keyed by cookie name."""

    def read(self, name: str) -> Optional[str]:
        ...

    def write(self, name: str, value: str, expires: datetime) -> None:
        ...

    def delete(self, name: str) -> None:
        ...
