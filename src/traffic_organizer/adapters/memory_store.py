"""In-process session store adapter."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Tuple


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemorySessionStore:
    """Dict-backed SessionStore; expired blobs read as absent."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or _utcnow
        self._blobs: Dict[str, Tuple[str, datetime]] = {}

    def read(self, name: str) -> Optional[str]:
        entry = self._blobs.get(name)
        if entry is None:
            return None
        value, expires = entry
        if expires <= self._clock():
            del self._blobs[name]
            return None
        return value

    def write(self, name: str, value: str, expires: datetime) -> None:
        self._blobs[name] = (value, expires)

    def delete(self, name: str) -> None:
        self._blobs.pop(name, None)
