"""HTTP cookie session store adapter.

Reads the session blob from the request's ``Cookie`` header and queues
``Set-Cookie`` headers for the response, mirroring how the browser-side
tracker kept its state.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from http.cookies import CookieError, SimpleCookie
import logging
from typing import List, Optional, Tuple

LOGGER = logging.getLogger(__name__)

_COOKIE_DATE_FORMAT = "%a, %d %b %Y %H:%M:%S GMT"


class CookieSessionStore:
    """SessionStore backed by one request/response cookie exchange."""

    def __init__(
        self,
        cookie_header: Optional[str],
        path: str = "/",
        domain: Optional[str] = None,
    ) -> None:
        self._path = path
        self._domain = domain
        self._incoming: dict[str, str] = {}
        self._pending: List[str] = []

        jar = SimpleCookie()
        try:
            jar.load(cookie_header or "")
        except CookieError:
            LOGGER.warning("Ignoring malformed Cookie header")
        else:
            self._incoming = {name: morsel.value for name, morsel in jar.items()}

    def read(self, name: str) -> Optional[str]:
        return self._incoming.get(name)

    def write(self, name: str, value: str, expires: datetime) -> None:
        self._pending.append(self._morsel(name, value, expires))
        self._incoming[name] = value

    def delete(self, name: str) -> None:
        # Browsers drop a cookie once it is re-sent with an expiry in the past.
        expired = datetime.now(timezone.utc) - timedelta(days=1)
        self._pending.append(self._morsel(name, "", expired))
        self._incoming.pop(name, None)

    def set_cookie_headers(self) -> List[Tuple[str, str]]:
        """Return queued ``Set-Cookie`` headers in the order they were produced."""

        return [("Set-Cookie", value) for value in self._pending]

    def _morsel(self, name: str, value: str, expires: datetime) -> str:
        jar = SimpleCookie()
        jar[name] = value
        morsel = jar[name]
        morsel["path"] = self._path
        if self._domain:
            morsel["domain"] = self._domain
        morsel["expires"] = expires.astimezone(timezone.utc).strftime(_COOKIE_DATE_FORMAT)
        return morsel.OutputString()
