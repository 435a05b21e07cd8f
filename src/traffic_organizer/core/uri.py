"""Referrer URI helpers (core domain).

Referrers arrive as untrusted strings, so everything here degrades to partial
or empty results instead of raising.
"""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Tuple
from urllib.parse import parse_qsl


def _authority_bounds(uri: str) -> Tuple[int, int]:
    marker = uri.find("//")
    start = marker + 2 if marker >= 0 else 0
    end = len(uri)
    for stop in "/?#":
        index = uri.find(stop, start)
        if 0 <= index < end:
            end = index
    return start, end


def domain_of(uri: str) -> str:
    """Return the lower-cased host of a URI with one leading ``www.`` removed."""

    if not uri:
        return ""

    start, end = _authority_bounds(uri)
    domain = uri[start:end].lower()
    if domain.startswith("www."):
        domain = domain[4:]
    return domain


def path_of(uri: str) -> str:
    """Return the path of a URI, without query string or fragment."""

    if not uri:
        return ""

    _, end = _authority_bounds(uri)
    if end >= len(uri) or uri[end] != "/":
        return ""

    path_end = len(uri)
    for stop in "?#":
        index = uri.find(stop, end)
        if 0 <= index < path_end:
            path_end = index
    return uri[end:path_end]


class QueryString:
    """Decoded query parameters, first value wins for repeated keys."""

    def __init__(self, params: Mapping[str, str] | None = None) -> None:
        self._params: Dict[str, str] = dict(params or {})

    @classmethod
    def parse(cls, query: str) -> "QueryString":
        """Parse a raw query string (without the leading ``?``)."""

        params: Dict[str, str] = {}
        for key, value in parse_qsl(query or "", keep_blank_values=True):
            params.setdefault(key, value)
        return cls(params)

    @classmethod
    def from_url(cls, url: str) -> "QueryString":
        """Parse the query component of a full URL."""

        if not url:
            return cls()
        _, sep, rest = url.partition("?")
        if not sep:
            return cls()
        return cls.parse(rest.split("#", 1)[0])

    def get(self, name: str) -> str:
        return self._params.get(name, "")

    def first_of(self, names: Iterable[str]) -> str:
        """Return the first non-empty value among ``names``."""

        for name in names:
            value = self.get(name)
            if value:
                return value
        return ""

    def __contains__(self, name: object) -> bool:
        return name in self._params

    def __repr__(self) -> str:
        return f"QueryString({self._params!r})"
