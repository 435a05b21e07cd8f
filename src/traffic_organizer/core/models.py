"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any host-specific request or cookie types.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
import re
from typing import Tuple, Union


@dataclass(frozen=True)
class AttributionRecord:
    """Classification output for one visit, also the session payload."""

    medium: str = ""
    source: str = ""
    campaign: str = ""
    content: str = ""
    keyword: str = ""
    keyword_group: str = ""
    referring_domain: str = ""
    referring_path: str = ""

    def is_empty(self) -> bool:
        return not any(getattr(self, item.name) for item in fields(self))

    def cleared(self) -> "AttributionRecord":
        """Return a record with every reportable field blank."""

        return AttributionRecord()


@dataclass(frozen=True)
class PageView:
    """Minimal request context used by the tracker."""

    url: str
    referrer: str = ""


@dataclass(frozen=True)
class Literal:
    """Plain text matcher; domains compare case-folded, keywords exactly."""

    text: str
    ignore_case: bool = False


@dataclass(frozen=True)
class Pattern:
    """Regex matcher, true when the pattern is found anywhere in the value."""

    regex: re.Pattern


Matcher = Union[Literal, Pattern]


@dataclass(frozen=True)
class SearchEngineRule:
    """Search engine recognised by a fragment of its referring domain."""

    domain_fragment: str
    keyword_params: Tuple[str, ...]
    name: str


@dataclass(frozen=True)
class ReferrerGroupRule:
    """Group of referring domains reported under one medium and source."""

    domains: Tuple[Matcher, ...]
    medium: str
    source_template: str


@dataclass(frozen=True)
class KeywordGroupRule:
    """Search keyword bucket applied after a search engine match."""

    matcher: Matcher
    group_name: str
