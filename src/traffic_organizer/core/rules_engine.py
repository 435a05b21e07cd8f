"""Rule table compilation and matching logic (core domain)."""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Optional

from traffic_organizer.core.config import Configuration
from traffic_organizer.core.models import (
    KeywordGroupRule,
    Literal,
    Matcher,
    Pattern,
    ReferrerGroupRule,
    SearchEngineRule,
)


def matches(matcher: Matcher, value: str) -> bool:
    """Return True when ``value`` conforms to ``matcher``.

    Literals compare for equality (case-folded when ``ignore_case``);
    patterns succeed when the regex is found anywhere in the value.
    """

    if isinstance(matcher, Pattern):
        return matcher.regex.search(value) is not None
    if isinstance(matcher, Literal):
        if matcher.ignore_case:
            return matcher.text.casefold() == value.casefold()
        return matcher.text == value
    raise TypeError(f"Unsupported matcher: {matcher!r}")


def matches_any(matchers: Iterable[Matcher], value: str) -> bool:
    return any(matches(matcher, value) for matcher in matchers)


def find_search_engine(domain: str, engines: Iterable[SearchEngineRule]) -> Optional[SearchEngineRule]:
    """Return the first engine whose fragment occurs in the referring domain."""

    for engine in engines:
        if engine.domain_fragment and engine.domain_fragment in domain:
            return engine
    return None


def find_referrer_group(domain: str, groups: Iterable[ReferrerGroupRule]) -> Optional[ReferrerGroupRule]:
    for group in groups:
        if matches_any(group.domains, domain):
            return group
    return None


def find_keyword_group(
    keyword: str,
    groups: Iterable[KeywordGroupRule],
    first_match: bool = True,
) -> Optional[KeywordGroupRule]:
    """Return the keyword group for ``keyword``.

    With ``first_match`` disabled every matching group overwrites the previous
    one, so the last match in table order is returned.
    """

    found: Optional[KeywordGroupRule] = None
    for group in groups:
        if not matches(group.matcher, keyword):
            continue
        found = group
        if first_match:
            break
    return found


def _compile(pattern: str, context: str) -> Pattern:
    try:
        return Pattern(re.compile(pattern, re.IGNORECASE))
    except re.error as exc:
        raise ValueError(f"Invalid regex in {context}: {pattern!r} ({exc})") from exc


def build_matchers(entries: Iterable[Any], ignore_case: bool, context: str) -> List[Matcher]:
    """Build matchers from plain strings or ``{"regex": ...}`` objects."""

    compiled: List[Matcher] = []
    for entry in entries or []:
        if isinstance(entry, str):
            text = entry.lower() if ignore_case else entry
            compiled.append(Literal(text, ignore_case=ignore_case))
        elif isinstance(entry, dict) and "regex" in entry:
            compiled.append(_compile(entry["regex"], context))
        else:
            raise ValueError(f"Unsupported matcher entry in {context}: {entry!r}")
    return compiled


def build_search_engines(entries: Iterable[dict]) -> List[SearchEngineRule]:
    engines: List[SearchEngineRule] = []
    for entry in entries:
        if not entry.get("enabled", True):
            continue
        try:
            params = entry["keyword_params"]
            if isinstance(params, str):
                params = [param.strip() for param in params.split(",")]
            engines.append(SearchEngineRule(entry["domain"].lower(), tuple(params), entry["name"]))
        except KeyError as exc:
            raise ValueError(f"Search engine entry is missing {exc}: {entry!r}") from exc
    return engines


def build_referrer_groups(entries: Iterable[dict]) -> List[ReferrerGroupRule]:
    """Normalize referrer group configs and compile their domain patterns."""

    groups: List[ReferrerGroupRule] = []
    for entry in entries:
        if not entry.get("enabled", True):
            continue
        context = f"referrer group {entry.get('name') or entry.get('medium')!r}"
        domains = build_matchers(entry.get("domains", []), ignore_case=True, context=context)
        domains.extend(_compile(pattern, context) for pattern in entry.get("regex", []) or [])
        try:
            groups.append(ReferrerGroupRule(tuple(domains), entry["medium"], entry["source"]))
        except KeyError as exc:
            raise ValueError(f"{context} is missing {exc}") from exc
    return groups


def build_keyword_groups(entries: Iterable[dict]) -> List[KeywordGroupRule]:
    """Flatten keyword group configs into one rule per keyword or regex.

    Table order is preserved: literal keywords of a group come before its
    patterns, and groups keep their configured order.
    """

    rules: List[KeywordGroupRule] = []
    for entry in entries:
        if not entry.get("enabled", True):
            continue
        try:
            group_name = entry["group"]
        except KeyError as exc:
            raise ValueError(f"Keyword group entry is missing {exc}: {entry!r}") from exc
        context = f"keyword group {group_name!r}"
        for keyword in entry.get("keywords", []):
            rules.append(KeywordGroupRule(Literal(keyword), group_name))
        for pattern in entry.get("regex", []) or []:
            rules.append(KeywordGroupRule(_compile(pattern, context), group_name))
    return rules


def build_configuration(raw: dict, site_url: str | None = None) -> Configuration:
    """Apply a parsed JSON config onto a fresh ``Configuration``.

    Sections that are absent keep their defaults, so an empty dict yields the
    stock configuration for ``site_url``.
    """

    config = Configuration(site_url=site_url if site_url is not None else raw.get("site_url", ""))

    keys = raw.get("keys", {})
    config.medium_key = keys.get("medium", config.medium_key)
    config.source_key = keys.get("source", config.source_key)
    config.campaign_key = keys.get("campaign", config.campaign_key)
    config.keyword_key = keys.get("keyword", config.keyword_key)
    config.content_key = keys.get("content", config.content_key)

    mediums = raw.get("mediums", {})
    config.direct_medium = mediums.get("direct", config.direct_medium)
    config.referral_medium = mediums.get("referral", config.referral_medium)
    config.organic_medium = mediums.get("organic", config.organic_medium)
    config.paid_medium = mediums.get("paid", config.paid_medium)

    engines = build_search_engines(raw.get("search_engines", []))
    if raw.get("replace_search_engines", False):
        config.search_engines = engines
    else:
        config.search_engines.extend(engines)

    config.referrer_groups = build_referrer_groups(raw.get("referrer_groups", []))
    config.keyword_groups = build_keyword_groups(raw.get("keyword_groups", []))
    config.ignored_referrers.extend(
        build_matchers(raw.get("ignored_referrers", []), ignore_case=True, context="ignored_referrers")
    )
    config.ignored_keywords = build_matchers(
        raw.get("ignored_keywords", []), ignore_case=False, context="ignored_keywords"
    )
    config.paid_parameters = list(raw.get("paid_parameters", []))

    match_mode = raw.get("keyword_group_match", "first")
    if match_mode not in {"first", "last"}:
        raise ValueError(f"Unsupported keyword_group_match: {match_mode}")
    config.keyword_group_first_match = match_mode == "first"

    session = raw.get("session", {})
    config.cookie_name = session.get("cookie_name", config.cookie_name)
    config.session_timeout_ms = int(session.get("timeout_ms", config.session_timeout_ms))
    config.first_page_only = bool(session.get("first_page_only", config.first_page_only))

    return config
