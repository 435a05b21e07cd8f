"""Core configuration.

Config parsing stays outside the core (see ``rules_engine.build_configuration``
and ``settings``), but this dataclass defines the shape the classifier and
tracker expect. Each organizer owns one instance; nothing here is global.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

from traffic_organizer.core.models import (
    KeywordGroupRule,
    Literal,
    Matcher,
    ReferrerGroupRule,
    SearchEngineRule,
)
from traffic_organizer.core.uri import domain_of

DIRECT_MEDIUM = "Direct / Brand Aware: Typed / Bookmarked / etc"
REFERRAL_MEDIUM = "Referrer: Organic"
ORGANIC_MEDIUM = "Search Engine: Organic"
PAID_MEDIUM = "Search Engine: Paid"

DIRECT_SOURCE = "(none)"
BRAND_KEYWORD_GROUP = "Brand Aware Keywords / Direct Traffic"

DEFAULT_COOKIE_NAME = "_tsm"
DEFAULT_SESSION_TIMEOUT_MS = 1_800_000  # 30 minutes

# Order matters: the first fragment found in the referring domain wins.
DEFAULT_SEARCH_ENGINES = (
    SearchEngineRule("daum", ("q",), "Daum"),
    SearchEngineRule("eniro", ("search_word",), "Eniro"),
    SearchEngineRule("naver", ("query",), "Naver"),
    SearchEngineRule("google", ("q",), "Google"),
    SearchEngineRule("yahoo", ("p",), "Yahoo"),
    SearchEngineRule("msn", ("q",), "MSN"),
    SearchEngineRule("bing", ("q",), "Bing"),
    SearchEngineRule("aol", ("query", "encquery"), "AOL"),
    SearchEngineRule("lycos", ("query",), "Lycos"),
    SearchEngineRule("ask", ("q",), "Ask"),
    SearchEngineRule("altavista", ("q",), "Altavista"),
    SearchEngineRule("search.netscape", ("query",), "Netscape"),
    SearchEngineRule("cnn", ("query",), "CNN"),
    SearchEngineRule("about", ("terms",), "About"),
    SearchEngineRule("mamma", ("query",), "Mamma"),
    SearchEngineRule("alltheweb", ("q",), "Alltheweb"),
    SearchEngineRule("voila.fr", ("rdata",), "Voila"),
    SearchEngineRule("virgilio", ("qs",), "Virgilio"),
    SearchEngineRule("baidu", ("wd",), "Baidu"),
    SearchEngineRule("alice", ("qs",), "Alice"),
    SearchEngineRule("yandex", ("text",), "Yandex"),
    SearchEngineRule("najdi.org.mk", ("q",), "Najdi"),
    SearchEngineRule("seznam.cz", ("q",), "Seznam"),
    SearchEngineRule("search.com", ("q",), "Search.com"),
    SearchEngineRule("wp.pl", ("szukaj",), "Wirtulana Polska"),
    SearchEngineRule("onetcenter", ("qt",), "O*NET"),
    SearchEngineRule("szukacz", ("q",), "Szukacz"),
    SearchEngineRule("yam", ("k",), "Yam"),
    SearchEngineRule("pchome", ("q",), "PCHome"),
    SearchEngineRule("kvasir", ("q",), "Kvasir"),
    SearchEngineRule("sesam", ("q",), "Sesam"),
    SearchEngineRule("ozu", ("q",), "Ozu"),
    SearchEngineRule("terra", ("query",), "Terra"),
    SearchEngineRule("mynet", ("q",), "Mynet"),
    SearchEngineRule("ekolay", ("q",), "Ekolay"),
    SearchEngineRule("rambler", ("words",), "Rambler"),
)


@dataclass
class Configuration:
    """Rule tables, key names and session settings for one organizer."""

    site_url: str = ""

    medium_key: str = "utm_medium"
    source_key: str = "utm_source"
    campaign_key: str = "utm_campaign"
    keyword_key: str = "utm_term"
    content_key: str = "utm_content"

    search_engines: List[SearchEngineRule] = field(default_factory=lambda: list(DEFAULT_SEARCH_ENGINES))
    referrer_groups: List[ReferrerGroupRule] = field(default_factory=list)
    keyword_groups: List[KeywordGroupRule] = field(default_factory=list)
    ignored_referrers: List[Matcher] = field(default_factory=list)
    ignored_keywords: List[Matcher] = field(default_factory=list)
    paid_parameters: List[str] = field(default_factory=list)

    direct_medium: str = DIRECT_MEDIUM
    referral_medium: str = REFERRAL_MEDIUM
    organic_medium: str = ORGANIC_MEDIUM
    paid_medium: str = PAID_MEDIUM

    cookie_name: str = DEFAULT_COOKIE_NAME
    session_timeout_ms: int = DEFAULT_SESSION_TIMEOUT_MS
    first_page_only: bool = True
    keyword_group_first_match: bool = True

    def __post_init__(self) -> None:
        self.ignored_referrers = list(self.ignored_referrers)
        self._seed_ignored_referrers()

    def _seed_ignored_referrers(self) -> None:
        # The site's own pages must never start a new session.
        site_domain = domain_of(self.site_url)
        own = Literal(site_domain, ignore_case=True)
        if site_domain and own not in self.ignored_referrers:
            self.ignored_referrers.append(own)

    def reset_keys(self) -> None:
        """Restore the default utm_* query parameter names."""

        self.medium_key = "utm_medium"
        self.source_key = "utm_source"
        self.campaign_key = "utm_campaign"
        self.keyword_key = "utm_term"
        self.content_key = "utm_content"

    def reset_all(self, site_url: str | None = None) -> None:
        """Restore every field to its default, re-seeding the ignored referrers."""

        if site_url is not None:
            self.site_url = site_url
        self.reset_keys()

        self.search_engines = list(DEFAULT_SEARCH_ENGINES)
        self.referrer_groups = []
        self.keyword_groups = []
        self.ignored_referrers = []
        self.ignored_keywords = []
        self.paid_parameters = []

        self.direct_medium = DIRECT_MEDIUM
        self.referral_medium = REFERRAL_MEDIUM
        self.organic_medium = ORGANIC_MEDIUM
        self.paid_medium = PAID_MEDIUM

        self.cookie_name = DEFAULT_COOKIE_NAME
        self.session_timeout_ms = DEFAULT_SESSION_TIMEOUT_MS
        self.first_page_only = True
        self.keyword_group_first_match = True

        self._seed_ignored_referrers()

    def add_search_engine(self, domain_fragment: str, keyword_params: Sequence[str], name: str) -> None:
        if isinstance(keyword_params, str):
            keyword_params = [param.strip() for param in keyword_params.split(",")]
        self.search_engines.append(SearchEngineRule(domain_fragment.lower(), tuple(keyword_params), name))

    def add_referrer_group(self, domains: Sequence[Matcher], medium: str, source_template: str) -> None:
        self.referrer_groups.append(ReferrerGroupRule(tuple(domains), medium, source_template))

    def clear_referrer_groups(self) -> None:
        self.referrer_groups = []

    def add_keyword_group(self, matcher: Matcher, group_name: str) -> None:
        self.keyword_groups.append(KeywordGroupRule(matcher, group_name))

    def clear_keyword_groups(self) -> None:
        self.keyword_groups = []

    def add_ignored_referrer(self, matcher: Matcher) -> None:
        self.ignored_referrers.append(matcher)

    def clear_ignored_referrers(self) -> None:
        self.ignored_referrers = []

    def add_ignored_keyword(self, matcher: Matcher) -> None:
        self.ignored_keywords.append(matcher)

    def clear_ignored_keywords(self) -> None:
        self.ignored_keywords = []

    def add_paid_parameter(self, name: str) -> None:
        self.paid_parameters.append(name)

    def clear_paid_parameters(self) -> None:
        self.paid_parameters = []
