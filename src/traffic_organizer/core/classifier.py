"""Traffic source classification (core domain).

Classification follows a strict precedence:
1) Tagged links (medium and source query parameters) are taken verbatim
2) No referrer means direct traffic
3) Search engines, with paid detection, ignored keywords and keyword groups
4) Ignored referrers and referrer groups
5) Anything else is a plain referral from the referring domain
"""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Optional

from traffic_organizer.core.config import BRAND_KEYWORD_GROUP, DIRECT_SOURCE, Configuration
from traffic_organizer.core.formatter import format_template
from traffic_organizer.core.models import AttributionRecord
from traffic_organizer.core.ports import QueryParams
from traffic_organizer.core.rules_engine import (
    find_keyword_group,
    find_referrer_group,
    find_search_engine,
    matches_any,
)
from traffic_organizer.core.uri import QueryString, domain_of, path_of

LOGGER = logging.getLogger(__name__)


def classify(query: QueryParams, referrer: str, config: Configuration) -> AttributionRecord:
    """Classify one request into an attribution record.

    ``query`` holds the landing page's parameters; ``referrer`` is the raw
    referring URL (empty for direct visits).
    """

    referrer = referrer or ""
    base = AttributionRecord(
        referring_domain=domain_of(referrer),
        referring_path=path_of(referrer),
    )

    medium = query.get(config.medium_key)
    source = query.get(config.source_key)
    if medium and source:
        LOGGER.debug("Tagged link: medium=%s source=%s", medium, source)
        return replace(
            base,
            medium=medium,
            source=source,
            campaign=query.get(config.campaign_key),
            content=query.get(config.content_key),
            keyword=query.get(config.keyword_key),
        )

    if not referrer:
        return replace(base, medium=config.direct_medium, source=DIRECT_SOURCE)

    record = _classify_search_engine(base, query, referrer, config)
    if record is None:
        record = _classify_referrer_group(base, config)
    if record is None:
        # A referrer without a recognisable host still has to report a source.
        record = replace(base, medium=config.referral_medium, source=base.referring_domain or referrer)
    return record


def _is_paid(query: QueryParams, referrer_query: QueryString, config: Configuration) -> bool:
    # Landing page parameters are authoritative; some ad redirects leave the
    # click id on the referring URL instead.
    return any(query.get(name) or referrer_query.get(name) for name in config.paid_parameters)


def _classify_search_engine(
    base: AttributionRecord,
    query: QueryParams,
    referrer: str,
    config: Configuration,
) -> Optional[AttributionRecord]:
    engine = find_search_engine(base.referring_domain, config.search_engines)
    if engine is None:
        return None

    referrer_query = QueryString.from_url(referrer)
    paid = _is_paid(query, referrer_query, config)
    keyword = referrer_query.first_of(engine.keyword_params).lower()
    record = replace(
        base,
        medium=config.paid_medium if paid else config.organic_medium,
        source=engine.name,
        keyword=keyword,
    )

    # Brand searches are really people who already know the site.
    if not paid and matches_any(config.ignored_keywords, keyword):
        LOGGER.debug("Ignored keyword %r from %s treated as direct", keyword, engine.name)
        return replace(record, medium=config.direct_medium, keyword_group=BRAND_KEYWORD_GROUP)

    group = find_keyword_group(keyword, config.keyword_groups, config.keyword_group_first_match)
    if group is not None:
        record = replace(record, keyword_group=group.group_name)
    return record


def _classify_referrer_group(base: AttributionRecord, config: Configuration) -> Optional[AttributionRecord]:
    domain = base.referring_domain
    if matches_any(config.ignored_referrers, domain):
        return replace(base, medium=config.direct_medium, source=domain)

    group = find_referrer_group(domain, config.referrer_groups)
    if group is None:
        return None

    record = replace(base, medium=group.medium)
    return replace(record, source=format_template(group.source_template, record))
