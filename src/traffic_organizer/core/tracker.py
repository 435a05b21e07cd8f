"""Per-page-view session controller.

This module is host-agnostic. It only relies on ports for the session store,
so the same tracker runs behind a cookie jar, a SQLite table or a test fake.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
from typing import Callable, Optional

from traffic_organizer.core.classifier import classify
from traffic_organizer.core.config import Configuration
from traffic_organizer.core.models import AttributionRecord, PageView
from traffic_organizer.core.ports import QueryParams, SessionStore
from traffic_organizer.core.rules_engine import matches_any
from traffic_organizer.core.session_codec import decode, encode
from traffic_organizer.core.uri import QueryString, domain_of, path_of

LOGGER = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TrafficOrganizer:
    """Decides per page view whether to reuse the session or reclassify."""

    def __init__(
        self,
        config: Configuration,
        store: SessionStore,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._config = config
        self._store = store
        self._clock = clock or _utcnow
        self._record = AttributionRecord()

    @property
    def config(self) -> Configuration:
        return self._config

    @property
    def record(self) -> AttributionRecord:
        """Attribution values exposed for the most recent page view."""

        return self._record

    def reset_all(self, site_url: Optional[str] = None) -> None:
        """Restore configuration defaults and forget the current record."""

        self._config.reset_all(site_url)
        self._record = AttributionRecord()

    def track(self, view: PageView, query: Optional[QueryParams] = None) -> AttributionRecord:
        """Process one page view.

        A new classification is stored when no session exists, when the visitor
        arrives from an outside referrer, or when the link is explicitly tagged.
        Otherwise the stored session is restored; with ``first_page_only`` the
        returned values are blanked so only the landing page reports them.

        Hosts that already parsed the request can pass their own ``query``;
        otherwise it is read from ``view.url``.
        """

        if query is None:
            query = QueryString.from_url(view.url)
        referrer = view.referrer or ""
        blob = self._store.read(self._config.cookie_name)

        if not blob or self._should_overwrite(query, referrer):
            record = classify(query, referrer, self._config)
            self._persist(record)
            LOGGER.info("Classified visit as %s / %s", record.medium, record.source)
            self._record = record
            return record

        # Keys missing from the blob keep the current request's referrer data.
        current = AttributionRecord(
            referring_domain=domain_of(referrer),
            referring_path=path_of(referrer),
        )
        record = decode(blob, base=current)
        LOGGER.debug("Continuing session %s / %s", record.medium, record.source)
        if self._config.first_page_only:
            record = record.cleared()
        self._record = record
        return record

    def _should_overwrite(self, query: QueryParams, referrer: str) -> bool:
        """Return True when an existing session must be replaced.

        An outside referrer always starts a new visit; internal navigation
        (ignored referrers) never does unless the link is tagged.
        """

        if referrer and not matches_any(self._config.ignored_referrers, domain_of(referrer)):
            return True
        return bool(query.get(self._config.source_key) and query.get(self._config.medium_key))

    def _persist(self, record: AttributionRecord) -> None:
        # The old blob is always removed before the new one is written.
        expires = self._clock() + timedelta(milliseconds=self._config.session_timeout_ms)
        self._store.delete(self._config.cookie_name)
        self._store.write(self._config.cookie_name, encode(record), expires)
