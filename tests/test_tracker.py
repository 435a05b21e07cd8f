from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from traffic_organizer.adapters.memory_store import MemorySessionStore
from traffic_organizer.core.config import Configuration
from traffic_organizer.core.models import AttributionRecord, Literal, PageView
from traffic_organizer.core.session_codec import encode
from traffic_organizer.core.tracker import TrafficOrganizer

SITE = "https://www.example.com/"
NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeStore:
    def __init__(self, blobs: Optional[dict[str, str]] = None) -> None:
        self.blobs: dict[str, str] = dict(blobs or {})
        self.calls: list[tuple] = []

    def read(self, name: str) -> Optional[str]:
        return self.blobs.get(name)

    def write(self, name: str, value: str, expires: datetime) -> None:
        self.calls.append(("write", name, value, expires))
        self.blobs[name] = value

    def delete(self, name: str) -> None:
        self.calls.append(("delete", name))
        self.blobs.pop(name, None)


class MutableClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _organizer(store, config: Optional[Configuration] = None, clock=None) -> TrafficOrganizer:
    return TrafficOrganizer(config or Configuration(site_url=SITE), store, clock=clock or (lambda: NOW))


def test_first_visit_classifies_and_persists_with_timeout() -> None:
    store = FakeStore()
    organizer = _organizer(store)

    record = organizer.track(PageView(url=SITE + "index.html"))

    assert record.medium == organizer.config.direct_medium
    assert record.source == "(none)"
    assert organizer.record == record
    assert store.calls == [
        ("delete", "_tsm"),
        ("write", "_tsm", encode(record), NOW + timedelta(minutes=30)),
    ]


def test_internal_page_after_landing_shows_blank_values() -> None:
    store = FakeStore()
    organizer = _organizer(store)

    landing = organizer.track(PageView(url=SITE))
    assert landing.medium and landing.source
    stored = store.blobs["_tsm"]
    calls_before = list(store.calls)

    second = organizer.track(PageView(url=SITE + "about", referrer=SITE))

    assert second.is_empty()
    assert store.blobs["_tsm"] == stored
    assert store.calls == calls_before


def test_session_values_are_exposed_when_not_first_page_only() -> None:
    config = Configuration(site_url=SITE)
    config.first_page_only = False
    store = FakeStore()
    organizer = _organizer(store, config)

    organizer.track(PageView(url=SITE, referrer="http://www.google.com/search?q=shoes"))
    record = organizer.track(PageView(url=SITE + "cart", referrer=SITE + "products"))

    assert record.medium == config.organic_medium
    assert record.source == "Google"
    assert record.keyword == "shoes"
    assert record.referring_domain == "google.com"


def test_restored_direct_session_keeps_current_referrer_fields() -> None:
    config = Configuration(site_url=SITE)
    config.first_page_only = False
    organizer = _organizer(FakeStore(), config)

    organizer.track(PageView(url=SITE))
    record = organizer.track(PageView(url=SITE + "cart", referrer=SITE + "products?id=1"))

    assert record.medium == config.direct_medium
    assert record.referring_domain == "example.com"
    assert record.referring_path == "/products"


def test_external_referrer_replaces_existing_session() -> None:
    store = FakeStore({"_tsm": "m=Referrer%3A%20Organic|s=blog.net"})
    organizer = _organizer(store)

    record = organizer.track(PageView(url=SITE, referrer="http://www.bing.com/search?q=boots"))

    assert record.source == "Bing"
    assert [call[0] for call in store.calls] == ["delete", "write"]
    assert store.blobs["_tsm"] == encode(record)


def test_tagged_link_replaces_session_even_from_own_domain() -> None:
    store = FakeStore({"_tsm": "m=x|s=y"})
    organizer = _organizer(store)

    record = organizer.track(PageView(url=SITE + "?utm_source=news&utm_medium=email", referrer=SITE))

    assert (record.medium, record.source) == ("email", "news")
    assert store.blobs["_tsm"].startswith("m=email|s=news")


def test_no_referrer_and_no_tags_keeps_session() -> None:
    store = FakeStore({"_tsm": "m=x|s=y"})
    organizer = _organizer(store)

    record = organizer.track(PageView(url=SITE + "?utm_source=news"))

    assert record.is_empty()
    assert store.calls == []


def test_empty_blob_counts_as_no_session() -> None:
    store = FakeStore({"_tsm": ""})
    organizer = _organizer(store)

    record = organizer.track(PageView(url=SITE, referrer=SITE))

    assert record.medium == organizer.config.direct_medium
    assert record.source == "example.com"
    assert store.blobs["_tsm"]


def test_cookie_name_and_timeout_come_from_config() -> None:
    config = Configuration(site_url=SITE)
    config.cookie_name = "_visit"
    config.session_timeout_ms = 60_000
    store = FakeStore()

    _organizer(store, config).track(PageView(url=SITE))

    assert store.calls[-1][1] == "_visit"
    assert store.calls[-1][3] == NOW + timedelta(minutes=1)


def test_expired_session_is_reclassified() -> None:
    clock = MutableClock(NOW)
    store = MemorySessionStore(clock=clock)
    organizer = _organizer(store, clock=clock)

    organizer.track(PageView(url=SITE, referrer="http://www.google.com/search?q=shoes"))
    assert organizer.track(PageView(url=SITE + "a", referrer=SITE)).is_empty()

    clock.now = NOW + timedelta(minutes=31)
    record = organizer.track(PageView(url=SITE + "b", referrer=SITE))

    assert record.medium == organizer.config.direct_medium
    assert record.source == "example.com"


def test_reset_all_clears_record_and_configuration() -> None:
    organizer = _organizer(FakeStore())
    organizer.config.add_paid_parameter("gclid")
    organizer.track(PageView(url=SITE))

    organizer.reset_all("https://www.other.net/")

    assert organizer.record == AttributionRecord()
    assert organizer.config.paid_parameters == []
    assert organizer.config.site_url == "https://www.other.net/"


class DictQuery:
    def __init__(self, params: dict[str, str]) -> None:
        self.params = params

    def get(self, name: str) -> str:
        return self.params.get(name, "")


def test_track_uses_host_query_params() -> None:
    store = FakeStore()
    organizer = _organizer(store)

    record = organizer.track(
        PageView(url=SITE),
        query=DictQuery({"utm_medium": "email", "utm_source": "newsletter"}),
    )

    assert (record.medium, record.source) == ("email", "newsletter")
    assert store.blobs["_tsm"].startswith("m=email|s=newsletter")


def test_internal_page_with_extra_ignored_referrers_keeps_session() -> None:
    config = Configuration(
        site_url=SITE,
        ignored_referrers=[Literal("partner.com", ignore_case=True)],
    )
    store = FakeStore()
    organizer = _organizer(store, config=config)
    organizer.track(PageView(url=SITE, referrer="http://www.google.com/search?q=shoes"))
    calls = len(store.calls)

    record = organizer.track(PageView(url=SITE + "cart", referrer=SITE + "products"))

    assert len(store.calls) == calls
    assert record.is_empty()
