"""Traffic source classification with session persistence.

Usage:
    from traffic_organizer import Configuration, PageView, TrafficOrganizer
    from traffic_organizer.adapters.memory_store import MemorySessionStore

    organizer = TrafficOrganizer(
        Configuration(site_url="https://www.example.com/"),
        MemorySessionStore(),
    )
    record = organizer.track(PageView(url=landing_url, referrer=referrer))
"""

from traffic_organizer.core.classifier import classify
from traffic_organizer.core.config import Configuration
from traffic_organizer.core.models import (
    AttributionRecord,
    KeywordGroupRule,
    Literal,
    PageView,
    Pattern,
    ReferrerGroupRule,
    SearchEngineRule,
)
from traffic_organizer.core.session_codec import decode, encode
from traffic_organizer.core.tracker import TrafficOrganizer

__version__ = "1.0.0"

__all__ = [
    "AttributionRecord",
    "Configuration",
    "KeywordGroupRule",
    "Literal",
    "PageView",
    "Pattern",
    "ReferrerGroupRule",
    "SearchEngineRule",
    "TrafficOrganizer",
    "classify",
    "decode",
    "encode",
]
