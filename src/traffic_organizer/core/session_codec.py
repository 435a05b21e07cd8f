"""Session blob encoding (core domain).

Blob format, one ``key=value`` pair per field joined with ``|``:

    m=<medium>|s=<source>|k=<keyword>|kg=<keyword group>|c=<content>
    |cp=<campaign>|rp=<referring path>|rd=<referring domain>

Medium and source are always written; the others only when non-empty.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Optional
from urllib.parse import quote, unquote

from traffic_organizer.core.models import AttributionRecord

FIELD_SEPARATOR = "|"
PIPE_SENTINEL = "~!~"

# Same unreserved set as JavaScript's encodeURIComponent, so blobs written by
# the browser-side tracker stay readable.
_SAFE_CHARS = "-_.!~*'()"

# Encoding order; medium and source are mandatory.
FIELD_KEYS = (
    ("m", "medium"),
    ("s", "source"),
    ("k", "keyword"),
    ("kg", "keyword_group"),
    ("c", "content"),
    ("cp", "campaign"),
    ("rp", "referring_path"),
    ("rd", "referring_domain"),
)
_REQUIRED_KEYS = {"m", "s"}
_FIELDS_BY_KEY: Dict[str, str] = dict(FIELD_KEYS)


def escape_value(value: str) -> str:
    """Hide literal pipes behind the sentinel, then percent-encode."""

    # Lone surrogates (from surrogateescape-decoded URLs) must not raise.
    return quote(value.replace(FIELD_SEPARATOR, PIPE_SENTINEL), safe=_SAFE_CHARS, errors="surrogatepass")


def unescape_value(value: str) -> str:
    """Reverse ``escape_value``: percent-decode, then restore pipes."""

    return unquote(value, errors="replace").replace(PIPE_SENTINEL, FIELD_SEPARATOR)


def encode(record: AttributionRecord) -> str:
    parts = []
    for key, attribute in FIELD_KEYS:
        value = getattr(record, attribute)
        if value or key in _REQUIRED_KEYS:
            parts.append(f"{key}={escape_value(value)}")
    return FIELD_SEPARATOR.join(parts)


def decode(blob: Optional[str], base: Optional[AttributionRecord] = None) -> AttributionRecord:
    """Decode a blob over ``base`` (a blank record by default).

    Unknown keys and segments without ``=`` are skipped; keys missing from the
    blob keep the value they had in ``base``.
    """

    record = base or AttributionRecord()
    if not blob:
        return record

    decoded: Dict[str, str] = {}
    for segment in blob.split(FIELD_SEPARATOR):
        key, sep, raw_value = segment.partition("=")
        attribute = _FIELDS_BY_KEY.get(key)
        if not sep or attribute is None:
            continue
        decoded[attribute] = unescape_value(raw_value)

    return replace(record, **decoded)
