"""Source template substitution (core domain)."""

from __future__ import annotations

import re

from traffic_organizer.core.models import AttributionRecord

PLACEHOLDERS = {
    "%rd": "referring_domain",
    "%rp": "referring_path",
    "%cp": "campaign",
    "%kg": "keyword_group",
    "%m": "medium",
    "%s": "source",
    "%c": "content",
    "%k": "keyword",
}

# Two-letter tokens come first in the alternation so "%cp" never reads as "%c".
_PLACEHOLDER_RE = re.compile(
    "|".join(re.escape(token) for token in sorted(PLACEHOLDERS, key=len, reverse=True))
)


def format_template(template: str, record: AttributionRecord) -> str:
    """Replace every placeholder in ``template`` with the record's values.

    Substitution is a single pass, so values that themselves contain
    placeholder text are inserted as-is. Unknown tokens such as ``%r`` are
    left untouched.
    """

    if not template:
        return ""
    return _PLACEHOLDER_RE.sub(lambda hit: getattr(record, PLACEHOLDERS[hit.group(0)]), template)
