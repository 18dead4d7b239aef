"""Vendor name canonicalization.

Vendor names are compared as exact keys (not fuzzy matching) for the vendor
cache, so every producer and consumer of a key goes through
``normalize_vendor``.
"""

from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")
# Trailing dots, plus any whitespace left exposed between them ("ACME . .").
_TRAILING_DOTS = re.compile(r"[.\s]+$")

# "at VENDOR" as used in UOB/DBS/OCBC card alerts. The vendor ends at a
# sentence break, a clause keyword, or the end of the text.
VENDOR_AT_PATTERN = re.compile(
    r"\bat\s+([A-Z][A-Z0-9 .*\-]+?)(?:(?:\.\s)|(?:,\s)|\s+(?:for|on|If)\b|$)",
    re.IGNORECASE,
)


def normalize_vendor(raw: str | None) -> str:
    """Normalize a vendor string into a stable cache key.

    Trims, collapses whitespace runs, uppercases and strips trailing dots.
    Corporate suffixes are kept: alert vendors ("GRAB *GRABFOOD", "SP GROUP")
    don't carry them.
    """
    text = _WHITESPACE.sub(" ", (raw or "").strip()).upper()
    return _TRAILING_DOTS.sub("", text)


def extract_rough_vendor(text: str | None) -> str | None:
    """Pull a vendor out of "... at VENDOR." alert text, or None."""
    if not text:
        return None
    match = VENDOR_AT_PATTERN.search(text)
    if not match:
        return None
    return normalize_vendor(match.group(1)) or None
