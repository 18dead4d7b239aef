"""Regex extraction of expense data from bank alert text.

Cheap, deterministic first pass over inbound messages. Handles the common
Singapore card alert formats (UOB, DBS, OCBC), e.g.:

    A transaction of SGD 16.23 was made with your UOB Card ending 8909
    on 08/02/26 at DIGITALOCEAN.COM.

Anything it cannot read is left for the reasoning oracle.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from aura.categorization.vendor import VENDOR_AT_PATTERN, normalize_vendor

UNKNOWN_VENDOR = "UNKNOWN"

# "SGD 16.23", "SGD 1,234.56", "S$48.00", "S$ 89.99"
_AMOUNT = re.compile(r"(?:SGD|S\$)\s*([\d,]+\.\d{2})", re.IGNORECASE)
# "to VENDOR" (OCBC PayNow / bill payments)
_VENDOR_TO = re.compile(
    r"\bto\s+([A-Z][A-Z0-9 .*\-]+?)(?:(?:\.\s)|(?:,\s)|\s+(?:for|on|If)\b|$)",
    re.IGNORECASE,
)
_DATE_SLASH = re.compile(r"\b(\d{2}/\d{2}/\d{2})\b")
_DATE_LONG = re.compile(
    r"\b(\d{1,2}\s+(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)\s+\d{4})\b",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ExtractedExpense:
    """Result of regex extraction (amount in minor units)."""

    amount: int
    vendor: str
    date_raw: str | None = None

    @property
    def has_vendor(self) -> bool:
        return self.vendor != UNKNOWN_VENDOR

    @property
    def txn_date(self) -> date | None:
        return parse_alert_date(self.date_raw)


def to_minor_units(value: Decimal | str | float, minor_unit: int = 2) -> int:
    """Convert a major-unit amount to an integer of minor units, exactly."""
    return int((Decimal(str(value)) * (10**minor_unit)).quantize(Decimal("1")))


def parse_alert_date(raw: str | None) -> date | None:
    """Parse DD/MM/YY (Singapore order) or "D Mon YYYY"; None if invalid."""
    if not raw:
        return None
    for fmt in ("%d/%m/%y", "%d %b %Y"):
        try:
            return datetime.strptime(raw.strip().title(), fmt).date()
        except ValueError:
            continue
    return None


def extract_expense(text: str | None) -> ExtractedExpense | None:
    """Extract amount, vendor and date from alert text.

    Returns None when no positive amount is found, i.e. the text doesn't look
    like a transaction alert. A missing vendor is reported as UNKNOWN.
    """
    if not text:
        return None

    amount_match = _AMOUNT.search(text)
    if not amount_match:
        return None
    try:
        amount = Decimal(amount_match.group(1).replace(",", ""))
    except InvalidOperation:
        return None
    if amount <= 0:
        return None

    vendor = None
    for pattern in (VENDOR_AT_PATTERN, _VENDOR_TO):
        match = pattern.search(text)
        if match:
            vendor = normalize_vendor(match.group(1))
            if vendor:
                break

    date_match = _DATE_SLASH.search(text) or _DATE_LONG.search(text)

    return ExtractedExpense(
        amount=to_minor_units(amount),
        vendor=vendor or UNKNOWN_VENDOR,
        date_raw=date_match.group(1) if date_match else None,
    )
