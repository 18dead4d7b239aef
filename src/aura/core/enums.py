"""Shared enumerations stored on rows and returned by the API."""

from enum import Enum


class Confidence(str, Enum):
    """How sure the resolving tier was about a category."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TransactionSource(str, Enum):
    INGESTED = "ingested"
    MANUAL = "manual"


class IngestionStatus(str, Enum):
    """Terminal outcome of one inbound event.

    Every value except PROCESSED and CACHED is an expected business outcome
    with no transaction created.
    """

    UNKNOWN_RECIPIENT = "unknown_recipient"
    IGNORED = "ignored"
    DUPLICATE = "duplicate"
    CONTENT_NOT_FOUND = "content_not_found"
    SKIPPED = "skipped"
    CACHED = "cached"
    PROCESSED = "processed"


# Event type the inbound-mail provider sends for a delivered message.
EMAIL_RECEIVED_EVENT = "email.received"

# Resolver tag for transactions whose category the user chose.
MANUAL_RESOLVER = "manual"
