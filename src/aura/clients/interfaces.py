"""Interfaces of the external services the pipeline depends on.

Concrete adapters live next to this module; tests substitute AsyncMocks or
small fakes that satisfy the same protocols.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Protocol, Sequence
from uuid import UUID

from aura.core.enums import Confidence

_TAG = re.compile(r"<[^>]+>")
_SPACES = re.compile(r"\s+")


@dataclass(frozen=True)
class CategoryOption:
    """A category as presented to the categorization tiers."""

    id: UUID
    name: str
    description: str = ""


@dataclass(frozen=True)
class InboundMessage:
    """Full content of a received message."""

    id: str
    subject: str = ""
    text: str | None = None
    html: str | None = None
    sender: str | None = None
    recipients: list[str] = field(default_factory=list)
    received_at: datetime | None = None

    @property
    def content(self) -> str:
        """Plain text body, falling back to the HTML body with tags removed."""
        if self.text and self.text.strip():
            return self.text
        if self.html:
            return _SPACES.sub(" ", _TAG.sub(" ", self.html)).strip()
        return ""


@dataclass(frozen=True)
class OracleVerdict:
    """What the reasoning oracle concluded about a message or vendor."""

    vendor: str | None
    amount: Decimal | None
    category_id: UUID | None
    confidence: Confidence = Confidence.MEDIUM


@dataclass(frozen=True)
class MemorySnippet:
    text: str
    score: float


class MessageContentFetcher(Protocol):
    async def get_message(self, external_id: str) -> InboundMessage | None:
        """Return the message, or None when the provider doesn't know it."""
        ...


class ReasoningOracle(Protocol):
    async def reason(
        self,
        query: str,
        categories: Sequence[CategoryOption],
        search_context: str | None = None,
        subject: str | None = None,
    ) -> OracleVerdict | None:
        """Return a verdict, or None when the oracle declines.

        Declining means the input carries no expense signal (newsletter,
        OTP, marketing). Timeouts and outages are raised, never None.
        """
        ...


class WebSearchOracle(Protocol):
    async def search(self, query: str) -> str | None:
        """Return a short text summary of the top results, or None."""
        ...


class SemanticMemoryStore(Protocol):
    async def search(self, query: str, user_id: UUID, top_k: int) -> list[MemorySnippet]:
        ...

    async def add(self, text: str, user_id: UUID) -> None:
        ...
