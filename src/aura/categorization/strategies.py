"""Ranked vendor-categorization tiers.

Every tier answers ``resolve(context)`` with a result, or None to defer to
the next tier. A tier only touches storage when it is the one that answers.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, Sequence
from uuid import UUID

from aura.categorization.vendor import normalize_vendor
from aura.clients.interfaces import (
    CategoryOption,
    OracleVerdict,
    ReasoningOracle,
    SemanticMemoryStore,
    WebSearchOracle,
)
from aura.core.enums import Confidence
from aura.models.category import OTHER_CATEGORY_NAME

if TYPE_CHECKING:
    from aura.repositories.vendor_cache import VendorCacheRepository

logger = logging.getLogger(__name__)

# Free-text passed to the oracle is capped; alerts are short.
_MAX_CONTENT_CHARS = 2000


@dataclass(frozen=True)
class CategorizationContext:
    user_id: UUID
    vendor: str
    categories: Sequence[CategoryOption] = field(default_factory=tuple)
    content: str | None = None
    # Verdict from an oracle call that already read this message, if any.
    verdict: OracleVerdict | None = None

    def find(self, category_id: UUID | None) -> CategoryOption | None:
        for cat in self.categories:
            if cat.id == category_id:
                return cat
        return None


@dataclass(frozen=True)
class CategorizationResult:
    """Category picked for a vendor, tagged with the tier that picked it."""

    category_id: UUID
    category_name: str
    confidence: Confidence
    tier: str
    # Cache entry whose hit the caller still has to record.
    pending_hit_entry_id: UUID | None = None


class CategorizationStrategy(Protocol):
    name: str

    async def resolve(self, context: CategorizationContext) -> CategorizationResult | None:
        ...


class VendorCacheStrategy:
    """Exact match on the normalized vendor in the user's vendor cache.

    With ``record_hits=False`` the hit is not counted here; the result
    carries ``pending_hit_entry_id`` so the caller can count it once the
    transaction it categorizes has been stored.
    """

    name = "cache"

    def __init__(self, cache_repo: VendorCacheRepository, record_hits: bool = True):
        self.cache_repo = cache_repo
        self.record_hits = record_hits

    async def resolve(self, context: CategorizationContext) -> CategorizationResult | None:
        entry = await self.cache_repo.lookup(context.user_id, context.vendor)
        if entry is None:
            return None

        category = context.find(entry.category_id)
        if category is None:
            # Stale entry: its category is not one of the user's categories.
            logger.warning(
                "Vendor cache entry points at unknown category",
                extra={"entry_id": str(entry.id), "category_id": str(entry.category_id)},
            )
            return None

        if self.record_hits:
            await self.cache_repo.increment_hit(entry.id)
        return CategorizationResult(
            category_id=category.id,
            category_name=category.name,
            confidence=Confidence.HIGH,
            tier=self.name,
            pending_hit_entry_id=None if self.record_hits else entry.id,
        )


class MemoryStrategy:
    """Remembered user corrections for this (or a similar) vendor."""

    name = "memory"

    HIGH_SCORE = 0.8

    def __init__(self, store: SemanticMemoryStore, top_k: int = 5, min_score: float = 0.5):
        self.store = store
        self.top_k = top_k
        self.min_score = min_score

    async def resolve(self, context: CategorizationContext) -> CategorizationResult | None:
        snippets = await self.store.search(
            f"How should I categorize {normalize_vendor(context.vendor)}?",
            context.user_id,
            self.top_k,
        )
        for snippet in sorted(snippets, key=lambda s: s.score, reverse=True):
            if snippet.score < self.min_score:
                break
            category = _named_category(snippet.text, context.categories)
            if category is None:
                continue
            return CategorizationResult(
                category_id=category.id,
                category_name=category.name,
                confidence=(
                    Confidence.HIGH if snippet.score >= self.HIGH_SCORE else Confidence.MEDIUM
                ),
                tier=self.name,
            )
        return None


class ReasoningStrategy:
    """Ask the reasoning oracle to match the vendor against category descriptions.

    A verdict already on the context was given with the whole message and
    the same categories, so it is used as is instead of asking again.
    """

    name = "reasoning"

    def __init__(self, oracle: ReasoningOracle):
        self.oracle = oracle

    async def resolve(self, context: CategorizationContext) -> CategorizationResult | None:
        verdict = context.verdict
        if verdict is None:
            query = f"Vendor: {context.vendor}"
            if context.content:
                query += f"\n\nMessage:\n{context.content[:_MAX_CONTENT_CHARS]}"
            verdict = await self.oracle.reason(query, context.categories)

        category = context.find(verdict.category_id) if verdict else None
        if category is None:
            return None
        return CategorizationResult(
            category_id=category.id,
            category_name=category.name,
            confidence=Confidence.MEDIUM,
            tier=self.name,
        )


class WebLookupStrategy:
    """Identify an unfamiliar vendor via web search, then ask the oracle again."""

    name = "web"

    def __init__(self, search: WebSearchOracle, oracle: ReasoningOracle):
        self.search = search
        self.oracle = oracle

    async def resolve(self, context: CategorizationContext) -> CategorizationResult | None:
        summary = await self.search.search(f"What is {context.vendor}?")
        if not summary:
            return None

        verdict = await self.oracle.reason(
            f"Vendor: {context.vendor}", context.categories, search_context=summary
        )
        category = context.find(verdict.category_id) if verdict else None
        if category is None:
            return None
        # Search results are second-hand evidence: never better than MEDIUM.
        confidence = Confidence.MEDIUM if verdict.confidence == Confidence.HIGH else Confidence.LOW
        return CategorizationResult(
            category_id=category.id,
            category_name=category.name,
            confidence=confidence,
            tier=self.name,
        )


class FallbackOtherStrategy:
    """Terminal tier: "Other" (case-insensitive), else the last category."""

    name = "fallback"

    async def resolve(self, context: CategorizationContext) -> CategorizationResult | None:
        if not context.categories:
            return None
        category = next(
            (
                c
                for c in context.categories
                if c.name.strip().lower() == OTHER_CATEGORY_NAME.lower()
            ),
            context.categories[-1],
        )
        return CategorizationResult(
            category_id=category.id,
            category_name=category.name,
            confidence=Confidence.LOW,
            tier=self.name,
        )


def _named_category(
    text: str, categories: Sequence[CategoryOption]
) -> CategoryOption | None:
    """The single category a snippet names, or None when it names zero or several."""
    named = [
        cat
        for cat in categories
        if re.search(rf"(?<!\w){re.escape(cat.name)}(?!\w)", text, re.IGNORECASE)
    ]
    return named[0] if len(named) == 1 else None
