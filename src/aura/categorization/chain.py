"""Ordered executor over the categorization tiers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from aura.categorization.strategies import (
    CategorizationContext,
    CategorizationResult,
    CategorizationStrategy,
    FallbackOtherStrategy,
    MemoryStrategy,
    ReasoningStrategy,
    VendorCacheStrategy,
    WebLookupStrategy,
)
from aura.clients.interfaces import ReasoningOracle, SemanticMemoryStore, WebSearchOracle
from aura.core.exceptions import ChainExhaustedError, ValidationError

if TYPE_CHECKING:
    from aura.repositories.vendor_cache import VendorCacheRepository

logger = logging.getLogger(__name__)


class CategorizationChain:
    """Tries each tier in order; the first non-None result wins.

    The last tier is expected to be terminal (never None). If every tier
    still declines, the chain is misconfigured and ChainExhaustedError is
    raised instead of returning nothing.
    """

    def __init__(self, strategies: Sequence[CategorizationStrategy]):
        self.strategies = list(strategies)

    @property
    def tier_names(self) -> list[str]:
        return [s.name for s in self.strategies]

    async def resolve(self, context: CategorizationContext) -> CategorizationResult:
        if not context.categories:
            raise ValidationError("VAL_003", {"user_id": str(context.user_id)})

        for strategy in self.strategies:
            result = await strategy.resolve(context)
            if result is None:
                logger.debug(
                    "Categorization tier deferred",
                    extra={"tier": strategy.name, "vendor": context.vendor},
                )
                continue

            logger.info(
                "Categorization resolved",
                extra={
                    "tier": result.tier,
                    "vendor": context.vendor,
                    "category": result.category_name,
                    "confidence": result.confidence.value,
                },
            )
            return result

        logger.error(
            "Every categorization tier declined",
            extra={"tiers": self.tier_names, "vendor": context.vendor},
        )
        raise ChainExhaustedError({"tiers": self.tier_names})


def build_chain(
    cache_repo: VendorCacheRepository,
    memory_store: SemanticMemoryStore | None = None,
    oracle: ReasoningOracle | None = None,
    search: WebSearchOracle | None = None,
    memory_top_k: int = 5,
    memory_min_score: float = 0.5,
    record_cache_hits: bool = True,
) -> CategorizationChain:
    """Build the fixed tier order, leaving out tiers with no collaborator.

    Cache and fallback are always present; web lookup needs both a search
    client and the oracle to interpret its results.
    ``record_cache_hits=False`` leaves counting a cache hit to the caller.
    """
    strategies: list[CategorizationStrategy] = [
        VendorCacheStrategy(cache_repo, record_hits=record_cache_hits)
    ]
    if memory_store is not None:
        strategies.append(
            MemoryStrategy(memory_store, top_k=memory_top_k, min_score=memory_min_score)
        )
    if oracle is not None:
        strategies.append(ReasoningStrategy(oracle))
        if search is not None:
            strategies.append(WebLookupStrategy(search, oracle))
    strategies.append(FallbackOtherStrategy())
    return CategorizationChain(strategies)
