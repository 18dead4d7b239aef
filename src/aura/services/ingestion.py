"""Inbound e-mail ingestion pipeline.

One webhook event in, one ``IngestionOutcome`` out:

    recipient -> event type -> dedup -> fetch -> regex extraction
        -> cache fast path, or full extraction + categorization chain
        -> persist -> vendor cache

Expected outcomes (unknown recipient, ignored, duplicate, content not found,
skipped) are returned as statuses. Only infrastructure failures raise.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from aura.categorization.chain import CategorizationChain, build_chain
from aura.categorization.extraction import ExtractedExpense, extract_expense, to_minor_units
from aura.categorization.strategies import (
    CategorizationContext,
    CategorizationResult,
    VendorCacheStrategy,
)
from aura.categorization.vendor import normalize_vendor
from aura.clients.interfaces import (
    CategoryOption,
    MessageContentFetcher,
    OracleVerdict,
    ReasoningOracle,
    SemanticMemoryStore,
    WebSearchOracle,
)
from aura.config import settings
from aura.core.enums import EMAIL_RECEIVED_EVENT, IngestionStatus, TransactionSource
from aura.core.exceptions import MessageFetchError, NotFoundError, PipelineTimeoutError
from aura.models.transaction import Transaction
from aura.models.user import User
from aura.repositories.category import CategoryRepository
from aura.repositories.transaction import TransactionRepository
from aura.repositories.user import UserRepository
from aura.repositories.vendor_cache import VendorCacheRepository
from aura.schemas.webhooks import InboundEmailEvent
from aura.services.dedup import DeduplicationGuard

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestionOutcome:
    status: IngestionStatus
    transaction_id: UUID | None = None
    tier: str | None = None


@dataclass(frozen=True)
class _Expense:
    vendor: str
    amount: int
    txn_date: date
    verdict: OracleVerdict | None = None


class IngestionPipeline:
    """Turns inbound e-mail events into categorized transactions."""

    def __init__(
        self,
        db: AsyncSession,
        fetcher: MessageContentFetcher | None,
        oracle: ReasoningOracle | None = None,
        search: WebSearchOracle | None = None,
        memory_store: SemanticMemoryStore | None = None,
        chain: CategorizationChain | None = None,
        timeout: float | None = None,
    ):
        self.db = db
        self.fetcher = fetcher
        self.oracle = oracle
        self.user_repo = UserRepository(db)
        self.category_repo = CategoryRepository(db)
        self.txn_repo = TransactionRepository(db)
        self.cache_repo = VendorCacheRepository(db)
        self.dedup = DeduplicationGuard(db)
        self.cache_tier = VendorCacheStrategy(self.cache_repo, record_hits=False)
        self.chain = chain or build_chain(
            self.cache_repo,
            memory_store=memory_store,
            oracle=oracle,
            search=search,
            memory_top_k=settings.memory_top_k,
            memory_min_score=settings.memory_min_score,
            record_cache_hits=False,
        )
        self.timeout = timeout if timeout is not None else settings.pipeline_timeout_seconds
        self.local_tz = ZoneInfo(settings.local_timezone)

    async def run(self, event: InboundEmailEvent) -> IngestionOutcome:
        """Process one event under the pipeline deadline.

        Raises:
            PipelineTimeoutError: If the deadline passes; pending calls are cancelled
            InfrastructureError: If a collaborator fails
        """
        try:
            return await asyncio.wait_for(self._process(event), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(
                "Ingestion deadline exceeded",
                extra={"email_id": event.data.email_id, "timeout_s": self.timeout},
            )
            raise PipelineTimeoutError(
                {"email_id": event.data.email_id, "timeout_s": self.timeout}
            ) from e

    def _done(
        self,
        status: IngestionStatus,
        email_id: str,
        transaction_id: UUID | None = None,
        tier: str | None = None,
    ) -> IngestionOutcome:
        logger.info(
            "Ingestion finished",
            extra={
                "status": status.value,
                "email_id": email_id,
                "transaction_id": str(transaction_id) if transaction_id else None,
                "tier": tier,
            },
        )
        return IngestionOutcome(status=status, transaction_id=transaction_id, tier=tier)

    async def _process(self, event: InboundEmailEvent) -> IngestionOutcome:
        data = event.data
        email_id = data.email_id

        user = await self._resolve_recipient(data.to)
        if user is None:
            return self._done(IngestionStatus.UNKNOWN_RECIPIENT, email_id)

        if event.type != EMAIL_RECEIVED_EVENT:
            return self._done(IngestionStatus.IGNORED, email_id)

        if await self.dedup.is_duplicate(email_id):
            return self._done(IngestionStatus.DUPLICATE, email_id)

        if self.fetcher is None:
            raise MessageFetchError({"reason": "message content provider not configured"})
        message = await self.fetcher.get_message(email_id)
        if message is None:
            return self._done(IngestionStatus.CONTENT_NOT_FOUND, email_id)

        content = message.content
        subject = message.subject or data.subject
        received_at = message.received_at or data.created_at or event.created_at
        options = [
            CategoryOption(id=c.id, name=c.name, description=c.description)
            for c in await self.category_repo.list_by_user(user.id)
        ]

        # Fast path: a regex-extracted vendor that is already cached skips reasoning.
        extracted = extract_expense(content)
        if extracted is not None and extracted.has_vendor:
            cached = await self.cache_tier.resolve(
                CategorizationContext(user.id, extracted.vendor, options, content)
            )
            if cached is not None:
                expense = _Expense(
                    vendor=extracted.vendor,
                    amount=extracted.amount,
                    txn_date=extracted.txn_date or self._local_date(received_at),
                )
                return await self._persist(user, email_id, subject, expense, cached)

        expense = await self._extract(extracted, content, subject, options, received_at)
        if expense is None:
            return self._done(IngestionStatus.SKIPPED, email_id)

        result = await self.chain.resolve(
            CategorizationContext(
                user.id, expense.vendor, options, content, verdict=expense.verdict
            )
        )
        return await self._persist(user, email_id, subject, expense, result)

    async def _resolve_recipient(self, recipients: list[str]) -> User | None:
        for address in recipients:
            user = await self.user_repo.get_by_inbound_email(_bare_address(address))
            if user is not None:
                return user
        return None

    async def _extract(
        self,
        extracted: ExtractedExpense | None,
        content: str,
        subject: str,
        options: list[CategoryOption],
        received_at: datetime | None,
    ) -> _Expense | None:
        """Regex first; the reasoning oracle reads the message when regex can't."""
        if extracted is not None and extracted.has_vendor:
            return _Expense(
                vendor=extracted.vendor,
                amount=extracted.amount,
                txn_date=extracted.txn_date or self._local_date(received_at),
            )

        if self.oracle is None:
            logger.warning("No reasoning oracle configured; message not extractable")
            return None

        verdict = await self.oracle.reason(content, options, subject=subject)
        if verdict is None or not verdict.vendor or not normalize_vendor(verdict.vendor):
            return None

        if extracted is not None:
            amount = extracted.amount
        elif verdict.amount is not None and verdict.amount > 0:
            amount = to_minor_units(verdict.amount, settings.currency_minor_unit)
        else:
            return None

        txn_date = extracted.txn_date if extracted is not None else None
        return _Expense(
            vendor=verdict.vendor,
            amount=amount,
            txn_date=txn_date or self._local_date(received_at),
            verdict=verdict,
        )

    def _local_date(self, received_at: datetime | None) -> date:
        moment = received_at or datetime.now(timezone.utc)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(self.local_tz).date()

    async def _persist(
        self,
        user: User,
        email_id: str,
        subject: str,
        expense: _Expense,
        result: CategorizationResult,
    ) -> IngestionOutcome:
        txn = Transaction(
            user_id=user.id,
            category_id=result.category_id,
            amount=expense.amount,
            vendor=expense.vendor,
            vendor_key=normalize_vendor(expense.vendor),
            description=(subject or "")[:500],
            txn_date=expense.txn_date,
            external_message_id=email_id,
            raw_subject=(subject or "")[:500],
            confidence=result.confidence,
            source=TransactionSource.INGESTED,
            resolved_by=result.tier,
        )
        try:
            txn = await self.txn_repo.create(txn)
        except IntegrityError:
            # A concurrent delivery of the same message won the insert.
            await self.db.rollback()
            if await self.dedup.is_duplicate(email_id):
                return self._done(IngestionStatus.DUPLICATE, email_id)
            raise

        # Counted only now, so a delivery that lost the insert race never counts.
        if result.pending_hit_entry_id is not None:
            try:
                await self.cache_repo.increment_hit(result.pending_hit_entry_id)
            except NotFoundError:
                logger.warning(
                    "Vendor cache entry removed before its hit was recorded",
                    extra={"entry_id": str(result.pending_hit_entry_id), "email_id": email_id},
                )

        if result.tier == VendorCacheStrategy.name:
            return self._done(
                IngestionStatus.CACHED, email_id, transaction_id=txn.id, tier=result.tier
            )

        await self.cache_repo.create_if_absent(user.id, expense.vendor, result.category_id)
        return self._done(
            IngestionStatus.PROCESSED, email_id, transaction_id=txn.id, tier=result.tier
        )


def _bare_address(address: str) -> str:
    """'Name <user@host>' -> 'user@host'."""
    address = address.strip()
    if "<" in address and address.endswith(">"):
        return address[address.rindex("<") + 1 : -1].strip()
    return address
