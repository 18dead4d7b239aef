"""OpenAI-backed reasoning oracle using structured outputs."""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import Literal, Sequence
from uuid import UUID

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel

from aura.clients.interfaces import CategoryOption, OracleVerdict
from aura.core.enums import Confidence
from aura.core.exceptions import OracleTimeoutError, OracleUnavailableError
from aura.core.retry import RetryPolicy, retry_with_backoff

logger = logging.getLogger(__name__)

# Transient failures worth another attempt. APITimeoutError is a subclass of
# APIConnectionError.
TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)

SYSTEM_PROMPT = """You categorize personal expenses for a user in Singapore.

You receive either a bank/card transaction alert or just a vendor name.
Decide whether it describes a money-out expense. Newsletters, marketing,
one-time passwords, statements and incoming transfers are NOT expenses.

When it is an expense:
- vendor: the merchant as it appears in the alert, without card or bank text
- amount: the amount in SGD as a number, or null when the input has none
- category_id: the id of the best matching category below, or null if none fits
- confidence: "high" only when the vendor and category are unambiguous

Categories:
{categories}"""


class _Verdict(BaseModel):
    """Response schema enforced through structured outputs."""

    is_expense: bool
    vendor: str | None
    amount: float | None
    category_id: str | None
    confidence: Literal["high", "medium", "low"]


def format_categories(categories: Sequence[CategoryOption]) -> str:
    lines = []
    for cat in categories:
        desc = f" - {cat.description}" if cat.description else ""
        lines.append(f"- ID {cat.id}: {cat.name}{desc}")
    return "\n".join(lines)


class OpenAIReasoningOracle:
    """Reasoning oracle over the OpenAI chat completions API.

    The SDK's own retries are disabled; transient errors go through
    ``retry_with_backoff`` and the whole call, retries included, runs under
    ``timeout`` seconds.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        timeout: float = 10.0,
        retry_policy: RetryPolicy | None = None,
        client: AsyncOpenAI | None = None,
    ):
        self.client = client or AsyncOpenAI(api_key=api_key, max_retries=0)
        self.model = model
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()

    async def close(self) -> None:
        await self.client.close()

    async def reason(
        self,
        query: str,
        categories: Sequence[CategoryOption],
        search_context: str | None = None,
        subject: str | None = None,
    ) -> OracleVerdict | None:
        messages = [
            {
                "role": "system",
                "content": SYSTEM_PROMPT.format(categories=format_categories(categories)),
            },
            {"role": "user", "content": _user_prompt(query, search_context, subject)},
        ]

        async def call():
            return await self.client.chat.completions.parse(
                model=self.model,
                messages=messages,
                temperature=0.1,
                response_format=_Verdict,
            )

        try:
            response = await asyncio.wait_for(
                retry_with_backoff(call, self.retry_policy, TRANSIENT_ERRORS),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, openai.APITimeoutError) as e:
            logger.error("Reasoning oracle timed out", extra={"timeout_s": self.timeout})
            raise OracleTimeoutError({"timeout_s": self.timeout}) from e
        except openai.OpenAIError as e:
            logger.error(
                "Reasoning oracle request failed",
                extra={"error_type": type(e).__name__},
            )
            raise OracleUnavailableError({"error_type": type(e).__name__}) from e

        message = response.choices[0].message
        parsed: _Verdict | None = message.parsed
        if parsed is None:
            logger.warning("Reasoning oracle returned no parsed verdict")
            return None
        if not parsed.is_expense:
            logger.info("Reasoning oracle declined: no expense signal")
            return None

        return OracleVerdict(
            vendor=(parsed.vendor or "").strip() or None,
            amount=_to_decimal(parsed.amount),
            category_id=_match_category(parsed.category_id, categories),
            confidence=Confidence(parsed.confidence),
        )


def _user_prompt(query: str, search_context: str | None, subject: str | None) -> str:
    parts = []
    if subject:
        parts.append(f"Subject: {subject}")
    parts.append(f"Input:\n{query}")
    if search_context:
        parts.append(f"What a web search says about this vendor:\n{search_context}")
    return "\n\n".join(parts)


def _to_decimal(value: float | None) -> Decimal | None:
    if value is None:
        return None
    try:
        return Decimal(str(value)).quantize(Decimal("0.01"))
    except InvalidOperation:
        return None


def _match_category(raw: str | None, categories: Sequence[CategoryOption]) -> UUID | None:
    """Map the model's answer onto a known category (by id, then by name)."""
    if not raw:
        return None
    raw = raw.strip()
    for cat in categories:
        if str(cat.id) == raw.lower():
            return cat.id
    for cat in categories:
        if cat.name.lower() == raw.lower():
            return cat.id
    return None
