"""Resend received-email API client (message content fetcher)."""

from __future__ import annotations

import logging
from datetime import datetime

import httpx

from aura.clients.interfaces import InboundMessage
from aura.core.exceptions import MessageFetchError

logger = logging.getLogger(__name__)


class ResendMessageFetcher:
    """Fetches full inbound e-mail content by id.

    Webhook events only carry metadata; body text has to be pulled from
    ``GET /emails/receiving/{id}``.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.resend.com",
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_message(self, external_id: str) -> InboundMessage | None:
        client = await self._get_client()
        try:
            response = await client.get(f"/emails/receiving/{external_id}")
        except httpx.TimeoutException as e:
            logger.error("Message fetch timed out", extra={"email_id": external_id})
            raise MessageFetchError({"email_id": external_id, "reason": "timeout"}) from e
        except httpx.HTTPError as e:
            logger.error(
                "Message fetch failed",
                extra={"email_id": external_id, "error_type": type(e).__name__},
            )
            raise MessageFetchError({"email_id": external_id, "reason": str(e)}) from e

        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            logger.error(
                "Message fetch returned error",
                extra={"email_id": external_id, "status_code": response.status_code},
            )
            raise MessageFetchError(
                {"email_id": external_id, "status_code": response.status_code}
            )

        data = response.json()
        if not data:
            return None
        return InboundMessage(
            id=data.get("id") or external_id,
            subject=data.get("subject") or "",
            text=data.get("text"),
            html=data.get("html"),
            sender=data.get("from"),
            recipients=list(data.get("to") or []),
            received_at=_parse_timestamp(data.get("created_at")),
        )


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
