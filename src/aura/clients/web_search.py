"""Brave web search client used to identify unfamiliar vendors."""

from __future__ import annotations

import logging
import re

import httpx

from aura.core.exceptions import SearchTimeoutError

logger = logging.getLogger(__name__)

_TAG = re.compile(r"<[^>]+>")


class BraveWebSearch:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.search.brave.com",
        timeout: float = 5.0,
        result_count: int = 3,
        client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._result_count = result_count
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers={
                    "Accept": "application/json",
                    "X-Subscription-Token": self._api_key,
                },
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def search(self, query: str) -> str | None:
        """Summarize the top results as "title: description" lines.

        Timeouts raise SearchTimeoutError; any other failure or an empty
        result set returns None.
        """
        client = await self._get_client()
        try:
            response = await client.get(
                "/res/v1/web/search",
                params={"q": query, "count": self._result_count},
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error("Web search timed out", extra={"timeout_s": self._timeout})
            raise SearchTimeoutError({"timeout_s": self._timeout}) from e
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Web search returned error",
                extra={"status_code": e.response.status_code},
            )
            return None
        except httpx.HTTPError as e:
            logger.warning("Web search failed", extra={"error_type": type(e).__name__})
            return None

        results = (response.json().get("web") or {}).get("results") or []
        lines = []
        for result in results[: self._result_count]:
            title = _TAG.sub("", result.get("title") or "").strip()
            description = _TAG.sub("", result.get("description") or "").strip()
            if title or description:
                lines.append(f"{title}: {description}" if description else title)
        return "\n".join(lines) or None
