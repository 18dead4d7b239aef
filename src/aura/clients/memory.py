"""Mem0 platform client: remembered categorization corrections per user."""

from __future__ import annotations

import logging
from uuid import UUID

import httpx

from aura.clients.interfaces import MemorySnippet
from aura.core.exceptions import MemoryStoreError

logger = logging.getLogger(__name__)


class Mem0MemoryStore:
    """Semantic memory over the Mem0 REST API.

    Memories are scoped by ``user_id`` so one user's corrections never leak
    into another user's categorization.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.mem0.ai",
        timeout: float = 3.0,
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
                headers={
                    "Authorization": f"Token {self._api_key}",
                    "Content-Type": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _post(self, path: str, payload: dict) -> httpx.Response:
        client = await self._get_client()
        try:
            response = await client.post(path, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(
                "Memory store request failed",
                extra={"path": path, "error_type": type(e).__name__},
            )
            raise MemoryStoreError({"path": path, "error_type": type(e).__name__}) from e
        return response

    async def search(self, query: str, user_id: UUID, top_k: int) -> list[MemorySnippet]:
        response = await self._post(
            "/v1/memories/search/",
            {"query": query, "user_id": str(user_id), "top_k": top_k},
        )
        body = response.json()
        items = body.get("results", []) if isinstance(body, dict) else body
        snippets = [
            MemorySnippet(text=item.get("memory") or "", score=float(item.get("score") or 0.0))
            for item in items or []
            if item.get("memory")
        ]
        snippets.sort(key=lambda s: s.score, reverse=True)
        return snippets

    async def add(self, text: str, user_id: UUID) -> None:
        await self._post(
            "/v1/memories/",
            {"messages": [{"role": "user", "content": text}], "user_id": str(user_id)},
        )
