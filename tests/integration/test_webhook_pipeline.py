"""End-to-end tests for the signed inbound e-mail webhook."""
import asyncio
import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from svix.webhooks import Webhook

from aura.api.deps import get_message_fetcher, get_reasoning_oracle
from aura.clients.interfaces import InboundMessage, OracleVerdict
from aura.config import settings
from aura.core.enums import Confidence
from aura.main import app
from aura.models.transaction import Transaction
from aura.models.vendor_cache import VendorCacheEntry
from aura.repositories.vendor_cache import VendorCacheRepository

WEBHOOK_URL = "/api/v1/webhooks/inbound-email"
INBOUND = "user-test@inbound.aura.app"

UOB_ALERT = (
    "A transaction of SGD 16.23 was made with your UOB Card ending 8909 on 08/02/26 "
    "at DIGITALOCEAN.COM. If unauthorised, please call 24/7 Fraud Hotline now"
)
SIA_ALERT = "SGD 1,234.56 charged at SINGAPORE AIRLINES on 3 Mar 2026"
NEWSLETTER = "This week's deals at SHOPEE. Don't miss out!"


def event_body(email_id="em_1", to=INBOUND, event_type="email.received") -> str:
    return json.dumps(
        {
            "type": event_type,
            "created_at": "2026-02-08T04:30:00.000Z",
            "data": {
                "email_id": email_id,
                "from": "unialerts@uobgroup.com",
                "to": [to],
                "subject": "UOB - Card Transaction Alert",
                "created_at": "2026-02-08T04:30:00.000Z",
            },
        }
    )


def signed_headers(body: str, msg_id: str = "msg_test_1") -> dict:
    timestamp = datetime.now(timezone.utc)
    signature = Webhook(settings.webhook_secret).sign(msg_id, timestamp, body)
    return {
        "svix-id": msg_id,
        "svix-timestamp": str(int(timestamp.timestamp())),
        "svix-signature": signature,
        "content-type": "application/json",
    }


async def deliver(client: AsyncClient, body: str, msg_id: str = "msg_test_1"):
    return await client.post(WEBHOOK_URL, content=body, headers=signed_headers(body, msg_id))


@pytest.fixture
def fetcher():
    fetcher = MagicMock()
    fetcher.get_message = AsyncMock(
        return_value=InboundMessage(id="em_1", subject="UOB - Card Transaction Alert", text=UOB_ALERT)
    )
    app.dependency_overrides[get_message_fetcher] = lambda: fetcher
    yield fetcher
    app.dependency_overrides.pop(get_message_fetcher, None)


@pytest.fixture
def oracle():
    oracle = MagicMock()
    oracle.reason = AsyncMock(return_value=None)
    app.dependency_overrides[get_reasoning_oracle] = lambda: oracle
    yield oracle
    app.dependency_overrides.pop(get_reasoning_oracle, None)


async def transaction_count(db_session) -> int:
    return await db_session.scalar(select(func.count()).select_from(Transaction))


class TestIngestion:
    @pytest.mark.asyncio
    async def test_cached_vendor(
        self, client: AsyncClient, db_session, test_user, categories, fetcher, oracle
    ):
        bills = categories["Bills & Utilities"]
        entry = await VendorCacheRepository(db_session).create_entry(
            test_user.id, "DIGITALOCEAN.COM", bills.id
        )

        response = await deliver(client, event_body())

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "cached"
        oracle.reason.assert_not_awaited()

        txn = await db_session.get(Transaction, UUID(data["transaction_id"]))
        assert txn.amount == 1623
        assert txn.category_id == bills.id
        assert txn.resolved_by == "cache"
        await db_session.refresh(entry)
        assert entry.hit_count == 2
        assert entry.category_id == bills.id

    @pytest.mark.asyncio
    async def test_new_vendor_is_processed_and_cached(
        self, client: AsyncClient, db_session, test_user, categories, fetcher, oracle
    ):
        travel = categories["Travel"]
        fetcher.get_message.return_value = InboundMessage(id="em_2", text=SIA_ALERT)
        oracle.reason.return_value = OracleVerdict(
            "SINGAPORE AIRLINES", None, travel.id, Confidence.HIGH
        )

        response = await deliver(client, event_body("em_2"))

        data = response.json()
        assert data["status"] == "processed"
        assert data["transaction_id"] is not None
        txn = await db_session.get(Transaction, UUID(data["transaction_id"]))
        assert txn.amount == 123456
        assert txn.category_id == travel.id
        entry = await VendorCacheRepository(db_session).lookup(test_user.id, "SINGAPORE AIRLINES")
        assert entry.category_id == travel.id

    @pytest.mark.asyncio
    async def test_newsletter_is_skipped(
        self, client: AsyncClient, db_session, test_user, fetcher, oracle
    ):
        fetcher.get_message.return_value = InboundMessage(id="em_3", text=NEWSLETTER)

        response = await deliver(client, event_body("em_3"))

        assert response.status_code == 200
        assert response.json() == {"status": "skipped", "transaction_id": None}
        assert await transaction_count(db_session) == 0

    @pytest.mark.asyncio
    async def test_redelivery_is_a_duplicate(
        self, client: AsyncClient, db_session, test_user, categories, fetcher, oracle
    ):
        oracle.reason.return_value = OracleVerdict(
            "DIGITALOCEAN.COM", None, categories["Bills & Utilities"].id
        )

        first = await deliver(client, event_body("em_4"), msg_id="msg_a")
        calls_after_first = oracle.reason.await_count
        second = await deliver(client, event_body("em_4"), msg_id="msg_b")

        assert first.json()["status"] == "processed"
        assert second.json() == {"status": "duplicate", "transaction_id": None}
        assert oracle.reason.await_count == calls_after_first
        assert fetcher.get_message.await_count == 1
        assert await transaction_count(db_session) == 1


class TestBusinessOutcomes:
    @pytest.mark.asyncio
    async def test_unknown_recipient(self, client: AsyncClient, test_user, fetcher):
        response = await deliver(client, event_body(to="stranger@inbound.aura.app"))

        assert response.status_code == 200
        assert response.json()["status"] == "unknown_recipient"
        fetcher.get_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_other_event_type_ignored(self, client: AsyncClient, test_user, fetcher):
        response = await deliver(client, event_body(event_type="email.delivered"))

        assert response.json()["status"] == "ignored"

    @pytest.mark.asyncio
    async def test_content_not_found(self, client: AsyncClient, test_user, fetcher):
        fetcher.get_message.return_value = None

        response = await deliver(client, event_body())

        assert response.json()["status"] == "content_not_found"


class TestRejections:
    @pytest.mark.asyncio
    async def test_bad_signature(self, client: AsyncClient, db_session, test_user, fetcher):
        body = event_body()
        headers = signed_headers(body)
        headers["svix-signature"] = "v1,c2lnbmF0dXJlLXRoYXQtZG9lcy1ub3QtbWF0Y2g="

        response = await client.post(WEBHOOK_URL, content=body, headers=headers)

        assert response.status_code == 401
        assert response.json()["error_code"] == "WEBHOOK_001"
        fetcher.get_message.assert_not_awaited()
        assert await transaction_count(db_session) == 0

    @pytest.mark.asyncio
    async def test_tampered_body(self, client: AsyncClient, test_user, fetcher):
        headers = signed_headers(event_body("em_1"))

        response = await client.post(WEBHOOK_URL, content=event_body("em_2"), headers=headers)

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_signature_headers(self, client: AsyncClient, test_user, fetcher):
        response = await client.post(WEBHOOK_URL, content=event_body())
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_signed_but_malformed_event(self, client: AsyncClient, test_user, fetcher):
        body = json.dumps({"type": "email.received", "data": {}})

        response = await deliver(client, body)

        assert response.status_code == 400
        assert response.json()["error_code"] == "VAL_001"


class TestInfrastructureFailures:
    @pytest.mark.asyncio
    async def test_pipeline_deadline_returns_503(
        self, client: AsyncClient, db_session, test_user, fetcher, monkeypatch
    ):
        async def slow_fetch(email_id):
            await asyncio.sleep(1)

        fetcher.get_message = slow_fetch
        monkeypatch.setattr(settings, "pipeline_timeout_seconds", 0.05)

        response = await deliver(client, event_body())

        assert response.status_code == 503
        data = response.json()
        assert data["error_code"] == "PIPE_001"
        assert data["retry_allowed"] is True
        assert await transaction_count(db_session) == 0

    @pytest.mark.asyncio
    async def test_no_fetcher_configured_returns_503(
        self, client: AsyncClient, db_session, test_user
    ):
        response = await deliver(client, event_body())

        assert response.status_code == 503
        assert response.json()["error_code"] == "FETCH_001"
        assert await db_session.scalar(select(func.count()).select_from(VendorCacheEntry)) == 0
