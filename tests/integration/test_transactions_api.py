"""Integration tests for transaction API endpoints."""
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from aura.api.deps import get_memory_store
from aura.main import app
from aura.models.vendor_cache import VendorCacheEntry
from aura.repositories.vendor_cache import VendorCacheRepository


async def create_manual(client, headers, category_id, vendor="Ya Kun Kaya Toast", amount=680):
    return await client.post(
        "/api/v1/transactions",
        json={
            "amount": amount,
            "vendor": vendor,
            "category_id": str(category_id),
            "txn_date": "2026-02-08",
            "description": "breakfast",
        },
        headers=headers,
    )


@pytest.fixture
def memory_store():
    store = MagicMock()
    store.add = AsyncMock()
    app.dependency_overrides[get_memory_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_memory_store, None)


class TestCreateTransaction:
    @pytest.mark.asyncio
    async def test_manual_entry_seeds_vendor_cache(
        self, client: AsyncClient, auth_headers, db_session, test_user, categories
    ):
        food = categories["Food & Beverage"]

        response = await create_manual(client, auth_headers, food.id)

        assert response.status_code == 201
        data = response.json()
        assert data["amount"] == 680
        assert data["source"] == "manual"
        assert data["confidence"] == "high"
        assert data["resolved_by"] == "manual"

        entry = await VendorCacheRepository(db_session).lookup(test_user.id, "YA KUN KAYA TOAST")
        assert entry is not None
        assert entry.category_id == food.id

    @pytest.mark.asyncio
    async def test_non_positive_amount(self, client: AsyncClient, auth_headers, categories):
        response = await create_manual(client, auth_headers, categories["Other"].id, amount=0)

        assert response.status_code == 400
        assert response.json()["error_code"] == "VAL_002"

    @pytest.mark.asyncio
    async def test_unknown_category(self, client: AsyncClient, auth_headers, categories):
        response = await create_manual(client, auth_headers, uuid4())

        assert response.status_code == 404
        assert response.json()["error_code"] == "API_001"


class TestListTransactions:
    @pytest.mark.asyncio
    async def test_pagination_and_money_meta(
        self, client: AsyncClient, auth_headers, categories
    ):
        for i in range(3):
            await create_manual(client, auth_headers, categories["Other"].id, vendor=f"SHOP {i}")

        response = await client.get("/api/v1/transactions?page=1&limit=2", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert len(data["transactions"]) == 2
        assert data["pagination"]["total"] == 3
        assert data["pagination"]["total_pages"] == 2
        assert data["money"] == {"currency": "SGD", "minor_unit": 2}

    @pytest.mark.asyncio
    async def test_filter_by_category(self, client: AsyncClient, auth_headers, categories):
        await create_manual(client, auth_headers, categories["Travel"].id, vendor="AGODA")
        await create_manual(client, auth_headers, categories["Other"].id, vendor="MISC")

        response = await client.get(
            f"/api/v1/transactions?category_id={categories['Travel'].id}", headers=auth_headers
        )

        assert [t["vendor"] for t in response.json()["transactions"]] == ["AGODA"]


class TestRecategorize:
    @pytest.mark.asyncio
    async def test_updates_existing_cache_entry(
        self, client: AsyncClient, auth_headers, db_session, test_user, categories, memory_store
    ):
        created = await create_manual(client, auth_headers, categories["Other"].id, vendor="Grab")
        txn_id = created.json()["id"]
        transport = categories["Transportation"]

        response = await client.patch(
            f"/api/v1/transactions/{txn_id}",
            json={"category_id": str(transport.id)},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["category_id"] == str(transport.id)
        assert response.json()["resolved_by"] == "manual"

        entries = (
            await db_session.execute(
                select(VendorCacheEntry.category_id).where(
                    VendorCacheEntry.user_id == test_user.id,
                    VendorCacheEntry.vendor_name == "GRAB",
                )
            )
        ).all()
        assert [e.category_id for e in entries] == [transport.id]

        memory_store.add.assert_awaited_once()
        text, user_id = memory_store.add.await_args.args
        assert text == "GRAB should be categorized as Transportation."
        assert user_id == test_user.id

    @pytest.mark.asyncio
    async def test_creates_missing_cache_entry(
        self, client: AsyncClient, auth_headers, db_session, test_user, categories
    ):
        created = await create_manual(client, auth_headers, categories["Other"].id, vendor="Agoda")
        await db_session.execute(VendorCacheEntry.__table__.delete())
        await db_session.commit()

        await client.patch(
            f"/api/v1/transactions/{created.json()['id']}",
            json={"category_id": str(categories["Travel"].id)},
            headers=auth_headers,
        )

        entry = await VendorCacheRepository(db_session).lookup(test_user.id, "AGODA")
        assert entry.category_id == categories["Travel"].id

    @pytest.mark.asyncio
    async def test_same_category_leaves_cache_alone(
        self, client: AsyncClient, auth_headers, db_session, categories, memory_store
    ):
        created = await create_manual(client, auth_headers, categories["Other"].id)

        response = await client.patch(
            f"/api/v1/transactions/{created.json()['id']}",
            json={"category_id": str(categories["Other"].id), "description": "brunch"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["description"] == "brunch"
        memory_store.add.assert_not_awaited()
        assert await db_session.scalar(
            select(func.count()).select_from(VendorCacheEntry)
        ) == 1

    @pytest.mark.asyncio
    async def test_other_users_transaction_not_found(
        self, client: AsyncClient, auth_headers, categories
    ):
        response = await client.patch(
            f"/api/v1/transactions/{uuid4()}",
            json={"description": "x"},
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "API_002"


class TestDeleteTransaction:
    @pytest.mark.asyncio
    async def test_delete(self, client: AsyncClient, auth_headers, categories):
        created = await create_manual(client, auth_headers, categories["Other"].id)
        txn_id = created.json()["id"]

        response = await client.delete(f"/api/v1/transactions/{txn_id}", headers=auth_headers)
        assert response.status_code == 204

        again = await client.delete(f"/api/v1/transactions/{txn_id}", headers=auth_headers)
        assert again.status_code == 404


@pytest.mark.asyncio
async def test_vendor_cache_listing(client: AsyncClient, auth_headers, categories):
    await create_manual(client, auth_headers, categories["Travel"].id, vendor="Agoda")

    response = await client.get("/api/v1/vendor-cache", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert [(e["vendor_name"], e["hit_count"]) for e in data] == [("AGODA", 1)]
