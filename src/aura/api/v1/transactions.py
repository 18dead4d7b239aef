"""Transaction endpoints: listing, manual entry and recategorization."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from aura.api.deps import get_current_user, get_transaction_service
from aura.config import settings
from aura.core.enums import TransactionSource
from aura.models.user import User
from aura.schemas.common import MoneyMeta, PaginationMeta
from aura.schemas.transactions import (
    TransactionCreate,
    TransactionListResult,
    TransactionResponse,
    TransactionUpdate,
)
from aura.services.transactions import TransactionService

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get(
    "",
    response_model=TransactionListResult,
    summary="List transactions",
)
async def list_transactions(
    page: Annotated[int, Query(ge=1, description="Page number (1-indexed)")] = 1,
    limit: Annotated[int, Query(ge=1, le=100, description="Items per page (1-100)")] = 20,
    category_id: Annotated[UUID | None, Query(description="Filter by category")] = None,
    source: Annotated[
        TransactionSource | None, Query(description="Filter by source (ingested/manual)")
    ] = None,
    current_user: User = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionListResult:
    items, total = await service.list_transactions(
        current_user.id, page=page, limit=limit, category_id=category_id, source=source
    )
    total_pages = (total + limit - 1) // limit if total > 0 else 0

    return TransactionListResult(
        transactions=[TransactionResponse.model_validate(t) for t in items],
        pagination=PaginationMeta(page=page, limit=limit, total=total, total_pages=total_pages),
        money=MoneyMeta(currency=settings.currency, minor_unit=settings.currency_minor_unit),
    )


@router.post(
    "",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a manual transaction",
)
async def create_transaction(
    data: TransactionCreate,
    current_user: User = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionResponse:
    """
    Raises:
        400: Amount is not positive (VAL_002)
        404: Category not found (API_001)
    """
    txn = await service.create_manual(
        current_user.id,
        amount=data.amount,
        vendor=data.vendor,
        category_id=data.category_id,
        txn_date=data.txn_date,
        description=data.description,
    )
    return TransactionResponse.model_validate(txn)


@router.patch(
    "/{transaction_id}",
    response_model=TransactionResponse,
    summary="Update a transaction",
    description="Changing the category also updates the vendor's cached category.",
)
async def update_transaction(
    transaction_id: UUID,
    data: TransactionUpdate,
    current_user: User = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionResponse:
    txn = await service.update(
        current_user.id, transaction_id, data.model_dump(exclude_unset=True)
    )
    return TransactionResponse.model_validate(txn)


@router.delete(
    "/{transaction_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a transaction",
)
async def delete_transaction(
    transaction_id: UUID,
    current_user: User = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service),
) -> Response:
    await service.delete(current_user.id, transaction_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
