"""Category endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from aura.api.deps import get_category_coordinator, get_category_service, get_current_user
from aura.models.user import User
from aura.schemas.categories import CategoryCreate, CategoryResponse
from aura.services.categories import CategoryLifecycleCoordinator, CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryResponse], summary="List categories")
async def list_categories(
    current_user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
) -> list[CategoryResponse]:
    categories = await service.list_categories(current_user.id)
    return [CategoryResponse.model_validate(c) for c in categories]


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
)
async def create_category(
    data: CategoryCreate,
    current_user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    """
    Raises:
        409: A category with this name already exists (CAT_003)
    """
    category = await service.create_category(
        current_user.id,
        name=data.name,
        description=data.description,
        icon=data.icon,
        color=data.color,
    )
    return CategoryResponse.model_validate(category)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a category",
    description="""
    Transactions in the category move to "Other"; its vendor cache entries
    and budgets are deleted. The "Other" category itself can't be deleted.
    """,
)
async def delete_category(
    category_id: UUID,
    current_user: User = Depends(get_current_user),
    coordinator: CategoryLifecycleCoordinator = Depends(get_category_coordinator),
) -> Response:
    """
    Raises:
        404: Category not found (API_001)
        409: Category is the system "Other" category (CAT_001)
    """
    await coordinator.delete_category(current_user.id, category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
