"""Category management and the category-delete cascade."""
import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from aura.core.exceptions import BusinessRuleError, NotFoundError
from aura.models.category import OTHER_CATEGORY_NAME, Category
from aura.repositories.budget import BudgetRepository
from aura.repositories.category import CategoryRepository
from aura.repositories.transaction import TransactionRepository
from aura.repositories.vendor_cache import VendorCacheRepository

logger = logging.getLogger(__name__)

# Seeded for every new user, in display order. "Other" must stay last.
DEFAULT_CATEGORIES: list[dict] = [
    {
        "name": "Food & Beverage",
        "description": "Restaurants, cafes, coffee shops, bubble tea, hawker centres, "
        "food delivery (GrabFood, Foodpanda, Deliveroo)",
        "icon": "🍔",
        "color": "#ef4444",
    },
    {
        "name": "Transportation",
        "description": "Public transit (MRT, bus), ride-hailing (Grab, Gojek), fuel, "
        "parking, ERP charges",
        "icon": "🚗",
        "color": "#f97316",
    },
    {
        "name": "Shopping",
        "description": "Retail purchases, clothing, electronics, online shopping "
        "(Shopee, Lazada, Amazon)",
        "icon": "🛍️",
        "color": "#eab308",
    },
    {
        "name": "Entertainment",
        "description": "Movies, concerts, streaming subscriptions (Netflix, Spotify), "
        "games, nightlife",
        "icon": "🎬",
        "color": "#22c55e",
    },
    {
        "name": "Bills & Utilities",
        "description": "Electricity, water, gas, internet, phone bill, insurance premiums, "
        "loan repayments",
        "icon": "💡",
        "color": "#3b82f6",
    },
    {
        "name": "Travel",
        "description": "Flights, hotels, travel insurance, overseas purchases, airport transfers",
        "icon": "✈️",
        "color": "#8b5cf6",
    },
    {
        "name": "Investment",
        "description": "Stocks, crypto, ETFs, robo-advisors (StashAway, Syfe, Endowus), "
        "fixed deposits, bonds",
        "icon": "📈",
        "color": "#a78bfa",
    },
    {
        "name": OTHER_CATEGORY_NAME,
        "description": "Anything that doesn't fit. Miscellaneous or one-off expenses",
        "icon": "📦",
        "color": "#6b7280",
    },
]


class CategoryService:
    """Service layer for listing, creating and seeding categories."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.category_repo = CategoryRepository(db)

    async def list_categories(self, user_id: UUID) -> list[Category]:
        return await self.category_repo.list_by_user(user_id)

    async def create_category(
        self,
        user_id: UUID,
        name: str,
        description: str = "",
        icon: str | None = None,
        color: str | None = None,
    ) -> Category:
        """Create a user category.

        Raises:
            BusinessRuleError: If the user already has a category with this
                name (case-insensitive)
        """
        if await self.category_repo.get_by_name(user_id, name) is not None:
            raise BusinessRuleError("CAT_003", {"name": name})

        category = Category(
            user_id=user_id,
            name=name.strip(),
            description=description,
            icon=icon,
            color=color,
            is_default=False,
            sort_order=await self.category_repo.next_sort_order(user_id),
        )
        return await self.category_repo.create(category)

    async def seed_defaults(self, user_id: UUID) -> list[Category]:
        """Create the default categories; the last one is the system "Other"."""
        categories = [
            Category(
                user_id=user_id,
                sort_order=index,
                is_default=defaults["name"] == OTHER_CATEGORY_NAME,
                **defaults,
            )
            for index, defaults in enumerate(DEFAULT_CATEGORIES)
        ]
        return await self.category_repo.create_many(categories)


class CategoryLifecycleCoordinator:
    """Deletes a category and everything that points at it.

    Order matters: transactions move to "Other", vendor cache entries and
    budgets of the category are deleted, and the category row goes last so
    that it acts as the commit point. Each step commits on its own and is
    idempotent, so an interrupted delete can simply be retried.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.category_repo = CategoryRepository(db)
        self.txn_repo = TransactionRepository(db)
        self.cache_repo = VendorCacheRepository(db)
        self.budget_repo = BudgetRepository(db)

    async def delete_category(self, user_id: UUID, category_id: UUID) -> None:
        """Delete a user's category.

        Raises:
            NotFoundError: If the category doesn't exist or isn't the user's
            BusinessRuleError: If it is the system "Other" category, or the
                user has no "Other" category to move transactions to
        """
        category = await self.category_repo.get_for_user(user_id, category_id)
        if category is None:
            raise NotFoundError("API_001", {"category_id": str(category_id)})
        if category.is_system_other:
            raise BusinessRuleError("CAT_001", {"category_id": str(category_id)})

        other = await self.category_repo.get_other(user_id)
        if other is None:
            raise BusinessRuleError("CAT_002", {"user_id": str(user_id)})

        moved = await self.txn_repo.reassign_category(user_id, category_id, other.id)
        cache_deleted = await self.cache_repo.delete_by_category(category_id)
        budgets_deleted = await self.budget_repo.delete_by_category(category_id)
        await self.category_repo.delete(category)

        logger.info(
            "Category deleted",
            extra={
                "category_id": str(category_id),
                "transactions_moved": moved,
                "cache_entries_deleted": cache_deleted,
                "budgets_deleted": budgets_deleted,
            },
        )
