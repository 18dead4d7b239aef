"""Database models."""
from aura.models.user import User
from aura.models.category import Category
from aura.models.transaction import Transaction
from aura.models.vendor_cache import VendorCacheEntry
from aura.models.budget import Budget

__all__ = ["User", "Category", "Transaction", "VendorCacheEntry", "Budget"]
