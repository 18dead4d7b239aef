"""API version 1 routes."""

from fastapi import APIRouter

from aura.api.v1 import auth, categories, transactions, vendor_cache, webhooks

router = APIRouter(prefix="/api/v1")

# Include routers
router.include_router(auth.router)
router.include_router(webhooks.router)
router.include_router(categories.router)
router.include_router(transactions.router)
router.include_router(vendor_cache.router)
