from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from aura.db.session import get_db

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    """Basic health check."""
    return {"status": "ok"}


@router.get("/health/ready")
async def health_ready(request: Request, db: AsyncSession = Depends(get_db)):
    """Readiness check with database connection and configured collaborators."""
    collaborators = {
        name: getattr(request.app.state, name, None) is not None
        for name in ("message_fetcher", "reasoning_oracle", "web_search", "memory_store")
    }
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not ready",
                "database": "disconnected",
                "error_type": type(e).__name__,
            },
        )
    return {"status": "ready", "database": "connected", "collaborators": collaborators}
