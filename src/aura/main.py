import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

from aura.api.middleware.error_handler import (
    handle_aura_error,
    handle_generic_error,
    handle_integrity_error,
    handle_validation_error,
)
from aura.api.middleware.logging import RequestLoggingMiddleware, setup_logging
from aura.api.v1 import router as v1_router
from aura.api.v1.health import router as health_router
from aura.clients.memory import Mem0MemoryStore
from aura.clients.reasoning import OpenAIReasoningOracle
from aura.clients.resend import ResendMessageFetcher
from aura.clients.web_search import BraveWebSearch
from aura.config import Settings, settings
from aura.core.exceptions import AuraError
from aura.core.retry import RetryPolicy
from aura.db.session import dispose_engine

logger = logging.getLogger(__name__)

_CLIENT_NAMES = ("message_fetcher", "reasoning_oracle", "web_search", "memory_store")


def build_clients(config: Settings) -> dict:
    """Create the external clients that have credentials configured."""
    clients: dict = {name: None for name in _CLIENT_NAMES}
    if config.resend_api_key:
        clients["message_fetcher"] = ResendMessageFetcher(
            config.resend_api_key,
            base_url=config.resend_base_url,
            timeout=config.fetch_timeout_seconds,
        )
    if config.openai_api_key:
        clients["reasoning_oracle"] = OpenAIReasoningOracle(
            api_key=config.openai_api_key,
            model=config.reasoning_model,
            timeout=config.reasoning_timeout_seconds,
            retry_policy=RetryPolicy(
                max_attempts=config.reasoning_max_attempts,
                initial_interval=config.retry_initial_interval,
                backoff_factor=config.retry_backoff_factor,
                max_interval=config.retry_max_interval,
            ),
        )
    if config.search_api_key:
        clients["web_search"] = BraveWebSearch(
            config.search_api_key,
            base_url=config.search_base_url,
            timeout=config.search_timeout_seconds,
        )
    if config.memory_api_key:
        clients["memory_store"] = Mem0MemoryStore(
            config.memory_api_key,
            base_url=config.memory_base_url,
            timeout=config.memory_timeout_seconds,
        )
    return clients


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    clients = build_clients(settings)
    for name, client in clients.items():
        setattr(app.state, name, client)
    logger.info(
        "Collaborators configured",
        extra={"configured": [name for name, c in clients.items() if c is not None]},
    )
    yield
    # Shutdown
    for client in clients.values():
        if client is not None:
            await client.close()
    await dispose_engine()


def create_app() -> FastAPI:
    setup_logging(settings.log_level, json_logs=settings.log_json)

    app = FastAPI(
        title="Aura API",
        description="Inbound bank-alert ingestion and expense categorization",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Add request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Register exception handlers (order matters - most specific first)
    app.add_exception_handler(AuraError, handle_aura_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(Exception, handle_generic_error)

    # Register routers
    app.include_router(health_router)
    app.include_router(v1_router)

    return app


app = create_app()
