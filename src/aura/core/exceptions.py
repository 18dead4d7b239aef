"""Exception hierarchy for the ingestion and categorization service.

Every exception maps to an error code in errors.py and carries the HTTP
status the API layer returns for it. Expected ingestion outcomes (duplicate,
unknown recipient, ...) are not exceptions; see ``IngestionStatus``.
"""

from typing import Any


class AuraError(Exception):
    """Base exception for all application errors.

    Attributes:
        error_code: Code from the error catalog (e.g., "API_001")
        details: Additional context about the error (for logging)
        http_status: HTTP status code to return (default: 500)
    """

    default_status = 500

    def __init__(
        self,
        error_code: str,
        details: dict[str, Any] | None = None,
        http_status: int | None = None,
    ):
        self.error_code = error_code
        self.details = details or {}
        self.http_status = http_status or self.default_status
        super().__init__(error_code)


class ValidationError(AuraError):
    """Raised when input is malformed, before any pipeline work starts."""

    default_status = 400


class NotFoundError(AuraError):
    """Raised when an entity does not exist or belongs to another user."""

    default_status = 404


class BusinessRuleError(AuraError):
    """Raised when a request is well-formed but violates a business rule.

    Example: deleting the system "Other" category (CAT_001).
    """

    default_status = 409


class SignatureError(AuraError):
    """Raised when an inbound webhook fails signature verification."""

    default_status = 401


class InfrastructureError(AuraError):
    """Raised when an external dependency fails or times out.

    The only class eligible for retry. Never converted into a low-confidence
    categorization.
    """

    default_status = 503


class OracleTimeoutError(InfrastructureError):
    """Reasoning oracle did not answer within its deadline (AGENT_001)."""

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("AGENT_001", details)


class OracleUnavailableError(InfrastructureError):
    """Reasoning oracle failed after retries (AGENT_002)."""

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("AGENT_002", details)


class SearchTimeoutError(InfrastructureError):
    """Web search did not answer within its deadline (SEARCH_001)."""

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("SEARCH_001", details)


class MemoryStoreError(InfrastructureError):
    """Semantic memory store failed or timed out (MEM_001)."""

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("MEM_001", details)


class MessageFetchError(InfrastructureError):
    """Message content provider failed (FETCH_001)."""

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("FETCH_001", details)


class PipelineTimeoutError(InfrastructureError):
    """The whole ingestion run exceeded its deadline (PIPE_001)."""

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("PIPE_001", details)


class ChainExhaustedError(AuraError):
    """Every categorization tier declined.

    Unreachable while the fallback tier is part of the chain; signals a
    broken chain configuration and must never degrade to an empty result.
    """

    default_status = 500

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("CHAIN_001", details)
