"""Error codes and user-friendly messages.

This module defines the error catalog for the ingestion and categorization
service. Each error has:
- error_code: Unique identifier
- message: Technical description (for logs)
- user_message: User-friendly explanation
- suggestion: Actionable guidance for the caller
- retry_allowed: Whether the error is retryable
"""

ERROR_CATALOG: dict[str, dict] = {
    # Validation
    "VAL_001": {
        "code": "VAL_001",
        "message": "Request data failed validation",
        "user_message": "The request data is incomplete or invalid.",
        "suggestion": "Please check your input and try again.",
        "retry_allowed": False,
    },
    "VAL_002": {
        "code": "VAL_002",
        "message": "Transaction amount must be greater than zero",
        "user_message": "The amount must be greater than zero.",
        "suggestion": "Enter a positive amount.",
        "retry_allowed": False,
    },
    "VAL_003": {
        "code": "VAL_003",
        "message": "Categorization requested with an empty category list",
        "user_message": "You don't have any categories yet.",
        "suggestion": "Create at least one category and try again.",
        "retry_allowed": False,
    },
    # Not found
    "API_001": {
        "code": "API_001",
        "message": "Category not found",
        "user_message": "We couldn't find this category.",
        "suggestion": "Please refresh and try again.",
        "retry_allowed": False,
    },
    "API_002": {
        "code": "API_002",
        "message": "Transaction not found",
        "user_message": "We couldn't find this transaction.",
        "suggestion": "Please refresh and try again.",
        "retry_allowed": False,
    },
    "API_003": {
        "code": "API_003",
        "message": "Vendor cache entry not found",
        "user_message": "We couldn't find this vendor mapping.",
        "suggestion": "Please refresh and try again.",
        "retry_allowed": False,
    },
    # Business rules
    "CAT_001": {
        "code": "CAT_001",
        "message": "The system \"Other\" category cannot be deleted",
        "user_message": "The \"Other\" category is required and can't be deleted.",
        "suggestion": "Delete or rename a different category instead.",
        "retry_allowed": False,
    },
    "CAT_002": {
        "code": "CAT_002",
        "message": "User has no \"Other\" fallback category",
        "user_message": "Your account is missing the \"Other\" category.",
        "suggestion": "Please contact support.",
        "retry_allowed": False,
    },
    "CAT_003": {
        "code": "CAT_003",
        "message": "Category name already exists for this user",
        "user_message": "A category with this name already exists.",
        "suggestion": "Choose a different name.",
        "retry_allowed": False,
    },
    # Webhooks
    "WEBHOOK_001": {
        "code": "WEBHOOK_001",
        "message": "Webhook signature verification failed",
        "user_message": "The webhook signature is invalid.",
        "suggestion": "Check the webhook signing secret.",
        "retry_allowed": False,
    },
    # Infrastructure
    "AGENT_001": {
        "code": "AGENT_001",
        "message": "Reasoning oracle timed out",
        "user_message": "Categorization took too long.",
        "suggestion": "The event will be retried automatically.",
        "retry_allowed": True,
    },
    "AGENT_002": {
        "code": "AGENT_002",
        "message": "Reasoning oracle request failed",
        "user_message": "Categorization is temporarily unavailable.",
        "suggestion": "The event will be retried automatically.",
        "retry_allowed": True,
    },
    "SEARCH_001": {
        "code": "SEARCH_001",
        "message": "Web search timed out",
        "user_message": "Vendor lookup took too long.",
        "suggestion": "The event will be retried automatically.",
        "retry_allowed": True,
    },
    "MEM_001": {
        "code": "MEM_001",
        "message": "Semantic memory store request failed",
        "user_message": "Your categorization preferences are temporarily unavailable.",
        "suggestion": "Please try again in a few moments.",
        "retry_allowed": True,
    },
    "FETCH_001": {
        "code": "FETCH_001",
        "message": "Fetching inbound message content failed",
        "user_message": "We couldn't download the message.",
        "suggestion": "The event will be retried automatically.",
        "retry_allowed": True,
    },
    "PIPE_001": {
        "code": "PIPE_001",
        "message": "Ingestion pipeline exceeded its deadline",
        "user_message": "Processing took too long.",
        "suggestion": "The event will be retried automatically.",
        "retry_allowed": True,
    },
    "DB_001": {
        "code": "DB_001",
        "message": "Database operation failed",
        "user_message": "We couldn't save your data due to a database error.",
        "suggestion": "Please try again in a few moments.",
        "retry_allowed": True,
    },
    # Invariants
    "CHAIN_001": {
        "code": "CHAIN_001",
        "message": "Every categorization tier declined; the fallback tier is missing",
        "user_message": "An unexpected error occurred.",
        "suggestion": "Please contact support.",
        "retry_allowed": False,
    },
}


def get_error(error_code: str) -> dict:
    """Get error definition by code.

    Args:
        error_code: Error code from the catalog

    Returns:
        Dict with error details (a generic definition for unknown codes)
    """
    if error_code not in ERROR_CATALOG:
        return {
            "code": "UNKNOWN",
            "message": f"Unknown error code: {error_code}",
            "user_message": "An unexpected error occurred.",
            "suggestion": "Please try again. Contact support if the problem persists.",
            "retry_allowed": True,
        }
    return ERROR_CATALOG[error_code]


def is_retryable(error_code: str) -> bool:
    """Check if an error is retryable."""
    return get_error(error_code)["retry_allowed"]
