"""Unit tests for error handling middleware and PII filtering."""

import json
import logging
from unittest.mock import Mock

import pytest
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from aura.api.middleware.error_handler import (
    handle_aura_error,
    handle_generic_error,
    handle_integrity_error,
    handle_validation_error,
)
from aura.api.middleware.logging import JSONLogFormatter, filter_pii
from aura.core.errors import ERROR_CATALOG, get_error, is_retryable
from aura.core.exceptions import (
    BusinessRuleError,
    ChainExhaustedError,
    NotFoundError,
    OracleTimeoutError,
    SignatureError,
)


def make_request(path="/api/v1/test", method="GET"):
    request = Mock(spec=Request)
    request.url.path = path
    request.method = method
    return request


class TestAuraErrorHandler:
    """Application errors are rendered from the catalog."""

    async def test_business_rule_error(self):
        response = await handle_aura_error(
            make_request(method="DELETE"), BusinessRuleError("CAT_001")
        )

        assert isinstance(response, JSONResponse)
        assert response.status_code == 409
        content = json.loads(response.body)
        assert content["error_code"] == "CAT_001"
        assert set(content) == {
            "error_code",
            "message",
            "user_message",
            "suggestion",
            "retry_allowed",
        }

    async def test_infrastructure_error_is_retryable_503(self):
        response = await handle_aura_error(make_request(method="POST"), OracleTimeoutError())

        assert response.status_code == 503
        assert json.loads(response.body)["retry_allowed"] is True

    async def test_signature_error_is_401(self):
        response = await handle_aura_error(make_request(), SignatureError("WEBHOOK_001"))
        assert response.status_code == 401

    async def test_chain_exhausted_is_500(self):
        response = await handle_aura_error(make_request(), ChainExhaustedError())
        assert response.status_code == 500
        assert json.loads(response.body)["error_code"] == "CHAIN_001"

    async def test_client_errors_log_at_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            await handle_aura_error(make_request(), NotFoundError("API_002"))

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.error_code == "API_002"


class TestValidationErrorHandler:
    async def test_handle_validation_error(self):
        exc = RequestValidationError(
            [{"loc": ("body", "amount"), "msg": "Field required", "type": "missing"}]
        )

        response = await handle_validation_error(make_request(method="POST"), exc)

        assert response.status_code == 400
        content = json.loads(response.body)
        assert content["error_code"] == "VAL_001"
        assert "body.amount: Field required" in content["message"]


class TestIntegrityErrorHandler:
    async def test_unique_violation_is_conflict(self):
        exc = IntegrityError("INSERT ...", {}, Exception("UNIQUE constraint failed"))

        response = await handle_integrity_error(make_request(method="POST"), exc)

        assert response.status_code == 409
        assert json.loads(response.body)["error_code"] == "DB_002"

    async def test_other_integrity_error(self):
        exc = IntegrityError("INSERT ...", {}, Exception("NOT NULL constraint failed"))

        response = await handle_integrity_error(make_request(method="POST"), exc)

        assert response.status_code == 500
        assert json.loads(response.body)["error_code"] == "DB_001"


class TestGenericErrorHandler:
    async def test_does_not_expose_details(self):
        response = await handle_generic_error(
            make_request(), RuntimeError("card 4111 1111 1111 1111 leaked")
        )

        assert response.status_code == 500
        body = response.body.decode()
        assert "SYS_001" in body
        assert "4111" not in body


class TestErrorCatalog:
    def test_codes_match_keys(self):
        for code, entry in ERROR_CATALOG.items():
            assert entry["code"] == code

    def test_unknown_code(self):
        assert get_error("NOPE_999")["code"] == "UNKNOWN"

    def test_infrastructure_codes_are_retryable(self):
        for code in ("AGENT_001", "AGENT_002", "SEARCH_001", "MEM_001", "FETCH_001", "PIPE_001"):
            assert is_retryable(code) is True
        assert is_retryable("CAT_001") is False


class TestPIIFiltering:
    """Alert text must never reach logs verbatim."""

    def test_card_number(self):
        assert "[CARD]" in filter_pii("Card 4111-1111-1111-1111 charged")

    def test_card_ending(self):
        filtered = filter_pii("A transaction on your card ending 8909 was made")
        assert "8909" not in filtered
        assert "[LAST4]" in filtered

    def test_email(self):
        assert filter_pii("sent to user-abc@inbound.aura.app") == "sent to [EMAIL]"

    def test_nric(self):
        assert filter_pii("NRIC S1234567D on file") == "NRIC [NRIC] on file"

    def test_phone(self):
        assert "[PHONE]" in filter_pii("Call +1 (415) 555-0132 if this was not you")

    def test_plain_text_unchanged(self):
        assert filter_pii("SGD 16.23 at DIGITALOCEAN.COM") == "SGD 16.23 at DIGITALOCEAN.COM"

    def test_empty(self):
        assert filter_pii("") == ""


class TestJSONLogFormatter:
    def test_extra_fields_are_filtered(self):
        record = logging.LogRecord(
            "aura.test", logging.INFO, __file__, 1, "Ingestion finished", None, None
        )
        record.email_id = "em_1"
        record.vendor = "owner@example.com"
        record.tier = "cache"

        data = json.loads(JSONLogFormatter().format(record))

        assert data["message"] == "Ingestion finished"
        assert data["email_id"] == "em_1"
        assert data["vendor"] == "[EMAIL]"
        assert data["tier"] == "cache"
        assert "status_code" not in data
