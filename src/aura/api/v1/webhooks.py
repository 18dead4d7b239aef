"""Inbound e-mail webhook endpoint."""

import json
import logging
from typing import Any, Mapping

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError
from svix.webhooks import Webhook, WebhookVerificationError

from aura.api.deps import get_ingestion_pipeline
from aura.config import settings
from aura.core.exceptions import SignatureError, ValidationError
from aura.schemas.webhooks import InboundEmailEvent, WebhookAck
from aura.services.ingestion import IngestionPipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


def verify_payload(body: bytes, headers: Mapping[str, str]) -> Any:
    """Verify the Svix signature and return the decoded JSON payload.

    With ``webhook_verify_signatures`` off (local development) the body is
    only decoded.

    Raises:
        SignatureError: Missing secret, missing headers or bad signature
        ValidationError: Body is not JSON
    """
    if not settings.webhook_verify_signatures:
        try:
            return json.loads(body)
        except ValueError as e:
            raise ValidationError("VAL_001", {"reason": "body is not JSON"}) from e

    if not settings.webhook_secret:
        logger.error("Webhook secret not configured; rejecting delivery")
        raise SignatureError("WEBHOOK_001", {"reason": "secret not configured"})

    try:
        return Webhook(settings.webhook_secret).verify(body, dict(headers))
    except WebhookVerificationError as e:
        raise SignatureError("WEBHOOK_001", {"reason": str(e)}) from e


@router.post(
    "/inbound-email",
    response_model=WebhookAck,
    summary="Receive an inbound e-mail event",
    description="""
    Signed (Svix) delivery from the inbound-mail provider.

    Every business outcome is acknowledged with 200 and a status:
    `unknown_recipient`, `ignored`, `duplicate`, `content_not_found`,
    `skipped`, `cached` or `processed` (the last two with a transaction id).
    401 means the signature was rejected; 5xx responses are redelivered.
    """,
)
async def inbound_email(
    request: Request,
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline),
) -> WebhookAck:
    payload = verify_payload(await request.body(), request.headers)

    try:
        event = InboundEmailEvent.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(
            "VAL_001", {"errors": [err.get("msg") for err in e.errors()]}
        ) from e

    outcome = await pipeline.run(event)
    return WebhookAck(status=outcome.status, transaction_id=outcome.transaction_id)
