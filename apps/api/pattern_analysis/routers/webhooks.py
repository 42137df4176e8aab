"""Webhooks router - payment processor integration."""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from pattern_analysis.core.config import settings
from pattern_analysis.core.deps import get_db
from pattern_analysis.core.rate_limit import limiter
from pattern_analysis.core.security import verify_payment_signature
from pattern_analysis.services import payment_service

router = APIRouter()
logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Payment-Signature"


@router.post("/payments")
@limiter.limit(f"{settings.RATE_LIMIT_WEBHOOK}/minute")
async def receive_payment_webhook(
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Receive payment processor events.

    Security:
    - Validates X-Payment-Signature HMAC (except in test mode)
    - Validates payload size

    Always answers 200 once the payload is authentic and parseable, so the
    processor does not redeliver events we chose to ignore.
    """
    # 1. Check payload size
    content_length = request.headers.get("content-length", "0")
    try:
        if int(content_length) > settings.PAYMENT_WEBHOOK_MAX_PAYLOAD_BYTES:
            raise HTTPException(413, "Payload too large")
    except ValueError:
        pass

    # 2. Get raw body for signature verification
    body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER, "")

    # 3. Validate signature (skip in test mode)
    if not settings.PAYMENT_TEST_MODE:
        if not signature:
            logger.warning("Payment webhook missing signature")
            raise HTTPException(403, "Missing signature")
        if not verify_payment_signature(body, signature):
            logger.warning("Payment webhook invalid signature")
            raise HTTPException(403, "Invalid signature")

    # 4. Parse payload
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        raise HTTPException(400, "Invalid JSON")
    if not isinstance(data, dict):
        raise HTTPException(400, "Invalid payload")

    outcome = payment_service.handle_payment_event(db, data)
    return {"received": True, "outcome": outcome}
