"""Payment processor events.

Events look like:

    {"type": "payment_intent.succeeded",
     "data": {"object": {"id": "pi_...", "metadata": {"request_id": "<public id>"}}}}

Delivery is at-least-once, so a confirmation for a request that already
left awaiting_payment is acknowledged without changing anything.
"""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from pattern_analysis.core.structured_logging import build_log_context
from pattern_analysis.db.enums import RequestStatus
from pattern_analysis.services import analysis_request_service, request_status_service
from pattern_analysis.services.errors import InvalidTransitionError

logger = logging.getLogger(__name__)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"

# Outcomes reported back to the processor (and used in tests)
OUTCOME_CONFIRMED = "confirmed"
OUTCOME_DUPLICATE = "already_processed"
OUTCOME_IGNORED = "ignored"
OUTCOME_UNKNOWN_REQUEST = "unknown_request"


def handle_payment_event(db: Session, event: dict) -> str:
    """Apply one processor event and return what happened."""
    event_type = event.get("type")
    if event_type != PAYMENT_SUCCEEDED:
        logger.info("Payment webhook: unhandled event type %s", event_type)
        return OUTCOME_IGNORED

    data = event.get("data")
    payment = data.get("object") if isinstance(data, dict) else None
    if not isinstance(payment, dict):
        payment = {}
    metadata = payment.get("metadata")
    raw_public_id = metadata.get("request_id") if isinstance(metadata, dict) else None
    if not raw_public_id:
        logger.warning("Payment webhook: succeeded event without request_id metadata")
        return OUTCOME_UNKNOWN_REQUEST

    try:
        public_id = UUID(str(raw_public_id))
    except ValueError:
        logger.warning("Payment webhook: malformed request_id in metadata")
        return OUTCOME_UNKNOWN_REQUEST

    request = analysis_request_service.get_request_by_public_id(db, public_id)
    if not request:
        logger.warning(
            "Payment webhook: no request for public id",
            extra=build_log_context(public_id=public_id),
        )
        return OUTCOME_UNKNOWN_REQUEST

    context = build_log_context(request_id=request.id, public_id=public_id)
    if request.status != RequestStatus.AWAITING_PAYMENT.value:
        logger.info("Payment webhook: request already past payment", extra=context)
        return OUTCOME_DUPLICATE

    try:
        request_status_service.confirm_payment(db, request.id, payment_reference=payment.get("id"))
    except InvalidTransitionError:
        # Lost a race with another delivery or a manual approval
        logger.info("Payment webhook: concurrent confirmation", extra=context)
        return OUTCOME_DUPLICATE

    logger.info("Payment webhook: payment confirmed", extra=context)
    return OUTCOME_CONFIRMED
