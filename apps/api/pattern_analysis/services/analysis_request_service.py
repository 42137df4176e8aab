"""Analysis request intake and queries."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from pattern_analysis.core.config import settings
from pattern_analysis.core.structured_logging import build_log_context
from pattern_analysis.db.enums import AnalysisFor, RequestStatus
from pattern_analysis.db.models import AnalysisRequest
from pattern_analysis.schemas.analysis_request import AnalysisRequestCreate
from pattern_analysis.services.errors import (
    AnalysisServiceError,
    InvalidTransitionError,
)
from pattern_analysis.services.request_status_service import get_request_for_update

logger = logging.getLogger(__name__)


def create_request(
    db: Session,
    user_id: UUID,
    data: AnalysisRequestCreate,
) -> AnalysisRequest:
    """
    Create an analysis request in `awaiting_payment`.

    Detail fields are dropped when their yes/no answer is "no", and the
    "other" reason only survives when the analysis is about someone else.
    """
    request = AnalysisRequest(
        user_id=user_id,
        analysis_for=data.analysis_for.value,
        other_reason=data.other_reason if data.analysis_for == AnalysisFor.OTHER else None,
        priority_domain=data.priority_domain.value,
        complaint_1=data.complaint_1.strip(),
        complaint_2=data.complaint_2.strip() if data.complaint_2 else None,
        complaint_3=data.complaint_3.strip() if data.complaint_3 else None,
        had_surgery=data.had_surgery,
        surgery_details=data.surgery_details if data.had_surgery else None,
        had_trauma=data.had_trauma,
        trauma_details=data.trauma_details if data.had_trauma else None,
        used_device=data.used_device,
        device_details=data.device_details if data.used_device else None,
        front_body_photo=data.front_body_photo,
        back_body_photo=data.back_body_photo,
        serious_face_photo=data.serious_face_photo,
        smiling_face_photo=data.smiling_face_photo,
        amount_cents=data.amount_cents or settings.DEFAULT_AMOUNT_CENTS,
        status=RequestStatus.AWAITING_PAYMENT.value,
        has_result=False,
    )
    db.add(request)
    db.commit()
    db.refresh(request)

    logger.info(
        "Analysis request %s created",
        request.id,
        extra=build_log_context(user_id=user_id, request_id=request.id, public_id=request.public_id),
    )
    return request


def get_request(db: Session, request_id: int) -> AnalysisRequest | None:
    """Get a single request by internal id."""
    return db.get(AnalysisRequest, request_id)


def get_request_by_public_id(db: Session, public_id: UUID) -> AnalysisRequest | None:
    """Get a single request by its shareable id."""
    return db.execute(
        select(AnalysisRequest).where(AnalysisRequest.public_id == public_id)
    ).scalar_one_or_none()


def list_owner_requests(db: Session, user_id: UUID) -> list[AnalysisRequest]:
    """Owner's requests, newest first (cancelled ones included)."""
    query = (
        select(AnalysisRequest)
        .where(AnalysisRequest.user_id == user_id)
        .order_by(AnalysisRequest.id.desc())
    )
    return list(db.execute(query).scalars().all())


def list_requests(
    db: Session,
    status: RequestStatus | None = None,
    include_cancelled: bool = False,
) -> list[AnalysisRequest]:
    """Reviewer queue, oldest first so work is picked up in arrival order."""
    query = select(AnalysisRequest)
    if status:
        query = query.where(AnalysisRequest.status == status.value)
    elif not include_cancelled:
        query = query.where(AnalysisRequest.status.in_(RequestStatus.visible_by_default()))
    query = query.order_by(AnalysisRequest.id.asc())
    return list(db.execute(query).scalars().all())


def record_payment_reference(
    db: Session, request_id: int, payment_reference: str
) -> AnalysisRequest:
    """
    Store the processor reference for a pending checkout.

    Raises:
        RequestNotFoundError, InvalidTransitionError (request already paid or closed)
    """
    try:
        request = get_request_for_update(db, request_id)
        if request.status != RequestStatus.AWAITING_PAYMENT.value:
            raise InvalidTransitionError(
                request.status,
                "record_payment",
                f"Request is not awaiting payment (current status: {request.status})",
            )
        request.payment_reference = payment_reference
        db.commit()
    except AnalysisServiceError:
        db.rollback()
        raise

    db.refresh(request)
    return request
