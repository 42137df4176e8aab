"""Analysis request lifecycle (transition table + guards + history)."""

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from pattern_analysis.core.config import settings
from pattern_analysis.core.structured_logging import build_log_context
from pattern_analysis.db.enums import LifecycleEvent, RequestStatus
from pattern_analysis.db.models import AnalysisRequest, AnalysisResult, RequestStatusHistory
from pattern_analysis.services.errors import (
    AnalysisServiceError,
    InvalidTransitionError,
    PreconditionFailedError,
    RequestNotFoundError,
)

logger = logging.getLogger(__name__)

_CANCELLABLE = (
    RequestStatus.AWAITING_PAYMENT,
    RequestStatus.AWAITING_REVIEW,
    RequestStatus.IN_REVIEW,
)

TRANSITIONS: dict[tuple[RequestStatus, LifecycleEvent], RequestStatus] = {
    (RequestStatus.AWAITING_PAYMENT, LifecycleEvent.CONFIRM_PAYMENT): RequestStatus.AWAITING_REVIEW,
    (RequestStatus.AWAITING_PAYMENT, LifecycleEvent.APPROVE_PAYMENT): RequestStatus.AWAITING_REVIEW,
    (RequestStatus.AWAITING_REVIEW, LifecycleEvent.START_REVIEW): RequestStatus.IN_REVIEW,
    (RequestStatus.IN_REVIEW, LifecycleEvent.COMPLETE): RequestStatus.COMPLETED,
    **{(status, LifecycleEvent.CANCEL): RequestStatus.CANCELLED for status in _CANCELLABLE},
}


def next_status(current: RequestStatus | str, event: LifecycleEvent | str) -> RequestStatus:
    """
    Look up the target status for an event.

    Raises:
        InvalidTransitionError: event unknown or illegal from `current`
    """
    current_value = current.value if isinstance(current, RequestStatus) else str(current)
    event_value = event.value if isinstance(event, LifecycleEvent) else str(event)
    try:
        key = (RequestStatus(current_value), LifecycleEvent(event_value))
    except ValueError:
        raise InvalidTransitionError(current_value, event_value)
    target = TRANSITIONS.get(key)
    if target is None:
        raise InvalidTransitionError(current_value, event_value)
    return target


def allowed_events(current: RequestStatus | str) -> list[str]:
    """Events that are legal from a status (for UIs deciding which buttons to show)."""
    current_value = current.value if isinstance(current, RequestStatus) else str(current)
    return [event.value for (status, event) in TRANSITIONS if status.value == current_value]


def get_request_for_update(db: Session, request_id: int) -> AnalysisRequest:
    """Load a request with a row lock, bypassing any stale identity-map copy."""
    request = db.execute(
        select(AnalysisRequest)
        .where(AnalysisRequest.id == request_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()
    if not request:
        raise RequestNotFoundError(f"Analysis request {request_id} not found")
    return request


def _result_exists(db: Session, request_id: int) -> bool:
    return (
        db.execute(
            select(AnalysisResult.id).where(AnalysisResult.analysis_request_id == request_id)
        ).first()
        is not None
    )


def _apply_side_effects(
    db: Session,
    request: AnalysisRequest,
    event: LifecycleEvent,
    actor_id: UUID | None,
    now: datetime,
    payment_reference: str | None,
) -> None:
    if event in (LifecycleEvent.CONFIRM_PAYMENT, LifecycleEvent.APPROVE_PAYMENT):
        request.paid_at = now
        if payment_reference:
            request.payment_reference = payment_reference
    elif event == LifecycleEvent.START_REVIEW:
        # Audit only; other reviewers are not locked out
        request.reviewer_id = actor_id
        request.review_started_at = now
    elif event == LifecycleEvent.COMPLETE:
        if not _result_exists(db, request.id):
            raise PreconditionFailedError("Cannot complete without a result")
        request.has_result = True
        request.completed_at = now
    elif event == LifecycleEvent.CANCEL:
        request.cancelled_at = now
        request.purge_after = now + timedelta(days=settings.CANCELLATION_GRACE_DAYS)


def transition_request_status(
    db: Session,
    request_id: int,
    event: LifecycleEvent | str,
    actor_id: UUID | None,
    *,
    payment_reference: str | None = None,
) -> AnalysisRequest:
    """
    Apply a lifecycle event to a request.

    The guard is evaluated against the locked, freshly loaded row. Status,
    side-effect fields and the history row are committed together; on any
    error the session is rolled back.

    Raises:
        RequestNotFoundError, InvalidTransitionError, PreconditionFailedError
    """
    try:
        request = get_request_for_update(db, request_id)
        from_status = request.status
        target = next_status(from_status, event)
        event = LifecycleEvent(event)

        now = datetime.now(timezone.utc)
        _apply_side_effects(db, request, event, actor_id, now, payment_reference)
        request.status = target.value

        db.add(
            RequestStatusHistory(
                analysis_request_id=request.id,
                from_status=from_status,
                to_status=target.value,
                event=event.value,
                changed_by_user_id=actor_id,
                changed_at=now,
            )
        )
        db.commit()
    except AnalysisServiceError as exc:
        db.rollback()
        logger.info(
            "Lifecycle event rejected: %s",
            exc.code,
            extra=build_log_context(
                user_id=actor_id,
                request_id=request_id,
                event=event.value if isinstance(event, LifecycleEvent) else str(event),
            ),
        )
        raise

    db.refresh(request)
    logger.info(
        "Analysis request %s moved %s -> %s",
        request.id,
        from_status,
        request.status,
        extra=build_log_context(user_id=actor_id, request_id=request.id, event=event.value),
    )
    return request


# =============================================================================
# Event shortcuts
# =============================================================================

def confirm_payment(
    db: Session, request_id: int, payment_reference: str | None = None
) -> AnalysisRequest:
    """Payment processor confirmed the charge."""
    return transition_request_status(
        db, request_id, LifecycleEvent.CONFIRM_PAYMENT, None, payment_reference=payment_reference
    )


def approve_payment_manually(db: Session, request_id: int, reviewer_id: UUID) -> AnalysisRequest:
    return transition_request_status(db, request_id, LifecycleEvent.APPROVE_PAYMENT, reviewer_id)


def start_review(db: Session, request_id: int, reviewer_id: UUID) -> AnalysisRequest:
    return transition_request_status(db, request_id, LifecycleEvent.START_REVIEW, reviewer_id)


def complete(db: Session, request_id: int, reviewer_id: UUID) -> AnalysisRequest:
    return transition_request_status(db, request_id, LifecycleEvent.COMPLETE, reviewer_id)


def cancel(db: Session, request_id: int, actor_id: UUID) -> AnalysisRequest:
    return transition_request_status(db, request_id, LifecycleEvent.CANCEL, actor_id)


# =============================================================================
# Result visibility
# =============================================================================

def set_has_result(
    db: Session, request_id: int, has_result: bool, actor_id: UUID | None
) -> AnalysisRequest:
    """
    Show or hide a result without touching the status.

    Raises:
        PreconditionFailedError: enabling visibility with no result row
    """
    try:
        request = get_request_for_update(db, request_id)
        if has_result and not _result_exists(db, request.id):
            raise PreconditionFailedError("Cannot show a result that does not exist")
        request.has_result = has_result
        db.commit()
    except AnalysisServiceError:
        db.rollback()
        raise

    db.refresh(request)
    logger.info(
        "Analysis request %s has_result=%s",
        request.id,
        has_result,
        extra=build_log_context(user_id=actor_id, request_id=request.id),
    )
    return request


def require_status(request: AnalysisRequest, *statuses: RequestStatus, action: str) -> None:
    """Gate scoring/narrative work on the lifecycle."""
    if request.status not in {s.value for s in statuses}:
        allowed = ", ".join(s.value for s in statuses)
        raise PreconditionFailedError(
            f"Cannot {action} while request is '{request.status}' (requires {allowed})",
            current_status=request.status,
        )
