"""Analysis request routes: intake, queries and lifecycle."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from pattern_analysis.core.deps import (
    check_request_access,
    get_current_session,
    get_db,
    require_csrf_header,
    require_reviewer,
)
from pattern_analysis.db.enums import LifecycleEvent, RequestStatus
from pattern_analysis.db.models import AnalysisRequest
from pattern_analysis.schemas.analysis_request import (
    AnalysisRequestCreate,
    AnalysisRequestListItem,
    AnalysisRequestRead,
    HasResultUpdate,
    PaymentReferenceUpdate,
    StatusHistoryRead,
    TransitionRequest,
)
from pattern_analysis.schemas.auth import UserSession
from pattern_analysis.services import analysis_request_service, request_status_service

router = APIRouter()

# Payment confirmation only arrives through the payment webhook
_PROCESSOR_ONLY_EVENTS = {LifecycleEvent.CONFIRM_PAYMENT}


def _to_read(request: AnalysisRequest) -> AnalysisRequestRead:
    read = AnalysisRequestRead.model_validate(request)
    read.allowed_events = request_status_service.allowed_events(request.status)
    return read


@router.post(
    "",
    response_model=AnalysisRequestRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_analysis_request(
    data: AnalysisRequestCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Submit intake answers; the request starts in awaiting_payment."""
    request = analysis_request_service.create_request(db, session.user_id, data)
    return _to_read(request)


@router.get("", response_model=list[AnalysisRequestListItem])
def list_analysis_requests(
    status: RequestStatus | None = Query(None),
    include_cancelled: bool = Query(False),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Reviewers get the work queue; clients get their own requests, newest first."""
    if session.is_reviewer:
        return analysis_request_service.list_requests(
            db, status=status, include_cancelled=include_cancelled
        )
    return analysis_request_service.list_owner_requests(db, session.user_id)


@router.get("/public/{public_id}", response_model=AnalysisRequestRead)
def get_analysis_request_by_public_id(
    public_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    request = analysis_request_service.get_request_by_public_id(db, public_id)
    return _to_read(check_request_access(request, session))


@router.get("/{request_id}", response_model=AnalysisRequestRead)
def get_analysis_request(
    request_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    request = analysis_request_service.get_request(db, request_id)
    return _to_read(check_request_access(request, session))


@router.get("/{request_id}/history", response_model=list[StatusHistoryRead])
def get_status_history(
    request_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    request = check_request_access(analysis_request_service.get_request(db, request_id), session)
    return request.status_history


@router.put(
    "/{request_id}/payment-reference",
    response_model=AnalysisRequestRead,
    dependencies=[Depends(require_csrf_header)],
)
def set_payment_reference(
    request_id: int,
    data: PaymentReferenceUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Record the checkout reference the payment processor handed out."""
    check_request_access(analysis_request_service.get_request(db, request_id), session)
    request = analysis_request_service.record_payment_reference(
        db, request_id, data.payment_reference
    )
    return _to_read(request)


# =============================================================================
# Lifecycle
# =============================================================================

@router.post(
    "/{request_id}/transitions",
    response_model=AnalysisRequestRead,
    dependencies=[Depends(require_csrf_header)],
)
def transition_analysis_request(
    request_id: int,
    data: TransitionRequest,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """
    Apply a lifecycle event.

    Reviewers may approve payment, start review, complete and cancel.
    Owners may only cancel their own request.
    """
    check_request_access(analysis_request_service.get_request(db, request_id), session)

    if data.event in _PROCESSOR_ONLY_EVENTS:
        raise HTTPException(status_code=403, detail="Payment confirmation comes from the payment processor")
    if not session.is_reviewer and data.event != LifecycleEvent.CANCEL:
        raise HTTPException(status_code=403, detail=f"Not authorized to apply '{data.event.value}'")

    request = request_status_service.transition_request_status(
        db, request_id, data.event, session.user_id
    )
    return _to_read(request)


@router.patch(
    "/{request_id}/has-result",
    response_model=AnalysisRequestRead,
    dependencies=[Depends(require_csrf_header)],
)
def set_has_result(
    request_id: int,
    data: HasResultUpdate,
    session: UserSession = Depends(require_reviewer),
    db: Session = Depends(get_db),
):
    """Show or hide an existing result."""
    request = request_status_service.set_has_result(db, request_id, data.has_result, session.user_id)
    return _to_read(request)


@router.delete(
    "/{request_id}",
    response_model=AnalysisRequestRead,
    dependencies=[Depends(require_csrf_header)],
)
def cancel_analysis_request(
    request_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Soft delete: moves the request to cancelled and schedules the purge."""
    check_request_access(analysis_request_service.get_request(db, request_id), session)
    request = request_status_service.cancel(db, request_id, session.user_id)
    return _to_read(request)
