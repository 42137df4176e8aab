"""Tests for the analysis request lifecycle."""
from datetime import timedelta

import pytest

from pattern_analysis.db.enums import LifecycleEvent, RequestStatus
from pattern_analysis.db.models import AnalysisResult, RequestStatusHistory
from pattern_analysis.services import request_status_service
from pattern_analysis.services.errors import (
    InvalidTransitionError,
    PreconditionFailedError,
    RequestNotFoundError,
)
from pattern_analysis.services.request_status_service import (
    TRANSITIONS,
    allowed_events,
    next_status,
    transition_request_status,
)


def _attach_result(db, request_id: int) -> AnalysisResult:
    empty = {"personal": "", "relationships": "", "professional": ""}
    result = AnalysisResult(
        analysis_request_id=request_id,
        axis="relationships",
        diagnosis="d",
        blockage_explanation="b",
        release_path="r",
        trait1_name="FORTE",
        trait1_percentage=50,
        trait1_pain=empty,
        trait1_resource=empty,
        trait2_name="LIDER",
        trait2_percentage=30,
        trait2_pain=empty,
        trait2_resource=empty,
        trait3_name="CRIATIVO",
        trait3_percentage=20,
        trait3_pain=empty,
        trait3_resource=empty,
    )
    db.add(result)
    db.commit()
    return result


# =============================================================================
# Transition table
# =============================================================================

def test_happy_path_table():
    assert next_status(RequestStatus.AWAITING_PAYMENT, LifecycleEvent.CONFIRM_PAYMENT) == RequestStatus.AWAITING_REVIEW
    assert next_status(RequestStatus.AWAITING_PAYMENT, LifecycleEvent.APPROVE_PAYMENT) == RequestStatus.AWAITING_REVIEW
    assert next_status(RequestStatus.AWAITING_REVIEW, LifecycleEvent.START_REVIEW) == RequestStatus.IN_REVIEW
    assert next_status(RequestStatus.IN_REVIEW, LifecycleEvent.COMPLETE) == RequestStatus.COMPLETED


@pytest.mark.parametrize(
    "status",
    [RequestStatus.AWAITING_PAYMENT, RequestStatus.AWAITING_REVIEW, RequestStatus.IN_REVIEW],
)
def test_cancel_is_reachable_from_every_non_terminal_status(status):
    assert next_status(status, LifecycleEvent.CANCEL) == RequestStatus.CANCELLED


@pytest.mark.parametrize("status", [RequestStatus.COMPLETED, RequestStatus.CANCELLED])
def test_terminal_statuses_have_no_outgoing_transitions(status):
    assert allowed_events(status) == []
    for event in LifecycleEvent:
        with pytest.raises(InvalidTransitionError) as exc_info:
            next_status(status, event)
        assert exc_info.value.current_status == status.value


def test_table_never_leads_back_to_an_earlier_status():
    order = [
        RequestStatus.AWAITING_PAYMENT,
        RequestStatus.AWAITING_REVIEW,
        RequestStatus.IN_REVIEW,
        RequestStatus.COMPLETED,
    ]
    for (source, _event), target in TRANSITIONS.items():
        if target is RequestStatus.CANCELLED:
            continue
        assert order.index(target) > order.index(source)


def test_unknown_event_is_an_invalid_transition():
    with pytest.raises(InvalidTransitionError) as exc_info:
        next_status("awaiting_payment", "teleport")
    assert exc_info.value.event == "teleport"


def test_allowed_events_for_ui():
    assert set(allowed_events(RequestStatus.AWAITING_PAYMENT)) == {
        "confirm_payment",
        "approve_payment",
        "cancel",
    }
    assert allowed_events("in_review") == ["complete", "cancel"]


# =============================================================================
# Persisted transitions
# =============================================================================

def test_start_review_before_payment_names_current_status(db, request_factory, reviewer):
    request = request_factory()

    with pytest.raises(InvalidTransitionError) as exc_info:
        transition_request_status(db, request.id, LifecycleEvent.START_REVIEW, reviewer.id)

    assert exc_info.value.current_status == "awaiting_payment"
    assert exc_info.value.to_dict()["current_status"] == "awaiting_payment"
    db.refresh(request)
    assert request.status == RequestStatus.AWAITING_PAYMENT.value


def test_complete_without_result_fails_precondition(db, request_factory, reviewer):
    request = request_factory(RequestStatus.IN_REVIEW)

    with pytest.raises(PreconditionFailedError):
        request_status_service.complete(db, request.id, reviewer.id)

    db.refresh(request)
    assert request.status == RequestStatus.IN_REVIEW.value
    assert request.has_result is False
    assert request.completed_at is None


def test_complete_with_result_sets_has_result(db, request_factory, reviewer):
    request = request_factory(RequestStatus.IN_REVIEW)
    _attach_result(db, request.id)

    completed = request_status_service.complete(db, request.id, reviewer.id)

    assert completed.status == RequestStatus.COMPLETED.value
    assert completed.has_result is True
    assert completed.completed_at is not None


@pytest.mark.parametrize("event", list(LifecycleEvent))
def test_cancelled_request_rejects_every_event(db, request_factory, reviewer, event):
    request = request_factory(RequestStatus.CANCELLED)

    with pytest.raises(InvalidTransitionError) as exc_info:
        transition_request_status(db, request.id, event, reviewer.id)

    assert exc_info.value.current_status == "cancelled"


def test_start_review_records_reviewer(db, request_factory, reviewer):
    request = request_factory(RequestStatus.AWAITING_REVIEW)

    started = request_status_service.start_review(db, request.id, reviewer.id)

    assert started.status == RequestStatus.IN_REVIEW.value
    assert started.reviewer_id == reviewer.id
    assert started.review_started_at is not None


def test_start_review_twice_is_rejected(db, request_factory, reviewer):
    request = request_factory(RequestStatus.IN_REVIEW)

    with pytest.raises(InvalidTransitionError) as exc_info:
        request_status_service.start_review(db, request.id, reviewer.id)
    assert exc_info.value.current_status == "in_review"


def test_payment_confirmation_stores_reference(db, request_factory):
    request = request_factory()

    paid = request_status_service.confirm_payment(db, request.id, payment_reference="pi_123")

    assert paid.status == RequestStatus.AWAITING_REVIEW.value
    assert paid.payment_reference == "pi_123"
    assert paid.paid_at is not None


def test_manual_payment_approval(db, request_factory, reviewer):
    request = request_factory()

    approved = request_status_service.approve_payment_manually(db, request.id, reviewer.id)

    assert approved.status == RequestStatus.AWAITING_REVIEW.value
    assert approved.paid_at is not None
    row = (
        db.query(RequestStatusHistory)
        .filter(RequestStatusHistory.analysis_request_id == request.id)
        .one()
    )
    assert row.event == "approve_payment"
    assert row.changed_by_user_id == reviewer.id


def test_cancel_records_purge_window(db, request_factory, owner):
    request = request_factory(RequestStatus.AWAITING_REVIEW)

    cancelled = request_status_service.cancel(db, request.id, owner.id)

    assert cancelled.status == RequestStatus.CANCELLED.value
    assert cancelled.cancelled_at is not None
    assert cancelled.purge_after - cancelled.cancelled_at == timedelta(days=30)


def test_every_transition_writes_history(db, request_factory, reviewer):
    request = request_factory(RequestStatus.IN_REVIEW)

    rows = (
        db.query(RequestStatusHistory)
        .filter(RequestStatusHistory.analysis_request_id == request.id)
        .order_by(RequestStatusHistory.changed_at)
        .all()
    )

    assert [(r.from_status, r.to_status, r.event) for r in rows] == [
        ("awaiting_payment", "awaiting_review", "confirm_payment"),
        ("awaiting_review", "in_review", "start_review"),
    ]
    assert rows[0].changed_by_user_id == reviewer.id


def test_rejected_transition_writes_no_history(db, request_factory, reviewer):
    request = request_factory()

    with pytest.raises(InvalidTransitionError):
        transition_request_status(db, request.id, LifecycleEvent.COMPLETE, reviewer.id)

    count = (
        db.query(RequestStatusHistory)
        .filter(RequestStatusHistory.analysis_request_id == request.id)
        .count()
    )
    assert count == 0


def test_missing_request_is_not_found(db, reviewer):
    with pytest.raises(RequestNotFoundError):
        transition_request_status(db, 999, LifecycleEvent.CANCEL, reviewer.id)


# =============================================================================
# has_result toggle
# =============================================================================

def test_has_result_cannot_be_enabled_without_result(db, request_factory, reviewer):
    request = request_factory(RequestStatus.IN_REVIEW)

    with pytest.raises(PreconditionFailedError):
        request_status_service.set_has_result(db, request.id, True, reviewer.id)

    db.refresh(request)
    assert request.has_result is False


def test_has_result_can_be_hidden_and_shown_again(db, request_factory, reviewer):
    request = request_factory(RequestStatus.IN_REVIEW)
    _attach_result(db, request.id)
    request_status_service.complete(db, request.id, reviewer.id)

    hidden = request_status_service.set_has_result(db, request.id, False, reviewer.id)
    assert hidden.has_result is False
    assert hidden.status == RequestStatus.COMPLETED.value

    shown = request_status_service.set_has_result(db, request.id, True, reviewer.id)
    assert shown.has_result is True


def test_require_status_reports_current_status(request_factory):
    request = request_factory()

    with pytest.raises(PreconditionFailedError) as exc_info:
        request_status_service.require_status(request, RequestStatus.IN_REVIEW, action="score")

    assert exc_info.value.extra["current_status"] == "awaiting_payment"
