"""API tests for intake, access control and lifecycle routes."""
import pytest

from pattern_analysis.db.enums import RequestStatus


# =============================================================================
# Intake
# =============================================================================

@pytest.mark.asyncio
async def test_owner_creates_request(owner_client, owner, intake_data):
    response = await owner_client.post("/analysis-requests", json=intake_data)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "awaiting_payment"
    assert body["user_id"] == str(owner.id)
    assert body["amount_cents"] == 9700
    assert body["has_result"] is False
    assert body["trauma_details"] == "Acidente de carro"
    assert body["surgery_details"] is None
    assert set(body["allowed_events"]) == {"confirm_payment", "approve_payment", "cancel"}


@pytest.mark.asyncio
async def test_create_requires_csrf_header(owner_client, intake_data):
    response = await owner_client.post(
        "/analysis-requests", json=intake_data, headers={"X-Requested-With": ""}
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_requires_authentication(client, intake_data):
    response = await client.post(
        "/analysis-requests", json=intake_data, headers={"X-Requested-With": "XMLHttpRequest"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_blank_first_complaint_is_rejected(owner_client, intake_data):
    intake_data["complaint_1"] = "   "

    response = await owner_client.post("/analysis-requests", json=intake_data)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_unknown_priority_domain_is_rejected(owner_client, intake_data):
    intake_data["priority_domain"] = "spiritual"

    response = await owner_client.post("/analysis-requests", json=intake_data)

    assert response.status_code == 422


# =============================================================================
# Access control
# =============================================================================

@pytest.mark.asyncio
async def test_owner_and_reviewer_can_read_request(owner_client, reviewer_client, request_factory):
    request = request_factory()

    owner_response = await owner_client.get(f"/analysis-requests/{request.id}")
    reviewer_response = await reviewer_client.get(f"/analysis-requests/{request.id}")

    assert owner_response.status_code == 200
    assert reviewer_response.status_code == 200
    assert owner_response.json()["public_id"] == str(request.public_id)


@pytest.mark.asyncio
async def test_other_client_gets_not_found(stranger_client, request_factory):
    request = request_factory()

    by_id = await stranger_client.get(f"/analysis-requests/{request.id}")
    by_public_id = await stranger_client.get(f"/analysis-requests/public/{request.public_id}")
    history = await stranger_client.get(f"/analysis-requests/{request.id}/history")

    assert by_id.status_code == 404
    assert by_public_id.status_code == 404
    assert history.status_code == 404


@pytest.mark.asyncio
async def test_owner_reads_by_public_id(owner_client, request_factory):
    request = request_factory()

    response = await owner_client.get(f"/analysis-requests/public/{request.public_id}")

    assert response.status_code == 200
    assert response.json()["id"] == request.id


@pytest.mark.asyncio
async def test_owner_list_contains_only_own_requests(
    owner_client, stranger_client, request_factory
):
    first = request_factory()
    second = request_factory(RequestStatus.CANCELLED)

    owner_list = await owner_client.get("/analysis-requests")
    stranger_list = await stranger_client.get("/analysis-requests")

    assert [r["id"] for r in owner_list.json()] == [second.id, first.id]
    assert stranger_list.json() == []


@pytest.mark.asyncio
async def test_reviewer_queue_hides_cancelled_by_default(reviewer_client, request_factory):
    pending = request_factory()
    in_review = request_factory(RequestStatus.IN_REVIEW)
    cancelled = request_factory(RequestStatus.CANCELLED)

    default = await reviewer_client.get("/analysis-requests")
    everything = await reviewer_client.get("/analysis-requests", params={"include_cancelled": True})
    filtered = await reviewer_client.get("/analysis-requests", params={"status": "in_review"})

    assert [r["id"] for r in default.json()] == [pending.id, in_review.id]
    assert [r["id"] for r in everything.json()] == [pending.id, in_review.id, cancelled.id]
    assert [r["id"] for r in filtered.json()] == [in_review.id]


# =============================================================================
# Lifecycle
# =============================================================================

@pytest.mark.asyncio
async def test_start_review_before_payment_is_conflict(reviewer_client, request_factory):
    request = request_factory()

    response = await reviewer_client.post(
        f"/analysis-requests/{request.id}/transitions", json={"event": "start_review"}
    )

    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "invalid_transition"
    assert body["current_status"] == "awaiting_payment"


@pytest.mark.asyncio
async def test_reviewer_approves_payment_and_starts_review(reviewer_client, reviewer, request_factory):
    request = request_factory()

    approved = await reviewer_client.post(
        f"/analysis-requests/{request.id}/transitions", json={"event": "approve_payment"}
    )
    started = await reviewer_client.post(
        f"/analysis-requests/{request.id}/transitions", json={"event": "start_review"}
    )

    assert approved.status_code == 200
    assert approved.json()["status"] == "awaiting_review"
    assert started.status_code == 200
    assert started.json()["status"] == "in_review"
    assert started.json()["reviewer_id"] == str(reviewer.id)
    assert started.json()["allowed_events"] == ["complete", "cancel"]


@pytest.mark.asyncio
async def test_confirm_payment_is_not_accepted_from_clients(reviewer_client, request_factory):
    request = request_factory()

    response = await reviewer_client.post(
        f"/analysis-requests/{request.id}/transitions", json={"event": "confirm_payment"}
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_owner_may_only_cancel(owner_client, request_factory):
    request = request_factory(RequestStatus.AWAITING_REVIEW)

    start = await owner_client.post(
        f"/analysis-requests/{request.id}/transitions", json={"event": "start_review"}
    )
    cancel = await owner_client.post(
        f"/analysis-requests/{request.id}/transitions", json={"event": "cancel"}
    )

    assert start.status_code == 403
    assert cancel.status_code == 200
    assert cancel.json()["status"] == "cancelled"
    assert cancel.json()["allowed_events"] == []


@pytest.mark.asyncio
async def test_unknown_event_is_rejected(reviewer_client, request_factory):
    request = request_factory()

    response = await reviewer_client.post(
        f"/analysis-requests/{request.id}/transitions", json={"event": "teleport"}
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_complete_without_result_is_conflict(reviewer_client, request_factory):
    request = request_factory(RequestStatus.IN_REVIEW)

    response = await reviewer_client.post(
        f"/analysis-requests/{request.id}/transitions", json={"event": "complete"}
    )

    assert response.status_code == 409
    assert response.json()["code"] == "precondition_failed"


@pytest.mark.asyncio
async def test_delete_cancels_and_schedules_purge(owner_client, request_factory):
    request = request_factory()

    response = await owner_client.delete(f"/analysis-requests/{request.id}")
    again = await owner_client.delete(f"/analysis-requests/{request.id}")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "cancelled"
    assert body["cancelled_at"] is not None
    assert body["purge_after"] is not None
    assert again.status_code == 409
    assert again.json()["current_status"] == "cancelled"


@pytest.mark.asyncio
async def test_history_lists_transitions(owner_client, request_factory):
    request = request_factory(RequestStatus.IN_REVIEW)

    response = await owner_client.get(f"/analysis-requests/{request.id}/history")

    assert response.status_code == 200
    assert [(h["from_status"], h["to_status"]) for h in response.json()] == [
        ("awaiting_payment", "awaiting_review"),
        ("awaiting_review", "in_review"),
    ]


@pytest.mark.asyncio
async def test_payment_reference_only_while_awaiting_payment(owner_client, request_factory):
    pending = request_factory()
    paid = request_factory(RequestStatus.AWAITING_REVIEW)

    ok = await owner_client.put(
        f"/analysis-requests/{pending.id}/payment-reference", json={"payment_reference": "cs_123"}
    )
    late = await owner_client.put(
        f"/analysis-requests/{paid.id}/payment-reference", json={"payment_reference": "cs_456"}
    )

    assert ok.status_code == 200
    assert ok.json()["payment_reference"] == "cs_123"
    assert late.status_code == 409


@pytest.mark.asyncio
async def test_has_result_toggle_is_reviewer_only(owner_client, reviewer_client, request_factory):
    request = request_factory(RequestStatus.IN_REVIEW)

    as_owner = await owner_client.patch(
        f"/analysis-requests/{request.id}/has-result", json={"has_result": True}
    )
    as_reviewer = await reviewer_client.patch(
        f"/analysis-requests/{request.id}/has-result", json={"has_result": True}
    )

    assert as_owner.status_code == 403
    # No result row yet
    assert as_reviewer.status_code == 409


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
