"""Payment webhook: signature checks, confirmation and redelivery."""
import json
import uuid

import pytest

from pattern_analysis.core.config import settings
from pattern_analysis.core.security import sign_payment_payload, verify_payment_signature
from pattern_analysis.db.enums import RequestStatus
from pattern_analysis.db.models import RequestStatusHistory

WEBHOOK_URL = "/webhooks/payments"


def _event(public_id, event_type: str = "payment_intent.succeeded", payment_id: str = "pi_test_1") -> bytes:
    return json.dumps(
        {
            "type": event_type,
            "data": {"object": {"id": payment_id, "metadata": {"request_id": str(public_id)}}},
        }
    ).encode()


def _signed(body: bytes) -> dict[str, str]:
    return {"X-Payment-Signature": sign_payment_payload(body), "Content-Type": "application/json"}


def test_signature_roundtrip():
    body = b'{"type": "ping"}'
    assert verify_payment_signature(body, sign_payment_payload(body))
    assert not verify_payment_signature(body + b" ", sign_payment_payload(body))
    assert not verify_payment_signature(body, "md5=abc")


@pytest.mark.asyncio
async def test_signed_payment_moves_request_to_awaiting_review(client, db, request_factory):
    request = request_factory()
    body = _event(request.public_id)

    response = await client.post(WEBHOOK_URL, content=body, headers=_signed(body))

    assert response.status_code == 200
    assert response.json() == {"received": True, "outcome": "confirmed"}
    db.refresh(request)
    assert request.status == RequestStatus.AWAITING_REVIEW.value
    assert request.payment_reference == "pi_test_1"
    history = db.query(RequestStatusHistory).filter_by(analysis_request_id=request.id).one()
    assert history.event == "confirm_payment"
    assert history.changed_by_user_id is None


@pytest.mark.asyncio
async def test_redelivery_is_acknowledged_without_changes(client, db, request_factory):
    request = request_factory()
    body = _event(request.public_id)

    first = await client.post(WEBHOOK_URL, content=body, headers=_signed(body))
    second = await client.post(WEBHOOK_URL, content=body, headers=_signed(body))

    assert first.json()["outcome"] == "confirmed"
    assert second.status_code == 200
    assert second.json()["outcome"] == "already_processed"
    assert db.query(RequestStatusHistory).filter_by(analysis_request_id=request.id).count() == 1


@pytest.mark.asyncio
async def test_missing_signature_is_forbidden(client, request_factory):
    request = request_factory()
    body = _event(request.public_id)

    response = await client.post(WEBHOOK_URL, content=body, headers={"Content-Type": "application/json"})

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_invalid_signature_is_forbidden(client, db, request_factory):
    request = request_factory()
    body = _event(request.public_id)

    response = await client.post(
        WEBHOOK_URL,
        content=body,
        headers={"X-Payment-Signature": "sha256=deadbeef", "Content-Type": "application/json"},
    )

    assert response.status_code == 403
    db.refresh(request)
    assert request.status == RequestStatus.AWAITING_PAYMENT.value


@pytest.mark.asyncio
async def test_other_event_types_are_ignored(client, db, request_factory):
    request = request_factory()
    body = _event(request.public_id, event_type="payment_intent.payment_failed")

    response = await client.post(WEBHOOK_URL, content=body, headers=_signed(body))

    assert response.json()["outcome"] == "ignored"
    db.refresh(request)
    assert request.status == RequestStatus.AWAITING_PAYMENT.value


@pytest.mark.asyncio
async def test_unknown_request_is_acknowledged(client):
    body = _event(uuid.uuid4())

    response = await client.post(WEBHOOK_URL, content=body, headers=_signed(body))

    assert response.status_code == 200
    assert response.json()["outcome"] == "unknown_request"


@pytest.mark.asyncio
async def test_payment_for_cancelled_request_does_not_revive_it(client, db, request_factory):
    request = request_factory(RequestStatus.CANCELLED)
    body = _event(request.public_id)

    response = await client.post(WEBHOOK_URL, content=body, headers=_signed(body))

    assert response.json()["outcome"] == "already_processed"
    db.refresh(request)
    assert request.status == RequestStatus.CANCELLED.value


@pytest.mark.asyncio
async def test_malformed_json_is_bad_request(client):
    body = b"{not json"

    response = await client.post(WEBHOOK_URL, content=body, headers=_signed(body))

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_oversized_payload_is_rejected(client, request_factory, monkeypatch):
    monkeypatch.setattr(settings, "PAYMENT_WEBHOOK_MAX_PAYLOAD_BYTES", 16)
    request = request_factory()
    body = _event(request.public_id)

    response = await client.post(WEBHOOK_URL, content=body, headers=_signed(body))

    assert response.status_code == 413


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data",
    [
        {"object": "pi_1"},
        {"object": {"id": "pi_1", "metadata": "x"}},
        {"object": {"id": "pi_1", "metadata": ["request_id"]}},
        [],
        "pi_1",
    ],
)
async def test_succeeded_event_with_unexpected_shape_is_acknowledged(client, data):
    body = json.dumps({"type": "payment_intent.succeeded", "data": data}).encode()

    response = await client.post(WEBHOOK_URL, content=body, headers=_signed(body))

    assert response.status_code == 200
    assert response.json()["outcome"] == "unknown_request"
