"""Structured logging helpers (PHI-safe)."""

from typing import Any
from uuid import UUID


def build_log_context(
    *,
    user_id: UUID | str | None = None,
    request_id: int | None = None,
    public_id: UUID | str | None = None,
    event: str | None = None,
) -> dict[str, Any]:
    """
    Return a PHI-safe log context dict.

    Only identifiers and event names go in here. Complaint text, photo
    references and narrative content never do.
    """
    context: dict[str, Any] = {}
    if user_id:
        context["user_id"] = str(user_id)
    if request_id is not None:
        context["analysis_request_id"] = request_id
    if public_id:
        context["public_id"] = str(public_id)
    if event:
        context["event"] = event
    return context
