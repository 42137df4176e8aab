"""Pydantic schemas for analysis requests and lifecycle events."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pattern_analysis.db.enums import AnalysisFor, LifecycleEvent, PriorityDomain


# =============================================================================
# Create / Update
# =============================================================================

class AnalysisRequestCreate(BaseModel):
    """Intake answers submitted by the subject."""
    analysis_for: AnalysisFor
    other_reason: str | None = Field(None, max_length=2000)
    priority_domain: PriorityDomain

    complaint_1: str = Field(..., min_length=1, max_length=5000)
    complaint_2: str | None = Field(None, max_length=5000)
    complaint_3: str | None = Field(None, max_length=5000)

    had_surgery: bool
    surgery_details: str | None = Field(None, max_length=5000)
    had_trauma: bool
    trauma_details: str | None = Field(None, max_length=5000)
    used_device: bool
    device_details: str | None = Field(None, max_length=5000)

    front_body_photo: str | None = Field(None, max_length=500)
    back_body_photo: str | None = Field(None, max_length=500)
    serious_face_photo: str | None = Field(None, max_length=500)
    smiling_face_photo: str | None = Field(None, max_length=500)

    amount_cents: int | None = Field(None, gt=0)

    @model_validator(mode="after")
    def check_complaints(self) -> "AnalysisRequestCreate":
        if not self.complaint_1.strip():
            raise ValueError("At least one complaint is required")
        for name in ("complaint_2", "complaint_3"):
            value = getattr(self, name)
            if value is not None and not value.strip():
                setattr(self, name, None)
        return self


class PaymentReferenceUpdate(BaseModel):
    """Processor reference recorded when a checkout session is opened."""
    payment_reference: str = Field(..., min_length=1, max_length=255)


class TransitionRequest(BaseModel):
    """Lifecycle event to apply."""
    event: LifecycleEvent


class HasResultUpdate(BaseModel):
    has_result: bool


# =============================================================================
# Read / Response
# =============================================================================

class AnalysisRequestRead(BaseModel):
    """Full analysis request details."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    public_id: UUID
    user_id: UUID
    analysis_for: str
    other_reason: str | None
    priority_domain: str
    complaint_1: str
    complaint_2: str | None
    complaint_3: str | None
    had_surgery: bool
    surgery_details: str | None
    had_trauma: bool
    trauma_details: str | None
    used_device: bool
    device_details: str | None
    front_body_photo: str | None
    back_body_photo: str | None
    serious_face_photo: str | None
    smiling_face_photo: str | None
    amount_cents: int
    payment_reference: str | None
    status: str
    has_result: bool
    reviewer_id: UUID | None
    paid_at: datetime | None
    review_started_at: datetime | None
    completed_at: datetime | None
    cancelled_at: datetime | None
    purge_after: datetime | None
    created_at: datetime
    updated_at: datetime

    # Lifecycle events legal from the current status
    allowed_events: list[str] = []


class AnalysisRequestListItem(BaseModel):
    """Minimal request for list views."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    public_id: UUID
    user_id: UUID
    priority_domain: str
    status: str
    has_result: bool
    reviewer_id: UUID | None
    created_at: datetime


class StatusHistoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    from_status: str
    to_status: str
    event: str
    changed_by_user_id: UUID | None
    changed_at: datetime
