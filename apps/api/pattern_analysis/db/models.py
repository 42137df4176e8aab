"""SQLAlchemy ORM models for users, analysis requests, scoring and results."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pattern_analysis.db.base import Base
from pattern_analysis.db.enums import DEFAULT_REQUEST_STATUS, Pattern, Region

JsonDocument = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Users
# =============================================================================

class User(Base):
    """A subject (client) or a reviewer."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # Bumped to revoke every outstanding session token
    token_version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)


# =============================================================================
# Analysis requests
# =============================================================================

class AnalysisRequest(Base):
    """
    One subject's analysis job.

    `id` is the owner-visible ordering key; `public_id` goes in shareable URLs.
    Requests are never hard-deleted here: cancelling records `purge_after`
    and an out-of-band retention job erases the row later.
    """

    __tablename__ = "analysis_requests"
    __table_args__ = (
        Index("idx_analysis_requests_user", "user_id", "id"),
        Index("idx_analysis_requests_status", "status", "created_at"),
        Index(
            "idx_analysis_requests_purge",
            "purge_after",
            postgresql_where=text("purge_after IS NOT NULL"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    public_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, unique=True, nullable=False, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )

    # Intake answers
    analysis_for: Mapped[str] = mapped_column(String(10), nullable=False)
    other_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    priority_domain: Mapped[str] = mapped_column(String(20), nullable=False)
    complaint_1: Mapped[str] = mapped_column(Text, nullable=False)
    complaint_2: Mapped[str | None] = mapped_column(Text, nullable=True)
    complaint_3: Mapped[str | None] = mapped_column(Text, nullable=True)

    had_surgery: Mapped[bool] = mapped_column(Boolean, nullable=False)
    surgery_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    had_trauma: Mapped[bool] = mapped_column(Boolean, nullable=False)
    trauma_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    used_device: Mapped[bool] = mapped_column(Boolean, nullable=False)
    device_details: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Photo references (storage keys owned by the upload service)
    front_body_photo: Mapped[str | None] = mapped_column(String(500), nullable=True)
    back_body_photo: Mapped[str | None] = mapped_column(String(500), nullable=True)
    serious_face_photo: Mapped[str | None] = mapped_column(String(500), nullable=True)
    smiling_face_photo: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Payment
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_reference: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Lifecycle
    status: Mapped[str] = mapped_column(
        String(30), nullable=False, default=DEFAULT_REQUEST_STATUS.value
    )
    has_result: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reviewer_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    paid_at: Mapped[datetime | None] = mapped_column(nullable=True)
    review_started_at: Mapped[datetime | None] = mapped_column(nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(nullable=True)
    purge_after: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=_utcnow, nullable=False
    )

    # Relationships
    owner: Mapped[User] = relationship(foreign_keys=[user_id])
    reviewer: Mapped[User | None] = relationship(foreign_keys=[reviewer_id])
    score_matrix: Mapped[ScoreMatrix | None] = relationship(
        back_populates="analysis_request", uselist=False
    )
    result: Mapped[AnalysisResult | None] = relationship(
        back_populates="analysis_request", uselist=False
    )
    status_history: Mapped[list[RequestStatusHistory]] = relationship(
        back_populates="analysis_request",
        cascade="all, delete-orphan",
        order_by="RequestStatusHistory.changed_at",
    )

    @property
    def complaints(self) -> list[str]:
        """Non-empty complaints in the order the subject gave them."""
        return [c for c in (self.complaint_1, self.complaint_2, self.complaint_3) if c]


class RequestStatusHistory(Base):
    """Tracks every applied status transition for audit."""

    __tablename__ = "request_status_history"
    __table_args__ = (
        Index("idx_status_history_request", "analysis_request_id", "changed_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    analysis_request_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("analysis_requests.id", ondelete="CASCADE"), nullable=False
    )
    from_status: Mapped[str] = mapped_column(String(30), nullable=False)
    to_status: Mapped[str] = mapped_column(String(30), nullable=False)
    event: Mapped[str] = mapped_column(String(30), nullable=False)
    changed_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    changed_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)

    analysis_request: Mapped[AnalysisRequest] = relationship(back_populates="status_history")


# =============================================================================
# Scoring
# =============================================================================

class ScoreMatrix(Base):
    """
    Per-region, per-pattern point matrix for one request.

    One column per (pattern, region) pair. Totals, percentages and rank labels
    are derived by services.scoring_engine and written in the same flush as
    the points they were derived from.
    """

    __tablename__ = "score_matrices"
    __table_args__ = (
        *[
            CheckConstraint(f"{p.value}_{r.value} BETWEEN 0 AND 10", name=f"ck_score_{p.value}_{r.value}_range")
            for p in Pattern
            for r in Region
        ],
        # Region budget
        *[
            CheckConstraint(
                " + ".join(f"{p.value}_{r.value}" for p in Pattern) + " <= 10",
                name=f"ck_score_{r.value}_budget",
            )
            for r in Region
        ],
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    analysis_request_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("analysis_requests.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    # CRIATIVO
    criativo_head: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    criativo_eyes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    criativo_mouth: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    criativo_torso: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    criativo_waist: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    criativo_legs: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # CONECTIVO
    conectivo_head: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    conectivo_eyes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    conectivo_mouth: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    conectivo_torso: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    conectivo_waist: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    conectivo_legs: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # FORTE
    forte_head: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    forte_eyes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    forte_mouth: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    forte_torso: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    forte_waist: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    forte_legs: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # LIDER
    lider_head: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    lider_eyes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    lider_mouth: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    lider_torso: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    lider_waist: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    lider_legs: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # COMPETITIVO
    competitivo_head: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    competitivo_eyes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    competitivo_mouth: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    competitivo_torso: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    competitivo_waist: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    competitivo_legs: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Derived totals
    criativo_total: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    conectivo_total: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    forte_total: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    lider_total: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    competitivo_total: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Derived percentages
    criativo_percentage: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    conectivo_percentage: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    forte_percentage: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    lider_percentage: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    competitivo_percentage: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Derived ranking ('' when the rank is unfilled)
    primary_pattern: Mapped[str] = mapped_column(String(20), default="", nullable=False)
    secondary_pattern: Mapped[str] = mapped_column(String(20), default="", nullable=False)
    tertiary_pattern: Mapped[str] = mapped_column(String(20), default="", nullable=False)

    scoring_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    scored_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    recomputed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=_utcnow, nullable=False
    )

    analysis_request: Mapped[AnalysisRequest] = relationship(back_populates="score_matrix")


POINT_FIELDS: dict[tuple[Pattern, Region], str] = {
    (pattern, region): f"{pattern.value}_{region.value}"
    for pattern in Pattern
    for region in Region
}
TOTAL_FIELDS: dict[Pattern, str] = {p: f"{p.value}_total" for p in Pattern}
PERCENTAGE_FIELDS: dict[Pattern, str] = {p: f"{p.value}_percentage" for p in Pattern}

_score_columns = ScoreMatrix.__table__.columns
_missing = [
    name
    for name in (*POINT_FIELDS.values(), *TOTAL_FIELDS.values(), *PERCENTAGE_FIELDS.values())
    if name not in _score_columns
]
if _missing:
    raise RuntimeError(f"ScoreMatrix is missing columns: {', '.join(_missing)}")


# =============================================================================
# Results
# =============================================================================

class AnalysisResult(Base):
    """
    Narrative result for one request.

    Block 1 answers the complaints, block 2 snapshots the three ranked traits
    with their pain/resource bundles ({"personal", "relationships",
    "professional"}), block 3 holds the subject's committed actions.
    """

    __tablename__ = "analysis_results"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    analysis_request_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("analysis_requests.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    axis: Mapped[str] = mapped_column(String(20), nullable=False)

    # Block 1 - complaint answers
    diagnosis: Mapped[str] = mapped_column(Text, nullable=False)
    blockage_explanation: Mapped[str] = mapped_column(Text, nullable=False)
    release_path: Mapped[str] = mapped_column(Text, nullable=False)

    # Block 2 - ranked traits
    trait1_name: Mapped[str] = mapped_column(String(20), nullable=False)
    trait1_percentage: Mapped[int] = mapped_column(Integer, nullable=False)
    trait1_pain: Mapped[dict] = mapped_column(JsonDocument, nullable=False)
    trait1_resource: Mapped[dict] = mapped_column(JsonDocument, nullable=False)

    trait2_name: Mapped[str] = mapped_column(String(20), nullable=False)
    trait2_percentage: Mapped[int] = mapped_column(Integer, nullable=False)
    trait2_pain: Mapped[dict] = mapped_column(JsonDocument, nullable=False)
    trait2_resource: Mapped[dict] = mapped_column(JsonDocument, nullable=False)

    trait3_name: Mapped[str] = mapped_column(String(20), nullable=False)
    trait3_percentage: Mapped[int] = mapped_column(Integer, nullable=False)
    trait3_pain: Mapped[dict] = mapped_column(JsonDocument, nullable=False)
    trait3_resource: Mapped[dict] = mapped_column(JsonDocument, nullable=False)

    # Combined narrative on the selected axis, fragments in rank order
    pain_state: Mapped[str] = mapped_column(Text, nullable=False, default="")
    resource_state: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Block 3 - committed actions
    action_1: Mapped[str | None] = mapped_column(Text, nullable=True)
    action_1_due: Mapped[date | None] = mapped_column(Date, nullable=True)
    action_2: Mapped[str | None] = mapped_column(Text, nullable=True)
    action_2_due: Mapped[date | None] = mapped_column(Date, nullable=True)

    generated_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    generated_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=_utcnow, nullable=False
    )

    analysis_request: Mapped[AnalysisRequest] = relationship(back_populates="result")
