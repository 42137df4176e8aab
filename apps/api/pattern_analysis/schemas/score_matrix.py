"""Pydantic schemas for the score matrix."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from pattern_analysis.db.enums import Pattern, Region
from pattern_analysis.db.models import PERCENTAGE_FIELDS, POINT_FIELDS, TOTAL_FIELDS, ScoreMatrix
from pattern_analysis.services.scoring_engine import PointWrite


# =============================================================================
# Requests
# =============================================================================

class PointInput(BaseModel):
    """
    One cell write.

    Keys and range are checked by the scoring engine so that bad input gets
    the same `validation_error` body everywhere.
    """
    pattern: str
    region: str
    value: int


class MatrixOpen(BaseModel):
    """Optional initial points when the scoring step is first opened."""
    points: list[PointInput] = []


class PointsBlockSave(BaseModel):
    points: list[PointInput] = Field(..., min_length=1)
    notes: str | None = Field(None, max_length=10000)


class NotesUpdate(BaseModel):
    scoring_notes: str | None = Field(None, max_length=10000)


# =============================================================================
# Responses
# =============================================================================

class PointWriteRead(BaseModel):
    pattern: Pattern
    region: Region
    requested_value: int
    applied_value: int
    clamped: bool

    @classmethod
    def from_write(cls, write: PointWrite) -> "PointWriteRead":
        return cls(
            pattern=write.pattern,
            region=write.region,
            requested_value=write.requested_value,
            applied_value=write.applied_value,
            clamped=write.clamped,
        )


class ScoreMatrixRead(BaseModel):
    """Matrix with points nested as {pattern: {region: value}}."""
    id: int
    analysis_request_id: int
    points: dict[str, dict[str, int]]
    totals: dict[str, int]
    percentages: dict[str, int]
    primary_pattern: str
    secondary_pattern: str
    tertiary_pattern: str
    scoring_notes: str | None
    scored_by_user_id: UUID | None
    recomputed_at: datetime | None
    updated_at: datetime

    @classmethod
    def from_matrix(cls, matrix: ScoreMatrix) -> "ScoreMatrixRead":
        points: dict[str, dict[str, int]] = {p.value: {} for p in Pattern}
        for (pattern, region), name in POINT_FIELDS.items():
            points[pattern.value][region.value] = getattr(matrix, name)
        return cls(
            id=matrix.id,
            analysis_request_id=matrix.analysis_request_id,
            points=points,
            totals={p.value: getattr(matrix, TOTAL_FIELDS[p]) for p in Pattern},
            percentages={p.value: getattr(matrix, PERCENTAGE_FIELDS[p]) for p in Pattern},
            primary_pattern=matrix.primary_pattern,
            secondary_pattern=matrix.secondary_pattern,
            tertiary_pattern=matrix.tertiary_pattern,
            scoring_notes=matrix.scoring_notes,
            scored_by_user_id=matrix.scored_by_user_id,
            recomputed_at=matrix.recomputed_at,
            updated_at=matrix.updated_at,
        )


class MatrixWriteResponse(BaseModel):
    """Matrix after a block write, plus every cell that had to be clamped."""
    matrix: ScoreMatrixRead
    adjustments: list[PointWriteRead]
