"""Score matrix persistence: point writes, block saves, notes and recompute.

Every accepted point write runs scoring_engine.recompute() and stores the
derived fields in the same commit, so a matrix row is never persisted with
totals that disagree with its points.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, Mapping
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from pattern_analysis.core.structured_logging import build_log_context
from pattern_analysis.db.enums import Pattern, Region, RequestStatus
from pattern_analysis.db.models import (
    PERCENTAGE_FIELDS,
    POINT_FIELDS,
    TOTAL_FIELDS,
    AnalysisRequest,
    ScoreMatrix,
)
from pattern_analysis.services import scoring_engine
from pattern_analysis.services.errors import AnalysisServiceError, RequestNotFoundError
from pattern_analysis.services.request_status_service import (
    get_request_for_update,
    require_status,
)
from pattern_analysis.services.scoring_engine import DerivedScores, PointGrid, PointWrite

logger = logging.getLogger(__name__)

PointEntry = tuple[Pattern | str, Region | str, int]


# =============================================================================
# Typed accessors
# =============================================================================

def get_point(matrix: ScoreMatrix, pattern: Pattern, region: Region) -> int:
    return getattr(matrix, POINT_FIELDS[(pattern, region)])


def _write_point(matrix: ScoreMatrix, pattern: Pattern, region: Region, value: int) -> None:
    setattr(matrix, POINT_FIELDS[(pattern, region)], value)


def to_grid(matrix: ScoreMatrix) -> PointGrid:
    return {key: getattr(matrix, name) or 0 for key, name in POINT_FIELDS.items()}


def apply_derived(matrix: ScoreMatrix, derived: DerivedScores) -> None:
    """Copy engine output onto the row."""
    for pattern in Pattern:
        setattr(matrix, TOTAL_FIELDS[pattern], derived.totals[pattern])
        setattr(matrix, PERCENTAGE_FIELDS[pattern], derived.percentages[pattern])
    matrix.primary_pattern = derived.primary
    matrix.secondary_pattern = derived.secondary
    matrix.tertiary_pattern = derived.tertiary
    matrix.recomputed_at = datetime.now(timezone.utc)


def stored_derived(matrix: ScoreMatrix) -> DerivedScores:
    """Derived fields as persisted (what the narrative engine snapshots)."""
    return DerivedScores(
        totals={p: getattr(matrix, TOTAL_FIELDS[p]) for p in Pattern},
        percentages={p: getattr(matrix, PERCENTAGE_FIELDS[p]) for p in Pattern},
        primary=matrix.primary_pattern or "",
        secondary=matrix.secondary_pattern or "",
        tertiary=matrix.tertiary_pattern or "",
        grand_total=sum(getattr(matrix, TOTAL_FIELDS[p]) for p in Pattern),
    )


def _recompute_into(matrix: ScoreMatrix, grid: PointGrid) -> DerivedScores:
    derived = scoring_engine.recompute(grid)
    apply_derived(matrix, derived)
    return derived


# =============================================================================
# Queries
# =============================================================================

def get_matrix(db: Session, request_id: int) -> ScoreMatrix | None:
    return db.execute(
        select(ScoreMatrix).where(ScoreMatrix.analysis_request_id == request_id)
    ).scalar_one_or_none()


def require_matrix(db: Session, request_id: int) -> ScoreMatrix:
    matrix = get_matrix(db, request_id)
    if not matrix:
        raise RequestNotFoundError(f"No score matrix for analysis request {request_id}")
    return matrix


# =============================================================================
# Writes
# =============================================================================

def _load_scorable(db: Session, request_id: int) -> AnalysisRequest:
    request = get_request_for_update(db, request_id)
    require_status(request, RequestStatus.IN_REVIEW, action="score")
    return request


def _ensure_matrix(db: Session, request: AnalysisRequest, actor_id: UUID | None) -> ScoreMatrix:
    matrix = get_matrix(db, request.id)
    if matrix:
        return matrix
    matrix = ScoreMatrix(analysis_request_id=request.id, scored_by_user_id=actor_id)
    for name in POINT_FIELDS.values():
        setattr(matrix, name, 0)
    _recompute_into(matrix, to_grid(matrix))
    db.add(matrix)
    db.flush()
    return matrix


def _normalize_entries(points: Iterable[PointEntry]) -> dict[tuple[Pattern, Region], int]:
    """Validate every entry before anything is written."""
    entries: dict[tuple[Pattern, Region], int] = {}
    for pattern, region, value in points:
        key = (scoring_engine.parse_pattern(pattern), scoring_engine.parse_region(region))
        entries[key] = scoring_engine.validate_value(value)
    return entries


def _apply_block(matrix: ScoreMatrix, entries: Mapping[tuple[Pattern, Region], int]) -> list[PointWrite]:
    """
    Replace the listed cells.

    Listed cells are cleared first, then written in pattern/region declaration
    order, each one clamped against what is already in its region.
    """
    grid = to_grid(matrix)
    for key in entries:
        grid[key] = 0

    writes: list[PointWrite] = []
    for key in POINT_FIELDS:
        if key not in entries:
            continue
        grid, write = scoring_engine.set_point(grid, key[0], key[1], entries[key])
        writes.append(write)

    for (pattern, region), value in grid.items():
        _write_point(matrix, pattern, region, value)
    _recompute_into(matrix, grid)
    return writes


def _log_clamps(writes: list[PointWrite], request_id: int, actor_id: UUID | None) -> None:
    for write in writes:
        if write.clamped:
            logger.info(
                "Point clamped for %s/%s: %s -> %s",
                write.pattern.value,
                write.region.value,
                write.requested_value,
                write.applied_value,
                extra=build_log_context(user_id=actor_id, request_id=request_id),
            )


def open_matrix(
    db: Session,
    request_id: int,
    actor_id: UUID | None,
    initial_points: Iterable[PointEntry] | None = None,
) -> tuple[ScoreMatrix, list[PointWrite]]:
    """
    Get or create the matrix when a reviewer opens the scoring step.

    A new matrix starts at zero, optionally seeded with `initial_points`
    (clamped like any other block). An existing matrix is returned untouched.
    """
    try:
        entries = _normalize_entries(initial_points or [])
        request = _load_scorable(db, request_id)
        existing = get_matrix(db, request.id)
        if existing:
            db.commit()
            return existing, []
        matrix = _ensure_matrix(db, request, actor_id)
        writes = _apply_block(matrix, entries) if entries else []
        db.commit()
    except AnalysisServiceError:
        db.rollback()
        raise

    db.refresh(matrix)
    _log_clamps(writes, request_id, actor_id)
    return matrix, writes


def set_matrix_point(
    db: Session,
    request_id: int,
    pattern: Pattern | str,
    region: Region | str,
    value: int,
    actor_id: UUID | None,
) -> PointWrite:
    """
    Write one cell.

    Out-of-range values and unknown keys raise ScoreValidationError. A value
    that does not fit the region budget is reduced to what is left and the
    returned PointWrite reports `clamped=True`.
    """
    try:
        pattern = scoring_engine.parse_pattern(pattern)
        region = scoring_engine.parse_region(region)
        scoring_engine.validate_value(value)

        request = _load_scorable(db, request_id)
        matrix = _ensure_matrix(db, request, actor_id)

        grid, write = scoring_engine.set_point(to_grid(matrix), pattern, region, value)
        _write_point(matrix, pattern, region, write.applied_value)
        _recompute_into(matrix, grid)
        matrix.scored_by_user_id = actor_id
        db.commit()
    except AnalysisServiceError:
        db.rollback()
        raise

    _log_clamps([write], request_id, actor_id)
    return write


def save_points(
    db: Session,
    request_id: int,
    points: Iterable[PointEntry],
    actor_id: UUID | None,
    notes: str | None = None,
) -> tuple[ScoreMatrix, list[PointWrite]]:
    """Block save of several cells (and optionally the notes) in one commit."""
    try:
        entries = _normalize_entries(points)
        request = _load_scorable(db, request_id)
        matrix = _ensure_matrix(db, request, actor_id)
        writes = _apply_block(matrix, entries)
        if notes is not None:
            matrix.scoring_notes = notes
        matrix.scored_by_user_id = actor_id
        db.commit()
    except AnalysisServiceError:
        db.rollback()
        raise

    db.refresh(matrix)
    _log_clamps(writes, request_id, actor_id)
    return matrix, writes


def update_notes(
    db: Session, request_id: int, notes: str | None, actor_id: UUID | None
) -> ScoreMatrix:
    """Notes are saved on their own so they never clobber concurrent point edits."""
    try:
        request = _load_scorable(db, request_id)
        matrix = _ensure_matrix(db, request, actor_id)
        matrix.scoring_notes = notes
        db.commit()
    except AnalysisServiceError:
        db.rollback()
        raise

    db.refresh(matrix)
    return matrix


def recompute_matrix(db: Session, request_id: int, actor_id: UUID | None = None) -> ScoreMatrix:
    """
    Explicit "recalculate" action.

    Raw points are never modified; only totals, percentages and rank labels
    are rewritten. Running it twice in a row stores identical values.
    Allowed while the request is in review or completed.
    """
    try:
        request = get_request_for_update(db, request_id)
        require_status(
            request, RequestStatus.IN_REVIEW, RequestStatus.COMPLETED, action="recompute scores"
        )
        matrix = require_matrix(db, request.id)
        derived = _recompute_into(matrix, to_grid(matrix))
        db.commit()
    except AnalysisServiceError:
        db.rollback()
        raise

    db.refresh(matrix)

    logger.info(
        "Score matrix recomputed: %s/%s/%s",
        derived.primary or "-",
        derived.secondary or "-",
        derived.tertiary or "-",
        extra=build_log_context(user_id=actor_id, request_id=request_id),
    )
    return matrix
