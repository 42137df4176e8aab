"""Score matrix routes (reviewer only)."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pattern_analysis.core.deps import get_db, require_csrf_header, require_reviewer
from pattern_analysis.schemas.auth import UserSession
from pattern_analysis.schemas.score_matrix import (
    MatrixOpen,
    MatrixWriteResponse,
    NotesUpdate,
    PointInput,
    PointsBlockSave,
    PointWriteRead,
    ScoreMatrixRead,
)
from pattern_analysis.services import score_matrix_service

router = APIRouter()


def _entries(points: list[PointInput]) -> list[tuple[str, str, int]]:
    return [(p.pattern, p.region, p.value) for p in points]


def _write_response(matrix, writes) -> MatrixWriteResponse:
    return MatrixWriteResponse(
        matrix=ScoreMatrixRead.from_matrix(matrix),
        adjustments=[PointWriteRead.from_write(w) for w in writes if w.clamped],
    )


@router.get("/{request_id}/score-matrix", response_model=ScoreMatrixRead)
def get_score_matrix(
    request_id: int,
    session: UserSession = Depends(require_reviewer),
    db: Session = Depends(get_db),
):
    matrix = score_matrix_service.require_matrix(db, request_id)
    return ScoreMatrixRead.from_matrix(matrix)


@router.post(
    "/{request_id}/score-matrix",
    response_model=MatrixWriteResponse,
    dependencies=[Depends(require_csrf_header)],
)
def open_score_matrix(
    request_id: int,
    data: MatrixOpen | None = None,
    session: UserSession = Depends(require_reviewer),
    db: Session = Depends(get_db),
):
    """Get or create the matrix; a new one may be seeded with initial points."""
    points = data.points if data else []
    matrix, writes = score_matrix_service.open_matrix(
        db, request_id, session.user_id, initial_points=_entries(points)
    )
    return _write_response(matrix, writes)


@router.put(
    "/{request_id}/score-matrix/points",
    response_model=PointWriteRead,
    dependencies=[Depends(require_csrf_header)],
)
def set_point(
    request_id: int,
    data: PointInput,
    session: UserSession = Depends(require_reviewer),
    db: Session = Depends(get_db),
):
    """Write one cell. A clamped write is still a success (`clamped: true`)."""
    write = score_matrix_service.set_matrix_point(
        db, request_id, data.pattern, data.region, data.value, session.user_id
    )
    return PointWriteRead.from_write(write)


@router.patch(
    "/{request_id}/score-matrix/points",
    response_model=MatrixWriteResponse,
    dependencies=[Depends(require_csrf_header)],
)
def save_points(
    request_id: int,
    data: PointsBlockSave,
    session: UserSession = Depends(require_reviewer),
    db: Session = Depends(get_db),
):
    matrix, writes = score_matrix_service.save_points(
        db, request_id, _entries(data.points), session.user_id, notes=data.notes
    )
    return _write_response(matrix, writes)


@router.patch(
    "/{request_id}/score-matrix/notes",
    response_model=ScoreMatrixRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_notes(
    request_id: int,
    data: NotesUpdate,
    session: UserSession = Depends(require_reviewer),
    db: Session = Depends(get_db),
):
    matrix = score_matrix_service.update_notes(db, request_id, data.scoring_notes, session.user_id)
    return ScoreMatrixRead.from_matrix(matrix)


@router.post(
    "/{request_id}/score-matrix/recompute",
    response_model=ScoreMatrixRead,
    dependencies=[Depends(require_csrf_header)],
)
def recompute(
    request_id: int,
    session: UserSession = Depends(require_reviewer),
    db: Session = Depends(get_db),
):
    """Explicit recalculate; raw points are left as they are."""
    matrix = score_matrix_service.recompute_matrix(db, request_id, session.user_id)
    return ScoreMatrixRead.from_matrix(matrix)
