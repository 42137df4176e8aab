"""Analysis result routes."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from pattern_analysis.core.deps import (
    check_request_access,
    get_current_session,
    get_db,
    require_csrf_header,
    require_reviewer,
)
from pattern_analysis.db.models import AnalysisResult
from pattern_analysis.schemas.auth import UserSession
from pattern_analysis.schemas.result import AnalysisResultRead, ResultUpdate, SignificantTrait
from pattern_analysis.services import analysis_request_service, narrative_service

router = APIRouter()


def _to_read(result: AnalysisResult) -> AnalysisResultRead:
    read = AnalysisResultRead.model_validate(result)
    ranked = [
        (result.trait1_name, result.trait1_percentage),
        (result.trait2_name, result.trait2_percentage),
        (result.trait3_name, result.trait3_percentage),
    ]
    read.significant_traits = [
        SignificantTrait(name=name, percentage=pct)
        for name, pct in narrative_service.significant_patterns(ranked)
    ]
    return read


@router.post(
    "/{request_id}/result",
    response_model=AnalysisResultRead,
    dependencies=[Depends(require_csrf_header)],
)
def compose_result(
    request_id: int,
    session: UserSession = Depends(require_reviewer),
    db: Session = Depends(get_db),
):
    """Create the result, or regenerate it from the current matrix (blocks 1 and 2)."""
    result = narrative_service.compose_narrative(db, request_id, session.user_id)
    return _to_read(result)


@router.get("/{request_id}/result", response_model=AnalysisResultRead)
def get_result(
    request_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Owners only see a result once it has been made visible."""
    request = check_request_access(analysis_request_service.get_request(db, request_id), session)
    if not session.is_reviewer and not request.has_result:
        raise HTTPException(status_code=404, detail="Result not available")
    return _to_read(narrative_service.require_result(db, request_id))


@router.patch(
    "/{request_id}/result",
    response_model=AnalysisResultRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_result(
    request_id: int,
    data: ResultUpdate,
    session: UserSession = Depends(require_reviewer),
    db: Session = Depends(get_db),
):
    """Save reviewer edits; blocks not sent are left untouched."""
    result = narrative_service.update_result(db, request_id, data.changes(), session.user_id)
    return _to_read(result)
