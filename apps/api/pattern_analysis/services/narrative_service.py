"""Narrative composition and result persistence.

compose() walks the ranked patterns (primary, secondary, tertiary) and joins
the pain and resource fragments of every non-empty rank, in rank order,
separated by a blank line. Only the axis mapped from the subject's priority
domain is filled; the other two axes stay empty.

There is no percentage cutoff in compose(). The "combined share above 50%"
rule used when showing a result to a subject lives in significant_patterns(),
which callers apply at display time.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from pattern_analysis.core.config import settings
from pattern_analysis.core.structured_logging import build_log_context
from pattern_analysis.db.enums import NarrativeAxis, Pattern, PriorityDomain, RequestStatus
from pattern_analysis.db.models import AnalysisRequest, AnalysisResult
from pattern_analysis.services import score_matrix_service
from pattern_analysis.services.errors import (
    AnalysisServiceError,
    PreconditionFailedError,
    RequestNotFoundError,
    ScoreValidationError,
)
from pattern_analysis.services.narrative_fragments import (
    BLOCKAGES,
    DIAGNOSIS_CLOSING,
    DIAGNOSIS_GREETING,
    DOMAIN_LABELS,
    DOMAIN_TO_AXIS,
    RELEASE_CLOSING,
    RELEASE_INTRO,
    RELEASE_STEPS,
    Polarity,
    fragment,
)
from pattern_analysis.services.request_status_service import (
    get_request_for_update,
    require_status,
)

logger = logging.getLogger(__name__)

SEPARATOR = "\n\n"

SIGNIFICANCE_THRESHOLD = 50
SIGNIFICANCE_FLOOR = 15

# Statuses in which a result may be (re)generated or hand-edited
RESULT_WRITABLE = (RequestStatus.IN_REVIEW, RequestStatus.COMPLETED)

BLOCK_FIELDS: dict[int, tuple[str, ...]] = {
    1: ("diagnosis", "blockage_explanation", "release_path"),
    2: (
        "trait1_name", "trait1_percentage", "trait1_pain", "trait1_resource",
        "trait2_name", "trait2_percentage", "trait2_pain", "trait2_resource",
        "trait3_name", "trait3_percentage", "trait3_pain", "trait3_resource",
        "pain_state", "resource_state",
    ),
    3: ("action_1", "action_1_due", "action_2", "action_2_due"),
}


# =============================================================================
# Pure composition
# =============================================================================

@dataclass(frozen=True)
class TraitNarrative:
    """One rank slot of block 2."""

    name: str
    percentage: int
    pain: dict[str, str]
    resource: dict[str, str]


@dataclass(frozen=True)
class ComposedNarrative:
    axis: NarrativeAxis
    traits: tuple[TraitNarrative, ...]
    pain_state: str
    resource_state: str

    @property
    def names(self) -> list[str]:
        return [t.name for t in self.traits if t.name]


@dataclass(frozen=True)
class ComplaintAnswers:
    """Block 1."""

    diagnosis: str
    blockage_explanation: str
    release_path: str


def axis_for_domain(domain: PriorityDomain | str) -> NarrativeAxis:
    return DOMAIN_TO_AXIS[PriorityDomain(domain)]


def empty_bundle() -> dict[str, str]:
    return {axis.value: "" for axis in NarrativeAxis}


def _axis_bundle(axis: NarrativeAxis, text: str) -> dict[str, str]:
    bundle = empty_bundle()
    bundle[axis.value] = text
    return bundle


def compose(ranked: Sequence[tuple[str, int]], axis: NarrativeAxis) -> ComposedNarrative:
    """
    Build block 2 from (label, percentage) pairs in rank order.

    Deterministic: the same ranked pairs and axis always give the same text.
    """
    traits = []
    pains = []
    resources = []
    for label, percentage in ranked:
        if not label:
            traits.append(TraitNarrative("", 0, empty_bundle(), empty_bundle()))
            continue
        pattern = Pattern.from_label(label)
        pain = fragment(pattern, axis, Polarity.PAIN)
        resource = fragment(pattern, axis, Polarity.RESOURCE)
        pains.append(pain)
        resources.append(resource)
        traits.append(
            TraitNarrative(
                name=pattern.label,
                percentage=percentage,
                pain=_axis_bundle(axis, pain),
                resource=_axis_bundle(axis, resource),
            )
        )

    return ComposedNarrative(
        axis=axis,
        traits=tuple(traits),
        pain_state=SEPARATOR.join(pains),
        resource_state=SEPARATOR.join(resources),
    )


def significant_patterns(
    ranked: Sequence[tuple[str, int]],
    threshold: int = SIGNIFICANCE_THRESHOLD,
    floor: int = SIGNIFICANCE_FLOOR,
) -> list[tuple[str, int]]:
    """
    Display policy for which ranked patterns a reader should be shown.

    Patterns are taken in rank order while the cumulative share is below
    `threshold`; once it is reached, later patterns are kept only if they are
    at or above `floor`.
    """
    candidates = [(label, pct) for label, pct in ranked if label and pct > 0]
    if not candidates:
        return []

    selected = [candidates[0]]
    cumulative = candidates[0][1]
    for label, pct in candidates[1:]:
        if cumulative < threshold or pct >= floor:
            selected.append((label, pct))
            cumulative += pct
        else:
            break
    return selected


def diagnosis_patterns(
    ranked: Sequence[tuple[str, int]], floor: int
) -> list[tuple[Pattern, int]]:
    """Patterns at or above `floor`, or just the primary when none qualifies."""
    present = [(Pattern.from_label(label), pct) for label, pct in ranked if label and pct > 0]
    dominant = [(p, pct) for p, pct in present if pct >= floor]
    if not dominant and present:
        dominant = present[:1]
    return sorted(dominant, key=lambda item: -item[1])


def _diagnosis(dominant: list[tuple[Pattern, int]], area: str, complaints: list[str]) -> str:
    if len(dominant) > 1:
        title = " e ".join(f"{p.label} ({pct}%)" for p, pct in dominant)
        summary = (
            "Sua distribuição de padrões emocionais mostra uma predominância combinada de "
            f"{' e '.join(p.label for p, _ in dominant)}, o que revela um perfil emocional "
            "interessante e complexo."
        )
    elif dominant:
        pattern, pct = dominant[0]
        title = pattern.label
        summary = (
            f"Sua distribuição de padrões emocionais mostra uma predominância de {pattern.label} "
            f"({pct}%), o que indica um perfil emocional bastante definido."
        )
    else:
        title = "Emocional"
        summary = (
            "Sua distribuição de padrões emocionais revela um perfil equilibrado entre "
            "diferentes tendências."
        )

    lines = "\n".join(complaints)
    return SEPARATOR.join([
        f"Análise Emocional - Perfil {title}",
        DIAGNOSIS_GREETING,
        summary,
        f"Suas queixas principais na área de {area} indicam:\n{lines}",
        DIAGNOSIS_CLOSING,
    ])


def _blockage(dominant: list[tuple[Pattern, int]], area: str, complaints: list[str]) -> str:
    if len(dominant) > 1:
        title = "Padrão Combinado"
    elif dominant:
        title = dominant[0][0].label
    else:
        title = "Perfil Emocional"

    parts = [f"Bloqueios Emocionais - {title}"]
    if dominant:
        parts.append(BLOCKAGES[dominant[0][0]].format(area=area))
        others = [f"do padrão {p.label} ({pct}%)" for p, pct in dominant[1:]]
        if others:
            joined = others[0] if len(others) == 1 else f"{', '.join(others[:-1])} e {others[-1]}"
            parts.append(
                f"Além disso, a influência {joined} intensifica esses desafios, "
                "adicionando complexidade ao seu perfil emocional."
            )
    else:
        parts.append(
            f"Seu perfil emocional apresenta bloqueios que estão afetando sua área de {area} "
            "e precisam ser trabalhados para liberar seu potencial."
        )

    quoted = " e ".join(f'"{c}"' for c in complaints[:2])
    if quoted:
        parts.append(f"Suas queixas sobre {quoted} são manifestações diretas desses bloqueios emocionais.")
    return SEPARATOR.join(parts)


def _release(dominant: list[tuple[Pattern, int]]) -> str:
    if len(dominant) > 1:
        title = "Abordagem Integrada"
    elif dominant:
        title = dominant[0][0].label
    else:
        title = "Equilíbrio Emocional"

    parts = [f"Caminhos para Liberação Emocional - {title}"]
    if dominant:
        parts.append(RELEASE_INTRO)
        for pattern, pct in dominant:
            parts.append(f"Para o componente {pattern.label} ({pct}%):\n{RELEASE_STEPS[pattern]}")
    else:
        parts.append(
            "Para trabalhar com seu perfil emocional equilibrado, recomendo focar em "
            "desenvolver maior consciência emocional e praticar técnicas específicas de "
            "regulação em cada área."
        )
    parts.append(RELEASE_CLOSING)
    return SEPARATOR.join(parts)


def compose_complaint_answers(
    ranked: Sequence[tuple[str, int]],
    domain: PriorityDomain | str,
    complaints: Sequence[str],
    floor: int | None = None,
) -> ComplaintAnswers:
    """Block 1: diagnosis, blockage explanation and release path."""
    if floor is None:
        floor = settings.DIAGNOSIS_PATTERN_FLOOR
    dominant = diagnosis_patterns(ranked, floor)
    area = DOMAIN_LABELS[PriorityDomain(domain)]
    complaints = [c for c in complaints if c]
    return ComplaintAnswers(
        diagnosis=_diagnosis(dominant, area, complaints),
        blockage_explanation=_blockage(dominant, area, complaints),
        release_path=_release(dominant),
    )


# =============================================================================
# Persistence
# =============================================================================

def get_result(db: Session, request_id: int) -> AnalysisResult | None:
    return db.execute(
        select(AnalysisResult).where(AnalysisResult.analysis_request_id == request_id)
    ).scalar_one_or_none()


def require_result(db: Session, request_id: int) -> AnalysisResult:
    result = get_result(db, request_id)
    if not result:
        raise RequestNotFoundError(f"No result for analysis request {request_id}")
    return result


def _apply_snapshot(
    result: AnalysisResult,
    narrative: ComposedNarrative,
    answers: ComplaintAnswers,
) -> None:
    result.axis = narrative.axis.value
    result.diagnosis = answers.diagnosis
    result.blockage_explanation = answers.blockage_explanation
    result.release_path = answers.release_path
    for slot, trait in enumerate(narrative.traits, start=1):
        setattr(result, f"trait{slot}_name", trait.name)
        setattr(result, f"trait{slot}_percentage", trait.percentage)
        setattr(result, f"trait{slot}_pain", trait.pain)
        setattr(result, f"trait{slot}_resource", trait.resource)
    result.pain_state = narrative.pain_state
    result.resource_state = narrative.resource_state


def compose_narrative(db: Session, request_id: int, actor_id: UUID | None) -> AnalysisResult:
    """
    Create or regenerate the result from the current score matrix.

    Regeneration overwrites blocks 1 and 2 entirely (hand edits included) and
    leaves block 3 alone. It does not touch `has_result`.

    Raises:
        RequestNotFoundError, PreconditionFailedError (wrong status, no
        matrix, or fewer than three ranked patterns)
    """
    try:
        request = get_request_for_update(db, request_id)
        require_status(request, *RESULT_WRITABLE, action="compose a result")

        matrix = score_matrix_service.get_matrix(db, request.id)
        if not matrix:
            raise PreconditionFailedError("Cannot compose a result before scoring")
        derived = score_matrix_service.stored_derived(matrix)
        if not all(derived.rank_labels):
            raise PreconditionFailedError(
                "Cannot compose a result until three patterns are ranked",
                ranked=[label for label in derived.rank_labels if label],
            )

        ranked = derived.ranked()
        narrative = compose(ranked, axis_for_domain(request.priority_domain))
        answers = compose_complaint_answers(ranked, request.priority_domain, request.complaints)

        result = get_result(db, request.id)
        created = result is None
        if created:
            result = AnalysisResult(analysis_request_id=request.id)
            db.add(result)
        _apply_snapshot(result, narrative, answers)
        result.generated_by_user_id = actor_id
        result.generated_at = datetime.now(timezone.utc)
        db.commit()
    except AnalysisServiceError:
        db.rollback()
        raise

    db.refresh(result)
    logger.info(
        "Result %s for request %s (%s)",
        "created" if created else "regenerated",
        request_id,
        ", ".join(narrative.names),
        extra=build_log_context(user_id=actor_id, request_id=request_id),
    )
    return result


def update_result(
    db: Session,
    request_id: int,
    changes: dict[str, Any],
    actor_id: UUID | None,
) -> AnalysisResult:
    """
    Apply reviewer hand edits.

    Only the fields present in `changes` are written, so two reviewers saving
    different blocks do not overwrite each other.
    """
    editable = {name for fields in BLOCK_FIELDS.values() for name in fields}
    unknown = sorted(set(changes) - editable)
    if unknown:
        raise ScoreValidationError(f"Fields are not editable: {', '.join(unknown)}", field=unknown[0])

    try:
        request: AnalysisRequest = get_request_for_update(db, request_id)
        require_status(request, *RESULT_WRITABLE, action="edit a result")
        result = require_result(db, request.id)
        for name, value in changes.items():
            setattr(result, name, value)
        db.commit()
    except AnalysisServiceError:
        db.rollback()
        raise

    db.refresh(result)
    logger.info(
        "Result edited for request %s (%d fields)",
        request_id,
        len(changes),
        extra=build_log_context(user_id=actor_id, request_id=request_id),
    )
    return result
