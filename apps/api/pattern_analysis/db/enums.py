"""Enum definitions for application constants."""

from enum import Enum


class Role(str, Enum):
    """
    User roles.

    - CLIENT: Owns analysis requests, reads own results
    - REVIEWER: Scores requests, drives the review lifecycle, writes results
    """

    CLIENT = "client"
    REVIEWER = "reviewer"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_


class RequestStatus(str, Enum):
    """
    Analysis request status.

        awaiting_payment → awaiting_review → in_review → completed
        (any non-terminal) → cancelled
    """

    AWAITING_PAYMENT = "awaiting_payment"
    AWAITING_REVIEW = "awaiting_review"
    IN_REVIEW = "in_review"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def visible_by_default(cls) -> list[str]:
        """Statuses shown in reviewer lists unless cancelled ones are requested."""
        return [s.value for s in cls if s is not cls.CANCELLED]


class LifecycleEvent(str, Enum):
    """Events that drive request status transitions."""

    CONFIRM_PAYMENT = "confirm_payment"  # Payment processor confirmation
    APPROVE_PAYMENT = "approve_payment"  # Reviewer manual override
    START_REVIEW = "start_review"
    COMPLETE = "complete"
    CANCEL = "cancel"


class PriorityDomain(str, Enum):
    """Life area the subject wants the analysis focused on."""

    HEALTH = "health"
    RELATIONSHIPS = "relationships"
    PROFESSIONAL = "professional"


class NarrativeAxis(str, Enum):
    """Axis of the fragment library a narrative is scoped to."""

    PERSONAL = "personal"
    RELATIONSHIPS = "relationships"
    PROFESSIONAL = "professional"


class AnalysisFor(str, Enum):
    """Who the analysis is about."""

    MYSELF = "myself"
    OTHER = "other"


class Pattern(str, Enum):
    """
    Personality-archetype patterns.

    Declaration order is the fixed priority used to break ranking ties.
    """

    CRIATIVO = "criativo"
    CONECTIVO = "conectivo"
    FORTE = "forte"
    LIDER = "lider"
    COMPETITIVO = "competitivo"

    @property
    def label(self) -> str:
        """Upper-case label stored in rank fields and shown to subjects."""
        return self.value.upper()

    @classmethod
    def from_label(cls, label: str) -> "Pattern":
        """Parse a rank label ("CRIATIVO", "Líder", ...) back into a pattern."""
        key = label.strip().lower().replace("í", "i")
        return cls(key)


class Region(str, Enum):
    """Body regions; each one holds a budget of ten points."""

    HEAD = "head"
    EYES = "eyes"
    MOUTH = "mouth"
    TORSO = "torso"
    WAIST = "waist"
    LEGS = "legs"


DEFAULT_REQUEST_STATUS = RequestStatus.AWAITING_PAYMENT
