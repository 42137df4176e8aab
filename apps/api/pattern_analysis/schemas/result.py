"""Pydantic schemas for analysis results."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class NarrativeBundle(BaseModel):
    """Text per narrative axis; only the subject's axis is filled on generation."""
    personal: str = ""
    relationships: str = ""
    professional: str = ""


# =============================================================================
# Edits (each block is saved independently)
# =============================================================================

class ResultBlock1Update(BaseModel):
    diagnosis: str | None = Field(None, min_length=1)
    blockage_explanation: str | None = Field(None, min_length=1)
    release_path: str | None = Field(None, min_length=1)


class ResultBlock2Update(BaseModel):
    trait1_name: str | None = Field(None, max_length=20)
    trait1_percentage: int | None = Field(None, ge=0, le=100)
    trait1_pain: NarrativeBundle | None = None
    trait1_resource: NarrativeBundle | None = None
    trait2_name: str | None = Field(None, max_length=20)
    trait2_percentage: int | None = Field(None, ge=0, le=100)
    trait2_pain: NarrativeBundle | None = None
    trait2_resource: NarrativeBundle | None = None
    trait3_name: str | None = Field(None, max_length=20)
    trait3_percentage: int | None = Field(None, ge=0, le=100)
    trait3_pain: NarrativeBundle | None = None
    trait3_resource: NarrativeBundle | None = None
    pain_state: str | None = None
    resource_state: str | None = None


class ResultBlock3Update(BaseModel):
    action_1: str | None = None
    action_1_due: date | None = None
    action_2: str | None = None
    action_2_due: date | None = None


class ResultUpdate(BaseModel):
    """Only the blocks (and, inside them, the fields) that are sent get written."""
    block_1: ResultBlock1Update | None = None
    block_2: ResultBlock2Update | None = None
    block_3: ResultBlock3Update | None = None

    def changes(self) -> dict:
        """Flatten to column -> value for the fields actually sent."""
        flat: dict = {}
        # Narrative columns are NOT NULL; an explicit null there means "leave it"
        for block in (self.block_1, self.block_2):
            if block is not None:
                sent = block.model_dump(exclude_unset=True)
                flat.update({k: v for k, v in sent.items() if v is not None})
        if self.block_3 is not None:
            flat.update(self.block_3.model_dump(exclude_unset=True))
        return flat


# =============================================================================
# Read
# =============================================================================

class SignificantTrait(BaseModel):
    name: str
    percentage: int


class AnalysisResultRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    analysis_request_id: int
    axis: str

    diagnosis: str
    blockage_explanation: str
    release_path: str

    trait1_name: str
    trait1_percentage: int
    trait1_pain: NarrativeBundle
    trait1_resource: NarrativeBundle
    trait2_name: str
    trait2_percentage: int
    trait2_pain: NarrativeBundle
    trait2_resource: NarrativeBundle
    trait3_name: str
    trait3_percentage: int
    trait3_pain: NarrativeBundle
    trait3_resource: NarrativeBundle
    pain_state: str
    resource_state: str

    action_1: str | None
    action_1_due: date | None
    action_2: str | None
    action_2_due: date | None

    generated_by_user_id: UUID | None
    generated_at: datetime
    updated_at: datetime

    # Display-time selection; not stored
    significant_traits: list[SignificantTrait] = []
