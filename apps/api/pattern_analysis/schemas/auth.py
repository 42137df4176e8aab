"""Authentication-related Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel

from pattern_analysis.db.enums import Role


class TokenPayload(BaseModel):
    """Decoded JWT payload structure."""
    sub: UUID  # user_id
    role: str
    token_version: int


class UserSession(BaseModel):
    """
    Session context for authenticated requests.

    Returned by the get_current_session dependency. `user_id` is the actor
    id passed to every lifecycle, scoring and narrative operation.
    """
    user_id: UUID
    role: Role  # Validated enum
    email: str
    display_name: str

    @property
    def is_reviewer(self) -> bool:
        return self.role == Role.REVIEWER
