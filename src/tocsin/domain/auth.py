"""
Authentication domain models for Tocsin.

Defines the decoded JWT payload carried by WebSocket authentication messages.
"""

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

ADMIN_ROLE = "admin"
USER_ROLE = "user"


class TokenPayload(BaseModel):
    """
    JWT token payload structure.

    Tokens are issued by the auth service with a ``userId`` claim; older
    tokens carry ``_id`` or ``id`` instead, all of which are accepted.

    Attributes:
        user_id: Unique user identifier
        name: Display name (optional)
        email: User email (optional)
        role: Role claim ("user" or "admin")
        exp: Token expiration timestamp (Unix epoch, optional)
        iat: Token issued at timestamp (Unix epoch, optional)
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    user_id: str = Field(
        ...,
        validation_alias=AliasChoices("userId", "_id", "id", "user_id"),
        description="User ID from database",
    )
    name: Optional[str] = Field(None, description="Display name")
    email: Optional[str] = Field(None, description="User email")
    role: str = Field(default=USER_ROLE, description="Role claim")
    exp: Optional[int] = Field(None, description="Expiration time (Unix timestamp)")
    iat: Optional[int] = Field(None, description="Issued at time (Unix timestamp)")

    @field_validator("user_id", mode="before")
    @classmethod
    def coerce_user_id(cls, v: Any) -> str:
        """Accept numeric ids and reject empty ones."""
        if v is None or isinstance(v, bool):
            raise ValueError("user id claim is required")
        v = str(v).strip()
        if not v:
            raise ValueError("user id claim cannot be empty")
        return v

    @property
    def is_admin(self) -> bool:
        """Check if the role claim grants admin access."""
        return self.role == ADMIN_ROLE
