"""
ClientKey value object - role-qualified registry key.
"""

from dataclasses import dataclass
from typing import ClassVar, Tuple

from tocsin.domain.auth import ADMIN_ROLE, USER_ROLE


@dataclass(frozen=True)
class ClientKey:
    """
    Value object identifying one slot in the client registry.

    Rendered as ``<role>_<user_id>``:

    Examples:
        - user_64f1c2
        - admin_64f1c2
    """

    role: str
    user_id: str

    ROLES: ClassVar[Tuple[str, ...]] = (USER_ROLE, ADMIN_ROLE)

    def __post_init__(self):
        """Validate key parts on creation."""
        if self.role not in self.ROLES:
            raise ValueError(f"Unknown client role: {self.role}")

        if not self.user_id:
            raise ValueError("Client key requires a user id")

    @classmethod
    def for_user(cls, user_id: str) -> "ClientKey":
        """Key for a plain-user registration."""
        return cls(role=USER_ROLE, user_id=user_id)

    @classmethod
    def for_admin(cls, user_id: str) -> "ClientKey":
        """Key for an admin registration."""
        return cls(role=ADMIN_ROLE, user_id=user_id)

    @property
    def value(self) -> str:
        """Get registry key string."""
        return f"{self.role}_{self.user_id}"

    def __str__(self) -> str:
        return self.value
