"""
Use case for authenticating WebSocket connections.
"""

from typing import Optional

from tocsin.domain.auth import TokenPayload
from tocsin.domain.exceptions import (
    AuthorizationError,
    TokenExpiredError,
    TokenInvalidError,
    TokenMissingError,
)
from tocsin.infrastructure.auth import JWTVerifier


class AuthenticateConnectionUseCase:
    """
    Use case for authenticating a connection from an in-band auth message.

    Verifies the JWT and, for the admin path, the role claim.
    """

    def __init__(self, jwt_verifier: JWTVerifier):
        """
        Initialize use case.

        Args:
            jwt_verifier: JWT token verifier
        """
        self.jwt_verifier = jwt_verifier

    def execute(
        self, token: Optional[str], require_admin: bool = False
    ) -> TokenPayload:
        """
        Authenticate a connection.

        Args:
            token: JWT token from the auth message
            require_admin: True for ADMIN_AUTH

        Returns:
            Verified TokenPayload

        Raises:
            TokenMissingError: If no token was provided
            TokenExpiredError: If the token has expired
            TokenInvalidError: If the token fails verification
            AuthorizationError: If admin access is required but the role
                claim is not "admin"
        """
        if not token:
            raise TokenMissingError("No token provided")

        try:
            payload = self.jwt_verifier.verify_token(token)
        except ValueError as e:
            if "expired" in str(e).lower():
                raise TokenExpiredError("Token expired")
            raise TokenInvalidError("Invalid token")

        if require_admin and not payload.is_admin:
            raise AuthorizationError(
                "Admin access required",
                user_id=payload.user_id,
                resource="admin",
            )

        return payload
