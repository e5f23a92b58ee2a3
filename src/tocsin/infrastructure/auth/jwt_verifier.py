"""
JWT verification infrastructure for Tocsin.

Decodes credentials presented in WebSocket authentication messages.
"""

import jwt
from pydantic import ValidationError

from tocsin.domain.auth import TokenPayload


class JWTVerifier:
    """
    JWT token verifier.

    Verifies signature (and expiry, when the token carries ``exp``) against
    the shared secret. Issuance happens in the auth service.

    Attributes:
        secret: JWT secret key for verification
        algorithm: JWT algorithm (default: HS256)
    """

    def __init__(self, secret: str, algorithm: str = "HS256"):
        """
        Initialize JWT verifier.

        Args:
            secret: JWT secret key
            algorithm: JWT algorithm (default: HS256)
        """
        if not secret:
            raise ValueError("JWT secret cannot be empty")

        self.secret = secret
        self.algorithm = algorithm

    def verify_token(self, token: str) -> TokenPayload:
        """
        Verify JWT token and return payload.

        Args:
            token: JWT token string

        Returns:
            Validated TokenPayload

        Raises:
            ValueError: If token is expired, invalid, or lacks identity claims
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise ValueError("Token expired")
        except jwt.InvalidTokenError as e:
            raise ValueError(f"Invalid token: {str(e)}")

        try:
            return TokenPayload.model_validate(payload)
        except ValidationError as e:
            raise ValueError(f"Invalid token: {e.error_count()} bad claim(s)")
