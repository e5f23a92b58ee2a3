"""
Domain exceptions for Tocsin.
"""

from tocsin.domain.exceptions.auth_exceptions import (
    AuthenticationError,
    AuthorizationError,
    TokenExpiredError,
    TokenInvalidError,
    TokenMissingError,
)
from tocsin.domain.exceptions.message_exceptions import InvalidMessageError

__all__ = [
    "AuthenticationError",
    "AuthorizationError",
    "TokenExpiredError",
    "TokenInvalidError",
    "TokenMissingError",
    "InvalidMessageError",
]
