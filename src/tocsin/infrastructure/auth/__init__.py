"""
Authentication infrastructure for Tocsin.
"""

from tocsin.infrastructure.auth.jwt_verifier import JWTVerifier

__all__ = ["JWTVerifier"]
