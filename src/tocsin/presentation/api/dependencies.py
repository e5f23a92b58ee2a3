"""
FastAPI dependencies for Tocsin API.
"""

import hmac
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from tocsin.di import Container

# Global container (set by TocsinApp)
_container: Optional[Container] = None


def get_container() -> Container:
    """
    Get DI container instance.

    Raises:
        RuntimeError: If container not initialized
    """
    if _container is None:
        raise RuntimeError("Container not initialized")
    return _container


def set_container(container: Optional[Container]) -> None:
    """
    Set DI container (called from TocsinApp, or None to clear).

    Args:
        container: Container instance to set globally
    """
    global _container
    _container = container


def verify_publish_key(
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    container: Container = Depends(get_container),
) -> None:
    """
    Check the shared publish key, when one is configured.

    Raises:
        HTTPException: 401 if the key is missing or wrong
    """
    expected = container.settings.publish_api_key
    if not expected:
        return

    if not x_api_key or not hmac.compare_digest(x_api_key, expected):
        container.increment_stat("publish_rejections")
        container.reporter.warning(
            "Publish rejected: invalid or missing API key",
            context="Publish",
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
        )
