"""
Dependency injection for Tocsin.
"""

from tocsin.di.container import Container

__all__ = ["Container"]
