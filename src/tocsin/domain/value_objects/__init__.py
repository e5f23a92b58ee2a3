"""
Value objects for Tocsin.
"""

from tocsin.domain.value_objects.client_key import ClientKey

__all__ = ["ClientKey"]
