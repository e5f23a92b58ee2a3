"""
Domain layer for Tocsin.
"""
