"""
Presentation layer for Tocsin.
"""
