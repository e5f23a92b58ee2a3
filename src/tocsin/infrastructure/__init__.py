"""
Infrastructure layer for Tocsin.
"""
