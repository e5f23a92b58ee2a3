"""
Application layer for Tocsin.
"""
