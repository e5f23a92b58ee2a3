"""
HTTP and WebSocket API for Tocsin.
"""
