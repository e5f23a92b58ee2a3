"""
Tocsin - realtime broadcast hub for disaster reports.
"""

__version__ = "0.1.0"
