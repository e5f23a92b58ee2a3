"""
Logging utilities for Tocsin.
"""

from tocsin.reporter.emojis import Emoji
from tocsin.reporter.system_reporter import SystemReporter

__all__ = ["Emoji", "SystemReporter"]
