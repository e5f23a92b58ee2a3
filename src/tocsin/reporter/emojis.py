"""
Emoji registry for log lines.

Semantic names for the markers used throughout Tocsin logs.

Usage:
    >>> from tocsin.reporter.emojis import Emoji
    >>> print(f"{Emoji.NETWORK.CONNECTED} WebSocket connected")
    🔗 WebSocket connected
"""

from typing import Dict


class ComponentEmoji:
    """Base class for component-specific emoji collections."""

    @classmethod
    def get_all(cls) -> Dict[str, str]:
        """
        Get all emoji definitions from this category.

        Returns:
            Dictionary mapping emoji name to emoji character
        """
        return {
            name: value
            for name, value in vars(cls).items()
            if not name.startswith("_") and isinstance(value, str)
        }


class SystemEmoji(ComponentEmoji):
    """System lifecycle."""

    STARTUP = "🚀"  # System/component initialization
    SHUTDOWN = "🛑"  # System/component shutdown
    READY = "✅"  # Component initialized successfully
    CONFIG = "⚙️"  # Configuration operation
    HEALTH_CHECK = "🩺"  # Health check performed
    CLEANUP = "🧹"  # Resource cleanup


class NetworkEmoji(ComponentEmoji):
    """Network operations and communication."""

    CONNECTED = "🔗"  # Connection established
    DISCONNECT = "🔌"  # Connection closed
    SEND = "📤"  # Data sent
    RECEIVE = "📥"  # Data received
    BROADCAST = "📡"  # Broadcasting to clients
    PING = "🏓"  # Heartbeat exchange


class SecurityEmoji(ComponentEmoji):
    """Authentication and authorization."""

    AUTH_OK = "🔓"  # Authentication succeeded
    AUTH_FAIL = "🔒"  # Authentication rejected
    ADMIN = "🛡️"  # Admin-scoped operation


class Emoji:
    """
    Central emoji registry with semantic categories.

    Categories:
        SYSTEM: System operations and lifecycle
        NETWORK: Network and communication
        SECURITY: Authentication outcomes
    """

    SYSTEM = SystemEmoji
    NETWORK = NetworkEmoji
    SECURITY = SecurityEmoji

    SUCCESS = "✅"  # Generic success
    FAILURE = "❌"  # Generic failure
    WARNING = "⚠️"  # Warning
    ERROR = "🔴"  # Error
