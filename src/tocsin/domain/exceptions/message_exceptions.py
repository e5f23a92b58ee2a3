"""
Wire message exceptions.
"""


class InvalidMessageError(Exception):
    """Raised when an inbound frame cannot be decoded into a known shape."""

    def __init__(self, reason: str):
        """
        Initialize InvalidMessageError.

        Args:
            reason: Why the frame was rejected
        """
        super().__init__(f"Invalid message: {reason}")
        self.reason = reason
