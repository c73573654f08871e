"""
Shuffle engine exceptions.

Provides the exception hierarchy raised by history clients. The shuffle
controller catches all of them at its boundary.
"""


class HistoryClientError(Exception):
    """Base exception for all history client failures."""
    pass


class TransportError(HistoryClientError):
    """Raised when the history store is unreachable, times out or errors."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class ContractMismatchError(HistoryClientError):
    """Raised when the history store answers with a malformed payload."""
    pass
