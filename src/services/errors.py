# src/services/errors.py

from typing import Optional


class NetworkError(Exception):
    """
    A Backend API or marketplace call failed.

    `message` is the server-provided message when the response carried one,
    otherwise the caller's fallback text.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
