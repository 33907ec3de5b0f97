"""
Custom exceptions for the HTML front-end.

Error philosophy:
  - Faults raised by collaborators (the input stream, the lenient parser,
    the caller's sink) are NOT wrapped: they reach the caller unchanged.
  - The exceptions below cover faults the front-end detects itself.
    They all FAIL HARD: processing stops at the event that raised them and
    whatever output or metadata was committed before that point stays.
"""

from typing import Optional


class HTMLFrontendError(Exception):
    """Base exception for all HTML front-end errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EventStreamError(HTMLFrontendError):
    """
    Raised when the structural event stream is not well-formed.

    The lenient parser promises balanced start/end events; this fires when
    an end event does not close the innermost open element.
    """

    def __init__(
        self,
        message: str,
        path: tuple = (),
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.path = path  # Open elements at the time of the fault


class DowngradeError(HTMLFrontendError):
    """Raised when the output downgrade step meets a construct it cannot map."""

    def __init__(
        self,
        message: str,
        namespace: str = "",
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.namespace = namespace


class SelectorError(HTMLFrontendError):
    """Raised when a selector expression cannot be parsed."""

    def __init__(
        self,
        message: str,
        expression: str,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.expression = expression


class ConfigurationError(HTMLFrontendError):
    """Raised when parse options name something that does not exist."""
    pass
