"""
Domain errors raised by the core layer.

Core modules know nothing about HTTP; the service layer translates these
into API exceptions with status codes.
"""


class CoreError(Exception):
    """Base class for core processing errors."""


class InvalidInputTypeError(CoreError):
    """Input file type is not accepted by the tool."""

    def __init__(self, mime_type: str, accepted: list):
        self.mime_type = mime_type
        self.accepted = list(accepted)
        super().__init__(f"Unsupported file type: {mime_type or 'unknown'}")


class DecodeFailureError(CoreError):
    """Input bytes could not be decoded."""


class EncodeFailureError(CoreError):
    """The encoder produced no output."""
