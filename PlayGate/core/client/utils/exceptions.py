"""
Custom exceptions for the game client.

Handshake failures are raised inside the background task and turned into a
failed outcome there; callers only ever receive them as values.
"""

from typing import Optional

from .constants import HandshakeStep


class ClientError(Exception):
    """Base exception for client errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class HandshakeError(ClientError):
    """A handshake step failed."""

    def __init__(self, message: str, step: Optional[HandshakeStep] = None, details: dict = None):
        super().__init__(message, details)
        self.step = step

    def __str__(self) -> str:
        text = super().__str__()
        if self.step is not None:
            return f"[{self.step.value}] {text}"
        return text


class TransportError(HandshakeError):
    """The request could not be sent or no response was received."""
    pass


class StatusError(HandshakeError):
    """A response arrived with a status other than 200 OK."""

    def __init__(self, message: str, step: HandshakeStep, status: int, details: dict = None):
        super().__init__(message, step, {"status": status, **(details or {})})
        self.status = status


class MalformedResponseError(HandshakeError):
    """The response body is not a JSON object."""
    pass


class FieldExtractionError(HandshakeError):
    """A required field is missing from the response or has the wrong type."""

    def __init__(self, message: str, step: HandshakeStep, field: str, details: dict = None):
        super().__init__(message, step, {"field": field, **(details or {})})
        self.field = field


class HandshakeUsageError(ClientError):
    """The handshake client was used out of order (a programming error)."""
    pass
