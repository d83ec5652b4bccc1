"""
Utility functions and shared components for the game client.
"""

from .constants import (
    CONNECT_PATH,
    HTTP_OK,
    LOGIN_PATH,
    REFRESH_RATE_HZ,
    USERS_PATH,
    HandshakeStep,
)
from .exceptions import (
    ClientError,
    FieldExtractionError,
    HandshakeError,
    HandshakeUsageError,
    MalformedResponseError,
    StatusError,
    TransportError,
)

__all__ = [
    'ClientError',
    'HandshakeError',
    'TransportError',
    'StatusError',
    'MalformedResponseError',
    'FieldExtractionError',
    'HandshakeUsageError',
    'HandshakeStep',
    'CONNECT_PATH',
    'HTTP_OK',
    'LOGIN_PATH',
    'REFRESH_RATE_HZ',
    'USERS_PATH',
]
