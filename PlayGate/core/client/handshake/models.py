"""
Data types exchanged by the login handshake.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, Optional

from ..utils.exceptions import HandshakeError

# Whatever the login exchange returns; forwarded to connect untouched.
SessionDescriptor = Dict[str, Any]


@dataclass(frozen=True)
class Credentials:
    """Username and password captured when the handshake starts."""
    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class ClientContext:
    """Client-side data attached to the session before connecting."""
    game_type: str


@dataclass(frozen=True)
class ConnectionGrant:
    """What the client needs to join a game server."""
    avatar: str
    token: str
    port: int


class HandshakeState(Enum):
    """Progress of a single handshake."""
    PENDING = auto()
    LOGGING_IN = auto()
    CONNECTING = auto()
    SUCCEEDED = auto()
    FAILED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (HandshakeState.SUCCEEDED, HandshakeState.FAILED)


@dataclass(frozen=True)
class HandshakeOutcome:
    """
    Final result of a handshake: a grant or an error, never both.

    Build it with ``HandshakeOutcome.success`` or ``HandshakeOutcome.failure``.
    """
    grant: Optional[ConnectionGrant] = None
    error: Optional[HandshakeError] = None

    def __post_init__(self):
        if (self.grant is None) == (self.error is None):
            raise ValueError("HandshakeOutcome needs exactly one of grant or error")

    @classmethod
    def success(cls, grant: ConnectionGrant) -> 'HandshakeOutcome':
        return cls(grant=grant)

    @classmethod
    def failure(cls, error: HandshakeError) -> 'HandshakeOutcome':
        return cls(error=error)

    @property
    def succeeded(self) -> bool:
        return self.grant is not None

    @property
    def message(self) -> str:
        """Human readable summary, suitable for logs and status lines."""
        if self.grant is not None:
            return f"Connected as {self.grant.avatar} on port {self.grant.port}"
        return str(self.error)
