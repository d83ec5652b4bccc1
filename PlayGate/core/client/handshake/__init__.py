"""
Login handshake: log in, attach the client context, connect.
"""

from .client import HandshakeClient, extract_grant
from .models import (
    ClientContext,
    ConnectionGrant,
    Credentials,
    HandshakeOutcome,
    HandshakeState,
    SessionDescriptor,
)
from .requests import HandshakeRequestBuilder, augment_with_context, build_login_payload

__all__ = [
    'HandshakeClient',
    'HandshakeRequestBuilder',
    'HandshakeOutcome',
    'HandshakeState',
    'Credentials',
    'ClientContext',
    'ConnectionGrant',
    'SessionDescriptor',
    'build_login_payload',
    'augment_with_context',
    'extract_grant',
]
