"""
Request bodies for the login and connect exchanges.
"""

from typing import Any, Dict, Mapping

from ..utils.constants import GAME_TYPE_FIELD
from .models import ClientContext, Credentials


def build_login_payload(credentials: Credentials) -> Dict[str, Any]:
    """Body of the login request. Empty values are sent as-is."""
    return {
        "username": credentials.username,
        "password": credentials.password,
    }


def augment_with_context(descriptor: Mapping[str, Any], context: ClientContext) -> Dict[str, Any]:
    """
    Body of the connect request: a copy of the session descriptor with
    ``game_type`` set from the client context. The descriptor is not modified.
    """
    payload = dict(descriptor)
    payload[GAME_TYPE_FIELD] = context.game_type
    return payload


class HandshakeRequestBuilder:
    """Namespace for the two payload builders."""

    build_login_payload = staticmethod(build_login_payload)
    augment_with_context = staticmethod(augment_with_context)
