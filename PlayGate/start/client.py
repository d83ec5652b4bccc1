"""
Client startup module for PlayGate application.
Runs one login handshake the way a game's login screen would.
"""

import asyncio
import time
from typing import Optional

from PlayGate.api.client import UserServiceAPIClient
from PlayGate.core.client.handshake import (
    ClientContext,
    Credentials,
    HandshakeClient,
    HandshakeOutcome,
)
from PlayGate.core.client.utils import REFRESH_RATE_HZ, ClientError

__all__ = ['login', 'register']


def login(url: str, username: str, password: str, game_type: str,
          refresh_rate: float = REFRESH_RATE_HZ) -> HandshakeOutcome:
    """
    Run a handshake, polling it once per frame until it finishes.

    Args:
        url (str): User service URL
        username (str): Account name
        password (str): Account password
        game_type (str): Game mode to request from the service
        refresh_rate (float): Polls per second

    Returns:
        HandshakeOutcome: the grant or the error
    """
    handshake = HandshakeClient.start(
        Credentials(username, password), ClientContext(game_type), url
    )

    frame = 1.0 / refresh_rate
    shown: Optional[str] = None
    while not handshake.is_done():
        if handshake.description != shown:
            shown = handshake.description
            print(shown)
        time.sleep(frame)

    outcome = handshake.take_result()
    if outcome.succeeded:
        grant = outcome.grant
        print(f"Avatar: {grant.avatar}")
        print(f"Game port: {grant.port}")
        print(f"Token: {grant.token}")
    else:
        print(f"Login failed: {outcome.message}")
    return outcome


def register(url: str, username: str, password: str, avatar: str) -> bool:
    """
    Create an account on the user service.

    Returns:
        bool: True if the account was created
    """
    async def _create():
        async with UserServiceAPIClient(url) as api:
            return await api.create_user(username, password, avatar)

    try:
        user = asyncio.run(_create())
    except ClientError as e:
        print(f"Registration failed: {e}")
        return False

    print(f"Created user '{user.get('username', username)}' (id {user.get('id')})")
    return True
