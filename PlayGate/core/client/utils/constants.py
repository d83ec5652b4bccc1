"""
Constants and configuration values for the game client.
"""

from enum import Enum

# User service endpoints
LOGIN_PATH = "/api/v1/login"
CONNECT_PATH = "/api/v1/connect"
USERS_PATH = "/api/v1/users"

# Status the user service answers with on success
HTTP_OK = 200

# Polling settings
REFRESH_RATE_HZ = 30  # Frames per second of the login screen

# Fields read from the connect response
AVATAR_FIELD = "avatar"
TOKEN_FIELD = "token"
GAME_PORT_FIELD = "game_port"
GAME_TYPE_FIELD = "game_type"


class HandshakeStep(str, Enum):
    """The two exchanges that make up a handshake."""
    LOGIN = "login"
    CONNECT = "connect"
