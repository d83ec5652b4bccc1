"""
Configuration module for PlayGate application.
Stores all application settings and sensitive information.
"""

import os
from typing import Dict, Any


class Config:
    """Application configuration class."""

    # User service the handshake talks to
    USER_SERVICE_URL = os.environ.get("PLAYGATE_USER_SERVICE", "http://localhost:3100")
    REQUEST_TIMEOUT = float(os.environ.get("PLAYGATE_TIMEOUT", "10"))
    DEFAULT_GAME_TYPE = os.environ.get("PLAYGATE_GAME_TYPE", "tictactoe")

    # Development user service
    USER_SERVICE_HOST = os.environ.get("HOST", "127.0.0.1")
    USER_SERVICE_PORT = int(os.environ.get("PORT", "3100"))
    GAME_PORT = int(os.environ.get("GAMEPORT", "4200"))
    SHARED_SECRET = os.environ.get("SHAREDSECRET", "default-secret-change-in-production")
    SESSION_EXPIRATION = int(os.environ.get("SESSION_EXPIRATION", "10"))

    @classmethod
    def get_config(cls) -> Dict[str, Any]:
        """Get all configuration values as a dictionary."""
        return {
            "USER_SERVICE_URL": cls.USER_SERVICE_URL,
            "REQUEST_TIMEOUT": cls.REQUEST_TIMEOUT,
            "DEFAULT_GAME_TYPE": cls.DEFAULT_GAME_TYPE,
            "USER_SERVICE_HOST": cls.USER_SERVICE_HOST,
            "USER_SERVICE_PORT": cls.USER_SERVICE_PORT,
            "GAME_PORT": cls.GAME_PORT,
            "SHARED_SECRET": cls.SHARED_SECRET,
            "SESSION_EXPIRATION": cls.SESSION_EXPIRATION,
        }


# Create config instance
config = Config()
