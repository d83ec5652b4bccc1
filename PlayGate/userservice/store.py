"""
In-memory user and session store for the development user service.

Mirrors the production layout: users keyed by id, one live session per user,
and sessions that expire a fixed number of seconds after login.
"""

import base64
import hashlib
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import bcrypt

from PlayGate.config import config
from PlayGate.core.logging import get_logger

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    """Hash password with bcrypt (rounds=10 for performance)."""
    salt = bcrypt.gensalt(rounds=10)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return bcrypt.checkpw(password.encode('utf-8'), hashed_password.encode('utf-8'))


def compute_token(username: str, avatar: str, game_type: str, secret: str) -> str:
    """Game token: base64 of sha256 over username, avatar, game type and the shared secret."""
    digest = hashlib.sha256(f"{username}{avatar}{game_type}{secret}".encode('utf-8')).digest()
    return base64.b64encode(digest).decode('ascii')


@dataclass
class UserRecord:
    id: str
    username: str
    password_hash: str
    avatar: str


class LoginError(Exception):
    """Login rejected; ``status`` is the HTTP status to answer with."""

    def __init__(self, message: str, status: int):
        super().__init__(message)
        self.status = status


class UserStore:
    """Thread-safe users and sessions."""

    def __init__(
        self,
        session_expiration: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.session_expiration = (
            config.SESSION_EXPIRATION if session_expiration is None else session_expiration
        )
        self._clock = clock
        self._lock = threading.Lock()
        self._users: Dict[str, UserRecord] = {}
        self._ids_by_username: Dict[str, str] = {}
        # session id -> (user id, expiry)
        self._sessions: Dict[str, Tuple[str, float]] = {}
        self._sessions_by_user: Dict[str, str] = {}

    def create_user(self, username: str, password: str, avatar: str) -> Optional[UserRecord]:
        """Add a user; returns None when the username is taken."""
        password_hash = hash_password(password)
        with self._lock:
            if username in self._ids_by_username:
                return None
            user = UserRecord(uuid.uuid4().hex, username, password_hash, avatar)
            self._users[user.id] = user
            self._ids_by_username[username] = user.id
        logger.info("Created user '%s'", username)
        return user

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        with self._lock:
            return self._users.get(user_id)

    def login(self, username: str, password: str) -> str:
        """
        Open a session for the user, replacing any session they already had.

        Raises:
            LoginError: 400 for an unknown user, 403 for a wrong password
        """
        with self._lock:
            user_id = self._ids_by_username.get(username)
            user = self._users.get(user_id) if user_id else None
        if user is None:
            raise LoginError(f"Unknown user '{username}'", 400)
        if not verify_password(password, user.password_hash):
            raise LoginError(f"Wrong password for '{username}'", 403)

        session_id = str(uuid.uuid4())
        with self._lock:
            previous = self._sessions_by_user.pop(user.id, None)
            if previous is not None:
                self._sessions.pop(previous, None)
            self._sessions[session_id] = (user.id, self._clock() + self.session_expiration)
            self._sessions_by_user[user.id] = session_id
        return session_id

    def resolve_session(self, session_id: Optional[str]) -> Optional[UserRecord]:
        """The user owning a live session, or None if unknown or expired."""
        if not session_id:
            return None
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            user_id, expires_at = entry
            if self._clock() >= expires_at:
                del self._sessions[session_id]
                if self._sessions_by_user.get(user_id) == session_id:
                    del self._sessions_by_user[user_id]
                return None
            return self._users.get(user_id)

    def find_user(self, username: str) -> Optional[UserRecord]:
        with self._lock:
            user_id = self._ids_by_username.get(username)
            return self._users.get(user_id) if user_id else None

    def update_user(
        self,
        user_id: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        avatar: Optional[str] = None
    ) -> Optional[UserRecord]:
        """
        Change the given fields of a user.

        Returns None when the new username belongs to someone else.

        Raises:
            KeyError: unknown user id
        """
        password_hash = hash_password(password) if password is not None else None
        with self._lock:
            user = self._users[user_id]
            if username is not None and username != user.username:
                if username in self._ids_by_username:
                    return None
                del self._ids_by_username[user.username]
                self._ids_by_username[username] = user_id
                user.username = username
            if password_hash is not None:
                user.password_hash = password_hash
            if avatar is not None:
                user.avatar = avatar
        logger.info("Updated user '%s'", user.username)
        return user
