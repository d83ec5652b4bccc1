"""
HTTP client for the PlayGate user service.
Wraps an aiohttp.ClientSession and turns every failed exchange into a
typed HandshakeError tagged with the step it belongs to.
"""

import asyncio
import json
from typing import Any, Dict, Optional, Union

import aiohttp

from PlayGate.config import config
from PlayGate.core.client.utils import (
    CONNECT_PATH,
    HTTP_OK,
    LOGIN_PATH,
    USERS_PATH,
    HandshakeStep,
    MalformedResponseError,
    StatusError,
    TransportError,
)
from PlayGate.core.logging import get_logger
from PlayGate.core.logging.utils import LogTimer

logger = get_logger(__name__)

STATUS_FAILURE_MESSAGES = {
    HandshakeStep.LOGIN: "Failed to log in",
    HandshakeStep.CONNECT: "Failed to connect to game",
}


def parse_json_object(body: Union[str, bytes], step: Optional[HandshakeStep] = None) -> Dict[str, Any]:
    """
    Parse a response body that must be a JSON object.

    Raw bytes are decoded as UTF-8 first.

    Raises:
        MalformedResponseError: body is not UTF-8, not JSON, or JSON but not an object
    """
    if isinstance(body, bytes):
        try:
            body = body.decode('utf-8')
        except UnicodeDecodeError as e:
            raise MalformedResponseError(f"Response is not valid UTF-8: {e}", step) from e

    try:
        data = json.loads(body)
    except ValueError as e:
        raise MalformedResponseError(f"Response is not valid JSON: {e}", step) from e

    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"Expected a JSON object, got {type(data).__name__}", step
        )
    return data


class UserServiceAPIClient:
    """
    Client for the user service endpoints.

    Use it as an async context manager so the underlying session is closed
    on the loop that opened it:

        async with UserServiceAPIClient("http://localhost:3100") as api:
            session = await api.login({"username": "alice", "password": "secret"})
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        """
        Initialize the API client.

        Args:
            base_url (str): User service URL, e.g. http://localhost:3100
            timeout (float): Total timeout per request in seconds
        """
        self.base_url = (base_url or config.USER_SERVICE_URL).rstrip("/")
        self.timeout = config.REQUEST_TIMEOUT if timeout is None else timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> 'UserServiceAPIClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                trust_env=False
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
        step: Optional[HandshakeStep] = None,
        failure_message: str = "Request failed"
    ) -> Dict[str, Any]:
        """
        Send a request and return the JSON object in the response.

        The status is checked before the body is decoded, so an error reply
        with an unreadable body is still a StatusError.

        Raises:
            TransportError: connection failed, timed out, or was cut off
            StatusError: status other than 200
            MalformedResponseError: body is not a JSON object
        """
        url = f"{self.base_url}{path}"
        session = self._get_session()

        try:
            with LogTimer(f"{method} {path}", logger):
                async with session.request(method, url, json=payload, params=params) as response:
                    status = response.status
                    body = await response.read()
        except asyncio.TimeoutError as e:
            raise TransportError(f"Request to {url} timed out after {self.timeout}s", step) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Request to {url} failed: {e}", step) from e

        if status != HTTP_OK:
            raise StatusError(f"{failure_message} (status {status})", step, status)

        return parse_json_object(body, step)

    async def login(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Log in to the user service.

        Args:
            payload (dict): Body with username and password

        Returns:
            dict: The session descriptor issued by the service
        """
        return await self._request(
            "POST", LOGIN_PATH, payload, step=HandshakeStep.LOGIN,
            failure_message=STATUS_FAILURE_MESSAGES[HandshakeStep.LOGIN]
        )

    async def connect(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Exchange a session descriptor for game connection data.

        Args:
            payload (dict): Session descriptor with game_type added

        Returns:
            dict: Connect response with avatar, token and game_port
        """
        return await self._request(
            "POST", CONNECT_PATH, payload, step=HandshakeStep.CONNECT,
            failure_message=STATUS_FAILURE_MESSAGES[HandshakeStep.CONNECT]
        )

    async def create_user(self, username: str, password: str, avatar: str) -> Dict[str, Any]:
        """
        Register a new user.

        Returns:
            dict: The created user record
        """
        return await self._request(
            "POST", USERS_PATH,
            {"username": username, "password": password, "avatar": avatar},
            failure_message="Failed to create user"
        )

    async def get_user(
        self,
        session: str,
        user_id: Optional[str] = None,
        username: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Look a user up by id, or by username when no id is given.

        Args:
            session (str): A live session id
            user_id (str): User id
            username (str): Username

        Returns:
            dict: The user record; includes the password hash only for the
            session's own user
        """
        params = {"session": session}
        if user_id is not None:
            path = f"{USERS_PATH}/{user_id}"
        else:
            path = USERS_PATH
            if username is not None:
                params["username"] = username
        return await self._request("GET", path, params=params, failure_message="Failed to get user")

    async def update_user(
        self,
        session: str,
        user_id: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        avatar: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Change the session owner's username, password or avatar.

        Fields left as None are not changed.

        Returns:
            dict: The updated user record
        """
        payload = {"session": session}
        for key, value in (("username", username), ("password", password), ("avatar", avatar)):
            if value is not None:
                payload[key] = value
        return await self._request(
            "PUT", f"{USERS_PATH}/{user_id}", payload, failure_message="Failed to update user"
        )
