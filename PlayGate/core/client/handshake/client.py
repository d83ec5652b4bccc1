"""
Non-blocking login handshake.

The handshake logs in to the user service, forwards the issued session with
the client's game type to the connect endpoint, and reads the connection
grant out of the reply. It runs on a background event loop; the game loop
polls ``is_done()`` once per frame and calls ``take_result()`` once it is
true:

    handshake = HandshakeClient.start(credentials, context, "http://localhost:3100")
    while not handshake.is_done():
        draw(handshake.description)
    outcome = handshake.take_result()
"""

import concurrent.futures
from dataclasses import replace
from typing import Any, Callable, Dict, Optional

from PlayGate.api.client import UserServiceAPIClient
from PlayGate.config import config
from PlayGate.core.logging import get_logger

from ..services import AsyncService, get_async_service
from ..utils.constants import AVATAR_FIELD, GAME_PORT_FIELD, TOKEN_FIELD, HandshakeStep
from ..utils.exceptions import (
    FieldExtractionError,
    HandshakeError,
    HandshakeUsageError,
    TransportError,
)
from .models import (
    ClientContext,
    ConnectionGrant,
    Credentials,
    HandshakeOutcome,
    HandshakeState,
)
from .requests import augment_with_context, build_login_payload

logger = get_logger(__name__)

# Called with (endpoint, timeout); must return an async context manager
# exposing ``login`` and ``connect`` coroutines.
ApiFactory = Callable[[str, Optional[float]], UserServiceAPIClient]

STATE_DESCRIPTIONS = {
    HandshakeState.PENDING: "Preparing to log in...",
    HandshakeState.LOGGING_IN: "Logging in and connecting to the user service...",
    HandshakeState.CONNECTING: "Retrieving the game configuration...",
    HandshakeState.SUCCEEDED: "Connected.",
    HandshakeState.FAILED: "Login failed.",
}


def _require(response: Dict[str, Any], field: str, expected: type) -> Any:
    if field not in response:
        raise FieldExtractionError(
            f"Connect response is missing '{field}'", HandshakeStep.CONNECT, field
        )

    value = response[field]
    # bool is an int subclass but never a valid port
    if not isinstance(value, expected) or isinstance(value, bool):
        raise FieldExtractionError(
            f"Connect response field '{field}' should be {expected.__name__}, "
            f"got {type(value).__name__}",
            HandshakeStep.CONNECT, field
        )
    return value


def extract_grant(response: Dict[str, Any]) -> ConnectionGrant:
    """
    Read avatar, token and game_port out of a connect response.

    Raises:
        FieldExtractionError: a field is missing or has the wrong type
    """
    return ConnectionGrant(
        avatar=_require(response, AVATAR_FIELD, str),
        token=_require(response, TOKEN_FIELD, str),
        port=_require(response, GAME_PORT_FIELD, int),
    )


class HandshakeClient:
    """
    One login + connect attempt, started on construction.

    Instances are single use: start a new client to try again.
    """

    def __init__(
        self,
        credentials: Credentials,
        context: ClientContext,
        endpoint: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        service: Optional[AsyncService] = None,
        api_factory: Optional[ApiFactory] = None
    ):
        """
        Start the handshake in the background.

        Args:
            credentials: Username and password
            context: Game type and other client data sent with connect
            endpoint: User service URL (defaults to the configured one)
            timeout: Per-request timeout in seconds
            service: Event loop service to run on (defaults to the shared one)
            api_factory: Builds the user service client; tests swap it out
        """
        self._state = HandshakeState.PENDING
        self._taken = False

        # The task works on its own copies, never on the caller's objects
        credentials = replace(credentials)
        context = replace(context)
        endpoint = endpoint or config.USER_SERVICE_URL
        api_factory = api_factory or UserServiceAPIClient

        logger.info("Starting handshake for '%s' (game type '%s') against %s",
                    credentials.username, context.game_type, endpoint)

        service = service or get_async_service()
        self._future: Optional[concurrent.futures.Future] = service.run_async(
            self._run(credentials, context, endpoint, timeout, api_factory)
        )

    @classmethod
    def start(
        cls,
        credentials: Credentials,
        context: ClientContext,
        endpoint: Optional[str] = None,
        **kwargs
    ) -> 'HandshakeClient':
        """Create a client, which starts the handshake immediately."""
        return cls(credentials, context, endpoint, **kwargs)

    @property
    def state(self) -> HandshakeState:
        return self._state

    @property
    def description(self) -> str:
        """Status line for the current state."""
        return STATE_DESCRIPTIONS[self._state]

    def is_done(self) -> bool:
        """True once the handshake has a final outcome. Never blocks."""
        return self._taken or self._future.done()

    def take_result(self) -> HandshakeOutcome:
        """
        Hand over the outcome. Call once, after ``is_done()`` returned True.

        Raises:
            HandshakeUsageError: called before completion, or called twice
        """
        if self._taken:
            raise HandshakeUsageError("Handshake result was already taken")
        if not self._future.done():
            raise HandshakeUsageError("Handshake is still running; poll is_done() first")

        future, self._future = self._future, None
        self._taken = True

        if future.cancelled():
            # Only happens when the event loop service is shut down underneath us
            self._state = HandshakeState.FAILED
            return HandshakeOutcome.failure(TransportError("Handshake was cancelled"))
        return future.result()

    def _fail(self, error: HandshakeError) -> HandshakeOutcome:
        self._state = HandshakeState.FAILED
        logger.warning("Handshake failed: %s", error)
        return HandshakeOutcome.failure(error)

    async def _run(
        self,
        credentials: Credentials,
        context: ClientContext,
        endpoint: str,
        timeout: Optional[float],
        api_factory: ApiFactory
    ) -> HandshakeOutcome:
        step = HandshakeStep.LOGIN
        try:
            async with api_factory(endpoint, timeout) as api:
                self._state = HandshakeState.LOGGING_IN
                descriptor = await api.login(build_login_payload(credentials))

                step = HandshakeStep.CONNECT
                self._state = HandshakeState.CONNECTING
                response = await api.connect(augment_with_context(descriptor, context))

            grant = extract_grant(response)
        except HandshakeError as e:
            return self._fail(e)
        except Exception as e:
            logger.exception("Unexpected error during %s step", step.value)
            return self._fail(HandshakeError(f"Unexpected error: {e}", step))

        self._state = HandshakeState.SUCCEEDED
        logger.info("Handshake succeeded: avatar '%s', game port %d", grant.avatar, grant.port)
        return HandshakeOutcome.success(grant)
