"""
Test configuration and fixtures for PlayGate tests.

Provides:
- Logging set up for tests
- A background event loop service per test
- A scripted stand-in for the user service client
- In-process aiohttp servers and a live user service under uvicorn
"""

import asyncio
import socket
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import pytest
import pytest_asyncio
import uvicorn
from aiohttp import web
from aiohttp.test_utils import TestServer

from PlayGate.core.client.services import AsyncService
from PlayGate.core.logging import configure_logging, create_testing_config
from PlayGate.userservice import UserStore, create_app

TEST_SECRET = "test-secret"
TEST_GAME_PORT = 4200

Scripted = Union[Dict[str, Any], Exception]


def free_port() -> int:
    """Ask the OS for a port nobody is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def wait_until(predicate: Callable[[], bool], timeout: float = 5.0, interval: float = 0.005) -> bool:
    """Poll ``predicate`` the way a frame loop would; True if it became true in time."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


class FakeUserService:
    """
    Scripted replacement for UserServiceAPIClient.

    Each exchange answers with the configured dict, or raises the configured
    exception. Requests are recorded in ``calls`` as (step, payload).
    ``hold_login`` keeps the login exchange pending until released.
    """

    def __init__(self, login: Scripted = None, connect: Scripted = None):
        self.login_result = login if login is not None else {"session": "abc"}
        self.connect_result = connect if connect is not None else {
            "avatar": "wolf", "token": "tok-123", "game_port": 7777
        }
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.endpoint: Optional[str] = None
        self.timeout: Optional[float] = None
        self.closed = False
        self.hold_login = threading.Event()
        self.hold_login.set()

    def __call__(self, endpoint: str, timeout: Optional[float]) -> 'FakeUserService':
        self.endpoint = endpoint
        self.timeout = timeout
        return self

    async def __aenter__(self) -> 'FakeUserService':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.closed = True

    async def login(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("login", payload))
        while not self.hold_login.is_set():
            await asyncio.sleep(0.005)
        return self._answer(self.login_result)

    async def connect(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("connect", payload))
        return self._answer(self.connect_result)

    @staticmethod
    def _answer(result: Scripted) -> Dict[str, Any]:
        if isinstance(result, Exception):
            raise result
        return result

    @property
    def steps(self) -> List[str]:
        return [step for step, _ in self.calls]


@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """Console-only logging for the whole run."""
    configure_logging(create_testing_config())


@pytest.fixture
def async_service():
    """A fresh background event loop, stopped after the test."""
    service = AsyncService(name="playgate-test")
    service.start()
    yield service
    service.stop()


@pytest.fixture
def fake_service() -> FakeUserService:
    return FakeUserService()


@pytest_asyncio.fixture
async def serve():
    """
    Start in-process aiohttp servers from a {path: handler} mapping.
    A key may also be a (method, path) pair; plain paths are POST routes.

    Returns the base URL of each server; all are closed after the test.
    """
    servers = []

    async def _serve(handlers: Dict[str, Callable]) -> str:
        app = web.Application()
        for route, handler in handlers.items():
            method, path = route if isinstance(route, tuple) else ("POST", route)
            app.router.add_route(method, path, handler)
        server = TestServer(app)
        await server.start_server()
        servers.append(server)
        return str(server.make_url("/"))

    yield _serve

    for server in servers:
        await server.close()


@pytest.fixture
def live_user_service():
    """Run the development user service under uvicorn in a thread."""
    port = free_port()
    store = UserStore(session_expiration=60)
    app = create_app(store=store, game_port=TEST_GAME_PORT, secret=TEST_SECRET)
    server = uvicorn.Server(uvicorn.Config(
        app, host="127.0.0.1", port=port, log_config=None, lifespan="off"
    ))
    thread = threading.Thread(target=server.run, name="user-service", daemon=True)
    thread.start()

    if not wait_until(lambda: server.started, timeout=10.0):
        server.should_exit = True
        pytest.fail("User service did not start")

    yield f"http://127.0.0.1:{port}", store

    server.should_exit = True
    thread.join(timeout=5.0)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
