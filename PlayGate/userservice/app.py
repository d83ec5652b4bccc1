"""
Development user service.

Serves the endpoints the game client needs (create user, login, connect)
and the user lookup/update routes from an in-memory store, so the handshake
can be exercised locally. Lookups take the session as a query parameter;
updates take it in the body.
"""

import time
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from PlayGate import __version__ as __main_version__
from PlayGate.config import config
from PlayGate.core.client.utils import CONNECT_PATH, LOGIN_PATH, USERS_PATH
from PlayGate.core.logging import get_logger
from PlayGate.core.logging.utils import RequestLogger

from .models import (
    ConnectRequest,
    ConnectResponse,
    CreateUserRequest,
    LoginRequest,
    SessionResponse,
    UpdateUserRequest,
    UserResponse,
)
from .store import LoginError, UserRecord, UserStore, compute_token

logger = get_logger(__name__)


def user_view(user: UserRecord, owner: Optional[UserRecord]) -> UserResponse:
    """Public fields, plus the password hash when the caller is that user."""
    response = UserResponse(id=user.id, username=user.username, avatar=user.avatar)
    if owner is not None and owner.id == user.id:
        response.password = user.password_hash
    return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, request_logger: RequestLogger):
        super().__init__(app)
        self.request_logger = request_logger

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        self.request_logger.log_request(
            request.method, request.url.path, response.status_code,
            time.perf_counter() - start
        )
        return response


def create_app(
    store: Optional[UserStore] = None,
    game_port: Optional[int] = None,
    secret: Optional[str] = None
) -> FastAPI:
    """
    Build the user service application.

    Args:
        store: User/session store (a fresh in-memory one by default)
        game_port: Port handed out to connecting clients
        secret: Shared secret mixed into game tokens
    """
    store = store or UserStore()
    game_port = config.GAME_PORT if game_port is None else game_port
    secret = config.SHARED_SECRET if secret is None else secret

    app = FastAPI(
        title="PlayGate user service",
        version=__main_version__,
        description="Development user service for the PlayGate login handshake."
    )
    app.add_middleware(RequestLoggingMiddleware, request_logger=RequestLogger(logger))
    app.state.store = store

    @app.post(USERS_PATH, response_model=UserResponse, response_model_exclude_none=True)
    async def create_user(request: CreateUserRequest):
        user = store.create_user(request.username, request.password, request.avatar)
        if user is None:
            raise HTTPException(status_code=409, detail="Username already exists")
        return user_view(user, None)

    @app.get(USERS_PATH, response_model=UserResponse, response_model_exclude_none=True)
    async def find_user(session: str | None = None, username: str | None = None):
        owner = store.resolve_session(session)
        if owner is None:
            raise HTTPException(status_code=401, detail="Unknown or expired session")
        if username is None:
            raise HTTPException(status_code=400, detail="username is required")

        user = store.find_user(username)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        return user_view(user, owner)

    @app.get(USERS_PATH + "/{user_id}", response_model=UserResponse, response_model_exclude_none=True)
    async def get_user(user_id: str, session: str | None = None):
        owner = store.resolve_session(session)
        if owner is None:
            raise HTTPException(status_code=401, detail="Unknown or expired session")

        user = store.get_user(user_id)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        return user_view(user, owner)

    @app.put(USERS_PATH + "/{user_id}", response_model=UserResponse, response_model_exclude_none=True)
    async def update_user(user_id: str, request: UpdateUserRequest):
        owner = store.resolve_session(request.session)
        if owner is None:
            raise HTTPException(status_code=401, detail="Unknown or expired session")
        if store.get_user(user_id) is None:
            raise HTTPException(status_code=404, detail="User not found")
        if owner.id != user_id:
            raise HTTPException(status_code=403, detail="Sessions may only update their own user")

        user = store.update_user(user_id, request.username, request.password, request.avatar)
        if user is None:
            raise HTTPException(status_code=409, detail="Username already exists")
        return user_view(user, owner)

    @app.post(LOGIN_PATH, response_model=SessionResponse)
    async def login(request: LoginRequest):
        try:
            session = store.login(request.username, request.password)
        except LoginError as e:
            logger.info("Login rejected: %s", e)
            raise HTTPException(status_code=e.status, detail=str(e))
        return SessionResponse(session=session)

    @app.post(CONNECT_PATH, response_model=ConnectResponse)
    async def connect(request: ConnectRequest):
        if not request.game_type:
            raise HTTPException(status_code=400, detail="game_type is required")

        user = store.resolve_session(request.session)
        if user is None:
            raise HTTPException(status_code=401, detail="Unknown or expired session")

        return ConnectResponse(
            username=user.username,
            avatar=user.avatar,
            game_port=game_port,
            token=compute_token(user.username, user.avatar, request.game_type, secret),
        )

    return app


def run(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """
    Run the user service with Uvicorn.

    Args:
        host (str): Interface to bind
        port (int): Port to listen on
    """
    host = host or config.USER_SERVICE_HOST
    port = config.USER_SERVICE_PORT if port is None else port
    logger.info("User service listening on %s:%d (game port %d)", host, port, config.GAME_PORT)
    uvicorn.run(create_app(), host=host, port=port, log_config=None)
