"""
Request and response bodies of the user service.
"""

from pydantic import BaseModel, ConfigDict


class CreateUserRequest(BaseModel):
    username: str
    password: str
    avatar: str = ""


class LoginRequest(BaseModel):
    username: str
    password: str


class ConnectRequest(BaseModel):
    # The client forwards the whole login response, so extra keys are expected
    model_config = ConfigDict(extra="allow")

    session: str | None = None
    game_type: str | None = None


class UpdateUserRequest(BaseModel):
    session: str | None = None
    username: str | None = None
    password: str | None = None
    avatar: str | None = None


class UserResponse(BaseModel):
    id: str
    username: str
    avatar: str
    # Only filled in for the user who owns the calling session
    password: str | None = None


class SessionResponse(BaseModel):
    session: str


class ConnectResponse(BaseModel):
    username: str
    avatar: str
    game_port: int
    token: str
