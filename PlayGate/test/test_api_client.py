"""
Tests for the user service HTTP client against in-process aiohttp servers.
"""

import asyncio

import pytest
from aiohttp import web

from PlayGate.api.client import UserServiceAPIClient, parse_json_object
from PlayGate.core.client.utils import (
    CONNECT_PATH,
    LOGIN_PATH,
    USERS_PATH,
    HandshakeStep,
    MalformedResponseError,
    StatusError,
    TransportError,
)

from .conftest import free_port


class TestParseJsonObject:
    def test_object(self):
        assert parse_json_object('{"session": "abc"}') == {"session": "abc"}

    @pytest.mark.parametrize("body", ["", "not json", "{\"session\": "])
    def test_invalid_json(self, body):
        with pytest.raises(MalformedResponseError) as info:
            parse_json_object(body, HandshakeStep.LOGIN)
        assert info.value.step is HandshakeStep.LOGIN

    @pytest.mark.parametrize("body", ["[1, 2]", "\"abc\"", "42", "null"])
    def test_json_that_is_not_an_object(self, body):
        with pytest.raises(MalformedResponseError):
            parse_json_object(body)


@pytest.mark.asyncio
async def test_login_posts_payload_and_returns_session(serve):
    received = []

    async def login(request):
        received.append(await request.json())
        return web.json_response({"session": "abc"})

    url = await serve({LOGIN_PATH: login})

    async with UserServiceAPIClient(url) as api:
        result = await api.login({"username": "alice", "password": "secret"})

    assert result == {"session": "abc"}
    assert received == [{"username": "alice", "password": "secret"}]


@pytest.mark.asyncio
async def test_connect_returns_grant_fields(serve):
    async def connect(request):
        body = await request.json()
        return web.json_response({"avatar": "wolf", "token": "tok-123",
                                  "game_port": 7777, "echo": body})

    url = await serve({CONNECT_PATH: connect})

    async with UserServiceAPIClient(url) as api:
        result = await api.connect({"session": "abc", "game_type": "arena"})

    assert result["game_port"] == 7777
    assert result["echo"] == {"session": "abc", "game_type": "arena"}


@pytest.mark.asyncio
async def test_non_ok_status_on_login(serve):
    async def login(request):
        return web.json_response({"message": "nope"}, status=401)

    url = await serve({LOGIN_PATH: login})

    async with UserServiceAPIClient(url) as api:
        with pytest.raises(StatusError) as info:
            await api.login({"username": "alice", "password": "bad"})

    assert info.value.status == 401
    assert info.value.step is HandshakeStep.LOGIN
    assert "Failed to log in" in info.value.message


@pytest.mark.asyncio
async def test_non_ok_status_on_connect(serve):
    async def connect(request):
        return web.Response(status=500)

    url = await serve({CONNECT_PATH: connect})

    async with UserServiceAPIClient(url) as api:
        with pytest.raises(StatusError) as info:
            await api.connect({"session": "abc", "game_type": "arena"})

    assert info.value.status == 500
    assert info.value.step is HandshakeStep.CONNECT
    assert "Failed to connect to game" in info.value.message


@pytest.mark.asyncio
async def test_other_success_codes_are_failures(serve):
    async def login(request):
        return web.json_response({"session": "abc"}, status=201)

    url = await serve({LOGIN_PATH: login})

    async with UserServiceAPIClient(url) as api:
        with pytest.raises(StatusError):
            await api.login({"username": "alice", "password": "secret"})


@pytest.mark.asyncio
async def test_malformed_body(serve):
    async def login(request):
        return web.Response(text="<html>oops</html>", content_type="text/html")

    url = await serve({LOGIN_PATH: login})

    async with UserServiceAPIClient(url) as api:
        with pytest.raises(MalformedResponseError) as info:
            await api.login({"username": "alice", "password": "secret"})

    assert info.value.step is HandshakeStep.LOGIN


@pytest.mark.asyncio
async def test_connection_refused_is_transport_error():
    url = f"http://127.0.0.1:{free_port()}"

    async with UserServiceAPIClient(url, timeout=2) as api:
        with pytest.raises(TransportError) as info:
            await api.login({"username": "alice", "password": "secret"})

    assert info.value.step is HandshakeStep.LOGIN


@pytest.mark.asyncio
async def test_timeout_is_transport_error(serve):
    async def login(request):
        await asyncio.sleep(1)
        return web.json_response({"session": "abc"})

    url = await serve({LOGIN_PATH: login})

    async with UserServiceAPIClient(url, timeout=0.2) as api:
        with pytest.raises(TransportError):
            await api.login({"username": "alice", "password": "secret"})


@pytest.mark.asyncio
async def test_create_user(serve):
    async def create(request):
        body = await request.json()
        return web.json_response({"id": "u1", "username": body["username"], "avatar": body["avatar"]})

    url = await serve({USERS_PATH: create})

    async with UserServiceAPIClient(url) as api:
        user = await api.create_user("alice", "secret", "wolf")

    assert user == {"id": "u1", "username": "alice", "avatar": "wolf"}


@pytest.mark.asyncio
async def test_close_is_idempotent(serve):
    async def login(request):
        return web.json_response({"session": "abc"})

    url = await serve({LOGIN_PATH: login})
    api = UserServiceAPIClient(url)
    await api.login({"username": "a", "password": "b"})

    await api.close()
    await api.close()


def test_base_url_trailing_slash_is_dropped():
    assert UserServiceAPIClient("http://localhost:3100/").base_url == "http://localhost:3100"


@pytest.mark.asyncio
async def test_error_status_with_undecodable_body_is_status_error(serve):
    async def login(request):
        return web.Response(status=401, body=b"\xff\xfe\xfa", content_type="application/json")

    url = await serve({LOGIN_PATH: login})

    async with UserServiceAPIClient(url) as api:
        with pytest.raises(StatusError) as info:
            await api.login({"username": "alice", "password": "bad"})

    assert info.value.status == 401
    assert info.value.step is HandshakeStep.LOGIN


@pytest.mark.asyncio
async def test_ok_status_with_undecodable_body_is_malformed(serve):
    async def connect(request):
        return web.Response(status=200, body=b"\xff\xfe\xfa", content_type="application/json")

    url = await serve({CONNECT_PATH: connect})

    async with UserServiceAPIClient(url) as api:
        with pytest.raises(MalformedResponseError) as info:
            await api.connect({"session": "abc", "game_type": "arena"})

    assert info.value.step is HandshakeStep.CONNECT


def test_parse_json_object_accepts_bytes():
    assert parse_json_object(b'{"session": "abc"}') == {"session": "abc"}

    with pytest.raises(MalformedResponseError):
        parse_json_object(b"\xff\xfe\xfa", HandshakeStep.LOGIN)


@pytest.mark.asyncio
async def test_get_user_by_id_sends_session_as_query(serve):
    seen = []

    async def get_user(request):
        seen.append((request.match_info["user_id"], dict(request.query)))
        return web.json_response({"id": "u1", "username": "alice", "avatar": "wolf"})

    url = await serve({("GET", USERS_PATH + "/{user_id}"): get_user})

    async with UserServiceAPIClient(url) as api:
        user = await api.get_user("s1", user_id="u1")

    assert user["username"] == "alice"
    assert seen == [("u1", {"session": "s1"})]


@pytest.mark.asyncio
async def test_get_user_by_username(serve):
    seen = []

    async def find_user(request):
        seen.append(dict(request.query))
        return web.json_response({"id": "u1", "username": "alice", "avatar": "wolf"})

    url = await serve({("GET", USERS_PATH): find_user})

    async with UserServiceAPIClient(url) as api:
        await api.get_user("s1", username="alice")

    assert seen == [{"session": "s1", "username": "alice"}]


@pytest.mark.asyncio
async def test_update_user_sends_only_given_fields(serve):
    received = []

    async def update(request):
        received.append(await request.json())
        return web.json_response({"id": "u1", "username": "alice", "avatar": "bear"})

    url = await serve({("PUT", USERS_PATH + "/{user_id}"): update})

    async with UserServiceAPIClient(url) as api:
        user = await api.update_user("s1", "u1", avatar="bear")

    assert user["avatar"] == "bear"
    assert received == [{"session": "s1", "avatar": "bear"}]


@pytest.mark.asyncio
async def test_update_user_forbidden(serve):
    async def update(request):
        return web.Response(status=403)

    url = await serve({("PUT", USERS_PATH + "/{user_id}"): update})

    async with UserServiceAPIClient(url) as api:
        with pytest.raises(StatusError) as info:
            await api.update_user("s1", "u2", avatar="bear")

    assert info.value.status == 403
    assert info.value.step is None
