"""Shared fixtures: a fake CM connection, an in-process AuthenticateUser endpoint, test keys."""

from __future__ import annotations

import asyncio
import json
from urllib.parse import parse_qsl

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer
from cryptography.hazmat.primitives.asymmetric import rsa

from connection import Connection
from cryptoutil.rsa import rsa_decrypt
from cryptoutil.symmetric import symmetric_decrypt
from public_keys import EUniverse, PublicKeyRegistry
from steam_id import SteamID

STEAM_ID = SteamID.create(12345678)


class FakeConnection(Connection):
    def __init__(self, steam_id: SteamID = STEAM_ID):
        self.written = []
        self.events = []
        self.errors = []
        self._steam_id = steam_id

    def write(self, packet):
        self.written.append(packet)

    def emit(self, event):
        self.events.append(event)

    def steam_id(self):
        return self._steam_id

    def errorf(self, fmt, *args):
        self.errors.append(fmt % args)

    def events_of(self, event_type):
        return [e for e in self.events if isinstance(e, event_type)]

    def written_of(self, emsg):
        return [p for p in self.written if p.emsg == emsg]


class AuthServer:
    """Scripted ISteamUserAuth/AuthenticateUser stand-in.

    Each request pops the next scripted response; when the script runs out the
    last response is repeated.
    """

    PATH = "/ISteamUserAuth/AuthenticateUser/v0001"

    def __init__(self):
        self.responses = []
        self.requests = []
        self.app = web.Application()
        self.app.router.add_post(self.PATH, self._handle)
        self.url = None

    def respond(self, status=200, body=None):
        if body is None:
            body = ""
        elif not isinstance(body, str):
            body = json.dumps(body)
        self.responses.append((status, body))

    def respond_credentials(self, token="token", token_secure="token_secure"):
        self.respond(200, {"authenticateuser": {"token": token, "tokensecure": token_secure}})

    async def _handle(self, request: web.Request) -> web.Response:
        raw = await request.read()
        # latin-1 keeps the percent-decoded ciphertext bytes intact
        fields = {k: v.encode("latin-1") for k, v in parse_qsl(raw.decode("ascii"), encoding="latin-1")}
        self.requests.append({"content_type": request.content_type, "fields": fields})
        if len(self.responses) > 1:
            status, body = self.responses.pop(0)
        else:
            status, body = self.responses[0]
        return web.Response(status=status, text=body, content_type="application/json")


@pytest.fixture(scope="session")
def private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def registry(private_key):
    return PublicKeyRegistry({EUniverse.Public: private_key.public_key()}, include_builtin=False)


@pytest.fixture
def connection():
    return FakeConnection()


@pytest.fixture
async def auth_server():
    server = AuthServer()
    test_server = TestServer(server.app)
    await test_server.start_server()
    server.url = str(test_server.make_url(AuthServer.PATH))
    yield server
    await test_server.close()


@pytest.fixture
async def unreachable_url():
    test_server = TestServer(web.Application())
    await test_server.start_server()
    url = str(test_server.make_url(AuthServer.PATH))
    await test_server.close()
    return url


@pytest.fixture
async def http():
    async with aiohttp.ClientSession() as session:
        yield session


async def settle(web_session) -> None:
    """Wait until every log on task of the session has finished."""
    while web_session._tasks:
        await asyncio.gather(*list(web_session._tasks), return_exceptions=True)
        await asyncio.sleep(0)


def decrypt_payload(private_key, payload):
    """Undo the handshake encryption; returns (session key, login key)."""
    session_key = rsa_decrypt(private_key, payload.encrypted_session_key)
    return session_key, symmetric_decrypt(session_key, payload.encrypted_login_key).decode("utf-8")
