"""
Shared pytest fixtures for the screeps_client tests.

The http tests run against a real aiohttp server on 127.0.0.1, standing in for a private Screeps server.
Each test registers the responses it needs and inspects the requests the server received afterwards.
"""

import asyncio
import json
import socket
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

import pytest
import pytest_asyncio
from aiohttp import web


class RecordedRequest(NamedTuple):
    method: str
    path_qs: str
    headers: Dict[str, str]
    body: bytes


class CannedResponse(NamedTuple):
    body: Any
    status: int = 200
    delay: float = 0.0


class FakeScreepsServer:
    """Answers every path with whatever was registered for it, or a 404 json body."""

    def __init__(self):
        self.responses: Dict[str, CannedResponse] = {}
        self.requests: List[RecordedRequest] = []
        self._runner: Optional[web.AppRunner] = None
        self.port: int = 0

    def respond(self, path_qs: str, body: Any, status: int = 200, delay: float = 0.0):
        self.responses[path_qs] = CannedResponse(body, status, delay)

    async def _handle(self, request: web.Request) -> web.Response:
        body = await request.read()
        self.requests.append(RecordedRequest(request.method, request.path_qs, dict(request.headers), body))
        canned = self.responses.get(request.path_qs, CannedResponse({"error": "not found"}, 404))
        if canned.delay:
            await asyncio.sleep(canned.delay)
        if isinstance(canned.body, str):
            return web.Response(text=canned.body, status=canned.status)
        return web.Response(text=json.dumps(canned.body), status=canned.status, content_type="application/json")

    async def start(self):
        app = web.Application()
        app.router.add_route("*", "/{tail:.*}", self._handle)
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, "127.0.0.1", 0)
        await site.start()
        self.port = self._runner.addresses[0][1]

    async def stop(self):
        if self._runner is not None:
            await self._runner.cleanup()


class ProbeListener:
    """Plain tcp listener that records what each probe connection sent before closing."""

    def __init__(self):
        self.received: List[bytes] = []
        self.connected = asyncio.Event()
        self._server: Optional[asyncio.AbstractServer] = None
        self.port: int = 0

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        self.connected.set()
        try:
            self.received.append(await reader.read())
        finally:
            writer.close()

    async def start(self):
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        self.port = self._server.sockets[0].getsockname()[1]

    async def stop(self):
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()


def unused_port() -> int:
    """A port on 127.0.0.1 that nothing listens on, so connecting to it is refused."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest_asyncio.fixture
async def screeps_server():
    server = FakeScreepsServer()
    await server.start()
    yield server
    await server.stop()


@pytest_asyncio.fixture
async def probe_listener():
    listener = ProbeListener()
    await listener.start()
    yield listener
    await listener.stop()


@pytest.fixture
def refused_port() -> int:
    return unused_port()


def api_records(caplog) -> List[Tuple[str, str]]:
    """(levelname, message) for every entry written to the api log."""
    return [(r.levelname, r.getMessage()) for r in caplog.records if r.name == "screeps_client.api"]
