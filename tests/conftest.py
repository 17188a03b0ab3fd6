from __future__ import annotations

import asyncio
import json
from typing import Callable

import httpx
import pytest

from adapters.remote_manager import RemoteManager
from core.config import AppSettings

BASE = "http://coord:8888/v1"

LEASE_JSON = {
    "Subnet": "10.1.2.0/24",
    "Attrs": {"PublicIP": "192.168.0.10", "BackendType": "vxlan"},
    "Expiration": "2026-10-18T12:00:00Z",
}


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    for key in (
        "LEASECTL_SERVER_ADDR",
        "LEASECTL_SCHEME",
        "LEASECTL_API_VERSION",
        "LEASECTL_LOG_LEVEL",
        "LEASECTL_READ_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


class Recorder:
    """Handler para `httpx.MockTransport` que guarda las peticiones."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.responder = responder
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> object:
        return json.loads(self.last.content)


def make_manager(recorder: Recorder | httpx.AsyncBaseTransport) -> RemoteManager:
    transport = recorder if isinstance(recorder, httpx.AsyncBaseTransport) else httpx.MockTransport(recorder)
    return RemoteManager(BASE, settings=AppSettings(), transport=transport)


class BlockingTransport(httpx.AsyncBaseTransport):
    """Transporte que bloquea hasta `release`.

    Con `ignore_abort=True` se traga la cancelación y sigue esperando a
    `release`, como un transporte que no soporta abortar.
    """

    def __init__(self, *, ignore_abort: bool = False) -> None:
        self.ignore_abort = ignore_abort
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.aborted = False
        self.finished = False
        self.response: httpx.Response | None = None

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.started.set()
        try:
            try:
                await self.release.wait()
            except asyncio.CancelledError:
                self.aborted = True
                if not self.ignore_abort:
                    raise
                await self.release.wait()
            self.response = httpx.Response(200, json={"cursor": "late"})
            return self.response
        finally:
            self.finished = True
