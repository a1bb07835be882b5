"""Shared test fixtures for the webprobe test suite."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from io import BytesIO

import pytest
from PIL import Image

from webprobe.config import Settings
from webprobe.controller import FetchController
from webprobe.errors import ProbeError
from webprobe.models.http import FetchOutcome, ProbeRequest
from webprobe.state import AppState
from webprobe.textures import InMemoryTextureBackend, TextureManager


def make_png(width: int = 4, height: int = 3) -> bytes:
    buffer = BytesIO()
    Image.new("RGBA", (width, height), (255, 0, 0, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


class GatedClient:
    """HttpClientProtocol fake whose requests finish only when released.

    ``release(url, outcome)`` lets the pending ``perform`` for ``url`` return
    ``outcome``. An outcome that is an exception other than ProbeError is
    raised instead, simulating a crashed background task.
    """

    def __init__(self) -> None:
        self.calls: list[ProbeRequest] = []
        self.finished: list[str] = []
        self._gates: dict[str, asyncio.Event] = {}
        self._outcomes: dict[str, FetchOutcome | BaseException] = {}

    def _gate(self, url: str) -> asyncio.Event:
        return self._gates.setdefault(url, asyncio.Event())

    def release(self, url: str, outcome: FetchOutcome | BaseException) -> None:
        self._outcomes[url] = outcome
        self._gate(url).set()

    async def perform(self, request: ProbeRequest) -> FetchOutcome:
        self.calls.append(request)
        await self._gate(request.url).wait()
        outcome = self._outcomes[request.url]
        self.finished.append(request.url)
        if isinstance(outcome, BaseException) and not isinstance(outcome, ProbeError):
            raise outcome
        return outcome


@pytest.fixture()
def png_bytes() -> bytes:
    """A valid 4x3 PNG."""
    return make_png()


@pytest.fixture()
def png_factory() -> Callable[[int, int], bytes]:
    return make_png


@pytest.fixture()
def settings() -> Settings:
    return Settings()


@pytest.fixture()
def gated_client() -> GatedClient:
    return GatedClient()


@pytest.fixture()
def texture_backend() -> InMemoryTextureBackend:
    return InMemoryTextureBackend()


@pytest.fixture()
def app_state(
    settings: Settings,
    gated_client: GatedClient,
    texture_backend: InMemoryTextureBackend,
) -> AppState:
    """AppState driven by a GatedClient, so tests decide when requests finish."""
    return AppState(
        settings=settings,
        controller=FetchController(gated_client),
        textures=TextureManager(texture_backend),
    )


@pytest.fixture()
def settle() -> Callable[[], Awaitable[None]]:
    """Let background tasks run until they block again."""

    async def _settle() -> None:
        for _ in range(20):
            await asyncio.sleep(0)

    return _settle
