"""Integration test fixtures.

Provides a fully wired AppState with a real httpx client (mocked with respx by
each test) and an in-memory texture backend. Generic fixtures come from
tests/conftest.py (settings, png_bytes, texture_backend).
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from webprobe.client import HttpxClient, build_http_client
from webprobe.controller import FetchController
from webprobe.presentation import tick
from webprobe.state import AppState
from webprobe.textures import TextureManager

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from webprobe.config import Settings
    from webprobe.presentation import Frame
    from webprobe.textures import InMemoryTextureBackend


@pytest.fixture()
async def wired_state(settings: Settings, texture_backend: InMemoryTextureBackend) -> AppState:
    """AppState wired exactly as the CLI wires it."""
    async with build_http_client(settings.http) as client:
        yield AppState(
            settings=settings,
            controller=FetchController(HttpxClient(client)),
            textures=TextureManager(texture_backend),
        )


@pytest.fixture()
def tick_until_idle() -> Callable[[AppState], Awaitable[Frame]]:
    """Tick the state until the in-flight request settles; return the last frame."""

    async def _run(state: AppState, max_ticks: int = 500) -> Frame:
        frame = tick(state)
        for _ in range(max_ticks):
            if not state.controller.is_busy:
                return frame
            await asyncio.sleep(0.001)
            frame = tick(state)
        raise AssertionError("request did not settle")

    return _run
