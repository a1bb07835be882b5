"""Protocol interfaces for swappable components.

The controller and the texture manager reference these protocols, not the
concrete implementations. This allows:
- Tests to use lightweight fakes with controllable timing
- A graphical front end to plug in its own texture backend
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from webprobe.models.http import FetchOutcome, ProbeRequest
    from webprobe.models.resource import PixelBuffer
    from webprobe.textures import TextureHandle


class HttpClientProtocol(Protocol):
    """Interface for the HTTP client adapter.

    ``perform`` must not raise for transport faults: they are returned as
    ``ProbeError`` values.
    """

    async def perform(self, request: ProbeRequest) -> FetchOutcome: ...


class TextureBackendProtocol(Protocol):
    """Interface for the platform texture subsystem."""

    def allocate(self, pixels: PixelBuffer) -> TextureHandle: ...

    def release(self, handle: TextureHandle) -> None: ...
