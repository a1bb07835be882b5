"""Immediate-mode texture manager holding at most one texture at a time.

``ensure_texture`` is called on every render tick, so it must be idempotent for
an unchanged URL. The slot is keyed by URL string only: two different payloads
served from the same URL do not trigger a refresh.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from webprobe.models.resource import PixelBuffer
    from webprobe.protocols import TextureBackendProtocol

log = structlog.get_logger()


@dataclass(frozen=True)
class TextureHandle:
    id: int
    width: int
    height: int


class InMemoryTextureBackend:
    """Headless texture backend implementing TextureBackendProtocol.

    Keeps allocated pixel buffers by handle id, standing in for GPU memory.
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._textures: dict[int, PixelBuffer] = {}

    @property
    def live_count(self) -> int:
        return len(self._textures)

    def allocate(self, pixels: PixelBuffer) -> TextureHandle:
        handle = TextureHandle(id=next(self._ids), width=pixels.width, height=pixels.height)
        self._textures[handle.id] = pixels
        return handle

    def release(self, handle: TextureHandle) -> None:
        self._textures.pop(handle.id, None)

    def pixels(self, handle: TextureHandle) -> PixelBuffer | None:
        return self._textures.get(handle.id)


class TextureManager:
    """Sole owner of the single texture slot."""

    def __init__(self, backend: TextureBackendProtocol) -> None:
        self._backend = backend
        self._loaded_url = ""
        self._handle: TextureHandle | None = None

    @property
    def loaded_url(self) -> str:
        return self._loaded_url

    @property
    def handle(self) -> TextureHandle | None:
        return self._handle

    def ensure_texture(self, url: str, image: PixelBuffer) -> TextureHandle:
        """Return the texture for ``url``, replacing the slot if the URL changed."""
        if self._handle is not None and self._loaded_url == url:
            return self._handle

        # Release strictly before allocating: never more than one texture held.
        self._release()
        self._handle = self._backend.allocate(image)
        self._loaded_url = url
        log.debug(
            "texture_allocated",
            url=url,
            texture_id=self._handle.id,
            width=image.width,
            height=image.height,
        )
        return self._handle

    def clear(self) -> None:
        """Release the held texture, if any, and forget its URL."""
        self._release()
        self._loaded_url = ""

    def _release(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            self._backend.release(handle)
            log.debug("texture_released", url=self._loaded_url, texture_id=handle.id)
