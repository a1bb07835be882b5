"""Turn a fetch outcome into a display-ready Resource.

Dispatch is on the lower-cased ``content-type`` header:
  - ``image/*``   → decoded pixels, or opaque if the bytes do not decode
  - anything else → lossy UTF-8 text
  - no header     → opaque
"""

from __future__ import annotations

from io import BytesIO
from typing import TYPE_CHECKING

import structlog
from PIL import Image

from webprobe.errors import ProbeError
from webprobe.models.resource import ImageBody, OpaqueBody, PixelBuffer, Resource, TextBody

if TYPE_CHECKING:
    from webprobe.models.http import FetchOutcome, RawResponse
    from webprobe.models.resource import ResourceBody

log = structlog.get_logger()


def decode_image(data: bytes) -> PixelBuffer | None:
    """Decode ``data`` to RGBA pixels. The format is sniffed from the bytes."""
    try:
        with Image.open(BytesIO(data)) as image:
            rgba = image.convert("RGBA")
    except Exception as exc:
        # Pillow plugins raise assorted types on corrupt input; any failure means opaque
        log.debug(
            "image_decode_failed", error=str(exc), error_type=type(exc).__name__, size=len(data)
        )
        return None
    return PixelBuffer(width=rgba.width, height=rgba.height, rgba=rgba.tobytes())


def _classify_body(raw: RawResponse) -> ResourceBody:
    content_type = raw.headers.get("content-type")
    if content_type is None:
        return OpaqueBody()

    if content_type.lower().startswith("image/"):
        pixels = decode_image(raw.body)
        return OpaqueBody() if pixels is None else ImageBody(image=pixels)

    return TextBody(text=raw.body.decode("utf-8", errors="replace"))


def classify(outcome: FetchOutcome) -> Resource:
    """Build a Resource from a completed fetch.

    Raises the carried ProbeError when the fetch failed at the transport level.
    HTTP error statuses are not failures: a 404 still yields a Resource.
    """
    if isinstance(outcome, ProbeError):
        raise outcome

    return Resource(
        url=outcome.url,
        status=outcome.status,
        status_text=outcome.status_text,
        headers=outcome.headers,
        content_length=len(outcome.body),
        body=_classify_body(outcome),
    )
