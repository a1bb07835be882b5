from __future__ import annotations

from webprobe.models.http import FetchOutcome, Method, ProbeRequest, RawResponse
from webprobe.models.resource import (
    Failure,
    ImageBody,
    LastResult,
    OpaqueBody,
    PixelBuffer,
    Resource,
    ResourceBody,
    TextBody,
)

__all__ = [
    # http
    "Method",
    "ProbeRequest",
    "RawResponse",
    "FetchOutcome",
    # resource
    "PixelBuffer",
    "TextBody",
    "ImageBody",
    "OpaqueBody",
    "ResourceBody",
    "Resource",
    "Failure",
    "LastResult",
]
