from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from webprobe.errors import ProbeError


class Method(StrEnum):
    GET = "GET"
    POST = "POST"


class ProbeRequest(BaseModel):
    """A request built from the form at trigger time. Immutable once dispatched."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(min_length=1, max_length=2048)
    method: Method = Method.GET
    body: bytes = b""  # Only sent for POST

    @field_validator("url", mode="before")
    @classmethod
    def _strip_url(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class RawResponse(BaseModel):
    """A completed HTTP exchange, whatever its status code."""

    model_config = ConfigDict(frozen=True)

    url: str  # Final URL, after redirects
    status: int
    status_text: str
    headers: dict[str, str]  # Lower-cased names, last value wins
    body: bytes = Field(default=b"", repr=False)


# An HTTP error status is still a RawResponse; only transport faults are errors.
FetchOutcome = RawResponse | ProbeError
