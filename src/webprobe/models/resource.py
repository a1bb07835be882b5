from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from webprobe.errors import ErrorCode, ProbeError


class PixelBuffer(BaseModel):
    """Decoded image as unmultiplied RGBA8, row-major."""

    model_config = ConfigDict(frozen=True)

    width: int
    height: int
    rgba: bytes = Field(repr=False)


class TextBody(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


class ImageBody(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["image"] = "image"
    image: PixelBuffer


class OpaqueBody(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["opaque"] = "opaque"


ResourceBody = Annotated[TextBody | ImageBody | OpaqueBody, Field(discriminator="kind")]


class Resource(BaseModel):
    """Display-ready form of a completed response."""

    model_config = ConfigDict(frozen=True)

    url: str
    status: int
    status_text: str
    headers: dict[str, str]
    content_length: int
    body: ResourceBody

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")


class Failure(BaseModel):
    """Stored form of a failed fetch."""

    model_config = ConfigDict(frozen=True)

    code: ErrorCode
    message: str

    @classmethod
    def from_error(cls, error: ProbeError) -> Failure:
        return cls(code=error.code, message=error.message)


LastResult = Resource | Failure
