"""Application state container.

AppState is created once at startup and passed by reference into every tick.
It is only touched from the event loop's thread: the background fetch task
never writes to it, it hands its outcome to the controller's channel instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from webprobe.models.http import Method, ProbeRequest

if TYPE_CHECKING:
    from webprobe.config import Settings
    from webprobe.controller import FetchController
    from webprobe.models.resource import LastResult
    from webprobe.textures import TextureManager


@dataclass
class RequestForm:
    """Editable request inputs, as typed by the user."""

    url: str = ""
    method: Method = Method.GET
    body: str = ""

    def to_request(self) -> ProbeRequest:
        """Freeze the form into a request. Raises ``pydantic.ValidationError``."""
        return ProbeRequest(url=self.url, method=self.method, body=self.body.encode("utf-8"))


@dataclass
class AppState:
    """Holds all runtime state. Passed to every tick."""

    settings: Settings
    controller: FetchController
    textures: TextureManager
    form: RequestForm = field(default_factory=RequestForm)
    last_result: LastResult | None = None
    copied_text: str | None = None
