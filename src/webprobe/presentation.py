"""Per-tick presentation: poll the controller, then describe what to show.

``tick`` returns a Frame, a flat list of widgets that any front end can draw.
The terminal front end lives in ``webprobe.terminal``. Form actions (submit,
copy, quick actions) mutate AppState and are called by the front end between
ticks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from webprobe.classifier import classify
from webprobe.errors import ErrorCode, ProbeError
from webprobe.models.http import Method
from webprobe.models.resource import Failure, ImageBody, Resource, TextBody

if TYPE_CHECKING:
    from webprobe.state import AppState
    from webprobe.textures import TextureHandle

log = structlog.get_logger()

COPY_TOOLTIP = "Click to copy the response body"
RANDOM_IMAGE_URL = "https://picsum.photos/seed/{seed}/{side}"


# ---------------------------------------------------------------------------
# Widgets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Spinner:
    text: str = "Loading…"


@dataclass(frozen=True)
class Alert:
    text: str


@dataclass(frozen=True)
class Monospace:
    text: str


@dataclass(frozen=True)
class Separator:
    pass


@dataclass(frozen=True)
class HeaderGrid:
    rows: tuple[tuple[str, str], ...]
    title: str = "Response headers"
    default_open: bool = False


@dataclass(frozen=True)
class CopyButton:
    text: str
    tooltip: str = COPY_TOOLTIP


@dataclass(frozen=True)
class TextView:
    text: str


@dataclass(frozen=True)
class ImageView:
    handle: TextureHandle
    width: float
    height: float


Widget = Spinner | Alert | Monospace | Separator | HeaderGrid | CopyButton | TextView | ImageView


@dataclass
class Frame:
    widgets: list[Widget] = field(default_factory=list)

    def add(self, widget: Widget) -> None:
        self.widgets.append(widget)

    def find(self, widget_type: type) -> list[Widget]:
        return [w for w in self.widgets if isinstance(w, widget_type)]


# ---------------------------------------------------------------------------
# Tick
# ---------------------------------------------------------------------------


def fit_to_width(width: int, height: int, available_width: float) -> tuple[float, float]:
    """Scale down to ``available_width``, preserving aspect ratio. Never upscales."""
    if width <= 0:
        return float(width), float(height)
    scale = min(available_width / width, 1.0)
    return width * scale, height * scale


def tick(state: AppState, available_width: float | None = None) -> Frame:
    """Advance one frame: collect a finished fetch, then render."""
    if available_width is None:
        available_width = state.settings.display.width

    if state.controller.is_busy:
        outcome = state.controller.poll()
        if outcome is not None:
            try:
                state.last_result = classify(outcome)
            except ProbeError as exc:
                state.last_result = Failure.from_error(exc)

    return render(state, available_width)


def render(state: AppState, available_width: float) -> Frame:
    frame = Frame()

    if state.controller.is_busy:
        frame.add(Spinner())
        return frame

    result = state.last_result
    if result is None:
        return frame

    if isinstance(result, Failure):
        frame.add(Alert(result.message or "Error"))
        return frame

    _render_resource(state, result, frame, available_width)
    return frame


def _render_resource(
    state: AppState, resource: Resource, frame: Frame, available_width: float
) -> None:
    frame.add(Monospace(f"url:          {resource.url}"))
    frame.add(Monospace(f"status:       {resource.status} ({resource.status_text})"))
    frame.add(Monospace(f"content-type: {resource.content_type or '-'}"))
    frame.add(Monospace(f"size:         {resource.content_length / 1000:.1f} kB"))
    frame.add(Separator())
    frame.add(HeaderGrid(rows=tuple(sorted(resource.headers.items()))))
    frame.add(Separator())

    body = resource.body
    if isinstance(body, ImageBody):
        handle = state.textures.ensure_texture(resource.url, body.image)
        width, height = fit_to_width(body.image.width, body.image.height, available_width)
        frame.add(ImageView(handle=handle, width=width, height=height))
    elif isinstance(body, TextBody):
        frame.add(CopyButton(text=body.text))
        frame.add(Separator())
        frame.add(TextView(body.text))


# ---------------------------------------------------------------------------
# Form actions
# ---------------------------------------------------------------------------


def submit(state: AppState) -> bool:
    """Start a request from the form. Returns False when nothing was started."""
    if state.controller.is_busy:
        log.info("submit_suppressed_busy", url=state.form.url)
        return False

    try:
        request = state.form.to_request()
    except ValidationError as exc:
        detail = exc.errors()[0]["msg"] if exc.errors() else str(exc)
        state.last_result = Failure(
            code=ErrorCode.INVALID_INPUT,
            message=f"Invalid request: {detail}",
        )
        return False

    state.controller.start(request)
    return True


def copy_body(state: AppState) -> str | None:
    """Copy the text body of the last result, if it has one."""
    result = state.last_result
    if isinstance(result, Resource) and isinstance(result.body, TextBody):
        state.copied_text = result.body.text
        return state.copied_text
    return None


def random_image(state: AppState, seed: float | int | str) -> bool:
    """Request a random picture. The seed makes each URL unique."""
    side = state.settings.actions.random_image_side
    state.form.method = Method.GET
    state.form.url = RANDOM_IMAGE_URL.format(seed=seed, side=side)
    return submit(state)


def post_to_httpbin(state: AppState) -> bool:
    state.form.method = Method.POST
    state.form.url = state.settings.actions.httpbin_url
    return submit(state)
