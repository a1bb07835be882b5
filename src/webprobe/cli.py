"""Command-line entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Wire AppState (HTTP client, controller, texture manager)
- Run the tick loop until the request settles
- Print the final frame
"""

from __future__ import annotations

import asyncio
import logging
import sys
import time
from contextlib import suppress

import click
import structlog

from webprobe import __version__
from webprobe.client import HttpxClient, build_http_client
from webprobe.config import Settings
from webprobe.controller import FetchController
from webprobe.models.http import Method
from webprobe.models.resource import Failure
from webprobe.presentation import Frame, copy_body, post_to_httpbin, random_image, submit, tick
from webprobe.state import AppState, RequestForm
from webprobe.terminal import render_lines
from webprobe.textures import InMemoryTextureBackend, TextureManager

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # Logs go to stderr — stdout carries the rendered response
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Tick loop
# ---------------------------------------------------------------------------


async def run_probe(
    settings: Settings,
    form: RequestForm,
    *,
    action: str = "submit",
    width: float | None = None,
) -> tuple[AppState, Frame]:
    """Trigger one request and tick until it settles. Returns the final state and frame."""
    repaint = asyncio.Event()
    interval = settings.display.tick_interval_seconds

    async with build_http_client(settings.http) as http_client:
        state = AppState(
            settings=settings,
            controller=FetchController(HttpxClient(http_client), on_complete=repaint.set),
            textures=TextureManager(InMemoryTextureBackend()),
            form=form,
        )

        if action == "random_image":
            random_image(state, seed=int(time.time() * 1000))
        elif action == "httpbin":
            post_to_httpbin(state)
        else:
            submit(state)

        try:
            frame = tick(state, width)
            while state.controller.is_busy:
                repaint.clear()
                # Wake on the next tick, or as soon as the request completes
                with suppress(TimeoutError):
                    await asyncio.wait_for(repaint.wait(), timeout=interval)
                frame = tick(state, width)
        finally:
            state.textures.clear()

    return state, frame


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


@click.command()
@click.argument("url", required=False)
@click.option(
    "-X",
    "--method",
    type=click.Choice([m.value for m in Method], case_sensitive=False),
    default=Method.GET.value,
    help="HTTP method",
)
@click.option("-d", "--data", default="", help="Request body (sent with POST only)")
@click.option(
    "--random-image",
    "random_image_flag",
    is_flag=True,
    help="Fetch a random picture from picsum.photos",
)
@click.option("--httpbin", is_flag=True, help="POST the body to httpbin.org")
@click.option(
    "--width",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Available width for images, in pixels",
)
@click.option("--headers", "show_headers", is_flag=True, help="Expand the response headers")
@click.option("--raw", is_flag=True, help="Print only the text body")
@click.version_option(version=__version__, prog_name="webprobe")
def main(
    url: str | None,
    method: str,
    data: str,
    random_image_flag: bool,
    httpbin: bool,
    width: float | None,
    show_headers: bool,
    raw: bool,
) -> None:
    """Send one HTTP request and show the response.

    Example:
        webprobe https://example.com
    """
    if sum([url is not None, random_image_flag, httpbin]) != 1:
        raise click.UsageError("Give exactly one of URL, --random-image or --httpbin.")

    settings = Settings()
    _setup_logging(settings)
    log.debug("cli_starting", version=__version__)

    action = "random_image" if random_image_flag else "httpbin" if httpbin else "submit"
    form = RequestForm(url=url or "", method=Method(method.upper()), body=data)
    state, frame = asyncio.run(run_probe(settings, form, action=action, width=width))

    if raw:
        text = copy_body(state)
        if text is not None:
            click.echo(text, nl=False)
    else:
        for line in render_lines(frame, show_headers=show_headers, color=sys.stdout.isatty()):
            click.echo(line)

    if isinstance(state.last_result, Failure):
        sys.exit(1)


if __name__ == "__main__":
    main()
