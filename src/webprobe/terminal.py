"""Plain-text front end: draws a Frame as terminal lines."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from webprobe.presentation import (
    Alert,
    CopyButton,
    HeaderGrid,
    ImageView,
    Monospace,
    Separator,
    Spinner,
    TextView,
)

if TYPE_CHECKING:
    from webprobe.presentation import Frame, Widget

SEPARATOR = "─" * 40


def _widget_lines(widget: Widget, *, show_headers: bool, color: bool) -> list[str]:
    if isinstance(widget, Spinner):
        return [widget.text]
    if isinstance(widget, Alert):
        return [click.style(widget.text, fg="red") if color else widget.text]
    if isinstance(widget, Monospace):
        return [widget.text]
    if isinstance(widget, Separator):
        return [SEPARATOR]
    if isinstance(widget, HeaderGrid):
        if not (show_headers or widget.default_open):
            return [f"▸ {widget.title} ({len(widget.rows)})"]
        pad = max((len(name) for name, _ in widget.rows), default=0)
        rows = [f"  {name:<{pad}}  {value}" for name, value in widget.rows]
        return [f"▾ {widget.title}", *rows]
    if isinstance(widget, CopyButton):
        return [f"[copy] {widget.tooltip} (--raw)"]
    if isinstance(widget, TextView):
        return widget.text.splitlines() or [""]
    if isinstance(widget, ImageView):
        return [
            f"[image #{widget.handle.id}: {widget.handle.width}x{widget.handle.height}, "
            f"shown at {widget.width:.0f}x{widget.height:.0f}]"
        ]
    raise TypeError(f"Unknown widget: {widget!r}")


def render_lines(frame: Frame, *, show_headers: bool = False, color: bool = False) -> list[str]:
    lines: list[str] = []
    for widget in frame.widgets:
        lines.extend(_widget_lines(widget, show_headers=show_headers, color=color))
    return lines
