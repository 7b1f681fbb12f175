from __future__ import annotations

import logging
import re
from html import escape
from typing import Iterable, Protocol, runtime_checkable

from markdown_it import MarkdownIt

logger = logging.getLogger(__name__)

HEADING_LINE_RE = re.compile(r"^\s{0,3}(#{1,6})\s+(.*)$")
INLINE_CODE_RE = re.compile(r"`([^`]+)`")
BOLD_RE = re.compile(r"\*\*([^*]+)\*\*")

DEFAULT_MARKDOWN_EXTENSIONS: tuple[str, ...] = ("table", "strikethrough", "linkify")


@runtime_checkable
class MarkdownRenderer(Protocol):
    def render(self, text: str) -> str: ...


def _escape_text(value: str) -> str:
    return escape(value, quote=False)


def render_fallback_line(line: str) -> str:
    heading = HEADING_LINE_RE.match(line)
    if heading:
        level = len(heading.group(1))
        return f"<h{level}>{_escape_text(heading.group(2).strip())}</h{level}>"
    body = _escape_text(line)
    body = INLINE_CODE_RE.sub(r"<code>\1</code>", body)
    body = BOLD_RE.sub(r"<strong>\1</strong>", body)
    return f"<p>{body}</p>"


def render_fallback(text: str) -> str:
    """Line-by-line, escape-first rendering used when no full engine is available."""
    return "\n".join(render_fallback_line(line) for line in text.split("\n"))


class FallbackRenderer:
    name = "fallback"

    def render(self, text: str) -> str:
        return render_fallback(text)


class MarkdownItRenderer:
    name = "markdown-it"

    def __init__(self, extensions: Iterable[str] = DEFAULT_MARKDOWN_EXTENSIONS) -> None:
        self.extensions = tuple(extensions)
        self._md = MarkdownIt(
            "commonmark",
            {"html": False, "linkify": "linkify" in self.extensions, "breaks": False},
        )
        for extension in self.extensions:
            self._md.enable(extension)

    def render(self, text: str) -> str:
        return self._md.render(text)


RENDERER_NAMES = (MarkdownItRenderer.name, FallbackRenderer.name)


def create_renderer(
    name: str,
    extensions: Iterable[str] = DEFAULT_MARKDOWN_EXTENSIONS,
) -> MarkdownRenderer:
    if name == FallbackRenderer.name:
        return FallbackRenderer()
    if name == MarkdownItRenderer.name:
        try:
            return MarkdownItRenderer(extensions)
        except ValueError as error:
            raise RuntimeError(f"Unsupported markdown extension: {error}") from error
    raise RuntimeError(f"Unknown renderer: {name} (expected one of: {', '.join(RENDERER_NAMES)})")


def render_safely(renderer: MarkdownRenderer | None, text: str) -> str:
    """Render with ``renderer``; any failure degrades to the fallback output."""
    if renderer is None:
        return render_fallback(text)
    try:
        markup = renderer.render(text)
    except Exception as error:  # noqa: BLE001
        logger.warning("renderer %s failed, using fallback: %s", type(renderer).__name__, error)
        return render_fallback(text)
    if not isinstance(markup, str):
        logger.warning(
            "renderer %s returned %s instead of str, using fallback",
            type(renderer).__name__,
            type(markup).__name__,
        )
        return render_fallback(text)
    return markup
