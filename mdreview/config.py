from __future__ import annotations

import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from .render import DEFAULT_MARKDOWN_EXTENSIONS, RENDERER_NAMES


@dataclass(frozen=True)
class PreviewConfig:
    renderer: str = "markdown-it"
    markdown_extensions: tuple[str, ...] = DEFAULT_MARKDOWN_EXTENSIONS
    diff_url: str | None = None
    title: str | None = None

    def with_overrides(self, **overrides: Any) -> "PreviewConfig":
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values) if values else self


def parse_preview_config(data: dict[str, Any]) -> PreviewConfig:
    section = data.get("preview") if isinstance(data.get("preview"), dict) else data

    renderer = str(section.get("renderer") or "markdown-it").strip().lower()
    if renderer not in RENDERER_NAMES:
        raise RuntimeError(f"preview config renderer must be one of: {', '.join(RENDERER_NAMES)} (got {renderer!r})")

    raw_extensions = section.get("markdown_extensions", list(DEFAULT_MARKDOWN_EXTENSIONS))
    if not isinstance(raw_extensions, list):
        raise RuntimeError("preview config markdown_extensions must be an array of rule names")
    extensions = tuple(str(value).strip() for value in raw_extensions if str(value).strip())

    diff_url = str(section.get("diff_url") or "").strip() or None
    title = str(section.get("title") or "").strip() or None
    return PreviewConfig(renderer=renderer, markdown_extensions=extensions, diff_url=diff_url, title=title)


def load_preview_config(path: Path | None) -> PreviewConfig:
    if path is None:
        return PreviewConfig()
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as error:
        raise RuntimeError(f"Config file not found: {path}") from error
    except tomllib.TOMLDecodeError as error:
        raise RuntimeError(f"Invalid TOML in {path}: {error}") from error
    return parse_preview_config(data)
