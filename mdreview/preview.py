from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from .diff_source import file_path_of, markdown_files, observations_from_diff_file, parse_unified_diff
from .models import Block, LineObservation
from .reconcile import observations_from_records, reconcile
from .render import MarkdownRenderer, render_safely
from .segment import segment

logger = logging.getLogger(__name__)

NOTHING_TO_PREVIEW = "Couldn't extract added lines. Nothing to preview."
NO_MARKDOWN_FILES = "No Markdown file diff found."


@dataclass(frozen=True)
class RenderedBlock:
    block: Block
    markup: str


@dataclass(frozen=True)
class FilePreview:
    path: str
    blocks: tuple[RenderedBlock, ...]

    @property
    def is_empty(self) -> bool:
        return not self.blocks


@dataclass(frozen=True)
class DiffPreview:
    source: str
    files: tuple[FilePreview, ...] = field(default_factory=tuple)

    @property
    def block_count(self) -> int:
        return sum(len(item.blocks) for item in self.files)

    @property
    def is_empty(self) -> bool:
        return self.block_count == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "files": [
                {
                    "path": item.path,
                    "blocks": [
                        {**rendered.block.to_dict(), "anchor": rendered.block.anchor_id, "html": rendered.markup}
                        for rendered in item.blocks
                    ],
                }
                for item in self.files
            ],
        }


def build_file_preview(
    path: str,
    observations: Iterable[LineObservation],
    renderer: MarkdownRenderer | None = None,
) -> FilePreview:
    lines = reconcile(observations)
    blocks = segment(lines)
    logger.debug("%s: %d canonical line(s), %d block(s)", path, len(lines), len(blocks))
    return FilePreview(
        path=path,
        blocks=tuple(RenderedBlock(block=block, markup=render_safely(renderer, block.text)) for block in blocks),
    )


def build_diff_preview(
    diff_text: str,
    renderer: MarkdownRenderer | None = None,
    path_filter: str | None = None,
    source: str = "diff",
) -> DiffPreview:
    parsed = parse_unified_diff(diff_text)
    selected = markdown_files(parsed, path_filter)
    logger.debug("diff touches %d file(s), %d markdown file(s) selected", len(parsed), len(selected))
    files = tuple(
        build_file_preview(file_path_of(entry), observations_from_diff_file(entry), renderer) for entry in selected
    )
    return DiffPreview(source=source, files=files)


def load_observations(path: Path) -> list[LineObservation]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as error:
        raise RuntimeError(f"File not found: {path}") from error
    except json.JSONDecodeError as error:
        raise RuntimeError(f"Invalid JSON: {error}") from error
    if isinstance(payload, dict):
        payload = payload.get("lines", payload.get("observations"))
    if not isinstance(payload, list):
        raise RuntimeError("Observations JSON must be a list or an object with a 'lines' list.")
    return observations_from_records(payload)
