from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence, Union

from .models import Block, CanonicalLine

FENCE_OPEN_RE = re.compile(r"^(\s*)(```|~~~)")
HEADING_RE = re.compile(r"^\s{0,3}#{1,6}\s+")
TABLE_SEPARATOR_RE = re.compile(r"^\s*\|?\s*:?-{3,}:?\s*(\|\s*:?-{3,}:?\s*)+\|?\s*$")


@dataclass(frozen=True)
class Normal:
    pass


@dataclass(frozen=True)
class InFence:
    glyph: str


ScanState = Union[Normal, InFence]


def fence_glyph(text: str) -> str | None:
    match = FENCE_OPEN_RE.match(text)
    return match.group(2) if match else None


def is_blank(text: str) -> bool:
    return text.strip() == ""


def is_heading(text: str) -> bool:
    return HEADING_RE.match(text) is not None


def is_table_separator(text: str) -> bool:
    return TABLE_SEPARATOR_RE.match(text) is not None


class LineReader:
    """Cursor over an indexable line buffer with bounded lookahead."""

    def __init__(self, lines: Sequence[CanonicalLine]) -> None:
        self._lines = list(lines)
        self._position = 0

    @property
    def position(self) -> int:
        return self._position

    @property
    def at_end(self) -> bool:
        return self._position >= len(self._lines)

    def peek(self, offset: int = 0) -> CanonicalLine | None:
        index = self._position + offset
        if 0 <= index < len(self._lines):
            return self._lines[index]
        return None

    def current(self) -> CanonicalLine:
        if self.at_end:
            raise IndexError("no line at end of input")
        return self._lines[self._position]

    def advance(self) -> CanonicalLine:
        if self.at_end:
            raise IndexError("advance past end of input")
        line = self._lines[self._position]
        self._position += 1
        return line

    def starts_table(self, offset: int = 0) -> bool:
        header = self.peek(offset)
        separator = self.peek(offset + 1)
        if header is None or separator is None:
            return False
        return "|" in header.text and is_table_separator(separator.text)


class BlockCollector:
    def __init__(self) -> None:
        self.blocks: list[Block] = []
        self._buffer: list[CanonicalLine] = []

    @property
    def pending(self) -> int:
        return len(self._buffer)

    def add(self, line: CanonicalLine) -> None:
        self._buffer.append(line)

    def flush(self) -> None:
        if not self._buffer:
            return
        self.blocks.append(
            Block(
                start_line=self._buffer[0].line_number,
                end_line=self._buffer[-1].line_number,
                text="\n".join(line.text for line in self._buffer),
            )
        )
        self._buffer = []


def _step_in_fence(state: InFence, reader: LineReader, collector: BlockCollector) -> ScanState:
    line = reader.advance()
    collector.add(line)
    if line.text.strip().startswith(state.glyph):
        collector.flush()
        return Normal()
    return state


def _step_normal(state: Normal, reader: LineReader, collector: BlockCollector) -> ScanState:
    line = reader.current()

    glyph = fence_glyph(line.text)
    if glyph:
        collector.flush()
        collector.add(reader.advance())
        return InFence(glyph)

    if is_blank(line.text):
        collector.flush()
        reader.advance()
        return state

    if reader.starts_table():
        collector.flush()
        while not reader.at_end and not is_blank(reader.current().text):
            collector.add(reader.advance())
        collector.flush()
        return state

    if is_heading(line.text):
        collector.flush()
        collector.add(reader.advance())
        while not reader.at_end:
            upcoming = reader.current().text
            if is_blank(upcoming) or is_heading(upcoming) or reader.starts_table():
                break
            collector.add(reader.advance())
        collector.flush()
        return state

    collector.add(reader.advance())
    return state


def step(state: ScanState, reader: LineReader, collector: BlockCollector) -> ScanState:
    """Consume at least one line and return the scanner state for the next line."""
    if isinstance(state, InFence):
        return _step_in_fence(state, reader, collector)
    return _step_normal(state, reader, collector)


def segment(lines: Sequence[CanonicalLine]) -> list[Block]:
    reader = LineReader(lines)
    collector = BlockCollector()
    state: ScanState = Normal()
    while not reader.at_end:
        state = step(state, reader, collector)
    # An unterminated fence still yields its accumulated lines.
    collector.flush()
    return collector.blocks
