from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LineObservation:
    """One raw sighting of a diff line; the same line may be seen several times."""

    line_number: int | None
    is_addition: bool
    text: str


@dataclass(frozen=True)
class CanonicalLine:
    line_number: int
    text: str


@dataclass(frozen=True)
class Block:
    start_line: int
    end_line: int
    text: str

    @property
    def line_range(self) -> tuple[int, int]:
        return self.start_line, self.end_line

    @property
    def anchor_id(self) -> str:
        return f"mdreview-block-{self.start_line}-{self.end_line}"

    def to_dict(self) -> dict[str, object]:
        return {"startLine": self.start_line, "endLine": self.end_line, "text": self.text}
