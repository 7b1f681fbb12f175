from .models import Block, CanonicalLine, LineObservation
from .reconcile import reconcile
from .render import FallbackRenderer, MarkdownItRenderer, MarkdownRenderer, render_fallback
from .segment import segment

__all__ = [
    "Block",
    "CanonicalLine",
    "FallbackRenderer",
    "LineObservation",
    "MarkdownItRenderer",
    "MarkdownRenderer",
    "reconcile",
    "render_fallback",
    "segment",
]
