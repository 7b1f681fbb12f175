from __future__ import annotations

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .preview import NO_MARKDOWN_FILES, NOTHING_TO_PREVIEW, DiffPreview, FilePreview


def render_summary(console: Console, preview: DiffPreview) -> None:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()
    table.add_row("Source", escape(preview.source))
    table.add_row("Files", str(len(preview.files)))
    table.add_row("Blocks", str(preview.block_count))
    console.print(Panel(table, title="MDReview Summary", border_style="blue"))


def render_file_index(console: Console, preview: DiffPreview) -> None:
    table = Table(title=f"Files ({len(preview.files)})", header_style="bold magenta")
    table.add_column("path", overflow="ellipsis")
    table.add_column("blocks", justify="right")
    table.add_column("lines", no_wrap=True)
    for item in preview.files:
        if item.blocks:
            span = f"{item.blocks[0].block.start_line}-{item.blocks[-1].block.end_line}"
        else:
            span = "-"
        table.add_row(escape(item.path), str(len(item.blocks)), span)
    console.print(table)


def render_file_blocks(console: Console, item: FilePreview) -> None:
    console.rule(f"[bold]{escape(item.path)}")
    if item.is_empty:
        console.print(f"[yellow]{NOTHING_TO_PREVIEW}[/yellow]")
        return
    for rendered in item.blocks:
        block = rendered.block
        console.print(
            Panel(
                Markdown(block.text),
                title=f"Lines {block.start_line}-{block.end_line}",
                title_align="left",
                border_style="green",
            )
        )


def render_preview(console: Console, preview: DiffPreview) -> None:
    render_summary(console, preview)
    if not preview.files:
        console.print(f"[yellow]{NO_MARKDOWN_FILES}[/yellow]")
        return
    render_file_index(console, preview)
    for item in preview.files:
        render_file_blocks(console, item)
