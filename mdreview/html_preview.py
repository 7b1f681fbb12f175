from __future__ import annotations

import hashlib
from html import escape

from .models import Block
from .preview import NO_MARKDOWN_FILES, NOTHING_TO_PREVIEW, DiffPreview, FilePreview


def github_diff_anchor(file_path: str) -> str:
    """Anchor GitHub uses for a file on the pull request "Files changed" page."""
    return "diff-" + hashlib.sha256(file_path.encode("utf-8")).hexdigest()


def comment_url(diff_url: str | None, file_path: str, block: Block) -> str | None:
    if not diff_url:
        return None
    base = diff_url.split("#", 1)[0]
    return f"{base}#{github_diff_anchor(file_path)}R{block.start_line}"


def _safe_html_id(value: str) -> str:
    safe = "".join(ch if ch.isalnum() else "-" for ch in str(value)).strip("-").lower()
    safe = "-".join(part for part in safe.split("-") if part)
    return safe or "file"


def block_html_id(file_index: int, block: Block) -> str:
    # First file keeps the bare return anchor; later files carry an -f<index> suffix.
    if file_index == 0:
        return block.anchor_id
    return f"{block.anchor_id}-f{file_index}"


def _render_block(file_path: str, index: int, block: Block, markup: str, diff_url: str | None) -> str:
    link = comment_url(diff_url, file_path, block)
    action = (
        "<a class='mdreview-btn mdreview-comment' href='{href}' target='_blank' rel='noopener'>Comment</a>".format(
            href=escape(link)
        )
        if link
        else ""
    )
    return (
        "<div class='block' id='{block_id}' data-file-index='{index}' data-start='{start}' data-end='{end}'>"
        "<div class='actions'>{action}</div>"
        "<div class='pill'>Lines {start}&ndash;{end}</div>"
        "<div class='markdown-body'>{markup}</div>"
        "</div>"
    ).format(
        block_id=escape(block_html_id(index, block)),
        index=index,
        start=block.start_line,
        end=block.end_line,
        action=action,
        markup=markup,
    )


def _render_file_section(file_index: int, item: FilePreview, diff_url: str | None) -> str:
    if item.is_empty:
        body = "<div class='pill notice'>{message}</div>".format(message=escape(NOTHING_TO_PREVIEW))
    else:
        body = "<div class='pill'>Blocks: {count}. Click &ldquo;Comment&rdquo; to jump to the block&rsquo;s first line in the diff.</div>\n{blocks}".format(
            count=len(item.blocks),
            blocks="\n".join(
                _render_block(item.path, file_index, rendered.block, rendered.markup, diff_url)
                for rendered in item.blocks
            ),
        )
    return (
        "<section class='file' id='file-{anchor}'>"
        "<h2 class='file-path'>{path}</h2>\n{body}</section>"
    ).format(anchor=escape(_safe_html_id(f"{file_index}-{item.path}")), path=escape(item.path), body=body)


def render_preview_html(preview: DiffPreview, *, title: str | None = None, diff_url: str | None = None) -> str:
    page_title = title or "MDReview"
    if preview.files:
        sections = "\n".join(
            _render_file_section(index, item, diff_url) for index, item in enumerate(preview.files)
        )
        nav = "\n".join(
            "<li><a href='#file-{anchor}'>{path}</a> <span class='file-stats'>blocks {count}</span></li>".format(
                anchor=escape(_safe_html_id(f"{index}-{item.path}")),
                path=escape(item.path),
                count=len(item.blocks),
            )
            for index, item in enumerate(preview.files)
        )
    else:
        sections = "<div class='pill notice'>{message}</div>".format(message=escape(NO_MARKDOWN_FILES))
        nav = "<li>(no files)</li>"

    return """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{page_title}</title>
  <style>
    :root {{
      --bg: #0b0d11;
      --panel: #121722;
      --line: #243041;
      --text: #e8edf5;
      --muted: #9aabc1;
      --accent: #5ea3ff;
    }}
    * {{ box-sizing: border-box; }}
    body {{
      margin: 0;
      background: var(--bg);
      color: var(--text);
      font-family: "Segoe UI", sans-serif;
    }}
    a {{ color: var(--accent); text-decoration: none; }}
    .layout {{
      display: grid;
      grid-template-columns: 280px minmax(0, 1fr);
      min-height: 100vh;
    }}
    .sidebar {{
      position: sticky;
      top: 0;
      height: 100vh;
      overflow: auto;
      background: var(--panel);
      border-right: 1px solid var(--line);
      padding: 16px;
    }}
    .sidebar ul {{ padding-left: 18px; }}
    .file-stats {{ color: var(--muted); font-size: 12px; }}
    .main {{ padding: 18px; max-width: 980px; }}
    .file-path {{ font-size: 16px; border-bottom: 1px solid var(--line); padding-bottom: 6px; }}
    .pill {{
      display: inline-block;
      margin: 4px 0 8px;
      padding: 2px 8px;
      border: 1px solid var(--line);
      border-radius: 999px;
      color: var(--muted);
      font-size: 12px;
    }}
    .pill.notice {{ color: #f3c969; border-color: #6b5a2a; }}
    .block {{
      position: relative;
      margin: 0 0 14px;
      padding: 10px 14px;
      background: var(--panel);
      border: 1px solid var(--line);
      border-radius: 10px;
    }}
    .block:target {{ border-color: var(--accent); }}
    .actions {{ position: absolute; top: 8px; right: 10px; }}
    .mdreview-btn {{
      border: 1px solid #335383;
      border-radius: 8px;
      padding: 3px 10px;
      font-size: 12px;
    }}
    .markdown-body pre {{ background: #0f1420; padding: 8px; overflow: auto; }}
    .markdown-body table {{ border-collapse: collapse; }}
    .markdown-body th, .markdown-body td {{ border: 1px solid var(--line); padding: 4px 8px; }}
  </style>
</head>
<body id="top">
  <div class="layout">
    <aside class="sidebar">
      <h1>{title}</h1>
      <p class="file-stats">Source: {source}<br>Files: {file_count} / Blocks: {block_count}</p>
      <ul>
{nav}
      </ul>
    </aside>
    <main class="main">
{sections}
    </main>
  </div>
</body>
</html>
""".format(
        page_title=escape(page_title),
        title=escape(page_title),
        source=escape(preview.source),
        file_count=len(preview.files),
        block_count=preview.block_count,
        nav=nav,
        sections=sections,
    )
