from __future__ import annotations

import argparse
import json
import logging
import sys
import webbrowser
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from .config import load_preview_config
from .diff_source import read_git_diff
from .html_preview import render_preview_html
from .preview import DiffPreview, build_diff_preview, build_file_preview, load_observations
from .render import RENDERER_NAMES, create_renderer
from .terminal_preview import render_preview

logger = logging.getLogger("mdreview")


def parse_preview_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Preview Markdown added in a diff as rendered blocks.")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--diff", help="Unified diff file to read ('-' for stdin).")
    source.add_argument("--observations", help="JSON list of raw line observations for a single file.")
    parser.add_argument("--repo", default=".", help="Path to git repository (default: current directory).")
    parser.add_argument("--base", default="main", help="Base ref when reading from git (default: main).")
    parser.add_argument("--head", default="HEAD", help="Head ref when reading from git (default: HEAD).")
    parser.add_argument("--path", default="observations.md", help="File name shown for --observations input.")
    parser.add_argument("--file", dest="file_contains", help="Only preview files whose path contains this text.")
    parser.add_argument("--renderer", choices=RENDERER_NAMES, help="Markdown renderer (default: markdown-it).")
    parser.add_argument("--config", help="TOML config file with a [preview] table.")
    parser.add_argument("--diff-url", help="Pull request files URL used for Comment links.")
    parser.add_argument("--title", help="Title of the HTML preview page.")
    parser.add_argument("--html", dest="html_output", help="Write an HTML preview page to this path.")
    parser.add_argument("--open", action="store_true", help="Open the generated HTML in your default browser.")
    parser.add_argument("--json", dest="as_json", action="store_true", help="Output blocks as JSON.")
    parser.add_argument("--verbose", action="store_true", help="Show debug logging.")
    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


def _read_diff_text(args: argparse.Namespace) -> tuple[str, str]:
    if args.diff == "-":
        return sys.stdin.read(), "stdin"
    if args.diff:
        path = Path(args.diff)
        try:
            return path.read_text(encoding="utf-8"), str(path)
        except FileNotFoundError as error:
            raise RuntimeError(f"File not found: {path}") from error
    repo = Path(args.repo).resolve()
    return read_git_diff(repo, args.base, args.head), f"{args.base}...{args.head}"


def build_preview_from_args(args: argparse.Namespace) -> tuple[DiffPreview, str | None, str | None]:
    config = load_preview_config(Path(args.config) if args.config else None).with_overrides(
        renderer=args.renderer,
        diff_url=args.diff_url,
        title=args.title,
    )
    renderer = create_renderer(config.renderer, config.markdown_extensions)
    logger.debug("using renderer %s", config.renderer)

    if args.observations:
        observations = load_observations(Path(args.observations))
        item = build_file_preview(args.path, observations, renderer)
        return DiffPreview(source=str(args.observations), files=(item,)), config.title, config.diff_url

    diff_text, source = _read_diff_text(args)
    preview = build_diff_preview(diff_text, renderer, path_filter=args.file_contains, source=source)
    return preview, config.title, config.diff_url


def run_preview(argv: list[str]) -> int:
    args = parse_preview_args(argv)
    configure_logging(args.verbose)
    console = Console()
    try:
        preview, title, diff_url = build_preview_from_args(args)
        if args.html_output:
            output_path = Path(args.html_output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(render_preview_html(preview, title=title, diff_url=diff_url), encoding="utf-8")

        if args.as_json:
            print(json.dumps(preview.to_dict(), ensure_ascii=False, indent=2))
        elif args.html_output:
            print(f"Wrote: {args.html_output}")
            print(f"Blocks: {preview.block_count}")
        else:
            render_preview(console, preview)
    except Exception as error:  # noqa: BLE001
        print(f"[error] {error}", file=sys.stderr)
        return 1

    if args.html_output and args.open:
        webbrowser.open(Path(args.html_output).resolve().as_uri())

    if preview.is_empty:
        print("[error] Nothing to preview.", file=sys.stderr)
        return 2
    return 0


def main() -> int:
    return run_preview(sys.argv[1:])
